"""
Object stores holding uploaded audio under generated per-upload keys.

``LocalDiskStore`` buffers uploads on disk for the direct submission
strategy; ``SupabaseStore`` puts them in a Supabase Storage bucket and
returns a public URL the transcription provider can fetch.
"""

import asyncio
import logging
import random
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import quote

import httpx

from speechpad.core.config import get_settings
from speechpad.core.exceptions import ConfigurationError, UploadFailedError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredObject:
    """Location of an uploaded clip."""

    key: str
    url: str


def generate_key(filename: str) -> str:
    """Return a unique ``<epoch-ms>-<random>.<ext>`` key for an upload."""
    suffix = Path(filename).suffix.lower()
    return f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}{suffix}"


class BaseObjectStore(ABC):
    """Interface that every object store must implement."""

    @abstractmethod
    async def put(self, data: bytes, filename: str, content_type: str) -> StoredObject:
        """Store ``data`` under a freshly generated key.

        Raises:
            UploadFailedError: If the store rejects or only partially writes the bytes.
        """


class LocalDiskStore(BaseObjectStore):
    """Stores uploads as files under a root directory.

    Bytes are written to a ``.part`` file first and renamed once complete,
    so a partially written upload never appears under its final name.
    """

    def __init__(self, root: str | Path | None = None) -> None:
        self._root = Path(root or get_settings().uploads_dir)

    def _write(self, key: str, data: bytes) -> Path:
        self._root.mkdir(parents=True, exist_ok=True)
        final = self._root / key
        partial = final.with_name(final.name + ".part")
        try:
            partial.write_bytes(data)
            partial.replace(final)
        except OSError:
            partial.unlink(missing_ok=True)
            raise
        return final

    async def put(self, data: bytes, filename: str, content_type: str) -> StoredObject:
        key = generate_key(filename)
        try:
            path = await asyncio.to_thread(self._write, key, data)
        except OSError as exc:
            raise UploadFailedError(f"Could not buffer upload to disk: {exc}") from exc
        logger.debug("Buffered %d bytes to %s", len(data), path)
        return StoredObject(key=key, url=str(path))


class SupabaseStore(BaseObjectStore):
    """Supabase Storage bucket accessed through its REST API.

    Args:
        url: Project URL, e.g. ``https://xyz.supabase.co``.
        service_key: Service-role key used as bearer token.
        bucket: Bucket name; must be public for the provider to fetch the URL.
        prefix: Key prefix inside the bucket.
        transport: Optional httpx transport (tests).
    """

    def __init__(
        self,
        url: str | None = None,
        service_key: str | None = None,
        bucket: str | None = None,
        prefix: str = "recordings",
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        settings = get_settings()
        self._url = (url or settings.supabase_url).rstrip("/")
        self._service_key = service_key or settings.supabase_service_key
        self._bucket = bucket or settings.supabase_bucket
        self._prefix = prefix.strip("/")
        self._timeout = timeout
        self._transport = transport
        if not self._url:
            raise ConfigurationError("SPEECHPAD_SUPABASE_URL")
        if not self._service_key:
            raise ConfigurationError("SPEECHPAD_SUPABASE_SERVICE_KEY")

    def public_url(self, key: str) -> str:
        return f"{self._url}/storage/v1/object/public/{self._bucket}/{quote(key)}"

    async def put(self, data: bytes, filename: str, content_type: str) -> StoredObject:
        key = f"{self._prefix}/{generate_key(filename)}" if self._prefix else generate_key(filename)
        headers = {
            "Authorization": f"Bearer {self._service_key}",
            "apikey": self._service_key,
            "Content-Type": content_type,
            "x-upsert": "false",
        }
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                resp = await client.post(
                    f"{self._url}/storage/v1/object/{self._bucket}/{quote(key)}",
                    content=data,
                    headers=headers,
                )
        except httpx.HTTPError as exc:
            raise UploadFailedError(f"Storage upload failed: {exc}") from exc

        if resp.status_code >= 400:
            logger.warning("Storage rejected upload %s: %s %s", key, resp.status_code, resp.text)
            raise UploadFailedError(f"Storage rejected upload ({resp.status_code})")

        logger.info("Uploaded %d bytes to bucket %s as %s", len(data), self._bucket, key)
        return StoredObject(key=key, url=self.public_url(key))
