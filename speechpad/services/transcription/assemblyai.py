"""
AssemblyAI provider implementation over its REST API.

AssemblyAI is job-based: audio is uploaded (or referenced by URL), a
transcript job is created, and the job is polled until it reaches a
terminal status. Polling uses ``tenacity.AsyncRetrying`` with a fixed
interval and a bounded total wait; failed calls are never retried.
"""

import logging

import httpx
from tenacity import AsyncRetrying, RetryError, retry_if_result, stop_after_delay, wait_fixed

from speechpad.core.config import get_settings
from speechpad.core.exceptions import (
    ConfigurationError,
    ProviderRejectedError,
    ProviderTimeoutError,
    UploadFailedError,
)
from speechpad.services.transcription.base import BaseTranscriptionProvider, ProviderTranscript

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = frozenset({"completed", "error"})


def _json_object(resp: httpx.Response) -> dict | None:
    """Decode a JSON object body; None for anything else (HTML, lists, empty)."""
    try:
        body = resp.json()
    except ValueError:
        return None
    return body if isinstance(body, dict) else None


def _error_message(resp: httpx.Response) -> str:
    body = _json_object(resp) or {}
    return body.get("error") or resp.text or f"HTTP {resp.status_code}"


class AssemblyAIProvider(BaseTranscriptionProvider):
    """Transcription through AssemblyAI's ``/v2`` endpoints.

    Args:
        api_key: AssemblyAI API key (falls back to settings).
        base_url: API root (falls back to settings).
        poll_interval: Seconds between job status checks.
        timeout: Maximum seconds to wait for a terminal job status.
        transport: Optional httpx transport (tests).
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        poll_interval: float | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        settings = get_settings()
        self._api_key = api_key or settings.assemblyai_api_key
        self._base_url = (base_url or settings.assemblyai_base_url).rstrip("/")
        self._poll_interval = settings.poll_interval if poll_interval is None else poll_interval
        self._timeout = settings.transcription_timeout if timeout is None else timeout
        self._transport = transport
        if not self._api_key:
            raise ConfigurationError("SPEECHPAD_ASSEMBLYAI_API_KEY")

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            headers={"authorization": self._api_key},
            timeout=60.0,
            transport=self._transport,
        )

    async def _upload(self, client: httpx.AsyncClient, data: bytes) -> str:
        """Upload raw bytes and return the provider-internal ``upload_url``."""
        try:
            resp = await client.post(
                "/v2/upload",
                content=data,
                headers={"content-type": "application/octet-stream"},
            )
        except httpx.HTTPError as exc:
            raise UploadFailedError(f"AssemblyAI upload failed: {exc}") from exc
        if resp.status_code >= 400:
            raise UploadFailedError(f"AssemblyAI upload rejected: {_error_message(resp)}")
        body = _json_object(resp)
        if body is None:
            raise UploadFailedError("AssemblyAI upload returned an unreadable response")
        upload_url = body.get("upload_url")
        if not upload_url:
            raise UploadFailedError("AssemblyAI upload returned no upload_url")
        return upload_url

    async def _create_job(
        self, client: httpx.AsyncClient, audio_url: str, language: str | None
    ) -> str:
        body: dict = {"audio_url": audio_url}
        if language:
            body["language_code"] = language
        else:
            body["language_detection"] = True
        job = await self._call(client, "post", "/v2/transcript", json=body)
        job_id = job.get("id")
        if not job_id:
            raise ProviderRejectedError("AssemblyAI returned no transcript id")
        logger.info("Created AssemblyAI transcript job %s", job_id)
        return job_id

    async def _fetch_job(self, client: httpx.AsyncClient, job_id: str) -> dict:
        return await self._call(client, "get", f"/v2/transcript/{job_id}")

    async def _call(
        self, client: httpx.AsyncClient, method: str, path: str, **kwargs
    ) -> dict:
        """Issue one API call and return its JSON object body.

        Transport failures, error statuses and unreadable bodies all become
        provider errors.
        """
        try:
            resp = await getattr(client, method)(path, **kwargs)
        except httpx.TimeoutException as exc:
            raise ProviderTimeoutError(f"AssemblyAI request timed out: {exc}") from exc
        except httpx.HTTPError as exc:
            raise ProviderRejectedError(f"AssemblyAI request failed: {exc}") from exc
        if resp.status_code >= 400:
            raise ProviderRejectedError(
                f"AssemblyAI returned {resp.status_code}: {_error_message(resp)}"
            )
        body = _json_object(resp)
        if body is None:
            raise ProviderRejectedError(f"AssemblyAI returned an unreadable response for {path}")
        return body

    async def _wait_for_job(self, client: httpx.AsyncClient, job_id: str) -> dict:
        """Poll a job until it is ``completed`` or ``error``.

        Raises:
            ProviderTimeoutError: If no terminal status arrives within the timeout.
        """
        retrying = AsyncRetrying(
            retry=retry_if_result(lambda body: body.get("status") not in TERMINAL_STATUSES),
            stop=stop_after_delay(self._timeout),
            wait=wait_fixed(self._poll_interval),
        )
        try:
            return await retrying(self._fetch_job, client, job_id)
        except RetryError as exc:
            raise ProviderTimeoutError(
                f"Transcript {job_id} not finished after {self._timeout:.0f}s"
            ) from exc

    async def _transcribe(
        self, client: httpx.AsyncClient, audio_url: str, language: str | None
    ) -> ProviderTranscript:
        job_id = await self._create_job(client, audio_url, language)
        body = await self._wait_for_job(client, job_id)
        if body.get("status") == "error":
            raise ProviderRejectedError(f"AssemblyAI job failed: {body.get('error', 'unknown')}")
        return ProviderTranscript(id=job_id, text=body.get("text") or "", status=body["status"])

    async def transcribe_bytes(
        self, data: bytes, language: str | None = None
    ) -> ProviderTranscript:
        async with self._client() as client:
            upload_url = await self._upload(client, data)
            return await self._transcribe(client, upload_url, language)

    async def transcribe_url(
        self, audio_url: str, language: str | None = None
    ) -> ProviderTranscript:
        async with self._client() as client:
            return await self._transcribe(client, audio_url, language)
