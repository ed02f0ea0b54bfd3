"""
Async HTTP clients for the SpeechPad backend API.

``TranscriptionClient`` posts encoded audio to ``/api/transcribe``;
``PersistenceClient`` posts transcript text to ``/api/save``. Each call
opens its own ``httpx.AsyncClient`` so the clients can be reused across
event loops (Streamlit runs every coroutine with ``asyncio.run``).
No call is ever retried automatically.
"""

import logging

import httpx
from pydantic import ValidationError as PydanticValidationError

from speechpad.core.config import get_settings
from speechpad.core.exceptions import (
    EmptyTextError,
    PersistenceFailedError,
    ProviderRejectedError,
    ProviderTimeoutError,
    TranscriptionFailedError,
)
from speechpad.core.models import SaveAck, TranscriptionResult
from speechpad.services.audio.encoder import TransportPayload

logger = logging.getLogger(__name__)


class APIError(Exception):
    """User-friendly API error with categorized message.

    Categories: "connection", "timeout", "http", "network", "unknown".
    """

    def __init__(self, message: str, category: str = "unknown", status_code: int | None = None) -> None:
        self.message = message
        self.category = category
        self.status_code = status_code
        super().__init__(message)


def _error_detail(resp: httpx.Response) -> str:
    """Pull ``error`` out of an error envelope, else fall back to the raw body."""
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return resp.text or f"HTTP {resp.status_code}"


class BackendClient:
    """Thin async wrapper around httpx for calling the FastAPI backend.

    Args:
        base_url: Backend root URL (falls back to settings).
        timeout: Per-request timeout in seconds (falls back to settings).
        transport: Optional httpx transport (``httpx.MockTransport`` in tests).
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        settings = get_settings()
        self._base_url = (base_url or settings.backend_base_url).rstrip("/")
        self._timeout = settings.request_timeout if timeout is None else timeout
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self._base_url

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        """Execute an HTTP request with user-friendly error handling.

        Raises:
            APIError: On connection, timeout, HTTP status, or network errors.
        """
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url, timeout=self._timeout, transport=self._transport
            ) as client:
                resp = await client.request(method, path, **kwargs)
                resp.raise_for_status()
                return resp
        except httpx.ConnectError:
            raise APIError(
                "Backend server is not running. "
                "Start it with: `uvicorn speechpad.api.app:app --port 8000`",
                category="connection",
            ) from None
        except httpx.TimeoutException:
            raise APIError(
                "Request timed out. The server may be overloaded.",
                category="timeout",
            ) from None
        except httpx.HTTPStatusError as exc:
            raise APIError(
                _error_detail(exc.response),
                category="http",
                status_code=exc.response.status_code,
            ) from None
        except httpx.InvalidURL as exc:
            raise APIError(f"Invalid backend URL: {exc}", category="connection") from None
        except httpx.HTTPError as exc:
            raise APIError(f"Network error: {exc}", category="network") from None

    async def check_connection(self) -> tuple[bool, str]:
        """Check if the backend is reachable. Returns (ok, message)."""
        try:
            await self._request("GET", "/")
            return True, "Connected"
        except APIError as exc:
            return False, exc.message


class TranscriptionClient(BackendClient):
    """Submits encoded audio and returns the provider's transcript."""

    async def transcribe(
        self, payload: TransportPayload, language: str | None = None
    ) -> TranscriptionResult:
        """POST the payload to ``/api/transcribe`` and await the result.

        Raises:
            ProviderRejectedError: Non-2xx status or malformed response body.
            ProviderTimeoutError: No response within the request timeout.
            TranscriptionFailedError: Connection or other transport failure.
        """
        try:
            resp = await self._request("POST", "/api/transcribe", **payload.to_request(language))
        except APIError as exc:
            logger.warning("Transcription request failed (%s): %s", exc.category, exc.message)
            if exc.category == "timeout":
                raise ProviderTimeoutError(exc.message) from exc
            if exc.category == "http":
                raise ProviderRejectedError(exc.message) from exc
            raise TranscriptionFailedError(exc.message) from exc

        try:
            return TranscriptionResult.model_validate(resp.json())
        except (ValueError, PydanticValidationError) as exc:
            raise ProviderRejectedError("Malformed transcription response") from exc


class PersistenceClient(BackendClient):
    """Stores final transcript text in the backend's row store."""

    async def save(self, text: str | None, filename: str) -> SaveAck:
        """POST ``{text, filename}`` to ``/api/save``.

        Raises:
            EmptyTextError: If ``text`` is empty; no request is made.
            PersistenceFailedError: If the backend reports a failure.
        """
        if not text:
            raise EmptyTextError()
        try:
            resp = await self._request(
                "POST", "/api/save", json={"text": text, "filename": filename}
            )
        except APIError as exc:
            logger.warning("Save request failed (%s): %s", exc.category, exc.message)
            raise PersistenceFailedError(exc.message) from exc

        try:
            return SaveAck.model_validate(resp.json())
        except (ValueError, PydanticValidationError) as exc:
            raise PersistenceFailedError("Malformed save response") from exc
