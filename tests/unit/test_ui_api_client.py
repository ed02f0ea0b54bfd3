"""Unit tests for the backend HTTP clients.

Validates that TranscriptionClient and PersistenceClient call the right
endpoints with the right bodies, and that transport and HTTP failures
surface as the matching SpeechPad errors.
"""

import json

import httpx
import pytest

from speechpad.core.exceptions import (
    EmptyTextError,
    PersistenceFailedError,
    ProviderRejectedError,
    ProviderTimeoutError,
    TranscriptionFailedError,
)
from speechpad.core.models import AudioAsset
from speechpad.services.audio.encoder import Base64Encoder, MultipartEncoder, decode_base64
from speechpad.ui.api_client import BackendClient, PersistenceClient, TranscriptionClient

BASE_URL = "http://test:8000"


def _transport(handler):
    """Wrap ``handler`` and record every request it sees."""
    seen: list[httpx.Request] = []

    def _handle(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    transport = httpx.MockTransport(_handle)
    transport.seen = seen
    return transport


@pytest.fixture
def asset():
    return AudioAsset.from_bytes(b"RIFF....WAVEfmt ", filename="sample.wav", mime_type="audio/wav")


# ---------------------------------------------------------------------------
# Connection check
# ---------------------------------------------------------------------------


class TestCheckConnection:
    async def test_connected(self):
        transport = _transport(lambda r: httpx.Response(200, json={"message": "ok"}))
        ok, msg = await BackendClient(BASE_URL, transport=transport).check_connection()
        assert ok
        assert msg == "Connected"

    async def test_backend_down(self):
        def refuse(request):
            raise httpx.ConnectError("refused", request=request)

        ok, msg = await BackendClient(BASE_URL, transport=_transport(refuse)).check_connection()
        assert not ok
        assert "not running" in msg


# ---------------------------------------------------------------------------
# Transcription
# ---------------------------------------------------------------------------


class TestTranscriptionClient:
    async def test_base64_body(self, asset):
        transport = _transport(
            lambda r: httpx.Response(
                200,
                json={"text": "hello world", "audioId": "k1", "transcriptId": "t1"},
            )
        )
        client = TranscriptionClient(BASE_URL, transport=transport)

        result = await client.transcribe(Base64Encoder().encode(asset), language="en")

        request = transport.seen[0]
        assert request.method == "POST"
        assert request.url.path == "/api/transcribe"
        body = json.loads(request.content)
        assert body["filename"] == "sample.wav"
        assert body["language"] == "en"
        assert decode_base64(body["audio"]) == asset.read()
        assert result.text == "hello world"
        assert result.audio_id == "k1"
        assert result.transcript_id == "t1"

    async def test_multipart_body(self, asset):
        transport = _transport(lambda r: httpx.Response(200, json={"text": "hi"}))
        client = TranscriptionClient(BASE_URL, transport=transport)

        await client.transcribe(MultipartEncoder().encode(asset))

        request = transport.seen[0]
        assert request.headers["content-type"].startswith("multipart/form-data")
        content = request.read()
        assert b'name="audio"; filename="sample.wav"' in content
        assert asset.read() in content

    async def test_http_error_is_rejected(self, asset):
        transport = _transport(
            lambda r: httpx.Response(
                500, json={"error": "Failed to transcribe audio", "code": "TRANSCRIPTION_FAILED"}
            )
        )
        client = TranscriptionClient(BASE_URL, transport=transport)
        with pytest.raises(ProviderRejectedError, match="Failed to transcribe audio"):
            await client.transcribe(Base64Encoder().encode(asset))

    async def test_http_error_with_list_body(self, asset):
        transport = _transport(lambda r: httpx.Response(502, json=["bad gateway"]))
        client = TranscriptionClient(BASE_URL, transport=transport)
        with pytest.raises(ProviderRejectedError, match="bad gateway"):
            await client.transcribe(Base64Encoder().encode(asset))

    async def test_http_error_with_html_body(self, asset):
        transport = _transport(lambda r: httpx.Response(502, text="<html>Bad Gateway</html>"))
        client = TranscriptionClient(BASE_URL, transport=transport)
        with pytest.raises(ProviderRejectedError, match="Bad Gateway"):
            await client.transcribe(Base64Encoder().encode(asset))

    async def test_invalid_base_url(self, asset):
        client = TranscriptionClient("http://te\x07st:8000")
        with pytest.raises(TranscriptionFailedError) as exc_info:
            await client.transcribe(Base64Encoder().encode(asset))
        assert exc_info.value.code == "TRANSCRIPTION_FAILED"

    async def test_timeout(self, asset):
        def slow(request):
            raise httpx.ReadTimeout("timed out", request=request)

        client = TranscriptionClient(BASE_URL, transport=_transport(slow))
        with pytest.raises(ProviderTimeoutError):
            await client.transcribe(Base64Encoder().encode(asset))

    async def test_connection_error(self, asset):
        def refuse(request):
            raise httpx.ConnectError("refused", request=request)

        client = TranscriptionClient(BASE_URL, transport=_transport(refuse))
        with pytest.raises(TranscriptionFailedError) as exc_info:
            await client.transcribe(Base64Encoder().encode(asset))
        assert exc_info.value.code == "TRANSCRIPTION_FAILED"

    async def test_malformed_body(self, asset):
        transport = _transport(lambda r: httpx.Response(200, json={"unexpected": True}))
        client = TranscriptionClient(BASE_URL, transport=transport)
        with pytest.raises(ProviderRejectedError):
            await client.transcribe(Base64Encoder().encode(asset))


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------


class TestPersistenceClient:
    async def test_save(self):
        transport = _transport(
            lambda r: httpx.Response(
                200,
                json={
                    "success": True,
                    "data": [
                        {
                            "id": 7,
                            "text": "hello",
                            "filename": "sample.wav",
                            "created_at": "2026-01-01T00:00:00Z",
                        }
                    ],
                },
            )
        )
        client = PersistenceClient(BASE_URL, transport=transport)

        ack = await client.save("hello", "sample.wav")

        request = transport.seen[0]
        assert request.url.path == "/api/save"
        assert json.loads(request.content) == {"text": "hello", "filename": "sample.wav"}
        assert ack.success
        assert ack.data[0].id == 7

    async def test_empty_text_makes_no_request(self):
        transport = _transport(lambda r: httpx.Response(200, json={}))
        client = PersistenceClient(BASE_URL, transport=transport)
        with pytest.raises(EmptyTextError):
            await client.save("", "sample.wav")
        assert transport.seen == []

    async def test_backend_failure(self):
        transport = _transport(
            lambda r: httpx.Response(
                500, json={"error": "Failed to save transcription", "code": "PERSISTENCE_FAILED"}
            )
        )
        client = PersistenceClient(BASE_URL, transport=transport)
        with pytest.raises(PersistenceFailedError) as exc_info:
            await client.save("hello", "sample.wav")
        assert exc_info.value.code == "PERSISTENCE_FAILED"
