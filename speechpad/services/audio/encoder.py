"""Transport encodings for AudioAsset submission.

Two strategies, selected by the backend contract:

* base64: the full payload base64-encoded inside a JSON envelope
  ``{"audio": ..., "filename": ...}``;
* multipart: the raw bytes streamed as the ``audio`` form field.

Both are lossless: ``decode(encode(asset)) == asset.read()``.
"""

import base64
import binascii
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from speechpad.core.exceptions import ValidationError
from speechpad.core.models import AudioAsset

AUDIO_FIELD = "audio"


@dataclass(frozen=True)
class Base64Payload:
    """JSON envelope carrying base64 audio."""

    audio: str = field(repr=False)
    filename: str
    mime_type: str

    def to_request(self, language: str | None = None) -> dict:
        """Keyword arguments for ``httpx.AsyncClient.request``."""
        body = {AUDIO_FIELD: self.audio, "filename": self.filename}
        if language:
            body["language"] = language
        return {"json": body}


@dataclass(frozen=True)
class MultipartPayload:
    """Raw bytes sent as a named multipart form field."""

    data: bytes = field(repr=False)
    filename: str
    mime_type: str

    def to_request(self, language: str | None = None) -> dict:
        request: dict = {"files": {AUDIO_FIELD: (self.filename, self.data, self.mime_type)}}
        if language:
            request["data"] = {"language": language}
        return request


TransportPayload = Base64Payload | MultipartPayload


class BaseEncoder(ABC):
    """Turns an AudioAsset into a TransportPayload."""

    name: str

    @abstractmethod
    def encode(self, asset: AudioAsset) -> TransportPayload:
        """Encode ``asset``.

        Raises:
            AssetUnreadableError: If the asset's bytes cannot be obtained.
        """


class Base64Encoder(BaseEncoder):
    name = "base64"

    def encode(self, asset: AudioAsset) -> Base64Payload:
        return Base64Payload(
            audio=base64.b64encode(asset.read()).decode("ascii"),
            filename=asset.filename,
            mime_type=asset.mime_type,
        )


class MultipartEncoder(BaseEncoder):
    name = "multipart"

    def encode(self, asset: AudioAsset) -> MultipartPayload:
        return MultipartPayload(
            data=asset.read(), filename=asset.filename, mime_type=asset.mime_type
        )


def decode_base64(text: str) -> bytes:
    """Decode a base64 audio string, tolerating a ``data:...;base64,`` prefix.

    Raises:
        ValidationError: If ``text`` is not valid base64.
    """
    if text.startswith("data:") and "," in text:
        text = text.split(",", 1)[1]
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValidationError("Audio is not valid base64", code="INVALID_AUDIO") from exc


def decode(payload: TransportPayload) -> bytes:
    """Recover the original bytes from a TransportPayload."""
    if isinstance(payload, Base64Payload):
        return decode_base64(payload.audio)
    return payload.data


_ENCODERS: dict[str, type[BaseEncoder]] = {
    Base64Encoder.name: Base64Encoder,
    MultipartEncoder.name: MultipartEncoder,
}


def create_encoder(transport: str) -> BaseEncoder:
    """Return the encoder for ``transport`` ("base64" or "multipart").

    Raises:
        ValueError: If transport is unknown
    """
    try:
        return _ENCODERS[transport]()
    except KeyError:
        raise ValueError(f"Unknown transport: {transport}") from None
