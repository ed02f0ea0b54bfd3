"""
Domain value objects and Pydantic v2 request / response models.

``AudioAsset`` is the immutable audio payload shared by the client and
the backend; the Pydantic models define the JSON contract of the
``/api/transcribe`` and ``/api/save`` endpoints.
"""

import mimetypes
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from speechpad.core.exceptions import AssetUnreadableError

DEFAULT_MIME_TYPE = "application/octet-stream"

# ---------------------------------------------------------------------------
# Audio
# ---------------------------------------------------------------------------


class SourceKind(StrEnum):
    """Where an AudioAsset came from."""

    uploaded = "uploaded"
    recorded = "recorded"


@dataclass(frozen=True)
class AudioAsset:
    """A finalized audio clip: payload, MIME type, filename and source tag.

    The payload is either held in memory (``data``) or referenced on disk
    (``path``) and read on demand. Instances are never mutated; a new
    selection or recording replaces the asset.
    """

    filename: str
    mime_type: str
    source: SourceKind = SourceKind.uploaded
    data: bytes | None = field(default=None, repr=False)
    path: str | None = None

    def __post_init__(self) -> None:
        if self.data is None and self.path is None:
            raise ValueError("AudioAsset needs either data or a path")

    @classmethod
    def from_bytes(
        cls,
        data: bytes,
        filename: str,
        mime_type: str | None = None,
        source: SourceKind = SourceKind.uploaded,
    ) -> "AudioAsset":
        return cls(
            filename=filename,
            mime_type=mime_type or guess_mime_type(filename),
            source=source,
            data=bytes(data),
        )

    @classmethod
    def from_path(cls, path: str | Path, mime_type: str | None = None) -> "AudioAsset":
        path = Path(path)
        return cls(
            filename=path.name,
            mime_type=mime_type or guess_mime_type(path.name),
            source=SourceKind.uploaded,
            path=str(path),
        )

    def read(self) -> bytes:
        """Return the full byte payload.

        Raises:
            AssetUnreadableError: If the backing file cannot be read.
        """
        if self.data is not None:
            return self.data
        try:
            return Path(self.path).read_bytes()
        except OSError as exc:
            raise AssetUnreadableError(f"Audio file could not be read: {self.path}") from exc


def guess_mime_type(filename: str) -> str:
    """Guess an audio MIME type from a filename extension."""
    mime_type, _ = mimetypes.guess_type(filename)
    return mime_type or DEFAULT_MIME_TYPE


# ---------------------------------------------------------------------------
# System
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    """GET /health response."""

    status: str = "ok"
    version: str = "0.1.0"
    timestamp: datetime


class BannerResponse(BaseModel):
    """Liveness banner for GET / and GET /api/transcribe."""

    message: str


class ErrorResponse(BaseModel):
    """Error envelope returned for every handled failure."""

    error: str
    code: str = "SPEECHPAD_ERROR"
    timestamp: str | None = None


# ---------------------------------------------------------------------------
# Transcription
# ---------------------------------------------------------------------------


class TranscribeRequest(BaseModel):
    """JSON body of POST /api/transcribe (base64 transport)."""

    audio: str = ""
    filename: str = "audio"
    language: str | None = None


class TranscriptionResult(BaseModel):
    """Transcript text plus provider-assigned identifiers.

    Serialized with camelCase keys (``audioUrl``, ``audioId``,
    ``transcriptId``) to match the HTTP contract.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    text: str
    audio_url: str | None = Field(default=None, alias="audioUrl")
    audio_id: str | None = Field(default=None, alias="audioId")
    transcript_id: str | None = Field(default=None, alias="transcriptId")


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------


class SaveRequest(BaseModel):
    """POST /api/save request body."""

    text: str | None = None
    filename: str | None = None


class TranscriptionRecord(BaseModel):
    """A stored transcript row."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    text: str
    filename: str | None = None
    created_at: datetime


class SaveAck(BaseModel):
    """POST /api/save success response."""

    success: bool = True
    data: list[TranscriptionRecord] = Field(default_factory=list)
