"""
Transcription endpoints.

``POST /api/transcribe`` accepts either a multipart form with an ``audio``
file field or a JSON body ``{audio: <base64>, filename}``, hands the clip
to the configured submission strategy, and returns the transcript.
"""

import logging

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError as PydanticValidationError
from starlette.datastructures import UploadFile

from speechpad.core.config import get_settings
from speechpad.core.exceptions import (
    AudioTooLargeError,
    NoAudioError,
    TranscriptionFailedError,
)
from speechpad.core.models import (
    AudioAsset,
    BannerResponse,
    SourceKind,
    TranscribeRequest,
    TranscriptionResult,
    guess_mime_type,
)
from speechpad.services.audio.encoder import AUDIO_FIELD, decode_base64
from speechpad.services.transcription import SubmissionStrategy, create_strategy

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/transcribe", tags=["transcription"])


def get_strategy() -> SubmissionStrategy:
    """Dependency returning the configured submission strategy."""
    return create_strategy(get_settings())


async def _read_multipart(request: Request) -> tuple[AudioAsset, str | None]:
    form = await request.form()
    upload = form.get(AUDIO_FIELD)
    if not isinstance(upload, UploadFile):
        raise NoAudioError()
    data = await upload.read()
    if not data:
        raise NoAudioError()
    filename = upload.filename or "upload"
    asset = AudioAsset.from_bytes(
        data,
        filename=filename,
        mime_type=upload.content_type or guess_mime_type(filename),
        source=SourceKind.uploaded,
    )
    language = form.get("language")
    return asset, language if isinstance(language, str) and language else None


async def _read_json(request: Request) -> tuple[AudioAsset, str | None]:
    try:
        body = TranscribeRequest.model_validate(await request.json())
    except (ValueError, PydanticValidationError) as exc:
        raise NoAudioError("Request body must be JSON with a base64 'audio' field") from exc
    if not body.audio:
        raise NoAudioError()
    data = decode_base64(body.audio)
    if not data:
        raise NoAudioError()
    asset = AudioAsset.from_bytes(data, filename=body.filename, source=SourceKind.uploaded)
    return asset, body.language


async def read_audio(request: Request) -> tuple[AudioAsset, str | None]:
    """Parse the uploaded clip and optional language hint from either transport.

    Raises:
        NoAudioError: If no audio is present.
        ValidationError: If the base64 payload is invalid.
        AudioTooLargeError: If the clip exceeds ``max_upload_mb``.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("multipart/form-data"):
        asset, language = await _read_multipart(request)
    else:
        asset, language = await _read_json(request)

    limit = get_settings().max_upload_bytes
    size = len(asset.read())
    if size > limit:
        raise AudioTooLargeError(size, limit)
    return asset, language


@router.get("", response_model=BannerResponse)
async def transcribe_banner() -> BannerResponse:
    """Liveness banner for the transcription endpoint."""
    return BannerResponse(message="Transcription endpoint is ready. POST audio to transcribe.")


@router.post(
    "",
    response_model=TranscriptionResult,
    response_model_exclude_none=True,
    response_model_by_alias=True,
)
async def transcribe(
    upload: tuple[AudioAsset, str | None] = Depends(read_audio),
    strategy: SubmissionStrategy = Depends(get_strategy),
) -> TranscriptionResult:
    """Transcribe an uploaded or recorded clip.

    The clip is parsed and validated before the strategy is built, so a
    request without audio never reaches the provider.
    """
    asset, language = upload
    language = language or get_settings().default_language or None
    try:
        result = await strategy.submit(asset, language=language)
    except TranscriptionFailedError as exc:
        logger.error("Error transcribing %s: [%s] %s", asset.filename, exc.code, exc.detail)
        raise TranscriptionFailedError() from exc

    logger.info("Transcribed %s (%d chars)", asset.filename, len(result.text))
    return result
