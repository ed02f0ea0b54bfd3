"""
Transcript persistence endpoint.

``POST /api/save`` writes the (possibly edited) transcript text to the
row store. Empty text is rejected before touching the database.
"""

import logging

from fastapi import APIRouter
from sqlalchemy.exc import SQLAlchemyError

from speechpad.core.exceptions import EmptyTextError, PersistenceFailedError
from speechpad.core.models import SaveAck, SaveRequest, TranscriptionRecord
from speechpad.services.storage.database import get_session
from speechpad.services.storage.repository import TranscriptionRepository

logger = logging.getLogger(__name__)

router = APIRouter(tags=["transcriptions"])

DEFAULT_FILENAME = "transcription.txt"


@router.post("/save", response_model=SaveAck)
async def save_transcription(body: SaveRequest) -> SaveAck:
    """Persist transcript text with its source filename."""
    if not body.text:
        raise EmptyTextError()

    try:
        async with get_session() as session:
            repo = TranscriptionRepository(session)
            row = await repo.create(text=body.text, filename=body.filename or DEFAULT_FILENAME)
            record = TranscriptionRecord.model_validate(row)
    except SQLAlchemyError as exc:
        logger.exception("Error saving transcription")
        raise PersistenceFailedError() from exc

    return SaveAck(success=True, data=[record])
