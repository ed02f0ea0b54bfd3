"""
Data-access layer for saved transcripts.

``TranscriptionRepository`` receives an ``AsyncSession`` and calls
``flush()`` rather than ``commit()`` so that transaction boundaries are
controlled by the caller (typically :func:`get_session`).
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from speechpad.core.exceptions import EmptyTextError
from speechpad.services.storage.models_db import Transcription

logger = logging.getLogger(__name__)


class TranscriptionRepository:
    """CRUD operations on the ``transcriptions`` table.

    Args:
        session: An active SQLAlchemy ``AsyncSession``.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, text: str, filename: str | None = None) -> Transcription:
        """Insert a transcript row and return it with its generated id.

        Raises:
            EmptyTextError: If ``text`` is empty.
        """
        if not text:
            raise EmptyTextError()
        row = Transcription(text=text, filename=filename)
        self._session.add(row)
        await self._session.flush()
        logger.info("Saved transcription id=%s filename=%s", row.id, filename)
        return row

    async def get(self, transcription_id: int) -> Transcription | None:
        return await self._session.get(Transcription, transcription_id)
