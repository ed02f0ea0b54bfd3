"""
SQLAlchemy ORM models for the SpeechPad row store.

Tables: ``transcriptions``.
"""

from datetime import UTC, datetime

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from speechpad.services.storage.database import Base


class Transcription(Base):
    """A saved, possibly user-edited transcript."""

    __tablename__ = "transcriptions"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    text: Mapped[str] = mapped_column(Text)
    filename: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        default=lambda: datetime.now(UTC), index=True
    )

    def __repr__(self) -> str:
        return f"<Transcription id={self.id} filename={self.filename!r}>"
