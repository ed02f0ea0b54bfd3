"""
Abstract base class for speech-to-text providers.

A provider accepts either raw audio bytes or a retrievable URL and
returns the final transcript once the remote job has reached a terminal
state. Submission strategies are written against this interface only.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class ProviderTranscript:
    """Terminal result of a provider transcription job."""

    id: str
    text: str
    status: str = "completed"


class BaseTranscriptionProvider(ABC):
    """Interface that every transcription provider must implement."""

    @abstractmethod
    async def transcribe_bytes(
        self, data: bytes, language: str | None = None
    ) -> ProviderTranscript:
        """Transcribe raw audio bytes.

        Args:
            data: Complete audio file contents.
            language: ISO 639-1 hint, or None to let the provider detect.

        Raises:
            TranscriptionFailedError: Or one of its subclasses on failure.
        """

    @abstractmethod
    async def transcribe_url(
        self, audio_url: str, language: str | None = None
    ) -> ProviderTranscript:
        """Transcribe audio the provider can fetch from ``audio_url``."""
