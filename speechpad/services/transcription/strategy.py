"""
Submission strategies: how the backend hands an uploaded clip to the provider.

Both strategies honour the same contract, ``submit(asset, language) ->
TranscriptionResult``, so the API route does not know which one is
configured.

* ``DirectSubmission`` buffers the clip on local disk, then sends the raw
  bytes to the provider.
* ``ObjectStoreSubmission`` uploads the clip to an object store first and
  asks the provider to transcribe from the store's public URL.
"""

import logging
from abc import ABC, abstractmethod

from speechpad.core.models import AudioAsset, TranscriptionResult
from speechpad.services.storage.object_store import BaseObjectStore
from speechpad.services.transcription.base import BaseTranscriptionProvider

logger = logging.getLogger(__name__)


class SubmissionStrategy(ABC):
    """Submit an AudioAsset for transcription and return the final result."""

    def __init__(self, provider: BaseTranscriptionProvider, store: BaseObjectStore) -> None:
        self._provider = provider
        self._store = store

    @abstractmethod
    async def submit(self, asset: AudioAsset, language: str | None = None) -> TranscriptionResult:
        """Transcribe ``asset``.

        Raises:
            TranscriptionFailedError: Or a subclass; a failed upload is never
                followed by a provider call.
        """


class DirectSubmission(SubmissionStrategy):
    """Disk-buffered upload, raw bytes submitted to the provider."""

    async def submit(self, asset: AudioAsset, language: str | None = None) -> TranscriptionResult:
        data = asset.read()
        stored = await self._store.put(data, asset.filename, asset.mime_type)
        logger.info("Transcribing %s (%d bytes) directly", stored.key, len(data))
        transcript = await self._provider.transcribe_bytes(data, language=language)
        return TranscriptionResult(
            text=transcript.text,
            audio_id=stored.key,
            audio_url=stored.url,
            transcript_id=transcript.id,
        )


class ObjectStoreSubmission(SubmissionStrategy):
    """Object-store upload, public URL submitted to the provider."""

    async def submit(self, asset: AudioAsset, language: str | None = None) -> TranscriptionResult:
        stored = await self._store.put(asset.read(), asset.filename, asset.mime_type)
        logger.info("Transcribing %s from %s", stored.key, stored.url)
        transcript = await self._provider.transcribe_url(stored.url, language=language)
        return TranscriptionResult(
            text=transcript.text,
            audio_id=stored.key,
            audio_url=stored.url,
            transcript_id=transcript.id,
        )
