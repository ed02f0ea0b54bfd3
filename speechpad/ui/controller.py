"""
Workflow controller: capture -> encode -> transcribe -> edit -> save.

``AppController`` owns the current ``AppState`` and advances it only
through ``reduce``. Every public method returns the resulting state and
never raises: failures end up in ``state.error`` / ``state.error_code``
with the loading flag cleared, so the UI always stays interactive.
"""

import logging

from speechpad.core.exceptions import (
    AssetUnreadableError,
    DeviceError,
    EmptyTextError,
    PersistenceFailedError,
    RecordingAlreadyActiveError,
    RecordingNotActiveError,
    TranscriptionFailedError,
)
from speechpad.core.models import AudioAsset, SourceKind
from speechpad.services.audio.capture import CaptureAdapter, CaptureHandle
from speechpad.services.audio.encoder import BaseEncoder
from speechpad.ui.api_client import PersistenceClient, TranscriptionClient
from speechpad.ui.state import (
    AppState,
    AudioSelected,
    DeviceFailed,
    Event,
    RecordingStarted,
    RecordingStopped,
    Reset,
    SaveCompleted,
    SaveErrored,
    SaveStarted,
    SourceStatus,
    TranscriptEdited,
    TranscriptionCompleted,
    TranscriptionErrored,
    TranscriptionSubmitted,
    ValidationFailed,
    reduce,
)

logger = logging.getLogger(__name__)

NO_AUDIO_MESSAGE = "Please select or record an audio file first"
NO_TEXT_MESSAGE = "No transcription to save"
TRANSCRIBE_FAILED_MESSAGE = "Failed to transcribe audio. Please try again."
SAVE_FAILED_MESSAGE = "Failed to save transcription. Please try again."
DEFAULT_SAVE_FILENAME = "transcription.txt"


class AppController:
    """Drives the transcription workflow for one user session.

    Args:
        transcription_client: Client for ``POST /api/transcribe``.
        persistence_client: Client for ``POST /api/save``.
        encoder: Transport encoding matching the backend contract.
        capture: Microphone capture adapter; None disables recording.
        language: Optional language hint sent with every submission.
    """

    def __init__(
        self,
        transcription_client: TranscriptionClient,
        persistence_client: PersistenceClient,
        encoder: BaseEncoder,
        capture: CaptureAdapter | None = None,
        language: str | None = None,
    ) -> None:
        self._transcription = transcription_client
        self._persistence = persistence_client
        self._encoder = encoder
        self._capture = capture
        self._handle: CaptureHandle | None = None
        self.language = language
        self._state = AppState()

    @property
    def state(self) -> AppState:
        return self._state

    def dispatch(self, event: Event) -> AppState:
        self._state = reduce(self._state, event)
        return self._state

    # -- audio source --

    def select_asset(self, asset: AudioAsset) -> AppState:
        """Make ``asset`` the current audio, replacing any previous one."""
        if self._state.source == SourceStatus.recording:
            return self.dispatch(
                ValidationFailed("Stop the recording before selecting a file", "RECORDING_ACTIVE")
            )
        return self.dispatch(AudioSelected(asset))

    def select_file(
        self,
        data: bytes,
        filename: str,
        mime_type: str | None = None,
        source: SourceKind = SourceKind.uploaded,
    ) -> AppState:
        return self.select_asset(
            AudioAsset.from_bytes(data, filename=filename, mime_type=mime_type, source=source)
        )

    async def start_recording(self) -> AppState:
        """Open the microphone and start a new recording session."""
        if self._capture is None:
            return self.dispatch(
                DeviceFailed("No audio input device available", "DEVICE_UNAVAILABLE")
            )
        try:
            self._handle = await self._capture.start_capture()
        except RecordingAlreadyActiveError as exc:
            return self.dispatch(ValidationFailed(exc.detail, exc.code))
        except DeviceError as exc:
            logger.error("Error accessing microphone: %s", exc.detail)
            return self.dispatch(DeviceFailed(exc.detail, exc.code))
        return self.dispatch(RecordingStarted())

    async def stop_recording(self) -> AppState:
        """Finish the active recording and select the resulting asset."""
        handle, self._handle = self._handle, None
        if self._capture is None or handle is None:
            return self.dispatch(ValidationFailed("No recording in progress", "RECORDING_NOT_ACTIVE"))
        try:
            asset = await self._capture.stop_capture(handle)
        except (RecordingNotActiveError, DeviceError) as exc:
            logger.error("Error finishing recording: %s", exc.detail)
            return self.dispatch(DeviceFailed(exc.detail, exc.code))
        except Exception as exc:
            # The adapter has already released the device at this point.
            logger.exception("Unexpected error finishing recording")
            return self.dispatch(DeviceFailed(f"Recording failed: {exc}", "DEVICE_ERROR"))
        return self.dispatch(RecordingStopped(asset))

    # -- transcription --

    async def transcribe(self) -> AppState:
        """Encode the current asset and submit it for transcription.

        Without an asset no request is made. If another submission is
        started before this one resolves, this one's outcome is discarded.
        """
        asset = self._state.asset
        if asset is None or self._state.source != SourceStatus.selected:
            return self.dispatch(ValidationFailed(NO_AUDIO_MESSAGE, "NO_AUDIO"))

        submission_id = self._state.submission_id + 1
        self.dispatch(TranscriptionSubmitted(submission_id))
        try:
            payload = self._encoder.encode(asset)
            result = await self._transcription.transcribe(payload, language=self.language)
        except AssetUnreadableError as exc:
            logger.error("Error reading %s: %s", asset.filename, exc.detail)
            return self.dispatch(TranscriptionErrored(submission_id, exc.detail, exc.code))
        except TranscriptionFailedError as exc:
            logger.error("Error transcribing audio: [%s] %s", exc.code, exc.detail)
            return self.dispatch(
                TranscriptionErrored(submission_id, TRANSCRIBE_FAILED_MESSAGE, exc.code)
            )
        except Exception:
            logger.exception("Unexpected error transcribing %s", asset.filename)
            return self.dispatch(
                TranscriptionErrored(
                    submission_id, TRANSCRIBE_FAILED_MESSAGE, "TRANSCRIPTION_FAILED"
                )
            )
        if submission_id != self._state.submission_id:
            logger.debug("Discarding stale transcription result %d", submission_id)
        return self.dispatch(TranscriptionCompleted(submission_id, result))

    def edit_transcript(self, text: str) -> AppState:
        return self.dispatch(TranscriptEdited(text))

    # -- persistence --

    async def save(self, filename: str | None = None) -> AppState:
        """Persist the current transcript text.

        With empty text no request is made. The filename defaults to the
        current asset's name.
        """
        text = self._state.transcript
        if not text:
            return self.dispatch(ValidationFailed(NO_TEXT_MESSAGE, "EMPTY_TEXT"))

        asset = self._state.asset
        filename = filename or (asset.filename if asset else None) or DEFAULT_SAVE_FILENAME
        self.dispatch(SaveStarted())
        try:
            ack = await self._persistence.save(text, filename)
        except EmptyTextError as exc:
            return self.dispatch(SaveErrored(NO_TEXT_MESSAGE, exc.code))
        except PersistenceFailedError as exc:
            logger.error("Error saving transcription: %s", exc.detail)
            return self.dispatch(SaveErrored(SAVE_FAILED_MESSAGE, exc.code))
        except Exception:
            logger.exception("Unexpected error saving transcription")
            return self.dispatch(SaveErrored(SAVE_FAILED_MESSAGE, "PERSISTENCE_FAILED"))
        return self.dispatch(SaveCompleted(ack))

    async def reset(self) -> AppState:
        """Return to the initial state, closing the microphone if it is open."""
        handle, self._handle = self._handle, None
        if handle is not None and self._capture is not None:
            try:
                await self._capture.stop_capture(handle)
            except Exception as exc:
                logger.warning("Recording discarded with error on reset: %s", exc)
        return self.dispatch(Reset())
