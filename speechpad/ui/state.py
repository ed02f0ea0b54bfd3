"""
Immutable client state and the reducer that advances it.

Three independent lifecycles live in one ``AppState``:

* audio source:   empty -> selected -> recording -> selected
* transcription:  idle -> submitting -> ready | failed
* save:           idle -> saving -> saved | failed

``reduce(state, event)`` is pure: it never mutates ``state`` and never
performs I/O. Transcription events carry the ``submission_id`` they
belong to; events for anything but the current submission are dropped,
so the last submission always wins.
"""

from dataclasses import dataclass, replace
from enum import StrEnum

from speechpad.core.models import AudioAsset, SaveAck, TranscriptionResult


class SourceStatus(StrEnum):
    empty = "empty"
    selected = "selected"
    recording = "recording"


class TranscriptionStatus(StrEnum):
    idle = "idle"
    submitting = "submitting"
    ready = "ready"
    failed = "failed"


class SaveStatus(StrEnum):
    idle = "idle"
    saving = "saving"
    saved = "saved"
    failed = "failed"


@dataclass(frozen=True)
class AppState:
    """Everything the UI renders."""

    source: SourceStatus = SourceStatus.empty
    asset: AudioAsset | None = None
    transcription: TranscriptionStatus = TranscriptionStatus.idle
    transcript: str = ""
    result: TranscriptionResult | None = None
    submission_id: int = 0
    save: SaveStatus = SaveStatus.idle
    last_save: SaveAck | None = None
    error: str = ""
    error_code: str = ""

    @property
    def loading(self) -> bool:
        return (
            self.transcription == TranscriptionStatus.submitting
            or self.save == SaveStatus.saving
        )

    @property
    def can_transcribe(self) -> bool:
        return self.asset is not None and self.source == SourceStatus.selected and not self.loading

    @property
    def can_save(self) -> bool:
        return bool(self.transcript) and not self.loading


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AudioSelected:
    asset: AudioAsset


@dataclass(frozen=True)
class RecordingStarted:
    pass


@dataclass(frozen=True)
class RecordingStopped:
    asset: AudioAsset


@dataclass(frozen=True)
class DeviceFailed:
    message: str
    code: str = "DEVICE_ERROR"


@dataclass(frozen=True)
class ValidationFailed:
    message: str
    code: str = "VALIDATION_ERROR"


@dataclass(frozen=True)
class TranscriptionSubmitted:
    submission_id: int


@dataclass(frozen=True)
class TranscriptionCompleted:
    submission_id: int
    result: TranscriptionResult


@dataclass(frozen=True)
class TranscriptionErrored:
    submission_id: int
    message: str
    code: str = "TRANSCRIPTION_FAILED"


@dataclass(frozen=True)
class TranscriptEdited:
    text: str


@dataclass(frozen=True)
class SaveStarted:
    pass


@dataclass(frozen=True)
class SaveCompleted:
    ack: SaveAck


@dataclass(frozen=True)
class SaveErrored:
    message: str
    code: str = "PERSISTENCE_FAILED"


@dataclass(frozen=True)
class Reset:
    pass


Event = (
    AudioSelected
    | RecordingStarted
    | RecordingStopped
    | DeviceFailed
    | ValidationFailed
    | TranscriptionSubmitted
    | TranscriptionCompleted
    | TranscriptionErrored
    | TranscriptEdited
    | SaveStarted
    | SaveCompleted
    | SaveErrored
    | Reset
)


# ---------------------------------------------------------------------------
# Reducer
# ---------------------------------------------------------------------------


def _audio_selected(state: AppState, event: AudioSelected) -> AppState:
    return replace(
        state, source=SourceStatus.selected, asset=event.asset, error="", error_code=""
    )


def _recording_started(state: AppState, event: RecordingStarted) -> AppState:
    # A recording invalidates the previously selected asset.
    return replace(state, source=SourceStatus.recording, asset=None, error="", error_code="")


def _recording_stopped(state: AppState, event: RecordingStopped) -> AppState:
    return replace(state, source=SourceStatus.selected, asset=event.asset)


def _device_failed(state: AppState, event: DeviceFailed) -> AppState:
    source = SourceStatus.empty if state.source == SourceStatus.recording else state.source
    return replace(state, source=source, error=event.message, error_code=event.code)


def _validation_failed(state: AppState, event: ValidationFailed) -> AppState:
    return replace(state, error=event.message, error_code=event.code)


def _transcription_submitted(state: AppState, event: TranscriptionSubmitted) -> AppState:
    return replace(
        state,
        transcription=TranscriptionStatus.submitting,
        submission_id=event.submission_id,
        error="",
        error_code="",
    )


def _transcription_completed(state: AppState, event: TranscriptionCompleted) -> AppState:
    if event.submission_id != state.submission_id:
        return state
    return replace(
        state,
        transcription=TranscriptionStatus.ready,
        transcript=event.result.text,
        result=event.result,
        save=SaveStatus.idle,
    )


def _transcription_errored(state: AppState, event: TranscriptionErrored) -> AppState:
    if event.submission_id != state.submission_id:
        return state
    # Transcript text is kept as it was.
    return replace(
        state,
        transcription=TranscriptionStatus.failed,
        error=event.message,
        error_code=event.code,
    )


def _transcript_edited(state: AppState, event: TranscriptEdited) -> AppState:
    return replace(state, transcript=event.text)


def _save_started(state: AppState, event: SaveStarted) -> AppState:
    return replace(state, save=SaveStatus.saving, error="", error_code="")


def _save_completed(state: AppState, event: SaveCompleted) -> AppState:
    return replace(state, save=SaveStatus.saved, last_save=event.ack)


def _save_errored(state: AppState, event: SaveErrored) -> AppState:
    return replace(state, save=SaveStatus.failed, error=event.message, error_code=event.code)


def _reset(state: AppState, event: Reset) -> AppState:
    # Bumping the id orphans any in-flight submission.
    return AppState(submission_id=state.submission_id + 1)


_HANDLERS = {
    AudioSelected: _audio_selected,
    RecordingStarted: _recording_started,
    RecordingStopped: _recording_stopped,
    DeviceFailed: _device_failed,
    ValidationFailed: _validation_failed,
    TranscriptionSubmitted: _transcription_submitted,
    TranscriptionCompleted: _transcription_completed,
    TranscriptionErrored: _transcription_errored,
    TranscriptEdited: _transcript_edited,
    SaveStarted: _save_started,
    SaveCompleted: _save_completed,
    SaveErrored: _save_errored,
    Reset: _reset,
}


def reduce(state: AppState, event: Event) -> AppState:
    """Return the state that follows ``state`` after ``event``.

    Raises:
        TypeError: If ``event`` is not a known event type.
    """
    try:
        handler = _HANDLERS[type(event)]
    except KeyError:
        raise TypeError(f"Unknown event: {event!r}") from None
    return handler(state, event)
