"""
SpeechPad exception hierarchy.

All application-specific exceptions inherit from SpeechPadError,
enabling centralized error handling in the API middleware layer and
in the client-side controller.

Families:
    ValidationError   -- blocked locally, no network call made.
    DeviceError       -- microphone permission / availability.
    RemoteError       -- any failed call to a remote collaborator.
"""

from datetime import UTC, datetime


class SpeechPadError(Exception):
    """Base exception for all SpeechPad errors."""

    def __init__(
        self,
        detail: str = "An unexpected error occurred",
        code: str = "SPEECHPAD_ERROR",
        status_code: int = 500,
    ) -> None:
        self.detail = detail
        self.code = code
        self.status_code = status_code
        self.timestamp = datetime.now(UTC).isoformat()
        super().__init__(detail)


class ConfigurationError(SpeechPadError):
    """Raised when a required setting (API key, bucket credentials) is missing."""

    def __init__(self, setting: str) -> None:
        super().__init__(
            detail=f"Missing configuration: {setting}",
            code="CONFIGURATION_ERROR",
            status_code=500,
        )


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class ValidationError(SpeechPadError):
    """Raised when an action is rejected locally before any remote call."""

    def __init__(self, detail: str = "Invalid request", code: str = "VALIDATION_ERROR") -> None:
        super().__init__(detail=detail, code=code, status_code=400)


class NoAudioError(ValidationError):
    """Raised when transcription is requested without an audio source."""

    def __init__(self, detail: str = "No audio file uploaded") -> None:
        super().__init__(detail=detail, code="NO_AUDIO")


class EmptyTextError(ValidationError):
    """Raised when saving is requested with an empty transcript."""

    def __init__(self, detail: str = "No text provided") -> None:
        super().__init__(detail=detail, code="EMPTY_TEXT")


class AudioTooLargeError(ValidationError):
    """Raised when an uploaded clip exceeds the configured size limit."""

    def __init__(self, size: int, limit: int) -> None:
        super().__init__(
            detail=f"Audio is {size} bytes; the limit is {limit} bytes",
            code="AUDIO_TOO_LARGE",
        )
        self.status_code = 413


# ---------------------------------------------------------------------------
# Capture
# ---------------------------------------------------------------------------


class DeviceError(SpeechPadError):
    """Raised when the microphone cannot be used."""

    def __init__(
        self,
        detail: str = "Could not access microphone",
        code: str = "DEVICE_ERROR",
    ) -> None:
        super().__init__(detail=detail, code=code, status_code=500)


class PermissionDeniedError(DeviceError):
    """Raised when the platform refuses microphone access."""

    def __init__(
        self, detail: str = "Could not access microphone. Please check permissions."
    ) -> None:
        super().__init__(detail=detail, code="PERMISSION_DENIED")


class DeviceUnavailableError(DeviceError):
    """Raised when no usable input device exists."""

    def __init__(self, detail: str = "No audio input device available") -> None:
        super().__init__(detail=detail, code="DEVICE_UNAVAILABLE")


class RecordingAlreadyActiveError(SpeechPadError):
    """Raised when trying to start a recording while one is already active."""

    def __init__(self) -> None:
        super().__init__(
            detail="A recording is already active",
            code="RECORDING_ALREADY_ACTIVE",
            status_code=409,
        )


class RecordingNotActiveError(SpeechPadError):
    """Raised when stopping a capture handle that is not the open session."""

    def __init__(self) -> None:
        super().__init__(
            detail="No active recording for this handle",
            code="RECORDING_NOT_ACTIVE",
            status_code=409,
        )


class AssetUnreadableError(SpeechPadError):
    """Raised when an audio asset's bytes cannot be obtained."""

    def __init__(self, detail: str = "Audio file could not be read") -> None:
        super().__init__(detail=detail, code="ASSET_UNREADABLE", status_code=400)


# ---------------------------------------------------------------------------
# Remote collaborators
# ---------------------------------------------------------------------------


class RemoteError(SpeechPadError):
    """Raised when a call to a remote service fails."""

    def __init__(
        self,
        detail: str = "Remote call failed",
        code: str = "REMOTE_ERROR",
        status_code: int = 502,
    ) -> None:
        super().__init__(detail=detail, code=code, status_code=status_code)


class TranscriptionFailedError(RemoteError):
    """User-facing transcription failure; all transcription errors derive from it."""

    def __init__(
        self,
        detail: str = "Failed to transcribe audio",
        code: str = "TRANSCRIPTION_FAILED",
    ) -> None:
        super().__init__(detail=detail, code=code, status_code=500)


class UploadFailedError(TranscriptionFailedError):
    """Raised when the intermediate store rejects the audio bytes."""

    def __init__(self, detail: str = "Audio upload failed") -> None:
        super().__init__(detail=detail, code="UPLOAD_FAILED")


class ProviderRejectedError(TranscriptionFailedError):
    """Raised when the provider answers with a non-success status or error payload."""

    def __init__(self, detail: str = "Transcription provider rejected the request") -> None:
        super().__init__(detail=detail, code="PROVIDER_REJECTED")


class ProviderTimeoutError(TranscriptionFailedError):
    """Raised when no terminal transcription result arrives within the bounded wait."""

    def __init__(self, detail: str = "Transcription timed out") -> None:
        super().__init__(detail=detail, code="PROVIDER_TIMEOUT")


class PersistenceFailedError(RemoteError):
    """Raised when the row store rejects a transcript write."""

    def __init__(self, detail: str = "Failed to save transcription") -> None:
        super().__init__(detail=detail, code="PERSISTENCE_FAILED", status_code=500)
