"""Microphone capture lifecycle.

``CaptureAdapter`` wraps an ``AudioSource`` (a real microphone, or a fake
in tests) into a start/stop lifecycle that produces a finished
``AudioAsset``. Only one ``RecordingSession`` can be open at a time, and
the device stream is released on every exit path of ``stop_capture``.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime

from speechpad.core.exceptions import (
    DeviceError,
    PermissionDeniedError,
    RecordingAlreadyActiveError,
    RecordingNotActiveError,
)
from speechpad.core.models import AudioAsset, SourceKind

logger = logging.getLogger(__name__)

# Widely compatible lossy format first.
PREFERRED_MIME_TYPES: tuple[str, ...] = (
    "audio/mpeg",
    "audio/wav",
    "audio/ogg",
    "audio/webm",
    "audio/flac",
    "audio/aac",
    "audio/mp4",
)


class DeviceStream(ABC):
    """An open input device delivering encoded audio fragments."""

    @abstractmethod
    def start(self, mime_type: str, on_fragment: Callable[[bytes], None]) -> None:
        """Begin recording; ``on_fragment`` is called on the event loop thread."""

    @abstractmethod
    async def flush(self) -> None:
        """Stop recording and wait until the final fragment has been delivered."""

    @abstractmethod
    def stop_tracks(self) -> None:
        """Release the underlying device. Must be safe to call more than once."""

    def finalize(self, data: bytes, mime_type: str) -> bytes:
        """Wrap the concatenated fragments in their container (identity by default)."""
        return data


class AudioSource(ABC):
    """Platform microphone access."""

    default_mime_type: str = "audio/webm"

    @abstractmethod
    def is_type_supported(self, mime_type: str) -> bool:
        """Return True if the source can record in ``mime_type``."""

    @abstractmethod
    async def open(self) -> DeviceStream:
        """Acquire the input device.

        Raises:
            PermissionDeniedError: If access to the microphone is refused.
            DeviceUnavailableError: If there is no usable input device.
        """


def select_mime_type(
    source: AudioSource, preferences: Sequence[str] = PREFERRED_MIME_TYPES
) -> str:
    """Pick the first preferred MIME type the source supports, else its default."""
    for mime_type in preferences:
        if source.is_type_supported(mime_type):
            return mime_type
    return source.default_mime_type


def recording_filename(mime_type: str) -> str:
    """``audio/mpeg`` -> ``recording.mpeg`` (codec parameters dropped)."""
    subtype = mime_type.split(";", 1)[0].split("/", 1)[-1].strip()
    return f"recording.{subtype or 'bin'}"


@dataclass(eq=False)
class RecordingSession:
    """An in-progress capture accumulating fragments in arrival order."""

    mime_type: str
    stream: DeviceStream
    fragments: list[bytes] = field(default_factory=list)
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    closed: bool = False

    def append(self, fragment: bytes) -> None:
        if self.closed or not fragment:
            return
        self.fragments.append(bytes(fragment))

    @property
    def size(self) -> int:
        return sum(len(f) for f in self.fragments)


CaptureHandle = RecordingSession


class CaptureAdapter:
    """Start/stop recording lifecycle over an ``AudioSource``.

    Args:
        source: The microphone (or fake) to record from.
        preferences: MIME types to try, most preferred first.
    """

    def __init__(
        self,
        source: AudioSource,
        preferences: Sequence[str] = PREFERRED_MIME_TYPES,
    ) -> None:
        self._source = source
        self._preferences = tuple(preferences)
        self._active: RecordingSession | None = None
        self._lock = asyncio.Lock()

    @property
    def active_session(self) -> RecordingSession | None:
        return self._active

    @property
    def is_recording(self) -> bool:
        return self._active is not None

    async def start_capture(self) -> CaptureHandle:
        """Open the device and start a new RecordingSession.

        Raises:
            RecordingAlreadyActiveError: If a session is already open.
            DeviceError: If the device cannot be opened or started.
        """
        async with self._lock:
            if self._active is not None:
                raise RecordingAlreadyActiveError()

            mime_type = select_mime_type(self._source, self._preferences)
            stream = await self._source.open()
            session = RecordingSession(mime_type=mime_type, stream=stream)
            try:
                stream.start(mime_type, session.append)
            except DeviceError:
                stream.stop_tracks()
                raise
            except Exception as exc:
                stream.stop_tracks()
                raise PermissionDeniedError(f"Could not start recording: {exc}") from exc

            self._active = session
            logger.info("Recording started (%s)", mime_type)
            return session

    async def stop_capture(self, handle: CaptureHandle) -> AudioAsset:
        """Finish ``handle`` and return the recorded AudioAsset.

        The device stream is released even when flushing or finalizing fails.

        Raises:
            RecordingNotActiveError: If ``handle`` is not the open session.
        """
        async with self._lock:
            if handle is not self._active or handle.closed:
                raise RecordingNotActiveError()
            try:
                await handle.stream.flush()
                data = handle.stream.finalize(b"".join(handle.fragments), handle.mime_type)
            finally:
                handle.stream.stop_tracks()
                handle.closed = True
                self._active = None

        logger.info(
            "Recording stopped: %d fragments, %d bytes", len(handle.fragments), len(data)
        )
        return AudioAsset.from_bytes(
            data,
            filename=recording_filename(handle.mime_type),
            mime_type=handle.mime_type,
            source=SourceKind.recorded,
        )
