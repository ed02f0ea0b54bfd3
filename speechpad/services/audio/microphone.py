"""Local microphone source backed by sounddevice (PortAudio).

Records 16-bit PCM blocks; each block becomes one fragment of the
RecordingSession. On stop the concatenated PCM is wrapped into a WAV
container with soundfile so the result is a playable, uploadable file.
"""

import asyncio
import io
import logging
from collections.abc import Callable

import numpy as np
import soundfile as sf

from speechpad.core.exceptions import DeviceUnavailableError, PermissionDeniedError
from speechpad.services.audio.capture import AudioSource, DeviceStream

logger = logging.getLogger(__name__)


class _MicrophoneStream(DeviceStream):
    """One open ``sounddevice.RawInputStream``."""

    def __init__(self, sd, sample_rate: int, channels: int, blocksize: int, device) -> None:  # noqa: ANN001
        self._sd = sd
        self._sample_rate = sample_rate
        self._channels = channels
        self._blocksize = blocksize
        self._device = device
        self._stream = None
        self._loop: asyncio.AbstractEventLoop | None = None

    def start(self, mime_type: str, on_fragment: Callable[[bytes], None]) -> None:
        self._loop = asyncio.get_running_loop()
        loop = self._loop

        def _callback(indata, frames, time_info, status) -> None:  # noqa: ANN001
            # Runs on the PortAudio thread; hand the block to the event loop.
            if status:
                logger.debug("Input status: %s", status)
            loop.call_soon_threadsafe(on_fragment, bytes(indata))

        try:
            self._stream = self._sd.RawInputStream(
                samplerate=self._sample_rate,
                channels=self._channels,
                dtype="int16",
                blocksize=self._blocksize,
                device=self._device,
                callback=_callback,
            )
            self._stream.start()
        except self._sd.PortAudioError as exc:
            self.stop_tracks()
            raise PermissionDeniedError(f"Could not access microphone: {exc}") from exc

    async def flush(self) -> None:
        if self._stream is None:
            return
        # stop() lets PortAudio drain pending buffers before returning.
        await asyncio.to_thread(self._stream.stop)
        # Let callbacks scheduled by the final blocks run.
        await asyncio.sleep(0)

    def stop_tracks(self) -> None:
        if self._stream is not None:
            self._stream.close()
            self._stream = None

    def finalize(self, data: bytes, mime_type: str) -> bytes:
        frame = 2 * self._channels
        usable = len(data) - (len(data) % frame)
        samples = np.frombuffer(data[:usable], dtype=np.int16).reshape(-1, self._channels)
        buf = io.BytesIO()
        sf.write(buf, samples, self._sample_rate, format="WAV", subtype="PCM_16")
        return buf.getvalue()


class MicrophoneSource(AudioSource):
    """The default system input device (or a named one).

    Args:
        sample_rate: Capture rate in Hz (16 kHz suits speech APIs).
        channels: Number of input channels.
        blocksize: Frames per fragment (1600 = 100 ms at 16 kHz).
        device: sounddevice device index or name (digit strings are treated as
            an index); None for the default input.
    """

    default_mime_type = "audio/wav"

    def __init__(
        self,
        sample_rate: int = 16000,
        channels: int = 1,
        blocksize: int = 1600,
        device: int | str | None = None,
    ) -> None:
        self.sample_rate = sample_rate
        self.channels = channels
        self.blocksize = blocksize
        # Digit strings from the command line select a device by index.
        self.device = int(device) if isinstance(device, str) and device.isdigit() else device

    def is_type_supported(self, mime_type: str) -> bool:
        return mime_type == "audio/wav"

    async def open(self) -> DeviceStream:
        try:
            import sounddevice as sd
        except OSError as exc:  # PortAudio shared library missing
            raise DeviceUnavailableError(f"Audio backend unavailable: {exc}") from exc

        try:
            info = await asyncio.to_thread(sd.query_devices, self.device, "input")
        except (ValueError, sd.PortAudioError) as exc:
            raise DeviceUnavailableError(f"No audio input device available: {exc}") from exc

        logger.info("Using input device: %s", info.get("name", self.device))
        return _MicrophoneStream(sd, self.sample_rate, self.channels, self.blocksize, self.device)
