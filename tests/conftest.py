"""Shared pytest fixtures for SpeechPad test suite.

Provides common test fixtures used across unit and integration tests,
including a fake microphone, sample audio, settings isolation and
database setup helpers.
"""

import struct
from collections.abc import Callable

import pytest

from speechpad.services.audio.capture import AudioSource, DeviceStream

# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Point every test at throwaway settings and clear the settings cache.

    Keeps a developer's ``.env`` or exported ``SPEECHPAD_*`` variables
    from leaking into tests.
    """
    from speechpad.core.config import get_settings

    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("SPEECHPAD_ASSEMBLYAI_API_KEY", "test-key")
    monkeypatch.setenv("SPEECHPAD_UPLOADS_DIR", str(tmp_path / "uploads"))
    monkeypatch.setenv("SPEECHPAD_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
    monkeypatch.setenv("SPEECHPAD_POLL_INTERVAL", "0")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# ---------------------------------------------------------------------------
# Audio Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_pcm_bytes():
    """Generate 1 second of 440Hz sine-wave PCM audio (16kHz, 16-bit, mono).

    Returns:
        bytes: Raw PCM audio data.
    """
    import math

    sample_rate = 16000
    duration = 1.0
    frequency = 440.0
    amplitude = 16000  # ~50% of max int16

    samples = []
    for i in range(int(sample_rate * duration)):
        value = int(amplitude * math.sin(2 * math.pi * frequency * i / sample_rate))
        samples.append(struct.pack("<h", value))
    return b"".join(samples)


@pytest.fixture
def sample_wav_bytes(sample_pcm_bytes):
    """Wrap ``sample_pcm_bytes`` in a WAV container.

    Returns:
        bytes: A complete ``sample.wav`` file.
    """
    import io
    import wave

    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(16000)
        wf.writeframes(sample_pcm_bytes)
    return buf.getvalue()


@pytest.fixture
def sample_audio_path(tmp_path, sample_wav_bytes):
    """Write ``sample.wav`` to a temporary directory.

    Returns:
        str: Path to the temporary WAV file.
    """
    wav_path = tmp_path / "sample.wav"
    wav_path.write_bytes(sample_wav_bytes)
    return str(wav_path)


# ---------------------------------------------------------------------------
# Fake microphone
# ---------------------------------------------------------------------------


class FakeStream(DeviceStream):
    """Device stream that delivers a fixed list of fragments on flush."""

    def __init__(self, fragments: list[bytes], fail_on_start: Exception | None = None) -> None:
        self.fragments = list(fragments)
        self.fail_on_start = fail_on_start
        self.started_with: str | None = None
        self.stop_calls = 0
        self._on_fragment: Callable[[bytes], None] | None = None

    def start(self, mime_type: str, on_fragment: Callable[[bytes], None]) -> None:
        if self.fail_on_start is not None:
            raise self.fail_on_start
        self.started_with = mime_type
        self._on_fragment = on_fragment

    def emit(self, fragment: bytes) -> None:
        assert self._on_fragment is not None
        self._on_fragment(fragment)

    async def flush(self) -> None:
        for fragment in self.fragments:
            self.emit(fragment)
        self.fragments = []

    def stop_tracks(self) -> None:
        self.stop_calls += 1


class FakeSource(AudioSource):
    """Audio source with a configurable set of supported MIME types."""

    default_mime_type = "audio/webm"

    def __init__(
        self,
        fragments: list[bytes] | None = None,
        supported: tuple[str, ...] = ("audio/mpeg", "audio/webm"),
        open_error: Exception | None = None,
        start_error: Exception | None = None,
    ) -> None:
        self.fragments = fragments if fragments is not None else [b"\x01" * 10, b"\x02" * 20]
        self.supported = supported
        self.open_error = open_error
        self.start_error = start_error
        self.streams: list[FakeStream] = []

    def is_type_supported(self, mime_type: str) -> bool:
        return mime_type in self.supported

    async def open(self) -> DeviceStream:
        if self.open_error is not None:
            raise self.open_error
        stream = FakeStream(self.fragments, fail_on_start=self.start_error)
        self.streams.append(stream)
        return stream


@pytest.fixture
def fake_source():
    """A FakeSource emitting fragments of 10 and 20 bytes, preferring audio/mpeg."""
    return FakeSource()


@pytest.fixture
def make_source():
    """Return the FakeSource class for tests that need a custom configuration."""
    return FakeSource


# ---------------------------------------------------------------------------
# Database Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
async def db_engine():
    """Create an in-memory SQLite async engine with tables, dispose after test."""
    from sqlalchemy.ext.asyncio import create_async_engine

    import speechpad.services.storage.models_db  # noqa: F401  (registers tables)
    from speechpad.services.storage.database import Base

    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(db_engine):
    """Yield an AsyncSession bound to the test engine; rolls back after test."""
    from sqlalchemy.ext.asyncio import async_sessionmaker

    factory = async_sessionmaker(db_engine, expire_on_commit=False)
    async with factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def repository(db_session):
    """Return a TranscriptionRepository bound to the test session."""
    from speechpad.services.storage.repository import TranscriptionRepository

    return TranscriptionRepository(db_session)
