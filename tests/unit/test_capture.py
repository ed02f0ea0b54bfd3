"""Tests for the CaptureAdapter recording lifecycle.

Uses the FakeSource/FakeStream pair from conftest so that fragments,
MIME support, and device failures are deterministic.
"""

import asyncio

import pytest

from speechpad.core.exceptions import (
    DeviceUnavailableError,
    PermissionDeniedError,
    RecordingAlreadyActiveError,
    RecordingNotActiveError,
)
from speechpad.core.models import SourceKind
from speechpad.services.audio.capture import (
    CaptureAdapter,
    RecordingSession,
    recording_filename,
    select_mime_type,
)

# ---------------------------------------------------------------------------
# MIME selection
# ---------------------------------------------------------------------------


class TestSelectMimeType:
    """Verify preference ordering and the platform default fallback."""

    def test_first_supported_preference_wins(self, make_source):
        source = make_source(supported=("audio/ogg", "audio/wav"))
        assert select_mime_type(source) == "audio/wav"

    def test_mpeg_preferred_when_supported(self, fake_source):
        assert select_mime_type(fake_source) == "audio/mpeg"

    def test_falls_back_to_default(self, make_source):
        source = make_source(supported=())
        assert select_mime_type(source) == "audio/webm"

    def test_custom_preferences(self, fake_source):
        assert select_mime_type(fake_source, ["audio/webm", "audio/mpeg"]) == "audio/webm"


class TestRecordingFilename:
    def test_subtype_becomes_extension(self):
        assert recording_filename("audio/mpeg") == "recording.mpeg"

    def test_codec_parameters_dropped(self):
        assert recording_filename("audio/webm;codecs=opus") == "recording.webm"


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


class TestRecordingSession:
    """Fragments accumulate in arrival order until the session closes."""

    def test_append_ignores_empty_fragments(self):
        session = RecordingSession(mime_type="audio/mpeg", stream=None)
        session.append(b"ab")
        session.append(b"")
        session.append(b"cde")
        assert session.fragments == [b"ab", b"cde"]
        assert session.size == 5

    def test_append_after_close_is_ignored(self):
        session = RecordingSession(mime_type="audio/mpeg", stream=None)
        session.append(b"ab")
        session.closed = True
        session.append(b"late")
        assert session.fragments == [b"ab"]


# ---------------------------------------------------------------------------
# Adapter lifecycle
# ---------------------------------------------------------------------------


class TestCaptureAdapter:
    """start_capture / stop_capture behaviour."""

    async def test_two_fragments_produce_recording_mpeg(self, fake_source):
        """Fragments of 10 and 20 bytes join into one 30-byte recording.mpeg."""
        adapter = CaptureAdapter(fake_source)

        handle = await adapter.start_capture()
        assert adapter.is_recording
        assert handle.mime_type == "audio/mpeg"

        asset = await adapter.stop_capture(handle)

        assert asset.filename == "recording.mpeg"
        assert asset.mime_type == "audio/mpeg"
        assert asset.source == SourceKind.recorded
        assert len(asset.read()) == 30
        assert asset.read() == b"\x01" * 10 + b"\x02" * 20
        assert not adapter.is_recording

    async def test_stop_releases_device(self, fake_source):
        adapter = CaptureAdapter(fake_source)
        handle = await adapter.start_capture()
        await adapter.stop_capture(handle)

        stream = fake_source.streams[0]
        assert stream.stop_calls == 1
        assert handle.closed

    async def test_no_fragments_yields_empty_asset(self, make_source):
        adapter = CaptureAdapter(make_source(fragments=[]))
        handle = await adapter.start_capture()
        asset = await adapter.stop_capture(handle)
        assert asset.read() == b""

    async def test_second_start_rejected(self, fake_source):
        adapter = CaptureAdapter(fake_source)
        await adapter.start_capture()
        with pytest.raises(RecordingAlreadyActiveError):
            await adapter.start_capture()
        assert len(fake_source.streams) == 1

    async def test_stop_unknown_handle_rejected(self, fake_source):
        adapter = CaptureAdapter(fake_source)
        other = CaptureAdapter(fake_source)
        foreign = await other.start_capture()
        with pytest.raises(RecordingNotActiveError):
            await adapter.stop_capture(foreign)

    async def test_stop_twice_rejected(self, fake_source):
        adapter = CaptureAdapter(fake_source)
        handle = await adapter.start_capture()
        await adapter.stop_capture(handle)
        with pytest.raises(RecordingNotActiveError):
            await adapter.stop_capture(handle)

    async def test_can_record_again_after_stop(self, fake_source):
        adapter = CaptureAdapter(fake_source)
        first = await adapter.stop_capture(await adapter.start_capture())
        second = await adapter.stop_capture(await adapter.start_capture())
        assert first.read() == second.read()
        assert len(fake_source.streams) == 2

    async def test_open_error_propagates(self, make_source):
        adapter = CaptureAdapter(make_source(open_error=DeviceUnavailableError()))
        with pytest.raises(DeviceUnavailableError):
            await adapter.start_capture()
        assert not adapter.is_recording

    async def test_start_failure_wrapped_and_released(self, make_source):
        """A non-device exception from start() becomes PermissionDeniedError."""
        source = make_source(start_error=RuntimeError("NotAllowedError"))
        adapter = CaptureAdapter(source)

        with pytest.raises(PermissionDeniedError):
            await adapter.start_capture()

        assert source.streams[0].stop_calls == 1
        assert not adapter.is_recording

    async def test_flush_failure_still_releases(self, fake_source):
        adapter = CaptureAdapter(fake_source)
        handle = await adapter.start_capture()

        async def broken_flush():
            raise RuntimeError("device lost")

        handle.stream.flush = broken_flush
        with pytest.raises(RuntimeError):
            await adapter.stop_capture(handle)

        assert handle.stream.stop_calls == 1
        assert not adapter.is_recording

    async def test_concurrent_stops_finish_once(self, fake_source):
        """Two overlapping stops on one handle yield one asset and one release."""
        adapter = CaptureAdapter(fake_source)
        handle = await adapter.start_capture()
        original_flush = handle.stream.flush

        async def slow_flush():
            await asyncio.sleep(0)
            await original_flush()

        handle.stream.flush = slow_flush
        results = await asyncio.gather(
            adapter.stop_capture(handle),
            adapter.stop_capture(handle),
            return_exceptions=True,
        )

        assets = [r for r in results if not isinstance(r, Exception)]
        errors = [r for r in results if isinstance(r, RecordingNotActiveError)]
        assert len(assets) == 1
        assert len(errors) == 1
        assert len(assets[0].read()) == 30
        assert handle.stream.stop_calls == 1
