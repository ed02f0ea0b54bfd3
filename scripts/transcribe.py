#!/usr/bin/env python3
"""
SpeechPad terminal client

Transcribes an audio file, or records a few seconds from the default
microphone, through a running SpeechPad backend and prints the text.
With ``--save`` the transcript is also stored via ``/api/save``.

    python scripts/transcribe.py meeting.mp3
    python scripts/transcribe.py --record 5 --save
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Ensure project root is on sys.path for ``speechpad`` imports
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from speechpad.core.config import configure_logging, get_settings  # noqa: E402
from speechpad.core.models import AudioAsset  # noqa: E402
from speechpad.services.audio.capture import CaptureAdapter  # noqa: E402
from speechpad.services.audio.encoder import create_encoder  # noqa: E402
from speechpad.ui.api_client import PersistenceClient, TranscriptionClient  # noqa: E402
from speechpad.ui.controller import AppController  # noqa: E402
from speechpad.ui.state import SaveStatus, TranscriptionStatus  # noqa: E402


async def run(args: argparse.Namespace) -> int:
    """Drive one capture -> transcribe -> (save) cycle.

    Returns:
        Exit code: 0 on success, 1 on any reported failure.
    """
    settings = get_settings()
    base_url = args.url or settings.backend_base_url

    capture = None
    if args.record:
        from speechpad.services.audio.microphone import MicrophoneSource

        capture = CaptureAdapter(MicrophoneSource(device=args.device))

    controller = AppController(
        transcription_client=TranscriptionClient(base_url=base_url),
        persistence_client=PersistenceClient(base_url=base_url),
        encoder=create_encoder(args.transport or settings.transport),
        capture=capture,
        language=args.language,
    )

    if args.record:
        state = await controller.start_recording()
        if state.error:
            print(f"Error: {state.error}", file=sys.stderr)
            return 1
        print(f"Recording for {args.record:g}s...")
        await asyncio.sleep(args.record)
        state = await controller.stop_recording()
        if state.error:
            print(f"Error: {state.error}", file=sys.stderr)
            return 1
    else:
        controller.select_asset(AudioAsset.from_path(args.file))

    print("Transcribing...")
    state = await controller.transcribe()
    if state.transcription != TranscriptionStatus.ready:
        print(f"Error: {state.error} ({state.error_code})", file=sys.stderr)
        return 1

    print(state.transcript)
    if state.result and state.result.audio_url:
        print(f"\nAudio: {state.result.audio_url}")

    if args.save:
        state = await controller.save(args.filename)
        if state.save != SaveStatus.saved:
            print(f"Error: {state.error} ({state.error_code})", file=sys.stderr)
            return 1
        record = state.last_save.data[0] if state.last_save and state.last_save.data else None
        print(f"Saved transcription #{record.id}" if record else "Saved transcription")

    return 0


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Transcribe an audio file or a microphone recording with SpeechPad",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "file",
        nargs="?",
        type=Path,
        help="Audio file to transcribe",
    )
    source.add_argument(
        "--record",
        type=float,
        metavar="SECONDS",
        help="Record this many seconds from the microphone instead",
    )

    parser.add_argument(
        "--device",
        type=str,
        default=None,
        help="Input device name or index for --record (default: system default)",
    )
    parser.add_argument(
        "--language",
        type=str,
        default=None,
        help="Language code, e.g. 'en' (default: server default)",
    )
    parser.add_argument(
        "--transport",
        type=str,
        default=None,
        choices=["base64", "multipart"],
        help="Request encoding (default: SPEECHPAD_TRANSPORT)",
    )
    parser.add_argument(
        "--url",
        type=str,
        default=None,
        help="Backend base URL (default: SPEECHPAD_BACKEND_BASE_URL)",
    )
    parser.add_argument(
        "--save",
        action="store_true",
        help="Save the transcript after printing it",
    )
    parser.add_argument(
        "--filename",
        type=str,
        default=None,
        help="Filename stored with the saved transcript",
    )

    args = parser.parse_args()
    if args.record is not None and args.record <= 0:
        parser.error("--record must be a positive number of seconds")

    configure_logging()
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
