"""
SpeechPad Streamlit UI: main entry point.

Run with: ``streamlit run speechpad/ui/app.py``
"""

# ---------------------------------------------------------------------------
# Ensure project root is on sys.path so ``from speechpad.xxx`` imports work.
# Streamlit replaces sys.path[0] with the script directory (speechpad/ui/),
# which removes the project root needed for absolute imports.
# ---------------------------------------------------------------------------
import sys  # noqa: E402
from pathlib import Path  # noqa: E402

_project_root = str(Path(__file__).resolve().parent.parent.parent)
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

import asyncio  # noqa: E402

import streamlit as st  # noqa: E402

from speechpad.core.config import configure_logging, get_settings  # noqa: E402
from speechpad.services.audio.encoder import create_encoder  # noqa: E402
from speechpad.ui.api_client import (  # noqa: E402
    BackendClient,
    PersistenceClient,
    TranscriptionClient,
)
from speechpad.ui.components.audio_picker import (  # noqa: E402
    render_audio_picker,
    render_selected_audio,
)
from speechpad.ui.components.transcript_editor import render_transcript_editor  # noqa: E402
from speechpad.ui.controller import AppController  # noqa: E402

# ---------------------------------------------------------------------------
# Page config (must be first Streamlit call)
# ---------------------------------------------------------------------------
st.set_page_config(
    page_title="SpeechPad",
    page_icon="\U0001f399\ufe0f",
    layout="centered",
)

_settings = get_settings()
configure_logging(_settings.log_level)

# ---------------------------------------------------------------------------
# Session state defaults
# ---------------------------------------------------------------------------
_DEFAULTS = {
    "api_base_url": _settings.backend_base_url,
    "transcription_language": None,
    "controller": None,
    "controller_url": None,
}

for key, value in _DEFAULTS.items():
    if key not in st.session_state:
        st.session_state[key] = value


def _build_controller(base_url: str) -> AppController:
    return AppController(
        transcription_client=TranscriptionClient(base_url=base_url),
        persistence_client=PersistenceClient(base_url=base_url),
        encoder=create_encoder(_settings.transport),
        language=st.session_state.transcription_language,
    )


# ---------------------------------------------------------------------------
# Sidebar
# ---------------------------------------------------------------------------
with st.sidebar:
    st.title("\U0001f399\ufe0f SpeechPad")
    st.caption("Upload or record audio, get editable text")
    st.divider()
    st.session_state.api_base_url = st.text_input(
        "Backend API URL",
        value=st.session_state.api_base_url,
        help=f"URL of the SpeechPad FastAPI backend (default: {_settings.backend_base_url})",
    )
    st.session_state.transcription_language = (
        st.text_input(
            "Language (blank = auto-detect)",
            value=st.session_state.transcription_language or "",
            max_chars=8,
        ).strip()
        or None
    )

    # Connection status indicator
    _conn_ok, _conn_msg = asyncio.run(
        BackendClient(base_url=st.session_state.api_base_url, timeout=5.0).check_connection()
    )
    if _conn_ok:
        st.success(f"Backend: {_conn_msg}")
    else:
        st.error(f"Backend: {_conn_msg}")

# The controller is rebuilt only when the backend URL changes.
if (
    st.session_state.controller is None
    or st.session_state.controller_url != st.session_state.api_base_url
):
    st.session_state.controller = _build_controller(st.session_state.api_base_url)
    st.session_state.controller_url = st.session_state.api_base_url

controller: AppController = st.session_state.controller
controller.language = st.session_state.transcription_language

# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------
st.header("Transcribe audio")

render_audio_picker(controller)
render_selected_audio(controller)

if st.button(
    "Transcribe Audio",
    type="primary",
    disabled=not controller.state.can_transcribe,
    use_container_width=True,
):
    with st.spinner("Transcribing..."):
        asyncio.run(controller.transcribe())

if controller.state.error:
    st.error(controller.state.error)

render_transcript_editor(controller)

if controller.state.asset is not None or controller.state.transcript:
    if st.button("Start over"):
        asyncio.run(controller.reset())
        for key in ("_last_upload", "_last_recording"):
            st.session_state.pop(key, None)
        st.rerun()
