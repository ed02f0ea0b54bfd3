"""
Audio source components: upload tab, record tab, and the selected-audio line.
"""

import streamlit as st

from speechpad.core.models import SourceKind
from speechpad.services.audio.capture import recording_filename
from speechpad.ui.controller import AppController

ACCEPTED_EXTENSIONS = ["mp3", "mpeg", "wav", "ogg", "webm", "flac", "aac", "m4a", "mp4"]


def _upload_tab(controller: AppController) -> None:
    uploaded = st.file_uploader(
        "Choose an audio file",
        type=ACCEPTED_EXTENSIONS,
        key="audio_upload",
        disabled=controller.state.loading,
    )
    if uploaded is None:
        return
    # Streamlit reruns the script on every interaction; only select new uploads.
    marker = (uploaded.file_id, uploaded.name)
    if st.session_state.get("_last_upload") == marker:
        return
    st.session_state._last_upload = marker
    controller.select_file(
        uploaded.getvalue(),
        filename=uploaded.name,
        mime_type=uploaded.type or None,
        source=SourceKind.uploaded,
    )


def _record_tab(controller: AppController) -> None:
    recorded = st.audio_input(
        "Record from your microphone",
        key="audio_record",
        disabled=controller.state.loading,
    )
    if recorded is None:
        return
    marker = (recorded.file_id, recorded.size)
    if st.session_state.get("_last_recording") == marker:
        return
    st.session_state._last_recording = marker
    mime_type = recorded.type or "audio/wav"
    controller.select_file(
        recorded.getvalue(),
        filename=recording_filename(mime_type),
        mime_type=mime_type,
        source=SourceKind.recorded,
    )


def render_audio_picker(controller: AppController) -> None:
    """Render the Upload / Record tabs and feed selections to ``controller``."""
    upload_tab, record_tab = st.tabs(["Upload Audio", "Record Audio"])
    with upload_tab:
        _upload_tab(controller)
    with record_tab:
        _record_tab(controller)


def render_selected_audio(controller: AppController) -> None:
    """Show the selected file name, or a player for a recording."""
    asset = controller.state.asset
    if asset is None:
        st.caption("No audio selected yet.")
        return
    if asset.source == SourceKind.recorded:
        st.audio(asset.read(), format=asset.mime_type)
    else:
        st.markdown(f"**Selected file:** {asset.filename}")
