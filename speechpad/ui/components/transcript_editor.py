"""
Transcript editor component.
"""

import asyncio

import streamlit as st

from speechpad.ui.controller import AppController
from speechpad.ui.state import SaveStatus, TranscriptionStatus


def render_transcript_editor(controller: AppController) -> None:
    """Render the editable transcript and the save button.

    Nothing is shown until a transcription has produced text.
    """
    state = controller.state
    if state.transcription != TranscriptionStatus.ready and not state.transcript:
        return

    st.subheader("Transcription")
    # Keyed by submission so a fresh result replaces the widget's value.
    edited = st.text_area(
        "Edit the transcription before saving",
        value=state.transcript,
        height=240,
        key=f"transcript_{state.submission_id}",
    )
    if edited != state.transcript:
        controller.edit_transcript(edited)

    if st.button(
        "Save Transcription",
        type="primary",
        disabled=not controller.state.can_save,
        use_container_width=True,
    ):
        with st.spinner("Saving..."):
            state = asyncio.run(controller.save())
        if state.save == SaveStatus.saved:
            st.session_state._save_toast = True
        # Rerun so the error banner above reflects the save outcome.
        st.rerun()

    if st.session_state.pop("_save_toast", False):
        st.toast("Transcription saved")

    if controller.state.save == SaveStatus.saved and controller.state.last_save:
        record = controller.state.last_save.data[0] if controller.state.last_save.data else None
        if record is not None:
            st.success(f"Saved transcription #{record.id} ({record.filename})")
        else:
            st.success("Transcription saved")
