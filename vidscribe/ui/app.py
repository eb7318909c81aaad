"""
VidScribe Streamlit UI — main entry point.

Run with: ``streamlit run vidscribe/ui/app.py``
"""

import streamlit as st

from vidscribe.core.config import get_settings
from vidscribe.core.utils import format_file_size
from vidscribe.ui.api_client import APIError, get_api_client
from vidscribe.ui.components.recorder import render_file_upload, render_recorder
from vidscribe.ui.components.result_display import render_history
from vidscribe.ui.uploader import UploadOrchestrator

# ---------------------------------------------------------------------------
# Page config (must be first Streamlit call)
# ---------------------------------------------------------------------------
st.set_page_config(
    page_title="VidScribe",
    page_icon="\U0001f3ac",
    layout="centered",
)

_settings = get_settings()

# ---------------------------------------------------------------------------
# Session state defaults
# ---------------------------------------------------------------------------
_DEFAULTS = {
    "api_base_url": _settings.api_base_url,
    "pending_media": None,
    "recording": None,
    "capture_error": "",
}

for key, value in _DEFAULTS.items():
    if key not in st.session_state:
        st.session_state[key] = value

# ---------------------------------------------------------------------------
# Sidebar
# ---------------------------------------------------------------------------
with st.sidebar:
    st.title("\U0001f3ac VidScribe")
    st.caption("Record a short video, get a transcript and tags")
    st.divider()
    st.session_state.api_base_url = st.text_input(
        "Backend API URL",
        value=st.session_state.api_base_url,
        help="URL of the VidScribe FastAPI backend server",
    )

    _client = get_api_client(st.session_state.api_base_url)
    _conn_ok, _conn_msg = _client.check_connection()
    if _conn_ok:
        st.success(f"Backend: {_conn_msg}")
    else:
        st.error(f"Backend: {_conn_msg}")
    st.caption(f"Maximum upload size: {format_file_size(_settings.max_upload_bytes)}")

# One orchestrator per session, rebuilt when the backend URL changes
_orchestrator = st.session_state.get("orchestrator")
if _orchestrator is None or st.session_state.get("_orchestrator_url") != st.session_state.api_base_url:
    st.session_state.orchestrator = UploadOrchestrator(_client, _settings.max_upload_bytes)
    st.session_state._orchestrator_url = st.session_state.api_base_url

# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------
st.header("Video to Text")
tab_record, tab_upload, tab_history = st.tabs(["Record", "Upload file", "History"])

with tab_record:
    render_recorder()

with tab_upload:
    render_file_upload()

with tab_history:
    try:
        render_history(_client.list_videos())
    except APIError as exc:
        st.error(exc.message)
