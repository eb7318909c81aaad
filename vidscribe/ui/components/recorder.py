"""
Recorder component — camera capture, upload, and result display.

UX flow: idle -> recording -> preview -> uploading -> completed

Streamlit reruns the script on every interaction, so a capture session
runs on its own event loop thread (:class:`BackgroundRecording`). A
fragment polls it, shows the countdown and time left, and offers a stop
button; the auto-stop timer ends it otherwise. The finished media then
waits in session state for the user to upload or discard it.
"""

import asyncio
import concurrent.futures
import logging
import threading

import streamlit as st

from vidscribe.ui.api_client import APIError
from vidscribe.ui.capture import CaptureController, CaptureError, CaptureState, FinishedMedia
from vidscribe.ui.components.result_display import render_result
from vidscribe.ui.devices import OpenCVMediaDevices
from vidscribe.ui.uploader import UploadOrchestrator, UploadStatus

logger = logging.getLogger(__name__)

UPLOAD_FORMATS = ["webm", "mp4", "mov"]


async def record_clip(
    controller: CaptureController,
    on_tick=None,
    poll_interval: float = 0.25,
) -> FinishedMedia | None:
    """Acquire devices, record until auto-stop, and return the media.

    Devices are released on every exit path.
    """
    async with controller:
        await controller.acquire()
        await controller.start()
        while controller.state == CaptureState.recording:
            if on_tick is not None:
                on_tick(controller.remaining_seconds)
            await asyncio.sleep(poll_interval)
        return controller.finished


class BackgroundRecording:
    """Runs one :func:`record_clip` session on a private event loop thread.

    Streamlit reruns the script on every interaction, so the session must
    outlive a single run: the script keeps this object in session state,
    polls it, and forwards the user's stop click with :meth:`request_stop`.
    """

    def __init__(self, controller: CaptureController, poll_interval: float = 0.25) -> None:
        self.controller = controller
        self.countdown: int | None = None
        self._poll_interval = poll_interval
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(
            target=self._loop.run_forever, name="vidscribe-capture", daemon=True
        )
        self._future: concurrent.futures.Future | None = None

    def start(self) -> None:
        self._thread.start()
        self._future = asyncio.run_coroutine_threadsafe(
            record_clip(self.controller, poll_interval=self._poll_interval), self._loop
        )

    @property
    def done(self) -> bool:
        return self._future is not None and self._future.done()

    def on_countdown(self, remaining: int) -> None:
        self.countdown = remaining

    def remaining_seconds(self) -> float | None:
        if self.done:
            return None

        async def _remaining() -> float | None:
            return self.controller.remaining_seconds

        return asyncio.run_coroutine_threadsafe(_remaining(), self._loop).result(timeout=5)

    def request_stop(self) -> None:
        if self.done:
            return
        asyncio.run_coroutine_threadsafe(self.controller.stop(), self._loop).result(timeout=30)

    def result(self, timeout: float | None = None) -> FinishedMedia | None:
        """Wait for the session and shut its loop down."""
        try:
            return self._future.result(timeout=timeout)
        finally:
            if self._future.done():
                self._loop.call_soon_threadsafe(self._loop.stop)
                self._thread.join(timeout=5)
                if not self._thread.is_alive():
                    self._loop.close()


def _orchestrator() -> UploadOrchestrator:
    return st.session_state.orchestrator


def _start_recording(duration: int) -> None:
    recording: BackgroundRecording

    controller = CaptureController(
        OpenCVMediaDevices(),
        countdown_seconds=3,
        max_duration=float(duration),
        on_countdown=lambda remaining: recording.on_countdown(remaining),
    )
    recording = BackgroundRecording(controller)
    recording.start()
    st.session_state.recording = recording
    st.session_state.capture_error = ""


def _finish_recording(recording: BackgroundRecording) -> None:
    st.session_state.recording = None
    try:
        media = recording.result()
    except CaptureError as exc:
        st.session_state.capture_error = exc.message
        return
    if media is None or media.size == 0:
        st.session_state.capture_error = "Nothing was recorded. Please try again."
        return
    st.session_state.pending_media = media


@st.fragment(run_every=0.5)
def _render_live_recording() -> None:
    recording: BackgroundRecording | None = st.session_state.get("recording")
    if recording is None:
        return
    if recording.done:
        _finish_recording(recording)
        st.rerun()

    state = recording.controller.state
    if state == CaptureState.countdown and recording.countdown:
        st.info(f"Recording starts in {recording.countdown}...")
    elif state == CaptureState.recording:
        remaining = recording.remaining_seconds()
        if remaining is not None:
            st.warning(f"Recording... {remaining:.0f}s left")
    else:
        st.info("Opening camera...")

    if st.button("Stop recording", type="primary", key="stop_recording"):
        recording.request_stop()
        _finish_recording(recording)
        st.rerun()



def _submit(media: FinishedMedia) -> None:
    orchestrator = _orchestrator()
    with st.spinner("Uploading and transcribing..."):
        try:
            orchestrator.submit(media)
        except APIError:
            # message already recorded on the orchestrator
            pass
    st.rerun()


def render_recorder() -> None:
    """Render the camera recording flow."""
    orchestrator = _orchestrator()
    media: FinishedMedia | None = st.session_state.get("pending_media")

    if media is None:
        if st.session_state.get("recording") is not None:
            _render_live_recording()
            return
        if st.session_state.get("capture_error"):
            st.error(st.session_state.capture_error)
        duration = st.slider("Maximum duration (seconds)", 5, 120, 60, step=5)
        if st.button("Start recording", type="primary"):
            orchestrator.invalidate()
            _start_recording(duration)
            st.rerun()
        return

    st.video(media.data, format=media.mime_type)
    st.caption(f"{media.filename} ({media.size:,} bytes)")

    col_upload, col_discard = st.columns(2)
    uploading = orchestrator.status == UploadStatus.uploading
    with col_upload:
        if st.button("Upload", type="primary", disabled=uploading, use_container_width=True):
            _submit(media)
    with col_discard:
        if st.button("Record again", disabled=uploading, use_container_width=True):
            st.session_state.pending_media = None
            orchestrator.invalidate()
            st.rerun()

    render_upload_status()


def render_file_upload() -> None:
    """Render the upload-a-file flow."""
    orchestrator = _orchestrator()
    uploaded = st.file_uploader("Choose a video", type=UPLOAD_FORMATS)
    if uploaded is None:
        return

    media = FinishedMedia(
        data=uploaded.getvalue(),
        filename=uploaded.name,
        mime_type=uploaded.type or "video/mp4",
    )
    if st.button(
        "Upload",
        type="primary",
        disabled=orchestrator.status == UploadStatus.uploading,
        key="upload_file",
    ):
        _submit(media)

    render_upload_status()


def render_upload_status() -> None:
    orchestrator = _orchestrator()
    if orchestrator.status == UploadStatus.uploading:
        st.info(orchestrator.progress or "Uploading...")
    elif orchestrator.status == UploadStatus.failed:
        st.error(orchestrator.error)
    elif orchestrator.status == UploadStatus.succeeded and orchestrator.result:
        st.success("Upload successful")
        render_result(orchestrator.result)
