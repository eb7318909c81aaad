"""OpenCV media backend for :class:`~vidscribe.ui.capture.CaptureController`.

Captures the local camera with ``cv2.VideoCapture`` and encodes with
``cv2.VideoWriter``. Codec support is probed by opening a writer with the
matching fourcc. This backend records video only; audio constraints are
accepted and ignored.

The encoded container is finalized when the writer is released, so the
recorder emits a single chunk on stop regardless of the timeslice.
"""

import asyncio
import logging
import os
import sys
import tempfile
import threading
import time
from collections.abc import Callable
from pathlib import Path

import cv2

logger = logging.getLogger(__name__)

# (container, codec prefix) -> fourcc; codec "" matches a bare container
_FOURCCS: dict[tuple[str, str], str] = {
    ("video/mp4", "avc1"): "avc1",
    ("video/mp4", ""): "mp4v",
    ("video/webm", "vp9"): "VP90",
    ("video/webm", "vp8"): "VP80",
    ("video/webm", ""): "VP80",
}

_EXTENSIONS = {"video/mp4": ".mp4", "video/webm": ".webm"}


def fourcc_for(mime_type: str) -> str | None:
    """Map a MIME type such as ``video/webm;codecs=vp9,opus`` to a fourcc."""
    container, _, params = mime_type.partition(";")
    container = container.strip().lower()
    codecs = params.split("=", 1)[1] if "=" in params else ""
    video_codec = codecs.split(",")[0].strip().lower()
    for (known_container, prefix), fourcc in _FOURCCS.items():
        if known_container != container:
            continue
        if prefix and video_codec.startswith(prefix):
            return fourcc
        if not prefix and not video_codec:
            return fourcc
    return None


class OpenCVTrack:
    """A camera track; stopping it releases the capture device."""

    kind = "video"

    def __init__(self, capture: "cv2.VideoCapture") -> None:
        self.capture = capture
        self.ready_state = "live"
        self._lock = threading.Lock()

    def read(self):
        with self._lock:
            if self.ready_state != "live":
                return False, None
            return self.capture.read()

    def stop(self) -> None:
        with self._lock:
            if self.ready_state == "live":
                self.capture.release()
                self.ready_state = "ended"


class OpenCVStream:
    def __init__(self, track: OpenCVTrack, width: int, height: int, fps: float) -> None:
        self._tracks = [track]
        self.width = width
        self.height = height
        self.fps = fps

    @property
    def video_track(self) -> OpenCVTrack:
        return self._tracks[0]

    def get_tracks(self) -> list[OpenCVTrack]:
        return [t for t in self._tracks if t.ready_state == "live"]


class OpenCVRecorder:
    """Encodes frames from an :class:`OpenCVStream` on a worker thread."""

    def __init__(
        self,
        stream: OpenCVStream,
        mime_type: str,
        on_data: Callable[[bytes], None],
    ) -> None:
        self._stream = stream
        self._mime_type = mime_type
        self._on_data = on_data
        suffix = _EXTENSIONS.get(mime_type.split(";")[0], ".mp4")
        fd, path = tempfile.mkstemp(suffix=suffix, prefix="vidscribe-")
        os.close(fd)
        self._path = Path(path)
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._writer: cv2.VideoWriter | None = None

    def start(self, timeslice: float | None = None) -> None:
        fourcc = fourcc_for(self._mime_type) or "mp4v"
        self._writer = cv2.VideoWriter(
            str(self._path),
            cv2.VideoWriter_fourcc(*fourcc),
            self._stream.fps,
            (self._stream.width, self._stream.height),
        )
        if not self._writer.isOpened():
            self._cleanup()
            raise OSError(f"Cannot open video writer for {self._mime_type}")
        self._thread = threading.Thread(target=self._run, name="vidscribe-recorder", daemon=True)
        self._thread.start()

    def _run(self) -> None:
        interval = 1.0 / self._stream.fps
        track = self._stream.video_track
        while not self._stop_event.is_set():
            ok, frame = track.read()
            if not ok:
                break
            self._writer.write(frame)
            time.sleep(interval / 4)

    def _finish(self) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None
        if self._writer is not None:
            self._writer.release()
            self._writer = None

    async def stop(self) -> None:
        try:
            await asyncio.to_thread(self._finish)
            data = self._path.read_bytes()
        finally:
            self._cleanup()
        if data:
            self._on_data(data)

    def abort(self) -> None:
        self._finish()
        self._cleanup()

    def _cleanup(self) -> None:
        self._path.unlink(missing_ok=True)


class OpenCVMediaDevices:
    """``MediaDevices`` implementation for a local camera.

    Args:
        camera_index: OpenCV device index.
    """

    def __init__(self, camera_index: int = 0) -> None:
        self._camera_index = camera_index
        self._support_cache: dict[str, bool] = {}

    async def get_user_media(self, constraints: dict) -> OpenCVStream:
        # the worker thread cannot be interrupted; if the caller is cancelled
        # the camera it opens is released as soon as it arrives
        opening = asyncio.ensure_future(asyncio.to_thread(self._open, constraints))
        try:
            return await asyncio.shield(opening)
        except asyncio.CancelledError:
            opening.add_done_callback(_release_abandoned)
            raise

    def _open(self, constraints: dict) -> OpenCVStream:
        device = Path(f"/dev/video{self._camera_index}")
        if sys.platform.startswith("linux") and device.exists() and not os.access(device, os.R_OK):
            raise PermissionError(f"No read access to {device}")

        capture = cv2.VideoCapture(self._camera_index)
        if not capture.isOpened():
            capture.release()
            raise OSError(f"Camera {self._camera_index} could not be opened")

        video = constraints.get("video") or {}
        if isinstance(video, dict):
            width = (video.get("width") or {}).get("ideal")
            height = (video.get("height") or {}).get("ideal")
            fps = (video.get("frameRate") or {}).get("ideal")
            if width:
                capture.set(cv2.CAP_PROP_FRAME_WIDTH, width)
            if height:
                capture.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
            if fps:
                capture.set(cv2.CAP_PROP_FPS, fps)

        actual_fps = capture.get(cv2.CAP_PROP_FPS) or 30.0
        return OpenCVStream(
            OpenCVTrack(capture),
            width=int(capture.get(cv2.CAP_PROP_FRAME_WIDTH)),
            height=int(capture.get(cv2.CAP_PROP_FRAME_HEIGHT)),
            fps=float(actual_fps),
        )

    def is_type_supported(self, mime_type: str) -> bool:
        if mime_type not in self._support_cache:
            self._support_cache[mime_type] = self._probe(mime_type)
        return self._support_cache[mime_type]

    @staticmethod
    def _probe(mime_type: str) -> bool:
        fourcc = fourcc_for(mime_type)
        if fourcc is None:
            return False
        suffix = _EXTENSIONS.get(mime_type.split(";")[0].strip(), ".mp4")
        with tempfile.TemporaryDirectory() as tmp_dir:
            writer = cv2.VideoWriter(
                str(Path(tmp_dir) / f"probe{suffix}"),
                cv2.VideoWriter_fourcc(*fourcc),
                30.0,
                (64, 64),
            )
            supported = writer.isOpened()
            writer.release()
        logger.debug("Codec probe %s (%s): %s", mime_type, fourcc, supported)
        return supported

    def create_recorder(
        self,
        stream: OpenCVStream,
        mime_type: str,
        on_data: Callable[[bytes], None],
    ) -> OpenCVRecorder:
        return OpenCVRecorder(stream, mime_type, on_data)


def _release_abandoned(opening: "asyncio.Future[OpenCVStream]") -> None:
    if opening.cancelled() or opening.exception() is not None:
        return
    logger.info("Releasing camera opened for a cancelled acquisition")
    for track in opening.result().get_tracks():
        track.stop()
