"""
Capture controller — camera/microphone recording state machine.

States: idle -> acquiring -> ready -> countdown -> recording -> stopped

``acquiring`` falls back to ``idle`` on a permission or device error;
``recording`` ends only through :meth:`CaptureController.stop` or the
auto-stop timer. ``reset`` and ``close`` are valid in every state and
always release the hardware.

The controller talks to the platform through the small ``MediaDevices``
protocol below, modelled on the browser media-capture API, so the same
state machine drives the OpenCV backend in :mod:`vidscribe.ui.devices`
and the fakes used in tests.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum
from typing import Protocol

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Device protocol
# ---------------------------------------------------------------------------


class MediaTrack(Protocol):
    kind: str  # "video" or "audio"
    ready_state: str  # "live" or "ended"

    def stop(self) -> None: ...


class MediaStream(Protocol):
    def get_tracks(self) -> list[MediaTrack]: ...


class MediaRecorder(Protocol):
    def start(self, timeslice: float | None = None) -> None:
        """Begin encoding; emit data every *timeslice* seconds if given."""

    async def stop(self) -> None:
        """Finish encoding; all remaining data is emitted before returning."""

    def abort(self) -> None:
        """Stop encoding without emitting remaining data."""


class MediaDevices(Protocol):
    async def get_user_media(self, constraints: dict) -> MediaStream:
        """Open camera/microphone. Raises ``PermissionError`` on user denial."""

    def is_type_supported(self, mime_type: str) -> bool: ...

    def create_recorder(
        self,
        stream: MediaStream,
        mime_type: str,
        on_data: Callable[[bytes], None],
    ) -> MediaRecorder: ...


# ---------------------------------------------------------------------------
# Encodings
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MediaEncoding:
    """A container + codec combination the recorder can produce."""

    mime_type: str
    extension: str

    @property
    def container(self) -> str:
        return self.mime_type.split(";")[0]


# Probe order: Safari/iOS-class runtimes only record MP4 (H.264/AAC),
# Chromium/Firefox-class runtimes prefer WebM.
CANDIDATE_ENCODINGS: tuple[MediaEncoding, ...] = (
    MediaEncoding("video/mp4;codecs=avc1.42E01E,mp4a.40.2", "mp4"),
    MediaEncoding("video/webm;codecs=vp9,opus", "webm"),
    MediaEncoding("video/webm;codecs=vp8,opus", "webm"),
    MediaEncoding("video/webm", "webm"),
    MediaEncoding("video/mp4", "mp4"),
)

FALLBACK_ENCODING = MediaEncoding("video/webm", "webm")


def negotiate_encoding(
    is_supported: Callable[[str], bool],
    candidates: tuple[MediaEncoding, ...] = CANDIDATE_ENCODINGS,
    fallback: MediaEncoding = FALLBACK_ENCODING,
) -> MediaEncoding:
    """Return the first candidate the runtime reports as supported."""
    for encoding in candidates:
        if is_supported(encoding.mime_type):
            return encoding
    logger.warning("No candidate encoding supported; falling back to %s", fallback.mime_type)
    return fallback


DEFAULT_CONSTRAINTS: dict = {
    "video": {
        "width": {"ideal": 1920},
        "height": {"ideal": 1080},
        "frameRate": {"ideal": 30},
        "facingMode": "user",
    },
    "audio": True,
}

# ---------------------------------------------------------------------------
# Errors and results
# ---------------------------------------------------------------------------


class CaptureError(Exception):
    """Base class for capture failures shown to the user."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class PermissionDeniedError(CaptureError):
    def __init__(self) -> None:
        super().__init__(
            "Camera or microphone access was denied. "
            "Allow access in your browser or system privacy settings and try again."
        )


class DeviceUnavailableError(CaptureError):
    def __init__(self, reason: str = "") -> None:
        message = (
            "No usable camera or microphone was found. "
            "Check that a device is connected and not in use by another application."
        )
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class CaptureStateError(CaptureError):
    """Raised when an operation is not valid in the current state."""


@dataclass(frozen=True)
class FinishedMedia:
    """A finalized recording ready for upload."""

    data: bytes
    filename: str
    mime_type: str

    @property
    def size(self) -> int:
        return len(self.data)


class CaptureState(StrEnum):
    idle = "idle"
    acquiring = "acquiring"
    ready = "ready"
    countdown = "countdown"
    recording = "recording"
    stopped = "stopped"


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------


class CaptureController:
    """Drives one capture session at a time.

    Args:
        devices: Platform media backend.
        countdown_seconds: Pre-roll ticks before recording (0 disables).
        max_duration: Seconds after which recording stops automatically.
        timeslice: Emit recorder data every N seconds (None = only on stop).
        candidates: Encodings to probe, in priority order.
        on_countdown: Called with the remaining seconds on each tick.
        on_finished: Called once with the finalized media.
    """

    def __init__(
        self,
        devices: MediaDevices,
        countdown_seconds: int = 3,
        max_duration: float = 60.0,
        timeslice: float | None = 1.0,
        candidates: tuple[MediaEncoding, ...] = CANDIDATE_ENCODINGS,
        on_countdown: Callable[[int], None] | None = None,
        on_finished: Callable[[FinishedMedia], Awaitable[None] | None] | None = None,
    ) -> None:
        self._devices = devices
        self._countdown_seconds = countdown_seconds
        self._max_duration = max_duration
        self._timeslice = timeslice
        self._candidates = candidates
        self._on_countdown = on_countdown
        self._on_finished = on_finished

        self._state = CaptureState.idle
        self._constraints: dict = DEFAULT_CONSTRAINTS
        self._stream: MediaStream | None = None
        self._recorder: MediaRecorder | None = None
        self._encoding: MediaEncoding | None = None
        self._chunks: list[bytes] = []
        self._finished: FinishedMedia | None = None
        self._countdown_task: asyncio.Task | None = None
        self._auto_stop_task: asyncio.Task | None = None
        self._deadline: float | None = None
        # bumped by every teardown; stale acquisitions compare against it
        self._generation = 0

    # -- introspection --

    @property
    def state(self) -> CaptureState:
        return self._state

    @property
    def stream(self) -> MediaStream | None:
        return self._stream

    @property
    def encoding(self) -> MediaEncoding | None:
        return self._encoding

    @property
    def finished(self) -> FinishedMedia | None:
        return self._finished

    @property
    def remaining_seconds(self) -> float | None:
        """Seconds left before auto-stop while recording."""
        if self._state != CaptureState.recording or self._deadline is None:
            return None
        return max(0.0, self._deadline - asyncio.get_running_loop().time())

    # -- scoped acquisition --

    async def __aenter__(self) -> "CaptureController":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    # -- operations --

    async def acquire(self, constraints: dict | None = None) -> MediaStream:
        """Open camera and microphone. Valid only in ``idle``."""
        if self._state != CaptureState.idle:
            raise CaptureStateError(f"Cannot acquire devices while {self._state}")

        self._constraints = constraints or self._constraints
        self._state = CaptureState.acquiring
        generation = self._generation
        try:
            stream = await self._devices.get_user_media(self._constraints)
        except asyncio.CancelledError:
            if generation == self._generation:
                self._state = CaptureState.idle
            logger.info("Media acquisition cancelled")
            raise
        except PermissionError as exc:
            if generation == self._generation:
                self._state = CaptureState.idle
            logger.warning("Media permission denied: %s", exc)
            raise PermissionDeniedError() from exc
        except Exception as exc:
            if generation == self._generation:
                self._state = CaptureState.idle
            logger.warning("Media device unavailable: %s", exc)
            raise DeviceUnavailableError(str(exc)) from exc

        if generation != self._generation:
            # reset()/close() ran while the permission prompt was open
            _stop_tracks(stream)
            raise CaptureStateError("Capture was reset during acquisition")

        self._stream = stream
        self._state = CaptureState.ready
        logger.info("Media acquired (%d tracks)", len(stream.get_tracks()))
        return stream

    async def start(self) -> None:
        """Run the countdown, then start recording. Valid only in ``ready``."""
        if self._state != CaptureState.ready or self._stream is None:
            raise CaptureStateError(f"Cannot start recording while {self._state}")

        self._chunks = []
        self._finished = None
        if self._countdown_seconds > 0:
            self._state = CaptureState.countdown
            self._countdown_task = asyncio.create_task(self._countdown())
            try:
                await self._countdown_task
            except asyncio.CancelledError:
                if self._state != CaptureState.countdown:
                    # aborted by stop() or reset()
                    return
                self._state = CaptureState.ready
                raise
            finally:
                self._countdown_task = None
            if self._state != CaptureState.countdown:
                return
        self._begin_recording()

    async def _countdown(self) -> None:
        for remaining in range(self._countdown_seconds, 0, -1):
            if self._on_countdown is not None:
                self._on_countdown(remaining)
            await asyncio.sleep(1)

    def _begin_recording(self) -> None:
        try:
            self._encoding = negotiate_encoding(self._devices.is_type_supported, self._candidates)
            self._recorder = self._devices.create_recorder(
                self._stream, self._encoding.mime_type, self._on_data
            )
            self._recorder.start(self._timeslice)
        except Exception as exc:
            logger.exception("Failed to start recorder")
            self._recorder = None
            self._release()
            self._state = CaptureState.idle
            raise DeviceUnavailableError(str(exc)) from exc

        self._state = CaptureState.recording
        loop = asyncio.get_running_loop()
        self._deadline = loop.time() + self._max_duration
        self._auto_stop_task = asyncio.create_task(self._auto_stop())
        logger.info(
            "Recording started (%s, max %.0fs)", self._encoding.mime_type, self._max_duration
        )

    def _on_data(self, chunk: bytes) -> None:
        if chunk and self._state in (CaptureState.recording, CaptureState.stopped):
            self._chunks.append(chunk)

    async def _auto_stop(self) -> None:
        await asyncio.sleep(self._max_duration)
        logger.info("Maximum duration reached; stopping recording")
        self._auto_stop_task = None
        await self.stop()

    async def stop(self) -> FinishedMedia | None:
        """Finish recording and return the media.

        A second call returns the same result; during the countdown the
        countdown is cancelled and ``None`` is returned.
        """
        if self._state == CaptureState.stopped:
            return self._finished
        if self._state == CaptureState.countdown:
            self._cancel_countdown()
            self._state = CaptureState.ready
            return None
        if self._state != CaptureState.recording:
            return None

        self._state = CaptureState.stopped
        self._cancel_auto_stop()
        generation = self._generation
        recorder, self._recorder = self._recorder, None
        try:
            if recorder is not None:
                await recorder.stop()
        finally:
            # a teardown already released this session's stream
            if generation == self._generation:
                self._release()

        if generation != self._generation:
            # reset()/close() discarded this session while the recorder drained
            logger.info("Recording discarded before it finished")
            return None

        encoding = self._encoding or FALLBACK_ENCODING
        stamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%S")
        self._finished = FinishedMedia(
            data=b"".join(self._chunks),
            filename=f"recorded-video-{stamp}.{encoding.extension}",
            mime_type=encoding.mime_type,
        )
        self._chunks = []
        logger.info("Recording finished: %d bytes", self._finished.size)

        if self._on_finished is not None:
            result = self._on_finished(self._finished)
            if asyncio.iscoroutine(result):
                await result
        return self._finished

    async def reset(self, reacquire: bool = True) -> None:
        """Discard the session, release hardware, and optionally re-acquire."""
        self._teardown()
        if reacquire:
            await self.acquire()

    async def close(self) -> None:
        """Release everything; the controller returns to ``idle``."""
        self._teardown()

    def _teardown(self) -> None:
        self._generation += 1
        self._cancel_countdown()
        self._cancel_auto_stop()
        recorder, self._recorder = self._recorder, None
        if recorder is not None:
            recorder.abort()
        self._release()
        self._chunks = []
        self._finished = None
        self._encoding = None
        self._state = CaptureState.idle

    def _cancel_countdown(self) -> None:
        if self._countdown_task is not None and not self._countdown_task.done():
            self._countdown_task.cancel()

    def _cancel_auto_stop(self) -> None:
        task, self._auto_stop_task = self._auto_stop_task, None
        self._deadline = None
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    def _release(self) -> None:
        stream, self._stream = self._stream, None
        if stream is not None:
            _stop_tracks(stream)


def _stop_tracks(stream: MediaStream) -> None:
    for track in stream.get_tracks():
        try:
            track.stop()
        except Exception:
            logger.warning("Failed to stop %s track", getattr(track, "kind", "media"))
