"""Tests for the OpenCV media backend (no camera needed)."""

import asyncio
import threading
from unittest.mock import MagicMock, patch

import pytest

from vidscribe.ui.devices import OpenCVMediaDevices, OpenCVStream, OpenCVTrack, fourcc_for


@pytest.mark.parametrize(
    ("mime_type", "expected"),
    [
        ("video/mp4;codecs=avc1.42E01E,mp4a.40.2", "avc1"),
        ("video/webm;codecs=vp9,opus", "VP90"),
        ("video/webm;codecs=vp8,opus", "VP80"),
        ("video/webm", "VP80"),
        ("video/mp4", "mp4v"),
        ("video/x-matroska", None),
        ("video/webm;codecs=av1", None),
    ],
)
def test_fourcc_for(mime_type, expected):
    assert fourcc_for(mime_type) == expected


def test_unknown_type_is_unsupported():
    assert OpenCVMediaDevices().is_type_supported("video/ogg") is False


def test_probe_result_is_cached():
    devices = OpenCVMediaDevices()
    with patch.object(OpenCVMediaDevices, "_probe", return_value=True) as probe:
        assert devices.is_type_supported("video/webm")
        assert devices.is_type_supported("video/webm")
    probe.assert_called_once_with("video/webm")


def test_track_stop_releases_capture_once():
    capture = MagicMock()
    track = OpenCVTrack(capture)
    stream = OpenCVStream(track, width=640, height=480, fps=30.0)

    track.stop()
    track.stop()

    capture.release.assert_called_once()
    assert track.ready_state == "ended"
    assert stream.get_tracks() == []
    assert track.read() == (False, None)


async def test_unopened_camera_raises_os_error():
    capture = MagicMock()
    capture.isOpened.return_value = False
    devices = OpenCVMediaDevices(camera_index=99)
    with patch("vidscribe.ui.devices.cv2.VideoCapture", return_value=capture):
        with pytest.raises(OSError, match="could not be opened"):
            await devices.get_user_media({"video": True, "audio": True})
    capture.release.assert_called_once()


async def test_cancelled_acquisition_releases_camera_when_it_opens():
    capture = MagicMock()
    stream = OpenCVStream(OpenCVTrack(capture), width=640, height=480, fps=30.0)
    opening = threading.Event()
    proceed = threading.Event()

    def slow_open(constraints):
        opening.set()
        proceed.wait(timeout=2)
        return stream

    devices = OpenCVMediaDevices()
    with patch.object(devices, "_open", side_effect=slow_open):
        task = asyncio.create_task(devices.get_user_media({"video": True}))
        assert await asyncio.to_thread(opening.wait, 2)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        proceed.set()
        for _ in range(200):
            if capture.release.called:
                break
            await asyncio.sleep(0.01)

    capture.release.assert_called_once()
    assert stream.get_tracks() == []
