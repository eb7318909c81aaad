"""Unit tests for the Streamlit-side APIClient.

Validates that uploads are sent as multipart field ``video``, that
server failure envelopes surface their ``error`` text, and that
transport failures are categorised.
"""

from unittest.mock import MagicMock, patch

import httpx
import pytest

from vidscribe.ui.api_client import (
    APIClient,
    MalformedResponseError,
    ServerError,
    TransportError,
)

_REQUEST = httpx.Request("POST", "http://test:8000/upload")


@pytest.fixture
def client():
    """Create an APIClient with a mocked httpx.Client."""
    with patch("vidscribe.ui.api_client.httpx.Client") as mock_cls:
        mock_http = MagicMock()
        mock_cls.return_value = mock_http
        api = APIClient(base_url="http://test:8000/")
        api._mock_http = mock_http  # expose for assertions
        yield api


def _status_error(status: int, body=None, text: str = "") -> httpx.HTTPStatusError:
    if body is not None:
        response = httpx.Response(status, json=body, request=_REQUEST)
    else:
        response = httpx.Response(status, text=text, request=_REQUEST)
    return httpx.HTTPStatusError("error", request=_REQUEST, response=response)


class TestUploadVideo:
    def test_multipart_field_and_timeout(self, client):
        resp = MagicMock()
        resp.json.return_value = {"success": True, "data": {"transcription": "hi"}}
        client._mock_http.post.return_value = resp

        body = client.upload_video(b"bytes", "clip.webm", "video/webm")

        client._mock_http.post.assert_called_once_with(
            "/upload",
            files={"video": ("clip.webm", b"bytes", "video/webm")},
            timeout=300.0,
        )
        resp.raise_for_status.assert_called_once()
        assert body["data"]["transcription"] == "hi"

    def test_non_json_body(self, client):
        resp = MagicMock()
        resp.json.side_effect = ValueError("not json")
        client._mock_http.post.return_value = resp

        with pytest.raises(MalformedResponseError):
            client.upload_video(b"bytes", "clip.webm", "video/webm")

    def test_server_error_message_from_envelope(self, client):
        resp = MagicMock()
        resp.raise_for_status.side_effect = _status_error(
            500,
            {
                "success": False,
                "error": "Failed to generate tags",
                "code": "TAGGING_ERROR",
                "timestamp": "2026-10-16T12:00:00+00:00",
            },
        )
        client._mock_http.post.return_value = resp

        with pytest.raises(ServerError) as exc_info:
            client.upload_video(b"bytes", "clip.webm", "video/webm")

        assert exc_info.value.message == "Failed to generate tags"
        assert exc_info.value.status_code == 500
        assert exc_info.value.category == "http"

    def test_server_error_plain_text(self, client):
        resp = MagicMock()
        resp.raise_for_status.side_effect = _status_error(502, text="Bad Gateway")
        client._mock_http.post.return_value = resp

        with pytest.raises(ServerError, match="Bad Gateway"):
            client.upload_video(b"bytes", "clip.webm", "video/webm")

    def test_connection_refused(self, client):
        client._mock_http.post.side_effect = httpx.ConnectError("refused", request=_REQUEST)

        with pytest.raises(TransportError) as exc_info:
            client.upload_video(b"bytes", "clip.webm", "video/webm")

        assert exc_info.value.category == "connection"

    def test_timeout(self, client):
        client._mock_http.post.side_effect = httpx.ReadTimeout("slow", request=_REQUEST)

        with pytest.raises(TransportError) as exc_info:
            client.upload_video(b"bytes", "clip.webm", "video/webm")

        assert exc_info.value.category == "timeout"


class TestRecords:
    def test_list_videos(self, client):
        resp = MagicMock()
        resp.json.return_value = [{"id": "1"}]
        client._mock_http.get.return_value = resp

        assert client.list_videos(limit=5) == [{"id": "1"}]
        client._mock_http.get.assert_called_once_with(
            "/videos", params={"limit": 5, "offset": 0}
        )

    def test_get_video_not_found(self, client):
        resp = MagicMock()
        resp.raise_for_status.side_effect = _status_error(
            404, {"success": False, "error": "Record not found: 7", "code": "RECORD_NOT_FOUND"}
        )
        client._mock_http.get.return_value = resp

        with pytest.raises(ServerError, match="Record not found: 7"):
            client.get_video("7")


class TestCheckConnection:
    def test_ok(self, client):
        resp = MagicMock()
        resp.json.return_value = {"status": "ok"}
        client._mock_http.get.return_value = resp
        assert client.check_connection() == (True, "Connected")

    def test_down(self, client):
        client._mock_http.get.side_effect = httpx.ConnectError("refused", request=_REQUEST)
        ok, message = client.check_connection()
        assert ok is False
        assert "not running" in message
