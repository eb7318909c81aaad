"""
Synchronous HTTP client for the VidScribe backend API.

Uses ``httpx.Client`` (sync) because Streamlit scripts run synchronously.
"""

import logging

import httpx
import streamlit as st

logger = logging.getLogger(__name__)


class APIError(Exception):
    """User-friendly API error with categorized message.

    Categories: "connection", "timeout", "http", "network", "malformed",
    "validation", "busy", "unknown". Used by the UI to display appropriate
    error messages.
    """

    def __init__(self, message: str, category: str = "unknown") -> None:
        self.message = message
        self.category = category
        super().__init__(message)


class TransportError(APIError):
    """The request never produced an HTTP response (connect, timeout, network)."""


class ServerError(APIError):
    """The server answered with a non-2xx status; carries its error message."""

    def __init__(self, message: str, status_code: int) -> None:
        self.status_code = status_code
        super().__init__(message, category="http")


class MalformedResponseError(APIError):
    """A 2xx response whose body lacks the expected content."""

    def __init__(self, message: str) -> None:
        super().__init__(message, category="malformed")


def _server_message(response: httpx.Response) -> str:
    """Pull the human-readable error out of a failure envelope."""
    try:
        body = response.json()
    except ValueError:
        return response.text or f"Upload failed ({response.status_code})"
    if isinstance(body, dict):
        message = body.get("error") or body.get("detail")
        if message:
            return str(message)
    return response.text or f"Upload failed ({response.status_code})"


class APIClient:
    """Thin synchronous wrapper around httpx for calling the FastAPI backend.

    All methods return parsed JSON or raise an ``APIError`` subclass with
    user-friendly messages for display in the UI.
    """

    def __init__(self, base_url: str = "http://localhost:8000", timeout: float = 30.0) -> None:
        """Initialize the HTTP client.

        Args:
            base_url: Base URL of the VidScribe FastAPI backend.
            timeout: Default request timeout in seconds.
        """
        self._base_url = base_url.rstrip("/")
        self._client = httpx.Client(base_url=self._base_url, timeout=timeout)

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        """Execute an HTTP request with user-friendly error handling.

        Args:
            method: HTTP method name ("get", "post").
            path: API endpoint path (e.g. "/upload").
            **kwargs: Passed through to httpx (files, params, timeout, etc.).

        Returns:
            The httpx Response object with a successful status code.

        Raises:
            TransportError: On connection, timeout, or other network errors.
            ServerError: On a non-2xx status.
        """
        try:
            resp = getattr(self._client, method)(path, **kwargs)
            resp.raise_for_status()
            return resp
        except httpx.ConnectError:
            raise TransportError(
                "Backend server is not running. "
                "Start it with: `uvicorn vidscribe.api.app:app --port 8000`",
                category="connection",
            ) from None
        except httpx.TimeoutException:
            raise TransportError(
                "Request timed out. The server may be overloaded.",
                category="timeout",
            ) from None
        except httpx.HTTPStatusError as exc:
            raise ServerError(
                _server_message(exc.response), status_code=exc.response.status_code
            ) from None
        except httpx.HTTPError as exc:
            raise TransportError(f"Network error: {exc}", category="network") from None

    # -- health --

    def health_check(self) -> dict:
        return self._request("get", "/health").json()

    def check_connection(self) -> tuple[bool, str]:
        """Check if the backend is reachable. Returns (ok, message)."""
        try:
            self.health_check()
            return True, "Connected"
        except APIError as exc:
            return False, exc.message

    # -- upload --

    def upload_video(
        self,
        data: bytes,
        filename: str,
        mime_type: str,
        timeout: float = 300.0,
    ) -> dict:
        """POST a video as multipart field ``video`` and return the JSON body.

        Transcription and tagging can take a minute, hence the long timeout.
        """
        resp = self._request(
            "post",
            "/upload",
            files={"video": (filename, data, mime_type)},
            timeout=timeout,
        )
        try:
            return resp.json()
        except ValueError:
            raise MalformedResponseError("Server returned a non-JSON response") from None

    # -- records --

    def list_videos(self, limit: int = 20, offset: int = 0) -> list[dict]:
        return self._request("get", "/videos", params={"limit": limit, "offset": offset}).json()

    def get_video(self, record_id: str) -> dict:
        return self._request("get", f"/videos/{record_id}").json()


@st.cache_resource
def get_api_client(base_url: str = "http://localhost:8000") -> APIClient:
    """Return a cached APIClient, keyed by base_url.

    Uses Streamlit's ``cache_resource`` to persist the client across reruns.
    """
    return APIClient(base_url=base_url)
