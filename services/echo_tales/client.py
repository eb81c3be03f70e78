"""HTTP client for the Echo Tales API."""

from __future__ import annotations

from typing import Any, Sequence

import requests

from services.echo_tales.app.schemas import StoryRequest, StoryResponse, TTSRequest


class EchoTalesAPIError(Exception):
    """The server answered with an error body."""

    def __init__(
        self, message: str, status_code: int, details: str | None = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details


class EchoTalesClient:
    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        session: requests.Session | None = None,
        timeout: float | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._session = session or requests.Session()
        self._timeout = timeout

    @staticmethod
    def _error_body(response: requests.Response) -> dict[str, Any]:
        try:
            body = response.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}

    def _raise_for_error(self, response: requests.Response, fallback: str) -> None:
        if response.ok:
            return
        body = self._error_body(response)
        raise EchoTalesAPIError(
            body.get("message") or fallback, response.status_code, body.get("details")
        )

    def generate_speech(self, request: TTSRequest) -> bytes:
        """Return narration audio (MP3 bytes) for ``request``."""

        response = self._session.post(
            f"{self._base_url}/api/tts",
            json=request.model_dump(by_alias=True),
            timeout=self._timeout,
        )
        self._raise_for_error(response, "Failed to generate speech")
        return response.content

    def fetch_voices(self) -> Any:
        response = self._session.get(
            f"{self._base_url}/api/voices", timeout=self._timeout
        )
        self._raise_for_error(response, "Failed to fetch voices")
        return response.json()

    def clone_voice(self, name: str, samples: Sequence[tuple[str, bytes]]) -> Any:
        """Upload ``(filename, content)`` samples as a new cloned voice."""

        files = [("sample", (filename, content)) for filename, content in samples]
        response = self._session.post(
            f"{self._base_url}/api/voices/clone",
            data={"name": name},
            files=files,
            timeout=self._timeout,
        )
        self._raise_for_error(response, "Failed to clone voice")
        return response.json()

    def generate_story(self, request: StoryRequest) -> StoryResponse:
        """Generate an illustrated, narrated story.

        Error messages carry the server details as ``"<message>: <details>"``.
        """

        response = self._session.post(
            f"{self._base_url}/api/stories",
            json=request.model_dump(by_alias=True),
            timeout=self._timeout,
        )
        if not response.ok:
            body = self._error_body(response)
            message = body.get("message") or "Failed to generate story"
            details = body.get("details")
            raise EchoTalesAPIError(
                f"{message}: {details}" if details else message,
                response.status_code,
                details,
            )
        return StoryResponse.model_validate(response.json())
