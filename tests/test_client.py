from typing import Any

import pytest

from services.echo_tales.app.schemas import StoryRequest, TTSRequest
from services.echo_tales.client import EchoTalesAPIError, EchoTalesClient


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, content: bytes = b"") -> None:
        self.status_code = status_code
        self._payload = payload
        self.content = content

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("no JSON body")
        return self._payload


class FakeSession:
    def __init__(self, response: FakeResponse) -> None:
        self.response = response
        self.calls: list[tuple[str, str, dict[str, Any]]] = []

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append(("POST", url, kwargs))
        return self.response

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append(("GET", url, kwargs))
        return self.response


def _client(response: FakeResponse) -> tuple[EchoTalesClient, FakeSession]:
    session = FakeSession(response)
    return EchoTalesClient("http://echo.test/", session=session), session


def test_generate_speech_sends_camel_case_fields() -> None:
    client, session = _client(FakeResponse(content=b"mp3"))
    request = TTSRequest(text="Hi", voiceId="v1", emotion="happy", speed=1.2, pitch=2)

    assert client.generate_speech(request) == b"mp3"

    method, url, kwargs = session.calls[0]
    assert (method, url) == ("POST", "http://echo.test/api/tts")
    assert kwargs["json"] == {
        "text": "Hi",
        "voiceId": "v1",
        "emotion": "happy",
        "speed": 1.2,
        "pitch": 2,
    }


def test_errors_surface_server_message() -> None:
    client, _ = _client(FakeResponse(500, {"message": "ElevenLabs API key not configured"}))
    with pytest.raises(EchoTalesAPIError) as excinfo:
        client.fetch_voices()
    assert str(excinfo.value) == "ElevenLabs API key not configured"
    assert excinfo.value.status_code == 500


def test_errors_without_body_use_fallback() -> None:
    client, _ = _client(FakeResponse(502))
    with pytest.raises(EchoTalesAPIError, match="Failed to clone voice"):
        client.clone_voice("Grandpa", [("a.mp3", b"1")])


def test_clone_voice_uploads_samples() -> None:
    client, session = _client(FakeResponse(201, {"voice_id": "new"}))
    assert client.clone_voice("Grandpa", [("a.mp3", b"1"), ("b.mp3", b"2")]) == {
        "voice_id": "new"
    }
    _, url, kwargs = session.calls[0]
    assert url == "http://echo.test/api/voices/clone"
    assert kwargs["data"] == {"name": "Grandpa"}
    assert kwargs["files"] == [("sample", ("a.mp3", b"1")), ("sample", ("b.mp3", b"2"))]


def test_generate_story_parses_response() -> None:
    payload = {
        "title": "T",
        "summary": "S",
        "scenes": [
            {
                "scene_number": 1,
                "title": "One",
                "content": "C",
                "image_prompt": "P",
                "image_url": "https://img.test/1.png",
            }
        ],
    }
    client, session = _client(FakeResponse(payload=payload))
    story = client.generate_story(StoryRequest(prompt="p", voiceId="v1"))

    assert story.scenes[0].image_url == "https://img.test/1.png"
    assert story.scenes[0].audio_url is None
    assert session.calls[0][2]["json"] == {
        "prompt": "p",
        "voiceId": "v1",
        "emotion": "neutral",
        "speed": 1.0,
        "pitch": 0,
    }


def test_generate_story_error_includes_details() -> None:
    client, _ = _client(
        FakeResponse(402, {"message": "API quota exceeded", "details": "Top up"})
    )
    with pytest.raises(EchoTalesAPIError) as excinfo:
        client.generate_story(StoryRequest(prompt="p", voiceId="v1"))
    assert str(excinfo.value) == "API quota exceeded: Top up"
    assert excinfo.value.details == "Top up"
