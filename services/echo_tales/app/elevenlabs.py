"""ElevenLabs text-to-speech and voice cloning client."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import asdict, dataclass
from typing import Any, Iterator, Sequence

import requests
from opentelemetry import trace

from src.common.metrics import PROVIDER_CALLS

logger = logging.getLogger(__name__)

_SERVICE = "echo_tales"
_PROVIDER = "elevenlabs"
_EXPRESSIVE_EMOTIONS = ("happy", "excited")
CLONE_DESCRIPTION = "Custom voice created via Echo Tales"


class ProviderError(Exception):
    """Non-success answer from the voice provider, kept verbatim."""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"ElevenLabs responded with {status_code}")
        self.status_code = status_code
        self.body = body


@dataclass
class VoiceSettings:
    """Low-level synthesis tuning sent with every request."""

    stability: float = 0.5
    similarity_boost: float = 0.75
    style: float = 0.0
    use_speaker_boost: bool = True
    style_exaggeration: float = 0.3

    def as_payload(self) -> dict[str, Any]:
        return asdict(self)


def voice_settings_for(emotion: str) -> VoiceSettings:
    """Map an emotion label onto fixed voice settings."""

    settings = VoiceSettings(
        style=0.0 if emotion == "neutral" else 0.5,
        style_exaggeration=0.75 if emotion in _EXPRESSIVE_EMOTIONS else 0.3,
    )
    if emotion == "whisper":
        settings.stability = 0.8
        settings.similarity_boost = 0.3
    return settings


@dataclass
class VoiceSample:
    """One uploaded audio file used for cloning."""

    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


class ElevenLabsClient:
    """Thin wrapper over the ElevenLabs REST API."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.elevenlabs.io/v1",
        model_id: str = "eleven_multilingual_v2",
        timeout: float | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._model_id = model_id
        self._timeout = timeout
        self._session = session
        self._tracer = trace.get_tracer(__name__)

    @contextmanager
    def _session_scope(self) -> Iterator[requests.Session]:
        """Yield the injected session, or a fresh one closed after the call."""

        if self._session is not None:
            yield self._session
            return
        with requests.Session() as session:
            yield session

    def _headers(self, **extra: str) -> dict[str, str]:
        return {"xi-api-key": self._api_key, **extra}

    def _check(self, response: requests.Response, operation: str) -> None:
        if response.ok:
            PROVIDER_CALLS.labels(_SERVICE, _PROVIDER, operation, "ok").inc()
            return
        PROVIDER_CALLS.labels(_SERVICE, _PROVIDER, operation, "error").inc()
        logger.warning(
            "ElevenLabs %s failed with status %s", operation, response.status_code
        )
        raise ProviderError(response.status_code, response.text)

    def synthesize(self, text: str, voice_id: str, emotion: str) -> bytes:
        """Return MP3 bytes for ``text`` spoken by ``voice_id``."""

        payload = {
            "text": text,
            "model_id": self._model_id,
            "voice_settings": voice_settings_for(emotion).as_payload(),
        }
        with self._tracer.start_as_current_span("provider.call:elevenlabs.tts"):
            with self._session_scope() as session:
                response = session.post(
                    f"{self._base_url}/text-to-speech/{voice_id}",
                    params={"optimize_streaming_latency": 0},
                    json=payload,
                    headers=self._headers(**{"Content-Type": "application/json"}),
                    timeout=self._timeout,
                )
        self._check(response, "tts")
        return response.content

    def list_voices(self) -> Any:
        """Return the provider's voice catalogue unchanged."""

        with self._tracer.start_as_current_span("provider.call:elevenlabs.voices"):
            with self._session_scope() as session:
                response = session.get(
                    f"{self._base_url}/voices",
                    headers=self._headers(),
                    timeout=self._timeout,
                )
        self._check(response, "voices")
        return response.json()

    def clone_voice(self, name: str, samples: Sequence[VoiceSample]) -> Any:
        """Register a cloned voice from one or more samples."""

        files = [
            ("files", (sample.filename, sample.content, sample.content_type))
            for sample in samples
        ]
        with self._tracer.start_as_current_span("provider.call:elevenlabs.clone"):
            with self._session_scope() as session:
                response = session.post(
                    f"{self._base_url}/voices/add",
                    data={"name": name, "description": CLONE_DESCRIPTION},
                    files=files,
                    headers=self._headers(),
                    timeout=self._timeout,
                )
        self._check(response, "clone")
        return response.json()
