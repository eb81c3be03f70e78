import logging
import re

import requests
from fastapi import APIRouter, File, Form, Response, UploadFile, status
from fastapi.responses import FileResponse

from . import deps, schemas
from .elevenlabs import ProviderError, VoiceSample
from .llm import InvalidStoryRequestError, QuotaExceededError, StoryGenerationError
from .story import StoryOrchestrator, prune_audio

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

_AUDIO_NAME = re.compile(r"^[0-9a-f]{32}_scene_\d+\.mp3$")


class ApiError(Exception):
    """Error rendered as ``{message, details}`` with ``status_code``."""

    def __init__(
        self, status_code: int, message: str, details: str | None = None
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.details = details


def _require_voice_key(settings: deps.Settings) -> None:
    if not settings.eleven_labs_api_key:
        raise ApiError(500, "ElevenLabs API key not configured")


def _relay(exc: ProviderError) -> ApiError:
    return ApiError(exc.status_code, "Error from ElevenLabs API", exc.body)


@router.post("/tts")
def text_to_speech(data: schemas.TTSRequest) -> Response:
    settings = deps.get_settings()
    _require_voice_key(settings)
    # speed and pitch are validated only; the synthesis call does not take them
    logger.info(
        "Synthesizing %s characters with voice %s (speed %s, pitch %s)",
        len(data.text),
        data.voice_id,
        data.speed,
        data.pitch,
    )
    try:
        audio = deps.get_voice_client().synthesize(
            data.text, data.voice_id, data.emotion
        )
    except ProviderError as exc:
        raise _relay(exc) from exc
    except requests.RequestException as exc:
        logger.exception("Error processing TTS request")
        raise ApiError(500, "Internal server error") from exc
    return Response(
        content=audio,
        media_type="audio/mpeg",
        headers={"Content-Disposition": 'attachment; filename="narration.mp3"'},
    )


@router.get("/voices")
def list_voices() -> dict:
    settings = deps.get_settings()
    _require_voice_key(settings)
    try:
        return deps.get_voice_client().list_voices()
    except ProviderError as exc:
        raise _relay(exc) from exc
    except requests.RequestException as exc:
        logger.exception("Error fetching voices")
        raise ApiError(500, "Internal server error") from exc


@router.post("/voices/clone", status_code=status.HTTP_201_CREATED)
def clone_voice(
    name: str | None = Form(None),
    sample: list[UploadFile] | None = File(None),
) -> dict:
    if not sample:
        raise ApiError(400, "Voice sample file required")
    if not name:
        raise ApiError(400, "Voice name required")
    settings = deps.get_settings()
    _require_voice_key(settings)
    samples = [
        VoiceSample(
            filename=upload.filename or "sample",
            content=upload.file.read(),
            content_type=upload.content_type or "application/octet-stream",
        )
        for upload in sample
    ]
    try:
        return deps.get_voice_client().clone_voice(name, samples)
    except ProviderError as exc:
        raise _relay(exc) from exc
    except requests.RequestException as exc:
        logger.exception("Error processing voice cloning request")
        raise ApiError(500, "Internal server error") from exc


@router.post(
    "/stories",
    response_model=schemas.StoryResponse,
    response_model_exclude_none=True,
)
def generate_story(data: schemas.StoryRequest) -> schemas.StoryResponse:
    settings = deps.get_settings()
    if not settings.openai_api_key:
        raise ApiError(500, "OpenAI API key not configured")
    _require_voice_key(settings)

    audio_dir = deps.ensure_audio_dir()
    if settings.audio_retention_hours is not None:
        prune_audio(audio_dir, settings.audio_retention_hours * 3600)
    orchestrator = StoryOrchestrator(
        story_generator=deps.get_story_generator(),
        image_generator=deps.get_image_generator(),
        voice_client=deps.get_voice_client(),
        audio_dir=audio_dir,
    )
    try:
        return orchestrator.generate(data)
    except QuotaExceededError as exc:
        raise ApiError(
            402,
            "API quota exceeded",
            "The OpenAI API quota has been exceeded. Please update your API key "
            "or try again later.",
        ) from exc
    except InvalidStoryRequestError as exc:
        raise ApiError(
            400,
            "Invalid request to OpenAI API",
            str(exc) or "The request to OpenAI API was invalid.",
        ) from exc
    except StoryGenerationError as exc:
        raise ApiError(
            500,
            "Error with OpenAI services",
            "Unable to generate story content at this time.",
        ) from exc
    except Exception as exc:  # noqa: BLE001
        logger.exception("Error generating story")
        raise ApiError(
            500,
            "Error generating story",
            "An unexpected error occurred while generating your story. "
            "Please try again later.",
        ) from exc


@router.get("/audio/{filename}")
def get_audio(filename: str) -> FileResponse:
    if not _AUDIO_NAME.match(filename):
        raise ApiError(404, "Audio not found")
    path = deps.ensure_audio_dir() / filename
    if not path.is_file():
        raise ApiError(404, "Audio not found")
    return FileResponse(path, media_type="audio/mpeg")
