from functools import lru_cache
from pathlib import Path
from typing import Generator

from sqlalchemy.orm import Session, sessionmaker

from src.common.db import create_sync_engine
from src.common.settings import Settings as CommonSettings


class Settings(CommonSettings):
    database_url: str = "sqlite:///./echo_tales.db"
    audio_dir: str = "data/audio"
    audio_retention_hours: float | None = 24
    openai_api_key: str | None = None
    openai_base_url: str | None = None
    openai_model: str = "gpt-4o"
    openai_image_model: str = "dall-e-3"
    openai_temperature: float = 0.7
    openai_max_tokens: int = 2000
    eleven_labs_api_key: str | None = None
    eleven_labs_api_url: str = "https://api.elevenlabs.io/v1"
    eleven_labs_model_id: str = "eleven_multilingual_v2"
    eleven_labs_timeout: float | None = None

    model_config = {"frozen": True}


@lru_cache
def get_settings() -> Settings:
    return Settings()


_engine = None
_SessionLocal: sessionmaker | None = None


def get_sessionmaker() -> sessionmaker:
    global _engine, _SessionLocal
    if _SessionLocal is None:
        settings = get_settings()
        _engine = create_sync_engine(settings.database_url)
        _SessionLocal = sessionmaker(
            bind=_engine, autoflush=False, autocommit=False, expire_on_commit=False
        )
    return _SessionLocal


def get_db() -> Generator[Session, None, None]:
    session_local = get_sessionmaker()
    db = session_local()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    from . import models

    _ = get_sessionmaker()
    assert _engine is not None
    models.Base.metadata.create_all(bind=_engine)


def ensure_audio_dir() -> Path:
    settings = get_settings()
    path = Path(settings.audio_dir)
    path.mkdir(parents=True, exist_ok=True)
    return path


@lru_cache
def get_voice_client():
    """Return the ElevenLabs client built from the current settings."""

    from .elevenlabs import ElevenLabsClient

    settings = get_settings()
    return ElevenLabsClient(
        api_key=settings.eleven_labs_api_key or "",
        base_url=settings.eleven_labs_api_url,
        model_id=settings.eleven_labs_model_id,
        timeout=settings.eleven_labs_timeout,
    )


@lru_cache
def get_openai_client():
    from openai import OpenAI

    settings = get_settings()
    return OpenAI(api_key=settings.openai_api_key, base_url=settings.openai_base_url)


@lru_cache
def get_story_generator():
    """Return the LLM story generator."""

    from .llm import ChatGPTStoryGenerator

    settings = get_settings()
    return ChatGPTStoryGenerator(
        client=get_openai_client(),
        model=settings.openai_model,
        temperature=settings.openai_temperature,
        max_tokens=settings.openai_max_tokens,
    )


@lru_cache
def get_image_generator():
    """Return the scene illustration generator."""

    from .images import OpenAIImageGenerator

    settings = get_settings()
    return OpenAIImageGenerator(
        client=get_openai_client(), model=settings.openai_image_model
    )
