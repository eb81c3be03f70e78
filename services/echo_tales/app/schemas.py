from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class TTSRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: str = Field(min_length=1, max_length=5000)
    voice_id: str = Field(alias="voiceId", min_length=1)
    emotion: str
    speed: float = Field(ge=0.5, le=2.0, strict=True)
    pitch: float = Field(ge=-10, le=10, strict=True)


class StoryRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    prompt: str = Field(min_length=1)
    voice_id: str = Field(alias="voiceId", min_length=1)
    emotion: str = "neutral"
    speed: float = Field(default=1.0, ge=0.5, le=2.0, strict=True)
    pitch: float = Field(default=0, ge=-10, le=10, strict=True)


class StoryScene(BaseModel):
    scene_number: int
    title: str
    content: str
    image_prompt: str
    image_url: str | None = None
    audio_url: str | None = None


class StoryResponse(BaseModel):
    title: str
    summary: str
    scenes: list[StoryScene]


class ErrorResponse(BaseModel):
    message: str
    details: str | None = None
    errors: list[dict[str, Any]] | None = None
