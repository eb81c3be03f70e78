"""Story orchestration: text, then illustrations, then narration."""

from __future__ import annotations

import time
from pathlib import Path
from typing import Protocol
from uuid import uuid4

from src.common.logging import get_logger
from src.common.metrics import JOB_DURATION

from .elevenlabs import ElevenLabsClient
from .enrichment import enrich_scenes
from .llm import StoryGenerator
from .schemas import StoryRequest, StoryResponse, StoryScene

logger = get_logger(__name__)

AUDIO_ROUTE = "/api/audio"


class ImageGenerator(Protocol):
    def generate(self, image_prompt: str) -> str:
        """Return an image URL."""


def scene_audio_filename(story_id: str, scene_number: int) -> str:
    return f"{story_id}_scene_{scene_number}.mp3"


def prune_audio(audio_dir: Path, max_age_seconds: float) -> int:
    """Delete saved narration files older than ``max_age_seconds``."""

    cutoff = time.time() - max_age_seconds
    removed = 0
    for path in audio_dir.glob("*_scene_*.mp3"):
        try:
            expired = path.stat().st_mtime < cutoff
        except FileNotFoundError:
            continue
        if expired:
            path.unlink(missing_ok=True)
            removed += 1
    if removed:
        logger.info("audio_pruned", removed=removed, audio_dir=str(audio_dir))
    return removed


class StoryOrchestrator:
    """Sequence the LLM, image and voice providers for one story request."""

    def __init__(
        self,
        story_generator: StoryGenerator,
        image_generator: ImageGenerator,
        voice_client: ElevenLabsClient,
        audio_dir: Path,
    ) -> None:
        self._story_generator = story_generator
        self._image_generator = image_generator
        self._voice_client = voice_client
        self._audio_dir = audio_dir

    def generate(self, request: StoryRequest) -> StoryResponse:
        start = time.monotonic()
        story_id = uuid4().hex
        log = logger.bind(story_id=story_id)

        story = self._story_generator.generate(request.prompt)
        log.info("story_written", title=story.title, scenes=len(story.scenes))

        image_outcomes = enrich_scenes(
            story.scenes,
            lambda scene: self._image_generator.generate(scene.image_prompt),
            step="image",
        )
        scenes = [
            scene.model_copy(update={"image_url": outcome.value if outcome.ok else None})
            for scene, outcome in zip(story.scenes, image_outcomes)
        ]

        def narrate(scene: StoryScene) -> str:
            audio = self._voice_client.synthesize(
                scene.content, request.voice_id, request.emotion
            )
            filename = scene_audio_filename(story_id, scene.scene_number)
            (self._audio_dir / filename).write_bytes(audio)
            return f"{AUDIO_ROUTE}/{filename}"

        audio_outcomes = enrich_scenes(scenes, narrate, step="audio")
        scenes = [
            scene.model_copy(update={"audio_url": outcome.value if outcome.ok else None})
            for scene, outcome in zip(scenes, audio_outcomes)
        ]

        log.info(
            "story_enriched",
            images=sum(outcome.ok for outcome in image_outcomes),
            audio=sum(outcome.ok for outcome in audio_outcomes),
            # speed and pitch are validated but the synthesis call does not take them
            speed=request.speed,
            pitch=request.pitch,
        )
        JOB_DURATION.labels("echo_tales", "generate_story").observe(
            time.monotonic() - start
        )
        return story.model_copy(update={"scenes": scenes})
