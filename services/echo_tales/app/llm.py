"""Story writing through OpenAI chat completions."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Protocol

from openai import OpenAIError
from opentelemetry import trace
from pydantic import ValidationError

from src.common.metrics import PROVIDER_CALLS

from .schemas import StoryResponse

logger = logging.getLogger(__name__)

MIN_SCENES = 3
MAX_SCENES = 5

SYSTEM_PROMPT = (
    "You are a professional storyteller and comic book writer. You will create "
    "engaging, age-appropriate short stories in a comic book style, divided into "
    "scenes. Each scene should be vivid and visual with a focus on action and "
    "dialogue."
)

USER_PROMPT_TEMPLATE = """Create a story based on this prompt: "{prompt}". Format your response as a JSON object with the following structure:
{{
  "title": "Story title",
  "summary": "A brief summary of the story",
  "scenes": [
    {{
      "scene_number": 1,
      "title": "Scene title",
      "content": "Scene narrative text",
      "image_prompt": "Detailed visual prompt for generating an image of this scene in comic book style"
    }},
    ... (more scenes)
  ]
}}

Generate {min_scenes}-{max_scenes} scenes, each with descriptive scene content and very specific image prompts. The image prompts should be detailed for comic-book style illustrations."""


class StoryGenerationError(Exception):
    """The LLM could not produce a story."""


class QuotaExceededError(StoryGenerationError):
    """The provider account ran out of quota."""


class InvalidStoryRequestError(StoryGenerationError):
    """The provider rejected the request as invalid."""


class MalformedStoryError(StoryGenerationError):
    """The reply did not have the expected story shape."""


@dataclass
class ParsedStory:
    story: StoryResponse


@dataclass
class StoryParseFailure:
    diagnostic: str


StoryParseResult = ParsedStory | StoryParseFailure


class StoryGenerator(Protocol):
    def generate(self, prompt: str) -> StoryResponse:
        """Return a story with scenes for ``prompt``."""


def build_messages(prompt: str) -> list[dict[str, str]]:
    user_prompt = USER_PROMPT_TEMPLATE.format(
        prompt=prompt, min_scenes=MIN_SCENES, max_scenes=MAX_SCENES
    )
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": user_prompt},
    ]


def parse_story(content: str) -> StoryParseResult:
    """Validate the raw JSON reply and renumber scenes by position."""

    try:
        data: Any = json.loads(content)
    except json.JSONDecodeError as exc:
        return StoryParseFailure(f"reply is not valid JSON: {exc.msg}")
    if not isinstance(data, dict):
        return StoryParseFailure("reply is not a JSON object")
    try:
        story = StoryResponse.model_validate(data)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in exc.errors()
        )
        return StoryParseFailure(f"reply does not match the story shape: {problems}")
    if not story.scenes:
        return StoryParseFailure("reply contains no scenes")
    if not MIN_SCENES <= len(story.scenes) <= MAX_SCENES:
        logger.warning(
            "Story has %s scenes, expected %s-%s",
            len(story.scenes),
            MIN_SCENES,
            MAX_SCENES,
        )
    scenes = [
        scene.model_copy(
            update={"scene_number": position, "image_url": None, "audio_url": None}
        )
        for position, scene in enumerate(story.scenes, start=1)
    ]
    return ParsedStory(story.model_copy(update={"scenes": scenes}))


def classify_openai_error(exc: Exception) -> StoryGenerationError:
    """Translate an OpenAI error into the story error hierarchy."""

    code = getattr(exc, "code", None)
    kind = getattr(exc, "type", None)
    message = str(getattr(exc, "message", None) or exc)
    if "insufficient_quota" in (code, kind) or "quota" in message.lower():
        return QuotaExceededError(message)
    if "invalid_request_error" in (code, kind):
        return InvalidStoryRequestError(message)
    return StoryGenerationError(message)


class ChatGPTStoryGenerator:
    """OpenAI chat completions client producing JSON stories."""

    def __init__(
        self,
        client: Any,
        model: str = "gpt-4o",
        temperature: float = 0.7,
        max_tokens: int = 2000,
    ) -> None:
        self._client = client
        self._model = model
        self._temperature = temperature
        self._max_tokens = max_tokens

    def generate(self, prompt: str) -> StoryResponse:
        """Ask the model for a story and return the validated result."""

        tracer = trace.get_tracer(__name__)
        try:
            with tracer.start_as_current_span("provider.call:openai.chat"):
                response = self._client.chat.completions.create(
                    model=self._model,
                    messages=build_messages(prompt),
                    response_format={"type": "json_object"},
                    temperature=self._temperature,
                    max_tokens=self._max_tokens,
                )
        except OpenAIError as exc:
            PROVIDER_CALLS.labels("echo_tales", "openai", "chat", "error").inc()
            logger.exception("OpenAI story completion failed")
            raise classify_openai_error(exc) from exc
        PROVIDER_CALLS.labels("echo_tales", "openai", "chat", "ok").inc()
        content = response.choices[0].message.content or "{}"
        result = parse_story(content)
        if isinstance(result, StoryParseFailure):
            logger.error("Unusable story reply: %s", result.diagnostic)
            raise MalformedStoryError(result.diagnostic)
        return result.story
