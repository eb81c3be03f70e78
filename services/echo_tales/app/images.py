"""Scene illustrations through the OpenAI images API."""

from __future__ import annotations

import logging
from typing import Any

from openai import OpenAIError
from opentelemetry import trace

from src.common.metrics import PROVIDER_CALLS

logger = logging.getLogger(__name__)

COMIC_STYLE = (
    "Vibrant colors, dynamic composition, strong line work, dramatic lighting, "
    "superhero comic aesthetic."
)


class ImageGenerationError(Exception):
    """No illustration could be produced."""


def enhance_prompt(image_prompt: str) -> str:
    return f"Comic book style illustration of {image_prompt}. {COMIC_STYLE}"


class OpenAIImageGenerator:
    def __init__(
        self,
        client: Any,
        model: str = "dall-e-3",
        size: str = "1024x1024",
        quality: str = "standard",
        style: str = "vivid",
    ) -> None:
        self._client = client
        self._model = model
        self._size = size
        self._quality = quality
        self._style = style

    def generate(self, image_prompt: str) -> str:
        """Return the URL of an image drawn for ``image_prompt``."""

        tracer = trace.get_tracer(__name__)
        try:
            with tracer.start_as_current_span("provider.call:openai.images"):
                response = self._client.images.generate(
                    model=self._model,
                    prompt=enhance_prompt(image_prompt),
                    n=1,
                    size=self._size,
                    quality=self._quality,
                    style=self._style,
                )
        except OpenAIError as exc:
            PROVIDER_CALLS.labels("echo_tales", "openai", "images", "error").inc()
            raise ImageGenerationError(str(exc)) from exc
        PROVIDER_CALLS.labels("echo_tales", "openai", "images", "ok").inc()
        url = response.data[0].url if response.data else None
        if not url:
            raise ImageGenerationError("Image API returned no URL")
        return url
