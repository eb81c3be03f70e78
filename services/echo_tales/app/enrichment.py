"""Best-effort enrichment of story scenes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, Sequence, TypeVar

from src.common.logging import get_logger
from src.common.metrics import ENRICHMENT_OUTCOMES

from .schemas import StoryScene

T = TypeVar("T")

logger = get_logger(__name__)


@dataclass
class EnrichmentOutcome(Generic[T]):
    """Result of enriching one scene."""

    scene_number: int
    value: T | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def enrich_scenes(
    scenes: Sequence[StoryScene],
    operation: Callable[[StoryScene], T],
    step: str,
) -> list[EnrichmentOutcome[T]]:
    """Run ``operation`` for each scene in order without aborting on failures.

    The returned outcomes are aligned with ``scenes``. A failing scene is
    logged and recorded with its error; the remaining scenes still run.
    """

    outcomes: list[EnrichmentOutcome[T]] = []
    for scene in scenes:
        try:
            value = operation(scene)
        except Exception as exc:  # noqa: BLE001
            logger.exception(
                "scene_enrichment_failed", step=step, scene_number=scene.scene_number
            )
            ENRICHMENT_OUTCOMES.labels("echo_tales", step, "failed").inc()
            outcomes.append(
                EnrichmentOutcome(scene_number=scene.scene_number, error=str(exc))
            )
            continue
        ENRICHMENT_OUTCOMES.labels("echo_tales", step, "ok").inc()
        outcomes.append(EnrichmentOutcome(scene_number=scene.scene_number, value=value))
    return outcomes
