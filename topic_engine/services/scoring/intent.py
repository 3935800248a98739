"""Intent category detection by ordered trigger substrings."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from topic_engine.services.scoring.normalizer import normalize
from topic_engine.services.scoring.scoring_config import IntentCategory


@dataclass(frozen=True, slots=True)
class IntentHit:
    category: str
    trigger: str
    demand_boost: int
    evergreen_weight: int


class IntentDetector:
    """Finds, per category, the first trigger contained in a phrase."""

    def __init__(self, categories: Sequence[IntentCategory]) -> None:
        # Triggers are normalized the same way as phrase text.
        self._categories = [
            (category, [normalize(trigger) for trigger in category.triggers])
            for category in categories
        ]

    def detect(self, text: str) -> list[IntentHit]:
        """Hits in category order; each category counts at most once."""
        hits: list[IntentHit] = []
        for category, triggers in self._categories:
            for trigger in triggers:
                if trigger and trigger in text:
                    hits.append(
                        IntentHit(
                            category=category.name,
                            trigger=trigger,
                            demand_boost=category.demand_boost,
                            evergreen_weight=category.evergreen_weight,
                        )
                    )
                    break
        return hits
