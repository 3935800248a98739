"""Demand and Opportunity from autocomplete suggestion volume.

Demand answers "do people look for this?" (suggestion volume, topic
coverage, exact repeats and intent). Opportunity answers "can a new video
win here?" (few exact competitors, a long-tail shape, evergreen intent and
enough volume to be worth it). A phrase strong on both is a SuperTopic.
"""

from __future__ import annotations

from topic_engine.services.scoring.intent import IntentDetector, IntentHit
from topic_engine.services.scoring.numeric import (
    clamp,
    lookup_by_count,
    points_at_least,
    points_at_most,
    round_half_up,
)
from topic_engine.services.scoring.scoring_config import DualConfig
from topic_engine.services.scoring.types import (
    Phrase,
    ScoreResult,
    ScoringContext,
    SuggestionSignals,
)


def _label(value: int, table: tuple[tuple[int, str], ...], floor: str) -> str:
    for threshold, label in table:
        if value >= threshold:
            return label
    return floor


class DemandOpportunityScorer:
    """Suggestion-volume based Demand / Opportunity with the SuperTopic flag."""

    name = "demand_opportunity"
    requires_signals = True

    def __init__(self, config: DualConfig | None = None) -> None:
        self.config = config or DualConfig()
        self.intents = IntentDetector(self.config.intent_categories)

    # Demand terms

    def suggestion_points(self, signals: SuggestionSignals, word_count: int) -> int:
        config = self.config
        volume = min(
            config.suggestion_points,
            round_half_up(signals.suggestion_count / config.suggestion_ceiling * config.suggestion_points),
        )
        multiplier = lookup_by_count(
            word_count,
            config.word_count_multipliers,
            config.word_count_multiplier_long,
        )
        return round_half_up(volume * multiplier)

    def topic_points(self, signals: SuggestionSignals) -> int:
        if not signals.suggestion_count:
            return 0
        ratio = signals.topic_match_count / signals.suggestion_count
        return min(self.config.topic_match_points, round_half_up(ratio * self.config.topic_match_points))

    def exact_points(self, signals: SuggestionSignals) -> int:
        return min(self.config.exact_match_cap, signals.exact_match_count * self.config.exact_match_weight)

    def intent_points(self, hits: list[IntentHit]) -> int:
        return min(self.config.intent_cap, sum(hit.demand_boost for hit in hits))

    # Opportunity terms

    def low_competition(self, signals: SuggestionSignals) -> tuple[int, int | None]:
        """Points and the exact-match percentage they were read from."""
        if not signals.suggestion_count:
            return self.config.low_competition_floor, None
        exact_pct = round_half_up(signals.exact_match_count / signals.suggestion_count * 100)
        points = points_at_most(
            exact_pct,
            self.config.low_competition_tiers,
            self.config.low_competition_floor,
        )
        return points, exact_pct

    def long_tail(self, word_count: int) -> int:
        return int(lookup_by_count(
            word_count,
            self.config.long_tail_bonus,
            self.config.long_tail_bonus_long,
        ))

    def evergreen(self, hits: list[IntentHit]) -> int:
        return min(self.config.evergreen_cap, sum(hit.evergreen_weight for hit in hits))

    def demand_validation(self, signals: SuggestionSignals) -> int:
        return points_at_least(
            signals.suggestion_count,
            self.config.demand_validation_tiers,
            self.config.demand_validation_floor,
        )

    def is_super_topic(self, demand: int, opportunity: int) -> bool:
        return (
            demand >= self.config.super_topic_min_demand
            and opportunity >= self.config.super_topic_min_opportunity
        )

    def score_signals(self, phrase: Phrase, signals: SuggestionSignals) -> ScoreResult:
        """Score ``phrase`` from explicit signals."""
        config = self.config
        word_count = phrase.word_count
        hits = self.intents.detect(phrase.text)

        suggestion = self.suggestion_points(signals, word_count)
        topic = self.topic_points(signals)
        exact = self.exact_points(signals)
        intent = self.intent_points(hits)
        demand = int(clamp(suggestion + topic + exact + intent, 0, 100))

        low_competition, exact_pct = self.low_competition(signals)
        long_tail = self.long_tail(word_count)
        evergreen = self.evergreen(hits)
        validation = self.demand_validation(signals)
        opportunity = int(clamp(low_competition + long_tail + evergreen + validation, 0, 100))

        super_topic = self.is_super_topic(demand, opportunity)
        opportunity_label = (
            config.super_topic_label
            if super_topic
            else _label(opportunity, config.opportunity_labels, config.opportunity_label_floor)
        )

        return ScoreResult(
            scorer=self.name,
            phrase=phrase,
            scores={
                "demand": demand,
                "opportunity": opportunity,
                "is_super_topic": super_topic,
            },
            breakdown={
                "word_count": word_count,
                "suggestion_points": suggestion,
                "topic_match_points": topic,
                "exact_match_points": exact,
                "intent_points": intent,
                "exact_match_percent": exact_pct,
                "low_competition": low_competition,
                "long_tail": long_tail,
                "evergreen_intent": evergreen,
                "demand_validation": validation,
                "intent_categories": [hit.category for hit in hits],
                "demand_label": _label(demand, config.demand_labels, config.demand_label_floor),
                "opportunity_label": opportunity_label,
            },
        )

    def score(self, phrase: Phrase, context: ScoringContext) -> ScoreResult:
        return self.score_signals(phrase, context.signals or SuggestionSignals())
