"""Popularity / Competition / Spread from seed-relative percentiles."""

from __future__ import annotations

from topic_engine.services.scoring.frequency_index import PatternCategory, split_on_seed
from topic_engine.services.scoring.numeric import clamp, points_at_least, round_half_up
from topic_engine.services.scoring.scoring_config import PercentileConfig
from topic_engine.services.scoring.types import Phrase, ScoreResult, ScoringContext

_COMPONENTS = (
    PatternCategory.PREFIX,
    PatternCategory.SEED_PLUS_1,
    PatternCategory.SEED_PLUS_2,
    PatternCategory.SUFFIX,
)


def ltv_boost(ltv_score: int, config: PercentileConfig | None = None) -> int:
    """Popularity lift earned by a strong LTV score."""
    config = config or PercentileConfig()
    return points_at_least(ltv_score, config.ltv_boost_tiers)


def is_ltv_badge_eligible(ltv_score: int, config: PercentileConfig | None = None) -> bool:
    config = config or PercentileConfig()
    return ltv_score >= config.ltv_badge_threshold


def apply_ltv_boost(
    result: ScoreResult,
    ltv_score: int,
    config: PercentileConfig | None = None,
) -> ScoreResult:
    """Add ``popularity_with_ltv`` and the badge flag; plain Popularity stays as scored."""
    config = config or PercentileConfig()
    boost = ltv_boost(ltv_score, config)
    return ScoreResult(
        scorer=result.scorer,
        phrase=result.phrase,
        tag=result.tag,
        scores={
            **result.scores,
            "popularity_with_ltv": min(100, result.scores["popularity"] + boost),
        },
        breakdown={
            **result.breakdown,
            "ltv_score": ltv_score,
            "ltv_boost": boost,
            "ltv_badge": is_ltv_badge_eligible(ltv_score, config),
        },
    )


class PercentileScorer:
    """Weighted blend of the candidate's prefix/seed+N/suffix percentiles."""

    name = "percentile"

    def score(self, phrase: Phrase, context: ScoringContext) -> ScoreResult:
        config = context.config.percentile
        index = context.frequency_index
        components = split_on_seed(phrase.text, index.seed)

        values = {
            PatternCategory.PREFIX: components.prefix,
            PatternCategory.SEED_PLUS_1: components.seed_plus_1,
            PatternCategory.SEED_PLUS_2: components.seed_plus_2,
            PatternCategory.SUFFIX: components.suffix,
        }
        percentiles = [index.percentile_of(category, values[category]) for category in _COMPONENTS]

        popularity = int(clamp(
            round_half_up(sum(w * p for w, p in zip(config.popularity_weights, percentiles))),
            0,
            100,
        ))
        competition = int(clamp(
            round_half_up(sum(w * p for w, p in zip(config.competition_weights, percentiles))),
            0,
            100,
        ))

        return ScoreResult(
            scorer=self.name,
            phrase=phrase,
            scores={
                "popularity": popularity,
                "competition": competition,
                "spread": popularity - competition,
            },
            breakdown={
                f"{category.value}_percentile": percentile
                for category, percentile in zip(_COMPONENTS, percentiles)
            },
        )

    def score_with_ltv(
        self,
        phrase: Phrase,
        context: ScoringContext,
        ltv_score: int,
    ) -> ScoreResult:
        """Score, then lift Popularity by the LTV boost (capped at 100)."""
        config = context.config.percentile
        base = self.score(phrase, context)
        boost = ltv_boost(ltv_score, config)
        popularity = min(100, base.scores["popularity"] + boost)
        competition = base.scores["competition"]

        return ScoreResult(
            scorer=self.name,
            phrase=phrase,
            scores={
                "popularity": popularity,
                "competition": competition,
                "spread": popularity - competition,
            },
            breakdown={
                **base.breakdown,
                "base_popularity": base.scores["popularity"],
                "ltv_score": ltv_score,
                "ltv_boost": boost,
                "ltv_badge": is_ltv_badge_eligible(ltv_score, config),
            },
        )
