"""Scoring session: validate input, build corpus state once, score everything."""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from topic_engine.core.exceptions import (
    EmptySeedPhraseError,
    InvalidInputError,
    UnknownScorerError,
)
from topic_engine.services.scoring.anchor_set import AnchorSet, extract_anchor_set
from topic_engine.services.scoring.anchor_tier_scorer import LTVScorer, PopularityV2Scorer
from topic_engine.services.scoring.dual_scorer import DemandOpportunityScorer
from topic_engine.services.scoring.frequency_index import FrequencyIndex, build_frequency_index
from topic_engine.services.scoring.normalizer import normalize
from topic_engine.services.scoring.percentile_scorer import PercentileScorer, apply_ltv_boost
from topic_engine.services.scoring.scoring_config import DEFAULT_SCORING_CONFIG, ScoringConfig
from topic_engine.services.scoring.types import (
    AnchorPhrase,
    Phrase,
    ScoreResult,
    Scorer,
    ScoringContext,
    SuggestionSignals,
)

logger = logging.getLogger(__name__)

SIGNAL_FIELDS = ("suggestion_count", "exact_match_count", "topic_match_count")


def default_scorers(config: ScoringConfig = DEFAULT_SCORING_CONFIG) -> list[Scorer]:
    """Production scorers wired to ``config``."""
    return [
        PercentileScorer(),
        PopularityV2Scorer(config.popularity_v2),
        LTVScorer(config.ltv),
        DemandOpportunityScorer(config.dual),
    ]


# Input validation

def _field(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def coerce_candidate(record: Any, index: int) -> Phrase:
    """Accept a bare string or a ``{text, origin_tag}`` record."""
    if isinstance(record, str):
        return Phrase.from_raw(record)

    text = _field(record, "text")
    if not isinstance(text, str):
        raise InvalidInputError("text must be a string", collection="candidates", index=index, field="text")
    origin_tag = _field(record, "origin_tag")
    if origin_tag is None:
        origin_tag = ""
    if not isinstance(origin_tag, str):
        raise InvalidInputError(
            "origin_tag must be a string",
            collection="candidates",
            index=index,
            field="origin_tag",
        )
    return Phrase.from_raw(text, origin_tag)


def coerce_anchor(record: Any, index: int) -> AnchorPhrase:
    """Accept a ``{text, position}`` record; bare strings take their index."""
    if isinstance(record, str):
        text, position = record, index
    else:
        text, position = _field(record, "text"), _field(record, "position")
        if position is None:
            position = index

    if not isinstance(text, str):
        raise InvalidInputError("text must be a string", collection="anchors", index=index, field="text")
    if isinstance(position, bool) or not isinstance(position, int) or position < 0:
        raise InvalidInputError(
            "position must be a non-negative integer",
            collection="anchors",
            index=index,
            field="position",
        )

    anchor = AnchorPhrase.from_raw(text, position)
    if not anchor.text:
        raise InvalidInputError("text must contain at least one word", collection="anchors", index=index, field="text")
    return anchor


def coerce_signals(record: Any, index: int) -> SuggestionSignals:
    if isinstance(record, SuggestionSignals):
        values = {name: getattr(record, name) for name in SIGNAL_FIELDS}
    elif isinstance(record, Mapping):
        values = {name: record.get(name, 0) for name in SIGNAL_FIELDS}
    else:
        raise InvalidInputError("signals must be a mapping", collection="signals", index=index)

    for name, value in values.items():
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidInputError("must be an integer", collection="signals", index=index, field=name)
        if value < 0:
            raise InvalidInputError("must not be negative", collection="signals", index=index, field=name)
    return SuggestionSignals(**values)


def validate_seed(seed_phrase: Any) -> str:
    if not isinstance(seed_phrase, str) or not normalize(seed_phrase):
        raise EmptySeedPhraseError()
    return normalize(seed_phrase)


@dataclass(frozen=True, slots=True)
class CandidateScores:
    """All scorer results for one candidate, in scorer order."""

    index: int
    phrase: Phrase
    results: tuple[ScoreResult, ...]

    def result(self, scorer_name: str) -> ScoreResult | None:
        for result in self.results:
            if result.scorer == scorer_name:
                return result
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "text": self.phrase.text,
            "origin_tag": self.phrase.origin_tag,
            "scores": {result.scorer: result.to_dict() for result in self.results},
        }


class ScoringSession:
    """One seed phrase, its candidate corpus and its anchors.

    The frequency index and anchor set are built once at construction and
    never change; scoring is a pure function of them.
    """

    def __init__(
        self,
        seed_phrase: str,
        candidates: Sequence[Any],
        anchors: Sequence[Any],
        *,
        config: ScoringConfig = DEFAULT_SCORING_CONFIG,
        scorers: Iterable[Scorer] | None = None,
        partitions: int = 1,
    ) -> None:
        try:
            self.seed = validate_seed(seed_phrase)
            self.phrases = [coerce_candidate(record, index) for index, record in enumerate(candidates)]
            self.anchors = [coerce_anchor(record, index) for index, record in enumerate(anchors)]
        except InvalidInputError as exc:
            logger.warning("Rejected scoring input", extra=exc.details)
            raise

        self.config = config
        self.scorers: list[Scorer] = list(scorers) if scorers is not None else default_scorers(config)

        self.frequency_index: FrequencyIndex = build_frequency_index(
            [phrase.text for phrase in self.phrases],
            self.seed,
            config.frequency,
            partitions=partitions,
        )
        self.anchor_set: AnchorSet = extract_anchor_set(self.anchors, self.seed, config.anchors)
        self.context = ScoringContext(
            seed=self.seed,
            frequency_index=self.frequency_index,
            anchor_set=self.anchor_set,
            config=config,
        )

    @property
    def scorer_names(self) -> list[str]:
        return [scorer.name for scorer in self.scorers]

    def get_scorer(self, name: str) -> Scorer:
        for scorer in self.scorers:
            if scorer.name == name:
                return scorer
        raise UnknownScorerError(name)

    def _select(self, names: Sequence[str] | None) -> list[Scorer]:
        if names is None:
            return list(self.scorers)
        return [self.get_scorer(name) for name in names]

    def _signals_by_index(
        self,
        signals: Mapping[int, Any] | Sequence[Any] | None,
    ) -> dict[int, SuggestionSignals]:
        if signals is None:
            return {}
        items = signals.items() if isinstance(signals, Mapping) else enumerate(signals)
        resolved: dict[int, SuggestionSignals] = {}
        try:
            for index, record in items:
                if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(self.phrases):
                    raise InvalidInputError(
                        "key must be a candidate index",
                        collection="signals",
                        index=index if isinstance(index, int) else None,
                    )
                if record is not None:
                    resolved[index] = coerce_signals(record, index)
        except InvalidInputError as exc:
            logger.warning("Rejected scoring input", extra=exc.details)
            raise
        return resolved

    def score_phrase(
        self,
        phrase: Phrase,
        signals: SuggestionSignals | None = None,
        scorer_names: Sequence[str] | None = None,
    ) -> tuple[ScoreResult, ...]:
        """Score one phrase against this session's corpus state.

        Scorers that need suggestion signals are skipped when none are given.
        When both percentile and LTV ran, the percentile result also carries
        the LTV-lifted Popularity and badge.
        """
        context = self.context.with_signals(signals)
        results = []
        for scorer in self._select(scorer_names):
            if getattr(scorer, "requires_signals", False) and signals is None:
                continue
            results.append(scorer.score(phrase, context))
        return tuple(self._attach_ltv(results))

    def _attach_ltv(self, results: list[ScoreResult]) -> list[ScoreResult]:
        ltv = next((r for r in results if r.scorer == LTVScorer.name), None)
        if ltv is None:
            return results
        return [
            apply_ltv_boost(result, ltv.scores["ltv"], self.config.percentile)
            if result.scorer == PercentileScorer.name and "popularity" in result.scores
            else result
            for result in results
        ]

    def score_all(
        self,
        signals: Mapping[int, Any] | Sequence[Any] | None = None,
        scorer_names: Sequence[str] | None = None,
    ) -> list[CandidateScores]:
        """Score every candidate, preserving input order."""
        selected = self._select(scorer_names)
        resolved = self._signals_by_index(signals)
        names = [scorer.name for scorer in selected]

        scored = [
            CandidateScores(
                index=index,
                phrase=phrase,
                results=self.score_phrase(phrase, resolved.get(index), names),
            )
            for index, phrase in enumerate(self.phrases)
        ]

        tags = Counter(
            result.tag
            for candidate in scored
            for result in candidate.results
            if result.scorer == PopularityV2Scorer.name
        )
        logger.info(
            "Session scoring complete",
            extra={
                "seed": self.seed,
                "config_version": self.config.version,
                "candidates": len(scored),
                "anchors": len(self.anchors),
                "scorers": names,
                "with_signals": len(resolved),
                "popularity_v2_tags": dict(tags),
            },
        )
        return scored
