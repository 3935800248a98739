"""Anchor-tier scorers: Popularity-v2 and LTV.

Popularity-v2 places every candidate in a band decided by how it relates to
the anchors (EXACT > CHILD > RELATED > NONE) and then nudges it within the
band with corpus-driven boosts. LTV ignores the tag and instead rewards the
strongest anchor pattern found inside the candidate.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass

from topic_engine.services.scoring.frequency_index import PatternCategory
from topic_engine.services.scoring.jitter import jitter
from topic_engine.services.scoring.numeric import (
    clamp,
    lookup_by_count,
    points_at_least,
    points_at_most,
    position_value,
    round_half_up,
)
from topic_engine.services.scoring.scoring_config import (
    HeuristicBucket,
    LTVConfig,
    PopularityV2Config,
)
from topic_engine.services.scoring.tag_classifier import classify
from topic_engine.services.scoring.types import (
    LTVStrategy,
    Phrase,
    ScoreResult,
    ScoringContext,
    Tag,
    TagMatch,
)


class HeuristicLexicon:
    """Compiled regex buckets; each bucket contributes its delta at most once."""

    def __init__(self, buckets: Sequence[HeuristicBucket], low: int, high: int) -> None:
        self._buckets = [
            (bucket.name, bucket.delta, [re.compile(pattern) for pattern in bucket.patterns])
            for bucket in buckets
        ]
        self._low = low
        self._high = high

    def matched_buckets(self, text: str) -> list[str]:
        return [
            name
            for name, _, patterns in self._buckets
            if any(pattern.search(text) for pattern in patterns)
        ]

    def adjustment(self, text: str) -> int:
        matched = set(self.matched_buckets(text))
        total = sum(delta for name, delta, _ in self._buckets if name in matched)
        return int(clamp(total, self._low, self._high))


class PopularityV2Scorer:
    """Tier-banded popularity driven by the anchor set."""

    name = "popularity_v2"

    def __init__(self, config: PopularityV2Config | None = None) -> None:
        self.config = config or PopularityV2Config()
        self.lexicon = HeuristicLexicon(
            self.config.heuristic_buckets,
            self.config.heuristic_min,
            self.config.heuristic_max,
        )

    @property
    def exact_floor(self) -> int:
        return self.config.none_ceiling + 1

    def anchor_bonus(self, phrase: Phrase, context: ScoringContext) -> int:
        """Bonus for candidate words repeated across several anchors."""
        best = 0
        for token in phrase.tokens:
            support = context.anchor_set.support_of(token)
            if support >= 2:
                best = max(best, (support - 1) * self.config.anchor_repeat_weight)
        return points_at_least(best, self.config.exact_anchor_bonus_tiers)

    def starter_boost(self, phrase: Phrase, context: ScoringContext) -> int:
        tokens = phrase.tokens
        total = context.frequency_index.total_starters
        if not tokens or not total:
            return 0
        count = context.frequency_index.count_of(PatternCategory.STARTER, tokens[0])
        share = count / total * 100
        return points_at_least(share, self.config.starter_boost_tiers)

    def anchor_word_boost(self, phrase: Phrase, context: ScoringContext) -> int:
        """Best boost over meaningful words, by their corpus frequency."""
        seed_tokens = context.anchor_set.seed_tokens
        best = 0
        for token in phrase.tokens:
            if (
                token in seed_tokens
                or token in self.config.candidate_filler_words
                or len(token) < self.config.min_anchor_word_length
            ):
                continue
            count = context.frequency_index.count_of(PatternCategory.WORD, token)
            best = max(best, points_at_least(count, self.config.anchor_word_boost_tiers))
        return best

    def length_adjustment(self, phrase: Phrase) -> int:
        return int(lookup_by_count(
            phrase.word_count,
            self.config.length_adjustments,
            self.config.length_adjustment_long,
        ))

    def parent_score(self, match: TagMatch, context: ScoringContext) -> int:
        """What the matched anchor itself scores as an EXACT candidate."""
        anchor = Phrase.from_raw(match.anchor.text)
        base = position_value(match.rank or 0, self.config.exact_base_by_position)
        raw = round_half_up(
            base + self.anchor_bonus(anchor, context) + jitter(anchor.text, self.config.jitter_spread)
        )
        return int(clamp(clamp(raw, self.exact_floor, self.config.exact_ceiling), 0, self.config.score_max))

    def _band(self, match: TagMatch, context: ScoringContext) -> tuple[int, int, int]:
        """(base, floor, ceiling) for the classified tier.

        CHILD and RELATED stay below both the parent's EXACT base and the
        parent's jittered score.
        """
        config = self.config
        rank = match.rank or 0
        exact_base = position_value(rank, config.exact_base_by_position)

        if match.tag is Tag.EXACT:
            return exact_base, self.exact_floor, config.exact_ceiling
        if match.tag is Tag.NONE or match.anchor is None:
            return config.none_base, 0, config.none_ceiling

        if match.tag is Tag.CHILD:
            base, offset = config.child_base, config.child_ceiling_offset
        else:
            base, offset = config.related_base, config.related_ceiling_offset
        parent = min(exact_base, self.parent_score(match, context))
        return base + position_value(rank, config.position_boosts), 0, parent - offset

    def score(self, phrase: Phrase, context: ScoringContext) -> ScoreResult:
        match = classify(phrase.text, context.anchor_set.anchors)
        base, floor, ceiling = self._band(match, context)
        offset = jitter(phrase.text, self.config.jitter_spread)

        breakdown: dict[str, object] = {"base": base}
        if match.tag is Tag.EXACT:
            boosts = self.anchor_bonus(phrase, context)
            breakdown["anchor_bonus"] = boosts
        else:
            starter = self.starter_boost(phrase, context)
            anchor_word = self.anchor_word_boost(phrase, context)
            length = self.length_adjustment(phrase)
            heuristic = self.lexicon.adjustment(phrase.text)
            breakdown.update(
                starter_boost=starter,
                anchor_word_boost=anchor_word,
                length_adjustment=length,
                heuristic_adjustment=heuristic,
                heuristic_buckets=self.lexicon.matched_buckets(phrase.text),
            )
            boosts = starter + anchor_word + length + heuristic

        raw = round_half_up(base + boosts + offset)
        value = int(clamp(clamp(raw, floor, ceiling), 0, self.config.score_max))
        breakdown.update(jitter=offset, raw=raw, floor=floor, ceiling=ceiling)

        return ScoreResult(
            scorer=self.name,
            phrase=phrase,
            tag=match.tag.value,
            scores={"popularity_v2": value},
            breakdown={
                **breakdown,
                "position": match.position,
                "anchor": match.anchor.text if match.anchor else None,
            },
        )


@dataclass(frozen=True, slots=True)
class _LTVMatch:
    strategy: LTVStrategy
    pattern: str
    base: float
    band: tuple[int, int]
    details: dict[str, object]


class LTVScorer:
    """Long-term value from the strongest anchor pattern in the candidate."""

    name = "ltv"

    def __init__(self, config: LTVConfig | None = None) -> None:
        self.config = config or LTVConfig()

    def _full_top10(self, phrase: Phrase, context: ScoringContext) -> _LTVMatch | None:
        config = self.config
        word_count = max(phrase.word_count, 1)
        for anchor in context.anchor_set.anchors:
            if not anchor.text:
                continue
            offset = phrase.text.find(anchor.text)
            if offset < 0:
                continue
            density = len(anchor.text.split(" ")) / word_count
            bonus = points_at_most(
                offset,
                config.full_match_position_bonus,
                config.full_match_position_default,
            )
            return _LTVMatch(
                strategy=LTVStrategy.FULL_TOP10,
                pattern=anchor.text,
                base=config.full_match_base + density * config.full_match_density_weight + bonus,
                band=config.full_match_band,
                details={"density": round(density, 4), "char_offset": offset, "position_bonus": bonus},
            )
        return None

    def _full_anchor(self, phrase: Phrase, context: ScoringContext) -> _LTVMatch | None:
        for remainder in context.anchor_set.full_anchors:
            offset = phrase.text.find(remainder)
            if offset < 0:
                continue
            bonus = points_at_most(offset, self.config.full_anchor_position_bonus)
            return _LTVMatch(
                strategy=LTVStrategy.FULL_ANCHOR,
                pattern=remainder,
                base=self.config.full_anchor_base + bonus,
                band=self.config.full_anchor_band,
                details={"char_offset": offset, "position_bonus": bonus},
            )
        return None

    def _bigram(self, phrase: Phrase, context: ScoringContext) -> _LTVMatch | None:
        anchor_set = context.anchor_set
        for bigram, support in anchor_set.bigram_anchors.items():
            if anchor_set.is_seed_only(bigram) or bigram not in phrase.text:
                continue
            return _LTVMatch(
                strategy=LTVStrategy.BIGRAM,
                pattern=bigram,
                base=self.config.bigram_base + support * self.config.bigram_support_weight,
                band=self.config.bigram_band,
                details={"support": support},
            )
        return None

    def _single(self, phrase: Phrase, context: ScoringContext) -> _LTVMatch | None:
        config = self.config
        best: _LTVMatch | None = None
        for token_index, token in enumerate(phrase.tokens):
            support = context.anchor_set.support_of(token)
            if not support:
                continue
            bonus = points_at_most(token_index, config.single_position_bonus)
            base = config.single_base + support * config.single_support_weight + bonus
            if best is None or base > best.base:
                best = _LTVMatch(
                    strategy=LTVStrategy.SINGLE,
                    pattern=token,
                    base=base,
                    band=config.single_band,
                    details={"support": support, "token_index": token_index, "position_bonus": bonus},
                )
        return best

    def match(self, phrase: Phrase, context: ScoringContext) -> _LTVMatch | None:
        for strategy in (self._full_top10, self._full_anchor, self._bigram, self._single):
            found = strategy(phrase, context)
            if found is not None:
                return found
        return None

    def score(self, phrase: Phrase, context: ScoringContext) -> ScoreResult:
        found = self.match(phrase, context)
        if found is None:
            return ScoreResult(
                scorer=self.name,
                phrase=phrase,
                tag=None,
                scores={"ltv": 0},
                breakdown={"strategy": None},
            )

        offset = jitter(phrase.text, self.config.jitter_spread)
        raw = round_half_up(found.base + offset)
        low, high = found.band
        value = int(clamp(raw, low, high))
        return ScoreResult(
            scorer=self.name,
            phrase=phrase,
            tag=found.strategy.value,
            scores={"ltv": value},
            breakdown={
                "strategy": found.strategy.value,
                "pattern": found.pattern,
                "base": found.base,
                **found.details,
                "jitter": offset,
                "raw": raw,
            },
        )
