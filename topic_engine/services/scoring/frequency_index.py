"""Corpus-wide pattern counts and percentile ranks ("data intake").

One pass over the candidate corpus records word, bigram and trigram counts,
seed-relative patterns (prefix, suffix, seed+1, seed+2) and the words
phrases start with. Counts accumulate in ``FrequencyCounts``, which can be
built per partition and merged; percentile ranks are computed only once all
counts are in.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from topic_engine.services.scoring.normalizer import normalize, tokenize
from topic_engine.services.scoring.numeric import round_half_up
from topic_engine.services.scoring.scoring_config import FrequencyConfig

logger = logging.getLogger(__name__)


class PatternCategory(str, Enum):
    WORD = "word"
    BIGRAM = "bigram"
    TRIGRAM = "trigram"
    PREFIX = "prefix"
    SUFFIX = "suffix"
    SEED_PLUS_1 = "seed_plus_1"
    SEED_PLUS_2 = "seed_plus_2"
    STARTER = "starter"
    TWO_WORD_STARTER = "two_word_starter"


@dataclass(frozen=True, slots=True)
class SeedComponents:
    """Where a candidate sits relative to the seed text."""

    found: bool = False
    prefix: str = ""
    suffix: str = ""
    seed_plus_1: str = ""
    seed_plus_2: str = ""


def split_on_seed(text: str, seed: str) -> SeedComponents:
    """Split normalized ``text`` around the first occurrence of ``seed``."""
    if not seed:
        return SeedComponents()
    start = text.find(seed)
    if start < 0:
        return SeedComponents()

    before = text[:start].strip()
    after = text[start + len(seed):].strip()
    after_tokens = tokenize(after)
    return SeedComponents(
        found=True,
        prefix=before,
        suffix=after,
        seed_plus_1=after_tokens[0] if after_tokens else "",
        seed_plus_2=after_tokens[1] if len(after_tokens) > 1 else "",
    )


def _ngrams(tokens: Sequence[str], size: int) -> Iterable[str]:
    for start in range(len(tokens) - size + 1):
        yield " ".join(tokens[start:start + size])


@dataclass(slots=True)
class FrequencyCounts:
    """Mutable pattern counts for one slice of the corpus."""

    seed: str
    min_starter_length: int = 2
    total_phrases: int = 0
    counts: dict[PatternCategory, Counter[str]] = field(
        default_factory=lambda: {category: Counter() for category in PatternCategory}
    )

    def add(self, text: str) -> None:
        """Count every pattern in one normalized phrase."""
        self.total_phrases += 1
        tokens = tokenize(text)
        if not tokens:
            return

        self.counts[PatternCategory.WORD].update(tokens)
        self.counts[PatternCategory.BIGRAM].update(_ngrams(tokens, 2))
        self.counts[PatternCategory.TRIGRAM].update(_ngrams(tokens, 3))

        components = split_on_seed(text, self.seed)
        if components.found:
            if components.prefix:
                self.counts[PatternCategory.PREFIX][components.prefix] += 1
            if components.suffix:
                self.counts[PatternCategory.SUFFIX][components.suffix] += 1
            if components.seed_plus_1:
                self.counts[PatternCategory.SEED_PLUS_1][components.seed_plus_1] += 1
            if components.seed_plus_2:
                self.counts[PatternCategory.SEED_PLUS_2][components.seed_plus_2] += 1

        if self.seed and text.startswith(self.seed):
            return
        if len(tokens[0]) >= self.min_starter_length:
            self.counts[PatternCategory.STARTER][tokens[0]] += 1
        if len(tokens) >= 2:
            self.counts[PatternCategory.TWO_WORD_STARTER][f"{tokens[0]} {tokens[1]}"] += 1

    def update(self, texts: Iterable[str]) -> FrequencyCounts:
        for text in texts:
            self.add(text)
        return self

    def merge(self, other: FrequencyCounts) -> FrequencyCounts:
        """Combine two partial counts into a new instance."""
        if other.seed != self.seed:
            raise ValueError("cannot merge counts built for different seeds")
        merged = FrequencyCounts(
            seed=self.seed,
            min_starter_length=self.min_starter_length,
            total_phrases=self.total_phrases + other.total_phrases,
        )
        for category in PatternCategory:
            merged.counts[category] = self.counts[category] + other.counts[category]
        return merged


def rank_percentiles(
    counts: Mapping[str, int],
    singleton_percentile: int = 50,
) -> dict[str, int]:
    """Percentile rank per pattern, ascending by count then pattern text."""
    if not counts:
        return {}
    ordered = sorted(counts.items(), key=lambda item: (item[1], item[0]))
    if len(ordered) == 1:
        return {ordered[0][0]: singleton_percentile}
    last = len(ordered) - 1
    return {
        pattern: round_half_up(index / last * 100)
        for index, (pattern, _) in enumerate(ordered)
    }


@dataclass(frozen=True, slots=True)
class FrequencyIndex:
    """Frozen corpus statistics for one session."""

    seed: str
    total_phrases: int
    counts: Mapping[PatternCategory, Mapping[str, int]]
    percentiles: Mapping[PatternCategory, Mapping[str, int]]
    neutral_percentile: int = 50

    @classmethod
    def from_counts(
        cls,
        counts: FrequencyCounts,
        config: FrequencyConfig | None = None,
    ) -> FrequencyIndex:
        config = config or FrequencyConfig()
        frozen_counts = {
            category: MappingProxyType(dict(counts.counts[category]))
            for category in PatternCategory
        }
        percentiles = {
            category: MappingProxyType(
                rank_percentiles(counts.counts[category], config.singleton_percentile)
            )
            for category in PatternCategory
        }
        return cls(
            seed=counts.seed,
            total_phrases=counts.total_phrases,
            counts=MappingProxyType(frozen_counts),
            percentiles=MappingProxyType(percentiles),
            neutral_percentile=config.neutral_percentile,
        )

    @property
    def unique_words(self) -> int:
        return len(self.counts[PatternCategory.WORD])

    @property
    def total_starters(self) -> int:
        return sum(self.counts[PatternCategory.STARTER].values())

    def count_of(self, category: PatternCategory | str, pattern: str) -> int:
        return self.counts[PatternCategory(category)].get(pattern, 0)

    def percentile_of(self, category: PatternCategory | str, pattern: str) -> int:
        """Percentile of ``pattern``; the neutral value when absent or empty."""
        if not pattern:
            return self.neutral_percentile
        return self.percentiles[PatternCategory(category)].get(pattern, self.neutral_percentile)

    def top_patterns(
        self,
        category: PatternCategory | str,
        limit: int = 10,
    ) -> list[tuple[str, int]]:
        """Most frequent patterns, ties broken alphabetically."""
        items = self.counts[PatternCategory(category)].items()
        ranked = sorted(items, key=lambda item: (-item[1], item[0]))
        return ranked[:max(limit, 0)]

    def summary(self, limit: int = 5) -> dict[str, object]:
        return {
            "seed": self.seed,
            "total_phrases": self.total_phrases,
            "unique_words": self.unique_words,
            "pattern_counts": {
                category.value: len(self.counts[category]) for category in PatternCategory
            },
            "top_starters": self.top_patterns(PatternCategory.STARTER, limit),
        }


def _partition(texts: Sequence[str], partitions: int) -> list[Sequence[str]]:
    size = max(1, -(-len(texts) // partitions))
    return [texts[start:start + size] for start in range(0, len(texts), size)] or [texts]


def build_frequency_index(
    texts: Sequence[str],
    seed: str,
    config: FrequencyConfig | None = None,
    *,
    partitions: int = 1,
) -> FrequencyIndex:
    """Count patterns across normalized ``texts`` and freeze the ranks.

    With ``partitions > 1`` the corpus is counted in slices which are merged
    before ranking; the result is identical to a single pass.
    """
    config = config or FrequencyConfig()
    normalized_seed = normalize(seed)

    partials = [
        FrequencyCounts(
            seed=normalized_seed,
            min_starter_length=config.min_starter_length,
        ).update(chunk)
        for chunk in _partition(texts, max(1, partitions))
    ]
    counts = partials[0]
    for partial in partials[1:]:
        counts = counts.merge(partial)

    index = FrequencyIndex.from_counts(counts, config)
    logger.info(
        "Frequency index built",
        extra={
            "seed": normalized_seed,
            "total_phrases": index.total_phrases,
            "unique_words": index.unique_words,
            "partitions": len(partials),
            "top_starters": index.top_patterns(PatternCategory.STARTER, 5),
        },
    )
    return index
