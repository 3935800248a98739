"""Versioned, immutable scoring configuration.

Every weight, threshold and lexicon the scorers use lives here. A
``ScoringConfig`` is built once (the packaged default, or a YAML override
merged over it) and injected into the scorers; nothing reads module-level
tables at scoring time.

Tier tables are ordered ``(threshold, points)`` pairs. Unless a field says
otherwise, the first pair whose threshold is ``<=`` the measured value wins.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator

from topic_engine.core.exceptions import ScoringConfigError

logger = logging.getLogger(__name__)

Tiers = tuple[tuple[float, int], ...]

# Stop-words removed from anchor phrases before pattern extraction.
ANCHOR_FILLER_WORDS = (
    "how", "to", "what", "is", "why", "does", "can", "best", "will", "should",
    "when", "for", "the", "a", "an", "with", "and", "or", "in", "on", "at", "of", "vs",
)

# Wider list used when looking for meaningful corpus words in a candidate.
CANDIDATE_FILLER_WORDS = ANCHOR_FILLER_WORDS + (
    "your", "you", "my", "i", "it", "be", "do", "are", "this", "that",
    "from", "by", "not", "if", "but", "about", "get", "make", "like", "just",
)


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class FrequencyConfig(_FrozenModel):
    """Frequency index construction and lookup defaults."""

    neutral_percentile: int = 50
    singleton_percentile: int = 50
    min_starter_length: int = 2


class AnchorConfig(_FrozenModel):
    """Anchor extraction rules."""

    filler_words: frozenset[str] = frozenset(ANCHOR_FILLER_WORDS)
    min_single_anchor_length: int = 3


class PercentileConfig(_FrozenModel):
    """Component weights ordered (prefix, seed+1, seed+2, suffix)."""

    popularity_weights: tuple[float, float, float, float] = (0.20, 0.30, 0.30, 0.20)
    competition_weights: tuple[float, float, float, float] = (0.25, 0.25, 0.25, 0.25)
    # LTV score -> popularity boost
    ltv_boost_tiers: Tiers = ((50, 10), (40, 8), (30, 5), (20, 3))
    ltv_badge_threshold: int = 50


class HeuristicBucket(_FrozenModel):
    """A named group of regex patterns contributing one signed delta."""

    name: str
    delta: int
    patterns: tuple[str, ...]


DEFAULT_HEURISTIC_BUCKETS = (
    HeuristicBucket(
        name="foreign_language",
        delta=-12,
        patterns=(
            r"\b(hindi|tamil|telugu|malayalam|kannada|bengali|marathi|gujarati|punjabi)\b",
            r"(हिंदी|தமிழ்|తెలుగు|മലയാളം|ಕನ್ನಡ|বাংলা|मराठी|ગુજરાતી|ਪੰਜਾਬੀ)",
            r"\b(uzbek|amharic|bangla|urdu|arabic|español|portuguese|français|deutsch|russian"
            r"|indonesia|filipino|tagalog|vietnamese|thai|korean|japanese|chinese|mandarin)\b",
            r"\b(en español|em português|auf deutsch|dalam bahasa|kaise kare|ka tarika"
            r"|in telugu|in tamil|in hindi)\b",
        ),
    ),
    HeuristicBucket(
        name="date_time",
        delta=-8,
        patterns=(
            r"\b(january|february|march|april|may|june|july|august|september|october"
            r"|november|december)\b",
            r"\b(monday|tuesday|wednesday|thursday|friday|saturday|sunday)\b",
        ),
    ),
    HeuristicBucket(
        name="low_value",
        delta=-5,
        patterns=(
            r"\b(be like|meme|reaction|cringe|rant|exposed|drama|beef)\b",
            r"(.)\1{3,}",
        ),
    ),
    HeuristicBucket(
        name="freshness",
        delta=5,
        patterns=(r"\b(new|latest|update|updated|20\d{2})\b",),
    ),
    HeuristicBucket(
        name="how_to",
        delta=5,
        patterns=(
            r"\b(how to|guide|tutorial|explained|tips?|tricks?|secrets?|hacks?|strategy"
            r"|beginners?|complete|ultimate|advanced)\b",
        ),
    ),
    HeuristicBucket(
        name="action",
        delta=5,
        patterns=(r"\b(fix|solve|beat|crack|master|improve|boost|grow|monetize)\b",),
    ),
)


class PopularityV2Config(_FrozenModel):
    """Anchor-tier popularity tables."""

    exact_base_by_position: tuple[int, ...] = (87, 86, 85, 84, 83, 82, 81, 80, 79)
    exact_ceiling: int = 92
    anchor_repeat_weight: int = 3
    # Applied to (support - 1) * anchor_repeat_weight of the best repeated token.
    exact_anchor_bonus_tiers: Tiers = ((6, 5), (3, 3))

    child_base: int = 70
    related_base: int = 55
    none_base: int = 55
    position_boosts: tuple[int, ...] = (12, 11, 10, 9, 8, 7, 6, 5, 4)
    child_ceiling_offset: int = 1
    related_ceiling_offset: int = 2
    none_ceiling: int = 79

    # Percent of starter occurrences -> boost
    starter_boost_tiers: Tiers = ((15, 12), (10, 10), (7, 8), (4, 5), (2, 3))
    # Corpus word count -> boost
    anchor_word_boost_tiers: Tiers = ((20, 12), (15, 10), (10, 7), (6, 4), (3, 2))
    candidate_filler_words: frozenset[str] = frozenset(CANDIDATE_FILLER_WORDS)
    min_anchor_word_length: int = 3

    length_adjustments: dict[int, int] = {
        0: -15, 1: -15, 2: -4, 3: 4, 4: 4, 5: 4, 6: 4, 7: 1, 8: 1, 9: -3,
    }
    length_adjustment_long: int = -8

    heuristic_buckets: tuple[HeuristicBucket, ...] = DEFAULT_HEURISTIC_BUCKETS
    heuristic_min: int = -12
    heuristic_max: int = 10

    jitter_spread: int = 2
    score_max: int = 99

    @field_validator("exact_base_by_position", "position_boosts")
    @classmethod
    def _non_empty(cls, value: tuple[int, ...]) -> tuple[int, ...]:
        if not value:
            raise ValueError("position tables must not be empty")
        return value

    @model_validator(mode="after")
    def _exact_floor_below_ceiling(self) -> "PopularityV2Config":
        if self.none_ceiling + 1 > self.exact_ceiling:
            raise ValueError("none_ceiling must leave room below exact_ceiling")
        return self


class LTVConfig(_FrozenModel):
    """Anchor-substring long-term-value tables. Bands are (floor, ceiling)."""

    full_match_base: int = 70
    full_match_density_weight: int = 20
    # (max char offset, bonus); offset 0 is checked against the first pair
    full_match_position_bonus: Tiers = ((0, 15), (9, 10))
    full_match_position_default: int = 5
    full_match_band: tuple[int, int] = (70, 95)

    full_anchor_base: int = 55
    full_anchor_position_bonus: Tiers = ((19, 8), (39, 4))
    full_anchor_band: tuple[int, int] = (55, 69)

    bigram_base: int = 40
    bigram_support_weight: int = 3
    bigram_band: tuple[int, int] = (40, 54)

    single_base: int = 20
    single_support_weight: int = 4
    # (max token index, bonus)
    single_position_bonus: Tiers = ((2, 8), (4, 4))
    single_band: tuple[int, int] = (20, 39)

    jitter_spread: int = 3

    @model_validator(mode="after")
    def _bands_strictly_ordered(self) -> "LTVConfig":
        bands = [self.single_band, self.bigram_band, self.full_anchor_band, self.full_match_band]
        for low, high in bands:
            if low > high:
                raise ValueError("band floor must not exceed its ceiling")
        for lower, upper in zip(bands, bands[1:]):
            if lower[1] >= upper[0]:
                raise ValueError("LTV bands must not overlap")
        if bands[0][0] <= 0:
            raise ValueError("lowest LTV band must stay above the no-match score")
        return self


class IntentCategory(_FrozenModel):
    """One intent lexicon bucket with its demand and evergreen weights."""

    name: str
    triggers: tuple[str, ...]
    demand_boost: int
    evergreen_weight: int


DEFAULT_INTENT_CATEGORIES = (
    IntentCategory(
        name="learning",
        demand_boost=8,
        evergreen_weight=14,
        triggers=(
            "how to", "how do", "how can", "how does", "how is",
            "tutorial", "tutorials", "guide", "guides", "learn", "learning",
            "beginner", "beginners", "beginner's", "basics", "basic",
            "introduction", "intro", "introduce", "explained", "explanation",
            "tips", "tricks", "course", "class", "lesson", "lessons",
            "step by step", "steps", "for beginners", "for dummies",
            "made easy", "made simple", "complete guide", "ultimate guide",
            "masterclass", "master", "training", "train",
        ),
    ),
    IntentCategory(
        name="buyer",
        demand_boost=6,
        evergreen_weight=5,
        triggers=(
            "best", "top", "top 10", "top 5", "review", "reviews",
            "vs", "versus", "or", "comparison", "compare",
            "worth it", "worth buying", "should i", "should you",
            "buy", "buying", "purchase", "cheap", "affordable", "budget",
            "premium", "professional", "pro", "alternative", "alternatives",
            "recommendation", "recommendations", "recommend",
        ),
    ),
    IntentCategory(
        name="problem",
        demand_boost=7,
        evergreen_weight=12,
        triggers=(
            "fix", "fixed", "fixing", "solve", "solved", "solving", "solution",
            "help", "helping", "issue", "issues", "problem", "problems",
            "error", "errors", "not working", "doesn't work", "won't work",
            "broken", "broke", "stuck", "can't",
            "trouble", "troubleshoot", "troubleshooting",
            "why is", "why does", "why won't", "why can't", "stop", "prevent", "avoid",
        ),
    ),
    IntentCategory(
        name="discovery",
        demand_boost=4,
        evergreen_weight=8,
        triggers=(
            "what is", "what are", "what does", "meaning", "definition", "define",
            "difference between", "difference", "why do", "why does", "why is",
            "who is", "who are", "when to", "when should",
            "where to", "where can", "which", "which is better",
            "explain", "understand", "understanding",
        ),
    ),
    IntentCategory(
        name="action",
        demand_boost=6,
        evergreen_weight=10,
        triggers=(
            "start", "starting", "get started", "getting started",
            "create", "creating", "creation", "make", "making",
            "build", "building", "setup", "set up", "setting up",
            "install", "installing", "installation",
            "download", "downloading", "use", "using", "how to use",
            "grow", "growing", "growth", "improve", "improving", "improvement",
            "increase", "boost", "maximize", "optimize", "optimizing",
        ),
    ),
    IntentCategory(
        name="current",
        demand_boost=3,
        evergreen_weight=0,
        triggers=(
            "new", "latest", "newest", "update", "updated", "updates",
            "2024", "2025", "2026", "now", "today", "still", "anymore",
            "recently", "recent",
        ),
    ),
    IntentCategory(
        name="specific",
        demand_boost=5,
        evergreen_weight=6,
        triggers=(
            "for youtube", "on youtube", "youtube",
            "for instagram", "on instagram", "instagram",
            "for tiktok", "on tiktok", "tiktok",
            "for facebook", "on facebook",
            "for beginners", "for experts", "for pros",
            "at home", "from home", "without", "with no",
            "free", "paid", "fast", "quick", "quickly",
            "easy", "simple", "easily", "simply",
            "online", "offline", "mobile", "desktop", "first time", "first",
        ),
    ),
)


class DualConfig(_FrozenModel):
    """Suggestion-volume Demand / Opportunity tables."""

    suggestion_ceiling: int = 14
    suggestion_points: int = 50
    topic_match_points: int = 15
    exact_match_weight: int = 2
    exact_match_cap: int = 15
    intent_cap: int = 10

    word_count_multipliers: dict[int, float] = {
        0: 0.7, 1: 0.7, 2: 0.8, 3: 0.9, 4: 1.0, 5: 1.1, 6: 1.1, 7: 1.0, 8: 0.95,
    }
    word_count_multiplier_long: float = 0.9

    # Exact match percent -> points, first pair with percent <= threshold wins.
    low_competition_tiers: Tiers = ((0, 35), (15, 30), (30, 22), (50, 15), (70, 8))
    low_competition_floor: int = 3

    long_tail_bonus: dict[int, int] = {0: 0, 1: 0, 2: 0, 3: 5, 4: 12, 5: 20, 6: 22, 7: 18, 8: 15}
    long_tail_bonus_long: int = 12

    evergreen_cap: int = 25

    demand_validation_tiers: Tiers = ((12, 15), (10, 13), (8, 11), (6, 8), (4, 5))
    demand_validation_floor: int = 2

    super_topic_min_demand: int = 50
    super_topic_min_opportunity: int = 90

    intent_categories: tuple[IntentCategory, ...] = DEFAULT_INTENT_CATEGORIES

    demand_labels: tuple[tuple[int, str], ...] = (
        (85, "Extreme Demand"),
        (75, "Very High Demand"),
        (65, "High Demand"),
        (55, "Strong Demand"),
        (45, "Good Demand"),
        (35, "Moderate Demand"),
        (25, "Some Interest"),
    )
    demand_label_floor: str = "Limited Interest"
    opportunity_labels: tuple[tuple[int, str], ...] = (
        (85, "Excellent Opportunity"),
        (75, "Great Opportunity"),
        (65, "Good Opportunity"),
        (55, "Decent Opportunity"),
        (45, "Moderate Opportunity"),
        (35, "Limited Opportunity"),
    )
    opportunity_label_floor: str = "Weak Opportunity"
    super_topic_label: str = "SuperTopic"


class ScoringConfig(_FrozenModel):
    """Complete engine configuration, versioned for auditability."""

    version: str = "2025.12-live"
    frequency: FrequencyConfig = FrequencyConfig()
    anchors: AnchorConfig = AnchorConfig()
    percentile: PercentileConfig = PercentileConfig()
    popularity_v2: PopularityV2Config = PopularityV2Config()
    ltv: LTVConfig = LTVConfig()
    dual: DualConfig = DualConfig()


DEFAULT_SCORING_CONFIG = ScoringConfig()


def _deep_merge(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overrides.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def build_scoring_config(
    overrides: dict[str, Any] | None = None,
    *,
    source: str = "overrides",
) -> ScoringConfig:
    """Merge overrides over the packaged defaults and validate the result."""
    if not overrides:
        return DEFAULT_SCORING_CONFIG
    if not isinstance(overrides, dict):
        raise ScoringConfigError(source, "scoring config must be a mapping")

    payload = _deep_merge(DEFAULT_SCORING_CONFIG.model_dump(), overrides)
    try:
        return ScoringConfig.model_validate(payload)
    except ValidationError as exc:
        raise ScoringConfigError(source, str(exc)) from exc


def load_scoring_config(path: str | Path) -> ScoringConfig:
    """Load a YAML override file and merge it over the defaults."""
    config_path = Path(path)
    try:
        raw = config_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ScoringConfigError(str(config_path), f"unable to read file: {exc}") from exc

    try:
        overrides = yaml.safe_load(raw) or {}
    except yaml.YAMLError as exc:
        raise ScoringConfigError(str(config_path), f"invalid YAML: {exc}") from exc

    config = build_scoring_config(overrides, source=str(config_path))
    logger.info(
        "Scoring config loaded",
        extra={"path": str(config_path), "version": config.version},
    )
    return config


@lru_cache
def get_scoring_config(path: str | None = None) -> ScoringConfig:
    """Return the packaged default, or the cached config loaded from ``path``."""
    if not path:
        return DEFAULT_SCORING_CONFIG
    return load_scoring_config(path)
