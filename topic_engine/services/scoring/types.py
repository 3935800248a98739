"""Domain types for the topic scoring engine."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Protocol

from topic_engine.services.scoring.normalizer import normalize, tokenize

if TYPE_CHECKING:
    from topic_engine.services.scoring.anchor_set import AnchorSet
    from topic_engine.services.scoring.frequency_index import FrequencyIndex
    from topic_engine.services.scoring.scoring_config import ScoringConfig


class Tag(str, Enum):
    """How a candidate relates to the anchor set."""

    EXACT = "EXACT"
    CHILD = "CHILD"
    RELATED = "RELATED"
    NONE = "NONE"


class LTVStrategy(str, Enum):
    """Which anchor pattern produced an LTV score."""

    FULL_TOP10 = "FULL_TOP10"
    FULL_ANCHOR = "FULL_ANCHOR"
    BIGRAM = "BIGRAM"
    SINGLE = "SINGLE"


@dataclass(frozen=True, slots=True)
class Phrase:
    """Normalized candidate text with the caller's opaque origin tag."""

    text: str
    origin_tag: str = ""

    @classmethod
    def from_raw(cls, text: str, origin_tag: str = "") -> Phrase:
        return cls(text=normalize(text), origin_tag=origin_tag)

    @property
    def tokens(self) -> list[str]:
        return tokenize(self.text)

    @property
    def word_count(self) -> int:
        return len(self.tokens)


@dataclass(frozen=True, slots=True)
class AnchorPhrase:
    """Reference phrase and its caller-supplied position."""

    text: str
    position: int

    @classmethod
    def from_raw(cls, text: str, position: int) -> AnchorPhrase:
        return cls(text=normalize(text), position=position)


@dataclass(frozen=True, slots=True)
class TagMatch:
    """Classifier result.

    ``rank`` is the matched anchor's index in the position-ordered anchor
    tuple and drives the position tables; ``position`` echoes the anchor's
    own position value.
    """

    tag: Tag
    position: int | None = None
    rank: int | None = None
    anchor: AnchorPhrase | None = None


@dataclass(frozen=True, slots=True)
class SuggestionSignals:
    """Autocomplete volume signals for one candidate."""

    suggestion_count: int = 0
    exact_match_count: int = 0
    topic_match_count: int = 0


@dataclass(frozen=True, slots=True)
class ScoreResult:
    """One scorer's output for one phrase."""

    scorer: str
    phrase: Phrase
    scores: Mapping[str, Any]
    tag: str | None = None
    breakdown: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "scores", MappingProxyType(dict(self.scores)))
        object.__setattr__(self, "breakdown", MappingProxyType(dict(self.breakdown)))

    def to_dict(self) -> dict[str, Any]:
        """Serialize result to a JSON-compatible dict."""
        return {
            "scorer": self.scorer,
            "tag": self.tag,
            "scores": dict(self.scores),
            "breakdown": dict(self.breakdown),
        }


@dataclass(frozen=True, slots=True)
class ScoringContext:
    """Frozen session state handed to every scorer call."""

    seed: str
    frequency_index: FrequencyIndex
    anchor_set: AnchorSet
    config: ScoringConfig
    signals: SuggestionSignals | None = None

    def with_signals(self, signals: SuggestionSignals | None) -> ScoringContext:
        return ScoringContext(
            seed=self.seed,
            frequency_index=self.frequency_index,
            anchor_set=self.anchor_set,
            config=self.config,
            signals=signals,
        )


class Scorer(Protocol):
    """Anything that turns a phrase into a ``ScoreResult``."""

    name: str

    def score(self, phrase: Phrase, context: ScoringContext) -> ScoreResult: ...
