"""Pattern extraction from the curated anchor phrases."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType

from topic_engine.services.scoring.normalizer import normalize, tokenize
from topic_engine.services.scoring.scoring_config import AnchorConfig
from topic_engine.services.scoring.types import AnchorPhrase

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AnchorSet:
    """Frozen anchor patterns with support counts.

    Support is the number of anchor phrases containing the pattern. Mapping
    iteration follows first-seen order across position-ordered anchors.
    """

    anchors: tuple[AnchorPhrase, ...]
    seed_tokens: frozenset[str]
    single_anchors: Mapping[str, int]
    bigram_anchors: Mapping[str, int]
    full_anchors: Mapping[str, AnchorPhrase]

    def support_of(self, token: str) -> int:
        return self.single_anchors.get(token, 0)

    def is_seed_only(self, bigram: str) -> bool:
        return all(token in self.seed_tokens for token in bigram.split(" "))

    def summary(self) -> dict[str, int]:
        return {
            "anchors": len(self.anchors),
            "single_anchors": len(self.single_anchors),
            "bigram_anchors": len(self.bigram_anchors),
            "full_anchors": len(self.full_anchors),
        }


def _seed_run_end(tokens: Sequence[str], seed_tokens: Sequence[str]) -> int | None:
    """Index just past the first contiguous run of ``seed_tokens``."""
    size = len(seed_tokens)
    if not size:
        return None
    for start in range(len(tokens) - size + 1):
        if list(tokens[start:start + size]) == list(seed_tokens):
            return start + size
    return None


def extract_anchor_set(
    anchors: Iterable[AnchorPhrase],
    seed: str,
    config: AnchorConfig | None = None,
) -> AnchorSet:
    """Build single-word, bigram and full-suffix patterns from ``anchors``."""
    config = config or AnchorConfig()
    ordered = tuple(sorted(anchors, key=lambda anchor: anchor.position))
    seed_token_list = tokenize(normalize(seed))
    seed_tokens = frozenset(seed_token_list)
    filler = config.filler_words

    singles: dict[str, int] = {}
    bigrams: dict[str, int] = {}
    full: dict[str, AnchorPhrase] = {}

    for anchor in ordered:
        tokens = tokenize(anchor.text)

        seen_singles = {
            token
            for token in tokens
            if token not in seed_tokens
            and token not in filler
            and len(token) >= config.min_single_anchor_length
        }
        for token in tokens:
            if token in seen_singles:
                singles[token] = singles.get(token, 0) + 1
                seen_singles.discard(token)

        seen_bigrams: set[str] = set()
        for left, right in zip(tokens, tokens[1:]):
            meaningful = any(
                side not in seed_tokens and side not in filler for side in (left, right)
            )
            bigram = f"{left} {right}"
            if meaningful and bigram not in seen_bigrams:
                seen_bigrams.add(bigram)
                bigrams[bigram] = bigrams.get(bigram, 0) + 1

        run_end = _seed_run_end(tokens, seed_token_list)
        if run_end is not None:
            remainder = " ".join(tokens[run_end:])
            if remainder and remainder not in full:
                full[remainder] = anchor

    anchor_set = AnchorSet(
        anchors=ordered,
        seed_tokens=seed_tokens,
        single_anchors=MappingProxyType(singles),
        bigram_anchors=MappingProxyType(bigrams),
        full_anchors=MappingProxyType(full),
    )
    logger.info("Anchor set extracted", extra=anchor_set.summary())
    return anchor_set
