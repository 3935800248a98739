"""Classify a candidate against the position-ordered anchors."""

from collections.abc import Sequence

from topic_engine.services.scoring.types import AnchorPhrase, Tag, TagMatch

NO_MATCH = TagMatch(tag=Tag.NONE)


def _match(tag: Tag, rank: int, anchor: AnchorPhrase) -> TagMatch:
    return TagMatch(tag=tag, position=anchor.position, rank=rank, anchor=anchor)


def classify(text: str, anchors: Sequence[AnchorPhrase]) -> TagMatch:
    """EXACT over all anchors, then CHILD, then RELATED, else NONE.

    ``text`` and anchor texts are expected to be normalized and ``anchors``
    ordered by position. Empty anchors only ever match an empty candidate
    exactly.
    """
    for rank, anchor in enumerate(anchors):
        if text == anchor.text:
            return _match(Tag.EXACT, rank, anchor)

    for rank, anchor in enumerate(anchors):
        if anchor.text and text.startswith(anchor.text):
            return _match(Tag.CHILD, rank, anchor)

    for rank, anchor in enumerate(anchors):
        if anchor.text and anchor.text in text:
            return _match(Tag.RELATED, rank, anchor)

    return NO_MATCH
