"""Phrase text canonicalization shared by every scoring component."""

import re
import unicodedata

_WHITESPACE_RE = re.compile(r"\s+")


def _is_punctuation(char: str) -> bool:
    # Punctuation and symbols go; combining marks (Indic vowel signs) and "_" stay.
    category = unicodedata.category(char)
    return category[0] in "PS" and category != "Pc"


def normalize(text: str) -> str:
    """Casefold, strip punctuation and collapse whitespace.

    Idempotent: ``normalize(normalize(x)) == normalize(x)``.
    """
    if not text:
        return ""
    stripped = "".join(char for char in text.casefold() if not _is_punctuation(char))
    return _WHITESPACE_RE.sub(" ", stripped).strip()


def tokenize(text: str) -> list[str]:
    """Split already-normalized text into words."""
    if not text:
        return []
    return text.split(" ")


def normalize_tokens(text: str) -> list[str]:
    return tokenize(normalize(text))
