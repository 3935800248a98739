"""Unit tests for phrase normalization, rounding and jitter."""

from topic_engine.services.scoring.jitter import jitter, string_hash
from topic_engine.services.scoring.normalizer import normalize, normalize_tokens, tokenize
from topic_engine.services.scoring.numeric import (
    lookup_by_count,
    points_at_least,
    points_at_most,
    position_value,
    round_half_up,
)


def test_normalize_lowercases_strips_punctuation_and_collapses_whitespace() -> None:
    assert normalize("  Content Creation,   TIPS!! ") == "content creation tips"
    assert normalize("Beginner's Guide?") == "beginners guide"
    assert normalize("snake_case\tand\nnewlines") == "snake_case and newlines"


def test_normalize_is_idempotent() -> None:
    for raw in ["How To  Edit Videos?!", "ÉDITION vidéo", "", "a-b-c", "2025 update"]:
        once = normalize(raw)
        assert normalize(once) == once


def test_normalize_empty_and_whitespace_only_input() -> None:
    assert normalize("") == ""
    assert normalize("   \t ") == ""
    assert normalize("!!!") == ""


def test_tokenize_splits_normalized_text() -> None:
    assert tokenize("") == []
    assert tokenize("content creation tips") == ["content", "creation", "tips"]
    assert normalize_tokens(" Video  EDITING ") == ["video", "editing"]


def test_round_half_up_rounds_halves_toward_positive_infinity() -> None:
    assert round_half_up(2.5) == 3
    assert round_half_up(12.5) == 13
    assert round_half_up(0.49) == 0
    assert round_half_up(-2.5) == -2
    assert round_half_up(42.857) == 43


def test_tier_lookups() -> None:
    tiers = ((15, 12), (10, 10), (2, 3))
    assert points_at_least(20, tiers) == 12
    assert points_at_least(10, tiers) == 10
    assert points_at_least(1, tiers) == 0
    assert points_at_most(0, ((0, 35), (15, 30)), 3) == 35
    assert points_at_most(16, ((0, 35), (15, 30)), 3) == 3


def test_table_lookups_reuse_last_entry_past_the_end() -> None:
    assert position_value(0, (87, 86, 85)) == 87
    assert position_value(10, (87, 86, 85)) == 85
    assert lookup_by_count(3, {0: -15, 1: -15, 2: -4}, -8) == -8
    assert lookup_by_count(2, {0: -15, 1: -15, 2: -4}, -8) == -4


def test_string_hash_matches_signed_32_bit_polynomial_hash() -> None:
    assert string_hash("") == 0
    assert string_hash("a") == 97
    assert string_hash("ab") == 97 * 31 + 98
    assert string_hash("hello") == 99162322
    assert string_hash("polygenelubricants") == -(2**31)


def test_jitter_is_deterministic_and_bounded() -> None:
    phrases = [f"content creation idea {index}" for index in range(200)]
    for phrase in phrases:
        value = jitter(phrase, 2)
        assert -2 <= value <= 2
        assert jitter(phrase, 2) == value
        assert -3 <= jitter(phrase, 3) <= 3

    assert jitter("ab", 2) == -2
    assert jitter("anything", 0) == 0
    assert len({jitter(phrase, 2) for phrase in phrases}) == 5


def test_normalize_keeps_combining_marks_in_indic_words() -> None:
    assert normalize("YouTube हिंदी!") == "youtube हिंदी"
    assert normalize("தமிழ் tips") == "தமிழ் tips"
