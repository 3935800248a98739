"""Unit tests for corpus pattern counts and percentile ranks."""

import pytest

from topic_engine.services.scoring.frequency_index import (
    FrequencyCounts,
    PatternCategory,
    build_frequency_index,
    rank_percentiles,
    split_on_seed,
)

SEED = "content creation"
CORPUS = [
    "content creation tips",
    "content creation tips for beginners",
    "best content creation tools",
    "how to start content creation",
    "content creation",
]


def _as_dict(index, attribute: str) -> dict[str, dict[str, int]]:
    return {
        category.value: dict(getattr(index, attribute)[category]) for category in PatternCategory
    }


def test_split_on_seed_returns_seed_relative_components() -> None:
    parts = split_on_seed("best content creation tips for beginners", SEED)

    assert parts.found
    assert parts.prefix == "best"
    assert parts.suffix == "tips for beginners"
    assert parts.seed_plus_1 == "tips"
    assert parts.seed_plus_2 == "for"

    assert not split_on_seed("video editing", SEED).found


def test_build_frequency_index_counts_every_category() -> None:
    index = build_frequency_index(CORPUS, SEED)

    assert index.total_phrases == 5
    assert index.count_of("word", "content") == 5
    assert index.count_of("bigram", "creation tips") == 2
    assert index.count_of("trigram", "content creation tips") == 2
    assert dict(index.counts[PatternCategory.PREFIX]) == {"best": 1, "how to start": 1}
    assert dict(index.counts[PatternCategory.SUFFIX]) == {
        "tips": 1,
        "tips for beginners": 1,
        "tools": 1,
    }
    assert dict(index.counts[PatternCategory.SEED_PLUS_1]) == {"tips": 2, "tools": 1}
    assert dict(index.counts[PatternCategory.SEED_PLUS_2]) == {"for": 1}
    assert dict(index.counts[PatternCategory.STARTER]) == {"best": 1, "how": 1}
    assert dict(index.counts[PatternCategory.TWO_WORD_STARTER]) == {
        "best content": 1,
        "how to": 1,
    }


def test_starters_skip_single_character_first_words() -> None:
    index = build_frequency_index(["a great content creation setup"], SEED)

    assert index.count_of("starter", "a") == 0
    assert index.count_of("two_word_starter", "a great") == 1


def test_percentiles_rank_by_count_then_pattern_text() -> None:
    index = build_frequency_index(CORPUS, SEED)

    assert index.percentile_of("seed_plus_1", "tools") == 0
    assert index.percentile_of("seed_plus_1", "tips") == 100
    assert index.percentile_of("prefix", "best") == 0
    assert index.percentile_of("prefix", "how to start") == 100
    assert index.percentile_of("suffix", "tips for beginners") == 50


def test_percentile_of_defaults_to_neutral_value() -> None:
    index = build_frequency_index(CORPUS, SEED)

    assert index.percentile_of("seed_plus_2", "for") == 50
    assert index.percentile_of("prefix", "missing pattern") == 50
    assert index.percentile_of("suffix", "") == 50


def test_rank_percentiles_edge_cases() -> None:
    assert rank_percentiles({}) == {}
    assert rank_percentiles({"only": 7}) == {"only": 50}
    assert rank_percentiles({"a": 1, "b": 2, "c": 3, "d": 4, "e": 5}) == {
        "a": 0,
        "b": 25,
        "c": 50,
        "d": 75,
        "e": 100,
    }


def test_percentiles_are_monotonic_in_count() -> None:
    corpus = [
        f"content creation {word} {other}"
        for word_index, word in enumerate(["tips", "ideas", "tools", "apps", "jobs", "gear"])
        for other in ["for beginners", "at home", "fast", "free"][: word_index % 4 + 1]
    ]
    index = build_frequency_index(corpus, SEED)

    for category in PatternCategory:
        counts = index.counts[category]
        ranks = index.percentiles[category]
        for left, left_count in counts.items():
            for right, right_count in counts.items():
                if left_count < right_count:
                    assert ranks[left] <= ranks[right]
        assert all(0 <= value <= 100 for value in ranks.values())


def test_partitioned_build_matches_single_pass() -> None:
    corpus = CORPUS * 3 + ["why content creation is hard", "content creation gear list"]

    single = build_frequency_index(corpus, SEED)
    partitioned = build_frequency_index(corpus, SEED, partitions=4)

    assert partitioned.total_phrases == single.total_phrases
    assert _as_dict(partitioned, "counts") == _as_dict(single, "counts")
    assert _as_dict(partitioned, "percentiles") == _as_dict(single, "percentiles")


def test_counts_merge_is_commutative() -> None:
    left = FrequencyCounts(seed=SEED).update(CORPUS[:2])
    right = FrequencyCounts(seed=SEED).update(CORPUS[2:])

    forward = left.merge(right)
    backward = right.merge(left)

    assert forward.total_phrases == backward.total_phrases == 5
    assert forward.counts == backward.counts


def test_merge_rejects_different_seeds() -> None:
    with pytest.raises(ValueError):
        FrequencyCounts(seed=SEED).merge(FrequencyCounts(seed="video editing"))


def test_index_is_read_only_and_reports_summary() -> None:
    index = build_frequency_index(CORPUS, SEED)

    with pytest.raises(TypeError):
        index.counts[PatternCategory.WORD]["content"] = 99  # type: ignore[index]

    assert index.unique_words == len(index.counts[PatternCategory.WORD])
    assert index.top_patterns("word", 2) == [("content", 5), ("creation", 5)]
    summary = index.summary()
    assert summary["total_phrases"] == 5
    assert summary["top_starters"] == [("best", 1), ("how", 1)]


def test_empty_corpus_builds_empty_index() -> None:
    index = build_frequency_index([], SEED)

    assert index.total_phrases == 0
    assert dict(index.percentiles[PatternCategory.WORD]) == {}
    assert index.percentile_of("word", "anything") == 50
