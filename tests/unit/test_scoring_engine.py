"""Unit tests for scoring session orchestration and input validation."""

import logging

import pytest

from topic_engine.core.exceptions import (
    EmptySeedPhraseError,
    InvalidInputError,
    UnknownScorerError,
)
from topic_engine.services.scoring.engine import ScoringSession
from topic_engine.services.scoring.percentile_scorer import ltv_boost
from topic_engine.services.scoring.types import SuggestionSignals

SEED = "Content Creation"
ANCHORS = [
    {"text": "content creation tips", "position": 0},
    {"text": "content creation for beginners", "position": 1},
]
CANDIDATES = [
    {"text": "Content creation tips", "origin_tag": "autocomplete"},
    {"text": "content creation tips for beginners", "origin_tag": "autocomplete"},
    "content creation business model",
    {"text": "how to start content creation"},
]


class _ListHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__()
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


def test_score_all_preserves_input_order_and_runs_every_scorer() -> None:
    session = ScoringSession(SEED, CANDIDATES, ANCHORS)

    scored = session.score_all()

    assert [candidate.index for candidate in scored] == [0, 1, 2, 3]
    assert [candidate.phrase.text for candidate in scored] == [
        "content creation tips",
        "content creation tips for beginners",
        "content creation business model",
        "how to start content creation",
    ]
    assert scored[0].phrase.origin_tag == "autocomplete"
    assert [result.scorer for result in scored[0].results] == ["percentile", "popularity_v2", "ltv"]
    assert scored[0].result("popularity_v2").tag == "EXACT"
    assert scored[1].result("popularity_v2").tag == "CHILD"
    assert scored[2].result("popularity_v2").tag == "NONE"
    assert scored[2].result("ltv").scores["ltv"] == 0


def test_dual_scorer_runs_only_where_signals_exist() -> None:
    session = ScoringSession(SEED, CANDIDATES, ANCHORS)

    scored = session.score_all(
        {1: {"suggestion_count": 12, "exact_match_count": 1, "topic_match_count": 10}},
    )

    assert scored[0].result("demand_opportunity") is None
    dual = scored[1].result("demand_opportunity")
    assert dual is not None
    assert 0 <= dual.scores["demand"] <= 100


def test_signals_may_be_a_sequence_aligned_with_candidates() -> None:
    session = ScoringSession(SEED, CANDIDATES, ANCHORS)

    scored = session.score_all([SuggestionSignals(suggestion_count=4), None, None, None])

    assert scored[0].result("demand_opportunity") is not None
    assert scored[1].result("demand_opportunity") is None


def test_scorer_subset_and_unknown_scorer() -> None:
    session = ScoringSession(SEED, CANDIDATES, ANCHORS)

    scored = session.score_all(scorer_names=["ltv"])
    assert all([r.scorer for r in candidate.results] == ["ltv"] for candidate in scored)

    with pytest.raises(UnknownScorerError) as exc_info:
        session.score_all(scorer_names=["nope"])
    assert exc_info.value.details == {"scorer": "nope"}


def test_partitioned_session_scores_identically() -> None:
    single = ScoringSession(SEED, CANDIDATES * 5, ANCHORS).score_all()
    partitioned = ScoringSession(SEED, CANDIDATES * 5, ANCHORS, partitions=3).score_all()

    assert [c.to_dict() for c in single] == [c.to_dict() for c in partitioned]


@pytest.mark.parametrize("seed", ["", "   ", "!!!", None, 42])
def test_empty_or_invalid_seed_is_rejected(seed) -> None:
    with pytest.raises(EmptySeedPhraseError):
        ScoringSession(seed, CANDIDATES, ANCHORS)


def test_non_string_candidate_identifies_the_record() -> None:
    with pytest.raises(InvalidInputError) as exc_info:
        ScoringSession(SEED, ["fine", {"text": 5}], ANCHORS)

    assert exc_info.value.details == {"collection": "candidates", "index": 1, "field": "text"}
    assert "candidates[1].text" in exc_info.value.message


@pytest.mark.parametrize(
    ("anchor", "field"),
    [
        ({"text": "content creation tips", "position": "0"}, "position"),
        ({"text": "content creation tips", "position": -1}, "position"),
        ({"text": "content creation tips", "position": True}, "position"),
        ({"text": None, "position": 0}, "text"),
        ({"text": "?!", "position": 0}, "text"),
    ],
)
def test_invalid_anchor_is_rejected(anchor: dict, field: str) -> None:
    with pytest.raises(InvalidInputError) as exc_info:
        ScoringSession(SEED, CANDIDATES, [anchor])

    assert exc_info.value.details["collection"] == "anchors"
    assert exc_info.value.details["field"] == field


@pytest.mark.parametrize(
    "signals",
    [
        {0: {"suggestion_count": -1}},
        {0: {"suggestion_count": 3, "exact_match_count": 1.5}},
        {0: {"topic_match_count": "2"}},
        {0: "not a mapping"},
        {9: {"suggestion_count": 1}},
        {"0": {"suggestion_count": 1}},
    ],
)
def test_invalid_signals_are_rejected(signals: dict) -> None:
    session = ScoringSession(SEED, CANDIDATES, ANCHORS)

    with pytest.raises(InvalidInputError) as exc_info:
        session.score_all(signals)

    assert exc_info.value.details["collection"] == "signals"


def test_empty_candidate_text_is_scored_within_bounds() -> None:
    session = ScoringSession(SEED, ["", "a", "content creation"], ANCHORS)

    for candidate in session.score_all({0: {}, 1: {}, 2: {}}):
        for result in candidate.results:
            for value in result.scores.values():
                if isinstance(value, bool):
                    continue
                assert -100 <= value <= 100


def test_session_logs_summary_and_rejections() -> None:
    engine_logger = logging.getLogger("topic_engine.services.scoring.engine")
    handler = _ListHandler()
    original_level = engine_logger.level
    engine_logger.addHandler(handler)
    engine_logger.setLevel(logging.INFO)
    try:
        ScoringSession(SEED, CANDIDATES, ANCHORS).score_all()
        with pytest.raises(InvalidInputError):
            ScoringSession(SEED, [None], ANCHORS)
    finally:
        engine_logger.removeHandler(handler)
        engine_logger.setLevel(original_level)

    summary = next(r for r in handler.records if r.getMessage() == "Session scoring complete")
    assert summary.candidates == 4
    assert summary.popularity_v2_tags == {"EXACT": 1, "CHILD": 1, "NONE": 2}

    rejected = next(r for r in handler.records if r.getMessage() == "Rejected scoring input")
    assert rejected.levelno == logging.WARNING
    assert rejected.collection == "candidates"


def test_percentile_result_carries_ltv_lift_and_badge() -> None:
    session = ScoringSession(SEED, CANDIDATES, ANCHORS)

    for candidate in session.score_all():
        percentile = candidate.result("percentile")
        ltv_score = candidate.result("ltv").scores["ltv"]

        assert percentile.breakdown["ltv_score"] == ltv_score
        assert percentile.breakdown["ltv_boost"] == ltv_boost(ltv_score)
        assert percentile.breakdown["ltv_badge"] is (ltv_score >= 50)
        assert percentile.scores["popularity_with_ltv"] == min(
            100, percentile.scores["popularity"] + ltv_boost(ltv_score)
        )

    exact = session.score_all()[0]
    assert exact.result("ltv").scores["ltv"] > 0
    assert exact.result("percentile").breakdown["ltv_boost"] > 0


def test_percentile_alone_has_no_ltv_lift() -> None:
    session = ScoringSession(SEED, CANDIDATES, ANCHORS)

    scored = session.score_all(scorer_names=["percentile"])

    assert all("popularity_with_ltv" not in c.result("percentile").scores for c in scored)
    assert all("ltv_badge" not in c.result("percentile").breakdown for c in scored)
