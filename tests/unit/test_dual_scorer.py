"""Unit tests for suggestion-volume Demand / Opportunity scoring."""

from topic_engine.services.scoring.dual_scorer import DemandOpportunityScorer
from topic_engine.services.scoring.intent import IntentDetector
from topic_engine.services.scoring.scoring_config import DEFAULT_INTENT_CATEGORIES
from topic_engine.services.scoring.types import Phrase, SuggestionSignals


def _score(text: str, sc: int, em: int, tm: int):
    signals = SuggestionSignals(suggestion_count=sc, exact_match_count=em, topic_match_count=tm)
    return DemandOpportunityScorer().score_signals(Phrase.from_raw(text), signals)


def test_seven_word_learning_phrase_scores_high_demand_and_opportunity() -> None:
    result = _score("How to fix audio problems on YouTube", sc=12, em=1, tm=10)

    assert result.breakdown["word_count"] == 7
    assert result.breakdown["suggestion_points"] == 43
    assert result.breakdown["topic_match_points"] == 13
    assert result.breakdown["exact_match_points"] == 2
    assert result.breakdown["intent_points"] == 10
    assert result.scores["demand"] == 68
    assert result.breakdown["demand_label"] == "High Demand"

    assert result.breakdown["exact_match_percent"] == 8
    assert result.breakdown["low_competition"] == 30
    assert result.breakdown["long_tail"] == 18
    assert result.breakdown["evergreen_intent"] == 25
    assert result.breakdown["demand_validation"] == 15
    assert result.scores["opportunity"] == 88
    assert result.scores["is_super_topic"] is False
    assert result.breakdown["opportunity_label"] == "Excellent Opportunity"


def test_super_topic_needs_both_scores() -> None:
    result = _score("how to fix slow laptop fast", sc=14, em=0, tm=14)

    assert result.scores["demand"] == 80
    assert result.scores["opportunity"] == 97
    assert result.scores["is_super_topic"] is True
    assert result.breakdown["opportunity_label"] == "SuperTopic"


def test_zero_suggestions_short_circuit_ratio_terms() -> None:
    result = _score("video", sc=0, em=0, tm=0)

    assert result.scores["demand"] == 0
    assert result.breakdown["demand_label"] == "Limited Interest"
    assert result.breakdown["exact_match_percent"] is None
    assert result.breakdown["low_competition"] == 3
    assert result.breakdown["demand_validation"] == 2
    assert result.scores["opportunity"] == 5
    assert result.breakdown["opportunity_label"] == "Weak Opportunity"


def test_suggestion_points_scale_with_word_count() -> None:
    scorer = DemandOpportunityScorer()
    full = SuggestionSignals(suggestion_count=14)

    assert scorer.suggestion_points(full, 1) == 35
    assert scorer.suggestion_points(full, 4) == 50
    assert scorer.suggestion_points(full, 5) == 55
    assert scorer.suggestion_points(full, 8) == 48
    assert scorer.suggestion_points(full, 12) == 45
    assert scorer.suggestion_points(SuggestionSignals(suggestion_count=40), 4) == 50


def test_low_competition_tiers() -> None:
    scorer = DemandOpportunityScorer()

    def points(em: int) -> int:
        return scorer.low_competition(SuggestionSignals(suggestion_count=100, exact_match_count=em))[0]

    assert [points(em) for em in (0, 15, 30, 50, 70, 71)] == [35, 30, 22, 15, 8, 3]


def test_scores_are_clamped_for_extreme_signals() -> None:
    result = _score("how to start a youtube channel for beginners fast", sc=1000, em=1000, tm=1000)

    assert 0 <= result.scores["demand"] <= 100
    assert 0 <= result.scores["opportunity"] <= 100
    assert result.breakdown["exact_match_points"] == 15
    assert result.breakdown["topic_match_points"] == 15


def test_intent_detection_counts_first_trigger_once_per_category() -> None:
    detector = IntentDetector(DEFAULT_INTENT_CATEGORIES)

    hits = detector.detect("how to learn guitar")
    learning = [hit for hit in hits if hit.category == "learning"]
    assert len(learning) == 1
    assert learning[0].trigger == "how to"

    problem = [hit for hit in detector.detect("my mic doesnt work") if hit.category == "problem"]
    assert problem[0].trigger == "doesnt work"
    assert detector.detect("") == []
