"""Scoring session request/response schemas."""

from typing import Any

from pydantic import BaseModel, Field, model_validator


class CandidateInput(BaseModel):
    """One candidate phrase; a bare string is accepted as its text."""

    text: str
    origin_tag: str = ""

    @model_validator(mode="before")
    @classmethod
    def _accept_bare_text(cls, value: Any) -> Any:
        if isinstance(value, str):
            return {"text": value}
        return value


class AnchorInput(BaseModel):
    """Reference phrase with its 0-based rank."""

    text: str
    position: int = Field(ge=0)


class SuggestionSignalsInput(BaseModel):
    """Autocomplete volume for one candidate."""

    suggestion_count: int = Field(0, ge=0)
    exact_match_count: int = Field(0, ge=0)
    topic_match_count: int = Field(0, ge=0)


class ScoreSessionRequest(BaseModel):
    """Schema for scoring a session of candidates."""

    seed_phrase: str = Field(min_length=1)
    candidates: list[CandidateInput]
    anchors: list[AnchorInput] = Field(default_factory=list)
    signals: dict[int, SuggestionSignalsInput] | None = Field(
        default=None,
        description="Suggestion signals keyed by candidate index.",
    )
    scorers: list[str] | None = Field(
        default=None,
        description="Subset of scorers to run; all registered scorers when omitted.",
    )


class ScoreResultResponse(BaseModel):
    """One scorer's output for one candidate."""

    scorer: str
    tag: str | None
    scores: dict[str, Any]
    breakdown: dict[str, Any]


class CandidateScoreResponse(BaseModel):
    """All scorer outputs for one candidate."""

    index: int
    text: str
    origin_tag: str
    scores: dict[str, ScoreResultResponse]


class ScoreSessionResponse(BaseModel):
    """Schema for a scored session."""

    seed_phrase: str
    config_version: str
    total_candidates: int
    scorers: list[str]
    summary: dict[str, Any]
    results: list[CandidateScoreResponse]
