"""Scoring API endpoints."""

import logging

from fastapi import APIRouter, HTTPException

from topic_engine.api.v1.scoring.constants import TOO_MANY_CANDIDATES_DETAIL
from topic_engine.config import settings
from topic_engine.schemas.scoring import (
    CandidateScoreResponse,
    ScoreSessionRequest,
    ScoreSessionResponse,
)
from topic_engine.services.scoring.engine import ScoringSession
from topic_engine.services.scoring.scoring_config import get_scoring_config

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/sessions",
    response_model=ScoreSessionResponse,
    summary="Score a session",
    description=(
        "Build the frequency index and anchor set for one seed phrase and return every "
        "scorer's output for each candidate, in input order."
    ),
)
def score_session(request: ScoreSessionRequest) -> ScoreSessionResponse:
    """Score all candidates of one session."""
    if len(request.candidates) > settings.max_candidates:
        raise HTTPException(
            status_code=413,
            detail=TOO_MANY_CANDIDATES_DETAIL,
        )

    config = get_scoring_config(settings.scoring_config_path)
    session = ScoringSession(
        request.seed_phrase,
        [candidate.model_dump() for candidate in request.candidates],
        [anchor.model_dump() for anchor in request.anchors],
        config=config,
    )
    signals = (
        {index: value.model_dump() for index, value in request.signals.items()}
        if request.signals is not None
        else None
    )
    scored = session.score_all(signals, request.scorers)

    return ScoreSessionResponse(
        seed_phrase=session.seed,
        config_version=config.version,
        total_candidates=len(scored),
        scorers=request.scorers or session.scorer_names,
        summary={
            **session.frequency_index.summary(),
            "anchor_set": session.anchor_set.summary(),
        },
        results=[CandidateScoreResponse.model_validate(item.to_dict()) for item in scored],
    )
