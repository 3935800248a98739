"""API v1 router aggregator."""

from fastapi import APIRouter

from topic_engine.api.v1.scoring import routes as scoring

api_router = APIRouter()

api_router.include_router(scoring.router, prefix="/scoring", tags=["Scoring"])
