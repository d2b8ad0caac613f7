"""
FastAPI dependencies shared by the route handlers.

`get_engine` hands out the consensus engine built during the lifespan;
tests swap it through `app.dependency_overrides`.
"""

from typing import Optional

from fastapi import Header, HTTPException, Request

from app.core.auth import caller_identifier
from app.core.rate_limiter import check_rate_limit
from app.detection.aggregator import ConsensusEngine


def get_engine(request: Request) -> ConsensusEngine:
    engine = getattr(request.app.state, "engine", None)
    if engine is None:
        raise HTTPException(status_code=503, detail="Detection engine not initialized")
    return engine


def enforce_rate_limit(
    request: Request,
    authorization: Optional[str] = Header(None),
) -> str:
    """Count this request against the caller's quota and return the caller key."""
    identifier = caller_identifier(request, authorization)
    check_rate_limit(identifier)
    return identifier
