"""
Detection route: /detect

Accepts a JSON payload { "text": "..." }. An `Authorization: Bearer <token>`
header raises the word ceiling; the token itself is validated upstream.

Enforces the word limit and the per-caller rate limit, then asks every
configured model for an opinion. If none of them answers, the caller gets a
single 503 "detection unavailable" instead of a partial score.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException

from app.core.auth import is_authenticated
from app.core.dependencies import enforce_rate_limit, get_engine
from app.detection.aggregator import ConsensusEngine
from app.detection.errors import AllModelsFailed
from app.schemas.detection import DetectionResponse, DetectRequest
from app.services.detection_service import check_word_limit

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Detection"])


@router.post("/detect", response_model=DetectionResponse)
async def detect(
    payload: DetectRequest,
    caller: str = Depends(enforce_rate_limit),
    engine: ConsensusEngine = Depends(get_engine),
    authorization: Optional[str] = Header(None),
):
    """
    Detect AI-generated content in a text sample.
    """
    authenticated = is_authenticated(authorization)
    word_count = check_word_limit(payload.text, authenticated)

    logger.info(f"[ROUTE] Detection for {caller}: {word_count} words, auth={authenticated}")

    try:
        result = await engine.detect(payload.text)
    except AllModelsFailed as e:
        raise HTTPException(
            status_code=503,
            detail={
                "code": "DETECTION_UNAVAILABLE",
                "message": "Detection unavailable, please retry.",
                "errors": e.errors,
            },
        )

    return DetectionResponse(**result.model_dump(), word_count=word_count)
