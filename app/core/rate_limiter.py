"""
Per-caller detection rate limiting: Redis-backed (preferred) with in-memory fallback.

Every /detect call fans out to several paid model APIs, so callers are
capped at `rate_limit_max_requests` detections per window.

The Redis client is accessed at call-time via the integration module
so it picks up the instance initialized during the FastAPI lifespan.
"""

import logging
import time
from typing import Dict, List

from fastapi import HTTPException

from app.config import settings
from app.integrations import redis_client as redis_module

logger = logging.getLogger(__name__)

# In-memory store: {identifier: [timestamp, ...]}
_rate_limits: Dict[str, List[float]] = {}

RATE_LIMIT_WINDOW = settings.rate_limit_request_window_sec
MAX_REQUESTS_PER_WINDOW = settings.rate_limit_max_requests

_TOO_MANY = "Too many detection requests. Please try again in a minute."


def check_rate_limit(identifier: str) -> None:
    """Raise HTTP 429 once `identifier` exceeds its quota for the current window."""
    rc = redis_module.client
    if rc:
        _check_rate_limit_redis(rc, identifier)
    else:
        _check_rate_limit_memory(identifier)


def _check_rate_limit_redis(rc, identifier: str) -> None:
    key = f"detect_rate:{identifier}"
    try:
        current_count = int(rc.incr(key))
        if current_count == 1:
            rc.expire(key, RATE_LIMIT_WINDOW)
    except Exception as e:
        logger.error(f"[RATE LIMIT] Redis error: {e}. Falling back to memory.")
        _check_rate_limit_memory(identifier)
        return

    if current_count > MAX_REQUESTS_PER_WINDOW:
        logger.warning(f"[RATE LIMIT] Redis limit exceeded for {identifier}")
        raise HTTPException(status_code=429, detail=_TOO_MANY)


def _check_rate_limit_memory(identifier: str) -> None:
    """Sliding-window limit kept in process memory."""
    now = time.time()

    if len(_rate_limits) > settings.rate_limit_memory_limit:
        _cleanup_all_limits(now)

    recent = [t for t in _rate_limits.get(identifier, []) if now - t < RATE_LIMIT_WINDOW]

    if len(recent) >= MAX_REQUESTS_PER_WINDOW:
        _rate_limits[identifier] = recent
        logger.warning(f"[RATE LIMIT] Memory limit exceeded for {identifier}")
        raise HTTPException(status_code=429, detail=_TOO_MANY)

    recent.append(now)
    _rate_limits[identifier] = recent


def _cleanup_all_limits(now: float) -> None:
    """Drop identifiers that have been idle for the full window."""
    expired_keys = [
        k for k, v in _rate_limits.items()
        if not v or now - v[-1] > RATE_LIMIT_WINDOW
    ]
    for k in expired_keys:
        del _rate_limits[k]
    logger.info(f"[RATE LIMIT] Cleanup removed {len(expired_keys)} idle callers.")
