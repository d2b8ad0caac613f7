"""
Upstash Redis integration — backs the per-caller detection rate limit.

`client` starts as None. Call `initialize()` inside the FastAPI lifespan
context manager. Consuming modules reference `redis_client.client` at
call time rather than importing the variable directly.
"""

import logging

from upstash_redis import Redis

from app.config import settings

logger = logging.getLogger(__name__)

# Set by initialize(). None when Redis credentials are absent or init fails.
client = None  # Redis | None


def initialize() -> None:
    """Create the Upstash Redis client and bind it to the module-level `client`."""
    global client

    if not (settings.upstash_redis_host and settings.upstash_redis_password):
        logger.warning(
            "[STARTUP] Redis credentials not found. Rate limiting will fallback to memory."
        )
        return

    try:
        client = Redis(url=settings.upstash_redis_host, token=settings.upstash_redis_password)
        logger.info("[STARTUP] Upstash Redis client initialized successfully")
    except Exception as e:
        logger.error(f"[STARTUP] Failed to initialize Upstash Redis client: {e}")
