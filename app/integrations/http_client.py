"""
Pooled aiohttp session for the HTTP model adapters (GPT, Claude, GPTZero).

One detection posts to every provider at once, so the adapters share a single
connection pool opened in the FastAPI lifespan. Adapters never hold the
session themselves; they borrow it per request:

    async with http_client.request_session() as sess:
        async with sess.post(url, json=payload) as response:
            ...

Outside the app (scripts, unit tests that skip the lifespan) there is no
pool, and `request_session` opens a short-lived session for the one call.
"""

import logging
from contextlib import asynccontextmanager

import aiohttp

from app.config import settings

logger = logging.getLogger(__name__)

session: aiohttp.ClientSession | None = None


def _new_session() -> aiohttp.ClientSession:
    return aiohttp.ClientSession(
        timeout=aiohttp.ClientTimeout(total=settings.http_timeout_sec),
        connector=aiohttp.TCPConnector(limit_per_host=settings.http_pool_per_host),
    )


def _pool_open() -> bool:
    return session is not None and not session.closed


async def initialize() -> None:
    global session
    session = _new_session()
    logger.info(
        f"[STARTUP] HTTP pool opened (timeout={settings.http_timeout_sec}s, "
        f"per_host={settings.http_pool_per_host})"
    )


async def close() -> None:
    global session
    if not _pool_open():
        return
    await session.close()
    session = None
    logger.info("[SHUTDOWN] HTTP pool closed")


@asynccontextmanager
async def request_session():
    """Borrow the pooled session, or open a one-off session when no pool exists."""
    if _pool_open():
        yield session
        return

    one_off = _new_session()
    try:
        yield one_off
    finally:
        await one_off.close()
