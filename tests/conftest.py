"""
Shared pytest fixtures for all test modules.

No test talks to a real model API: adapters are either `StubAdapter`
instances with canned verdicts, or live adapters whose HTTP session / SDK
client is mocked.
"""

import asyncio
from typing import Optional
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from app.core.dependencies import get_engine
from app.detection.adapters.base import AdapterConfig, ModelAdapter, ModelVerdict
from app.detection.adapters.offline import OfflineHeuristicAdapter
from app.detection.aggregator import ConsensusEngine
from app.detection.errors import AdapterError
from app.main import app
from app.schemas.detection import Breakdown, DetectionOpinion
from tests.mocks.redis_mock import MockRedis

# Weights used by the production ensemble.
WEIGHTS = {"gemini": 0.40, "gpt": 0.35, "claude": 0.25}


# ---------------------------------------------------------------------------
# Test-data helpers
# ---------------------------------------------------------------------------


class StubAdapter(ModelAdapter):
    """Adapter with a canned verdict or error, optionally delayed."""

    log_tag = "[STUB]"

    def __init__(
        self,
        model_id: str,
        weight: float,
        verdict: Optional[ModelVerdict] = None,
        error: Optional[Exception] = None,
        delay: float = 0.0,
        timeout_sec: float = 5.0,
    ):
        super().__init__(AdapterConfig(model_id=model_id, weight=weight, timeout_sec=timeout_sec))
        self.verdict = verdict
        self.error = error
        self.delay = delay
        self.calls = 0

    async def _score(self, text: str) -> ModelVerdict:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.verdict


def verdict(p: float, confidence: str = "moderate", breakdown: Optional[tuple] = None) -> ModelVerdict:
    split = Breakdown(ai_generated=breakdown[0], mixed=breakdown[1], human=breakdown[2]) if breakdown else None
    return ModelVerdict(ai_probability=p, confidence=confidence, breakdown=split)


def ok(model_id: str, weight: float, p: float, confidence: str = "moderate",
       breakdown: Optional[tuple] = None) -> StubAdapter:
    return StubAdapter(model_id, weight, verdict=verdict(p, confidence, breakdown))


def failing(model_id: str, weight: float, message: str = "boom") -> StubAdapter:
    return StubAdapter(model_id, weight, error=AdapterError(message))


def opinion(model_id: str, weight: float, p: float, confidence: str = "moderate",
            breakdown: tuple = None) -> DetectionOpinion:
    ai, mixed, human = breakdown or (p, 0.0, 100.0 - p)
    return DetectionOpinion(
        model_id=model_id,
        weight=weight,
        succeeded=True,
        ai_probability=p,
        breakdown=Breakdown(ai_generated=ai, mixed=mixed, human=human),
        confidence=confidence,
    )


def failed_opinion(model_id: str, weight: float, error: str = "HTTP 500",
                   kind: str = "upstream_error") -> DetectionOpinion:
    return DetectionOpinion(model_id=model_id, weight=weight, succeeded=False, error=error, error_kind=kind)


def offline_engine() -> ConsensusEngine:
    return ConsensusEngine([
        OfflineHeuristicAdapter(AdapterConfig(model_id=model_id, weight=weight))
        for model_id, weight in WEIGHTS.items()
    ])


SAMPLE_TEXT = (
    "Furthermore, the results demonstrate a clear improvement. Moreover, the method "
    "generalizes well to new data. Additionally, the approach is efficient. "
    "Consequently, we recommend its adoption in production systems."
)


# ---------------------------------------------------------------------------
# Core infrastructure fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_redis(monkeypatch):
    """Replace redis_client.client with an in-memory MockRedis."""
    from app.integrations import redis_client as rc

    mock_rc = MockRedis()
    monkeypatch.setattr(rc, "client", mock_rc)
    return mock_rc


@pytest.fixture
def client(mock_redis):
    """
    FastAPI TestClient with mocked Redis.

    redis_client.initialize() is patched to a no-op so it can't overwrite the
    mock. The lifespan still builds the real engine from settings; tests that
    need canned results override `get_engine`.
    """
    with patch("app.integrations.redis_client.initialize"):
        with TestClient(app, raise_server_exceptions=False) as c:
            yield c
    app.dependency_overrides.clear()


@pytest.fixture
def use_engine():
    """Install an engine for the duration of a route test."""

    def _install(engine):
        app.dependency_overrides[get_engine] = lambda: engine
        return engine

    yield _install
    app.dependency_overrides.pop(get_engine, None)
