"""
Unit tests for app/detection/aggregator.py — aggregate() and ConsensusEngine.

Adapters are StubAdapter instances with canned verdicts; no network involved.
"""

import asyncio
import math

import pytest
from pydantic import ValidationError

from app.detection.adapters.base import AdapterConfig, ModelAdapter, ModelVerdict
from app.detection.aggregator import ConsensusEngine, aggregate
from app.detection.breakdown import round_half_up
from app.detection.errors import AdapterRateLimited, AllModelsFailed, EnsembleConfigError
from app.schemas.detection import DetectionOpinion
from tests.conftest import (
    SAMPLE_TEXT,
    StubAdapter,
    failed_opinion,
    failing,
    ok,
    opinion,
    verdict,
)


def _sum(breakdown) -> int:
    return breakdown.ai_generated + breakdown.mixed + breakdown.human


# ---------------------------------------------------------------------------
# aggregate() — pure combination of settled opinions
# ---------------------------------------------------------------------------


def test_breakdown_sums_to_exactly_100():
    result = aggregate([
        opinion("gemini", 0.40, 77.7, breakdown=(60.1, 20.3, 19.6)),
        opinion("gpt", 0.35, 33.3, breakdown=(33.4, 33.3, 33.3)),
        opinion("claude", 0.25, 12.5, breakdown=(10.0, 5.5, 84.5)),
    ])
    assert _sum(result.breakdown) == 100


def test_failed_model_weight_is_redistributed():
    result = aggregate([
        opinion("gemini", 0.40, 80.0),
        failed_opinion("gpt", 0.35),
        opinion("claude", 0.25, 20.0),
    ])

    weights = {m.model_id: m.effective_weight for m in result.models}
    assert weights["gemini"] == pytest.approx(0.40 / 0.65, abs=1e-4)
    assert weights["claude"] == pytest.approx(0.25 / 0.65, abs=1e-4)
    assert math.isclose(sum(weights.values()), 1.0, abs_tol=1e-3)

    expected = round_half_up(80.0 * 0.40 / 0.65 + 20.0 * 0.25 / 0.65)
    assert result.overall_score == expected == 57
    assert result.contributing_models.successful == 2
    assert result.contributing_models.total == 3
    assert [f.model_id for f in result.failed_models] == ["gpt"]


def test_renormalized_score_differs_from_unweighted_drop():
    opinions = [opinion("gemini", 0.40, 90.0), failed_opinion("gpt", 0.35), opinion("claude", 0.25, 10.0)]
    # plain mean of the survivors would be 50
    assert aggregate(opinions).overall_score == round_half_up(90 * 0.40 / 0.65 + 10 * 0.25 / 0.65)
    assert aggregate(opinions).overall_score != 50


def test_all_failed_raises_with_every_reason():
    with pytest.raises(AllModelsFailed) as exc:
        aggregate([
            failed_opinion("gemini", 0.40, "no response within 30s", "timeout"),
            failed_opinion("gpt", 0.35, "HTTP 401", "auth_failure"),
            failed_opinion("claude", 0.25, "HTTP 429", "rate_limited"),
        ])
    assert exc.value.errors == [
        "gemini: no response within 30s",
        "gpt: HTTP 401",
        "claude: HTTP 429",
    ]


def test_aggregate_is_deterministic():
    opinions = [
        opinion("gemini", 0.40, 71.3, "high", (55.5, 30.0, 14.5)),
        opinion("gpt", 0.35, 64.9, "high", (50.0, 25.0, 25.0)),
        opinion("claude", 0.25, 12.0, "low", (10.0, 10.0, 80.0)),
    ]
    first = aggregate(opinions).model_dump_json()
    second = aggregate(list(opinions)).model_dump_json()
    assert first == second


def test_single_survivor_takes_full_weight():
    result = aggregate([
        failed_opinion("gemini", 0.40),
        failed_opinion("gpt", 0.35),
        opinion("claude", 0.25, 63.0, "high"),
    ])
    assert result.overall_score == 63
    assert result.models[0].effective_weight == 1.0
    assert result.confidence == "high"


def test_confidence_plurality_vote():
    high = aggregate([
        opinion("gemini", 0.40, 80, "high"),
        opinion("gpt", 0.35, 80, "high"),
        opinion("claude", 0.25, 80, "low"),
    ])
    low = aggregate([
        opinion("gemini", 0.40, 80, "high"),
        opinion("gpt", 0.35, 80, "low"),
        opinion("claude", 0.25, 80, "low"),
    ])
    assert high.confidence == "high"
    assert low.confidence == "low"


def test_classification_fields_follow_breakdown():
    result = aggregate([
        opinion("gemini", 0.40, 45.0, breakdown=(20.0, 65.0, 15.0)),
        opinion("gpt", 0.35, 45.0, breakdown=(20.0, 65.0, 15.0)),
        opinion("claude", 0.25, 45.0, breakdown=(20.0, 65.0, 15.0)),
    ])
    assert result.breakdown.mixed == 65
    assert result.category == "mixed"
    assert result.label == "Heavily polished by AI"
    assert result.risk_level == "Medium Risk"


def test_successful_opinion_requires_score_fields():
    with pytest.raises(ValidationError):
        DetectionOpinion(model_id="gpt", weight=0.35, succeeded=True, confidence="high")


def test_failed_opinion_requires_error_reason():
    with pytest.raises(ValidationError):
        DetectionOpinion(model_id="gpt", weight=0.35, succeeded=False)


# ---------------------------------------------------------------------------
# ConsensusEngine construction
# ---------------------------------------------------------------------------


def test_engine_rejects_weights_not_summing_to_one():
    with pytest.raises(EnsembleConfigError):
        ConsensusEngine([ok("gemini", 0.40, 50), ok("gpt", 0.40, 50)])


def test_engine_rejects_empty_adapter_list():
    with pytest.raises(EnsembleConfigError):
        ConsensusEngine([])


def test_engine_rejects_duplicate_model_ids():
    with pytest.raises(EnsembleConfigError):
        ConsensusEngine([ok("gpt", 0.5, 50), ok("gpt", 0.5, 50)])


def test_engine_rejects_zero_weight():
    with pytest.raises(EnsembleConfigError):
        ConsensusEngine([ok("gpt", 1.0, 50), ok("claude", 0.0, 50)])


def test_engine_accepts_float_drift():
    engine = ConsensusEngine([ok("a", 0.1, 1), ok("b", 0.2, 1), ok("c", 0.7, 1)])
    assert len(engine.adapters) == 3


# ---------------------------------------------------------------------------
# ConsensusEngine.detect — fan-out / settle
# ---------------------------------------------------------------------------


async def test_detect_combines_all_models():
    engine = ConsensusEngine([
        ok("gemini", 0.40, 91, "high", (85, 10, 5)),
        ok("gpt", 0.35, 80, "high", (75, 15, 10)),
        ok("claude", 0.25, 70, "moderate", (60, 20, 20)),
    ])
    result = await engine.detect(SAMPLE_TEXT)

    assert result.overall_score == 82
    assert result.category == "ai"
    assert result.risk_level == "High AI Risk"
    assert result.confidence == "high"
    assert _sum(result.breakdown) == 100
    assert result.contributing_models.successful == 3


async def test_detect_all_adapters_invoked_despite_failures():
    adapters = [failing("gemini", 0.40), ok("gpt", 0.35, 40), failing("claude", 0.25)]
    engine = ConsensusEngine(adapters)

    result = await engine.detect(SAMPLE_TEXT)

    assert all(a.calls == 1 for a in adapters)
    assert result.overall_score == 40
    assert {f.model_id for f in result.failed_models} == {"gemini", "claude"}


async def test_detect_all_failed_raises():
    engine = ConsensusEngine([
        failing("gemini", 0.40, "HTTP 500"),
        StubAdapter("gpt", 0.35, error=AdapterRateLimited("HTTP 429")),
        failing("claude", 0.25, "HTTP 502"),
    ])
    with pytest.raises(AllModelsFailed) as exc:
        await engine.detect(SAMPLE_TEXT)
    assert len(exc.value.errors) == 3


async def test_detect_empty_text_fails_every_model():
    engine = ConsensusEngine([ok("gemini", 0.40, 10), ok("gpt", 0.35, 10), ok("claude", 0.25, 10)])
    with pytest.raises(AllModelsFailed):
        await engine.detect("   ")


async def test_detect_slow_model_times_out_without_blocking_others():
    engine = ConsensusEngine([
        StubAdapter("gemini", 0.40, verdict=verdict(99), delay=5.0, timeout_sec=0.05),
        ok("gpt", 0.35, 20),
        ok("claude", 0.25, 20),
    ])

    result = await asyncio.wait_for(engine.detect(SAMPLE_TEXT), timeout=2.0)

    assert result.overall_score == 20
    assert result.failed_models[0].model_id == "gemini"
    assert result.failed_models[0].error_kind == "timeout"


async def test_detect_runs_models_concurrently():
    started = 0
    all_started = asyncio.Event()

    class BarrierAdapter(ModelAdapter):
        async def _score(self, text: str) -> ModelVerdict:
            nonlocal started
            started += 1
            if started == 3:
                all_started.set()
            # Sequential execution would never reach the third call
            await all_started.wait()
            return verdict(50)

    engine = ConsensusEngine([
        BarrierAdapter(AdapterConfig(model_id=m, weight=w, timeout_sec=1.0))
        for m, w in (("gemini", 0.40), ("gpt", 0.35), ("claude", 0.25))
    ])
    result = await engine.detect(SAMPLE_TEXT)
    assert result.contributing_models.successful == 3


async def test_detect_output_independent_of_completion_order():
    fast_first = ConsensusEngine([
        StubAdapter("gemini", 0.40, verdict=verdict(81, "high", (70, 20, 10)), delay=0.05),
        StubAdapter("gpt", 0.35, verdict=verdict(42, "low", (30, 30, 40))),
        StubAdapter("claude", 0.25, verdict=verdict(17, "moderate", (5, 15, 80)), delay=0.02),
    ])
    slow_first = ConsensusEngine([
        StubAdapter("gemini", 0.40, verdict=verdict(81, "high", (70, 20, 10))),
        StubAdapter("gpt", 0.35, verdict=verdict(42, "low", (30, 30, 40)), delay=0.05),
        StubAdapter("claude", 0.25, verdict=verdict(17, "moderate", (5, 15, 80))),
    ])

    a = await fast_first.detect(SAMPLE_TEXT)
    b = await slow_first.detect(SAMPLE_TEXT)

    assert a.model_dump_json() == b.model_dump_json()
    assert [m.model_id for m in a.models] == ["gemini", "gpt", "claude"]


async def test_detect_invalid_breakdown_counts_as_model_failure():
    engine = ConsensusEngine([
        ok("gemini", 0.40, 60, breakdown=(60, 30, 30)),  # sums to 120
        ok("gpt", 0.35, 30),
        ok("claude", 0.25, 30),
    ])
    result = await engine.detect(SAMPLE_TEXT)

    assert result.failed_models[0].model_id == "gemini"
    assert result.failed_models[0].error_kind == "malformed_response"
    assert result.overall_score == 30


async def test_detect_out_of_range_probability_counts_as_model_failure():
    engine = ConsensusEngine([ok("gemini", 0.5, 140), ok("gpt", 0.5, 30)])
    result = await engine.detect(SAMPLE_TEXT)
    assert [f.model_id for f in result.failed_models] == ["gemini"]


async def test_detect_unexpected_exception_is_settled_as_failure():
    engine = ConsensusEngine([
        StubAdapter("gemini", 0.40, error=RuntimeError("sdk bug")),
        ok("gpt", 0.35, 10),
        ok("claude", 0.25, 10),
    ])
    result = await engine.detect(SAMPLE_TEXT)

    assert result.overall_score == 10
    failure = result.failed_models[0]
    assert failure.model_id == "gemini"
    assert failure.error_kind == "upstream_error"
    assert "sdk bug" in failure.error
