"""
Consensus engine — public entry point for the /detect route.

`ConsensusEngine.detect` orchestrates:
  1. Fan-out: every configured adapter scores the text concurrently
  2. Settle: wait for all of them; each resolves to an opinion, success or not
  3. Aggregate: renormalize the surviving weights and combine (see `aggregate`)

`aggregate` is a pure function of the settled opinions, so the same set of
opinions always produces the same `ConsensusResult`, whatever order the
models finished in.
"""

import asyncio
import hashlib
import logging
import math
from typing import Sequence

from app.config import settings
from app.detection import classifier
from app.detection.adapters.base import ModelAdapter
from app.detection.breakdown import clamp, rescale_to_100, round_half_up
from app.detection.errors import AllModelsFailed, EnsembleConfigError
from app.schemas.detection import (
    ConsensusResult,
    ContributingModels,
    DetectionOpinion,
    ModelFailure,
    ModelScore,
)

logger = logging.getLogger(__name__)


def aggregate(opinions: Sequence[DetectionOpinion]) -> ConsensusResult:
    """
    Combine settled opinions into one verdict.

    Failed models drop out and their weight is redistributed proportionally:
    effective_weight(m) = weight(m) / sum(weight of successful models).
    Raises AllModelsFailed when no opinion succeeded.
    """
    successful = [o for o in opinions if o.succeeded]
    failed = [o for o in opinions if not o.succeeded]

    if not successful:
        raise AllModelsFailed([f"{o.model_id}: {o.error}" for o in failed])

    total_weight = sum(o.weight for o in successful)
    if total_weight <= 0:
        raise EnsembleConfigError("successful models have no weight to renormalize")

    effective = [(o, o.weight / total_weight) for o in successful]

    overall_score = int(clamp(round_half_up(sum(w * o.ai_probability for o, w in effective))))

    breakdown = rescale_to_100(
        ai_generated=sum(w * o.breakdown.ai_generated for o, w in effective),
        mixed=sum(w * o.breakdown.mixed for o, w in effective),
        human=sum(w * o.breakdown.human for o, w in effective),
    )

    category = classifier.classify_category(breakdown)

    return ConsensusResult(
        overall_score=overall_score,
        breakdown=breakdown,
        category=category,
        confidence=classifier.vote_confidence([o.confidence for o in successful]),
        label=classifier.describe(category, breakdown),
        risk_level=classifier.classify_risk(overall_score),
        contributing_models=ContributingModels(successful=len(successful), total=len(opinions)),
        models=[
            ModelScore(
                model_id=o.model_id,
                score=round_half_up(o.ai_probability),
                confidence=o.confidence,
                effective_weight=round(w, 4),
                simulated=o.simulated,
            )
            for o, w in effective
        ],
        failed_models=[
            ModelFailure(model_id=o.model_id, error_kind=o.error_kind or "upstream_error", error=o.error or "")
            for o in failed
        ],
    )


class ConsensusEngine:
    """Weighted multi-model consensus over a fixed, validated set of adapters."""

    def __init__(
        self,
        adapters: Sequence[ModelAdapter],
        weight_tolerance: float = settings.weight_sum_tolerance,
    ):
        if not adapters:
            raise EnsembleConfigError("at least one model adapter is required")

        ids = [a.model_id for a in adapters]
        if len(set(ids)) != len(ids):
            raise EnsembleConfigError(f"duplicate model ids: {ids}")

        if any(a.weight <= 0 for a in adapters):
            raise EnsembleConfigError("every configured model needs a positive weight")

        total = math.fsum(a.weight for a in adapters)
        if abs(total - 1.0) > weight_tolerance:
            raise EnsembleConfigError(f"model weights must sum to 1.0, got {total:.4f}")

        self._adapters = tuple(adapters)

    @property
    def adapters(self) -> tuple[ModelAdapter, ...]:
        return self._adapters

    async def detect(self, text: str) -> ConsensusResult:
        fingerprint = hashlib.sha256(text.encode("utf-8")).hexdigest()[:8]
        logger.info(
            f"[CONSENSUS] Querying {len(self._adapters)} models for text {fingerprint} "
            f"({len(text.split())} words)"
        )

        outcomes = await asyncio.gather(
            *(adapter.detect(text) for adapter in self._adapters),
            return_exceptions=True,
        )
        opinions = [self._settle(adapter, outcome) for adapter, outcome in zip(self._adapters, outcomes)]

        try:
            result = aggregate(opinions)
        except AllModelsFailed as e:
            logger.error(f"[CONSENSUS] All models failed for text {fingerprint}: {e.errors}")
            raise

        logger.info(
            f"[CONSENSUS] text {fingerprint}: score={result.overall_score}, "
            f"category={result.category}, risk={result.risk_level}, "
            f"models={result.contributing_models.successful}/{result.contributing_models.total}"
        )
        return result

    @staticmethod
    def _settle(adapter: ModelAdapter, outcome) -> DetectionOpinion:
        """Adapters recover their own errors; anything that still escapes counts as that model failing."""
        if isinstance(outcome, DetectionOpinion):
            return outcome
        if not isinstance(outcome, Exception):
            raise outcome
        logger.error(
            f"[CONSENSUS] {adapter.model_id} raised unexpectedly: {outcome!r}",
            exc_info=outcome,
        )
        return DetectionOpinion(
            model_id=adapter.model_id,
            weight=adapter.weight,
            succeeded=False,
            simulated=adapter.simulated,
            error=f"unexpected error: {outcome}",
            error_kind="upstream_error",
        )
