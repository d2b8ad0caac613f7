"""
Breakdown arithmetic shared by adapters and the aggregator.

Adapters use `synthesize` / `validate`; the aggregator uses `rescale_to_100`
to turn a weighted float triple into integers that add up to exactly 100.
"""

import math

from app.detection.errors import InvalidInput
from app.schemas.detection import Breakdown, ScoreBreakdown

FIELDS = ("human", "mixed", "ai_generated")


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def synthesize(ai_probability: float) -> Breakdown:
    """Deterministic split for providers that only return a single probability."""
    p = clamp(ai_probability)
    return Breakdown(ai_generated=p, mixed=0.0, human=100.0 - p)


def validate(breakdown: Breakdown, tolerance: float) -> Breakdown:
    """Raise InvalidInput unless the components sum to 100 ± tolerance."""
    if abs(breakdown.total - 100.0) > tolerance:
        raise InvalidInput(
            f"breakdown sums to {breakdown.total:.2f}, expected 100 ± {tolerance}"
        )
    return breakdown


def rescale_to_100(ai_generated: float, mixed: float, human: float) -> ScoreBreakdown:
    raw = {"ai_generated": ai_generated, "mixed": mixed, "human": human}
    total = sum(raw.values())
    if total <= 0:
        raise ValueError("cannot rescale an all-zero breakdown")

    scaled = {k: round_half_up(v / total * 100) for k, v in raw.items()}

    remainder = 100 - sum(scaled.values())
    if remainder:
        largest = max(FIELDS, key=lambda k: (scaled[k], -FIELDS.index(k)))
        scaled[largest] += remainder

    return ScoreBreakdown(**scaled)
