"""
Result classifier — pure mapping from consensus numbers to user-facing labels.

Nothing here holds state; every function takes the numbers it needs and
returns a label. Thresholds default to the values in `app.config`.
"""

from typing import Sequence

from app.config import settings
from app.schemas.detection import Category, Confidence, RiskLevel, ScoreBreakdown

# Tie precedence for the argmax: earlier wins.
CATEGORY_ORDER: tuple[tuple[Category, str], ...] = (
    ("human", "human"),
    ("mixed", "mixed"),
    ("ai", "ai_generated"),
)

# category → (breakdown field, threshold, label when above, label otherwise)
LABELS: dict[Category, tuple[str, int, str, str]] = {
    "human": ("mixed", 20, "Lightly edited by AI", "Human-written"),
    "mixed": ("mixed", 60, "Heavily polished by AI", "Human-written, edited by AI"),
    "ai": ("ai_generated", 80, "Mostly AI-generated", "Likely AI-generated"),
}


def classify_category(breakdown: ScoreBreakdown) -> Category:
    best_category, best_value = CATEGORY_ORDER[0][0], -1
    for category, field in CATEGORY_ORDER:
        value = getattr(breakdown, field)
        if value > best_value:
            best_category, best_value = category, value
    return best_category


def classify_risk(
    overall_score: int,
    high_threshold: int = settings.risk_high_threshold,
    medium_threshold: int = settings.risk_medium_threshold,
) -> RiskLevel:
    """Bands are closed on the upper side: exactly 70 is Medium, exactly 30 is Human-like."""
    if overall_score > high_threshold:
        return "High AI Risk"
    if overall_score > medium_threshold:
        return "Medium Risk"
    return "Human-like"


def describe(category: Category, breakdown: ScoreBreakdown) -> str:
    field, threshold, above, otherwise = LABELS[category]
    return above if getattr(breakdown, field) > threshold else otherwise


def vote_confidence(confidences: Sequence[Confidence]) -> Confidence:
    """
    Plurality vote with a bias towards "moderate".

    high needs to beat low *and* hold at least half the votes;
    low only needs to beat high; anything else is moderate.
    """
    high = sum(1 for c in confidences if c == "high")
    low = sum(1 for c in confidences if c == "low")

    if high > low and high >= len(confidences) / 2:
        return "high"
    if low > high:
        return "low"
    return "moderate"


def confidence_from_score(
    value: float,
    high_min: float = settings.confidence_high_min,
    moderate_min: float = settings.confidence_moderate_min,
) -> Confidence:
    """Map a model's numeric 0-100 self-reported confidence onto the categorical scale."""
    if value >= high_min:
        return "high"
    if value >= moderate_min:
        return "moderate"
    return "low"
