from app.schemas.detection import (
    Breakdown,
    ConsensusResult,
    ContributingModels,
    DetectionOpinion,
    DetectionResponse,
    DetectRequest,
    LLMVerdict,
    ModelFailure,
    ModelScore,
    ScoreBreakdown,
)

__all__ = [
    "Breakdown",
    "ConsensusResult",
    "ContributingModels",
    "DetectionOpinion",
    "DetectionResponse",
    "DetectRequest",
    "LLMVerdict",
    "ModelFailure",
    "ModelScore",
    "ScoreBreakdown",
]
