from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

Confidence = Literal["low", "moderate", "high"]
Category = Literal["human", "mixed", "ai"]
RiskLevel = Literal["Human-like", "Medium Risk", "High AI Risk"]


class Breakdown(BaseModel):
    """One model's three-way split, each component a percentage."""
    model_config = ConfigDict(frozen=True)

    ai_generated: float = Field(ge=0.0, le=100.0)
    mixed: float = Field(ge=0.0, le=100.0)
    human: float = Field(ge=0.0, le=100.0)

    @property
    def total(self) -> float:
        return self.ai_generated + self.mixed + self.human


class ScoreBreakdown(BaseModel):
    """Consensus split; the aggregator guarantees the three add up to exactly 100."""
    model_config = ConfigDict(frozen=True)

    ai_generated: int = Field(ge=0, le=100)
    mixed: int = Field(ge=0, le=100)
    human: int = Field(ge=0, le=100)


class DetectionOpinion(BaseModel):
    model_config = ConfigDict(frozen=True, protected_namespaces=())

    model_id: str
    weight: float
    succeeded: bool
    ai_probability: Optional[float] = None
    breakdown: Optional[Breakdown] = None
    confidence: Optional[Confidence] = None
    reasoning: Optional[str] = None
    simulated: bool = False     # True for the offline heuristic scorer
    error: Optional[str] = None
    error_kind: Optional[str] = None  # "timeout", "auth_failure", "malformed_response", ...

    @model_validator(mode="after")
    def _check_outcome(self) -> "DetectionOpinion":
        if self.succeeded:
            missing = [
                name for name in ("ai_probability", "breakdown", "confidence")
                if getattr(self, name) is None
            ]
            if missing:
                raise ValueError(f"successful opinion is missing {', '.join(missing)}")
        elif self.error is None:
            raise ValueError("failed opinion needs an error reason")
        return self


class ContributingModels(BaseModel):
    successful: int
    total: int


class ModelScore(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    model_id: str
    score: int
    confidence: Confidence
    effective_weight: float
    simulated: bool = False


class ModelFailure(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    model_id: str
    error_kind: str
    error: str


class ConsensusResult(BaseModel):
    overall_score: int = Field(ge=0, le=100)
    breakdown: ScoreBreakdown
    category: Category
    confidence: Confidence
    label: str
    risk_level: RiskLevel
    contributing_models: ContributingModels
    models: List[ModelScore] = []
    failed_models: List[ModelFailure] = []


class DetectRequest(BaseModel):
    text: str


class DetectionResponse(ConsensusResult):
    word_count: int


class LLMVerdict(BaseModel):
    """Structured output requested from the LLM adapters (Gemini response schema)."""
    ai_probability: float = Field(ge=0.0, le=100.0, description="Probability the text is AI-generated (0-100)")
    confidence: float = Field(ge=0.0, le=100.0, description="Confidence in this assessment (0-100)")
    reasoning: str = Field(description="Brief explanation of the assessment")
    breakdown: Breakdown = Field(
        description="Split of the text into ai_generated / mixed / human percentages"
    )
