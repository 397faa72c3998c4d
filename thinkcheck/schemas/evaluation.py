"""Answer evaluation schemas."""

from typing import List

from pydantic import BaseModel, Field

from thinkcheck.core.constants import MAX_SUGGESTIONS


class EvaluationItem(BaseModel):
    """Feedback for one (question, answer) pair."""
    score: int = Field(..., ge=0, le=100)
    comments: str
    suggestions: List[str] = Field(default_factory=list, max_length=MAX_SUGGESTIONS)


class EvaluationMetrics(BaseModel):
    questionsEvaluated: int
    highestScore: int
    lowestScore: int
    evaluationTimestamp: str = Field(..., description="ISO-8601, UTC")


class EvaluationBatchResult(BaseModel):
    """Feedback in input order plus the batch summary."""
    feedback: List[EvaluationItem]
    overallScore: int
    metrics: EvaluationMetrics
