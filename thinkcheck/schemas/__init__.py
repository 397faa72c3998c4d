"""Schemas package."""

from .quiz import CodeSnippet, McqItem, WrittenQuestion
from .notes import NotesDocument, NotesSection
from .evaluation import EvaluationBatchResult, EvaluationItem, EvaluationMetrics
from .requests import (
    EvaluateRequest,
    McqRequest,
    NotesRequest,
    PathSuggestionRequest,
    QuestionnaireResponse,
    RoadmapRequest,
    WrittenRequest,
)
from .responses import (
    ConnectionTestResponse,
    ErrorResponse,
    McqResponse,
    NotesResponse,
    PathSuggestionResponse,
    RoadmapResponse,
    WrittenResponse,
)

__all__ = [
    # Quiz
    "CodeSnippet",
    "McqItem",
    "WrittenQuestion",
    # Notes
    "NotesDocument",
    "NotesSection",
    # Evaluation
    "EvaluationBatchResult",
    "EvaluationItem",
    "EvaluationMetrics",
    # Requests
    "EvaluateRequest",
    "McqRequest",
    "NotesRequest",
    "PathSuggestionRequest",
    "QuestionnaireResponse",
    "RoadmapRequest",
    "WrittenRequest",
    # Responses
    "ConnectionTestResponse",
    "ErrorResponse",
    "McqResponse",
    "NotesResponse",
    "PathSuggestionResponse",
    "RoadmapResponse",
    "WrittenResponse",
]
