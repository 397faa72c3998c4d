"""Services package."""

from .quiz_service import QuizService
from .evaluation_service import AnswerEvaluator
from .notes_service import NotesService
from .roadmap_service import RoadmapService

__all__ = ["QuizService", "AnswerEvaluator", "NotesService", "RoadmapService"]
