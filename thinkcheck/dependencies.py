"""Accessors for the services built in the app lifespan (overridable in tests)."""

from fastapi import Request

from thinkcheck.core.llm import CompletionClient
from thinkcheck.services import AnswerEvaluator, NotesService, QuizService, RoadmapService


def get_completion_client(request: Request) -> CompletionClient:
    return request.app.state.completion_client


def get_quiz_service(request: Request) -> QuizService:
    return request.app.state.quiz_service


def get_answer_evaluator(request: Request) -> AnswerEvaluator:
    return request.app.state.answer_evaluator


def get_notes_service(request: Request) -> NotesService:
    return request.app.state.notes_service


def get_roadmap_service(request: Request) -> RoadmapService:
    return request.app.state.roadmap_service
