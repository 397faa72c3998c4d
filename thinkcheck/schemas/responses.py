"""Response schemas."""

from typing import List, Optional

from pydantic import BaseModel, Field

from .notes import NotesDocument, NotesSection
from .quiz import McqItem, WrittenQuestion


class McqResponse(BaseModel):
    questions: List[McqItem]


class WrittenResponse(BaseModel):
    questions: List[WrittenQuestion]


class NotesResponse(BaseModel):
    success: bool = True
    subject: str
    level: str
    format: str
    notes: NotesDocument


class RoadmapResponse(BaseModel):
    success: bool = True
    topic: str
    timeframe: str
    level: str
    roadmap: str
    sections: List[NotesSection] = Field(default_factory=list)


class PathSuggestionResponse(BaseModel):
    rawSuggestions: str


class ConnectionTestResponse(BaseModel):
    success: bool
    message: str
    response: Optional[str] = None
    error: Optional[str] = None


class ErrorResponse(BaseModel):
    """Error body returned for every 4xx/5xx."""
    error: str
    details: Optional[str] = None
