"""Study notes and roadmap schemas."""

from typing import List

from pydantic import BaseModel, Field

from thinkcheck.core.constants import MAX_NOTES_SECTIONS


class NotesSection(BaseModel):
    title: str
    content: str


class NotesDocument(BaseModel):
    """Notes split into titled sections; fullText keeps the untruncated reply."""
    title: str
    level: str
    sections: List[NotesSection] = Field(..., min_length=1, max_length=MAX_NOTES_SECTIONS)
    fullText: str
