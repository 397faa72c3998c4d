"""
Quiz-related Pydantic schemas.
"""

from typing import List

from pydantic import BaseModel, Field

from thinkcheck.core.constants import DEFAULT_CATEGORY, DEFAULT_DIFFICULTY


class CodeSnippet(BaseModel):
    """Fenced code recovered from a question."""
    language: str = ""
    code: str


class McqItem(BaseModel):
    """Multiple-choice question with exactly four labeled choices."""
    question: str
    choices: List[str] = Field(..., min_length=4, max_length=4, description='"a) ..." to "d) ..."')
    correctAnswer: str = Field(..., pattern="^[a-d]$")
    explanation: str = ""
    difficulty: str = DEFAULT_DIFFICULTY
    codeSnippets: List[CodeSnippet] = Field(default_factory=list)


class WrittenQuestion(BaseModel):
    """Open-ended written question."""
    question: str
    category: str = DEFAULT_CATEGORY
    difficulty: str = DEFAULT_DIFFICULTY
