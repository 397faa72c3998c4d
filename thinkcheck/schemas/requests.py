"""Request schemas."""

from typing import List, Optional, Union

from pydantic import BaseModel, Field

from .quiz import WrittenQuestion


class McqRequest(BaseModel):
    topic: str = Field(..., min_length=1, description="Quiz topic")
    numQuestions: int = Field(..., ge=1, description="Requested question count (capped server-side)")
    difficulty: Optional[str] = Field(None, description="easy / medium / hard")
    categories: Optional[Union[List[str], str]] = Field(
        None, description="Category names, as a list or a comma-separated string"
    )

    class Config:
        json_schema_extra = {
            "example": {"topic": "JavaScript closures", "numQuestions": 5, "difficulty": "medium"}
        }


class WrittenRequest(BaseModel):
    topic: str = Field(..., min_length=1)
    numQuestions: int = Field(..., ge=1)
    difficulty: Optional[str] = None
    categories: Optional[Union[List[str], str]] = Field(
        None, description="Rotated over the generated questions in order"
    )


class EvaluateRequest(BaseModel):
    questions: List[Union[str, WrittenQuestion]] = Field(
        ..., description="Questions in presentation order, as text or as returned by /generate-written"
    )
    answers: List[str] = Field(..., description="One answer per question, same order")
    topic: Optional[str] = None
    difficulty: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "questions": ["Explain closures in JavaScript."],
                "answers": ["A closure is a function bundled with its lexical scope..."],
                "topic": "JavaScript",
                "difficulty": "medium",
            }
        }

    def question_texts(self) -> List[str]:
        return [q if isinstance(q, str) else q.question for q in self.questions]


class NotesRequest(BaseModel):
    subject: str = Field(..., min_length=1)
    level: Optional[str] = None
    format: Optional[str] = None


class RoadmapRequest(BaseModel):
    topic: str = Field(..., min_length=1)
    timeframe: str = Field(..., min_length=1, description='e.g. "3 months"')
    level: Optional[str] = None
    sections: Optional[int] = Field(None, ge=1, le=20, description="Preferred number of stages")


class QuestionnaireResponse(BaseModel):
    question: str
    answer: str = ""


class PathSuggestionRequest(BaseModel):
    """Questionnaire answers used to suggest educational paths."""
    responses: List[QuestionnaireResponse] = Field(..., min_length=1)
