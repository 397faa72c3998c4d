"""
Centralized constants and enums for ThinkCheck.

Single source of truth for difficulty levels, generation options, the text
conventions the parsers expect from the model, and the canned evaluation
results. Prompt templates in prompts/ must stay in sync with the grammar
section below; bump the grammar version when either side changes.
"""

import re
from enum import Enum
from typing import Any, Dict


# ============================================================================
# Difficulty & Levels
# ============================================================================

class Difficulty(str, Enum):
    """Question difficulty."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class NotesLevel(str, Enum):
    """Audience level for study notes."""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class NotesFormat(str, Enum):
    """Requested layout for study notes."""
    STRUCTURED = "structured"
    OUTLINE = "outline"
    SUMMARY = "summary"


def normalize_difficulty(value: str) -> str:
    """Map free-form difficulty labels onto easy/medium/hard."""
    value = (value or "").lower().strip()

    mapping = {
        "easy": Difficulty.EASY.value,
        "beginner": Difficulty.EASY.value,
        "basic": Difficulty.EASY.value,
        "medium": Difficulty.MEDIUM.value,
        "intermediate": Difficulty.MEDIUM.value,
        "moderate": Difficulty.MEDIUM.value,
        "hard": Difficulty.HARD.value,
        "advanced": Difficulty.HARD.value,
        "expert": Difficulty.HARD.value,
    }

    return mapping.get(value, Difficulty.MEDIUM.value)


# ============================================================================
# Default Values
# ============================================================================

DEFAULT_DIFFICULTY = Difficulty.MEDIUM.value
DEFAULT_CATEGORY = "Fundamentals"
DEFAULT_NOTES_LEVEL = NotesLevel.INTERMEDIATE.value
DEFAULT_NOTES_FORMAT = NotesFormat.STRUCTURED.value
DEFAULT_ROADMAP_LEVEL = "general"
DEFAULT_TOPIC = "subject"


# ============================================================================
# Generation options per task (temperature, max output tokens)
# ============================================================================

GENERATION_OPTIONS: Dict[str, Dict[str, Any]] = {
    "mcq": {"temperature": 0.2, "max_tokens": 2048},
    "written": {"temperature": 0.2, "max_tokens": 1024},
    "evaluation": {"temperature": 0.1, "max_tokens": 512},
    "notes": {"temperature": 0.2, "max_tokens": 4096},
    "roadmap": {"temperature": 0.2, "max_tokens": 2048},
    "path_suggestions": {"temperature": 0.2, "max_tokens": 2048},
    "connection_test": {"temperature": 0.7, "max_tokens": 50},
}


# ============================================================================
# Reply grammar expected by the parsers
# ============================================================================

GRAMMAR_VERSION = "2"

CODE_FENCE_RE = re.compile(r"```[ \t]*([\w+#.-]*)[ \t]*\n?([\s\S]*?)```")
CODE_PLACEHOLDER = "@@CODE_BLOCK_{index}@@"
CODE_PLACEHOLDER_RE = re.compile(r"@@CODE_BLOCK_(\d+)@@")

# MCQ: "1. ..." or "Question 1: ..." opens a block
MCQ_BLOCK_SPLIT_RE = re.compile(r"(?:^|\n)(?:\d+\.|Question\s+\d+:)", re.IGNORECASE)
MCQ_CHOICE_RE = re.compile(r"^[a-d]\)")
MCQ_CORRECT_ANSWER_RE = re.compile(r"Correct Answer:\s*([a-d])\)", re.IGNORECASE)
MCQ_EXPLANATION_RE = re.compile(r"explanation|reason|because", re.IGNORECASE)
MCQ_CHOICE_LABELS = ("a", "b", "c", "d")
MCQ_CHOICE_COUNT = 4
MCQ_MIN_BLOCK_LINES = 5

# Written questions: "1." or "1)" opens a block
WRITTEN_BLOCK_SPLIT_RE = re.compile(r"(?:^|\n)(?:\d+\.|\d+\))")

# Notes: markdown headings of depth 1-3
NOTES_HEADING_RE = re.compile(r"^#{1,3}[ \t]+(.+?)(?:[ \t]+#+)?[ \t]*$", re.MULTILINE)
MAX_NOTES_SECTIONS = 10


# ============================================================================
# Evaluation results
# ============================================================================

DEFAULT_EVALUATION_SCORE = 50
MAX_SUGGESTIONS = 3
DEFAULT_COMMENTS = "No specific feedback available."
DEFAULT_SUGGESTIONS = [
    "Review your answer for completeness.",
    "Check that you've addressed all parts of the question.",
]

EMPTY_ANSWER_RESULT = {
    "score": 0,
    "comments": "No answer provided.",
    "suggestions": ["Please provide an answer."],
}

TIMEOUT_RESULT = {
    "score": DEFAULT_EVALUATION_SCORE,
    "comments": "Evaluation timed out. Your answer has been recorded.",
    "suggestions": ["The system was unable to complete the evaluation in time."],
}

UPSTREAM_FAILURE_RESULT = {
    "score": DEFAULT_EVALUATION_SCORE,
    "comments": "Error during evaluation. Your answer has been recorded.",
    "suggestions": ["Please check back later for a complete evaluation."],
}

PARSE_FAILURE_RESULT = {
    "score": DEFAULT_EVALUATION_SCORE,
    "comments": "The evaluation could not be interpreted. Your answer has been recorded.",
    "suggestions": ["Please check back later for a complete evaluation."],
}
