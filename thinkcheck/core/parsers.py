# parsers.py
"""
Output parsers for completion replies.

The prompts in prompts/ ask the model to answer in a loose textual grammar
(see the grammar section of core/constants.py). These parsers turn that text
into the records the frontend renders:

- McqOutputParser: numbered blocks with four a)-d) choices and a "Correct Answer:" line
- WrittenQuestionOutputParser: numbered open-ended questions
- NotesOutputParser: markdown headings into sections
- EvaluationOutputParser: the first JSON object in an evaluation reply

Malformed pieces are dropped one block at a time; a bad block never costs
the rest of the reply.
"""

import json
import logging
import math
import re
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from langchain_core.output_parsers import BaseOutputParser
from pydantic import Field

from thinkcheck.core.constants import (
    CODE_FENCE_RE,
    CODE_PLACEHOLDER,
    CODE_PLACEHOLDER_RE,
    DEFAULT_CATEGORY,
    DEFAULT_COMMENTS,
    DEFAULT_DIFFICULTY,
    DEFAULT_EVALUATION_SCORE,
    DEFAULT_NOTES_LEVEL,
    DEFAULT_SUGGESTIONS,
    MAX_NOTES_SECTIONS,
    MAX_SUGGESTIONS,
    MCQ_BLOCK_SPLIT_RE,
    MCQ_CHOICE_COUNT,
    MCQ_CHOICE_LABELS,
    MCQ_CHOICE_RE,
    MCQ_CORRECT_ANSWER_RE,
    MCQ_EXPLANATION_RE,
    MCQ_MIN_BLOCK_LINES,
    NOTES_HEADING_RE,
    WRITTEN_BLOCK_SPLIT_RE,
)
from thinkcheck.core.exceptions import JSONParseError, MalformedBlockError
from thinkcheck.schemas import (
    CodeSnippet,
    EvaluationItem,
    McqItem,
    NotesDocument,
    NotesSection,
    WrittenQuestion,
)

logger = logging.getLogger(__name__)


# ============================================================================
# Shared helpers
# ============================================================================

def round_half_up(value: float) -> int:
    """Round .5 away from zero for positives (round() would use banker's rounding)."""
    return int(math.floor(value + 0.5))


def mask_code_fences(text: str) -> Tuple[str, List[CodeSnippet]]:
    """Replace each fenced code block with a placeholder token."""
    snippets: List[CodeSnippet] = []

    def _replace(match: re.Match) -> str:
        snippets.append(CodeSnippet(language=match.group(1), code=match.group(2).strip("\n")))
        return CODE_PLACEHOLDER.format(index=len(snippets) - 1)

    return CODE_FENCE_RE.sub(_replace, text), snippets


def format_code_fence(snippet: CodeSnippet) -> str:
    return f"```{snippet.language}\n{snippet.code}\n```"


def restore_code_fences(text: str, snippets: Sequence[CodeSnippet]) -> str:
    """Put the fenced code back in place of its placeholder."""

    def _restore(match: re.Match) -> str:
        index = int(match.group(1))
        if index >= len(snippets):
            return match.group(0)
        return format_code_fence(snippets[index])

    return CODE_PLACEHOLDER_RE.sub(_restore, text)


def parse_categories(categories: Union[str, Sequence[str], None]) -> List[str]:
    """
    Comma-separated string (or list) of category names, never empty.
    Blank entries keep their slot in the rotation as DEFAULT_CATEGORY.
    """
    if not categories:
        return [DEFAULT_CATEGORY]
    names = categories.split(",") if isinstance(categories, str) else categories
    return [str(name).strip() or DEFAULT_CATEGORY for name in names] or [DEFAULT_CATEGORY]


# ============================================================================
# Multiple choice
# ============================================================================

class McqOutputParser(BaseOutputParser):
    """
    Parser for multiple-choice quiz replies.

    Expected block (one per question):

        1. What does the following code output?
        ```javascript
        console.log(2 + "2");
        ```
        a) 4
        b) 22
        c) "22"
        d) Error
        Correct Answer: b)
        Explanation: ...

    Code fences are masked before anything else so code lines such as
    "a) foo" or "1. bar" can neither split a block nor pose as a choice.
    """

    difficulty: str = DEFAULT_DIFFICULTY

    def parse(self, text: str) -> List[McqItem]:
        """Parse every well-formed question block; skip the rest."""
        if not text or not text.strip():
            logger.warning("Empty MCQ text received")
            return []

        masked, snippets = mask_code_fences(text)
        blocks = [block for block in MCQ_BLOCK_SPLIT_RE.split(masked) if block.strip()]

        questions: List[McqItem] = []
        for number, block in enumerate(blocks, 1):
            try:
                questions.append(self.parse_block(block, snippets))
            except MalformedBlockError as e:
                logger.debug(f"Skipping MCQ block {number}: {e}")

        logger.info(f"✅ Parsed {len(questions)} MCQ item(s) from {len(blocks)} block(s)")
        return questions

    def parse_block(self, block: str, snippets: Sequence[CodeSnippet] = ()) -> McqItem:
        """Parse one masked question block or raise MalformedBlockError."""
        lines = [line.strip() for line in block.split("\n") if line.strip()]
        if len(lines) < MCQ_MIN_BLOCK_LINES:
            raise MalformedBlockError(f"only {len(lines)} non-empty line(s)", block)

        first_choice = next((i for i, line in enumerate(lines) if MCQ_CHOICE_RE.match(line)), None)
        if first_choice is None:
            raise MalformedBlockError("no a)-d) choices", block)

        question_lines = lines[:first_choice]
        if not question_lines:
            raise MalformedBlockError("no question text before the choices", block)

        choices: List[str] = []
        last_choice = first_choice
        for i in range(first_choice, len(lines)):
            if MCQ_CHOICE_RE.match(lines[i]):
                choices.append(lines[i])
                last_choice = i
                if len(choices) == MCQ_CHOICE_COUNT:
                    break

        if len(choices) < MCQ_CHOICE_COUNT:
            raise MalformedBlockError(f"{len(choices)} choice(s) instead of {MCQ_CHOICE_COUNT}", block)

        labels = sorted(choice[0] for choice in choices)
        if labels != list(MCQ_CHOICE_LABELS):
            raise MalformedBlockError(f"choice labels {labels} do not cover a-d", block)

        correct_answer = None
        for line in lines:
            match = MCQ_CORRECT_ANSWER_RE.search(line)
            if match:
                correct_answer = match.group(1).lower()
                break
        if correct_answer is None:
            raise MalformedBlockError("no 'Correct Answer: x)' line", block)

        # Only look past the choices so question wording can't open the explanation
        explanation_start = next(
            (i for i in range(last_choice + 1, len(lines)) if MCQ_EXPLANATION_RE.search(lines[i])),
            None,
        )
        explanation = " ".join(lines[explanation_start:]) if explanation_start is not None else ""

        block_snippets = [
            snippets[int(index)]
            for index in CODE_PLACEHOLDER_RE.findall(block)
            if int(index) < len(snippets)
        ]

        return McqItem(
            question=restore_code_fences("\n".join(question_lines), snippets).strip(),
            choices=[restore_code_fences(choice, snippets) for choice in choices],
            correctAnswer=correct_answer,
            explanation=restore_code_fences(explanation, snippets).strip(),
            difficulty=self.difficulty,
            codeSnippets=block_snippets,
        )

    @property
    def _type(self) -> str:
        return "mcq_text"


# ============================================================================
# Written questions
# ============================================================================

class WrittenQuestionOutputParser(BaseOutputParser):
    """
    Parser for open-ended question replies ("1. ..." / "1) ..." blocks).

    Categories are assigned round-robin in block order, which is also the
    order the quiz presents the questions in.
    """

    categories: List[str] = Field(default_factory=lambda: [DEFAULT_CATEGORY])
    difficulty: str = DEFAULT_DIFFICULTY

    def parse(self, text: str) -> List[WrittenQuestion]:
        if not text or not text.strip():
            logger.warning("Empty written questions text received")
            return []

        # Text before the first number is a block of its own
        blocks = [block for block in WRITTEN_BLOCK_SPLIT_RE.split(text.strip()) if block.strip()]

        categories = self.categories or [DEFAULT_CATEGORY]
        questions: List[WrittenQuestion] = []
        for index, block in enumerate(blocks):
            question = CODE_FENCE_RE.sub("", block).strip()
            if not question:
                continue
            questions.append(
                WrittenQuestion(
                    question=question,
                    category=categories[index % len(categories)] or DEFAULT_CATEGORY,
                    difficulty=self.difficulty,
                )
            )

        logger.info(f"✅ Parsed {len(questions)} written question(s)")
        return questions

    @property
    def _type(self) -> str:
        return "written_text"


# ============================================================================
# Study notes
# ============================================================================

class NotesOutputParser(BaseOutputParser):
    """Split markdown notes into titled sections (at most MAX_NOTES_SECTIONS)."""

    subject: str
    level: str = DEFAULT_NOTES_LEVEL

    def parse(self, text: str) -> NotesDocument:
        text = text or ""
        headings = self.find_headings(text)

        sections: List[NotesSection] = []
        for i, (title, _, end) in enumerate(headings):
            next_start = headings[i + 1][1] if i + 1 < len(headings) else len(text)
            sections.append(NotesSection(title=title, content=text[end:next_start].strip()))

        if not sections:
            sections = [NotesSection(title=self.subject, content=text)]

        if len(sections) > MAX_NOTES_SECTIONS:
            logger.info(f"Dropping {len(sections) - MAX_NOTES_SECTIONS} section(s) over the cap")

        return NotesDocument(
            title=self.subject,
            level=self.level,
            sections=sections[:MAX_NOTES_SECTIONS],
            fullText=text,
        )

    @staticmethod
    def find_headings(text: str) -> List[Tuple[str, int, int]]:
        """(title, start, end) of each heading outside fenced code, in order."""
        fences = [match.span() for match in CODE_FENCE_RE.finditer(text)]
        headings = []
        for match in NOTES_HEADING_RE.finditer(text):
            if any(start <= match.start() < end for start, end in fences):
                continue
            title = match.group(1).strip()
            if title:
                headings.append((title, match.start(), match.end()))
        return headings

    @property
    def _type(self) -> str:
        return "notes_markdown"


# ============================================================================
# Evaluation JSON
# ============================================================================

def _find_object_end(text: str, start: int) -> Optional[int]:
    """Index of the brace closing the object opened at ``start``, if any."""
    depth = 0
    in_string = False
    escaped = False

    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i
    return None


def _repair_json(json_str: str) -> str:
    """Fix common JSON formatting issues."""
    # Trailing commas
    json_str = re.sub(r",(\s*[}\]])", r"\1", json_str)
    # Unquoted keys
    json_str = re.sub(r"([{,]\s*)([a-zA-Z_][a-zA-Z0-9_]*)(\s*:)", r'\1"\2"\3', json_str)
    return json_str


def extract_first_json_object(text: str) -> Optional[Dict[str, Any]]:
    """
    Return the first balanced ``{...}`` span in ``text`` that parses as a JSON object.

    Braces inside JSON strings are ignored while balancing, so nested objects
    and values such as "use {} for sets" do not cut the object short.
    """
    if not text:
        return None

    start = text.find("{")
    while start != -1:
        end = _find_object_end(text, start)
        if end is not None:
            candidate = text[start:end + 1]
            for attempt in (candidate, _repair_json(candidate)):
                try:
                    value = json.loads(attempt)
                except json.JSONDecodeError:
                    continue
                if isinstance(value, dict):
                    return value
        start = text.find("{", start + 1)

    return None


def _coerce_score(value: Any) -> float:
    if isinstance(value, bool):
        return DEFAULT_EVALUATION_SCORE
    if isinstance(value, str):
        try:
            value = float(value.strip().rstrip("%"))
        except ValueError:
            return DEFAULT_EVALUATION_SCORE
    if not isinstance(value, (int, float)) or not math.isfinite(value):
        return DEFAULT_EVALUATION_SCORE
    return value


def normalize_evaluation(data: Dict[str, Any]) -> EvaluationItem:
    """Clamp and default the fields of a model-produced evaluation."""
    score = min(100, max(0, round_half_up(_coerce_score(data.get("score")))))

    comments = data.get("comments") or data.get("feedback")
    if not isinstance(comments, str) or not comments.strip():
        comments = DEFAULT_COMMENTS

    suggestions = data.get("suggestions")
    if isinstance(suggestions, list):
        suggestions = [str(s).strip() for s in suggestions if str(s).strip()][:MAX_SUGGESTIONS]
    else:
        suggestions = list(DEFAULT_SUGGESTIONS)

    return EvaluationItem(score=score, comments=comments.strip(), suggestions=suggestions)


class EvaluationOutputParser(BaseOutputParser):
    """Parser for answer evaluation replies: {"score", "comments", "suggestions"}."""

    def parse(self, text: str) -> EvaluationItem:
        data = extract_first_json_object(text)
        if data is None:
            logger.debug(f"No JSON object in evaluation reply: {(text or '')[:200]}")
            raise JSONParseError("No valid JSON object found in evaluation reply", raw_text=text)
        return normalize_evaluation(data)

    @property
    def _type(self) -> str:
        return "evaluation_json"
