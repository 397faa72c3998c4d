"""
Answer evaluation.

Each (question, answer) pair is graded by its own completion call; the calls
run concurrently and every pair ends up with feedback, real or canned. One
slow or broken evaluation never fails the batch.
"""

import asyncio
import logging
import math
from datetime import datetime, timezone
from typing import Any, List, NamedTuple, Optional, Sequence

from thinkcheck.core.config import Settings, get_settings
from thinkcheck.core.constants import (
    DEFAULT_DIFFICULTY,
    DEFAULT_EVALUATION_SCORE,
    DEFAULT_TOPIC,
    EMPTY_ANSWER_RESULT,
    PARSE_FAILURE_RESULT,
    TIMEOUT_RESULT,
    UPSTREAM_FAILURE_RESULT,
)
from thinkcheck.core.exceptions import InvalidInputError, JSONParseError, MissingCredentialsError
from thinkcheck.core.llm import CompletionClient, CompletionErrorKind, CompletionRequest
from thinkcheck.core.parsers import EvaluationOutputParser, round_half_up
from thinkcheck.core.prompt_manager import PromptManager, get_prompt_manager
from thinkcheck.schemas import EvaluationBatchResult, EvaluationItem, EvaluationMetrics

logger = logging.getLogger(__name__)


class ScoreSummary(NamedTuple):
    overall: int
    evaluated: int
    highest: int
    lowest: int


def aggregate_scores(scores: Sequence[Any]) -> ScoreSummary:
    """Summarize the finite numeric scores; anything else is ignored."""
    valid = [
        s for s in scores
        if isinstance(s, (int, float)) and not isinstance(s, bool) and math.isfinite(s)
    ]
    if not valid:
        return ScoreSummary(overall=DEFAULT_EVALUATION_SCORE, evaluated=0, highest=0, lowest=100)

    return ScoreSummary(
        overall=round_half_up(sum(valid) / len(valid)),
        evaluated=len(valid),
        highest=round_half_up(max(valid)),
        lowest=round_half_up(min(valid)),
    )


def build_batch_result(feedback: Sequence[EvaluationItem]) -> EvaluationBatchResult:
    summary = aggregate_scores([item.score for item in feedback])
    timestamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return EvaluationBatchResult(
        feedback=list(feedback),
        overallScore=summary.overall,
        metrics=EvaluationMetrics(
            questionsEvaluated=summary.evaluated,
            highestScore=summary.highest,
            lowestScore=summary.lowest,
            evaluationTimestamp=timestamp,
        ),
    )


class AnswerEvaluator:
    def __init__(
        self,
        client: CompletionClient,
        prompts: Optional[PromptManager] = None,
        settings: Optional[Settings] = None,
    ):
        self.client = client
        self.prompts = prompts or get_prompt_manager()
        self.settings = settings or get_settings()
        self.parser = EvaluationOutputParser()

        self.max_evaluations = self.settings.MAX_EVALUATIONS
        self.timeout = self.settings.EVALUATION_TIMEOUT_SECONDS
        self.max_retries = max(0, self.settings.EVALUATION_MAX_RETRIES)

    async def evaluate_batch(
        self,
        questions: Sequence[str],
        answers: Sequence[str],
        topic: Optional[str] = None,
        difficulty: Optional[str] = None,
    ) -> EvaluationBatchResult:
        """
        Evaluate up to ``max_evaluations`` pairs concurrently.

        Raises:
            InvalidInputError: questions and answers differ in length
            MissingCredentialsError: an answer needs grading but no API key is set
        """
        if len(questions) != len(answers):
            raise InvalidInputError(
                details=f"{len(questions)} question(s) but {len(answers)} answer(s)"
            )

        count = min(len(questions), self.max_evaluations)
        if len(questions) > count:
            logger.info(f"Evaluating first {count} of {len(questions)} answers")

        pairs = list(zip(questions[:count], answers[:count]))
        if any((answer or "").strip() for _, answer in pairs) and not self.client.is_configured:
            raise MissingCredentialsError()

        feedback: List[EvaluationItem] = await asyncio.gather(*(
            self.evaluate_answer(question, answer, topic, difficulty, position=i + 1)
            for i, (question, answer) in enumerate(pairs)
        ))

        result = build_batch_result(feedback)
        logger.info(
            f"✅ Evaluated {len(feedback)} answer(s), overall score {result.overallScore}"
        )
        return result

    async def evaluate_answer(
        self,
        question: str,
        answer: str,
        topic: Optional[str] = None,
        difficulty: Optional[str] = None,
        position: int = 1,
    ) -> EvaluationItem:
        """Grade one answer; always returns feedback."""
        answer = (answer or "").strip()
        if not answer:
            return EvaluationItem(**EMPTY_ANSWER_RESULT)

        prompt = self.prompts.load_prompt(
            "evaluation",
            TOPIC=topic or DEFAULT_TOPIC,
            DIFFICULTY=difficulty or DEFAULT_DIFFICULTY,
            QUESTION=question,
            ANSWER=answer,
        )

        # wait_for cancels the pending call, which closes its HTTP request
        try:
            return await asyncio.wait_for(self._evaluate(prompt, position), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Evaluation {position} timed out after {self.timeout}s")
            return EvaluationItem(**TIMEOUT_RESULT)

    async def _evaluate(self, prompt: str, position: int) -> EvaluationItem:
        request = CompletionRequest.for_task("evaluation", prompt)
        fallback = UPSTREAM_FAILURE_RESULT

        for attempt in range(1, self.max_retries + 2):
            try:
                result = await self.client.complete(request)
            except Exception:
                # Anything unexpected degrades to the canned upstream failure
                logger.exception(f"Evaluation {position} attempt {attempt} raised unexpectedly")
                fallback = UPSTREAM_FAILURE_RESULT
                continue

            if not result.ok:
                logger.error(
                    f"Evaluation {position} attempt {attempt} failed: "
                    f"{result.error_kind.value}: {result.message}"
                )
                if result.error_kind == CompletionErrorKind.UPSTREAM_TIMEOUT:
                    fallback = TIMEOUT_RESULT
                else:
                    fallback = UPSTREAM_FAILURE_RESULT
                continue

            try:
                return self.parser.parse(result.text)
            except JSONParseError as e:
                logger.warning(f"Evaluation {position} attempt {attempt}: {e}")
                fallback = PARSE_FAILURE_RESULT

        return EvaluationItem(**fallback)
