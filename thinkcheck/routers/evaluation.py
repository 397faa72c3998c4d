from fastapi import APIRouter, Depends

from thinkcheck.dependencies import get_answer_evaluator
from thinkcheck.schemas import EvaluateRequest, EvaluationBatchResult
from thinkcheck.services import AnswerEvaluator

router = APIRouter(tags=["evaluation"])


@router.post("/evaluate-answers", response_model=EvaluationBatchResult)
async def evaluate_answers(request: EvaluateRequest, evaluator: AnswerEvaluator = Depends(get_answer_evaluator)):
    """
    Grade written answers. Only the first MAX_EVALUATIONS pairs are graded;
    each graded pair gets feedback even when its evaluation fails.
    """
    return await evaluator.evaluate_batch(
        request.question_texts(),
        request.answers,
        topic=request.topic,
        difficulty=request.difficulty,
    )
