from fastapi import APIRouter, Depends

from thinkcheck.dependencies import get_quiz_service
from thinkcheck.schemas import McqRequest, McqResponse, WrittenRequest, WrittenResponse
from thinkcheck.services import QuizService

router = APIRouter(tags=["quiz"])


@router.post("/generate-mcq", response_model=McqResponse)
async def generate_mcq(request: McqRequest, service: QuizService = Depends(get_quiz_service)):
    """
    Generate a multiple-choice quiz (at most MAX_MCQ_QUESTIONS questions).
    Malformed questions in the model reply are dropped, so fewer may come back.
    """
    questions = await service.generate_mcq(request)
    return McqResponse(questions=questions)


@router.post("/generate-written", response_model=WrittenResponse)
async def generate_written(request: WrittenRequest, service: QuizService = Depends(get_quiz_service)):
    """Generate open-ended questions, categories assigned in rotation."""
    questions = await service.generate_written(request)
    return WrittenResponse(questions=questions)
