import logging
from typing import List, Optional

from thinkcheck.core.config import Settings, get_settings
from thinkcheck.core.constants import DEFAULT_DIFFICULTY, normalize_difficulty
from thinkcheck.core.llm import CompletionClient, CompletionRequest
from thinkcheck.core.parsers import McqOutputParser, WrittenQuestionOutputParser, parse_categories
from thinkcheck.core.prompt_manager import PromptManager, get_prompt_manager
from thinkcheck.schemas import McqItem, McqRequest, WrittenQuestion, WrittenRequest

logger = logging.getLogger(__name__)


class QuizService:
    def __init__(
        self,
        client: CompletionClient,
        prompts: Optional[PromptManager] = None,
        settings: Optional[Settings] = None,
    ):
        self.client = client
        self.prompts = prompts or get_prompt_manager()
        self.settings = settings or get_settings()

    async def generate_mcq(self, request: McqRequest) -> List[McqItem]:
        num_questions = min(request.numQuestions, self.settings.MAX_MCQ_QUESTIONS)
        difficulty = normalize_difficulty(request.difficulty)
        categories = parse_categories(request.categories)

        prompt = self.prompts.load_prompt(
            "mcq",
            NUM_QUESTIONS=num_questions,
            TOPIC=request.topic,
            DIFFICULTY=difficulty,
            CATEGORIES=", ".join(categories),
        )
        text = await self.client.generate(CompletionRequest.for_task("mcq", prompt))

        questions = McqOutputParser(difficulty=difficulty).parse(text)
        if len(questions) < num_questions:
            logger.warning(f"MCQ: requested {num_questions}, parsed {len(questions)} for topic '{request.topic}'")
        return questions[:num_questions]

    async def generate_written(self, request: WrittenRequest) -> List[WrittenQuestion]:
        num_questions = min(request.numQuestions, self.settings.MAX_WRITTEN_QUESTIONS)
        difficulty = (request.difficulty or "").strip() or DEFAULT_DIFFICULTY
        categories = parse_categories(request.categories)

        prompt = self.prompts.load_prompt(
            "written",
            NUM_QUESTIONS=num_questions,
            TOPIC=request.topic,
            DIFFICULTY=difficulty,
            CATEGORIES=", ".join(categories),
        )
        text = await self.client.generate(CompletionRequest.for_task("written", prompt))

        questions = WrittenQuestionOutputParser(categories=categories, difficulty=difficulty).parse(text)
        if len(questions) < num_questions:
            logger.warning(f"Written: requested {num_questions}, parsed {len(questions)} for topic '{request.topic}'")
        return questions[:num_questions]
