import logging
from typing import Optional, Sequence

from thinkcheck.core.config import Settings, get_settings
from thinkcheck.core.constants import DEFAULT_ROADMAP_LEVEL
from thinkcheck.core.llm import CompletionClient, CompletionRequest
from thinkcheck.core.parsers import NotesOutputParser
from thinkcheck.core.prompt_manager import PromptManager, get_prompt_manager
from thinkcheck.schemas import (
    PathSuggestionRequest,
    PathSuggestionResponse,
    QuestionnaireResponse,
    RoadmapRequest,
    RoadmapResponse,
)

logger = logging.getLogger(__name__)

DEFAULT_ROADMAP_STAGES = 7


def format_questionnaire(responses: Sequence[QuestionnaireResponse]) -> str:
    """Render questionnaire answers as numbered Question/Answer pairs."""
    return "\n\n".join(
        f"Question {i}: {r.question}\nAnswer: {r.answer.strip() or 'No answer provided'}"
        for i, r in enumerate(responses, 1)
    )


class RoadmapService:
    def __init__(
        self,
        client: CompletionClient,
        prompts: Optional[PromptManager] = None,
        settings: Optional[Settings] = None,
    ):
        self.client = client
        self.prompts = prompts or get_prompt_manager()
        self.settings = settings or get_settings()

    async def generate_roadmap(self, request: RoadmapRequest) -> RoadmapResponse:
        # 1. Build prompt
        level_clause = f" for {request.level} level learners" if request.level else ""
        prompt = self.prompts.load_prompt(
            "roadmap",
            TOPIC=request.topic,
            TIMEFRAME=request.timeframe,
            LEVEL_CLAUSE=level_clause,
            SECTIONS=request.sections or DEFAULT_ROADMAP_STAGES,
        )

        # 2. Generate
        roadmap_text = await self.client.generate(CompletionRequest.for_task("roadmap", prompt))

        # 3. Sectionize for the frontend; the raw text stays authoritative
        document = NotesOutputParser(subject=request.topic, level=request.level or DEFAULT_ROADMAP_LEVEL).parse(
            roadmap_text
        )
        logger.info(f"🗺️ Roadmap for '{request.topic}': {len(document.sections)} stage(s)")

        return RoadmapResponse(
            topic=request.topic,
            timeframe=request.timeframe,
            level=request.level or DEFAULT_ROADMAP_LEVEL,
            roadmap=roadmap_text,
            sections=document.sections,
        )

    async def suggest_paths(self, request: PathSuggestionRequest) -> PathSuggestionResponse:
        responses = request.responses[: self.settings.MAX_PATH_RESPONSES]
        if len(request.responses) > len(responses):
            logger.info(f"Using first {len(responses)} of {len(request.responses)} questionnaire responses")

        prompt = self.prompts.load_prompt("path_suggestions", RESPONSES=format_questionnaire(responses))
        text = await self.client.generate(CompletionRequest.for_task("path_suggestions", prompt))

        return PathSuggestionResponse(rawSuggestions=text.strip())
