import logging
from typing import Optional

from thinkcheck.core.constants import DEFAULT_NOTES_FORMAT, DEFAULT_NOTES_LEVEL
from thinkcheck.core.llm import CompletionClient, CompletionRequest
from thinkcheck.core.parsers import NotesOutputParser
from thinkcheck.core.prompt_manager import PromptManager, get_prompt_manager
from thinkcheck.schemas import NotesRequest, NotesResponse

logger = logging.getLogger(__name__)


class NotesService:
    def __init__(self, client: CompletionClient, prompts: Optional[PromptManager] = None):
        self.client = client
        self.prompts = prompts or get_prompt_manager()

    async def generate_notes(self, request: NotesRequest) -> NotesResponse:
        level = request.level or DEFAULT_NOTES_LEVEL
        notes_format = request.format or DEFAULT_NOTES_FORMAT

        prompt = self.prompts.load_prompt(
            "notes",
            SUBJECT=request.subject,
            LEVEL=level,
            FORMAT=notes_format,
        )
        text = await self.client.generate(CompletionRequest.for_task("notes", prompt))

        notes = NotesOutputParser(subject=request.subject, level=level).parse(text)
        logger.info(f"📚 Notes for '{request.subject}': {len(notes.sections)} section(s)")

        return NotesResponse(
            subject=request.subject,
            level=level,
            format=notes_format,
            notes=notes,
        )
