import asyncio
import sys
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

import pytest

# Make the repo root importable without installing the package
ROOT_PATH = Path(__file__).resolve().parent.parent
if ROOT_PATH.as_posix() not in sys.path:
    sys.path.insert(0, ROOT_PATH.as_posix())

from thinkcheck.core.config import Settings
from thinkcheck.core.exceptions import CompletionError, MissingCredentialsError
from thinkcheck.core.llm import CompletionRequest, CompletionResult
from thinkcheck.core.prompt_manager import PromptManager

Reply = Union[str, Exception]


class FakeCompletionClient:
    """
    Stand-in for CompletionClient.

    ``replies`` is either a list consumed in call order (the last entry is
    reused once the list runs out) or a callable taking the prompt.
    """

    def __init__(
        self,
        replies: Union[Sequence[Reply], Callable[[str], Reply]] = ("ok",),
        configured: bool = True,
        delay: float = 0.0,
    ):
        self.replies = replies if callable(replies) else list(replies)
        self.configured = configured
        self.delay = delay
        self.calls: List[CompletionRequest] = []

    @property
    def is_configured(self) -> bool:
        return self.configured

    def _next_reply(self, prompt: str) -> Reply:
        if callable(self.replies):
            return self.replies(prompt)
        index = min(len(self.calls) - 1, len(self.replies) - 1)
        return self.replies[index]

    async def generate(self, request: CompletionRequest) -> str:
        if not self.configured:
            raise MissingCredentialsError()
        self.calls.append(request)
        reply = self._next_reply(request.prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        if isinstance(reply, Exception):
            raise reply
        return reply

    async def complete(self, request: CompletionRequest) -> CompletionResult:
        try:
            return CompletionResult(text=await self.generate(request))
        except CompletionError as e:
            return CompletionResult.from_error(e)

    async def aclose(self) -> None:
        pass


def make_settings(**overrides) -> Settings:
    """Settings isolated from the environment's .env file."""
    values = {"LLM_API_KEY": "test-key", "LLM_API_URL": "https://llm.test/v1", "LLM_MODEL": "test-model"}
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def prompts() -> PromptManager:
    return PromptManager()


@pytest.fixture
def fake_client() -> FakeCompletionClient:
    return FakeCompletionClient()


MCQ_REPLY = """Here are your questions:

1. What does `typeof null` return?
a) "null"
b) "object"
c) "undefined"
d) "number"
Correct Answer: b)
Explanation: typeof null is "object" for historical reasons.

2. What is printed?
```javascript
console.log(2 + "2");
```
a) 4
b) 22
c) "22"
d) Error
Correct Answer: b)
Explanation: The number is coerced to a string, so the output is 22.
"""


@pytest.fixture
def mcq_reply() -> str:
    return MCQ_REPLY
