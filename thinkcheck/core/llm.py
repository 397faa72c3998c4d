"""
Client for the upstream text completion service.

The upstream is reached over plain HTTP so that its reply can be inspected
before any schema is imposed on it: different providers (and different
revisions of the same provider) answer with different JSON shapes, and
extract_completion_text() folds all the known ones into a single string.
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

import httpx

from thinkcheck.core.config import Settings, get_settings
from thinkcheck.core.constants import GENERATION_OPTIONS
from thinkcheck.core.exceptions import (
    CompletionError,
    EmptyResponseError,
    MissingCredentialsError,
    UpstreamError,
    UpstreamTimeoutError,
)

logger = logging.getLogger(__name__)

# Fields tried, in order, when the reply matches none of the known shapes
FALLBACK_TEXT_FIELDS = ("output", "result", "generated_text", "response", "completion")


class LLMProvider(str, Enum):
    OPENAI = "openai"  # OpenAI-compatible chat completions (Grok, DeepSeek, ...)
    GEMINI = "gemini"  # Google generateContent


class CompletionErrorKind(str, Enum):
    MISSING_CREDENTIALS = "missing_credentials"
    UPSTREAM_TIMEOUT = "upstream_timeout"
    UPSTREAM_ERROR = "upstream_error"
    EMPTY_RESPONSE = "empty_response"


_ERROR_KINDS = {
    MissingCredentialsError: CompletionErrorKind.MISSING_CREDENTIALS,
    UpstreamTimeoutError: CompletionErrorKind.UPSTREAM_TIMEOUT,
    UpstreamError: CompletionErrorKind.UPSTREAM_ERROR,
    EmptyResponseError: CompletionErrorKind.EMPTY_RESPONSE,
}


@dataclass(frozen=True)
class CompletionRequest:
    prompt: str
    temperature: float = 0.2
    max_tokens: int = 2048
    system_prompt: Optional[str] = None

    @classmethod
    def for_task(cls, task: str, prompt: str) -> "CompletionRequest":
        """Request with the generation options registered for ``task``."""
        options = GENERATION_OPTIONS[task]
        return cls(
            prompt=prompt,
            temperature=float(options["temperature"]),
            max_tokens=int(options["max_tokens"]),
        )


@dataclass(frozen=True)
class CompletionResult:
    """Either ``text`` (success) or ``error_kind`` + ``message`` (failure)."""
    text: Optional[str] = None
    error_kind: Optional[CompletionErrorKind] = None
    message: str = ""
    status_code: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.error_kind is None

    @classmethod
    def from_error(cls, error: CompletionError) -> "CompletionResult":
        kind = next(
            (k for exc_type, k in _ERROR_KINDS.items() if isinstance(error, exc_type)),
            CompletionErrorKind.UPSTREAM_ERROR,
        )
        return cls(
            error_kind=kind,
            message=str(error),
            status_code=getattr(error, "status_code", None),
        )


def _parts_text(value: Any) -> str:
    """Text of a content value: a string, or a list of parts ({"text": ...} or strings)."""
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        return "".join(
            part if isinstance(part, str) else str(part.get("text") or "")
            for part in value
            if isinstance(part, (str, dict))
        )
    return ""


def _choice_text(choice: Any) -> str:
    if not isinstance(choice, dict):
        return _parts_text(choice)
    message = choice.get("message")
    if isinstance(message, dict):
        text = _parts_text(message.get("content"))
    else:
        text = _parts_text(message)
    return text or _parts_text(choice.get("text"))


def _gemini_text(candidates: list) -> str:
    first = candidates[0]
    if not isinstance(first, dict):
        return _parts_text(first)
    content = first.get("content")
    if isinstance(content, dict):
        return _parts_text(content.get("parts"))
    return _parts_text(content)


def extract_completion_text(payload: Any) -> str:
    """
    Normalize an upstream reply into plain text.

    Known shapes, tried in order:
    1. chat completions: {"choices": [{"message": {"content": ...}}]} or {"choices": [{"text": ...}]}
    2. Gemini: {"candidates": [{"content": {"parts": [{"text": ...}]}}]}
    3. direct content: {"content": "..."}
    4. direct text: {"text": "..."}
    Content may be a string or a list of {"text": ...} parts. Anything else
    falls back to one of FALLBACK_TEXT_FIELDS, and finally to the serialized
    payload itself.
    """
    if isinstance(payload, str):
        return payload

    if isinstance(payload, list):
        # Hugging Face style: [{"generated_text": ...}]
        return extract_completion_text(payload[0]) if payload else ""

    if not isinstance(payload, dict):
        return "" if payload is None else str(payload)

    choices = payload.get("choices")
    if isinstance(choices, list) and choices:
        return _choice_text(choices[0])

    candidates = payload.get("candidates")
    if isinstance(candidates, list) and candidates:
        return _gemini_text(candidates)

    for field in ("content", "text"):
        text = _parts_text(payload.get(field))
        if text:
            return text

    logger.warning(f"Unexpected completion response format, keys: {list(payload.keys())}")
    for field in FALLBACK_TEXT_FIELDS:
        value = payload.get(field)
        if isinstance(value, str) and value:
            return value

    return json.dumps(payload)


class CompletionClient:
    """
    Sends one prompt to the text completion service and returns its text.

    Settings are injected so tests can build a client without touching the
    environment; the httpx client may be shared (the app lifespan owns one).
    No retries happen here.
    """

    def __init__(self, settings: Optional[Settings] = None, http_client: Optional[httpx.AsyncClient] = None):
        self.settings = settings or get_settings()
        self.provider = LLMProvider(self.settings.LLM_PROVIDER.lower())
        self.model = self.settings.LLM_MODEL
        self.timeout = self.settings.LLM_TIMEOUT_SECONDS
        self._client = http_client
        self._owns_client = http_client is None

        default_scheme = "query" if self.provider == LLMProvider.GEMINI else "bearer"
        self.auth_scheme = (self.settings.LLM_AUTH_SCHEME or default_scheme).lower()

        logger.info(f"🔹 Completion client initialized: {self.provider.value} ({self.model})")

    @property
    def is_configured(self) -> bool:
        return bool(self.settings.LLM_API_KEY)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    def _build_call(self, request: CompletionRequest) -> Tuple[str, Dict[str, Any], Dict[str, str], Dict[str, str]]:
        """Return (url, payload, headers, params) for the configured provider."""
        base_url = self.settings.LLM_API_URL.rstrip("/")
        system_prompt = request.system_prompt or self.settings.LLM_SYSTEM_PROMPT
        headers = {"Content-Type": "application/json"}
        params: Dict[str, str] = {}

        if self.provider == LLMProvider.GEMINI:
            url = f"{base_url}/models/{self.model}:generateContent"
            payload: Dict[str, Any] = {
                "systemInstruction": {"parts": [{"text": system_prompt}]},
                "contents": [{"role": "user", "parts": [{"text": request.prompt}]}],
                "generationConfig": {
                    "temperature": request.temperature,
                    "maxOutputTokens": request.max_tokens,
                },
            }
        else:
            url = f"{base_url}/chat/completions"
            payload = {
                "model": self.model,
                "messages": [
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": request.prompt},
                ],
                "temperature": request.temperature,
                "max_tokens": request.max_tokens,
            }

        if self.auth_scheme == "query":
            params["key"] = self.settings.LLM_API_KEY
        else:
            headers["Authorization"] = f"Bearer {self.settings.LLM_API_KEY}"

        return url, payload, headers, params

    async def generate(self, request: CompletionRequest) -> str:
        """Return the completion text or raise a CompletionError subclass."""
        if not self.is_configured:
            raise MissingCredentialsError()

        url, payload, headers, params = self._build_call(request)
        logger.debug(f"Calling completion API with prompt: {request.prompt[:50]}...")

        try:
            response = await self._get_client().post(
                url, json=payload, headers=headers, params=params, timeout=self.timeout
            )
            response.raise_for_status()
        except httpx.TimeoutException as e:
            logger.error(f"Completion API timed out after {self.timeout}s")
            raise UpstreamTimeoutError(details=str(e)) from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.error(f"Completion API returned {status}: {e.response.text[:300]}")
            raise UpstreamError(
                f"Completion API returned status {status}",
                status_code=status,
                details=e.response.text[:500],
            ) from e
        except httpx.RequestError as e:
            logger.error(f"Completion API request failed: {e}")
            raise UpstreamError(f"Completion API request failed: {e}") from e

        try:
            data = response.json()
            logger.debug(
                f"Completion response keys: {list(data.keys()) if isinstance(data, dict) else type(data).__name__}"
            )
        except ValueError:
            data = response.text

        text = extract_completion_text(data)
        if not text or not text.strip():
            raise EmptyResponseError()
        return text

    async def complete(self, request: CompletionRequest) -> CompletionResult:
        """Like generate(), but completion failures come back as a failed result."""
        try:
            return CompletionResult(text=await self.generate(request))
        except CompletionError as e:
            return CompletionResult.from_error(e)

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None
