"""
Custom exceptions for ThinkCheck.

Every exception carries the HTTP status the API layer should answer with,
so routers can let them propagate to the single exception handler in main.py.
"""

from typing import Optional


class ThinkCheckException(Exception):
    """Base exception for all ThinkCheck errors."""

    http_status: int = 500
    public_message: str = "Internal server error"

    def __init__(self, message: str = "", details: Optional[str] = None):
        self.details = details
        super().__init__(message or self.public_message)


# ============================================================================
# Upstream completion errors
# ============================================================================

class CompletionError(ThinkCheckException):
    """Raised when the text completion service cannot produce a reply."""
    public_message = "Text completion failed"


class MissingCredentialsError(CompletionError):
    """Raised when no API key is configured for the completion service."""
    public_message = "Missing LLM API key in environment variables"


class UpstreamTimeoutError(CompletionError):
    """Raised when the completion service does not answer in time."""
    public_message = "Text completion timed out"


class UpstreamError(CompletionError):
    """Raised for transport and HTTP failures of the completion service."""

    public_message = "Text completion service error"

    def __init__(self, message: str = "", status_code: Optional[int] = None, details: Optional[str] = None):
        self.status_code = status_code
        super().__init__(message, details=details)


class EmptyResponseError(CompletionError):
    """Raised when the completion reply holds no extractable text."""
    public_message = "Empty response from the text completion service"


# ============================================================================
# Parsing errors
# ============================================================================

class MalformedBlockError(ThinkCheckException):
    """Raised for a single unusable question block. Parsers skip it."""

    def __init__(self, message: str, block: Optional[str] = None):
        self.block = block
        super().__init__(message)


class JSONParseError(ThinkCheckException):
    """Raised when JSON parsing fails."""

    public_message = "Invalid JSON in model reply"

    def __init__(self, message: str, raw_text: Optional[str] = None):
        self.raw_text = raw_text
        super().__init__(message)


# ============================================================================
# Caller errors
# ============================================================================

class InvalidInputError(ThinkCheckException):
    """Raised when a request violates the input contract."""
    http_status = 400
    public_message = "Invalid request data"


class PromptTemplateError(ThinkCheckException):
    """Raised when prompt template loading or formatting fails."""
    public_message = "Prompt template error"
