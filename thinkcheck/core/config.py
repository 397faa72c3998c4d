from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings

PACKAGE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    # App Config
    APP_NAME: str = "ThinkCheck Assessment API"
    VERSION: str = "0.1.0"
    API_PREFIX: str = ""  # Frontend calls the routes at the root
    ENVIRONMENT: str = "development"  # "development" or "production"
    LOG_LEVEL: str = "INFO"
    LOG_DIR: Optional[Path] = None
    CORS_ORIGINS: List[str] = ["*"]

    # LLM Config
    LLM_PROVIDER: str = "openai"  # "openai" (chat completions) or "gemini"
    LLM_API_KEY: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("LLM_API_KEY", "GROK_API_KEY")
    )
    LLM_API_URL: str = Field(
        default="https://api.x.ai/v1", validation_alias=AliasChoices("LLM_API_URL", "GROK_API_URL")
    )
    LLM_MODEL: str = Field(
        default="grok-2-latest", validation_alias=AliasChoices("LLM_MODEL", "GROK_MODEL")
    )
    LLM_AUTH_SCHEME: Optional[str] = None  # "bearer" or "query"; provider default when unset
    LLM_SYSTEM_PROMPT: str = "You are a helpful educational content generator."
    LLM_TIMEOUT_SECONDS: float = 30.0

    # Answer evaluation
    EVALUATION_TIMEOUT_SECONDS: float = 15.0
    MAX_EVALUATIONS: int = 5
    EVALUATION_MAX_RETRIES: int = 0

    # Request caps
    MAX_MCQ_QUESTIONS: int = 10
    MAX_WRITTEN_QUESTIONS: int = 5
    MAX_PATH_RESPONSES: int = 20

    # Prompt templates
    PROMPTS_DIR: Path = PACKAGE_DIR / "prompts"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"

    @property
    def llm_configured(self) -> bool:
        return bool(self.LLM_API_KEY)


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance read from the environment / .env."""
    return Settings()


settings = get_settings()
