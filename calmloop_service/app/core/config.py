"""
Application configuration loader and it handles:
- Environment variables
- Model configuration
- Upstream endpoint settings

And, the main purpose:
Central place for service configuration.
"""


from typing import Optional

from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    # LLM
    OPENAI_API_KEY: str = ""
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    LLM_MODEL: str = "gpt-4o-mini-2024-07-18"
    LLM_TEMPERATURE: float = 0.35
    PLAN_MAX_OUTPUT_TOKENS: int = 1000
    STEP_MAX_OUTPUT_TOKENS: int = 450
    LLM_TIMEOUT_SECONDS: Optional[float] = None  # None = wait for upstream

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"

settings = Settings()


def read_api_key() -> str:
    # fresh Settings() so the credential is looked up per request
    return Settings().OPENAI_API_KEY.strip()
