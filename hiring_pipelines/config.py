"""
Central settings for the pipelines. Values come from the process environment
(a local .env is loaded by main.py before anything reads them).
"""
from __future__ import annotations
import functools
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Failed validations allowed per extraction unit (1 generation + 1 fix)
MAX_RETRIES = 2

# Supersteps allowed per graph run. A single unit needs at most 6.
DEFAULT_RECURSION_LIMIT = 50

PROVIDERS = ("auto", "gemini", "mistral")


class Settings(BaseSettings):
    # LLM_PROVIDER, LLM_TEMPERATURE, LLM_TOP_P, LOG_LEVEL
    llm_provider: str = "auto"
    llm_temperature: float = Field(default=0.2, ge=0.0, le=2.0)
    llm_top_p: float = Field(default=1.0, gt=0.0, le=1.0)
    log_level: str = "INFO"

    model_config = SettingsConfigDict(extra="ignore", case_sensitive=False, env_ignore_empty=True)

    @field_validator("llm_provider")
    @classmethod
    def _known_provider(cls, v: str) -> str:
        v = v.strip().lower()
        return v if v in PROVIDERS else "auto"

    @field_validator("log_level")
    @classmethod
    def _upper(cls, v: str) -> str:
        return v.strip().upper()


@functools.lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
