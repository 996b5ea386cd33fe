from __future__ import annotations
import logging
import os
from typing import Any, Callable, List, Optional, Sequence
from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_mistralai import ChatMistralAI
from .callbacks import LoggingCallbackHandler
from .config import PROVIDERS, get_settings

logger = logging.getLogger(__name__)


def _get_secret(name: str) -> Optional[str]:
    value = os.getenv(name)
    return value.strip() if value and value.strip() else None


def normalize_provider(p: str | None) -> str:
    if not p:
        return "auto"
    p = p.strip().lower()
    if p in PROVIDERS:
        return p
    return "auto"


def build_gemini(temperature: float = 0.2, top_p: float = 1.0, callbacks: Optional[Sequence[Any]] = None) -> ChatGoogleGenerativeAI:
    # Prefer GEMINI_API_KEY, fallback to GOOGLE_API_KEY
    key = _get_secret("GEMINI_API_KEY") or _get_secret("GOOGLE_API_KEY")
    if not key:
        raise RuntimeError("GEMINI_API_KEY (or GOOGLE_API_KEY) is missing. Set it in the environment or .env.")
    model = _get_secret("GEMINI_MODEL") or "gemini-2.0-flash"
    return ChatGoogleGenerativeAI(
        model=model,
        google_api_key=key,
        temperature=temperature,
        top_p=top_p,
        callbacks=list(callbacks or []),
    )


def build_mistral(temperature: float = 0.2, top_p: float = 1.0, callbacks: Optional[Sequence[Any]] = None) -> ChatMistralAI:
    key = _get_secret("MISTRAL_API_KEY")
    if not key:
        raise RuntimeError("MISTRAL_API_KEY is missing. Set it in the environment or .env.")
    model = _get_secret("MISTRAL_MODEL") or "mistral-large-latest"
    return ChatMistralAI(
        model=model,
        api_key=key,
        temperature=temperature,
        top_p=top_p,
        callbacks=list(callbacks or []),
    )


class MultiProviderLLM:
    """Try multiple provider builders in order. Build lazily and failover on errors.

    Exposes the same ``ainvoke(messages, config=None)`` call the pipelines use, so
    it can stand in for a single chat model.
    """

    def __init__(self, builders: List[Callable[[], Any]]):
        self.builders = builders
        self._instances: List[Any | None] = [None] * len(builders)

    def _model(self, i: int) -> Any:
        if self._instances[i] is None:
            self._instances[i] = self.builders[i]()
        return self._instances[i]

    async def ainvoke(self, messages: list[Any], config: Optional[dict] = None) -> Any:
        errors: List[str] = []
        last_exc: Optional[Exception] = None
        for i in range(len(self.builders)):
            try:
                model = self._model(i)
            except Exception as e:
                errors.append(f"build[{i}]: {e}")
                last_exc = e
                continue
            try:
                return await model.ainvoke(messages, config=config)
            except Exception as e:
                logger.warning("Provider %d failed, trying the next one: %s", i, e)
                errors.append(f"invoke[{i}]: {e}")
                last_exc = e
        raise RuntimeError("All providers failed: " + "; ".join(errors)) from last_exc


def get_llm(provider: str | None = None, temperature: float | None = None, top_p: float | None = None) -> Any:
    """Chat model for the pipelines, with the logging callback attached.

    Unset arguments fall back to the LLM_PROVIDER / LLM_TEMPERATURE / LLM_TOP_P settings.
    """
    settings = get_settings()
    p = normalize_provider(provider or settings.llm_provider)
    temperature = settings.llm_temperature if temperature is None else temperature
    top_p = settings.llm_top_p if top_p is None else top_p
    callbacks = [LoggingCallbackHandler()]

    if p == "gemini":
        return build_gemini(temperature, top_p, callbacks)
    if p == "mistral":
        return build_mistral(temperature, top_p, callbacks)
    # auto
    return MultiProviderLLM([
        lambda: build_gemini(temperature, top_p, callbacks),
        lambda: build_mistral(temperature, top_p, callbacks),
    ])
