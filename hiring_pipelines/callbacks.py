from __future__ import annotations
import logging
import time
from typing import Any, Dict, List, Optional
from uuid import UUID
from langchain_core.callbacks import BaseCallbackHandler
from langchain_core.outputs import LLMResult


class LoggingCallbackHandler(BaseCallbackHandler):
    """Logs every model call with the graph node that issued it, its duration and token usage."""

    name = "LoggingCallbackHandler"

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("hiring_pipelines.llm")
        self._started: Dict[UUID, float] = {}

    def _start(self, run_id: UUID, metadata: Optional[Dict[str, Any]]) -> None:
        self._started[run_id] = time.monotonic()
        node = (metadata or {}).get("node", "UnknownNode")
        self.logger.info("LLM Call Started for node: %s", node)

    def _elapsed_ms(self, run_id: UUID) -> Optional[int]:
        started = self._started.pop(run_id, None)
        return None if started is None else int((time.monotonic() - started) * 1000)

    def on_chat_model_start(self, serialized: Dict[str, Any], messages: List[List[Any]], *, run_id: UUID,
                            parent_run_id: Optional[UUID] = None, tags: Optional[List[str]] = None,
                            metadata: Optional[Dict[str, Any]] = None, **kwargs: Any) -> None:
        self._start(run_id, metadata)

    def on_llm_start(self, serialized: Dict[str, Any], prompts: List[str], *, run_id: UUID,
                     parent_run_id: Optional[UUID] = None, tags: Optional[List[str]] = None,
                     metadata: Optional[Dict[str, Any]] = None, **kwargs: Any) -> None:
        self._start(run_id, metadata)

    def on_llm_end(self, response: LLMResult, *, run_id: UUID, **kwargs: Any) -> None:
        duration = self._elapsed_ms(run_id)
        tokens = token_usage(response)
        self.logger.info(
            "LLM Call Succeeded - %sms | Tokens: (I: %d, O: %d, T: %d)",
            duration, tokens["prompt"], tokens["completion"], tokens["total"],
        )

    def on_llm_error(self, error: BaseException, *, run_id: UUID, **kwargs: Any) -> None:
        duration = self._elapsed_ms(run_id)
        self.logger.error("LLM Call Failed - %sms | Error: %s", duration, error)


def token_usage(response: LLMResult) -> Dict[str, int]:
    usage = (response.llm_output or {}).get("token_usage") or {}
    if usage:
        prompt = usage.get("prompt_tokens", 0) or 0
        completion = usage.get("completion_tokens", 0) or 0
        return {"prompt": prompt, "completion": completion, "total": usage.get("total_tokens", prompt + completion) or 0}

    # newer chat models report usage on the message instead of llm_output
    totals = {"prompt": 0, "completion": 0, "total": 0}
    for generations in response.generations:
        for generation in generations:
            meta = getattr(getattr(generation, "message", None), "usage_metadata", None) or {}
            totals["prompt"] += meta.get("input_tokens", 0)
            totals["completion"] += meta.get("output_tokens", 0)
            totals["total"] += meta.get("total_tokens", 0)
    return totals
