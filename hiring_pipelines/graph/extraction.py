"""
The Generate -> Validate -> Fix unit every analysis is built from.

    START -> generate -> validate --success--> END
                            |  ^
                       fix  |  |
                            v  |
                            fix
                            |
                         failure --> END

``validate`` is visited at most MAX_RETRIES + 1 times per run. ``failure``
turns the last error into ``graph_error`` prefixed with the unit's label.
"""
from __future__ import annotations
import json
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Tuple, Type
from langchain_core.prompts import ChatPromptTemplate
from pydantic import TypeAdapter
from ..config import MAX_RETRIES
from ..errors import InputMissingError
from ..state import ExtractionState, UnitStatus
from ..validation import validate_and_parse
from .builder import END, START, GraphBuilder, RunnableGraph

logger = logging.getLogger(__name__)

FIX_PROMPT = ChatPromptTemplate.from_messages([
    ("system", (
        "You are a JSON correction agent. You receive a JSON document that failed validation "
        "and the validation error. Return ONLY the corrected JSON, no commentary, no markdown. "
        "Keep the original content and language of the values wherever they are valid."
    )),
    ("human", (
        "The error:\n{validation_error}\n\n"
        "The invalid JSON:\n{invalid_output}\n\n"
        "The JSON must satisfy this JSON schema:\n{json_schema}\n\n"
        "Corrected JSON:"
    )),
])


@dataclass(frozen=True)
class ExtractionUnitSpec:
    """Everything that differs between two extraction units."""

    name: str
    state_cls: Type[ExtractionState]
    output_type: Any
    prompt: ChatPromptTemplate
    inputs: Tuple[str, ...]
    failure_label: str
    # builds the prompt variables; defaults to the raw input channels
    render: Optional[Callable[[Any], Mapping[str, Any]]] = None


def route_after_validation(state: ExtractionState) -> str:
    trace_id = state.trace_id
    if not state.validation_error:
        logger.info("Routing: Success. Proceeding to END. | TraceID: %s", trace_id)
        return "success"
    if state.retries >= MAX_RETRIES:
        logger.error("Routing: Max retries reached. Failing. | TraceID: %s", trace_id)
        return "failure"
    logger.warning("Routing: Validation failed. Retrying (Attempt %d). | TraceID: %s", state.retries + 1, trace_id)
    return "fix"


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


async def call_llm(llm: Any, messages: Sequence[Any], node: str) -> Tuple[Optional[str], Optional[str]]:
    """Returns ``(raw_text, error)``. Provider errors come back as error text, never raised."""
    try:
        response = await llm.ainvoke(list(messages), config={"metadata": {"node": node}})
    except Exception as e:
        logger.warning("LLM call failed for node %s: %s", node, e)
        return None, f"LLM invocation failed: {type(e).__name__}: {e}"
    content = getattr(response, "content", None)
    if not isinstance(content, str):
        logger.warning("LLM output content was not a string. Received: %r", content)
        return None, None
    return content, None


class ExtractionUnit:
    def __init__(self, spec: ExtractionUnitSpec, llm: Any):
        self.spec = spec
        self.llm = llm
        self.adapter = TypeAdapter(spec.output_type)
        self._json_schema = json.dumps(self.adapter.json_schema(by_alias=True), ensure_ascii=False)

    @property
    def name(self) -> str:
        return self.spec.name

    def prompt_variables(self, state: ExtractionState) -> Dict[str, Any]:
        if self.spec.render is not None:
            return dict(self.spec.render(state))
        return {k: getattr(state, k) for k in self.spec.inputs}

    async def generate(self, state: ExtractionState) -> Dict[str, Any]:
        missing = [k for k in self.spec.inputs if _is_missing(getattr(state, k, None))]
        if missing:
            raise InputMissingError(self.name, missing)

        trace_id = state.trace_id or str(uuid.uuid4())
        logger.info("[%s] Generate started | TraceID: %s", self.name, trace_id)
        messages = self.spec.prompt.format_messages(**self.prompt_variables(state))
        raw, error = await call_llm(self.llm, messages, f"{self.name}.generate")
        logger.info("[%s] Generate finished | TraceID: %s", self.name, trace_id)
        return {
            "trace_id": trace_id,
            "raw_output": raw,
            "validation_error": error,
            "parsed_output": None,
            "retries": 0,
            "status": UnitStatus.PENDING,
        }

    def validate(self, state: ExtractionState) -> Dict[str, Any]:
        logger.debug("[%s] Validating | TraceID: %s", self.name, state.trace_id)
        if state.raw_output is None and state.validation_error:
            # Generate/Fix could not call the model; keep its error for the router
            return {"validation_error": state.validation_error, "retries": state.retries + 1}

        data, error = validate_and_parse(state.raw_output, self.adapter)
        if error:
            logger.warning("[%s] Validation failed: %s | TraceID: %s", self.name, error, state.trace_id)
            return {"parsed_output": None, "validation_error": error, "retries": state.retries + 1}
        return {"parsed_output": data, "validation_error": None, "status": UnitStatus.DONE}

    async def fix(self, state: ExtractionState) -> Dict[str, Any]:
        logger.info("[%s] Fix attempt %d | TraceID: %s", self.name, state.retries, state.trace_id)
        messages = FIX_PROMPT.format_messages(
            validation_error=state.validation_error,
            invalid_output=state.raw_output or "",
            json_schema=self._json_schema,
        )
        raw, error = await call_llm(self.llm, messages, f"{self.name}.fix")
        return {"raw_output": raw, "validation_error": error}

    def failure(self, state: ExtractionState) -> Dict[str, Any]:
        final_error = f"{self.spec.failure_label}: {state.validation_error}"
        logger.error("%s | TraceID: %s", final_error, state.trace_id)
        return {"graph_error": final_error, "status": UnitStatus.FAILED}

    def build(self) -> RunnableGraph:
        builder = GraphBuilder(self.spec.state_cls, self.name)
        builder.add_node("generate", self.generate)
        builder.add_node("validate", self.validate)
        builder.add_node("fix", self.fix)
        builder.add_node("failure", self.failure)
        builder.add_edge(START, "generate")
        builder.add_edge("generate", "validate")
        builder.add_conditional_edges(
            "validate",
            route_after_validation,
            {"success": END, "fix": "fix", "failure": "failure"},
        )
        builder.add_edge("fix", "validate")
        builder.add_edge("failure", END)
        return builder.compile()


def build_extraction_unit(spec: ExtractionUnitSpec, llm: Any) -> RunnableGraph:
    return ExtractionUnit(spec, llm).build()
