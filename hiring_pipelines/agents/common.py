from __future__ import annotations
import json
from typing import Any, Iterable, Optional
from langchain_core.prompts import ChatPromptTemplate
from pydantic import BaseModel, ConfigDict, TypeAdapter
from pydantic.alias_generators import to_camel

NO_DATA = "N/A (No data provided)"
NO_TOPICS = "No specific topics provided for assessment."

JSON_ONLY = "Return the output STRICTLY as JSON. Output ONLY JSON. No commentary, no markdown."

_ANY: TypeAdapter[Any] = TypeAdapter(Any)


class StrictModel(BaseModel):
    """LLM output schema. No type coercion: "7" is not a number, 1 is not true."""

    model_config = ConfigDict(strict=True)


class CamelModel(StrictModel):
    """Output schema whose wire keys are camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def safe_stringify(data: Any) -> str:
    """Pretty JSON for a prompt, or a placeholder when there is nothing to show."""
    if data is None or (isinstance(data, (str, list, dict)) and not data):
        return NO_DATA
    if isinstance(data, str):
        return data
    return json.dumps(_ANY.dump_python(data, mode="json", by_alias=True), indent=2, ensure_ascii=False)


def format_topic_list(topics: Optional[Iterable[str]]) -> str:
    items = [t for t in (topics or []) if t and t.strip()]
    if not items:
        return NO_TOPICS
    return "\n".join(f"- {t.strip()}" for t in items)


def json_prompt(system: str, human: str) -> ChatPromptTemplate:
    """System + human chat prompt; literal braces in ``human`` must be doubled."""
    return ChatPromptTemplate.from_messages([
        ("system", f"{system}\n{JSON_ONLY}"),
        ("human", human),
    ])
