from __future__ import annotations
from enum import Enum
from typing import Any, Mapping, Optional, TypeVar
from pydantic import BaseModel, ConfigDict

StateT = TypeVar("StateT", bound=BaseModel)


class UnitStatus(str, Enum):
    NOT_STARTED = "not_started"
    PENDING = "pending"
    DONE = "done"
    FAILED = "failed"


class GraphState(BaseModel):
    """Base for every graph record. Channels not yet written read as None."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    trace_id: Optional[str] = None
    graph_error: Optional[str] = None


class ExtractionState(GraphState):
    # Internal retry channels shared by every extraction unit
    raw_output: Optional[str] = None
    parsed_output: Optional[Any] = None
    validation_error: Optional[str] = None
    retries: int = 0
    status: UnitStatus = UnitStatus.NOT_STARTED


def merge_state(current: StateT, partial: Mapping[str, Any]) -> StateT:
    """Return a new record where every key in ``partial`` replaces the current value.

    Keys absent from ``partial`` keep their value. Merging an empty partial
    yields a record equal to ``current``.
    """
    unknown = set(partial) - set(type(current).model_fields)
    if unknown:
        raise KeyError(f"{type(current).__name__} has no channel(s): {', '.join(sorted(unknown))}")
    if not partial:
        return current.model_copy()
    values = dict(current)
    values.update(partial)
    return type(current).model_validate(values)


def channel_values(state: BaseModel) -> dict[str, Any]:
    """Channels that hold a value, as a plain mapping (values are not dumped)."""
    return {k: v for k, v in state if v is not None}
