from __future__ import annotations
import logging
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Union
from pydantic import BaseModel
from ..errors import InputMissingError, SubgraphFailure
from ..state import UnitStatus
from .builder import RunnableGraph

logger = logging.getLogger(__name__)

OutputSpec = Union[str, Callable[[Any], Any]]


class SubgraphAdapter:
    """Runs a compiled graph as a single node of an outer graph.

    The outer record is projected onto the inner graph's channels by name
    (``graph_error`` is never forwarded, unset channels are left out). After
    the inner run, only the declared ``outputs`` are written back. Each entry
    maps an outer channel to either an inner channel name or a callable that
    receives the inner final record.

    If the inner run ended with ``graph_error`` set, or a unit ended
    ``failed``, the adapter raises ``SubgraphFailure`` instead of returning
    anything, so nothing downstream in the outer graph runs on missing data.
    """

    def __init__(self, graph: RunnableGraph, outputs: Mapping[str, OutputSpec], name: Optional[str] = None):
        self.graph = graph
        self.outputs = dict(outputs)
        self.name = name or graph.name

    def project(self, state: BaseModel) -> Dict[str, Any]:
        channels = self.graph.channels - {"graph_error"}
        return {k: v for k, v in state if k in channels and v is not None}

    async def __call__(self, state: BaseModel) -> Dict[str, Any]:
        final = await self.graph.ainvoke(self.project(state))
        failed = getattr(final, "status", None) == UnitStatus.FAILED
        if final.graph_error or failed:
            raise SubgraphFailure(self.name, final.graph_error or f"{self.name} ended in a failed state")

        result: Dict[str, Any] = {}
        for outer_key, spec in self.outputs.items():
            result[outer_key] = spec(final) if callable(spec) else getattr(final, spec)
        return result


def capture_failures(node: Callable[[Any], Awaitable[Dict[str, Any]]], name: Optional[str] = None):
    """Turn a raised sub-graph failure into a ``graph_error`` write.

    Used at stage boundaries where a conditional edge decides what happens next.
    """
    label = name or getattr(node, "name", "stage")

    async def run(state: BaseModel) -> Dict[str, Any]:
        try:
            return await node(state)
        except SubgraphFailure as e:
            logger.error("Stage %s failed: %s | TraceID: %s", label, e, getattr(state, "trace_id", None))
            return {"graph_error": e.graph_error}
        except InputMissingError as e:
            logger.error("Stage %s failed: %s | TraceID: %s", label, e, getattr(state, "trace_id", None))
            return {"graph_error": str(e)}

    run.__name__ = f"{label}_stage"
    return run
