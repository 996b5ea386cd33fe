from __future__ import annotations
from typing import Iterable, List


class PipelineError(Exception):
    """Base class for every error raised by the orchestration layer."""


class GraphDefinitionError(PipelineError):
    def __init__(self, graph_name: str, problems: Iterable[str]):
        self.graph_name = graph_name
        self.problems: List[str] = list(problems)
        details = "\n".join(f"- {p}" for p in self.problems)
        super().__init__(f"Invalid graph definition '{graph_name}':\n{details}")


class InputMissingError(PipelineError):
    """A Generate node ran without one of its required input channels."""

    def __init__(self, unit: str, missing: Iterable[str]):
        self.unit = unit
        self.missing: List[str] = list(missing)
        super().__init__(f"{unit}: missing required input [{', '.join(self.missing)}]")


class IncompleteAggregationError(PipelineError):
    """A fan-in node found a required predecessor output still empty."""

    def __init__(self, node: str, missing: Iterable[str]):
        self.node = node
        self.missing: List[str] = list(missing)
        super().__init__(f"{node} received incomplete data: missing [{', '.join(self.missing)}]")


class SubgraphFailure(PipelineError):
    """Raised by an adapter when its inner graph ended with graph_error set."""

    def __init__(self, subgraph: str, graph_error: str):
        self.subgraph = subgraph
        self.graph_error = graph_error
        super().__init__(f"Sub-graph {subgraph} failed: {graph_error}")


class PipelineFailedError(PipelineError):
    """Controlled pipeline failure surfaced at the job boundary."""

    def __init__(self, pipeline: str, graph_error: str):
        self.pipeline = pipeline
        self.graph_error = graph_error
        super().__init__(f"{pipeline} failed: {graph_error}")
