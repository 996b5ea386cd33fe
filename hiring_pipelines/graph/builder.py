"""
Graph construction on top of LangGraph.

``GraphBuilder`` records nodes and edges, checks the whole definition when
``compile()`` is called and only then hands it to ``langgraph.graph.StateGraph``.
The LangGraph Pregel runtime does the actual execution: supersteps, async
nodes of one superstep awaited together, last-writer-wins channels and
barrier channels for join edges.
"""
from __future__ import annotations
import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Set, Tuple, Type, Union
from langgraph.graph import END, START, StateGraph
from pydantic import BaseModel
from ..config import DEFAULT_RECURSION_LIMIT
from ..errors import GraphDefinitionError
from ..state import channel_values, merge_state

logger = logging.getLogger(__name__)

NodeFn = Callable[[Any], Any]
Router = Callable[[Any], str]


def _as_node(fn: NodeFn) -> NodeFn:
    # LangGraph takes the first parameter's annotation as the node's input
    # schema; an unannotated wrapper makes every node read the full graph record.
    if inspect.iscoroutinefunction(fn) or inspect.iscoroutinefunction(getattr(fn, "__call__", None)):
        async def node(state):
            return await fn(state)
    else:
        def node(state):
            return fn(state)
    node.__name__ = getattr(fn, "__name__", type(fn).__name__)
    return node


@dataclass
class _Conditional:
    router: Router
    targets: Dict[str, str]


@dataclass
class GraphBuilder:
    state_cls: Type[BaseModel]
    name: str
    recursion_limit: int = DEFAULT_RECURSION_LIMIT
    _nodes: Dict[str, NodeFn] = field(default_factory=dict, init=False)
    _edges: List[Tuple[str, str]] = field(default_factory=list, init=False)
    _joins: List[Tuple[Tuple[str, ...], str]] = field(default_factory=list, init=False)
    _conditionals: Dict[str, _Conditional] = field(default_factory=dict, init=False)
    _problems: List[str] = field(default_factory=list, init=False)

    def add_node(self, name: str, fn: NodeFn) -> "GraphBuilder":
        if not name or name in (START, END):
            self._problems.append(f"reserved or empty node name: {name!r}")
        elif name in self._nodes:
            self._problems.append(f"duplicate node: {name}")
        else:
            self._nodes[name] = fn
        return self

    def add_edge(self, source: str, target: str) -> "GraphBuilder":
        self._edges.append((source, target))
        return self

    def add_join(self, sources: Sequence[str], target: str) -> "GraphBuilder":
        """``target`` runs once, after every node in ``sources`` completed in the run."""
        self._joins.append((tuple(sources), target))
        return self

    def add_conditional_edges(self, source: str, router: Router, targets: Mapping[str, str]) -> "GraphBuilder":
        if source in self._conditionals:
            self._problems.append(f"node {source} already has conditional edges")
        else:
            self._conditionals[source] = _Conditional(router, dict(targets))
        return self

    # -------- validation --------
    def _successors(self, *, conditional: bool) -> Dict[str, Set[str]]:
        succ: Dict[str, Set[str]] = {n: set() for n in (START, *self._nodes)}
        for src, dst in self._edges:
            succ.setdefault(src, set()).add(dst)
        for sources, dst in self._joins:
            for src in sources:
                succ.setdefault(src, set()).add(dst)
        if conditional:
            for src, cond in self._conditionals.items():
                succ.setdefault(src, set()).update(cond.targets.values())
        return succ

    def _reachable(self) -> Set[str]:
        succ = self._successors(conditional=True)
        seen: Set[str] = set()
        stack = [START]
        while stack:
            current = stack.pop()
            for nxt in succ.get(current, ()):
                if nxt not in seen and nxt != END:
                    seen.add(nxt)
                    stack.append(nxt)
        # a join target only fires when every one of its sources can run
        for sources, dst in self._joins:
            if dst in seen and not all(s in seen for s in sources):
                seen.discard(dst)
        return seen

    def _has_unconditional_cycle(self) -> Optional[List[str]]:
        succ = self._successors(conditional=False)
        state: Dict[str, int] = {}
        path: List[str] = []

        def visit(node: str) -> Optional[List[str]]:
            state[node] = 1
            path.append(node)
            for nxt in succ.get(node, ()):
                if nxt == END:
                    continue
                if state.get(nxt) == 1:
                    return path[path.index(nxt):] + [nxt]
                if nxt not in state:
                    found = visit(nxt)
                    if found:
                        return found
            path.pop()
            state[node] = 2
            return None

        for node in self._nodes:
            if node not in state:
                found = visit(node)
                if found:
                    return found
        return None

    def validate(self) -> List[str]:
        problems = list(self._problems)
        known = set(self._nodes)

        for node in sorted(known & set(self.state_cls.model_fields)):
            problems.append(f"node {node} has the same name as a state channel")

        for src, dst in self._edges:
            if src != START and src not in known:
                problems.append(f"edge {src} -> {dst}: unknown source")
            if dst != END and dst not in known:
                problems.append(f"edge {src} -> {dst}: unknown target")
            if dst == START or src == END:
                problems.append(f"edge {src} -> {dst}: START/END used in the wrong position")
        for sources, dst in self._joins:
            if len(set(sources)) < 2:
                problems.append(f"join into {dst}: needs at least two distinct predecessors")
            for src in sources:
                if src not in known:
                    problems.append(f"join into {dst}: unknown predecessor {src}")
            if dst not in known:
                problems.append(f"join {list(sources)}: unknown target {dst}")
        for src, cond in self._conditionals.items():
            if src not in known:
                problems.append(f"conditional edges from unknown node {src}")
            if not cond.targets:
                problems.append(f"conditional edges from {src}: empty target map")
            for key, dst in cond.targets.items():
                if dst != END and dst not in known:
                    problems.append(f"conditional edges from {src}: route {key!r} -> unknown node {dst}")

        if not any(src == START for src, _ in self._edges):
            problems.append("no entry edge out of START")

        reachable = self._reachable()
        for node in self._nodes:
            if node not in reachable:
                problems.append(f"node {node} is unreachable from START")

        with_exit = {src for src, _ in self._edges} | set(self._conditionals)
        with_exit |= {src for sources, _ in self._joins for src in sources}
        for node in self._nodes:
            if node not in with_exit:
                problems.append(f"node {node} has no outgoing edge")

        cycle = self._has_unconditional_cycle()
        if cycle:
            problems.append("cycle without conditional routing: " + " -> ".join(cycle))
        return problems

    def compile(self) -> "RunnableGraph":
        problems = self.validate()
        if problems:
            raise GraphDefinitionError(self.name, problems)

        graph = StateGraph(self.state_cls)
        for name, fn in self._nodes.items():
            graph.add_node(name, _as_node(fn))
        for src, dst in self._edges:
            graph.add_edge(src, dst)
        for sources, dst in self._joins:
            graph.add_edge(list(sources), dst)
        for src, cond in self._conditionals.items():
            graph.add_conditional_edges(src, cond.router, cond.targets)

        return RunnableGraph(
            name=self.name,
            state_cls=self.state_cls,
            compiled=graph.compile(),
            recursion_limit=self.recursion_limit,
        )


@dataclass(frozen=True)
class RunnableGraph:
    name: str
    state_cls: Type[BaseModel]
    compiled: Any
    recursion_limit: int = DEFAULT_RECURSION_LIMIT

    @property
    def channels(self) -> Set[str]:
        return set(self.state_cls.model_fields)

    async def ainvoke(self, initial: Union[BaseModel, Mapping[str, Any]]) -> Any:
        """Run the graph to completion and return the final state record."""
        if isinstance(initial, self.state_cls):
            start = initial
        elif isinstance(initial, BaseModel):
            start = self.state_cls.model_validate(channel_values(initial))
        else:
            start = self.state_cls.model_validate(dict(initial))

        logger.debug("Graph %s started | TraceID: %s", self.name, getattr(start, "trace_id", None))
        output = await self.compiled.ainvoke(
            channel_values(start),
            config={"recursion_limit": self.recursion_limit},
        )
        # LangGraph may hand back a plain dict; coerce into the state record
        if isinstance(output, BaseModel):
            output = channel_values(output)
        final = merge_state(start, {k: v for k, v in output.items() if k in self.channels})
        logger.debug("Graph %s finished | TraceID: %s", self.name, getattr(final, "trace_id", None))
        return final
