"""
Tarjan's strongly connected components.

The depth-first search shares its bookkeeping between sibling calls, so the
stack-safe version threads a ``TarjanState`` through ``recurse_mut``.
Components are reported in the order Tarjan's algorithm completes them, each
listing its nodes in the order they leave the node stack.
"""

from __future__ import annotations

from collections.abc import Generator
from dataclasses import dataclass, field

from stack_safe.driver import recurse_mut
from stack_safe.state import StateCell

Node = int
Graph = list[list[Node]]

UNVISITED = -1


@dataclass
class TarjanState:
    index: int = 0
    indices: list[int] = field(default_factory=list)
    lowlinks: list[int] = field(default_factory=list)
    components: list[list[Node]] = field(default_factory=list)
    stack: list[Node] = field(default_factory=list)
    on_stack: set[Node] = field(default_factory=set)

    @classmethod
    def for_graph(cls, graph: Graph) -> TarjanState:
        n = len(graph)
        return cls(indices=[UNVISITED] * n, lowlinks=[UNVISITED] * n)

    def enter(self, v: Node) -> None:
        self.indices[v] = self.index
        self.lowlinks[v] = self.index
        self.index += 1
        self.stack.append(v)
        self.on_stack.add(v)

    def leave(self, v: Node) -> None:
        """Pop ``v``'s component off the node stack if ``v`` is its root."""
        if self.lowlinks[v] != self.indices[v]:
            return
        component: list[Node] = []
        w = UNVISITED
        while w != v:
            w = self.stack.pop()
            self.on_stack.remove(w)
            component.append(w)
        self.components.append(component)


def recursive(graph: Graph) -> list[list[Node]]:
    s = TarjanState.for_graph(graph)

    def dfs(v: Node) -> None:
        s.enter(v)
        for w in graph[v]:
            if s.indices[w] == UNVISITED:
                dfs(w)
                s.lowlinks[v] = min(s.lowlinks[v], s.lowlinks[w])
            elif w in s.on_stack:
                s.lowlinks[v] = min(s.lowlinks[v], s.indices[w])
        s.leave(v)

    for v in range(len(graph)):
        if s.indices[v] == UNVISITED:
            dfs(v)
    return s.components


@recurse_mut
def _dfs(
    v_graph: tuple[Node, Graph], s: TarjanState
) -> Generator[tuple[tuple[Node, Graph], TarjanState], tuple[None, TarjanState], tuple[None, TarjanState]]:
    v, graph = v_graph
    s.enter(v)
    for w in graph[v]:
        if s.indices[w] == UNVISITED:
            _, s = yield (w, graph), s
            s.lowlinks[v] = min(s.lowlinks[v], s.lowlinks[w])
        elif w in s.on_stack:
            s.lowlinks[v] = min(s.lowlinks[v], s.indices[w])
    s.leave(v)
    return None, s


def stack_safe(graph: Graph) -> list[list[Node]]:
    cell = StateCell(TarjanState.for_graph(graph))
    for v in range(len(graph)):
        if cell.value.indices[v] == UNVISITED:
            _dfs((v, graph), cell)
    return cell.take().components


# ============================================
# Example graphs and their components
# ============================================

def simple() -> Graph:
    return [[1], [2, 3], [1, 4], [2], []]


def simple_sccs() -> list[list[Node]]:
    return [[4], [3, 2, 1], [0]]


def path(n: int) -> Graph:
    """Edges ``i -> i + 1``."""
    return [[v + 1] if v + 1 < n else [] for v in range(n)]


def path_sccs(n: int) -> list[list[Node]]:
    return [[v] for v in reversed(range(n))]


def path_rev(n: int) -> Graph:
    """Edges ``i + 1 -> i``."""
    return [[v - 1] if v > 0 else [] for v in range(n)]


def path_rev_sccs(n: int) -> list[list[Node]]:
    return [[v] for v in range(n)]


def complete(n: int) -> Graph:
    return [[w for w in range(n) if w != v] for v in range(n)]


def complete_sccs(n: int) -> list[list[Node]]:
    return [list(reversed(range(n)))] if n else []
