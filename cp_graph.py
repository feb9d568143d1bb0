#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from collections import deque
from typing import Dict, List, Set, Tuple


class GraphCycleError(Exception):
    """
    Raised when a topological order does not exist.

    `nodes` is one concrete cycle, following edges backwards (from a node to the node
    it depends on), with the first node repeated at the end.
    """

    def __init__(self, nodes: List[int]):
        super().__init__(f"cycle through nodes {nodes}")
        self.nodes = nodes


class DependencyGraph:
    """
    Directed graph over small integer node ids.

    An edge `a -> b` means "a must come before b". Nodes and edges keep their insertion
    order, which makes the topological order deterministic for a given construction order.
    The graph is meant to be built, sorted and thrown away.
    """

    def __init__(self) -> None:
        self._nodes: List[int] = []
        self._successors: Dict[int, List[int]] = {}
        self._predecessors: Dict[int, List[int]] = {}
        self._edges: Set[Tuple[int, int]] = set()

    def __contains__(self, node: int) -> bool:
        return node in self._successors

    def __len__(self) -> int:
        return len(self._nodes)

    @property
    def nodes(self) -> List[int]:
        return list(self._nodes)

    def add_node(self, node: int) -> None:
        if node in self._successors:
            return
        self._nodes.append(node)
        self._successors[node] = []
        self._predecessors[node] = []

    def add_edge(self, source: int, target: int) -> None:
        """Add `source -> target`; missing nodes are added, repeated edges collapse."""
        self.add_node(source)
        self.add_node(target)
        if (source, target) in self._edges:
            return
        self._edges.add((source, target))
        self._successors[source].append(target)
        self._predecessors[target].append(source)

    def successors(self, node: int) -> List[int]:
        return list(self._successors[node])

    def predecessors(self, node: int) -> List[int]:
        return list(self._predecessors[node])

    def topological_sort(self) -> List[int]:
        """
        Kahn's algorithm. Ready nodes are emitted in insertion order.

        Raises GraphCycleError if some nodes can never become ready.
        """
        in_degree = {node: len(self._predecessors[node]) for node in self._nodes}
        ready = deque(node for node in self._nodes if in_degree[node] == 0)
        order: List[int] = []

        while ready:
            node = ready.popleft()
            order.append(node)
            for succ in self._successors[node]:
                in_degree[succ] -= 1
                if in_degree[succ] == 0:
                    ready.append(succ)

        if len(order) != len(self._nodes):
            blocked = [node for node in self._nodes if in_degree[node] > 0]
            raise GraphCycleError(self._find_cycle(blocked))

        return order

    def _find_cycle(self, blocked: List[int]) -> List[int]:
        # Every blocked node has at least one blocked predecessor, so walking
        # predecessors from any blocked node must eventually revisit a node.
        remaining = set(blocked)
        seen: Dict[int, int] = {}
        path: List[int] = []
        node = blocked[0]
        while node not in seen:
            seen[node] = len(path)
            path.append(node)
            node = next(p for p in self._predecessors[node] if p in remaining)
        cycle = path[seen[node]:]
        cycle.append(node)
        return cycle
