"""
Graph Index - Adjacency view of a workflow definition.

Builds outgoing/incoming adjacency lists keyed by node id in one pass over
the edges, so structural checks are O(V+E) walks. Edges whose endpoints
are not nodes of the definition are kept aside as dangling.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from .models import Edge, Node, WorkflowDefinition


logger = logging.getLogger(__name__)


class GraphIndex:
    """
    Read-only adjacency snapshot of a definition.

    The definition is not mutated or retained beyond its node/edge lists.
    """

    def __init__(self, definition: WorkflowDefinition):
        self._nodes: Dict[str, Node] = {}
        for node in definition.nodes:
            self._nodes.setdefault(node.id, node)

        self._outgoing: Dict[str, List[str]] = {node_id: [] for node_id in self._nodes}
        self._incoming: Dict[str, List[str]] = {node_id: [] for node_id in self._nodes}
        self._dangling: List[Edge] = []

        for edge in definition.edges:
            if edge.source not in self._nodes or edge.target not in self._nodes:
                self._dangling.append(edge)
                continue
            self._outgoing[edge.source].append(edge.target)
            self._incoming[edge.target].append(edge.source)

        if self._dangling:
            logger.debug(f"{len(self._dangling)} dangling edge(s) excluded from adjacency")

    @property
    def node_ids(self) -> List[str]:
        """Node ids in definition order."""
        return list(self._nodes.keys())

    @property
    def dangling_edges(self) -> List[Edge]:
        return list(self._dangling)

    def get_node(self, node_id: str) -> Optional[Node]:
        return self._nodes.get(node_id)

    def successors(self, node_id: str) -> List[str]:
        """Target ids of edges leaving this node."""
        return self._outgoing.get(node_id, [])

    def predecessors(self, node_id: str) -> List[str]:
        """Source ids of edges entering this node."""
        return self._incoming.get(node_id, [])

    def out_degree(self, node_id: str) -> int:
        return len(self._outgoing.get(node_id, []))

    def in_degree(self, node_id: str) -> int:
        return len(self._incoming.get(node_id, []))

    def is_isolated(self, node_id: str) -> bool:
        """No incoming and no outgoing connection."""
        return not self.out_degree(node_id) and not self.in_degree(node_id)

    def find_cycle(self) -> Optional[str]:
        """
        Directed cycle detection.

        Depth-first walk from each unvisited node tracking the current path;
        returns the id of the first node re-encountered while still on the
        path, or None for an acyclic graph. Iterative, so long chains do not
        hit the recursion limit.
        """
        visited: set[str] = set()
        on_path: set[str] = set()

        for root in self._nodes:
            if root in visited:
                continue

            visited.add(root)
            on_path.add(root)
            stack = [(root, iter(self._outgoing[root]))]

            while stack:
                node_id, children = stack[-1]
                advanced = False
                for child in children:
                    if child in on_path:
                        return child
                    if child not in visited:
                        visited.add(child)
                        on_path.add(child)
                        stack.append((child, iter(self._outgoing[child])))
                        advanced = True
                        break
                if not advanced:
                    on_path.discard(node_id)
                    stack.pop()

        return None


__all__ = [
    "GraphIndex",
]
