"""
Workflow Editor - Node/edge operations issued by the designer UI.

Editing always succeeds or is a no-op: nothing here raises on a rejected
operation. Arbitrary connections are allowed while editing; only
self-loops and duplicate (source, target) pairs are refused. Everything
else is judged by validate_workflow() at save time.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

from node_registry import NodeTypeRegistry, START_KIND, normalize_config

from .models import Edge, Node, Position, WorkflowDefinition


logger = logging.getLogger(__name__)

# Id of the start node auto-inserted into a new definition
INITIAL_START_ID = "start"

DEFAULT_PATH_ID = "default"


def generate_unique_task_name(base_name: str, existing_names: Iterable[str]) -> str:
    """
    Disambiguate a task name against the names already in use.

    "Send Message" -> "Send Message (2)" -> "Send Message (3)" ...
    """
    taken = set(existing_names)
    name = base_name
    counter = 1
    while name in taken:
        counter += 1
        name = f"{base_name} ({counter})"
    return name


def _new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


@dataclass
class ConnectResult:
    """
    Result of a connect / reverse request.
    """
    edge: Optional[Edge] = None
    warning: Optional[str] = None

    @property
    def accepted(self) -> bool:
        return self.edge is not None and self.warning is None


@dataclass
class OutputPath:
    """An outgoing route of a node, as offered to branch-selecting forms."""
    id: str
    label: str
    target_node_id: Optional[str]


class WorkflowEditor:
    """
    Owns one in-memory definition for one editing session.

    Usage:
        editor = WorkflowEditor.new(registry, name="Onboarding")
        ask = editor.add_node("waitReply", Position(x=200, y=80))
        end = editor.add_node("end")
        editor.add_edge(editor.start_node.id, ask.id)
        editor.add_edge(ask.id, end.id)
    """

    def __init__(
        self,
        definition: WorkflowDefinition,
        registry: NodeTypeRegistry,
        webhook_base_url: str = "",
    ):
        """
        Args:
            definition: Definition to edit (mutated in place)
            registry: Node kind catalog snapshot
            webhook_base_url: Base URL used to derive start-node webhook URLs
        """
        self.definition = definition
        self.registry = registry
        self.webhook_base_url = webhook_base_url

    @classmethod
    def new(
        cls,
        registry: NodeTypeRegistry,
        name: str = "",
        description: str = "",
        webhook_base_url: str = "",
    ) -> "WorkflowEditor":
        """Create an empty definition holding a single start node."""
        definition = WorkflowDefinition(name=name, description=description)
        editor = cls(definition, registry, webhook_base_url=webhook_base_url)
        editor._insert_node(START_KIND, Position(x=250, y=50), node_id=INITIAL_START_ID)
        return editor

    # ------------------------------------------------------------------
    # Nodes
    # ------------------------------------------------------------------

    @property
    def start_node(self) -> Optional[Node]:
        starts = self.definition.nodes_of_kind(START_KIND)
        return starts[0] if starts else None

    def _insert_node(self, kind: str, position: Position, node_id: Optional[str] = None) -> Node:
        node_type = self.registry.resolve(kind)
        node = Node(
            id=node_id or _new_id(kind),
            kind=kind,
            position=position,
            task_name=generate_unique_task_name(
                self.registry.default_label(kind), self.definition.task_names()
            ),
            config=self.registry.default_config(kind),
            label=node_type.label,
            icon=node_type.icon,
            is_implemented=node_type.is_implemented,
        )
        self.definition.nodes.append(node)
        return node

    def add_node(self, kind: str, position: Optional[Position] = None) -> Optional[Node]:
        """
        Add a node of the given kind.

        Returns:
            The new node, or None when a second start node was requested
        """
        single = kind == START_KIND or self.registry.resolve(kind).single_instance
        if single and self.definition.nodes_of_kind(kind):
            logger.info(f"Ignored add_node: a '{kind}' node already exists")
            return None

        node = self._insert_node(kind, position or Position())
        logger.debug(f"Added node {node.id} ({kind}) as '{node.task_name}'")
        return node

    def remove_node(self, node_id: str) -> bool:
        """
        Remove a node and every edge touching it.

        The start node cannot be removed.

        Returns:
            True if the node was removed
        """
        node = self.definition.get_node(node_id)
        if node is None:
            return False
        if node.kind == START_KIND:
            logger.info("Ignored remove_node on the start node")
            return False

        self.definition.nodes = [n for n in self.definition.nodes if n.id != node_id]
        before = len(self.definition.edges)
        self.definition.edges = [
            e for e in self.definition.edges
            if e.source != node_id and e.target != node_id
        ]
        logger.debug(
            f"Removed node {node_id} and {before - len(self.definition.edges)} connected edge(s)"
        )
        return True

    def move_node(self, node_id: str, position: Position) -> bool:
        node = self.definition.get_node(node_id)
        if node is None:
            return False
        node.position = position
        return True

    def rename_node(self, node_id: str, task_name: str) -> Optional[Node]:
        """Set a node's task name, disambiguated against the other nodes."""
        node = self.definition.get_node(node_id)
        if node is None:
            return None
        others = [n.task_name for n in self.definition.nodes if n.id != node_id]
        node.task_name = generate_unique_task_name(task_name, others)
        return node

    def update_node_config(self, node_id: str, partial_config: Mapping[str, Any]) -> Optional[Node]:
        """
        Shallow-merge a partial config into a node.

        A nested `validation` object is merged key by key so editing one
        validation field keeps its siblings. Domain rules (interval and
        retry clamping, webhook token) are applied after the merge.

        Returns:
            The updated node, or None if the id is unknown
        """
        node = self.definition.get_node(node_id)
        if node is None:
            return None

        merged: Dict[str, Any] = dict(node.config)
        for key, value in partial_config.items():
            if key == "validation" and isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
                merged[key] = {**merged[key], **value}
            else:
                merged[key] = value

        node.config = normalize_config(node.kind, merged, self.webhook_base_url)
        return node

    # ------------------------------------------------------------------
    # Edges
    # ------------------------------------------------------------------

    def _check_connection(self, source: str, target: str) -> Optional[str]:
        if source == target:
            return "Cannot connect a node to itself"
        if self.definition.find_edge(source, target) is not None:
            return "These nodes are already connected"
        return None

    def add_edge(self, source: str, target: str, label: Optional[str] = None) -> ConnectResult:
        """
        Connect two nodes.

        Self-loops and duplicate pairs are refused with a user-facing
        warning; any other connection is accepted.
        """
        if self.definition.get_node(source) is None or self.definition.get_node(target) is None:
            return ConnectResult(warning="Both endpoints must be nodes of this workflow")

        warning = self._check_connection(source, target)
        if warning:
            logger.info(f"Rejected connection {source} -> {target}: {warning}")
            return ConnectResult(warning=warning)

        edge = Edge(id=_new_id("edge"), source=source, target=target, label=label)
        self.definition.edges.append(edge)
        return ConnectResult(edge=edge)

    def remove_edge(self, edge_id: str) -> bool:
        before = len(self.definition.edges)
        self.definition.edges = [e for e in self.definition.edges if e.id != edge_id]
        return len(self.definition.edges) != before

    def reverse_edge(self, edge_id: str) -> ConnectResult:
        """Swap an edge's direction, unless the reversed pair already exists."""
        edge = self.definition.get_edge(edge_id)
        if edge is None:
            return ConnectResult(warning="Connection not found")

        if self.definition.find_edge(edge.target, edge.source) is not None:
            return ConnectResult(edge=edge, warning="These nodes are already connected")

        edge.source, edge.target = edge.target, edge.source
        return ConnectResult(edge=edge)

    def output_paths(self, node_id: str) -> List[OutputPath]:
        """Outgoing connections of a node followed by the default path."""
        paths = []
        for edge in self.definition.edges:
            if edge.source != node_id:
                continue
            target = self.definition.get_node(edge.target)
            label = target.display_name if target else f"Node {edge.target}"
            paths.append(OutputPath(id=edge.id, label=label, target_node_id=edge.target))
        paths.append(OutputPath(id=DEFAULT_PATH_ID, label="Default Path", target_node_id=None))
        return paths


__all__ = [
    "ConnectResult",
    "INITIAL_START_ID",
    "OutputPath",
    "WorkflowEditor",
    "generate_unique_task_name",
]
