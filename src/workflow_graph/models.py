"""
Workflow Models - In-memory structures for workflow definitions.

Nodes carry a kind-specific config payload; presentation decoration
(label, icon, implemented flag) is re-attached from the node registry and
never serialized.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Position(BaseModel):
    """Node position on the canvas (presentation only)."""
    x: float = 0
    y: float = 0


class Node(BaseModel):
    """
    A step in a workflow graph.
    """
    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    id: str = Field(..., description="Opaque node id, stable for the definition's lifetime")
    kind: str = Field(..., description="Registered node kind tag")
    position: Position = Field(default_factory=Position)
    task_name: str = Field("", alias="taskName", description="Unique human-readable label")
    config: Dict[str, Any] = Field(default_factory=dict)

    # Decoration
    label: Optional[str] = Field(None, exclude=True)
    icon: Optional[str] = Field(None, exclude=True)
    is_implemented: bool = Field(True, exclude=True)

    @property
    def display_name(self) -> str:
        """Name used in findings and notices."""
        return self.task_name or self.label or self.id

    def semantic_dict(self) -> Dict[str, Any]:
        """Fields that survive a save/load round trip."""
        return self.model_dump(include={"id", "kind", "position", "task_name", "config"})


class Edge(BaseModel):
    """
    Directed connection between two nodes.
    """
    id: str
    source: str = Field(..., description="Source node id")
    target: str = Field(..., description="Target node id")
    label: Optional[str] = None


class DefinitionStatus(str, Enum):
    """Lifecycle tag, independent of graph validity."""
    ENABLED = "Enabled"
    DISABLED = "Disabled"


class WorkflowDefinition(BaseModel):
    """
    Complete workflow definition: metadata plus the node/edge graph.
    """
    model_config = ConfigDict(populate_by_name=True)

    # Metadata
    id: Optional[str] = Field(None, description="Persisted definition id")
    name: str = Field("", description="Workflow name")
    description: str = Field("")
    status: DefinitionStatus = Field(DefinitionStatus.ENABLED)

    # Structure
    nodes: List[Node] = Field(default_factory=list)
    edges: List[Edge] = Field(default_factory=list)

    def get_node(self, node_id: str) -> Optional[Node]:
        """Get node by id."""
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def get_edge(self, edge_id: str) -> Optional[Edge]:
        for edge in self.edges:
            if edge.id == edge_id:
                return edge
        return None

    def find_edge(self, source: str, target: str) -> Optional[Edge]:
        """Get the edge for a (source, target) pair."""
        for edge in self.edges:
            if edge.source == source and edge.target == target:
                return edge
        return None

    def nodes_of_kind(self, kind: str) -> List[Node]:
        return [node for node in self.nodes if node.kind == kind]

    def task_names(self) -> List[str]:
        return [node.task_name for node in self.nodes]

    def semantic_dict(self) -> Dict[str, Any]:
        """Graph content compared by the save/load round trip."""
        return {
            "nodes": [node.semantic_dict() for node in self.nodes],
            "edges": [edge.model_dump() for edge in self.edges],
        }


class FindingSeverity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class FindingCode(str, Enum):
    """Classification of validation findings."""
    MISSING_START = "missing_start"
    MISSING_END = "missing_end"
    NO_CONNECTIONS = "no_connections"
    CYCLE = "cycle"
    DANGLING_EDGE = "dangling_edge"
    ISOLATED_NODES = "isolated_nodes"
    START_WITHOUT_OUTPUT = "start_without_output"
    END_WITHOUT_INPUT = "end_without_input"


class ValidationFinding(BaseModel):
    """A single validation finding."""
    model_config = ConfigDict(frozen=True)

    code: FindingCode
    severity: FindingSeverity
    message: str
    node_ids: List[str] = Field(default_factory=list)
    node_names: List[str] = Field(default_factory=list)


class ValidationResult(BaseModel):
    """
    Outcome of validating a definition.

    Non-empty errors block a save; warnings need explicit confirmation.
    """
    errors: List[ValidationFinding] = Field(default_factory=list)
    warnings: List[ValidationFinding] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)

    def can_save(self, warnings_confirmed: bool = False) -> bool:
        """Save gate: no errors, and warnings either absent or confirmed."""
        if self.errors:
            return False
        return warnings_confirmed or not self.warnings

    def error_messages(self) -> List[str]:
        return [finding.message for finding in self.errors]

    def warning_messages(self) -> List[str]:
        return [finding.message for finding in self.warnings]


__all__ = [
    "DefinitionStatus",
    "Edge",
    "FindingCode",
    "FindingSeverity",
    "Node",
    "Position",
    "ValidationFinding",
    "ValidationResult",
    "WorkflowDefinition",
]
