"""
Workflow Serialization - Transport JSON for definitions.

Persisted shape:

    {"nodes": [{"id": ..., "type": "input"|"output"|"default",
                "position": {"x": ..., "y": ...},
                "data": {"type": kind, "taskName": ..., **config}}],
     "edges": [{"id": ..., "source": ..., "target": ...}]}

Decoration (icons, labels, canvas sizes, callbacks) is stripped on save and
re-attached from the node registry on load.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from node_registry import END_KIND, START_KIND, NodeTypeRegistry

from .models import DefinitionStatus, Edge, Node, Position, WorkflowDefinition


logger = logging.getLogger(__name__)

# Keys of node.data that only the canvas uses
DECORATION_KEYS = frozenset({
    "icon",
    "label",
    "width",
    "height",
    "onDelete",
    "isImplemented",
    "handleLayers",
})

# Keys of node.data that map onto Node fields rather than config
RESERVED_DATA_KEYS = frozenset({"type", "taskName"})


class CorruptDefinitionError(Exception):
    """Persisted definition JSON cannot be parsed into a graph."""
    pass


def canvas_type(kind: str) -> str:
    """Canvas node shape for a kind."""
    if kind == START_KIND:
        return "input"
    if kind == END_KIND:
        return "output"
    return "default"


def node_to_wire(node: Node) -> Dict[str, Any]:
    data = {
        key: value for key, value in node.config.items()
        if key not in DECORATION_KEYS and key not in RESERVED_DATA_KEYS
    }
    return {
        "id": node.id,
        "type": canvas_type(node.kind),
        "position": {"x": node.position.x, "y": node.position.y},
        "data": {"type": node.kind, "taskName": node.task_name, **data},
    }


def edge_to_wire(edge: Edge) -> Dict[str, Any]:
    wire = {"id": edge.id, "source": edge.source, "target": edge.target}
    if edge.label is not None:
        wire["label"] = edge.label
    return wire


def serialize(definition: WorkflowDefinition) -> str:
    """Emit the transport JSON for a definition's graph."""
    document = {
        "nodes": [node_to_wire(node) for node in definition.nodes],
        "edges": [edge_to_wire(edge) for edge in definition.edges],
    }
    return json.dumps(document, ensure_ascii=False)


def _node_from_wire(raw: Any, registry: NodeTypeRegistry) -> Node:
    if not isinstance(raw, dict):
        raise CorruptDefinitionError(f"Node entry is not an object: {raw!r}")

    data = raw.get("data") or {}
    if not isinstance(data, dict):
        raise CorruptDefinitionError(f"Node {raw.get('id')!r} has a non-object data payload")

    kind = data.get("type")
    if not isinstance(kind, str) or not kind or "id" not in raw:
        raise CorruptDefinitionError(f"Node entry is missing id or data.type: {raw!r}")

    node_type = registry.resolve(kind)
    if not registry.has_kind(kind):
        logger.warning(f"Loaded node {raw['id']!r} of unknown kind '{kind}'")

    config = {
        key: value for key, value in data.items()
        if key not in DECORATION_KEYS and key not in RESERVED_DATA_KEYS
    }
    position = raw.get("position") or {}

    return Node(
        id=str(raw["id"]),
        kind=kind,
        position=Position.model_validate(position),
        task_name=node_type.label if data.get("taskName") is None else str(data["taskName"]),
        config=config,
        label=node_type.label,
        icon=node_type.icon,
        is_implemented=node_type.is_implemented,
    )


def _edge_from_wire(raw: Any) -> Edge:
    if not isinstance(raw, dict):
        raise CorruptDefinitionError(f"Edge entry is not an object: {raw!r}")
    try:
        return Edge(
            id=str(raw["id"]),
            source=str(raw["source"]),
            target=str(raw["target"]),
            label=raw.get("label"),
        )
    except KeyError as e:
        raise CorruptDefinitionError(f"Edge entry is missing {e}") from e


def deserialize(
    document: str,
    registry: NodeTypeRegistry,
    base: Optional[WorkflowDefinition] = None,
) -> WorkflowDefinition:
    """
    Parse transport JSON into a definition.

    Args:
        document: JSON string produced by serialize()
        registry: Catalog used to re-attach decoration
        base: Optional definition whose metadata (id, name, ...) is kept

    Raises:
        CorruptDefinitionError: If the JSON or its shape cannot be parsed
    """
    try:
        parsed = json.loads(document)
    except (TypeError, ValueError) as e:
        raise CorruptDefinitionError(f"Invalid definition JSON: {e}") from e

    if not isinstance(parsed, dict):
        raise CorruptDefinitionError("Definition JSON must be an object")

    raw_nodes = parsed.get("nodes") or []
    raw_edges = parsed.get("edges") or []
    if not isinstance(raw_nodes, list) or not isinstance(raw_edges, list):
        raise CorruptDefinitionError("Definition nodes and edges must be lists")

    try:
        nodes = [_node_from_wire(raw, registry) for raw in raw_nodes]
        edges = [_edge_from_wire(raw) for raw in raw_edges]
    except ValidationError as e:
        raise CorruptDefinitionError(f"Invalid definition content: {e}") from e

    metadata = base.model_dump(exclude={"nodes", "edges"}) if base else {}
    return WorkflowDefinition(**metadata, nodes=nodes, edges=edges)


class DefinitionRecord(BaseModel):
    """
    Persisted definition envelope exchanged with the definitions API.
    """
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: Optional[str] = None
    name: Optional[str] = ""
    description: Optional[str] = ""
    json_document: Optional[str] = Field(None, alias="json")
    status: Optional[str] = DefinitionStatus.ENABLED.value
    created_by: Optional[str] = Field(None, alias="createdBy")
    updated_by: Optional[str] = Field(None, alias="updatedBy")

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, v: Any) -> Optional[str]:
        """The definitions API uses integer ids."""
        return None if v is None else str(v)

    @classmethod
    def from_definition(
        cls,
        definition: WorkflowDefinition,
        created_by: Optional[str] = None,
        updated_by: Optional[str] = None,
    ) -> "DefinitionRecord":
        return cls(
            id=definition.id,
            name=definition.name,
            description=definition.description,
            json_document=serialize(definition),
            status=definition.status.value,
            created_by=created_by,
            updated_by=updated_by,
        )

    def to_definition(self, registry: NodeTypeRegistry) -> WorkflowDefinition:
        """
        Rebuild the in-memory definition.

        Raises:
            CorruptDefinitionError: If the embedded JSON cannot be parsed
        """
        try:
            status = DefinitionStatus(self.status or DefinitionStatus.ENABLED.value)
        except ValueError:
            logger.warning(f"Unknown definition status {self.status!r}, treating as Enabled")
            status = DefinitionStatus.ENABLED

        base = WorkflowDefinition(
            id=self.id,
            name=self.name or "",
            description=self.description or "",
            status=status,
        )
        if not self.json_document:
            return base
        return deserialize(self.json_document, registry, base=base)

    def to_payload(self) -> Dict[str, Any]:
        """Save request body."""
        payload = self.model_dump(by_alias=True, exclude_none=True, exclude={"id"})
        payload.setdefault("description", "")
        return payload


__all__ = [
    "CorruptDefinitionError",
    "DECORATION_KEYS",
    "DefinitionRecord",
    "canvas_type",
    "deserialize",
    "serialize",
]
