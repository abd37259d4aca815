"""
Node Type Registry - Read-only catalog of node kinds for an editing session.

Sources, in order of preference:
1. The remote `/node-types` catalog (load_registry)
2. The built-in catalog (from_builtin), used whenever the remote one fails

The registry is a snapshot: it is built once at session start and passed
explicitly to the editor, validator helpers and serializer.
"""

from __future__ import annotations

import copy
import logging
from collections import OrderedDict
from typing import TYPE_CHECKING, Any, Dict, Iterable, Iterator, List, Optional

from .catalog import BUILTIN_ICONS, builtin_definitions
from .models import NodeTypeDefinition
from .schemas import ConfigSchema, get_schema


if TYPE_CHECKING:
    from workflow_designer.client import DesignerApiClient


logger = logging.getLogger(__name__)


class NodeTypeRegistry:
    """
    Immutable catalog of node kinds.

    Usage:
        registry = NodeTypeRegistry.from_builtin()

        registry.default_config("waitReply")
        registry.resolve("somethingNew").is_implemented   # False
    """

    def __init__(self, definitions: Iterable[NodeTypeDefinition], is_builtin_fallback: bool = False):
        """
        Build a registry snapshot.

        Args:
            definitions: Node kind definitions; a later duplicate kind wins
            is_builtin_fallback: True when built from the offline catalog
        """
        nodes: Dict[str, NodeTypeDefinition] = OrderedDict()
        for definition in definitions:
            if definition.icon is None and definition.kind in BUILTIN_ICONS:
                definition = definition.model_copy(update={"icon": BUILTIN_ICONS[definition.kind]})
            nodes[definition.kind] = definition
        self._nodes = nodes
        self._is_builtin_fallback = is_builtin_fallback

    @classmethod
    def from_builtin(cls) -> "NodeTypeRegistry":
        """Registry over the built-in catalog."""
        return cls(builtin_definitions(), is_builtin_fallback=True)

    @classmethod
    def from_payload(cls, payload: Any) -> "NodeTypeRegistry":
        """
        Build from a `/node-types` response body.

        Accepts a bare list or the `{success, data, total}` envelope.

        Raises:
            ValueError: If the payload has no list of node types
            ValidationError: If an entry is malformed
        """
        entries = payload.get("data") if isinstance(payload, dict) else payload
        if not isinstance(entries, list):
            raise ValueError("node type payload does not contain a list")
        return cls(NodeTypeDefinition.model_validate(entry) for entry in entries)

    @property
    def is_builtin_fallback(self) -> bool:
        return self._is_builtin_fallback

    def get(self, kind: str) -> Optional[NodeTypeDefinition]:
        """Get definition by kind."""
        return self._nodes.get(kind)

    def resolve(self, kind: str) -> NodeTypeDefinition:
        """Get definition by kind; unknown kinds resolve to an unimplemented placeholder."""
        definition = self._nodes.get(kind)
        if definition is None:
            return NodeTypeDefinition.placeholder(kind)
        return definition

    def has_kind(self, kind: str) -> bool:
        return kind in self._nodes

    def list_node_types(self) -> List[NodeTypeDefinition]:
        """List all node kinds in catalog order."""
        return list(self._nodes.values())

    def list_kinds(self) -> List[str]:
        return list(self._nodes.keys())

    def default_label(self, kind: str) -> str:
        """Base task name for a newly created node of this kind."""
        definition = self.resolve(kind)
        return definition.default_config.get("taskName") or definition.label or kind

    def default_config(self, kind: str) -> Dict[str, Any]:
        """
        Canonical default config for a new node of this kind.

        Returns a fresh copy without taskName (task names live on the node).
        """
        definition = self._nodes.get(kind)
        if definition is None:
            return {}
        config = copy.deepcopy(definition.default_config)
        config.pop("taskName", None)
        return config

    def schema_for(self, kind: str) -> ConfigSchema:
        """Configuration schema for a kind (single lookup, no per-kind branching)."""
        return get_schema(kind)

    def by_category(self) -> Dict[str, List[NodeTypeDefinition]]:
        """Group node kinds by palette category."""
        groups: Dict[str, List[NodeTypeDefinition]] = OrderedDict()
        for definition in self._nodes.values():
            groups.setdefault(definition.category, []).append(definition)
        return groups

    def implemented_kinds(self) -> List[str]:
        return [kind for kind, d in self._nodes.items() if d.is_implemented]

    def executable_kinds(self) -> List[str]:
        """Kinds the runtime executes (everything except control markers)."""
        return [kind for kind, d in self._nodes.items() if d.has_execution]

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[NodeTypeDefinition]:
        return iter(self._nodes.values())

    def __contains__(self, kind: object) -> bool:
        return kind in self._nodes


def load_registry(client: Optional["DesignerApiClient"]) -> NodeTypeRegistry:
    """
    Load the node catalog from the API, falling back to the built-in one.

    Never raises: a missing client, transport failure or malformed payload
    all degrade to NodeTypeRegistry.from_builtin().
    """
    if client is None:
        logger.info("No API client configured, using built-in node types")
        return NodeTypeRegistry.from_builtin()

    try:
        payload = client.node_types.list()
        registry = NodeTypeRegistry.from_payload(payload)
    except Exception as e:
        logger.warning(f"Failed to load node types, using built-in catalog: {e}")
        return NodeTypeRegistry.from_builtin()

    if not len(registry):
        logger.warning("Remote node type catalog is empty, using built-in catalog")
        return NodeTypeRegistry.from_builtin()

    logger.info(f"Loaded {len(registry)} node types")
    return registry


__all__ = [
    "NodeTypeRegistry",
    "load_registry",
]
