"""
Node Registry - Catalog of workflow node kinds.

This package provides:
- NodeTypeDefinition: Metadata about a node kind
- NodeTypeRegistry: Immutable per-session catalog with built-in fallback
- ConfigSchema: Per-kind configuration contract (start activation modes,
  waitReply reply branches)
"""

from .models import NodeTypeDefinition, START_KIND, END_KIND
from .registry import NodeTypeRegistry, load_registry
from .schemas import ConfigIssue, ConfigSchema, check_node_config, normalize_config

__all__ = [
    "NodeTypeDefinition",
    "NodeTypeRegistry",
    "load_registry",
    "START_KIND",
    "END_KIND",
    "ConfigIssue",
    "ConfigSchema",
    "check_node_config",
    "normalize_config",
]
