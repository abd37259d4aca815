"""
Workflow Graph - Structural model of workflow definitions.

This package provides:
- WorkflowDefinition / Node / Edge: the in-memory graph
- WorkflowEditor: node and edge operations for one editing session
- validate_workflow: structural errors and warnings gating a save
- serialize / deserialize: transport JSON with decoration stripped

Execution of definitions is out of scope; this package only decides
whether a definition is well-formed enough to be saved.
"""

from .models import (
    DefinitionStatus,
    Edge,
    FindingCode,
    FindingSeverity,
    Node,
    Position,
    ValidationFinding,
    ValidationResult,
    WorkflowDefinition,
)
from .graph import GraphIndex
from .editor import ConnectResult, WorkflowEditor, generate_unique_task_name
from .validator import check_definition_config, validate_workflow
from .serialization import CorruptDefinitionError, DefinitionRecord, deserialize, serialize

__all__ = [
    # Models
    "DefinitionStatus",
    "Edge",
    "Node",
    "Position",
    "WorkflowDefinition",
    # Validation
    "FindingCode",
    "FindingSeverity",
    "ValidationFinding",
    "ValidationResult",
    "check_definition_config",
    "validate_workflow",
    # Graph
    "GraphIndex",
    # Editing
    "ConnectResult",
    "WorkflowEditor",
    "generate_unique_task_name",
    # Serialization
    "CorruptDefinitionError",
    "DefinitionRecord",
    "deserialize",
    "serialize",
]
