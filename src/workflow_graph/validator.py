"""
Workflow Validator - Structural checks run before a definition is saved.

Checks, in order (all findings are collected):
1. start / end presence                      (errors)
2. at least one edge, otherwise stop here     (error)
3. directed cycle, first one only             (error)
4. isolated intermediate nodes, one message   (warning)
5. start node without outgoing edge           (warning per node)
6. end node without incoming edge             (warning per node)
7. edges pointing at unknown nodes            (error per edge)

Pure: the definition is never mutated.
"""

from __future__ import annotations

import logging
from typing import List

from node_registry import ConfigIssue, NodeTypeRegistry
from node_registry.models import END_KIND, START_KIND

from .graph import GraphIndex
from .models import (
    FindingCode,
    FindingSeverity,
    ValidationFinding,
    ValidationResult,
    WorkflowDefinition,
)


logger = logging.getLogger(__name__)


def _error(code: FindingCode, message: str, node_ids=(), node_names=()) -> ValidationFinding:
    return ValidationFinding(
        code=code,
        severity=FindingSeverity.ERROR,
        message=message,
        node_ids=list(node_ids),
        node_names=list(node_names),
    )


def _warning(code: FindingCode, message: str, node_ids=(), node_names=()) -> ValidationFinding:
    return ValidationFinding(
        code=code,
        severity=FindingSeverity.WARNING,
        message=message,
        node_ids=list(node_ids),
        node_names=list(node_names),
    )


def validate_workflow(definition: WorkflowDefinition) -> ValidationResult:
    """
    Classify a definition's structural soundness.

    Args:
        definition: Definition snapshot to check

    Returns:
        ValidationResult with blocking errors and advisory warnings
    """
    errors: List[ValidationFinding] = []
    warnings: List[ValidationFinding] = []

    start_nodes = definition.nodes_of_kind(START_KIND)
    end_nodes = definition.nodes_of_kind(END_KIND)

    if not start_nodes:
        errors.append(_error(FindingCode.MISSING_START, "Workflow is missing a Start node"))
    if not end_nodes:
        errors.append(_error(FindingCode.MISSING_END, "Workflow is missing an End node"))

    if not definition.edges:
        errors.append(_error(FindingCode.NO_CONNECTIONS, "Workflow has no connections between nodes"))
        return ValidationResult(errors=errors, warnings=warnings)

    index = GraphIndex(definition)

    cycle_node_id = index.find_cycle()
    if cycle_node_id is not None:
        node = index.get_node(cycle_node_id)
        name = node.display_name if node else cycle_node_id
        errors.append(_error(
            FindingCode.CYCLE,
            f"Circular connection detected at node '{name}'",
            node_ids=[cycle_node_id],
            node_names=[name],
        ))

    isolated = [
        node for node in definition.nodes
        if node.kind not in (START_KIND, END_KIND) and index.is_isolated(node.id)
    ]
    if isolated:
        names = [node.display_name for node in isolated]
        warnings.append(_warning(
            FindingCode.ISOLATED_NODES,
            f"Isolated nodes with no connections: {', '.join(names)}",
            node_ids=[node.id for node in isolated],
            node_names=names,
        ))

    for node in start_nodes:
        if not index.out_degree(node.id):
            warnings.append(_warning(
                FindingCode.START_WITHOUT_OUTPUT,
                f"Start node '{node.display_name}' has no outgoing connection",
                node_ids=[node.id],
                node_names=[node.display_name],
            ))

    for node in end_nodes:
        if not index.in_degree(node.id):
            warnings.append(_warning(
                FindingCode.END_WITHOUT_INPUT,
                f"End node '{node.display_name}' has no incoming connection",
                node_ids=[node.id],
                node_names=[node.display_name],
            ))

    for edge in index.dangling_edges:
        missing = [end for end in (edge.source, edge.target) if index.get_node(end) is None]
        errors.append(_error(
            FindingCode.DANGLING_EDGE,
            f"Connection '{edge.id}' references missing node(s): {', '.join(missing)}",
            node_ids=missing,
        ))

    logger.debug(
        f"Validated definition {definition.id or '<new>'}: "
        f"{len(errors)} error(s), {len(warnings)} warning(s)"
    )
    return ValidationResult(errors=errors, warnings=warnings)


def check_definition_config(
    definition: WorkflowDefinition,
    registry: NodeTypeRegistry,
) -> List[ConfigIssue]:
    """
    Lazy per-node configuration check.

    Kept apart from validate_workflow(): configuration problems never block
    a save, they are reported for display only.
    """
    issues: List[ConfigIssue] = []
    for node in definition.nodes:
        for issue in registry.schema_for(node.kind).check(node.config):
            issues.append(issue.model_copy(update={"node_id": node.id, "task_name": node.display_name}))
    return issues


__all__ = [
    "check_definition_config",
    "validate_workflow",
]
