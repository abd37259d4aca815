"""
Workflow Designer CLI - Main entry point.

Provides commands for:
- Listing node types
- Creating an empty definition file
- Validating definition files before they are saved
- Reporting node configuration issues
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError

from node_registry import NodeTypeRegistry, load_registry
from workflow_graph import (
    CorruptDefinitionError,
    DefinitionRecord,
    WorkflowDefinition,
    WorkflowEditor,
    check_definition_config,
    deserialize,
    validate_workflow,
)
from workflow_designer.client import create_client_from_settings
from workflow_designer.config import get_settings
from workflow_designer.observability import setup_logging


logger = logging.getLogger("workflow_designer")


def _registry(offline: bool) -> NodeTypeRegistry:
    if offline:
        return NodeTypeRegistry.from_builtin()
    return load_registry(create_client_from_settings(get_settings()))


def _read_definition(path: Path, registry: NodeTypeRegistry) -> WorkflowDefinition:
    """
    Read a definition file.

    Accepts either a saved record ({name, description, json, status}) or a
    bare graph document ({nodes, edges}).
    """
    text = path.read_text(encoding="utf-8")
    try:
        parsed = json.loads(text)
    except ValueError as e:
        raise CorruptDefinitionError(f"Invalid JSON in {path}: {e}") from e

    if isinstance(parsed, dict) and "nodes" in parsed:
        return deserialize(text, registry)
    if not isinstance(parsed, dict):
        raise CorruptDefinitionError(f"{path} does not contain a definition object")
    try:
        record = DefinitionRecord.model_validate(parsed)
    except ValidationError as e:
        raise CorruptDefinitionError(f"Invalid definition record in {path}: {e}") from e
    return record.to_definition(registry)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option("-q", "--quiet", is_flag=True, help="Suppress output")
@click.option("--offline", is_flag=True, help="Use the built-in node catalog")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, quiet: bool, offline: bool):
    """Workflow Designer - build and check workflow definitions."""
    ctx.ensure_object(dict)
    setup_logging()

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    elif quiet:
        logging.getLogger().setLevel(logging.ERROR)

    ctx.obj["offline"] = offline


@cli.command("node-types")
@click.pass_context
def node_types(ctx: click.Context):
    """List node kinds grouped by category."""
    registry = _registry(ctx.obj["offline"])
    if registry.is_builtin_fallback:
        click.echo("(built-in catalog)")

    for category, definitions in registry.by_category().items():
        click.echo(f"{category}:")
        for definition in definitions:
            flags = []
            if not definition.is_implemented:
                flags.append("not implemented")
            if definition.single_instance:
                flags.append("single")
            if not definition.has_execution:
                flags.append("control")
            suffix = f" [{', '.join(flags)}]" if flags else ""
            click.echo(f"  {definition.kind:<18} {definition.label}{suffix}")


@cli.command("new")
@click.argument("name")
@click.option("--description", "-d", default="", help="Workflow description")
@click.option(
    "--output", "-o",
    type=click.Path(dir_okay=False),
    help="Write to file instead of stdout",
)
@click.pass_context
def new_definition(ctx: click.Context, name: str, description: str, output: Optional[str]):
    """
    Create an empty definition holding a single start node.

    Examples:

        workflow-designer new "Leave approval" -o leave.json
    """
    registry = _registry(ctx.obj["offline"])
    editor = WorkflowEditor.new(
        registry,
        name=name,
        description=description,
        webhook_base_url=get_settings().webhook_base_url,
    )
    record = DefinitionRecord.from_definition(editor.definition)
    text = json.dumps(record.to_payload(), indent=2, ensure_ascii=False)

    if output:
        Path(output).write_text(text + "\n", encoding="utf-8")
        click.echo(f"Created {output}")
    else:
        click.echo(text)


@cli.command("validate")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--strict", is_flag=True, help="Fail on warnings too")
@click.option("--json-output", is_flag=True, help="Print findings as JSON")
@click.pass_context
def validate(ctx: click.Context, path: str, strict: bool, json_output: bool):
    """
    Validate a definition file.

    Exit codes: 0 ok, 1 blocking errors (or warnings with --strict),
    2 unreadable definition.
    """
    registry = _registry(ctx.obj["offline"])
    try:
        definition = _read_definition(Path(path), registry)
    except CorruptDefinitionError as e:
        click.echo(f"Error: corrupt definition: {e}", err=True)
        sys.exit(2)

    result = validate_workflow(definition)

    if json_output:
        click.echo(result.model_dump_json(indent=2))
    else:
        for finding in result.errors:
            click.echo(f"ERROR   {finding.message}")
        for finding in result.warnings:
            click.echo(f"WARNING {finding.message}")
        if result.is_valid and not result.has_warnings:
            click.echo("OK")

    if not result.is_valid or (strict and result.has_warnings):
        sys.exit(1)


@cli.command("config-check")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def config_check(ctx: click.Context, path: str):
    """Report node configuration issues (informational, never blocks a save)."""
    registry = _registry(ctx.obj["offline"])
    try:
        definition = _read_definition(Path(path), registry)
    except CorruptDefinitionError as e:
        click.echo(f"Error: corrupt definition: {e}", err=True)
        sys.exit(2)

    issues = check_definition_config(definition, registry)
    for issue in issues:
        click.echo(f"{issue.task_name}: {issue.field}: {issue.message}")
    if not issues:
        click.echo("No configuration issues")


def main():
    """Main entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
