"""
Designer Session - One editor, one in-memory definition.

Handles the boundary around the graph core:
- start-up: reference data snapshot (node types, templates, users)
- open: load a persisted definition, degrading to a fresh one
- save: run the validator gate, then persist

Load failures never block the session; save refusals are returned as data.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError

from node_registry import ConfigIssue, NodeTypeRegistry, load_registry
from workflow_graph import (
    CorruptDefinitionError,
    DefinitionRecord,
    ValidationResult,
    WorkflowDefinition,
    WorkflowEditor,
    check_definition_config,
    validate_workflow,
)
from workflow_designer.client import ApiClientError, DesignerApiClient
from workflow_designer.config import Settings, get_settings
from workflow_designer.observability import get_logger, with_session_context


logger = get_logger(__name__)


@dataclass(frozen=True)
class ReferenceData:
    """
    Read-only snapshot loaded once at session start.
    """
    registry: NodeTypeRegistry
    templates: Tuple[Dict[str, Any], ...] = ()
    users: Tuple[Dict[str, Any], ...] = ()

    @classmethod
    def offline(cls) -> "ReferenceData":
        return cls(registry=NodeTypeRegistry.from_builtin())

    @classmethod
    def load(cls, client: Optional[DesignerApiClient]) -> "ReferenceData":
        """Fetch reference data; each failing source degrades on its own."""
        registry = load_registry(client)
        if client is None:
            return cls(registry=registry)

        try:
            templates = tuple(client.reference.templates())
        except ApiClientError as e:
            logger.warning(f"Failed to load templates: {e}")
            templates = ()

        try:
            users = tuple(client.reference.users())
        except ApiClientError as e:
            logger.warning(f"Failed to load users: {e}")
            users = ()

        return cls(registry=registry, templates=templates, users=users)


@dataclass
class SaveOutcome:
    """
    Result of a save attempt.
    """
    saved: bool
    validation: ValidationResult
    reason: Optional[str] = None
    record: Optional[DefinitionRecord] = None

    @property
    def needs_confirmation(self) -> bool:
        """Only unconfirmed warnings stand in the way."""
        return not self.saved and self.validation.is_valid and self.validation.has_warnings


@dataclass
class DesignerSession:
    """
    Editing session owning exactly one WorkflowEditor.

    Usage:
        session = DesignerSession.start()
        session.open("42")
        session.editor.add_node("end")
        outcome = session.save(confirm_warnings=True)
    """
    reference: ReferenceData
    client: Optional[DesignerApiClient] = None
    settings: Settings = field(default_factory=get_settings)
    session_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    editor: WorkflowEditor = field(init=False)

    def __post_init__(self) -> None:
        self.editor = self._fresh_editor()

    @classmethod
    def start(
        cls,
        client: Optional[DesignerApiClient] = None,
        settings: Optional[Settings] = None,
    ) -> "DesignerSession":
        """Load reference data and begin with a new definition."""
        settings = settings or get_settings()
        return cls(reference=ReferenceData.load(client), client=client, settings=settings)

    @property
    def definition(self) -> WorkflowDefinition:
        return self.editor.definition

    @property
    def registry(self) -> NodeTypeRegistry:
        return self.reference.registry

    def _fresh_editor(self, definition_id: Optional[str] = None) -> WorkflowEditor:
        editor = WorkflowEditor.new(self.registry, webhook_base_url=self.settings.webhook_base_url)
        editor.definition.id = definition_id
        return editor

    def _log_extra(self) -> Dict[str, Any]:
        return with_session_context(session_id=self.session_id, definition_id=self.definition.id)

    def new(self, name: str = "", description: str = "") -> WorkflowEditor:
        """Discard the current definition and start an empty one."""
        self.editor = WorkflowEditor.new(
            self.registry,
            name=name,
            description=description,
            webhook_base_url=self.settings.webhook_base_url,
        )
        return self.editor

    def load_record(self, record: DefinitionRecord) -> WorkflowEditor:
        """
        Open a persisted record.

        A corrupt embedded JSON document yields a fresh definition that keeps
        the record's id so a later save overwrites it.
        """
        try:
            definition = record.to_definition(self.registry)
        except CorruptDefinitionError as e:
            logger.warning(f"Corrupt definition {record.id}, starting fresh: {e}", extra=self._log_extra())
            self.editor = self._fresh_editor(record.id)
            self.editor.definition.name = record.name or ""
            self.editor.definition.description = record.description or ""
            return self.editor

        self.editor = WorkflowEditor(
            definition, self.registry, webhook_base_url=self.settings.webhook_base_url
        )
        return self.editor

    def open(self, definition_id: str) -> WorkflowEditor:
        """Load a definition by id; any failure degrades to a fresh definition."""
        if self.client is None:
            logger.warning("No API client configured, opening a fresh definition")
            self.editor = self._fresh_editor()
            return self.editor

        try:
            payload = self.client.definitions.get(definition_id)
            if isinstance(payload, dict) and isinstance(payload.get("data"), dict):
                payload = payload["data"]
            record = DefinitionRecord.model_validate(payload)
        except (ApiClientError, ValidationError) as e:
            logger.warning(f"Failed to load definition {definition_id}: {e}")
            self.editor = self._fresh_editor()
            return self.editor

        if record.id is None:
            record = record.model_copy(update={"id": definition_id})
        return self.load_record(record)

    def validate(self) -> ValidationResult:
        return validate_workflow(self.definition)

    def config_issues(self) -> List[ConfigIssue]:
        """Lazy configuration issues; informational only."""
        return check_definition_config(self.definition, self.registry)

    def save(
        self,
        confirm_warnings: bool = False,
        updated_by: Optional[str] = None,
    ) -> SaveOutcome:
        """
        Validate and persist the current definition.

        Refused when the validator reports errors, when warnings exist and
        were not confirmed, or when the definition has no name.

        Raises:
            ApiClientError: If the save request itself fails
        """
        validation = self.validate()

        if not validation.is_valid:
            return SaveOutcome(saved=False, validation=validation, reason="validation_failed")
        if not validation.can_save(confirm_warnings):
            return SaveOutcome(saved=False, validation=validation, reason="warnings_not_confirmed")
        if not self.definition.name.strip():
            return SaveOutcome(saved=False, validation=validation, reason="name_required")

        record = DefinitionRecord.from_definition(
            self.definition,
            created_by=updated_by,
            updated_by=updated_by,
        )
        if self.client is None:
            return SaveOutcome(saved=False, validation=validation, reason="offline", record=record)

        stored = self.client.definitions.save(record.to_payload(), definition_id=self.definition.id)
        if isinstance(stored, dict) and stored.get("id") is not None:
            self.definition.id = str(stored["id"])
            record = record.model_copy(update={"id": self.definition.id})

        logger.info("Saved workflow definition", extra=self._log_extra())
        return SaveOutcome(saved=True, validation=validation, record=record)


__all__ = [
    "DesignerSession",
    "ReferenceData",
    "SaveOutcome",
]
