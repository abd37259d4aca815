"""
Node Registry Models - Metadata structures for workflow node kinds.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, AliasChoices, model_validator


# Control markers: they shape the graph but never run
CONTROL_KINDS = frozenset({"start", "end"})

START_KIND = "start"
END_KIND = "end"


class NodeTypeDefinition(BaseModel):
    """
    Metadata about a node kind.

    Matches the `/node-types` wire format, which uses camelCase keys and
    `type` for the kind tag.
    """
    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    # Identity
    kind: str = Field(..., alias="type", description="Node kind tag (e.g. 'waitReply')")

    # Display
    label: str = Field("", description="Human-readable default label")
    category: str = Field("Default", description="Palette category")
    description: str = Field("", description="Node kind description")
    icon: Optional[str] = Field(None, description="Icon reference (presentation only)")

    # Capabilities
    is_implemented: bool = Field(True, alias="isImplemented")
    has_execution: Optional[bool] = Field(None, alias="hasExecution")
    single_instance: Optional[bool] = Field(None, alias="singleInstance")

    default_config: Dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("defaultConfig", "defaultData", "default_config"),
        serialization_alias="defaultConfig",
    )

    @model_validator(mode="after")
    def _derive_capabilities(self) -> "NodeTypeDefinition":
        """Fill capability flags the remote catalog leaves out."""
        if self.has_execution is None:
            object.__setattr__(self, "has_execution", self.kind not in CONTROL_KINDS)
        # Exactly one start node per definition, whatever the catalog says
        if self.kind == START_KIND:
            object.__setattr__(self, "single_instance", True)
        elif self.single_instance is None:
            object.__setattr__(self, "single_instance", False)
        if not self.label:
            object.__setattr__(self, "label", self.default_config.get("taskName") or self.kind)
        return self

    @property
    def is_terminal(self) -> bool:
        """End markers terminate a run."""
        return self.kind == END_KIND

    @classmethod
    def placeholder(cls, kind: str) -> "NodeTypeDefinition":
        """Definition for a kind the registry does not know (forward-compatible load)."""
        return cls(
            kind=kind,
            label=kind,
            category="Unknown",
            is_implemented=False,
        )

    def to_wire(self) -> Dict[str, Any]:
        """Serialize using the camelCase wire keys."""
        return self.model_dump(by_alias=True, exclude={"icon"})


__all__ = [
    "CONTROL_KINDS",
    "END_KIND",
    "NodeTypeDefinition",
    "START_KIND",
]
