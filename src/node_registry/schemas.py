"""
Node Configuration Schemas - per-kind field contracts.

Each node kind owns one ConfigSchema record:
- required / optional fields
- an optional branch field whose value selects extra required fields
  (start: activationType, waitReply: replyType)
- an optional pydantic model for typed checks

Editing never raises on schema violations. Checks return ConfigIssue data
and are only run on demand.
"""

from __future__ import annotations

import copy
import secrets
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator


SCHEDULED_INTERVAL_MIN = 60
SCHEDULED_INTERVAL_MAX = 3600
MAX_RETRIES_MIN = 1
MAX_RETRIES_MAX = 10

WEBHOOK_PATH = "/api/workflow/webhook"


class ActivationType(str, Enum):
    """How a run of the workflow is triggered."""
    MANUAL = "manual"
    WEBHOOK = "webhook"
    SCHEDULED = "scheduled"


class ReplyType(str, Enum):
    """Who is expected to answer a waitReply step."""
    INITIATOR = "initiator"
    SPECIFIED = "specified"


class ValidatorType(str, Enum):
    """Reply validator backends."""
    DEFAULT = "default"
    CUSTOM = "custom"
    OPENAI = "openai"
    XAI = "xai"


def parse_phone_list(value: Any) -> List[str]:
    """Split a comma-separated phone list, dropping blanks."""
    if not isinstance(value, str):
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


class StartConfig(BaseModel):
    """Typed view of a start node's config."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    activation_type: ActivationType = Field(ActivationType.MANUAL, alias="activationType")
    webhook_token: str = Field("", alias="webhookToken")
    webhook_url: str = Field("", alias="webhookUrl")
    scheduled_table: str = Field("", alias="scheduledTable")
    scheduled_query: str = Field("", alias="scheduledQuery")
    scheduled_interval: Any = Field(300, alias="scheduledInterval")

    @model_validator(mode="after")
    def _check_active_mode(self) -> "StartConfig":
        # Stale values of inactive modes are kept but never judged
        if self.activation_type == ActivationType.SCHEDULED:
            if isinstance(self.scheduled_interval, bool) or not isinstance(self.scheduled_interval, int):
                raise ValueError("scheduledInterval must be an integer number of seconds")
            if not SCHEDULED_INTERVAL_MIN <= self.scheduled_interval <= SCHEDULED_INTERVAL_MAX:
                raise ValueError(
                    f"scheduledInterval must be between {SCHEDULED_INTERVAL_MIN} "
                    f"and {SCHEDULED_INTERVAL_MAX} seconds"
                )
        return self


class ReplyValidationConfig(BaseModel):
    """Nested reply validation settings of a waitReply node."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    enabled: bool = True
    validator_type: ValidatorType = Field(ValidatorType.DEFAULT, alias="validatorType")
    prompt: str = ""
    retry_message: str = Field("", alias="retryMessage")
    max_retries: int = Field(3, alias="maxRetries", ge=MAX_RETRIES_MIN, le=MAX_RETRIES_MAX)


class WaitReplyConfig(BaseModel):
    """Typed view of a waitReply node's config."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    reply_type: ReplyType = Field(ReplyType.INITIATOR, alias="replyType")
    specified_users: str = Field("", alias="specifiedUsers")
    message: str = ""
    validation: ReplyValidationConfig = Field(default_factory=ReplyValidationConfig)

    @model_validator(mode="after")
    def _check_recipients(self) -> "WaitReplyConfig":
        if self.reply_type == ReplyType.SPECIFIED and self.specified_users.strip():
            if not parse_phone_list(self.specified_users):
                raise ValueError("specifiedUsers must list at least one phone number")
        return self


class ConfigIssue(BaseModel):
    """A configuration problem found by a lazy check."""
    model_config = ConfigDict(frozen=True)

    kind: str
    field: str
    message: str
    node_id: Optional[str] = None
    task_name: Optional[str] = None


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


@dataclass(frozen=True)
class ConfigSchema:
    """Field contract of one node kind."""
    kind: str
    required: Tuple[str, ...] = ()
    optional: Tuple[str, ...] = ()
    branch_field: Optional[str] = None
    branches: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)
    model: Optional[Type[BaseModel]] = None

    def current_branch(self, config: Mapping[str, Any]) -> Optional[str]:
        """Value of the branch field, if this kind branches."""
        if self.branch_field is None:
            return None
        value = config.get(self.branch_field)
        return value.value if isinstance(value, Enum) else value

    def active_fields(self, config: Mapping[str, Any]) -> Tuple[str, ...]:
        """Fields considered for the currently selected branch."""
        fields = list(self.required) + list(self.optional)
        branch = self.current_branch(config)
        if branch is not None:
            fields.extend(self.branches.get(branch, ()))
        return tuple(dict.fromkeys(fields))

    def check(self, config: Mapping[str, Any]) -> List[ConfigIssue]:
        """Collect issues for the active branch; never raises."""
        issues: List[ConfigIssue] = []

        for name in self.required:
            if _is_blank(config.get(name)):
                issues.append(ConfigIssue(kind=self.kind, field=name, message=f"{name} is required"))

        branch = self.current_branch(config)
        if self.branch_field is not None and branch is not None:
            if not isinstance(branch, str) or branch not in self.branches:
                issues.append(ConfigIssue(
                    kind=self.kind,
                    field=self.branch_field,
                    message=f"{self.branch_field} must be one of: {', '.join(self.branches)}",
                ))
                return issues
            for name in self.branches[branch]:
                if _is_blank(config.get(name)):
                    issues.append(ConfigIssue(
                        kind=self.kind,
                        field=name,
                        message=f"{name} is required when {self.branch_field} is '{branch}'",
                    ))

        if self.model is not None:
            try:
                self.model.model_validate(dict(config))
            except ValidationError as e:
                for error in e.errors():
                    loc = ".".join(str(part) for part in error["loc"]) or self.kind
                    issues.append(ConfigIssue(kind=self.kind, field=loc, message=error["msg"]))

        return issues


CONFIG_SCHEMAS: Dict[str, ConfigSchema] = {
    schema.kind: schema
    for schema in (
        ConfigSchema(
            kind="start",
            required=("activationType",),
            branch_field="activationType",
            branches={
                ActivationType.MANUAL.value: (),
                ActivationType.WEBHOOK.value: ("webhookToken", "webhookUrl"),
                ActivationType.SCHEDULED.value: ("scheduledTable", "scheduledQuery", "scheduledInterval"),
            },
            model=StartConfig,
        ),
        ConfigSchema(kind="end"),
        ConfigSchema(kind="sendMessage", required=("message", "to")),
        ConfigSchema(kind="sendTemplate", required=("templateId",), optional=("templateName", "variables")),
        ConfigSchema(
            kind="waitReply",
            required=("replyType",),
            optional=("message", "validation"),
            branch_field="replyType",
            branches={
                ReplyType.INITIATOR.value: (),
                ReplyType.SPECIFIED.value: ("specifiedUsers",),
            },
            model=WaitReplyConfig,
        ),
        ConfigSchema(kind="dbQuery", required=("sql",)),
        ConfigSchema(kind="callExternalApi", required=("url",)),
        ConfigSchema(kind="sendForm", required=("formId", "to"), optional=("formName", "formDescription")),
        ConfigSchema(kind="formResult", optional=("result",)),
    )
}


def get_schema(kind: str) -> ConfigSchema:
    """Schema for a kind; unknown kinds get a permissive empty schema."""
    return CONFIG_SCHEMAS.get(kind) or ConfigSchema(kind=kind)


def generate_webhook_token() -> str:
    """Opaque random token for webhook activation."""
    return secrets.token_urlsafe(16)


def build_webhook_url(base_url: str, token: str) -> str:
    return f"{(base_url or '').rstrip('/')}{WEBHOOK_PATH}/{token}"


def _clamp_int(value: Any, low: int, high: int) -> Any:
    # Non-numeric input is left for check() to report
    if isinstance(value, bool):
        return value
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError):
        return value
    return max(low, min(high, number))


def normalize_config(kind: str, config: Mapping[str, Any], webhook_base_url: str = "") -> Dict[str, Any]:
    """
    Apply the editing-time domain rules to a config payload.

    - scheduledInterval clamped to [60, 3600]
    - validation.maxRetries clamped to [1, 10]
    - webhook mode gets a token once, and a URL derived from it

    Returns a new dict; never raises.
    """
    result = copy.deepcopy(dict(config))

    if kind == "start":
        if "scheduledInterval" in result:
            result["scheduledInterval"] = _clamp_int(
                result["scheduledInterval"], SCHEDULED_INTERVAL_MIN, SCHEDULED_INTERVAL_MAX
            )
        if result.get("activationType") == ActivationType.WEBHOOK.value:
            if not result.get("webhookToken"):
                result["webhookToken"] = generate_webhook_token()
            result["webhookUrl"] = build_webhook_url(webhook_base_url, result["webhookToken"])

    elif kind == "waitReply":
        validation = result.get("validation")
        if isinstance(validation, dict) and "maxRetries" in validation:
            validation["maxRetries"] = _clamp_int(
                validation["maxRetries"], MAX_RETRIES_MIN, MAX_RETRIES_MAX
            )

    return result


def check_node_config(kind: str, config: Mapping[str, Any]) -> List[ConfigIssue]:
    """Lazy configuration check for a single node payload."""
    return get_schema(kind).check(config)


__all__ = [
    "ActivationType",
    "CONFIG_SCHEMAS",
    "ConfigIssue",
    "ConfigSchema",
    "MAX_RETRIES_MAX",
    "MAX_RETRIES_MIN",
    "ReplyType",
    "ReplyValidationConfig",
    "SCHEDULED_INTERVAL_MAX",
    "SCHEDULED_INTERVAL_MIN",
    "StartConfig",
    "ValidatorType",
    "WaitReplyConfig",
    "build_webhook_url",
    "check_node_config",
    "generate_webhook_token",
    "get_schema",
    "normalize_config",
    "parse_phone_list",
]
