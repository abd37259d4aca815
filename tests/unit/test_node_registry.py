"""Tests for the node type registry and catalog."""
from unittest.mock import Mock

import pytest
from pydantic import ValidationError

from node_registry import NodeTypeDefinition, NodeTypeRegistry, load_registry
from node_registry.catalog import BUILTIN_NODE_TYPES
from workflow_designer.client import ApiClientError
from workflow_graph import WorkflowEditor


class TestNodeTypeDefinition:
    """Test NodeTypeDefinition parsing."""

    def test_wire_aliases(self):
        definition = NodeTypeDefinition.model_validate({
            "type": "sendMessage",
            "label": "Send Message",
            "isImplemented": False,
            "defaultData": {"taskName": "Send Message", "message": ""},
        })

        assert definition.kind == "sendMessage"
        assert definition.is_implemented is False
        assert definition.default_config == {"taskName": "Send Message", "message": ""}

    def test_derived_capabilities(self):
        start = NodeTypeDefinition(kind="start")
        end = NodeTypeDefinition(kind="end")
        ask = NodeTypeDefinition(kind="waitReply", default_config={"taskName": "Ask"})

        assert start.single_instance is True
        assert start.has_execution is False
        assert end.is_terminal is True
        assert end.single_instance is False
        assert ask.has_execution is True
        assert ask.label == "Ask"

    def test_explicit_capabilities_win(self):
        definition = NodeTypeDefinition.model_validate({
            "type": "end",
            "hasExecution": True,
            "singleInstance": True,
        })

        assert definition.has_execution is True
        assert definition.single_instance is True

    def test_missing_kind_rejected(self):
        with pytest.raises(ValidationError):
            NodeTypeDefinition.model_validate({"label": "No kind"})

    def test_placeholder(self):
        placeholder = NodeTypeDefinition.placeholder("brandNewKind")

        assert placeholder.kind == "brandNewKind"
        assert placeholder.is_implemented is False
        assert placeholder.category == "Unknown"

    def test_to_wire_uses_camel_case(self):
        wire = NodeTypeDefinition(kind="end", label="End").to_wire()

        assert wire["type"] == "end"
        assert "isImplemented" in wire
        assert "defaultConfig" in wire
        assert "icon" not in wire


class TestBuiltinRegistry:
    """Test the built-in catalog."""

    def test_builtin_catalog_order(self, registry):
        assert registry.is_builtin_fallback is True
        assert registry.list_kinds() == [entry["type"] for entry in BUILTIN_NODE_TYPES]
        assert len(registry) == len(BUILTIN_NODE_TYPES)

    def test_builtin_kinds_are_implemented(self, registry):
        assert registry.implemented_kinds() == registry.list_kinds()

    def test_control_kinds_not_executable(self, registry):
        executable = registry.executable_kinds()

        assert "start" not in executable
        assert "end" not in executable
        assert "waitReply" in executable

    def test_default_config_is_fresh_copy(self, registry):
        config = registry.default_config("waitReply")
        config["validation"]["maxRetries"] = 9

        assert registry.default_config("waitReply")["validation"]["maxRetries"] == 3
        assert "taskName" not in config

    def test_default_config_unknown_kind(self, registry):
        assert registry.default_config("brandNewKind") == {}

    def test_default_label(self, registry):
        assert registry.default_label("sendMessage") == "Send Message"
        assert registry.default_label("brandNewKind") == "brandNewKind"

    def test_resolve_unknown_kind(self, registry):
        resolved = registry.resolve("brandNewKind")

        assert resolved.is_implemented is False
        assert "brandNewKind" not in registry
        assert registry.get("brandNewKind") is None

    def test_by_category(self, registry):
        groups = registry.by_category()

        assert [d.kind for d in groups["Control"]] == ["start", "end"]
        assert [d.kind for d in groups["Form"]] == ["sendForm", "formResult"]

    def test_schema_for(self, registry):
        assert registry.schema_for("start").branch_field == "activationType"
        assert registry.schema_for("brandNewKind").required == ()


class TestFromPayload:
    """Test building a registry from the `/node-types` response."""

    def test_envelope(self, sample_node_types_response):
        registry = NodeTypeRegistry.from_payload(sample_node_types_response)

        assert registry.is_builtin_fallback is False
        assert registry.list_kinds() == ["start", "sendMessage", "aiSummary", "end"]
        assert registry.resolve("aiSummary").is_implemented is False

    def test_bare_list(self, sample_node_types_response):
        registry = NodeTypeRegistry.from_payload(sample_node_types_response["data"])

        assert len(registry) == 4

    def test_icons_filled_from_builtin(self, sample_node_types_response):
        registry = NodeTypeRegistry.from_payload(sample_node_types_response)

        assert registry.get("start").icon == "play-circle"
        assert registry.get("aiSummary").icon is None

    def test_payload_without_list(self):
        with pytest.raises(ValueError):
            NodeTypeRegistry.from_payload({"success": False, "message": "boom"})

    def test_later_duplicate_wins(self):
        registry = NodeTypeRegistry([
            NodeTypeDefinition(kind="end", label="First"),
            NodeTypeDefinition(kind="end", label="Second"),
        ])

        assert len(registry) == 1
        assert registry.get("end").label == "Second"


class TestLoadRegistry:
    """Test loading with fallback."""

    def test_no_client_uses_builtin(self):
        assert load_registry(None).is_builtin_fallback is True

    def test_remote_catalog(self, sample_node_types_response):
        client = Mock()
        client.node_types.list.return_value = sample_node_types_response

        registry = load_registry(client)

        assert registry.is_builtin_fallback is False
        assert "aiSummary" in registry

    def test_transport_failure_falls_back(self):
        client = Mock()
        client.node_types.list.side_effect = ApiClientError("Connection error")

        registry = load_registry(client)

        assert registry.is_builtin_fallback is True
        assert "waitReply" in registry

    def test_malformed_payload_falls_back(self):
        client = Mock()
        client.node_types.list.return_value = {"data": [{"label": "missing type"}]}

        assert load_registry(client).is_builtin_fallback is True

    def test_empty_catalog_falls_back(self):
        client = Mock()
        client.node_types.list.return_value = {"success": True, "data": [], "total": 0}

        assert load_registry(client).is_builtin_fallback is True


class TestSingleStart:
    """A remote catalog cannot lift the one-start rule."""

    def test_start_always_single_instance(self):
        definition = NodeTypeDefinition.model_validate({"type": "start", "singleInstance": False})

        assert definition.single_instance is True

    def test_second_start_rejected_with_remote_catalog(self, sample_node_types_response):
        sample_node_types_response["data"][0]["singleInstance"] = False
        registry = NodeTypeRegistry.from_payload(sample_node_types_response)
        editor = WorkflowEditor.new(registry)

        assert editor.add_node("start") is None
        assert len(editor.definition.nodes_of_kind("start")) == 1
