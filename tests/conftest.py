"""Pytest configuration and fixtures."""
import os

import pytest

# Set test environment variables
os.environ["WORKFLOW_DESIGNER_ENV"] = "test"
os.environ["WORKFLOW_DESIGNER_WEBHOOK_BASE_URL"] = "https://flows.example.test"
os.environ.pop("WORKFLOW_DESIGNER_API_BASE_URL", None)  # Offline by default


@pytest.fixture(autouse=True)
def fresh_settings():
    """Drop the cached settings between tests."""
    from workflow_designer.config import reset_settings

    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def registry():
    """Built-in node catalog."""
    from node_registry import NodeTypeRegistry

    return NodeTypeRegistry.from_builtin()


@pytest.fixture
def editor(registry):
    """Editor over a new definition holding only the start node."""
    from workflow_graph import WorkflowEditor

    return WorkflowEditor.new(
        registry,
        name="Leave approval",
        webhook_base_url="https://flows.example.test",
    )


@pytest.fixture
def linear_editor(editor):
    """start -> waitReply -> end, fully connected."""
    ask = editor.add_node("waitReply")
    end = editor.add_node("end")
    editor.add_edge(editor.start_node.id, ask.id)
    editor.add_edge(ask.id, end.id)
    return editor


@pytest.fixture
def sample_node_types_response():
    """Sample `/api/node-types` response body."""
    return {
        "success": True,
        "data": [
            {
                "type": "start",
                "label": "Start",
                "category": "Control",
                "isImplemented": True,
                "defaultData": {"taskName": "Start", "activationType": "manual"},
            },
            {
                "type": "sendMessage",
                "label": "Send Message",
                "category": "Communication",
                "isImplemented": True,
                "defaultData": {"taskName": "Send Message", "message": "", "to": ""},
            },
            {
                "type": "aiSummary",
                "label": "AI Summary",
                "category": "AI",
                "isImplemented": False,
                "defaultData": {"taskName": "AI Summary"},
            },
            {
                "type": "end",
                "label": "End",
                "category": "Control",
                "isImplemented": True,
                "defaultData": {"taskName": "End"},
            },
        ],
        "total": 4,
    }
