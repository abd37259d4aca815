"""Tests for CLI commands."""
import json
import logging

import pytest
from click.testing import CliRunner

from node_registry import NodeTypeRegistry
from workflow_designer.cli import cli
from workflow_graph import DefinitionRecord, serialize


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def restore_root_logger():
    """setup_logging() replaces root handlers; put the originals back."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def write_definition(tmp_path, editor, as_record=True):
    path = tmp_path / "definition.json"
    if as_record:
        text = json.dumps(DefinitionRecord.from_definition(editor.definition).to_payload())
    else:
        text = serialize(editor.definition)
    path.write_text(text, encoding="utf-8")
    return path


class TestNodeTypes:

    def test_lists_builtin_catalog(self, runner):
        result = runner.invoke(cli, ["--offline", "node-types"], obj={})

        assert result.exit_code == 0
        assert "(built-in catalog)" in result.output
        assert "Control:" in result.output
        assert "waitReply" in result.output


class TestNew:

    def test_new_to_file(self, runner, tmp_path):
        output = tmp_path / "leave.json"

        result = runner.invoke(cli, ["--offline", "new", "Leave approval", "-o", str(output)], obj={})

        assert result.exit_code == 0
        record = DefinitionRecord.model_validate_json(output.read_text(encoding="utf-8"))
        definition = record.to_definition(NodeTypeRegistry.from_builtin())
        assert definition.name == "Leave approval"
        assert [n.kind for n in definition.nodes] == ["start"]


class TestValidate:

    def test_valid_definition(self, runner, tmp_path, linear_editor):
        path = write_definition(tmp_path, linear_editor)

        result = runner.invoke(cli, ["--offline", "-q", "validate", str(path)], obj={})

        assert result.exit_code == 0
        assert "OK" in result.output

    def test_bare_graph_document(self, runner, tmp_path, linear_editor):
        path = write_definition(tmp_path, linear_editor, as_record=False)

        result = runner.invoke(cli, ["--offline", "-q", "validate", str(path)], obj={})

        assert result.exit_code == 0

    def test_errors_exit_1(self, runner, tmp_path, editor):
        path = write_definition(tmp_path, editor)

        result = runner.invoke(cli, ["--offline", "-q", "validate", str(path)], obj={})

        assert result.exit_code == 1
        assert "ERROR" in result.output

    def test_warnings_with_strict(self, runner, tmp_path, linear_editor):
        linear_editor.add_node("sendMessage")
        path = write_definition(tmp_path, linear_editor)

        relaxed = runner.invoke(cli, ["--offline", "-q", "validate", str(path)], obj={})
        strict = runner.invoke(cli, ["--offline", "-q", "validate", "--strict", str(path)], obj={})

        assert relaxed.exit_code == 0
        assert "WARNING" in relaxed.output
        assert strict.exit_code == 1

    def test_json_output(self, runner, tmp_path, editor):
        path = write_definition(tmp_path, editor)

        result = runner.invoke(
            cli, ["--offline", "-q", "validate", "--json-output", str(path)], obj={}
        )

        findings = json.loads(result.output)
        assert [f["code"] for f in findings["errors"]] == ["missing_end", "no_connections"]

    def test_corrupt_file_exit_2(self, runner, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        result = runner.invoke(cli, ["--offline", "-q", "validate", str(path)], obj={})

        assert result.exit_code == 2


class TestConfigCheck:

    def test_reports_issues(self, runner, tmp_path, linear_editor):
        linear_editor.add_node("sendMessage")
        path = write_definition(tmp_path, linear_editor)

        result = runner.invoke(cli, ["--offline", "-q", "config-check", str(path)], obj={})

        assert result.exit_code == 0
        assert "Send Message: message: message is required" in result.output

    def test_no_issues(self, runner, tmp_path, linear_editor):
        path = write_definition(tmp_path, linear_editor)

        result = runner.invoke(cli, ["--offline", "-q", "config-check", str(path)], obj={})

        assert "No configuration issues" in result.output
