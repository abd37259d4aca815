"""Tests for the designer session boundary."""
from unittest.mock import Mock

import pytest

from workflow_designer import ApiClientError, DesignerSession, ReferenceData
from workflow_graph import DefinitionRecord, serialize


@pytest.fixture
def api(sample_node_types_response):
    """Mocked DesignerApiClient."""
    client = Mock()
    client.node_types.list.return_value = sample_node_types_response
    client.reference.templates.return_value = [{"id": "T1", "name": "Welcome"}]
    client.reference.users.return_value = [{"id": "U1", "phone": "111"}]
    client.definitions.save.return_value = {"id": 99}
    return client


@pytest.fixture
def offline_session():
    return DesignerSession.start()


def complete(session):
    """Connect the new definition's start node to an end node."""
    end = session.editor.add_node("end")
    session.editor.add_edge(session.editor.start_node.id, end.id)
    return end


class TestReferenceData:

    def test_offline(self):
        reference = ReferenceData.offline()

        assert reference.registry.is_builtin_fallback
        assert reference.templates == ()

    def test_load(self, api):
        reference = ReferenceData.load(api)

        assert "aiSummary" in reference.registry
        assert reference.templates == ({"id": "T1", "name": "Welcome"},)
        assert reference.users == ({"id": "U1", "phone": "111"},)

    def test_each_source_degrades_alone(self, api):
        api.reference.templates.side_effect = ApiClientError("down")

        reference = ReferenceData.load(api)

        assert reference.templates == ()
        assert reference.users == ({"id": "U1", "phone": "111"},)
        assert not reference.registry.is_builtin_fallback


class TestStart:

    def test_new_session_has_start_node(self, offline_session):
        assert [n.kind for n in offline_session.definition.nodes] == ["start"]
        assert offline_session.registry.is_builtin_fallback

    def test_new_discards_current(self, offline_session):
        offline_session.editor.add_node("end")

        offline_session.new(name="Other")

        assert offline_session.definition.name == "Other"
        assert len(offline_session.definition.nodes) == 1

    def test_webhook_base_url_from_settings(self, offline_session):
        offline_session.editor.update_node_config("start", {"activationType": "webhook"})

        url = offline_session.editor.start_node.config["webhookUrl"]
        assert url.startswith("https://flows.example.test/api/workflow/webhook/")


class TestOpen:

    def test_open_record(self, api, registry):
        session = DesignerSession.start(client=api)
        source = DesignerSession.start()
        complete(source)
        api.definitions.get.return_value = {
            "id": 5,
            "name": "Leave",
            "json": serialize(source.definition),
            "status": "Enabled",
        }

        editor = session.open("5")

        assert editor.definition.id == "5"
        assert editor.definition.name == "Leave"
        assert editor.definition.semantic_dict() == source.definition.semantic_dict()

    def test_open_unwraps_envelope(self, api):
        session = DesignerSession.start(client=api)
        api.definitions.get.return_value = {"success": True, "data": {"name": "Wrapped"}}

        editor = session.open("8")

        assert editor.definition.name == "Wrapped"
        assert editor.definition.id == "8"

    def test_open_failure_gives_fresh_definition(self, api):
        session = DesignerSession.start(client=api)
        api.definitions.get.side_effect = ApiClientError("HTTP error 500")

        editor = session.open("5")

        assert editor.definition.id is None
        assert [n.kind for n in editor.definition.nodes] == ["start"]

    def test_open_corrupt_json_keeps_identity(self, api):
        session = DesignerSession.start(client=api)
        api.definitions.get.return_value = {"id": 5, "name": "Broken", "json": "{oops"}

        editor = session.open("5")

        assert editor.definition.id == "5"
        assert editor.definition.name == "Broken"
        assert [n.kind for n in editor.definition.nodes] == ["start"]

    def test_load_record_with_malformed_kind(self, offline_session):
        document = '{"nodes": [{"id": "a", "data": {"type": {"k": 1}}}], "edges": []}'

        editor = offline_session.load_record(
            DefinitionRecord(id="7", name="Broken", json_document=document)
        )

        assert editor.definition.id == "7"
        assert [n.kind for n in editor.definition.nodes] == ["start"]

    def test_open_offline(self, offline_session):
        editor = offline_session.open("5")

        assert editor.definition.id is None


class TestSave:
    """Test the save gate."""

    def test_errors_block_save(self, api):
        session = DesignerSession.start(client=api)
        session.new(name="Leave")

        outcome = session.save(confirm_warnings=True)

        assert not outcome.saved
        assert outcome.reason == "validation_failed"
        assert not outcome.needs_confirmation
        api.definitions.save.assert_not_called()

    def test_warnings_need_confirmation(self, api):
        session = DesignerSession.start(client=api)
        session.new(name="Leave")
        complete(session)
        session.editor.add_node("sendMessage")

        outcome = session.save()

        assert outcome.reason == "warnings_not_confirmed"
        assert outcome.needs_confirmation
        api.definitions.save.assert_not_called()

        assert session.save(confirm_warnings=True).saved

    def test_name_required(self, api):
        session = DesignerSession.start(client=api)
        complete(session)

        outcome = session.save()

        assert outcome.reason == "name_required"

    def test_save_creates_and_takes_id(self, api):
        session = DesignerSession.start(client=api)
        session.new(name="Leave")
        complete(session)

        outcome = session.save(updated_by="alice")

        assert outcome.saved
        assert session.definition.id == "99"
        assert outcome.record.id == "99"
        payload = api.definitions.save.call_args.args[0]
        assert payload["name"] == "Leave"
        assert payload["updatedBy"] == "alice"
        assert api.definitions.save.call_args.kwargs["definition_id"] is None

    def test_save_updates_existing(self, api):
        session = DesignerSession.start(client=api)
        session.new(name="Leave")
        complete(session)
        session.definition.id = "12"

        session.save()

        assert api.definitions.save.call_args.kwargs["definition_id"] == "12"

    def test_save_transport_failure_raises(self, api):
        session = DesignerSession.start(client=api)
        session.new(name="Leave")
        complete(session)
        api.definitions.save.side_effect = ApiClientError("Connection error")

        with pytest.raises(ApiClientError):
            session.save()

    def test_offline_save_returns_record(self, offline_session):
        offline_session.new(name="Leave")
        complete(offline_session)

        outcome = offline_session.save()

        assert not outcome.saved
        assert outcome.reason == "offline"
        assert outcome.record.name == "Leave"

    def test_config_issues_informational(self, offline_session):
        offline_session.new(name="Leave")
        complete(offline_session)
        offline_session.editor.update_node_config("start", {"activationType": "scheduled"})

        assert offline_session.config_issues()
        assert offline_session.save().reason == "offline"
