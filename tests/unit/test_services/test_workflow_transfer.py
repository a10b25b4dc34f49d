"""
Unit tests for workflow import / export
"""

import json

import pytest

from halo_engine.config import settings
from halo_engine.core.execution.exceptions import WorkflowNotFoundError
from halo_engine.database.models.workflow import Workflow
from halo_engine.database.repositories.workflow import WorkflowRepository
from halo_engine.services.workflow_transfer import (
    INVALID_FORMAT,
    WorkflowImportError,
    WorkflowTransferService,
    generate_unique_name,
    parse_import_document,
)

TENANT = "tenant-a"

STEPS = [
    {"id": "check", "type": "condition", "config": {"field": "status", "value": "active"}},
    {"id": "notify", "type": "gmail", "config": {"to": "{{trigger.email}}"},
     "inputs": [{"source": "check", "channel": "true"}]},
]


def document(**overrides):
    data = {"version": "1.0.0", "name": "Lead router", "description": "Routes leads", "steps": STEPS}
    data.update(overrides)
    return json.dumps(data).encode("utf-8")


class TestGenerateUniqueName:

    def test_unused_name(self):
        assert generate_unique_name("Leads", ["Other"]) == "Leads"

    def test_copy_suffixes(self):
        assert generate_unique_name("Leads", ["Leads"]) == "Leads (Copy)"
        assert generate_unique_name("Leads", ["Leads", "Leads (Copy)", "Leads (Copy 2)"]) == "Leads (Copy 3)"


class TestParseImportDocument:

    def test_valid_document(self):
        parsed = parse_import_document(document(name="  Lead router  "))

        assert parsed.name == "Lead router"
        assert parsed.steps == STEPS

    @pytest.mark.parametrize("content", [
        b"not json",
        b"\xff\xfe",
        b"[]",
        json.dumps({"name": "x", "steps": []}).encode(),
        json.dumps({"version": "1", "steps": []}).encode(),
        json.dumps({"version": "1", "name": " ", "steps": []}).encode(),
        json.dumps({"version": "1", "name": "x", "steps": {"a": 1}}).encode(),
        json.dumps({"version": "1", "name": "x", "steps": [{"id": "a"}]}).encode(),
        json.dumps({"version": "1", "name": "x", "description": {"a": 1}, "steps": []}).encode(),
        json.dumps({"version": "1", "name": "x", "description": 5, "steps": []}).encode(),
    ])
    def test_malformed_documents(self, content):
        with pytest.raises(WorkflowImportError):
            parse_import_document(content)

    def test_invalid_description_is_a_format_error(self):
        with pytest.raises(WorkflowImportError, match=INVALID_FORMAT):
            parse_import_document(document(description=["not", "text"]))

    def test_format_error_message(self):
        with pytest.raises(WorkflowImportError, match=INVALID_FORMAT):
            parse_import_document(b'{"version": "1"}')


class TestWorkflowTransferService:

    def test_import_creates_draft(self, test_db):
        workflow = WorkflowTransferService(test_db).import_workflow_file("router.json", document(), TENANT)

        assert workflow.name == "Lead router"
        assert workflow.status == "draft"
        assert workflow.tenant_id == TENANT
        assert workflow.steps == STEPS

    def test_import_renames_on_clash(self, test_db):
        service = WorkflowTransferService(test_db)

        service.import_workflow_file("router.json", document(), TENANT)
        second = service.import_workflow_file("router.json", document(), TENANT)
        other_tenant = service.import_workflow_file("router.json", document(), "tenant-b")

        assert second.name == "Lead router (Copy)"
        assert other_tenant.name == "Lead router"

    @pytest.mark.parametrize("filename,content", [
        ("router.yaml", document()),
        ("router.json", b"{broken"),
        ("router.json", document(steps="nope")),
        ("router.json", document(description={"a": 1})),
    ])
    def test_rejected_import_creates_nothing(self, test_db, filename, content):
        with pytest.raises(WorkflowImportError):
            WorkflowTransferService(test_db).import_workflow_file(filename, content, TENANT)

        assert test_db.query(Workflow).count() == 0

    def test_import_size_limit(self, test_db, monkeypatch):
        monkeypatch.setattr(settings, "MAX_IMPORT_FILE_BYTES", 10)

        with pytest.raises(WorkflowImportError, match="byte limit"):
            WorkflowTransferService(test_db).import_workflow_file("router.json", document(), TENANT)

    def test_export_document(self, test_db):
        workflow = WorkflowRepository(test_db).create(tenant_id=TENANT, name="Lead router", steps=STEPS)

        exported = WorkflowTransferService(test_db).export_workflow(workflow.id, TENANT, exported_by="ops")

        assert exported["version"] == settings.VERSION
        assert exported["name"] == "Lead router"
        assert [step["id"] for step in exported["steps"]] == ["check", "notify"]
        assert exported["steps"][1]["inputs"] == [{"source": "check", "channel": "true"}]
        assert exported["metadata"]["originalId"] == workflow.id
        assert exported["metadata"]["exportedBy"] == "ops"
        assert exported["metadata"]["exportedAt"].endswith("Z")

    def test_export_flattens_visual_workflow(self, test_db):
        visual = {
            "nodes": [{"id": "b", "type": "delay"}, {"id": "a", "type": "webhook"}],
            "edges": [{"source": "a", "target": "b"}],
        }
        workflow = WorkflowRepository(test_db).create(tenant_id=TENANT, name="Visual", steps=visual)

        exported = WorkflowTransferService(test_db).export_workflow(workflow.id, TENANT)

        assert [step["id"] for step in exported["steps"]] == ["a", "b"]
        assert exported["steps"][0]["inputs"] == [{"source": "trigger"}]

    def test_export_round_trips_through_import(self, test_db):
        workflow = WorkflowRepository(test_db).create(tenant_id=TENANT, name="Lead router", steps=STEPS)
        service = WorkflowTransferService(test_db)

        content = json.dumps(service.export_workflow(workflow.id, TENANT)).encode()
        imported = service.import_workflow_file("export.json", content, TENANT)

        assert imported.name == "Lead router (Copy)"

    def test_export_other_tenant(self, test_db):
        workflow = WorkflowRepository(test_db).create(tenant_id=TENANT, name="Private", steps=[])

        with pytest.raises(WorkflowNotFoundError):
            WorkflowTransferService(test_db).export_workflow(workflow.id, "tenant-b")
