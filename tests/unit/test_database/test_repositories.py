"""
Tests for the workflow and execution repositories
"""

import pytest

from halo_engine.database.repositories.execution import ExecutionRepository
from halo_engine.database.repositories.workflow import WorkflowRepository


class TestWorkflowRepository:

    def test_get_is_tenant_scoped(self, test_db):
        repository = WorkflowRepository(test_db)
        workflow = repository.create(tenant_id="tenant-a", name="Leads", steps=[])

        assert repository.get(workflow.id, "tenant-a").id == workflow.id
        assert repository.get(workflow.id, "tenant-b") is None

    def test_list_by_tenant(self, test_db):
        repository = WorkflowRepository(test_db)
        repository.create(tenant_id="tenant-a", name="Zeta", steps=[])
        repository.create(tenant_id="tenant-a", name="Alpha", steps=[])
        repository.create(tenant_id="tenant-b", name="Other", steps=[])

        assert [w.name for w in repository.list_by_tenant("tenant-a")] == ["Alpha", "Zeta"]
        assert sorted(repository.list_names("tenant-b")) == ["Other"]

    def test_update(self, test_db):
        repository = WorkflowRepository(test_db)
        workflow = repository.create(tenant_id="tenant-a", name="Leads", steps=[])

        updated = repository.update(workflow.id, {"status": "active", "steps": [{"id": "a", "type": "delay"}]})

        assert updated.status == "active"
        assert updated.steps == [{"id": "a", "type": "delay"}]
        assert repository.update("missing", {"status": "active"}) is None

    def test_update_rejects_unknown_field(self, test_db):
        repository = WorkflowRepository(test_db)
        workflow = repository.create(tenant_id="tenant-a", name="Leads", steps=[])

        with pytest.raises(ValueError):
            repository.update(workflow.id, {"colour": "red"})


class TestExecutionRepository:

    def test_create_and_update(self, test_db):
        repository = ExecutionRepository(test_db)
        execution = repository.create("wf-1", "tenant-a", input_data={"a": 1})

        assert execution.status == "running"
        assert execution.input == {"a": 1}

        repository.update(execution.id, {"status": "completed", "output": {"trigger": {"a": 1}}})

        stored = repository.get(execution.id, "tenant-a")
        assert stored.status == "completed"
        assert stored.output == {"trigger": {"a": 1}}
        assert repository.get(execution.id, "tenant-b") is None
        assert repository.update("missing", {"status": "failed"}) is None

    def test_logs_keep_append_order(self, test_db):
        repository = ExecutionRepository(test_db)
        execution = repository.create("wf-1", "tenant-a")

        repository.append_log(execution.id, "a", "info", "Step executed")
        repository.append_log(execution.id, "b", "info", "Step skipped", {"reason": "no input items"})
        repository.append_log(execution.id, "c", "error", "boom")

        logs = repository.list_logs(execution.id)
        assert [log.step_id for log in logs] == ["a", "b", "c"]
        assert [log.sequence for log in logs] == [1, 2, 3]
        assert logs[1].data == {"reason": "no input items"}

    def test_list_by_workflow(self, test_db):
        repository = ExecutionRepository(test_db)
        first = repository.create("wf-1", "tenant-a")
        second = repository.create("wf-1", "tenant-a")
        repository.create("wf-1", "tenant-b")
        repository.create("wf-2", "tenant-a")

        ids = {execution.id for execution in repository.list_by_workflow("wf-1", "tenant-a")}
        assert ids == {first.id, second.id}
