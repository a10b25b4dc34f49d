"""
Workflow Import / Export Service

Portable JSON documents ``{version, name, description, steps, metadata}``.
Imports are fully validated before anything is written.
"""

import json
import logging
from typing import Any, Dict, Iterable, Optional

from pydantic import ValidationError
from sqlalchemy.orm import Session

from halo_engine.config import settings
from halo_engine.core.execution.exceptions import WorkflowNotFoundError, WorkflowValidationError
from halo_engine.core.execution.flatten import parse_steps, steps_to_documents
from halo_engine.database.models.workflow import Workflow
from halo_engine.database.repositories.workflow import WorkflowRepository
from halo_engine.schemas.workflow import ExportedWorkflow, ExportMetadata
from halo_engine.utils.timezone import to_iso, utc_now

logger = logging.getLogger(__name__)

INVALID_FORMAT = "Invalid workflow file format"


class WorkflowImportError(ValueError):
    """Rejected import file. Nothing was created."""


def generate_unique_name(name: str, existing: Iterable[str]) -> str:
    """
    ``name`` if unused, else ``<name> (Copy)``, then ``<name> (Copy 2)``, ...

    Examples:
        >>> generate_unique_name("Leads", [])
        'Leads'
        >>> generate_unique_name("Leads", ["Leads", "Leads (Copy)"])
        'Leads (Copy 2)'
    """
    taken = set(existing)
    if name not in taken:
        return name

    candidate = f"{name} (Copy)"
    counter = 2
    while candidate in taken:
        candidate = f"{name} (Copy {counter})"
        counter += 1
    return candidate


def parse_import_document(content: bytes) -> ExportedWorkflow:
    """
    Decode and validate an import file.

    Raises:
        WorkflowImportError: Not JSON, missing version/name, ``steps`` not a
            list, or steps that cannot be parsed
    """
    try:
        document = json.loads(content.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise WorkflowImportError(f"Invalid JSON: {e}") from e

    if (
        not isinstance(document, dict)
        or not document.get("version")
        or not isinstance(document.get("name"), str)
        or not document["name"].strip()
        or not isinstance(document.get("steps"), list)
    ):
        raise WorkflowImportError(INVALID_FORMAT)

    try:
        parse_steps(document["steps"])
    except WorkflowValidationError as e:
        raise WorkflowImportError(f"{INVALID_FORMAT}: {e}") from e

    try:
        return ExportedWorkflow(
            version=str(document["version"]),
            name=document["name"].strip(),
            description=document.get("description"),
            steps=document["steps"],
        )
    except ValidationError as e:
        raise WorkflowImportError(f"{INVALID_FORMAT}: {e}") from e


class WorkflowTransferService:
    """Export workflows to and import them from portable JSON documents."""

    def __init__(self, db: Session):
        self.db = db
        self.repository = WorkflowRepository(db)

    def export_workflow(self, workflow_id: str, tenant_id: str, exported_by: Optional[str] = None) -> Dict[str, Any]:
        """
        Build the export document. Visual workflows are flattened to steps.

        Raises:
            WorkflowNotFoundError: No such workflow for this tenant
        """
        workflow = self.repository.get(workflow_id, tenant_id)
        if workflow is None:
            raise WorkflowNotFoundError(workflow_id)

        document = ExportedWorkflow(
            version=settings.VERSION,
            name=workflow.name,
            description=workflow.description,
            steps=steps_to_documents(parse_steps(workflow.steps or [])),
            metadata=ExportMetadata(
                exportedAt=to_iso(utc_now()),
                exportedBy=exported_by,
                originalId=workflow.id,
            ),
        )
        logger.info(f"📤 Exported workflow {workflow_id} for tenant {tenant_id}")
        return document.model_dump()

    def import_workflow_file(
        self,
        filename: str,
        content: bytes,
        tenant_id: str,
        created_by: Optional[str] = None,
    ) -> Workflow:
        """
        Validate an uploaded file and create a draft workflow from it.

        Raises:
            WorkflowImportError: Wrong extension, too large or malformed
        """
        if not filename or not filename.lower().endswith(".json"):
            raise WorkflowImportError("Only .json workflow files can be imported")
        if len(content) > settings.MAX_IMPORT_FILE_BYTES:
            raise WorkflowImportError(
                f"Workflow file exceeds the {settings.MAX_IMPORT_FILE_BYTES} byte limit"
            )

        document = parse_import_document(content)
        name = generate_unique_name(document.name, self.repository.list_names(tenant_id))

        workflow = self.repository.create(
            tenant_id=tenant_id,
            name=name,
            steps=document.steps,
            description=document.description,
            status="draft",
            created_by=created_by,
        )
        logger.info(f"📥 Imported workflow '{name}' ({workflow.id}) for tenant {tenant_id}")
        return workflow
