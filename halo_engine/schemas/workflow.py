"""
Workflow Schemas

Pydantic models for workflow step lists, visual (nodes + edges) documents,
execution records and the portable export format.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ExecutionStatus(str, Enum):
    """Execution status. running → completed | failed, nothing else."""
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class LogLevel(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


# ==================== Step List ====================

class StepInput(BaseModel):
    """Upstream link of a step: which step's output and which channel to read."""
    source: str
    channel: Optional[str] = None


class WorkflowStep(BaseModel):
    """
    One configured node instance in a workflow's ordered step list.

    ``position`` and ``order`` are presentation metadata only.
    ``inputs`` is optional; without it a step reads the previous step's
    first channel (the trigger for the first step).
    """
    model_config = ConfigDict(extra="allow")

    id: str
    type: str
    name: Optional[str] = None
    config: Dict[str, Any] = Field(default_factory=dict)
    position: Optional[Dict[str, Any]] = None
    order: Optional[int] = None
    inputs: Optional[List[StepInput]] = None

    @field_validator("id", "type")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must not be empty")
        return v


# ==================== Visual Workflow ====================

class VisualNode(BaseModel):
    """Node as saved by the visual canvas."""
    model_config = ConfigDict(extra="allow")

    id: str
    type: str
    data: Dict[str, Any] = Field(default_factory=dict)
    position: Optional[Dict[str, Any]] = None

    @property
    def label(self) -> Optional[str]:
        return self.data.get("label")

    @property
    def config(self) -> Dict[str, Any]:
        return dict(self.data.get("config") or {})


class VisualEdge(BaseModel):
    """Directed connection between two visual nodes."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: Optional[str] = None
    source: str
    target: str
    source_handle: Optional[str] = Field(default=None, alias="sourceHandle")


class VisualWorkflow(BaseModel):
    nodes: List[VisualNode] = Field(default_factory=list)
    edges: List[VisualEdge] = Field(default_factory=list)


# ==================== API Payloads ====================

class WorkflowExecutionRequest(BaseModel):
    """Body of POST /workflows/{id}/execute."""
    trigger_data: Dict[str, Any] = Field(default_factory=dict)


class ExecutionLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    step_id: Optional[str] = None
    level: LogLevel
    message: str
    data: Optional[Dict[str, Any]] = None
    timestamp: datetime


class ExecutionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    workflow_id: str
    tenant_id: str
    status: ExecutionStatus
    current_step: Optional[str] = None
    input: Optional[Dict[str, Any]] = None
    output: Optional[Dict[str, Any]] = None
    started_at: datetime
    completed_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    logs: List[ExecutionLogResponse] = Field(default_factory=list)


class WorkflowResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    tenant_id: str
    name: str
    description: Optional[str] = None
    status: str
    steps: Any


# ==================== Import / Export ====================

class ExportMetadata(BaseModel):
    exportedAt: str
    exportedBy: Optional[str] = None
    originalId: Optional[str] = None


class ExportedWorkflow(BaseModel):
    """
    Portable workflow document.

    ``steps`` is always a step list; visual documents are flattened on export.
    """
    version: str
    name: str
    description: Optional[str] = None
    steps: List[Dict[str, Any]]
    metadata: Optional[ExportMetadata] = None


class WorkflowExecutionResult(BaseModel):
    """Body returned by POST /workflows/{id}/execute."""
    execution_id: str
    status: ExecutionStatus
    output: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    failed_step: Optional[str] = None
