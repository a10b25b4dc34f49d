"""
Execution Exceptions

Typed errors raised by nodes, the registry lookups and the engine.
"""

from typing import Optional


class HaloError(Exception):
    """Base class for engine errors."""


class NodeOperationError(HaloError):
    """
    Raised from a node's execute() to fail the step.

    Configuration problems (missing or malformed parameters) and
    third-party failures surface through this error.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class IntegrationNotFoundError(HaloError):
    """Step type does not resolve to a registered node or catalog integration."""

    def __init__(self, step_type: str):
        super().__init__(f"Integration not found for step type: {step_type}")
        self.step_type = step_type


class StepFailedError(HaloError):
    """An integration reported ``success=False``."""


class WorkflowNotFoundError(HaloError):
    def __init__(self, workflow_id: str):
        super().__init__(f"Workflow not found: {workflow_id}")
        self.workflow_id = workflow_id


class WorkflowValidationError(HaloError):
    """Workflow structure cannot be turned into an executable step list."""


class ExecutionCancelledError(HaloError):
    """Cancellation was requested between steps."""
