"""Exception hierarchy for workflow execution.

Two families matter to the engine:

- `WorkflowConfigurationError`: the workflow definition itself is malformed.
  These always halt a run, even on an optional step.
- `StepError`: a step ran but its collaborator call failed. These are ordinary
  step failures and honour the step's `optional` flag.
"""

from __future__ import annotations


class OrchestratorError(Exception):
    """Base class for orchestrator errors."""


class WorkflowConfigurationError(OrchestratorError):
    """The workflow definition cannot be executed as written."""


class UnknownWorkflow(WorkflowConfigurationError):
    def __init__(self, workflow_id: str) -> None:
        self.workflow_id = workflow_id
        super().__init__(f"Unknown workflow: {workflow_id}")


class UnknownStepType(WorkflowConfigurationError):
    def __init__(self, step_type: object) -> None:
        self.step_type = step_type
        super().__init__(f"Unknown step type: {step_type}")


class UnknownAction(WorkflowConfigurationError):
    def __init__(self, service: str, action: str | None) -> None:
        self.service = service
        self.action = action
        super().__init__(f"Unknown {service} action: {action}")


class UnknownOperator(WorkflowConfigurationError):
    def __init__(self, operator: object) -> None:
        self.operator = operator
        super().__init__(f"Unknown operator: {operator}")


class InvalidWorkflowError(OrchestratorError, ValueError):
    """The engine was invoked without a runnable workflow (e.g. no steps)."""


class StepError(OrchestratorError):
    """A step failed at runtime."""


class RemoteCallError(StepError):
    """A collaborator call failed: transport error, error status or error payload."""

    def __init__(self, service: str, message: str, *, status_code: int | None = None) -> None:
        self.service = service
        self.status_code = status_code
        super().__init__(message)


class StepTimeoutError(StepError):
    """A collaborator call overran the per-step deadline."""
