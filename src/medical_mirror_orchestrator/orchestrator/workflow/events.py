from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class EventKind(str, Enum):
    WORKFLOW_STARTED = "workflow_started"
    STEP_STARTED = "step_started"
    STEP_COMPLETED = "step_completed"
    STEP_FAILED = "step_failed"
    WORKFLOW_COMPLETED = "workflow_completed"


class NotificationCategory(str, Enum):
    UPDATE = "update"
    BLOCKER = "blocker"


@dataclass(frozen=True, slots=True)
class WorkflowEvent:
    """A lifecycle signal emitted by the engine.

    Events are observational only: delivering (or failing to deliver) one never
    changes the course of a run.
    """

    kind: EventKind
    workflow: str
    message: str
    category: NotificationCategory = NotificationCategory.UPDATE
    step: str | None = None

    def to_json(self) -> dict[str, object]:
        out: dict[str, object] = {
            "kind": self.kind.value,
            "workflow": self.workflow,
            "message": self.message,
            "category": self.category.value,
        }
        if self.step is not None:
            out["step"] = self.step
        return out
