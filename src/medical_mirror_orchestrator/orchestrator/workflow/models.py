"""Workflow definitions and execution results.

Definitions (`Step`, `Workflow`) are pydantic models so inline workflows posted
to the API or loaded from a file are validated on construction. Results are
small frozen dataclasses with explicit `to_json()` renderings of the wire shape.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class StepType(str, Enum):
    OBSERVER = "observer"
    BROWSER = "browser"
    CLAUDE_TEAM = "claudeTeam"
    SCC = "scc"
    DELAY = "delay"
    CONDITION = "condition"


SERVICE_STEP_TYPES: frozenset[StepType] = frozenset(
    {StepType.OBSERVER, StepType.BROWSER, StepType.CLAUDE_TEAM, StepType.SCC}
)


class Step(BaseModel):
    """A single unit of work; read-only during execution."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: StepType
    action: str | None = None
    params: dict[str, Any] = Field(default_factory=dict)
    optional: bool = False

    @property
    def label(self) -> str:
        if self.action:
            return f"{self.type.value}:{self.action}"
        return self.type.value


class Workflow(BaseModel):
    """An ordered list of steps plus the seed of the execution context."""

    model_config = ConfigDict(frozen=True)

    name: str
    steps: tuple[Step, ...] = Field(min_length=1)
    context: dict[str, Any] = Field(default_factory=dict)

    def with_context(self, context: Mapping[str, Any] | None) -> Workflow:
        return self.model_copy(update={"context": dict(context or {})})


@dataclass(frozen=True, slots=True)
class StepResult:
    step: str
    success: bool
    result: Any = None
    error: str | None = None

    def to_json(self) -> dict[str, object]:
        out: dict[str, object] = {"step": self.step, "success": self.success}
        if self.success:
            out["result"] = self.result
        else:
            out["error"] = self.error
        return out


@dataclass(frozen=True, slots=True)
class WorkflowResult:
    """Outcome of one engine run.

    `completed_steps` counts attempted steps (successful or failed), so it always
    equals `len(results)`.
    """

    success: bool
    completed_steps: int
    results: list[StepResult] = field(default_factory=list)
    context: dict[str, Any] | None = None
    error: str | None = None

    def to_json(self) -> dict[str, object]:
        out: dict[str, object] = {
            "success": self.success,
            "completedSteps": self.completed_steps,
            "results": [r.to_json() for r in self.results],
        }
        if self.context is not None:
            out["context"] = self.context
        if self.error is not None:
            out["error"] = self.error
        return out
