"""Pydantic models for the REST server."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ExecuteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    workflow_id: str | None = Field(default=None, alias="workflowId")
    # Validated into a Workflow by the handler so malformed definitions map to 400.
    workflow: dict[str, Any] | None = None
    # null is accepted and treated as an empty context.
    context: dict[str, Any] | None = None


class StepRequest(BaseModel):
    type: str | None = None
    name: str | None = None
    action: str | None = None
    params: dict[str, Any] = Field(default_factory=dict)
    optional: bool = False
    # null is accepted and treated as an empty context.
    context: dict[str, Any] | None = None
