"""Unit tests for the orchestrator facade."""

from __future__ import annotations

import logging

import pytest
from pydantic import ValidationError

from medical_mirror_orchestrator.orchestrator.runtime import Orchestrator
from medical_mirror_orchestrator.orchestrator.workflow.errors import (
    InvalidWorkflowError,
    UnknownAction,
    UnknownWorkflow,
)
from medical_mirror_orchestrator.orchestrator.workflow.models import Step, StepType, Workflow
from medical_mirror_orchestrator.orchestrator.workflow.notifications import (
    NullNotifier,
    TeamHubNotifier,
)


@pytest.fixture
def orchestrator(settings, http, fake_hub) -> Orchestrator:
    return Orchestrator(settings, http=http, hub=fake_hub)


def test_resolve_predefined_workflow_with_context(orchestrator) -> None:
    workflow = orchestrator.resolve_workflow(
        workflow_id="athena-capture-analyze", context={"patientId": "p-1"}
    )

    assert workflow.name == "Athena Capture & Analyze"
    assert workflow.context == {"patientId": "p-1"}


def test_resolve_inline_workflow(orchestrator) -> None:
    workflow = orchestrator.resolve_workflow(
        workflow={"name": "Inline", "steps": [{"name": "wait", "type": "delay"}], "context": {"a": 1}},
        context={"b": 2},
    )

    assert workflow.steps[0].type is StepType.DELAY
    # The caller's context replaces any context embedded in the definition.
    assert workflow.context == {"b": 2}


def test_resolve_rejections(orchestrator) -> None:
    with pytest.raises(UnknownWorkflow):
        orchestrator.resolve_workflow(workflow_id="missing")
    with pytest.raises(InvalidWorkflowError, match="Either workflowId or workflow object required"):
        orchestrator.resolve_workflow()
    with pytest.raises(ValidationError):
        orchestrator.resolve_workflow(workflow={"name": "x", "steps": [{"type": "warp"}]})


@pytest.mark.asyncio
async def test_run_validates_before_executing(orchestrator, fake_hub) -> None:
    workflow = Workflow(
        name="Broken",
        steps=(
            Step(name="announce", type=StepType.CLAUDE_TEAM, action="broadcast", params={"message": "x"}),
            Step(name="bad", type=StepType.SCC, action="reboot"),
        ),
    )

    with pytest.raises(UnknownAction, match="Unknown scc action: reboot"):
        await orchestrator.run(workflow)

    assert fake_hub.sent == []


@pytest.mark.asyncio
async def test_run_step_wraps_a_single_step(orchestrator, fake_hub) -> None:
    step = Step(name="hello", type=StepType.CLAUDE_TEAM, action="broadcast", params={"message": "{{m}}"})

    result = await orchestrator.run_step(step, {"m": "hi team"})

    assert result.success is True
    assert result.completed_steps == 1
    assert fake_hub.broadcasts[0] == "[Workflow] Starting: Single Step: hello"
    assert "hi team" in fake_hub.broadcasts


@pytest.mark.asyncio
async def test_lifecycle_leaves_injected_clients_open(orchestrator, http) -> None:
    async with orchestrator:
        pass

    assert http.is_closed is False


@pytest.mark.asyncio
async def test_disabled_hub_skips_lifecycle_notifications(
    settings, http, caplog: pytest.LogCaptureFixture
) -> None:
    orchestrator = Orchestrator(settings, http=http)
    assert isinstance(orchestrator.notifier, NullNotifier)

    with caplog.at_level(logging.WARNING):
        async with orchestrator:
            result = await orchestrator.run_step(
                Step(name="wait", type=StepType.DELAY, params={"ms": 0}), {}
            )

    assert result.success is True
    assert not [r for r in caplog.records if "not connected to hub" in r.getMessage()]


@pytest.mark.asyncio
async def test_enabled_hub_notifies_through_the_hub(settings, http) -> None:
    orchestrator = Orchestrator(settings.model_copy(update={"hub_enabled": True}), http=http)

    assert isinstance(orchestrator.notifier, TeamHubNotifier)
    await orchestrator.close()
