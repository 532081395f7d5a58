"""Sequential workflow interpreter."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from .errors import InvalidWorkflowError, WorkflowConfigurationError
from .events import EventKind, NotificationCategory, WorkflowEvent
from .executor import StepExecutor
from .models import Step, StepResult, Workflow, WorkflowResult
from .notifications import Notifier, NullNotifier
from .state_machine import RunSnapshot, RunState, transition

logger = logging.getLogger(__name__)


class WorkflowEngine:
    """Run a workflow's steps in order against one private context.

    Step failures are captured into the result, never raised. A failure halts the
    run unless the step is optional; configuration errors (unknown type, action or
    operator) halt even optional steps because the definition itself is broken.
    """

    def __init__(self, *, executor: StepExecutor, notifier: Notifier | None = None) -> None:
        self._executor = executor
        self._notifier: Notifier = notifier or NullNotifier()

    async def execute(self, workflow: Workflow) -> WorkflowResult:
        steps = workflow.steps
        if not steps:
            raise InvalidWorkflowError(f"Workflow has no steps: {workflow.name}")

        total = len(steps)
        context: dict[str, Any] = dict(workflow.context or {})
        results: list[StepResult] = []
        run = RunSnapshot(state=RunState.RUNNING)

        logger.info("Starting workflow", extra={"workflow": workflow.name, "total_steps": total})
        await self._emit(EventKind.WORKFLOW_STARTED, workflow, f"[Workflow] Starting: {workflow.name}")

        for position, step in enumerate(steps, start=1):
            logger.info(
                f"Step {position}/{total}: {step.name}",
                extra={"workflow": workflow.name, "step": step.name, "step_type": step.type.value},
            )
            await self._emit(
                EventKind.STEP_STARTED,
                workflow,
                f"[Workflow] {workflow.name} - Step {position}/{total} starting: {step.name}",
                step=step,
            )

            try:
                result = await self._executor.execute(step, context)
            except Exception as exc:
                message = str(exc) or exc.__class__.__name__
                logger.error(
                    "Step failed",
                    extra={"workflow": workflow.name, "step": step.name, "error": message},
                )
                results.append(StepResult(step=step.name, success=False, error=message))
                await self._emit(
                    EventKind.STEP_FAILED,
                    workflow,
                    f"[Workflow] {workflow.name} - Step failed: {step.name} - {message}",
                    step=step,
                    category=NotificationCategory.BLOCKER,
                )

                if isinstance(exc, WorkflowConfigurationError) or not step.optional:
                    run = transition(current=run, to=RunState.HALTED)
                    logger.warning(
                        "Workflow stopped",
                        extra={
                            "workflow": workflow.name,
                            "step": step.name,
                            "completed_steps": len(results),
                            "run": run.to_json(),
                        },
                    )
                    return WorkflowResult(
                        success=False,
                        completed_steps=len(results),
                        results=results,
                        error=f"Workflow stopped at step: {step.name}",
                    )

                run = transition(current=run, to=RunState.RUNNING)
                continue

            results.append(StepResult(step=step.name, success=True, result=result))
            if isinstance(result, Mapping):
                context.update(result)

            await self._emit(
                EventKind.STEP_COMPLETED,
                workflow,
                f"[Workflow] {workflow.name} - Step {position}/{total} complete: {step.name}",
                step=step,
            )
            run = transition(current=run, to=RunState.RUNNING)

        run = transition(current=run, to=RunState.DONE)
        logger.info("Workflow complete", extra={"workflow": workflow.name, "run": run.to_json()})
        await self._emit(EventKind.WORKFLOW_COMPLETED, workflow, f"[Workflow] Complete: {workflow.name}")

        return WorkflowResult(
            success=True,
            completed_steps=total,
            results=results,
            context=context,
        )

    async def _emit(
        self,
        kind: EventKind,
        workflow: Workflow,
        message: str,
        *,
        step: Step | None = None,
        category: NotificationCategory = NotificationCategory.UPDATE,
    ) -> None:
        event = WorkflowEvent(
            kind=kind,
            workflow=workflow.name,
            message=message,
            category=category,
            step=step.name if step is not None else None,
        )
        try:
            await self._notifier.notify(event)
        except Exception:
            # Notifications annotate the run; they never decide it.
            logger.warning(
                "Workflow notification failed",
                extra={"event": kind.value, "workflow": workflow.name},
                exc_info=True,
            )
