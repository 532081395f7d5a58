"""Execute a single step against the live context."""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from medical_mirror_orchestrator.orchestrator.services.base import ServiceDispatcher

from .conditions import evaluate_condition, parse_operator
from .errors import StepError, StepTimeoutError, UnknownAction, UnknownStepType
from .interpolation import PLACEHOLDER_PATTERN, interpolate
from .models import SERVICE_STEP_TYPES, Step, StepType, Workflow

logger = logging.getLogger(__name__)

DEFAULT_DELAY_MS = 1000

Sleeper = Callable[[float], Awaitable[None]]


class StepExecutor:
    """Route one step to its dispatcher (or to the delay/condition built-ins).

    Each dispatcher call runs under `timeout_seconds`; an overrun surfaces as
    `StepTimeoutError`. Nothing is retried here.
    """

    def __init__(
        self,
        *,
        dispatchers: Mapping[StepType, ServiceDispatcher],
        timeout_seconds: float | None = None,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        self._dispatchers = dict(dispatchers)
        self._timeout_seconds = timeout_seconds
        self._sleep = sleep

    async def execute(self, step: Step, context: Mapping[str, Any]) -> Any:
        resolved = interpolate(step.params, context)
        step_type = step.type

        if step_type in SERVICE_STEP_TYPES:
            return await self._dispatch(self._dispatcher_for(step_type), step, resolved)
        if step_type is StepType.DELAY:
            return await self._delay(resolved)
        if step_type is StepType.CONDITION:
            return evaluate_condition(resolved, context)
        raise UnknownStepType(step_type)

    def validate(self, workflow: Workflow) -> None:
        """Reject a malformed workflow before any step runs.

        Raises the same configuration errors `execute` would raise mid-run.
        """

        for step in workflow.steps:
            if step.type in SERVICE_STEP_TYPES:
                dispatcher = self._dispatcher_for(step.type)
                if not dispatcher.supports(step.action):
                    raise UnknownAction(dispatcher.service, step.action)
            elif step.type is StepType.CONDITION:
                operator = step.params.get("operator")
                # Operators filled in from the context can only be checked at run time.
                if not (isinstance(operator, str) and PLACEHOLDER_PATTERN.search(operator)):
                    parse_operator(operator)
            elif step.type is not StepType.DELAY:
                raise UnknownStepType(step.type)

    def _dispatcher_for(self, step_type: StepType) -> ServiceDispatcher:
        dispatcher = self._dispatchers.get(step_type)
        if dispatcher is None:
            raise UnknownStepType(step_type.value)
        return dispatcher

    async def _dispatch(
        self, dispatcher: ServiceDispatcher, step: Step, params: dict[str, Any]
    ) -> Any:
        logger.debug(
            "Dispatching step",
            extra={"step": step.name, "service": dispatcher.service, "action": step.action},
        )
        call = dispatcher.dispatch(step.action, params)
        if self._timeout_seconds is None:
            return await call
        try:
            return await asyncio.wait_for(call, timeout=self._timeout_seconds)
        except TimeoutError as e:
            raise StepTimeoutError(
                f"{dispatcher.service}.{step.action} exceeded {self._timeout_seconds:g}s deadline"
            ) from e

    async def _delay(self, params: Mapping[str, Any]) -> dict[str, float | int]:
        raw = params.get("ms")
        if raw is None or raw == "":
            ms: float | int = DEFAULT_DELAY_MS
        else:
            try:
                ms = float(raw)
            except (TypeError, ValueError):
                raise StepError(f"Invalid delay: ms={raw!r}") from None
            if not math.isfinite(ms) or ms < 0:
                raise StepError(f"Invalid delay: ms={raw!r}")
            if ms.is_integer():
                ms = int(ms)
        await self._sleep(ms / 1000)
        return {"delayed": ms}
