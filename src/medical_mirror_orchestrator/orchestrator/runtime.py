"""Orchestrator facade: wires collaborators, engine and health probing together."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import TracebackType
from typing import Any

import httpx

from medical_mirror_orchestrator import __version__
from medical_mirror_orchestrator.orchestrator.config import OrchestratorSettings
from medical_mirror_orchestrator.orchestrator.services import (
    BrowserDispatcher,
    ObserverDispatcher,
    SccDispatcher,
    ServiceDispatcher,
    ServiceHealthProber,
    ServiceStatus,
    TeamDispatcher,
    TeamHub,
    TeamHubClient,
)
from medical_mirror_orchestrator.orchestrator.workflow.catalog import get_workflow
from medical_mirror_orchestrator.orchestrator.workflow.engine import WorkflowEngine
from medical_mirror_orchestrator.orchestrator.workflow.errors import InvalidWorkflowError
from medical_mirror_orchestrator.orchestrator.workflow.executor import StepExecutor
from medical_mirror_orchestrator.orchestrator.workflow.models import (
    Step,
    StepType,
    Workflow,
    WorkflowResult,
)
from medical_mirror_orchestrator.orchestrator.workflow.notifications import (
    Notifier,
    NullNotifier,
    TeamHubNotifier,
)

logger = logging.getLogger(__name__)


def build_dispatchers(
    settings: OrchestratorSettings, *, http: httpx.AsyncClient, hub: TeamHub
) -> dict[StepType, ServiceDispatcher]:
    return {
        StepType.OBSERVER: ObserverDispatcher(http=http, base_url=settings.observer_url),
        StepType.BROWSER: BrowserDispatcher(http=http, hub_http_url=settings.claude_team_http_url),
        StepType.CLAUDE_TEAM: TeamDispatcher(
            hub=hub, http=http, hub_http_url=settings.claude_team_http_url
        ),
        StepType.SCC: SccDispatcher(
            http=http, app_url=settings.scc_app_url, sentinel_url=settings.scc_sentinel_url
        ),
    }


class Orchestrator:
    """Entry point for running workflows against the Medical Mirror collaborators.

    Collaborator handles can be injected (tests pass an `httpx.AsyncClient` over a
    mock transport and an in-memory hub); otherwise they are built from settings
    and owned, i.e. closed by `close()`.
    """

    def __init__(
        self,
        settings: OrchestratorSettings | None = None,
        *,
        http: httpx.AsyncClient | None = None,
        hub: TeamHub | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        self.settings = settings or OrchestratorSettings()

        self._owns_http = http is None
        self.http = http or httpx.AsyncClient(
            timeout=self.settings.request_timeout_seconds,
            headers={"User-Agent": f"medical-mirror-orchestrator/{__version__}"},
        )
        self.hub: TeamHub = hub or TeamHubClient(
            url=self.settings.claude_team_hub_url,
            window_name=self.settings.hub_window_name,
            reconnect_seconds=self.settings.hub_reconnect_seconds,
        )

        self.executor = StepExecutor(
            dispatchers=build_dispatchers(self.settings, http=self.http, hub=self.hub),
            timeout_seconds=self.settings.step_timeout_seconds,
        )
        # Settings-built hubs only connect when enabled; injected hubs are the caller's.
        if notifier is None:
            enabled = hub is not None or self.settings.hub_enabled
            notifier = TeamHubNotifier(self.hub) if enabled else NullNotifier()
        self.notifier = notifier
        self.engine = WorkflowEngine(executor=self.executor, notifier=self.notifier)
        self.prober = ServiceHealthProber.from_settings(self.settings, http=self.http, hub=self.hub)

    async def start(self) -> None:
        if self.settings.hub_enabled and isinstance(self.hub, TeamHubClient):
            await self.hub.connect()
        logger.info("Orchestrator started", extra={"hub_enabled": self.settings.hub_enabled})

    async def close(self) -> None:
        if isinstance(self.hub, TeamHubClient):
            await self.hub.close()
        if self._owns_http:
            await self.http.aclose()

    async def __aenter__(self) -> Orchestrator:
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    def resolve_workflow(
        self,
        *,
        workflow_id: str | None = None,
        workflow: Workflow | Mapping[str, Any] | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> Workflow:
        """Pick a predefined workflow or validate an inline one, seeded with `context`.

        Raises:
            UnknownWorkflow: `workflow_id` is not in the catalog.
            InvalidWorkflowError: neither argument given.
            pydantic.ValidationError: the inline definition is malformed.
        """

        if workflow_id:
            return get_workflow(workflow_id, context)
        if workflow is None:
            raise InvalidWorkflowError("Either workflowId or workflow object required")
        if not isinstance(workflow, Workflow):
            workflow = Workflow.model_validate(dict(workflow))
        return workflow.with_context(context)

    async def run(self, workflow: Workflow) -> WorkflowResult:
        """Validate eagerly, then execute. Configuration errors raise before any step runs."""

        self.executor.validate(workflow)
        return await self.engine.execute(workflow)

    async def run_step(self, step: Step, context: Mapping[str, Any] | None = None) -> WorkflowResult:
        workflow = Workflow(name=f"Single Step: {step.name}", steps=(step,), context=dict(context or {}))
        return await self.run(workflow)

    async def services_health(self) -> dict[str, ServiceStatus]:
        return await self.prober.probe()
