from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

from .events import WorkflowEvent

if TYPE_CHECKING:
    from medical_mirror_orchestrator.orchestrator.services.hub_client import TeamHub

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """One-way sink for workflow lifecycle events."""

    async def notify(self, event: WorkflowEvent) -> None: ...


class NullNotifier:
    async def notify(self, event: WorkflowEvent) -> None:
        return None


class TeamHubNotifier:
    """Broadcast lifecycle events to every window connected to the team hub.

    Delivery is best-effort: a disconnected hub is logged at debug and dropped.
    """

    def __init__(self, hub: TeamHub) -> None:
        self._hub = hub

    async def notify(self, event: WorkflowEvent) -> None:
        sent = await self._hub.broadcast(event.message, event.category.value)
        if not sent:
            logger.debug(
                "Workflow notification not delivered",
                extra={"event": event.kind.value, "workflow": event.workflow},
            )
