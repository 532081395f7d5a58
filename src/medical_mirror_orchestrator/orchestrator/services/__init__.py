"""Collaborator dispatchers, the team hub client and health probing."""

from __future__ import annotations

from medical_mirror_orchestrator.orchestrator.services.base import ServiceDispatcher
from medical_mirror_orchestrator.orchestrator.services.browser import BrowserDispatcher
from medical_mirror_orchestrator.orchestrator.services.health import (
    ServiceHealthProber,
    ServiceStatus,
)
from medical_mirror_orchestrator.orchestrator.services.hub_client import TeamHub, TeamHubClient
from medical_mirror_orchestrator.orchestrator.services.observer import ObserverDispatcher
from medical_mirror_orchestrator.orchestrator.services.scc import SccDispatcher
from medical_mirror_orchestrator.orchestrator.services.team import TeamDispatcher

__all__ = [
    "BrowserDispatcher",
    "ObserverDispatcher",
    "SccDispatcher",
    "ServiceDispatcher",
    "ServiceHealthProber",
    "ServiceStatus",
    "TeamDispatcher",
    "TeamHub",
    "TeamHubClient",
]
