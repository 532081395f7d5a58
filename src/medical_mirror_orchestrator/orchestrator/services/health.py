"""Liveness of the collaborators, for operators (the engine never consults it)."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from enum import Enum

import httpx

from medical_mirror_orchestrator.orchestrator.config import OrchestratorSettings

from .hub_client import TeamHub

logger = logging.getLogger(__name__)

HUB_SOCKET_SERVICE = "claudeTeamWs"


class ServiceStatus(str, Enum):
    CONNECTED = "connected"
    ERROR = "error"
    OFFLINE = "offline"
    DISCONNECTED = "disconnected"


def overall_status(health: Mapping[str, ServiceStatus]) -> str:
    return "healthy" if all(s is ServiceStatus.CONNECTED for s in health.values()) else "degraded"


class ServiceHealthProber:
    """Probe every collaborator on each call; nothing is cached."""

    def __init__(
        self,
        *,
        http: httpx.AsyncClient,
        endpoints: Mapping[str, str],
        hub: TeamHub | None = None,
        timeout_seconds: float = 5.0,
    ) -> None:
        self._http = http
        self._endpoints = dict(endpoints)
        self._hub = hub
        self._timeout_seconds = timeout_seconds

    @classmethod
    def from_settings(
        cls, settings: OrchestratorSettings, *, http: httpx.AsyncClient, hub: TeamHub | None
    ) -> ServiceHealthProber:
        return cls(
            http=http,
            endpoints=settings.health_endpoints,
            hub=hub,
            timeout_seconds=settings.health_timeout_seconds,
        )

    async def probe(self) -> dict[str, ServiceStatus]:
        names = list(self._endpoints)
        statuses = await asyncio.gather(*(self._probe_http(self._endpoints[n]) for n in names))
        health = dict(zip(names, statuses, strict=True))

        if self._hub is not None:
            health[HUB_SOCKET_SERVICE] = (
                ServiceStatus.CONNECTED if self._hub.is_connected else ServiceStatus.DISCONNECTED
            )
        return health

    async def _probe_http(self, url: str) -> ServiceStatus:
        try:
            response = await self._http.get(url, timeout=self._timeout_seconds)
        except httpx.TransportError as e:
            logger.debug("Liveness probe failed", extra={"url": url, "error": str(e)})
            return ServiceStatus.OFFLINE
        return ServiceStatus.CONNECTED if response.is_success else ServiceStatus.ERROR
