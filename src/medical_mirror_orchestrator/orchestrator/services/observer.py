"""Observer telemetry server dispatcher (events, AI analysis, references)."""

from __future__ import annotations

from enum import Enum
from typing import Any
from urllib.parse import quote

import httpx

from medical_mirror_orchestrator.orchestrator.workflow.errors import UnknownAction
from medical_mirror_orchestrator.orchestrator.workflow.interpolation import stringify

from .base import request_json

EVENTS_PATH = "/api/events"
ANALYZE_PATH = "/api/analyze"
REFERENCES_PATH = "/api/references"


class ObserverAction(str, Enum):
    ANALYZE = "analyze"
    GET_EVENTS = "getEvents"
    GET_REFERENCES = "getReferences"
    STORE_EVENT = "storeEvent"


class ObserverDispatcher:
    service = "observer"

    def __init__(self, *, http: httpx.AsyncClient, base_url: str) -> None:
        self._http = http
        self._base_url = base_url.rstrip("/")

    def supports(self, action: str | None) -> bool:
        return action in {a.value for a in ObserverAction}

    async def dispatch(self, action: str | None, params: dict[str, Any]) -> Any:
        try:
            kind = ObserverAction(action)
        except ValueError:
            raise UnknownAction(self.service, action) from None

        if kind is ObserverAction.ANALYZE:
            return await self._call("POST", ANALYZE_PATH, json=params)
        if kind is ObserverAction.GET_EVENTS:
            query = {key: stringify(value) for key, value in params.items()}
            return await self._call("GET", EVENTS_PATH, params=query)
        if kind is ObserverAction.GET_REFERENCES:
            source = stringify(params.get("source") or "")
            path = f"{REFERENCES_PATH}/{quote(source, safe='')}" if source else REFERENCES_PATH
            return await self._call("GET", path)
        if kind is ObserverAction.STORE_EVENT:
            return await self._call("POST", EVENTS_PATH, json=params)
        raise UnknownAction(self.service, action)

    async def _call(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, str] | None = None,
    ) -> Any:
        return await request_json(
            self._http,
            method,
            f"{self._base_url}{path}",
            service=self.service,
            json=json,
            params=params,
        )
