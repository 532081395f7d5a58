"""SCC clinical apps dispatcher (feedback to the app, health of the sentinel)."""

from __future__ import annotations

from enum import Enum
from typing import Any

import httpx

from medical_mirror_orchestrator.orchestrator.workflow.errors import UnknownAction

from .base import request_json

FEEDBACK_PATH = "/api/debug/feedback"
HEALTH_PATH = "/health"


class SccAction(str, Enum):
    SEND_FEEDBACK = "sendFeedback"
    GET_HEALTH = "getHealth"


class SccDispatcher:
    service = "scc"

    def __init__(self, *, http: httpx.AsyncClient, app_url: str, sentinel_url: str) -> None:
        self._http = http
        self._app_url = app_url.rstrip("/")
        self._sentinel_url = sentinel_url.rstrip("/")

    def supports(self, action: str | None) -> bool:
        return action in {a.value for a in SccAction}

    async def dispatch(self, action: str | None, params: dict[str, Any]) -> Any:
        try:
            kind = SccAction(action)
        except ValueError:
            raise UnknownAction(self.service, action) from None

        if kind is SccAction.SEND_FEEDBACK:
            return await request_json(
                self._http,
                "POST",
                f"{self._app_url}{FEEDBACK_PATH}",
                service=self.service,
                json=params,
            )
        if kind is SccAction.GET_HEALTH:
            return await request_json(
                self._http, "GET", f"{self._sentinel_url}{HEALTH_PATH}", service=self.service
            )
        raise UnknownAction(self.service, action)
