"""Claude Team hub dispatcher.

`broadcast` and `askTeam` go out over the persistent hub socket and return as
soon as the message is sent; answers to a query arrive later on the socket and
are not part of the step result. `getStatus` is a plain HTTP call.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

import httpx
from pydantic import BaseModel

from medical_mirror_orchestrator.orchestrator.workflow.errors import RemoteCallError, UnknownAction

from .base import parse_params, request_json
from .hub_client import TeamHub

STATUS_PATH = "/status"


class TeamAction(str, Enum):
    BROADCAST = "broadcast"
    ASK_TEAM = "askTeam"
    GET_STATUS = "getStatus"


class BroadcastParams(BaseModel):
    message: str
    category: str = "update"


class AskTeamParams(BaseModel):
    question: str
    target: str | None = None


class TeamDispatcher:
    service = "claudeTeam"

    def __init__(self, *, hub: TeamHub, http: httpx.AsyncClient, hub_http_url: str) -> None:
        self._hub = hub
        self._http = http
        self._status_url = f"{hub_http_url.rstrip('/')}{STATUS_PATH}"

    def supports(self, action: str | None) -> bool:
        return action in {a.value for a in TeamAction}

    async def dispatch(self, action: str | None, params: dict[str, Any]) -> Any:
        try:
            kind = TeamAction(action)
        except ValueError:
            raise UnknownAction(self.service, action) from None

        if kind is TeamAction.BROADCAST:
            broadcast = parse_params(BroadcastParams, params, where="claudeTeam.broadcast")
            if not await self._hub.broadcast(broadcast.message, broadcast.category):
                raise RemoteCallError(self.service, "claudeTeam: broadcast not sent (hub not connected)")
            return {"broadcast": True}
        if kind is TeamAction.ASK_TEAM:
            ask = parse_params(AskTeamParams, params, where="claudeTeam.askTeam")
            if not await self._hub.ask(ask.question, ask.target):
                raise RemoteCallError(self.service, "claudeTeam: query not sent (hub not connected)")
            return {"asked": True}
        if kind is TeamAction.GET_STATUS:
            return await request_json(self._http, "GET", self._status_url, service=self.service)
        raise UnknownAction(self.service, action)
