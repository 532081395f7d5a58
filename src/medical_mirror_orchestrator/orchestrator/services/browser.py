"""Browser bridge dispatcher.

The browser bridge has no endpoint of its own: commands are posted to the team
hub's webhook as `BROWSER_COMMAND` events and the bridge (an MCP server driving
the Chrome extension) picks them up from there. Any action name is forwarded.
"""

from __future__ import annotations

from typing import Any

import httpx

from medical_mirror_orchestrator.orchestrator.workflow.errors import UnknownAction

from .base import request_json

WEBHOOK_PATH = "/webhook"
COMMAND_SOURCE = "orchestrator"


class BrowserDispatcher:
    service = "browser"

    def __init__(self, *, http: httpx.AsyncClient, hub_http_url: str) -> None:
        self._http = http
        self._webhook_url = f"{hub_http_url.rstrip('/')}{WEBHOOK_PATH}"

    def supports(self, action: str | None) -> bool:
        return bool(action)

    async def dispatch(self, action: str | None, params: dict[str, Any]) -> Any:
        if not action:
            raise UnknownAction(self.service, action)
        payload = {
            "source": COMMAND_SOURCE,
            "event": {"type": "BROWSER_COMMAND", "action": action, "params": params},
        }
        return await request_json(
            self._http, "POST", self._webhook_url, service=self.service, json=payload
        )
