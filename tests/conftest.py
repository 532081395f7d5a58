"""Test configuration and fixtures."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from medical_mirror_orchestrator.orchestrator.config import OrchestratorSettings
from medical_mirror_orchestrator.orchestrator.workflow.errors import UnknownAction

OBSERVER_URL = "http://observer.test"
HUB_HTTP_URL = "http://hub.test"
SCC_APP_URL = "http://scc-app.test"
SCC_SENTINEL_URL = "http://sentinel.test"


class FakeHub:
    """In-memory stand-in for the team hub connection."""

    def __init__(self, *, connected: bool = True) -> None:
        self.connected = connected
        self.sent: list[dict[str, Any]] = []

    @property
    def is_connected(self) -> bool:
        return self.connected

    async def send_message(self, message: dict[str, Any]) -> bool:
        if not self.connected:
            return False
        self.sent.append(message)
        return True

    async def broadcast(self, content: str, category: str = "update") -> bool:
        return await self.send_message({"type": "broadcast", "content": content, "category": category})

    async def ask(self, question: str, target: str | None = None) -> bool:
        return await self.send_message({"type": "query", "query": question, "targetWindow": target})

    @property
    def broadcasts(self) -> list[str]:
        return [m["content"] for m in self.sent if m["type"] == "broadcast"]


class RecordingDispatcher:
    """Dispatcher double that records calls and replays canned results.

    A canned result that is an exception instance is raised instead of returned;
    unscripted actions are rejected the way real dispatchers reject them.
    """

    def __init__(self, service: str, results: dict[str, Any] | None = None) -> None:
        self.service = service
        self.results = dict(results or {})
        self.calls: list[tuple[str | None, dict[str, Any]]] = []

    def supports(self, action: str | None) -> bool:
        return action in self.results

    async def dispatch(self, action: str | None, params: dict[str, Any]) -> Any:
        if action not in self.results:
            raise UnknownAction(self.service, action)
        self.calls.append((action, params))
        result = self.results[action]
        if isinstance(result, BaseException):
            raise result
        return result


Handler = Callable[[httpx.Request], httpx.Response]


class MockCollaborators:
    """Route table for an `httpx.MockTransport`; unmatched requests get a 404."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Handler] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, url: str, handler: Handler) -> None:
        self.routes[(method.upper(), url)] = handler

    def add_json(self, method: str, url: str, body: Any, *, status_code: int = 200) -> None:
        self.add(method, url, lambda _request: httpx.Response(status_code, json=body))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, str(request.url).split("?", 1)[0])
        route = self.routes.get(key)
        if route is None:
            return httpx.Response(404, json={"error": f"no route for {key}"})
        return route(request)

    def last_json(self) -> Any:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def fake_hub() -> FakeHub:
    return FakeHub()


@pytest.fixture
def collaborators() -> MockCollaborators:
    return MockCollaborators()


@pytest.fixture
def http(collaborators: MockCollaborators) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(collaborators.handler))


@pytest.fixture
def settings() -> OrchestratorSettings:
    """Settings pointing every collaborator at the mock transport hosts."""

    return OrchestratorSettings(
        _env_file=None,
        OBSERVER_URL=OBSERVER_URL,
        CLAUDE_TEAM_HTTP=HUB_HTTP_URL,
        CLAUDE_TEAM_HUB="ws://hub.test",
        SCC_APP_URL=SCC_APP_URL,
        SCC_SENTINEL_URL=SCC_SENTINEL_URL,
        CLAUDE_TEAM_ENABLED=False,
    )


@pytest.fixture
def make_dispatcher() -> type[RecordingDispatcher]:
    return RecordingDispatcher


@pytest.fixture
def make_hub() -> type[FakeHub]:
    return FakeHub
