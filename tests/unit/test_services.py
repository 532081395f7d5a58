"""Unit tests for the collaborator dispatchers.

Requests go through an `httpx.MockTransport`, so these tests pin down the wire
shape of each action and how failures are classified.
"""

from __future__ import annotations

import httpx
import pytest

from medical_mirror_orchestrator.orchestrator.services import (
    BrowserDispatcher,
    ObserverDispatcher,
    SccDispatcher,
    TeamDispatcher,
)
from medical_mirror_orchestrator.orchestrator.workflow.errors import (
    RemoteCallError,
    StepError,
    UnknownAction,
)


@pytest.fixture
def observer(http) -> ObserverDispatcher:
    return ObserverDispatcher(http=http, base_url="http://observer.test/")


@pytest.mark.asyncio
async def test_observer_analyze_posts_params(observer, collaborators) -> None:
    collaborators.add_json("POST", "http://observer.test/api/analyze", {"result": {"parsed": {}}})

    body = await observer.dispatch("analyze", {"provider": "claude", "maxEvents": 10})

    assert body == {"result": {"parsed": {}}}
    assert collaborators.last_json() == {"provider": "claude", "maxEvents": 10}


@pytest.mark.asyncio
async def test_observer_get_events_sends_string_query(observer, collaborators) -> None:
    collaborators.add_json("GET", "http://observer.test/api/events", {"events": [], "total": 0})

    await observer.dispatch("getEvents", {"limit": 100, "success": False})

    request = collaborators.requests[-1]
    assert request.url.params["limit"] == "100"
    assert request.url.params["success"] == "false"


@pytest.mark.asyncio
async def test_observer_get_references_quotes_source(observer, collaborators) -> None:
    collaborators.add_json("GET", "http://observer.test/api/references", {"all": True})
    collaborators.add_json("GET", "http://observer.test/api/references/athena%2Fehr", {"one": True})

    assert await observer.dispatch("getReferences", {}) == {"all": True}
    assert await observer.dispatch("getReferences", {"source": "athena/ehr"}) == {"one": True}


@pytest.mark.asyncio
async def test_observer_store_event(observer, collaborators) -> None:
    collaborators.add_json(
        "POST", "http://observer.test/api/events", {"eventId": "e1", "storedAt": "now"}
    )

    body = await observer.dispatch("storeEvent", {"type": "OBSERVER_TELEMETRY"})

    assert body["eventId"] == "e1"
    assert collaborators.requests[-1].method == "POST"


@pytest.mark.asyncio
async def test_observer_rejects_unknown_action(observer, collaborators) -> None:
    assert observer.supports("bogus") is False
    with pytest.raises(UnknownAction, match="Unknown observer action: bogus"):
        await observer.dispatch("bogus", {})
    assert collaborators.requests == []


@pytest.mark.asyncio
async def test_error_status_is_a_remote_call_error(observer, collaborators) -> None:
    collaborators.add_json("POST", "http://observer.test/api/analyze", {"detail": "x"}, status_code=503)

    with pytest.raises(RemoteCallError) as excinfo:
        await observer.dispatch("analyze", {})

    assert excinfo.value.status_code == 503
    assert excinfo.value.service == "observer"
    assert "HTTP 503" in str(excinfo.value)


@pytest.mark.asyncio
async def test_error_payload_is_a_remote_call_error(observer, collaborators) -> None:
    collaborators.add_json("POST", "http://observer.test/api/analyze", {"error": "No events"})

    with pytest.raises(RemoteCallError, match="observer error: No events"):
        await observer.dispatch("analyze", {})


@pytest.mark.asyncio
async def test_non_json_body_is_a_remote_call_error(observer, collaborators) -> None:
    collaborators.add(
        "POST", "http://observer.test/api/analyze", lambda _r: httpx.Response(200, text="<html>")
    )

    with pytest.raises(RemoteCallError, match="non-JSON"):
        await observer.dispatch("analyze", {})


@pytest.mark.asyncio
async def test_transport_failures_are_remote_call_errors(observer, collaborators) -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    def stall(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("read timed out", request=request)

    collaborators.add("POST", "http://observer.test/api/analyze", refuse)
    with pytest.raises(RemoteCallError, match="failed"):
        await observer.dispatch("analyze", {})

    collaborators.add("POST", "http://observer.test/api/analyze", stall)
    with pytest.raises(RemoteCallError, match="timed out"):
        await observer.dispatch("analyze", {})


@pytest.mark.asyncio
async def test_browser_forwards_any_action_to_the_webhook(http, collaborators) -> None:
    collaborators.add_json("POST", "http://hub.test/webhook", {"queued": True})
    browser = BrowserDispatcher(http=http, hub_http_url="http://hub.test")

    body = await browser.dispatch("navigate", {"url": "https://athena.test"})

    assert body == {"queued": True}
    assert collaborators.last_json() == {
        "source": "orchestrator",
        "event": {
            "type": "BROWSER_COMMAND",
            "action": "navigate",
            "params": {"url": "https://athena.test"},
        },
    }
    assert browser.supports("athenaCapture") is True
    assert browser.supports(None) is False


@pytest.mark.asyncio
async def test_scc_actions(http, collaborators) -> None:
    collaborators.add_json("POST", "http://scc-app.test/api/debug/feedback", {"received": True})
    collaborators.add_json("GET", "http://sentinel.test/health", {"status": "ok"})
    scc = SccDispatcher(http=http, app_url="http://scc-app.test", sentinel_url="http://sentinel.test")

    assert await scc.dispatch("sendFeedback", {"priority": "high"}) == {"received": True}
    assert collaborators.last_json() == {"priority": "high"}
    assert await scc.dispatch("getHealth", {}) == {"status": "ok"}

    with pytest.raises(UnknownAction):
        await scc.dispatch("reboot", {})


@pytest.fixture
def team(http, fake_hub) -> TeamDispatcher:
    return TeamDispatcher(hub=fake_hub, http=http, hub_http_url="http://hub.test")


@pytest.mark.asyncio
async def test_team_broadcast_and_ask_go_over_the_hub(team, fake_hub, collaborators) -> None:
    assert await team.dispatch("broadcast", {"message": "hello"}) == {"broadcast": True}
    assert await team.dispatch("askTeam", {"question": "status?", "target": "scc"}) == {
        "asked": True
    }

    assert fake_hub.sent == [
        {"type": "broadcast", "content": "hello", "category": "update"},
        {"type": "query", "query": "status?", "targetWindow": "scc"},
    ]
    assert collaborators.requests == []


@pytest.mark.asyncio
async def test_team_broadcast_fails_when_hub_is_down(team, fake_hub) -> None:
    fake_hub.connected = False

    with pytest.raises(RemoteCallError, match="not connected"):
        await team.dispatch("broadcast", {"message": "hello"})


@pytest.mark.asyncio
async def test_team_broadcast_requires_a_message(team) -> None:
    with pytest.raises(StepError, match="claudeTeam.broadcast"):
        await team.dispatch("broadcast", {"category": "update"})


@pytest.mark.asyncio
async def test_team_get_status_uses_http(team, collaborators) -> None:
    collaborators.add_json("GET", "http://hub.test/status", {"windows": 3})

    assert await team.dispatch("getStatus", {}) == {"windows": 3}
