"""WebSocket client for the Claude Team coordination hub.

The hub links the Claude windows working on the Medical Mirror projects. This
process registers as one window, can broadcast to all of them and can send
queries; it answers `status_request` messages itself.

Connection state is owned by a `TeamHubClient` instance (not module globals) and
handed to the dispatchers, the notifier and the health prober explicitly.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import time
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, Protocol

from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import ConnectionClosed, WebSocketException

logger = logging.getLogger(__name__)

DEFAULT_CAPABILITIES: tuple[str, ...] = ("telemetry", "analysis", "recommendations")

Connector = Callable[[str], Awaitable[ClientConnection]]


class TeamHub(Protocol):
    """What the rest of the orchestrator needs from a hub connection."""

    @property
    def is_connected(self) -> bool: ...

    async def send_message(self, message: dict[str, Any]) -> bool: ...

    async def broadcast(self, content: str, category: str = "update") -> bool: ...

    async def ask(self, question: str, target: str | None = None) -> bool: ...


class TeamHubClient:
    def __init__(
        self,
        *,
        url: str,
        window_name: str,
        reconnect_seconds: float = 5.0,
        open_timeout_seconds: float = 10.0,
        capabilities: Sequence[str] = DEFAULT_CAPABILITIES,
        connector: Connector | None = None,
    ) -> None:
        self._url = url
        self._window_name = window_name
        self._reconnect_seconds = reconnect_seconds
        self._open_timeout_seconds = open_timeout_seconds
        self._capabilities = list(capabilities)
        self._connector = connector or self._default_connector

        self._ws: ClientConnection | None = None
        self._connected = False
        self._closing = False
        self._reader: asyncio.Task[None] | None = None
        self._reconnect_task: asyncio.Task[None] | None = None

    @property
    def is_connected(self) -> bool:
        return self._connected

    @property
    def window_name(self) -> str:
        return self._window_name

    def connection_status(self) -> dict[str, object]:
        return {"connected": self._connected, "hubUrl": self._url, "windowName": self._window_name}

    async def _default_connector(self, url: str) -> ClientConnection:
        return await connect(url, open_timeout=self._open_timeout_seconds)

    # ------------------------------------------------------------------
    # Connection management
    # ------------------------------------------------------------------

    async def connect(self) -> bool:
        """Open the hub connection and register this window.

        Returns False (and schedules a reconnect) when the hub is unreachable.
        """

        if self._connected:
            logger.debug("Already connected to hub", extra={"hub_url": self._url})
            return True

        self._closing = False
        logger.info("Connecting to Claude Team hub", extra={"hub_url": self._url})
        try:
            ws = await self._connector(self._url)
        except (OSError, TimeoutError, WebSocketException) as e:
            logger.warning(
                "Claude Team hub unavailable", extra={"hub_url": self._url, "error": str(e)}
            )
            self._schedule_reconnect()
            return False

        self._ws = ws
        self._connected = True
        logger.info("Connected to Claude Team hub", extra={"hub_url": self._url})

        await self.send_message(
            {
                "type": "register",
                "windowName": self._window_name,
                "projectPath": os.getcwd(),
                "capabilities": self._capabilities,
            }
        )
        self._reader = asyncio.create_task(self._listen(ws), name="claude-team-hub-reader")
        return True

    async def close(self) -> None:
        """Disconnect and stop reconnecting."""

        self._closing = True
        if self._reconnect_task is not None:
            self._reconnect_task.cancel()
            self._reconnect_task = None

        ws, self._ws = self._ws, None
        self._connected = False
        if ws is not None:
            await ws.close()

        if self._reader is not None:
            self._reader.cancel()
            try:
                await self._reader
            except asyncio.CancelledError:
                pass
            self._reader = None
        logger.info("Disconnected from Claude Team hub")

    def _schedule_reconnect(self) -> None:
        if self._closing or self._reconnect_seconds <= 0:
            return
        if self._reconnect_task is not None and not self._reconnect_task.done():
            return
        self._reconnect_task = asyncio.create_task(
            self._reconnect_later(), name="claude-team-hub-reconnect"
        )

    async def _reconnect_later(self) -> None:
        await asyncio.sleep(self._reconnect_seconds)
        self._reconnect_task = None
        await self.connect()

    # ------------------------------------------------------------------
    # Inbound messages
    # ------------------------------------------------------------------

    async def _listen(self, ws: ClientConnection) -> None:
        try:
            async for raw in ws:
                await self._handle_raw(raw)
        except ConnectionClosed:
            pass
        finally:
            if self._ws is ws:
                self._ws = None
                self._connected = False
                if not self._closing:
                    logger.warning("Disconnected from Claude Team hub", extra={"hub_url": self._url})
                    self._schedule_reconnect()

    async def _handle_raw(self, raw: str | bytes) -> None:
        try:
            message = json.loads(raw)
        except (TypeError, ValueError) as e:
            logger.error("Failed to parse hub message", extra={"error": str(e)})
            return
        if not isinstance(message, dict):
            logger.error("Ignoring non-object hub message")
            return

        kind = message.get("type")
        if kind == "broadcast":
            logger.info(
                "Hub broadcast received",
                extra={"from_window": message.get("fromWindow"), "content": message.get("content")},
            )
        elif kind == "status_request":
            await self.send_message({"type": "status", "status": self._status_payload()})
        else:
            logger.debug("Unhandled hub message", extra={"hub_message_type": kind})

    def _status_payload(self) -> dict[str, object]:
        return {
            "project": self._window_name,
            "connected": self._connected,
            "capabilities": self._capabilities,
        }

    # ------------------------------------------------------------------
    # Outbound messages
    # ------------------------------------------------------------------

    async def send_message(self, message: dict[str, Any]) -> bool:
        """Send one message; returns False instead of raising when undeliverable."""

        ws = self._ws
        if ws is None or not self._connected:
            logger.warning(
                "Cannot send message - not connected to hub",
                extra={"hub_message_type": message.get("type")},
            )
            return False

        payload = {**message, "fromWindow": self._window_name, "timestamp": int(time.time() * 1000)}
        try:
            await ws.send(json.dumps(payload, ensure_ascii=False, default=str))
        except (ConnectionClosed, OSError) as e:
            logger.error("Failed to send hub message", extra={"error": str(e)})
            return False
        return True

    async def broadcast(self, content: str, category: str = "update") -> bool:
        return await self.send_message({"type": "broadcast", "content": content, "category": category})

    async def ask(self, question: str, target: str | None = None) -> bool:
        return await self.send_message({"type": "query", "query": question, "targetWindow": target})
