"""Internal realtime websocket runtime.

Speaks the Phoenix channel protocol (JSON frames, ``vsn=1.0.0``) used by
the hosted realtime service. One socket is shared by every subscription
of a client; each subscription joins its own topic so that two consumers
of the same table never share (or close) each other's channel.
"""

from __future__ import annotations

import asyncio
import contextlib
import itertools
import json
import logging
from datetime import datetime
from typing import Any

import aiohttp
from pydantic import ValidationError

from pysantiye._constants import (
    PHX_CLOSE,
    PHX_ERROR,
    PHX_HEARTBEAT,
    PHX_JOIN,
    PHX_LEAVE,
    PHX_REPLY,
    PHX_TOPIC,
    POSTGRES_CHANGES,
    REALTIME_VSN,
    SYSTEM_EVENT,
)
from pysantiye._redact import redact_for_log
from pysantiye.backend import ChangeHandler
from pysantiye.config import SantiyeConfig
from pysantiye.exceptions import SantiyeRealtimeError, SantiyeSubscriptionError
from pysantiye.sync.events import ChangeEvent, ChangeType, RowFilter


def _parse_commit_timestamp(value: Any) -> datetime | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def parse_postgres_change(payload: dict[str, Any]) -> ChangeEvent | None:
    """Convert a ``postgres_changes`` message payload into a :class:`ChangeEvent`.

    Returns ``None`` for payloads that do not describe a row change.
    """
    data = payload.get("data")
    if not isinstance(data, dict):
        return None

    type_value = str(data.get("type") or data.get("eventType") or "").upper()
    try:
        change_type = ChangeType(type_value)
    except ValueError:
        return None

    table = data.get("table")
    record = data.get("record")
    old_record = data.get("old_record")
    try:
        return ChangeEvent(
            resource=str(table or ""),
            type=change_type,
            record=record if isinstance(record, dict) else {},
            old_record=old_record if isinstance(old_record, dict) else {},
            commit_timestamp=_parse_commit_timestamp(data.get("commit_timestamp")),
        )
    except ValidationError:
        return None


def build_join_payload(
    resource: str,
    *,
    schema: str,
    access_token: str,
    row_filter: RowFilter | None = None,
) -> dict[str, Any]:
    """Join payload subscribing to every change on one table."""
    change_config: dict[str, str] = {"event": "*", "schema": schema, "table": resource}
    if row_filter is not None:
        change_config["filter"] = row_filter.to_query()
    return {
        "config": {
            "broadcast": {"ack": False, "self": False},
            "presence": {"key": ""},
            "postgres_changes": [change_config],
            "private": False,
        },
        "access_token": access_token,
    }


class RealtimeChannel:
    """One joined topic on the realtime socket."""

    def __init__(
        self,
        runtime: RealtimeRuntime,
        *,
        topic: str,
        resource: str,
        on_event: ChangeHandler,
        logger: logging.Logger,
    ) -> None:
        self._runtime = runtime
        self.topic = topic
        self.resource = resource
        self._on_event = on_event
        self._logger = logger
        self._active = True

    @property
    def is_active(self) -> bool:
        return self._active

    def deliver(self, event: ChangeEvent) -> None:
        if not self._active:
            return
        try:
            self._on_event(event)
        except Exception:
            self._logger.error("Change handler for %s failed", self.topic, exc_info=True)

    def deactivate(self) -> None:
        self._active = False

    async def close(self) -> None:
        await self._runtime.leave(self)


class RealtimeRuntime:
    """Asyncio websocket runtime multiplexing change channels by topic."""

    def __init__(
        self,
        *,
        config: SantiyeConfig,
        http_session: aiohttp.ClientSession,
        logger: logging.Logger | None = None,
    ) -> None:
        self._config = config
        self._http = http_session
        self._logger = logger or logging.getLogger(__name__)
        self._ws: aiohttp.ClientWebSocketResponse | None = None
        self._reader: asyncio.Task[None] | None = None
        self._heartbeat: asyncio.Task[None] | None = None
        self._connect_lock = asyncio.Lock()
        self._channels: dict[str, RealtimeChannel] = {}
        self._replies: dict[str, asyncio.Future[dict[str, Any]]] = {}
        self._refs = itertools.count(1)
        self._topics = itertools.count(1)

    @property
    def is_running(self) -> bool:
        """Whether the websocket is open."""
        return self._ws is not None and not self._ws.closed

    @property
    def channel_count(self) -> int:
        return len(self._channels)

    def _next_ref(self) -> str:
        return str(next(self._refs))

    async def _ensure_connected(self) -> aiohttp.ClientWebSocketResponse:
        async with self._connect_lock:
            ws = self._ws
            if ws is not None and not ws.closed:
                return ws

            self._logger.debug("Realtime connect requested url=%s", self._config.realtime_url)
            try:
                ws = await self._http.ws_connect(
                    self._config.realtime_url,
                    params={"apikey": self._config.api_key, "vsn": REALTIME_VSN},
                    autoping=True,
                )
            except (aiohttp.ClientError, TimeoutError) as exc:
                raise SantiyeRealtimeError(f"Realtime connect failed: {exc}") from exc

            self._ws = ws
            loop = asyncio.get_running_loop()
            self._reader = loop.create_task(self._read_loop(ws), name="pysantiye-realtime-reader")
            self._heartbeat = loop.create_task(self._heartbeat_loop(ws), name="pysantiye-realtime-heartbeat")
            self._logger.debug("Realtime socket connected")
            return ws

    async def _send(self, ws: aiohttp.ClientWebSocketResponse, message: dict[str, Any]) -> None:
        self._logger.debug("Realtime send %s", redact_for_log(message))
        try:
            await ws.send_str(json.dumps(message))
        except (aiohttp.ClientError, ConnectionError, RuntimeError) as exc:
            raise SantiyeRealtimeError(f"Realtime send failed: {exc}") from exc

    async def subscribe(
        self,
        resource: str,
        on_event: ChangeHandler,
        *,
        row_filter: RowFilter | None = None,
    ) -> RealtimeChannel:
        """Join a fresh topic for *resource* and wait for the server to accept it."""
        ws = await self._ensure_connected()
        topic = f"realtime:{resource}-changes-{next(self._topics)}"
        channel = RealtimeChannel(
            self,
            topic=topic,
            resource=resource,
            on_event=on_event,
            logger=self._logger,
        )
        ref = self._next_ref()
        reply_future: asyncio.Future[dict[str, Any]] = asyncio.get_running_loop().create_future()
        self._replies[ref] = reply_future
        self._channels[topic] = channel

        joined = False
        join_sent = False
        try:
            await self._send(
                ws,
                {
                    "topic": topic,
                    "event": PHX_JOIN,
                    "payload": build_join_payload(
                        resource,
                        schema=self._config.schema,
                        access_token=self._config.bearer_token,
                        row_filter=row_filter,
                    ),
                    "ref": ref,
                    "join_ref": ref,
                },
            )
            join_sent = True
            try:
                reply = await asyncio.wait_for(reply_future, self._config.join_timeout)
            except TimeoutError as exc:
                raise SantiyeSubscriptionError(f"Join {topic} timed out", topic=topic) from exc

            if reply.get("status") != "ok":
                response = reply.get("response")
                reason = response.get("reason") if isinstance(response, dict) else response
                raise SantiyeSubscriptionError(f"Join {topic} rejected: {reason}", topic=topic)
            joined = True
        finally:
            self._replies.pop(ref, None)
            if not joined:
                channel.deactivate()
                self._channels.pop(topic, None)
                if join_sent:
                    # The server may still hold the topic after a cancelled or timed-out join.
                    await asyncio.shield(self._send_leave(topic))

        self._logger.debug("Realtime joined topic=%s", topic)
        return channel

    async def leave(self, channel: RealtimeChannel) -> None:
        """Leave *channel*'s topic. Leaving twice is a no-op."""
        if not channel.is_active:
            return
        channel.deactivate()
        self._channels.pop(channel.topic, None)
        await self._send_leave(channel.topic)
        self._logger.debug("Realtime left topic=%s", channel.topic)

    async def _send_leave(self, topic: str) -> None:
        ws = self._ws
        if ws is None or ws.closed:
            return
        try:
            await self._send(ws, {"topic": topic, "event": PHX_LEAVE, "payload": {}, "ref": self._next_ref()})
        except SantiyeRealtimeError:
            self._logger.debug("Realtime leave failed topic=%s", topic, exc_info=True)

    async def stop(self) -> None:
        """Close the socket and deactivate every channel."""
        ws = self._ws
        self._ws = None
        tasks = [task for task in (self._reader, self._heartbeat) if task is not None]
        self._reader = None
        self._heartbeat = None

        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task

        if ws is not None and not ws.closed:
            await ws.close()
        self._drop_all("Realtime runtime stopped")
        self._logger.debug("Realtime runtime stopped")

    def _drop_all(self, reason: str) -> None:
        for channel in self._channels.values():
            channel.deactivate()
        self._channels.clear()
        for future in self._replies.values():
            if not future.done():
                future.set_exception(SantiyeRealtimeError(reason))
        self._replies.clear()

    async def _heartbeat_loop(self, ws: aiohttp.ClientWebSocketResponse) -> None:
        while not ws.closed:
            await asyncio.sleep(self._config.heartbeat_interval)
            try:
                await self._send(
                    ws,
                    {"topic": PHX_TOPIC, "event": PHX_HEARTBEAT, "payload": {}, "ref": self._next_ref()},
                )
            except SantiyeRealtimeError:
                self._logger.debug("Realtime heartbeat failed", exc_info=True)
                return

    async def _read_loop(self, ws: aiohttp.ClientWebSocketResponse) -> None:
        try:
            async for msg in ws:
                if msg.type == aiohttp.WSMsgType.TEXT:
                    self.handle_text(msg.data)
                elif msg.type == aiohttp.WSMsgType.ERROR:
                    self._logger.warning("Realtime socket error: %s", ws.exception())
                    break
        finally:
            if self._ws is ws:
                # Subscriptions are not reopened; consumers keep their last state.
                self._logger.warning("Realtime socket closed; %d channel(s) dropped", len(self._channels))
                self._ws = None
                self._drop_all("Realtime socket closed")

    def handle_text(self, text: str) -> None:
        """Dispatch one incoming frame."""
        try:
            message = json.loads(text)
        except json.JSONDecodeError:
            self._logger.debug("Realtime frame is not JSON: %s", text[:200])
            return
        if not isinstance(message, dict):
            return

        event = message.get("event")
        topic = message.get("topic")
        payload = message.get("payload")
        if not isinstance(payload, dict):
            payload = {}

        if event == PHX_REPLY:
            ref = message.get("ref")
            future = self._replies.get(str(ref)) if ref is not None else None
            if future is not None and not future.done():
                future.set_result(payload)
            return

        channel = self._channels.get(topic) if isinstance(topic, str) else None
        if channel is None:
            return

        if event == POSTGRES_CHANGES:
            change = parse_postgres_change(payload)
            if change is None:
                self._logger.debug("Ignoring unparseable change on %s: %s", topic, redact_for_log(payload))
                return
            channel.deliver(change)
        elif event == SYSTEM_EVENT and payload.get("status") == "error":
            self._logger.warning("Realtime channel %s error: %s", topic, payload.get("message"))
        elif event in (PHX_ERROR, PHX_CLOSE):
            self._logger.warning("Realtime channel %s closed by server (%s)", topic, event)
            channel.deactivate()
            self._channels.pop(topic, None)
