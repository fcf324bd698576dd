from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any, Dict, Iterable

from fastapi import WebSocket
from fastapi.encoders import jsonable_encoder

from watchwatch.schemas.room import User
from watchwatch.schemas.ws import ServerEvent

logger = logging.getLogger(__name__)


def encode(event: ServerEvent) -> dict[str, Any]:
    return {"event": event.EVENT, "data": jsonable_encoder(event)}


class Connection:
    """
    One websocket session.

    Outbound frames go through an unbounded queue drained by pump(), so
    send() never suspends. Delivery is fire-and-forget: no acknowledgement,
    no retry; frames still queued when the socket dies are dropped.
    """

    def __init__(self, websocket: WebSocket | None = None, connection_id: str | None = None):
        self.id = connection_id or uuid.uuid4().hex
        self.websocket = websocket
        # last room/user this connection joined as, used on disconnect
        self.room_id: str | None = None
        self.user: User | None = None
        self._outbox: asyncio.Queue[dict[str, Any] | None] = asyncio.Queue()
        self.closed = False

    def send(self, event: ServerEvent) -> None:
        if self.closed:
            return
        self._outbox.put_nowait(encode(event))

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self._outbox.put_nowait(None)

    async def pump(self) -> None:
        while True:
            payload = await self._outbox.get()
            if payload is None:
                return
            try:
                await self.websocket.send_json(payload)
            except Exception as exc:
                logger.debug("send to %s failed, dropping outbound frames: %s", self.id, exc)
                self.closed = True
                return


class ConnectionHub:
    """Connection registry and the fan-out rules for room events."""

    def __init__(self) -> None:
        self._connections: Dict[str, Connection] = {}

    def register(self, conn: Connection) -> None:
        self._connections[conn.id] = conn

    def unregister(self, connection_id: str) -> None:
        self._connections.pop(connection_id, None)

    def _deliver(self, connection_ids: Iterable[str], event: ServerEvent) -> int:
        sent = 0
        for cid in connection_ids:
            conn = self._connections.get(cid)
            if conn is None:
                continue
            conn.send(event)
            sent += 1
        return sent

    def to_room(self, members: Iterable[str], event: ServerEvent) -> int:
        """Everyone in the room, sender included."""
        return self._deliver(members, event)

    def to_others(self, members: Iterable[str], sender_id: str, event: ServerEvent) -> int:
        """Everyone in the room except the sender."""
        return self._deliver((cid for cid in members if cid != sender_id), event)

    def to_sender(self, conn: Connection, event: ServerEvent) -> None:
        conn.send(event)
