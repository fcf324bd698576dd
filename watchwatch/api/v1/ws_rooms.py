from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from watchwatch.realtime.hub import Connection, ConnectionHub
from watchwatch.services.room_service import RoomService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("/ws")
async def room_ws(websocket: WebSocket):
    hub: ConnectionHub = websocket.app.state.hub
    service: RoomService = websocket.app.state.room_service

    await websocket.accept()

    conn = Connection(websocket)
    hub.register(conn)
    writer = asyncio.create_task(conn.pump())
    logger.info("connection %s opened", conn.id)

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000))
            # binary frames are not part of the protocol; dispatch rejects them
            raw = message.get("text")
            service.dispatch(conn, raw if raw is not None else message.get("bytes"))
    except WebSocketDisconnect:
        pass
    finally:
        service.disconnect(conn)
        hub.unregister(conn.id)
        conn.close()
        writer.cancel()
