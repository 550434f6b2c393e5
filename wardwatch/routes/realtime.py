"""
Live ward updates over WebSocket.

Frames in both directions are JSON objects: {"event": <name>, "data": <payload>}.

Client -> server:
- join-ward               data: ward number
- leave-ward              data: ward number
- problem-status-update   data: object with wardNumber; re-broadcast verbatim
                          to that ward as problem-updated

Server -> client:
- ward-joined / ward-left acknowledgements
- new-problem, problem-updated
- error for frames that cannot be understood

problem-status-update is an unauthenticated UI hint: it is neither checked
against the store nor persisted, and anyone connected can send it.
"""

import asyncio
import json
import logging
from typing import Any

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from pydantic import BaseModel, ValidationError

from wardwatch.models.ward import MAX_WARD_NUMBER, MIN_WARD_NUMBER
from wardwatch.services.notification_bus import (
    PROBLEM_UPDATED,
    NotificationBus,
    Session,
    get_notification_bus,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Realtime"])

JOIN_WARD = "join-ward"
LEAVE_WARD = "leave-ward"
CLIENT_STATUS_UPDATE = "problem-status-update"


class ClientFrame(BaseModel):
    event: str
    data: Any = None


class WebSocketSession(Session):
    """Bus session backed by one WebSocket connection."""

    def __init__(self, websocket: WebSocket):
        super().__init__()
        self.websocket = websocket
        # Publishes from request handlers and replies from the receive loop
        # may overlap; frames must not interleave on the socket.
        self._send_lock = asyncio.Lock()

    async def send(self, event: str, data: Any) -> None:
        async with self._send_lock:
            await self.websocket.send_json({"event": event, "data": data})


def _parse_ward(value: Any):
    """Ward number from an int, an integral float (3.0) or a numeric string; else None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and not value.is_integer():
        return None
    try:
        ward_number = int(value)
    except (TypeError, ValueError):
        return None
    if not MIN_WARD_NUMBER <= ward_number <= MAX_WARD_NUMBER:
        return None
    return ward_number


async def handle_frame(bus: NotificationBus, session: WebSocketSession, frame: ClientFrame) -> None:
    if frame.event in (JOIN_WARD, LEAVE_WARD):
        ward_number = _parse_ward(frame.data)
        if ward_number is None:
            await session.send("error", {"message": f"Invalid ward number: {frame.data!r}"})
            return
        if frame.event == JOIN_WARD:
            topic = bus.join(session, ward_number)
            await session.send("ward-joined", {"wardNumber": ward_number, "topic": topic})
        else:
            bus.leave(session, ward_number)
            await session.send("ward-left", {"wardNumber": ward_number})
        return

    if frame.event == CLIENT_STATUS_UPDATE:
        ward_number = _parse_ward(frame.data.get("wardNumber")) if isinstance(frame.data, dict) else None
        if ward_number is None:
            await session.send("error", {"message": "problem-status-update needs a valid wardNumber"})
            return
        await bus.publish(ward_number, PROBLEM_UPDATED, frame.data)
        return

    await session.send("error", {"message": f"Unknown event: {frame.event}"})


@router.websocket("/ws")
async def ward_updates(websocket: WebSocket, bus: NotificationBus = Depends(get_notification_bus)):
    await websocket.accept()
    session = WebSocketSession(websocket)
    logger.info(f"{session!r} connected")

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
            raw = message.get("text")
            if raw is None:
                await session.send("error", {"message": "Frames must be JSON text, not binary"})
                continue
            try:
                frame = ClientFrame.model_validate(json.loads(raw))
            except (json.JSONDecodeError, ValidationError) as e:
                await session.send("error", {"message": f"Malformed frame: {e}"})
                continue
            await handle_frame(bus, session, frame)
    except WebSocketDisconnect:
        pass
    finally:
        bus.disconnect(session)
