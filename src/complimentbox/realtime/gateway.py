"""WebSocket gateway — live compliment delivery to recipients.

Each client connects to /ws and sends {"event": "join-room", "data": CODE}.
From then on every compliment submitted for CODE is pushed to it as a
{"event": "new-compliment", "data": {...}} frame.

Each connection is a small state machine:

    CONNECTED --join-room--> IN_ROOM(code) --join-room--> IN_ROOM(other)
        |                         |
        +--------close/error------+--> DISCONNECTED (terminal)

Two tasks run per connection:
1. Reader — parses client frames (join-room, ping)
2. Writer — drains the outbox queue onto the socket

publish() only ever puts frames on the outbox, so a slow or dead client
never holds up the submitter. A failed send is a delivery fault: logged,
the connection is dropped, nothing is retried. Knowing a code is enough
to join its room.
"""

import asyncio
import enum
import json
import uuid
from typing import Any, Optional

import structlog
from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState

from complimentbox.codes import normalize_code
from complimentbox.errors import DeliveryFault, ValidationError
from complimentbox.realtime.events import (
    CONNECTED,
    ERROR,
    JOIN_ROOM,
    PING,
    PONG,
    ROOM_JOINED,
)
from complimentbox.realtime.registry import ChannelRegistry

logger = structlog.get_logger()
router = APIRouter()

# Outbox sentinel: tells the writer to stop.
_CLOSE = object()


class ConnectionState(str, enum.Enum):
    CONNECTED = "connected"
    IN_ROOM = "in_room"
    DISCONNECTED = "disconnected"


class Connection:
    """One client WebSocket and its room membership."""

    def __init__(self, websocket: WebSocket, registry: ChannelRegistry):
        self.connection_id = uuid.uuid4().hex
        self.websocket = websocket
        self.registry = registry
        self.state = ConnectionState.CONNECTED
        self.room: Optional[str] = None
        self._outbox: asyncio.Queue = asyncio.Queue()
        self.log = logger.bind(connection_id=self.connection_id)

    # ─── Subscriber interface (used by the registry) ──────

    def deliver(self, event: str, data: Any) -> None:
        if self.state is ConnectionState.DISCONNECTED:
            raise DeliveryFault(f"Connection {self.connection_id} is closed")
        self._outbox.put_nowait({"event": event, "data": data})

    async def close(self) -> None:
        """Server-side close, e.g. at shutdown."""
        self._disconnect()
        if self.websocket.client_state == WebSocketState.CONNECTED:
            await self.websocket.close(code=1001)

    # ─── State transitions ────────────────────────────────

    def join(self, raw_code: Any) -> None:
        if not isinstance(raw_code, str):
            raise ValidationError("join-room expects the code as a string")
        code = normalize_code(raw_code)
        previous = self.room
        self.registry.join(self.connection_id, code)
        self.room = code
        self.state = ConnectionState.IN_ROOM
        self.deliver(ROOM_JOINED, {"code": code})
        self.log.info("realtime.joined", code=code, previous=previous)

    def _disconnect(self) -> None:
        if self.state is ConnectionState.DISCONNECTED:
            return
        self.state = ConnectionState.DISCONNECTED
        self.registry.leave(self.connection_id)
        self._outbox.put_nowait(_CLOSE)
        self.log.info("realtime.disconnected", code=self.room)

    # ─── Frame handling ───────────────────────────────────

    def handle_frame(self, text: str) -> None:
        """Apply one client frame."""
        try:
            frame = json.loads(text)
        except json.JSONDecodeError:
            self.deliver(ERROR, {"detail": "Frames must be JSON"})
            return
        if not isinstance(frame, dict) or not isinstance(frame.get("event"), str):
            self.deliver(ERROR, {"detail": "Frames must look like {\"event\": ..., \"data\": ...}"})
            return

        event = frame["event"]
        if event == JOIN_ROOM:
            try:
                self.join(frame.get("data"))
            except ValidationError as e:
                self.deliver(ERROR, {"detail": str(e)})
        elif event == PING:
            self.deliver(PONG, None)
        else:
            self.log.debug("realtime.unknown_event", frame_event=event)

    # ─── Tasks ────────────────────────────────────────────

    async def _reader(self) -> None:
        try:
            while True:
                message = await self.websocket.receive()
                if message["type"] == "websocket.disconnect":
                    return
                if message.get("text") is not None:
                    self.handle_frame(message["text"])
                else:
                    self.deliver(ERROR, {"detail": "Binary frames are not supported"})
        except (WebSocketDisconnect, asyncio.CancelledError):
            pass

    async def _writer(self) -> None:
        while True:
            frame = await self._outbox.get()
            if frame is _CLOSE:
                return
            try:
                await self.websocket.send_text(json.dumps(frame))
            except Exception as e:
                self.log.warning(
                    "realtime.delivery_fault",
                    frame_event=frame["event"],
                    code=self.room,
                    error=str(e),
                )
                return

    async def serve(self) -> None:
        """Run the connection until either side goes away."""
        self.registry.attach(self)
        self.deliver(CONNECTED, {"id": self.connection_id})
        self.log.info("realtime.connected")

        reader_task = asyncio.create_task(self._reader())
        writer_task = asyncio.create_task(self._writer())

        try:
            done, pending = await asyncio.wait(
                [reader_task, writer_task],
                return_when=asyncio.FIRST_COMPLETED,
            )
            for task in pending:
                task.cancel()
            for task in done:
                if not task.cancelled() and task.exception() is not None:
                    self.log.warning(
                        "realtime.connection_error", error=str(task.exception())
                    )
        finally:
            self._disconnect()
            if self.websocket.client_state == WebSocketState.CONNECTED:
                try:
                    await self.websocket.close()
                except RuntimeError as e:
                    # Transport already gone after a failed send.
                    self.log.debug("realtime.close_failed", error=str(e))


@router.websocket("/ws")
async def compliments_websocket(websocket: WebSocket):
    """WebSocket endpoint for live compliment delivery.

    No authentication: the recipient code is the only credential, and any
    connection may join any room.
    """
    registry: ChannelRegistry = websocket.app.state.registry
    await websocket.accept()
    await Connection(websocket, registry).serve()
