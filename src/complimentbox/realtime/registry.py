"""Channel registry — which live connections are watching which code.

One instance per process, created with the app and closed at shutdown.
It tracks membership only: connections own their sockets, the registry
just knows how to hand them an event and how to close them.

All methods that touch membership are synchronous and run on the event
loop thread, so publish() never sees a room half-way through a join or
leave. publish() iterates over a snapshot of the room.
"""

from typing import Any, Optional, Protocol

import structlog

from complimentbox.errors import DeliveryFault
from complimentbox.realtime.events import NEW_COMPLIMENT

logger = structlog.get_logger()


class Subscriber(Protocol):
    """What the registry needs from a live connection."""

    connection_id: str

    def deliver(self, event: str, data: Any) -> None:
        """Queue an event for the client. Must not block."""
        ...

    async def close(self) -> None:
        """Forcibly close the connection."""
        ...


class ChannelRegistry:
    """Maps recipient codes to the connections currently in their room."""

    def __init__(self) -> None:
        # connection_id -> subscriber, for every live connection
        self._connections: dict[str, Subscriber] = {}
        # code -> {connection_id: subscriber}
        self._rooms: dict[str, dict[str, Subscriber]] = {}
        # connection_id -> code (a connection is in at most one room)
        self._membership: dict[str, str] = {}

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    def room_size(self, code: str) -> int:
        return len(self._rooms.get(code, {}))

    def room_of(self, connection_id: str) -> Optional[str]:
        return self._membership.get(connection_id)

    # ─── Membership ───────────────────────────────────────

    def attach(self, subscriber: Subscriber) -> None:
        """Track a freshly accepted connection. It is in no room yet."""
        self._connections[subscriber.connection_id] = subscriber

    def join(self, connection_id: str, code: str) -> None:
        """Put a connection in `code`'s room, leaving any previous room."""
        subscriber = self._connections.get(connection_id)
        if subscriber is None:
            raise KeyError(f"Connection {connection_id} is not attached")

        previous = self._membership.get(connection_id)
        if previous is not None and previous != code:
            self._discard(previous, connection_id)

        self._rooms.setdefault(code, {})[connection_id] = subscriber
        self._membership[connection_id] = code
        logger.debug(
            "registry.joined",
            connection_id=connection_id,
            code=code,
            previous=previous,
            room_size=len(self._rooms[code]),
        )

    def leave(self, connection_id: str) -> None:
        """Forget a connection entirely. Safe to call more than once."""
        code = self._membership.pop(connection_id, None)
        if code is not None:
            self._discard(code, connection_id)
        self._connections.pop(connection_id, None)

    def _discard(self, code: str, connection_id: str) -> None:
        room = self._rooms.get(code)
        if room is None:
            return
        room.pop(connection_id, None)
        if not room:
            del self._rooms[code]

    # ─── Delivery ─────────────────────────────────────────

    def publish(self, code: str, payload: dict[str, Any]) -> int:
        """Hand a new-compliment event to everyone in `code`'s room.

        Each subscriber gets exactly one delivery attempt. A failure for one
        subscriber is logged and skipped; the rest still receive the event.
        Returns how many subscribers accepted it.
        """
        room = self._rooms.get(code)
        if not room:
            return 0

        delivered = 0
        for subscriber in list(room.values()):
            try:
                subscriber.deliver(NEW_COMPLIMENT, payload)
            except DeliveryFault as e:
                logger.warning(
                    "registry.delivery_fault",
                    connection_id=subscriber.connection_id,
                    code=code,
                    error=str(e),
                )
                continue
            except Exception:
                logger.exception(
                    "registry.delivery_error",
                    connection_id=subscriber.connection_id,
                    code=code,
                )
                continue
            delivered += 1
        return delivered

    # ─── Shutdown ─────────────────────────────────────────

    async def close(self) -> None:
        """Close every attached connection and empty the registry."""
        subscribers = list(self._connections.values())
        for subscriber in subscribers:
            try:
                await subscriber.close()
            except Exception as e:
                logger.warning(
                    "registry.close_failed",
                    connection_id=subscriber.connection_id,
                    error=str(e),
                )
        self._connections.clear()
        self._rooms.clear()
        self._membership.clear()
        logger.info("registry.closed", connections=len(subscribers))
