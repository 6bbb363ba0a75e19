"""Connection Registry — live, authenticated connections and broadcast fan-out.

Invariants:
    - admit() is the only way a connection becomes visible to broadcast
    - remove() is idempotent and never raises
    - broadcast() reaches every admitted connection, including the sender
    - broadcast() never raises: a failed delivery is logged and that connection evicted
    - No delivery outlives send_timeout_seconds: a recipient that stops reading is
      evicted, so one stalled client cannot hold up the sender's Ack
    - Sends to one connection are serialized by its own lock, so two broadcasts
      issued one after the other arrive at each recipient in that order

Design Decisions:
    - Single event loop: dict mutations never straddle an await, so admit/remove
      need no lock; broadcast iterates a snapshot taken before the first await
    - asyncio.gather over sequential sends: one slow client does not hold up the rest
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Protocol
from uuid import uuid4

from tunechat.core.domain_types import Identity

logger = logging.getLogger(__name__)

DEFAULT_SEND_TIMEOUT_SECONDS = 5.0


class SocketLike(Protocol):
    async def send_json(self, data: Any) -> None: ...


@dataclass(eq=False)
class Connection:
    """Registry-owned handle for one admitted socket."""
    socket: SocketLike
    identity: Identity
    connection_id: str = field(default_factory=lambda: uuid4().hex)
    connected_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
    _send_lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    async def send(self, frame: dict) -> None:
        async with self._send_lock:
            await self.socket.send_json(frame)


class ConnectionRegistry:
    """Tracks admitted connections; the only owner of that set."""

    def __init__(self, send_timeout_seconds: float = DEFAULT_SEND_TIMEOUT_SECONDS) -> None:
        self._connections: dict[str, Connection] = {}
        self._send_timeout = send_timeout_seconds

    def __len__(self) -> int:
        return len(self._connections)

    def __contains__(self, connection: object) -> bool:
        return (
            isinstance(connection, Connection)
            and self._connections.get(connection.connection_id) is connection
        )

    def admit(self, socket: SocketLike, identity: Identity) -> Connection:
        """Register an authenticated socket and return its handle."""
        connection = Connection(socket=socket, identity=identity)
        self._connections[connection.connection_id] = connection
        logger.info(
            f"User connected: {identity.user_name} ({identity.user_id})",
            extra={
                "connection_id": connection.connection_id,
                "user_id": str(identity.user_id),
            },
        )
        return connection

    def remove(self, connection: Connection) -> None:
        removed = self._connections.pop(connection.connection_id, None)
        if removed is not None:
            logger.info(
                f"User disconnected: {connection.identity.user_name}",
                extra={"connection_id": connection.connection_id},
            )

    def snapshot(self) -> list[Connection]:
        return list(self._connections.values())

    async def broadcast(self, frame: dict) -> int:
        """Deliver ``frame`` to every admitted connection. Returns delivered count."""
        targets = self.snapshot()
        if not targets:
            return 0
        results = await asyncio.gather(
            *(self._deliver(conn, frame) for conn in targets),
        )
        return sum(results)

    async def _deliver(self, connection: Connection, frame: dict) -> bool:
        try:
            await asyncio.wait_for(connection.send(frame), self._send_timeout)
            return True
        except asyncio.TimeoutError:
            logger.warning(
                f"Broadcast to {connection.connection_id} stalled for "
                f"{self._send_timeout}s, evicting",
                extra={"connection_id": connection.connection_id},
            )
            self.remove(connection)
            return False
        except Exception as e:
            logger.warning(
                f"Broadcast to {connection.connection_id} failed: {e}",
                extra={"connection_id": connection.connection_id},
            )
            self.remove(connection)
            return False
