"""Room registry."""

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Any, AsyncIterator, Dict, List, Optional

from pairline.signaling.connection import Connection, ConnectionTable, Role
from pairline.signaling.errors import DuplicateTeardown, NoPeer, RoomFull
from pairline.signaling.messages import MessageType, control_event
from pairline.signaling.room import Room
from pairline.utils.logger import get_logger

logger = get_logger(__name__)


class JoinResult(str, Enum):
    """Outcome of a join request."""
    CREATED = "created"
    JOINED = "joined"
    FULL = "full"


@dataclass
class _RoomLock:
    lock: asyncio.Lock
    users: int = 0


class RoomRegistry:
    """Owner of every room in the process.

    Each room id has its own lock. A mutation and the notifications it
    causes run under that lock, so no member ever observes a half-updated
    room. Operations on different rooms never wait on each other.
    """

    def __init__(self, connections: ConnectionTable):
        """Initialize room registry.

        Args:
            connections: Table used to resolve member ids to connections
        """
        self.connections = connections
        self.rooms: Dict[str, Room] = {}
        self._locks: Dict[str, _RoomLock] = {}

    @asynccontextmanager
    async def lock(self, room_id: str) -> AsyncIterator[None]:
        """Hold the critical section of one room."""
        entry = self._locks.get(room_id)
        if entry is None:
            entry = self._locks[room_id] = _RoomLock(asyncio.Lock())
        entry.users += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.users -= 1
            if entry.users == 0:
                del self._locks[room_id]

    def get(self, room_id: str) -> Optional[Room]:
        return self.rooms.get(room_id)

    def peer_of(self, connection: Connection) -> Optional[Connection]:
        """Get the other member of the connection's room."""
        room = self.rooms.get(connection.room_id) if connection.room_id else None
        if room is None:
            return None
        peer_id = room.peer_of(connection.id)
        return self.connections.get(peer_id) if peer_id else None

    async def join(self, connection: Connection, room_id: str) -> JoinResult:
        """Place a connection in a room.

        Args:
            connection: Joining connection (must not be in a room)
            room_id: Caller-supplied room token

        Returns:
            CREATED if the room is new, JOINED if the connection became the
            second member, FULL if the room already had two members
        """
        log = logger.bind(room=room_id, connection=connection.id)
        async with self.lock(room_id):
            room = self.rooms.get(room_id)
            created = room is None
            if created:
                room = Room(id=room_id)

            try:
                position = room.add(connection.id)
            except RoomFull as e:
                log.info(f"{e}. Rejecting join")
                await connection.send(control_event(MessageType.FULL, room_id))
                return JoinResult.FULL

            if created:
                self.rooms[room_id] = room
            connection.room_id = room_id
            connection.role = Role.INITIATOR if position == 0 else Role.RESPONDER

            if position == 0:
                log.info("Room created")
                await connection.send(control_event(MessageType.CREATED, room_id))
                return JoinResult.CREATED

            log.info("Joined room")
            await connection.send(control_event(MessageType.JOINED_ROOM, room_id))
            await self._broadcast(room, control_event(MessageType.READY))
            return JoinResult.JOINED

    async def leave(self, connection: Connection) -> Room:
        """Remove a connection from its room.

        The room is deleted once empty. A remaining member is told with
        ``peer_left`` and becomes the Initiator for the next join.

        Args:
            connection: Leaving connection

        Returns:
            The room that was left

        Raises:
            DuplicateTeardown: If the connection is not in a room
        """
        room_id = connection.room_id
        if room_id is None:
            raise DuplicateTeardown(connection.id)

        async with self.lock(room_id):
            log = logger.bind(room=room_id, connection=connection.id)
            room = self.rooms.get(room_id)
            connection.room_id = None
            connection.role = Role.UNASSIGNED
            if room is None or not room.remove(connection.id):
                raise DuplicateTeardown(connection.id)

            log.info("Left room")

            if room.is_empty:
                del self.rooms[room_id]
                log.info(f"Room deleted (remaining rooms: {len(self.rooms)})")
                return room

            remaining = self.connections.get(room.members[0])
            if remaining is not None:
                remaining.role = Role.INITIATOR
                await remaining.send(control_event(MessageType.PEER_LEFT))
            return room

    async def forward(self, connection: Connection, event: Dict[str, Any]) -> Connection:
        """Deliver an event to the sender's room peer.

        Args:
            connection: Sending connection (must be in a room)
            event: Event to deliver unmodified

        Returns:
            The peer the event was delivered to

        Raises:
            NoPeer: If the sender is alone in its room
        """
        room_id = connection.room_id
        async with self.lock(room_id):
            peer = self.peer_of(connection)
            if peer is None:
                raise NoPeer(room_id)
            await peer.send(event)
            return peer

    async def _broadcast(self, room: Room, event: Dict[str, Any]) -> None:
        for member_id in room.members:
            member = self.connections.get(member_id)
            if member is not None:
                await member.send(event)

    def snapshot(self) -> List[Dict[str, Any]]:
        """Describe every room for diagnostics."""
        return [
            {
                "room_id": room.id,
                "members": list(room.members),
                "created_at": room.created_at.isoformat(),
            }
            for room in self.rooms.values()
        ]

    def __len__(self) -> int:
        return len(self.rooms)
