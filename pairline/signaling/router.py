"""Signaling router."""

from typing import Any, Optional

from pairline.signaling.connection import Connection, ConnectionTable
from pairline.signaling.errors import DuplicateTeardown, NoPeer, Unrouted
from pairline.signaling.messages import MessageType, SignalingMessage
from pairline.signaling.registry import JoinResult, RoomRegistry
from pairline.utils.logger import get_logger

logger = get_logger(__name__)


class SignalingRouter:
    """Dispatches inbound messages to the registry and relays to room peers.

    All per-connection state lives on the ``Connection`` passed through
    each call. The registry is the only shared structure.
    """

    def __init__(self, registry: Optional[RoomRegistry] = None):
        """Initialize signaling router.

        Args:
            registry: Room registry (a fresh one when omitted)
        """
        if registry is None:
            registry = RoomRegistry(ConnectionTable())
        self.registry = registry
        self.connections = self.registry.connections

    def attach(self, websocket: Any) -> Connection:
        """Register a newly opened transport."""
        return self.connections.attach(websocket)

    def _connection(self, connection_id: str) -> Connection:
        connection = self.connections.get(connection_id)
        if connection is None:
            raise KeyError(f"Unknown connection {connection_id}")
        return connection

    async def dispatch(self, connection_id: str, message: SignalingMessage) -> None:
        """Handle one inbound message.

        Raises:
            Unrouted: If a relayed message arrives from outside a room
        """
        if message.type == MessageType.JOIN:
            await self.join(connection_id, message.room_id)
        elif message.type == MessageType.LEAVE:
            await self.leave(connection_id, message.room_id)
        elif message.is_relayed:
            await self.relay(connection_id, message)
        else:
            logger.warning(f"Ignoring {message.type.value} from {connection_id}")

    async def join(self, connection_id: str, room_id: str) -> Optional[JoinResult]:
        """Join a room, leaving the current one first.

        Returns:
            Join outcome, or None when the connection already occupies the room
        """
        connection = self._connection(connection_id)
        if connection.room_id == room_id:
            logger.warning(f"Connection {connection_id} is already in room {room_id}")
            return None
        if connection.room_id is not None:
            await self._teardown(connection)
        return await self.registry.join(connection, room_id)

    async def relay(self, connection_id: str, message: SignalingMessage) -> bool:
        """Forward a message to the sender's room peer.

        Args:
            connection_id: Sender
            message: Message to forward unmodified

        Returns:
            True if delivered, False if the sender has no peer

        Raises:
            Unrouted: If the sender is not in a room
        """
        connection = self._connection(connection_id)
        if connection.room_id is None:
            raise Unrouted(connection_id, message.type.value)

        if message.type == MessageType.TOGGLE_AUDIO:
            connection.media_state.audio_enabled = message.payload
        elif message.type == MessageType.TOGGLE_VIDEO:
            connection.media_state.video_enabled = message.payload

        try:
            peer = await self.registry.forward(connection, message.to_dict())
        except NoPeer:
            logger.debug(f"Dropped {message.type.value} from {connection_id}: no peer in room {connection.room_id}")
            return False

        logger.debug(f"Forwarded {message.type.value} from {connection_id} to {peer.id}")
        return True

    async def leave(self, connection_id: str, room_id: Optional[str] = None) -> bool:
        """Graceful leave. The connection stays attached and may join again.

        A leave naming a room other than the one the connection is in is
        ignored, so a stale leave cannot tear down a newer membership.

        Returns:
            True if the connection left a room, False if it was a no-op
        """
        connection = self.connections.get(connection_id)
        if connection is None:
            return False
        if room_id is not None and connection.room_id not in (None, room_id):
            logger.bind(connection=connection_id, room=connection.room_id).warning(
                f"Ignoring leave for room {room_id}: connection is in another room"
            )
            return False
        return await self._teardown(connection)

    async def disconnect(self, connection_id: str) -> bool:
        """Transport loss. Tears down membership and releases the id.

        Returns:
            True if this call released the connection, False if already gone
        """
        connection = self.connections.release(connection_id)
        if connection is None:
            logger.debug(f"Duplicate disconnect for {connection_id}")
            return False
        await self._teardown(connection)
        return True

    async def _teardown(self, connection: Connection) -> bool:
        try:
            await self.registry.leave(connection)
        except DuplicateTeardown:
            logger.debug(f"Connection {connection.id} is not in a room, nothing to tear down")
            return False
        return True
