"""Connections and the connection table."""

import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterator, Optional

from pairline.utils.logger import get_logger

logger = get_logger(__name__)


class Role(str, Enum):
    """Negotiation role within a room."""
    UNASSIGNED = "unassigned"
    INITIATOR = "initiator"
    RESPONDER = "responder"


@dataclass
class MediaState:
    """Last media state advertised by an endpoint."""
    audio_enabled: bool = True
    video_enabled: bool = True


@dataclass
class Connection:
    """One attached endpoint.

    The connection refers to its room by id only. Rooms are owned by the
    registry.
    """
    id: str
    websocket: Any  # anything with an async ``send(str)``
    room_id: Optional[str] = None
    role: Role = Role.UNASSIGNED
    media_state: MediaState = field(default_factory=MediaState)
    connected_at: datetime = field(default_factory=datetime.now)

    async def send(self, event: Dict[str, Any]) -> bool:
        """Send an event to this endpoint.

        Args:
            event: JSON-serializable event

        Returns:
            True if the transport accepted the frame
        """
        try:
            await self.websocket.send(json.dumps(event))
            return True
        except Exception as e:
            # The endpoint's own handler observes the closed socket and tears it down.
            logger.error(f"Error sending {event.get('type')} to {self.id}: {e}")
            return False


class ConnectionTable:
    """Process-wide table of attached connections keyed by id."""

    def __init__(self):
        self._connections: Dict[str, Connection] = {}

    def attach(self, websocket: Any) -> Connection:
        """Register a new transport and assign it a fresh id."""
        connection = Connection(id=uuid.uuid4().hex, websocket=websocket)
        self._connections[connection.id] = connection
        logger.info(f"Connection attached: {connection.id} (total connections: {len(self._connections)})")
        return connection

    def get(self, connection_id: str) -> Optional[Connection]:
        return self._connections.get(connection_id)

    def release(self, connection_id: str) -> Optional[Connection]:
        connection = self._connections.pop(connection_id, None)
        if connection is not None:
            logger.info(f"Connection released: {connection_id} (remaining connections: {len(self._connections)})")
        return connection

    def __contains__(self, connection_id: str) -> bool:
        return connection_id in self._connections

    def __len__(self) -> int:
        return len(self._connections)

    def __iter__(self) -> Iterator[Connection]:
        return iter(list(self._connections.values()))
