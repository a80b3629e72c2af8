"""Two-party room."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from pairline.signaling.errors import RoomFull

ROOM_CAPACITY = 2


@dataclass
class Room:
    """A capacity-2 group of connection ids.

    Member order decides the role: index 0 is the Initiator.
    """
    id: str
    members: List[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def is_full(self) -> bool:
        return len(self.members) >= ROOM_CAPACITY

    @property
    def is_empty(self) -> bool:
        return not self.members

    def add(self, connection_id: str) -> int:
        """Append a member.

        Args:
            connection_id: Connection to add

        Returns:
            Position of the new member (0 for the Initiator)

        Raises:
            RoomFull: If the room already holds two members
        """
        if self.is_full:
            raise RoomFull(self.id)
        self.members.append(connection_id)
        return len(self.members) - 1

    def remove(self, connection_id: str) -> bool:
        if connection_id not in self.members:
            return False
        self.members.remove(connection_id)
        return True

    def peer_of(self, connection_id: str) -> Optional[str]:
        """Get the other member's id, if any."""
        for member in self.members:
            if member != connection_id:
                return member
        return None

    def __contains__(self, connection_id: str) -> bool:
        return connection_id in self.members
