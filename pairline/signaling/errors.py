"""Signaling error taxonomy.

None of these are fatal to the process. Each one is scoped to a single
connection or room.
"""

from typing import Optional


class SignalingError(Exception):
    """Base class for signaling errors."""


class RoomFull(SignalingError):
    """A join was attempted against a room that already has two members."""

    def __init__(self, room_id: str):
        super().__init__(f"Room {room_id} is full")
        self.room_id = room_id


class Unrouted(SignalingError):
    """A relay was attempted by a connection that is not in any room."""

    def __init__(self, connection_id: str, message_type: Optional[str] = None):
        super().__init__(f"Connection {connection_id} sent {message_type or 'a message'} outside a room")
        self.connection_id = connection_id
        self.message_type = message_type


class NoPeer(SignalingError):
    """A relay was attempted while the sender is alone in its room."""

    def __init__(self, room_id: str):
        super().__init__(f"Room {room_id} has no peer to deliver to")
        self.room_id = room_id


class DuplicateTeardown(SignalingError):
    """Leave or disconnect observed for a connection that is already out of its room."""

    def __init__(self, connection_id: str):
        super().__init__(f"Connection {connection_id} already torn down")
        self.connection_id = connection_id


class MessageError(SignalingError, ValueError):
    """An inbound frame could not be decoded into a signaling message."""
