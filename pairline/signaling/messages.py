"""Signaling message envelope and wire format."""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union

from pairline.signaling.errors import MessageError


class MessageType(str, Enum):
    """Message types carried over the signaling channel."""
    # Endpoint -> server
    JOIN = "join"
    LEAVE = "leave"

    # Relayed verbatim between room members
    OFFER = "offer"
    ANSWER = "answer"
    ICE_CANDIDATE = "ice_candidate"
    TOGGLE_AUDIO = "toggle_audio"
    TOGGLE_VIDEO = "toggle_video"

    # Server -> endpoint
    CREATED = "created"
    JOINED_ROOM = "joined_room"
    FULL = "full"
    READY = "ready"
    PEER_LEFT = "peer_left"


INBOUND_TYPES = frozenset({
    MessageType.JOIN,
    MessageType.LEAVE,
    MessageType.OFFER,
    MessageType.ANSWER,
    MessageType.ICE_CANDIDATE,
    MessageType.TOGGLE_AUDIO,
    MessageType.TOGGLE_VIDEO,
})

RELAYED_TYPES = frozenset({
    MessageType.OFFER,
    MessageType.ANSWER,
    MessageType.ICE_CANDIDATE,
    MessageType.TOGGLE_AUDIO,
    MessageType.TOGGLE_VIDEO,
})

TOGGLE_TYPES = frozenset({MessageType.TOGGLE_AUDIO, MessageType.TOGGLE_VIDEO})


@dataclass
class SignalingMessage:
    """Signaling message.

    ``payload`` is opaque for offers, answers and candidates. It is only
    ever a boolean for the toggle types.
    """
    type: MessageType
    payload: Any = None
    room_id: Optional[str] = None

    @property
    def is_relayed(self) -> bool:
        return self.type in RELAYED_TYPES

    def to_dict(self) -> Dict[str, Any]:
        """Build the wire representation.

        Relayed messages carry only ``type`` and ``payload``; control
        messages carry ``room_id`` when they have one.
        """
        data: Dict[str, Any] = {"type": self.type.value}
        if self.type in RELAYED_TYPES:
            data["payload"] = self.payload
        elif self.room_id is not None:
            data["room_id"] = self.room_id
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SignalingMessage":
        """Decode an inbound message.

        Args:
            data: Decoded JSON object

        Returns:
            SignalingMessage

        Raises:
            MessageError: If the object is not a valid inbound message
        """
        if not isinstance(data, dict):
            raise MessageError("Message must be a JSON object")

        raw_type = data.get("type")
        try:
            msg_type = MessageType(raw_type)
        except ValueError:
            raise MessageError(f"Unknown message type: {raw_type!r}") from None

        if msg_type not in INBOUND_TYPES:
            raise MessageError(f"Message type {msg_type.value} is not accepted from endpoints")

        room_id = data.get("room_id")
        if room_id is not None and not isinstance(room_id, str):
            raise MessageError("room_id must be a string")

        if msg_type == MessageType.JOIN:
            if not room_id:
                raise MessageError("join requires a room_id")
            return cls(type=msg_type, room_id=room_id)

        if msg_type == MessageType.LEAVE:
            return cls(type=msg_type, room_id=room_id)

        if "payload" not in data:
            raise MessageError(f"{msg_type.value} requires a payload")
        payload = data["payload"]

        if msg_type in TOGGLE_TYPES and not isinstance(payload, bool):
            raise MessageError(f"{msg_type.value} payload must be a boolean")

        return cls(type=msg_type, payload=payload)

    @classmethod
    def from_json(cls, raw: Union[str, bytes]) -> "SignalingMessage":
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise MessageError(f"Failed to decode message: {e}") from e
        return cls.from_dict(data)


def control_event(msg_type: MessageType, room_id: Optional[str] = None) -> Dict[str, Any]:
    """Build a server-originated event."""
    return SignalingMessage(type=msg_type, room_id=room_id).to_dict()
