"""Signaling module."""

from pairline.signaling.client import SignalingClient
from pairline.signaling.connection import Connection, ConnectionTable, MediaState, Role
from pairline.signaling.errors import (
    DuplicateTeardown,
    MessageError,
    NoPeer,
    RoomFull,
    SignalingError,
    Unrouted,
)
from pairline.signaling.messages import MessageType, SignalingMessage
from pairline.signaling.negotiation import NegotiationState, Negotiator, OfferDecision
from pairline.signaling.registry import JoinResult, RoomRegistry
from pairline.signaling.room import Room
from pairline.signaling.router import SignalingRouter
from pairline.signaling.server import SignalingServer

__all__ = [
    "SignalingClient",
    "Connection",
    "ConnectionTable",
    "MediaState",
    "Role",
    "DuplicateTeardown",
    "MessageError",
    "NoPeer",
    "RoomFull",
    "SignalingError",
    "Unrouted",
    "MessageType",
    "SignalingMessage",
    "NegotiationState",
    "Negotiator",
    "OfferDecision",
    "JoinResult",
    "RoomRegistry",
    "Room",
    "SignalingRouter",
    "SignalingServer",
]
