"""WebSocket signaling client."""

import asyncio
import inspect
import json
from typing import Any, Callable, Optional

from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import ConnectionClosed, WebSocketException

from pairline.signaling.connection import MediaState, Role
from pairline.signaling.messages import MessageType
from pairline.signaling.negotiation import Negotiator, OfferDecision
from pairline.utils.logger import get_logger

logger = get_logger(__name__)


class SignalingClient:
    """Two-party signaling client.

    Offers pass through a ``Negotiator`` before reaching ``on_offer``, so
    callbacks never see an offer the glare rule says to ignore.
    """

    def __init__(self, signaling_url: str):
        """Initialize signaling client.

        Args:
            signaling_url: Signaling server URL (e.g., ws://localhost:5000)
        """
        self.signaling_url = signaling_url
        self.websocket: Optional[ClientConnection] = None
        self.is_connected = False
        self.room_id: Optional[str] = None
        self.negotiator = Negotiator()
        self.peer_media = MediaState()
        self._receive_task: Optional[asyncio.Task] = None

        # Callbacks
        self.on_created: Optional[Callable] = None
        self.on_joined: Optional[Callable] = None
        self.on_full: Optional[Callable] = None
        self.on_ready: Optional[Callable] = None
        self.on_offer: Optional[Callable] = None
        self.on_answer: Optional[Callable] = None
        self.on_ice_candidate: Optional[Callable] = None
        self.on_peer_media: Optional[Callable] = None
        self.on_peer_left: Optional[Callable] = None

    @property
    def role(self) -> Role:
        return self.negotiator.role

    async def connect(self) -> bool:
        """Connect to signaling server.

        Returns:
            True if connected successfully
        """
        try:
            logger.info(f"Connecting to signaling server: {self.signaling_url}")
            self.websocket = await connect(self.signaling_url)
        except (OSError, asyncio.TimeoutError, WebSocketException) as e:
            # Bad URI, refused handshake or unreachable host
            logger.error(f"Failed to connect to signaling server: {e}")
            return False

        self.is_connected = True
        self._receive_task = asyncio.create_task(self._receive_loop())
        return True

    async def disconnect(self) -> None:
        """Disconnect from signaling server."""
        if self.websocket:
            await self.websocket.close()
            self.is_connected = False
            logger.info("Disconnected from signaling server")
        if self._receive_task:
            await self._receive_task
            self._receive_task = None

    async def join(self, room_id: str) -> None:
        await self.send_message({"type": MessageType.JOIN.value, "room_id": room_id})

    async def leave(self) -> None:
        await self.send_message({"type": MessageType.LEAVE.value, "room_id": self.room_id})
        self.room_id = None
        self.negotiator.assign(Role.UNASSIGNED)

    async def send_offer(self, sdp: Any) -> None:
        """Send an offer to the room peer.

        Args:
            sdp: Opaque session description
        """
        self.negotiator.local_offer(sdp)
        await self._relay(MessageType.OFFER, sdp)
        logger.info("Sent offer")

    async def send_answer(self, sdp: Any) -> None:
        await self._relay(MessageType.ANSWER, sdp)
        logger.info("Sent answer")

    async def send_ice_candidate(self, candidate: Any) -> None:
        await self._relay(MessageType.ICE_CANDIDATE, candidate)
        logger.debug("Sent ICE candidate")

    async def toggle_audio(self, enabled: bool) -> None:
        await self._relay(MessageType.TOGGLE_AUDIO, bool(enabled))

    async def toggle_video(self, enabled: bool) -> None:
        await self._relay(MessageType.TOGGLE_VIDEO, bool(enabled))

    async def _relay(self, msg_type: MessageType, payload: Any) -> None:
        await self.send_message({"type": msg_type.value, "payload": payload})

    async def send_message(self, message: dict) -> None:
        """Send message to signaling server.

        Args:
            message: Message dictionary
        """
        if not self.websocket or not self.is_connected:
            logger.error("Not connected to signaling server")
            return

        try:
            await self.websocket.send(json.dumps(message))
        except ConnectionClosed as e:
            logger.error(f"Failed to send message: {e}")
            self.is_connected = False

    async def _receive_loop(self) -> None:
        """Receive messages from signaling server."""
        try:
            async for message in self.websocket:
                try:
                    data = json.loads(message)
                except json.JSONDecodeError as e:
                    logger.error(f"Failed to decode message: {e}")
                    continue
                if not isinstance(data, dict):
                    logger.error(f"Ignoring non-object message: {message!r}")
                    continue
                try:
                    await self._handle_message(data)
                except Exception as e:
                    logger.error(f"Error handling {data.get('type')} message: {e}")
        except ConnectionClosed as e:
            logger.info(f"Signaling connection lost: {e}")
        finally:
            self.is_connected = False
            logger.info("Signaling connection closed")

    async def _handle_message(self, data: dict) -> None:
        """Handle received message.

        Args:
            data: Message data
        """
        msg_type = data.get("type")
        payload = data.get("payload")

        if msg_type == MessageType.CREATED.value:
            self.room_id = data.get("room_id")
            self.negotiator.assign(Role.INITIATOR)
            await self._call(self.on_created, self.room_id)

        elif msg_type == MessageType.JOINED_ROOM.value:
            self.room_id = data.get("room_id")
            self.negotiator.assign(Role.RESPONDER)
            await self._call(self.on_joined, self.room_id)

        elif msg_type == MessageType.FULL.value:
            logger.warning(f"Room {data.get('room_id')} is full")
            await self._call(self.on_full, data.get("room_id"))

        elif msg_type == MessageType.READY.value:
            self.peer_media = MediaState()
            await self._call(self.on_ready, self.negotiator.should_offer_on_ready)

        elif msg_type == MessageType.OFFER.value:
            decision = self.negotiator.remote_offer(payload)
            if decision.accepted:
                await self._call(self.on_offer, payload, decision == OfferDecision.ROLLBACK_AND_ACCEPT)

        elif msg_type == MessageType.ANSWER.value:
            if self.negotiator.remote_answer(payload):
                await self._call(self.on_answer, payload)

        elif msg_type == MessageType.ICE_CANDIDATE.value:
            await self._call(self.on_ice_candidate, payload)

        elif msg_type == MessageType.TOGGLE_AUDIO.value:
            self.peer_media.audio_enabled = bool(payload)
            await self._call(self.on_peer_media, self.peer_media)

        elif msg_type == MessageType.TOGGLE_VIDEO.value:
            self.peer_media.video_enabled = bool(payload)
            await self._call(self.on_peer_media, self.peer_media)

        elif msg_type == MessageType.PEER_LEFT.value:
            self.negotiator.peer_left()
            self.peer_media = MediaState()
            await self._call(self.on_peer_left)

        else:
            logger.debug(f"Unknown message type: {msg_type}")

    async def _call(self, callback: Optional[Callable], *args) -> None:
        if callback is None:
            return
        result = callback(*args)
        if inspect.isawaitable(result):
            await result
