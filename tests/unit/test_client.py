"""Unit tests for the signaling client's message handling."""
import json

import pytest

from pairline.signaling.client import SignalingClient
from pairline.signaling.connection import Role


class RecordingSocket:
    def __init__(self):
        self.sent = []

    async def send(self, data):
        self.sent.append(json.loads(data))


def _client():
    client = SignalingClient("ws://localhost:5000")
    client.websocket = RecordingSocket()
    client.is_connected = True
    return client


@pytest.mark.asyncio
async def test_created_makes_initiator():
    client = _client()
    rooms = []
    client.on_created = rooms.append

    await client._handle_message({"type": "created", "room_id": "r1"})

    assert client.role == Role.INITIATOR
    assert client.room_id == "r1"
    assert rooms == ["r1"]


@pytest.mark.asyncio
async def test_ready_tells_initiator_to_offer():
    client = _client()
    calls = []

    async def on_ready(should_offer):
        calls.append(should_offer)

    client.on_ready = on_ready

    await client._handle_message({"type": "joined_room", "room_id": "r1"})
    await client._handle_message({"type": "ready"})
    await client._handle_message({"type": "created", "room_id": "r2"})
    await client._handle_message({"type": "ready"})

    assert calls == [False, True]


@pytest.mark.asyncio
async def test_glare_offer_hidden_from_responder():
    client = _client()
    offers = []
    client.on_offer = lambda offer, rolled_back: offers.append((offer, rolled_back))

    await client._handle_message({"type": "joined_room", "room_id": "r1"})
    await client.send_offer("offer-r")
    await client._handle_message({"type": "offer", "payload": "offer-i"})

    assert offers == []
    assert client.websocket.sent == [{"type": "offer", "payload": "offer-r"}]


@pytest.mark.asyncio
async def test_glare_offer_accepted_by_initiator():
    client = _client()
    offers = []
    client.on_offer = lambda offer, rolled_back: offers.append((offer, rolled_back))

    await client._handle_message({"type": "created", "room_id": "r1"})
    await client.send_offer("offer-i")
    await client._handle_message({"type": "offer", "payload": "offer-r"})

    assert offers == [("offer-r", True)]


@pytest.mark.asyncio
async def test_answer_only_delivered_for_pending_offer():
    client = _client()
    answers = []
    client.on_answer = answers.append

    await client._handle_message({"type": "created", "room_id": "r1"})
    await client._handle_message({"type": "answer", "payload": "stray"})
    await client.send_offer("offer-i")
    await client._handle_message({"type": "answer", "payload": "answer-r"})

    assert answers == ["answer-r"]


@pytest.mark.asyncio
async def test_peer_media_tracking():
    client = _client()
    states = []
    client.on_peer_media = lambda media: states.append((media.audio_enabled, media.video_enabled))

    await client._handle_message({"type": "toggle_audio", "payload": False})
    await client._handle_message({"type": "toggle_video", "payload": False})

    assert states == [(False, True), (False, False)]


@pytest.mark.asyncio
async def test_peer_left_reverts_to_initiator():
    client = _client()
    left = []
    client.on_peer_left = lambda: left.append(True)

    await client._handle_message({"type": "joined_room", "room_id": "r1"})
    await client._handle_message({"type": "toggle_audio", "payload": False})
    await client._handle_message({"type": "peer_left"})

    assert left == [True]
    assert client.role == Role.INITIATOR
    assert client.peer_media.audio_enabled is True


@pytest.mark.asyncio
async def test_outbound_wire_format():
    client = _client()

    await client.join("r1")
    await client.send_ice_candidate({"candidate": "c"})
    await client.toggle_audio(False)
    await client.leave()

    assert client.websocket.sent == [
        {"type": "join", "room_id": "r1"},
        {"type": "ice_candidate", "payload": {"candidate": "c"}},
        {"type": "toggle_audio", "payload": False},
        {"type": "leave", "room_id": None},
    ]
    assert client.role == Role.UNASSIGNED


@pytest.mark.asyncio
async def test_send_when_disconnected_is_noop():
    client = SignalingClient("ws://localhost:5000")

    await client.join("r1")

    assert client.is_connected is False


class FrameSocket:
    """Yields a fixed list of raw frames, then ends like a closed socket."""

    def __init__(self, frames):
        self.frames = frames

    async def __aiter__(self):
        for frame in self.frames:
            yield frame


@pytest.mark.asyncio
async def test_receive_loop_survives_bad_frames():
    client = SignalingClient("ws://localhost:5000")
    client.websocket = FrameSocket([
        "[1, 2]",
        "not json",
        json.dumps({"type": "created", "room_id": "r1"}),
        json.dumps({"type": "peer_left"}),
    ])
    client.is_connected = True
    seen = []
    client.on_peer_left = lambda: seen.append("peer_left")

    await client._receive_loop()

    assert client.room_id == "r1"
    assert seen == ["peer_left"]
    assert client.is_connected is False


@pytest.mark.asyncio
async def test_receive_loop_survives_failing_callback():
    client = SignalingClient("ws://localhost:5000")
    client.websocket = FrameSocket([
        json.dumps({"type": "created", "room_id": "r1"}),
        json.dumps({"type": "peer_left"}),
    ])
    client.is_connected = True
    seen = []

    def broken(room_id):
        raise RuntimeError("callback failed")

    client.on_created = broken
    client.on_peer_left = lambda: seen.append("peer_left")

    await client._receive_loop()

    assert seen == ["peer_left"]


@pytest.mark.asyncio
async def test_connect_rejects_non_websocket_uri():
    client = SignalingClient("http://localhost:5000")

    assert await client.connect() is False
    assert client.is_connected is False
