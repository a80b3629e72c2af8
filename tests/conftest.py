"""Pytest configuration and shared fixtures."""
import json

import pytest

from pairline.signaling.connection import ConnectionTable
from pairline.signaling.registry import RoomRegistry
from pairline.signaling.router import SignalingRouter


class FakeWebSocket:
    """Records every frame sent to it."""

    def __init__(self, fail: bool = False):
        self.sent = []
        self.fail = fail

    async def send(self, data: str) -> None:
        if self.fail:
            raise ConnectionError("socket closed")
        self.sent.append(json.loads(data))

    @property
    def types(self):
        return [event["type"] for event in self.sent]

    def clear(self):
        self.sent.clear()


@pytest.fixture
def fake_websocket():
    """Factory for recording websockets."""
    return FakeWebSocket


@pytest.fixture
def connections():
    return ConnectionTable()


@pytest.fixture
def registry(connections):
    return RoomRegistry(connections)


@pytest.fixture
def router(registry):
    return SignalingRouter(registry)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests that open real sockets"
    )
