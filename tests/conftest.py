from __future__ import annotations

import socket

import pytest

from pingpong.constants import MAX_ITERATIONS
from pingpong.net import Channel
from pingpong.responder import Responder
from pingpong.state import simulated_work


@pytest.fixture
def free_port() -> int:
    """Reserve an available loopback port for a test."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.fixture
def channel_pair():
    a, b = socket.socketpair()
    left, right = Channel(a), Channel(b)
    yield left, right
    left.close()
    right.close()


@pytest.fixture
def closing_responder():
    """Responder that drops its own transport after the first receive, before replying."""

    class ClosingResponder(Responder):
        def __init__(self, channel, rounds=MAX_ITERATIONS, work=simulated_work):
            super().__init__(channel, rounds=rounds, work=self._drop_transport)

        def _drop_transport(self) -> None:
            self.channel.close()

    return ClosingResponder
