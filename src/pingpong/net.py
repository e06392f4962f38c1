from __future__ import annotations

import logging
import socket
import time
from typing import Optional, Tuple

from .constants import (
    CONNECT_ATTEMPTS,
    CONNECT_BACKOFF_S,
    CONNECT_WARMUP_S,
    LISTEN_BACKLOG,
    RECV_BUFSIZE,
)
from .errors import AcceptError, BindError, ConnectError, TransportError, describe
from .tokens import Token

logger = logging.getLogger(__name__)

Address = Tuple[str, int]


class Channel:
    """Exclusive owner of one connected stream socket.

    send() and receive() block without a timeout. The socket is closed
    exactly once, either through close() or by leaving a ``with`` block.
    """

    def __init__(self, sock: socket.socket):
        self._sock: Optional[socket.socket] = sock

    @classmethod
    def connect(
        cls,
        address: Address,
        *,
        warmup_s: float = CONNECT_WARMUP_S,
        attempts: int = CONNECT_ATTEMPTS,
        backoff_s: float = CONNECT_BACKOFF_S,
    ) -> "Channel":
        if warmup_s > 0:
            time.sleep(warmup_s)

        attempts = max(1, attempts)
        last_exc: Optional[OSError] = None
        for attempt in range(1, attempts + 1):
            sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
            try:
                sock.connect(address)
            except OSError as exc:
                sock.close()
                last_exc = exc
                logger.debug("connect to %s:%d failed (attempt %d/%d): %s", *address, attempt, attempts, exc)
                if attempt < attempts:
                    time.sleep(backoff_s)
                continue
            return cls(sock)

        raise ConnectError(describe("connect", last_exc)) from last_exc

    @property
    def closed(self) -> bool:
        return self._sock is None

    @property
    def peer(self) -> Optional[Address]:
        if self._sock is None:
            return None
        try:
            return self._sock.getpeername()
        except OSError:
            return None

    def send(self, token: Token) -> None:
        if self._sock is None:
            raise TransportError("send: channel is closed")
        try:
            self._sock.sendall(token.to_bytes())
        except OSError as exc:
            raise TransportError(describe("send", exc)) from exc

    def receive(self) -> Token:
        if self._sock is None:
            raise TransportError("recv: channel is closed")
        try:
            data = self._sock.recv(RECV_BUFSIZE)
        except OSError as exc:
            raise TransportError(describe("recv", exc)) from exc
        if not data:
            raise TransportError("recv: connection closed by peer")
        try:
            return Token.from_bytes(data)
        except ValueError as exc:
            raise TransportError(describe("recv", exc)) from exc

    def close(self) -> None:
        sock, self._sock = self._sock, None
        if sock is not None:
            sock.close()

    def __enter__(self) -> "Channel":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class Listener:
    """Listening socket that hands out exactly one Channel."""

    def __init__(self, sock: socket.socket):
        self._sock: Optional[socket.socket] = sock
        self._accepted = False

    @classmethod
    def bind_and_listen(
        cls,
        address: Address,
        *,
        accept_timeout_s: Optional[float] = None,
    ) -> "Listener":
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind(address)
            sock.listen(LISTEN_BACKLOG)
        except OSError as exc:
            sock.close()
            raise BindError(describe("bind", exc)) from exc
        sock.settimeout(accept_timeout_s)
        listener = cls(sock)
        logger.info("listening on %s:%d", *listener.address)
        return listener

    @property
    def address(self) -> Address:
        if self._sock is None:
            raise BindError("bind: listener is closed")
        return self._sock.getsockname()

    def accept_one(self) -> Channel:
        if self._sock is None:
            raise AcceptError("accept: listener is closed")
        if self._accepted:
            raise AcceptError("accept: listener already accepted its peer")
        try:
            conn, addr = self._sock.accept()
        except OSError as exc:
            raise AcceptError(describe("accept", exc)) from exc
        self._accepted = True
        conn.settimeout(None)
        logger.info("accepted peer %s:%d", *addr)
        return Channel(conn)

    def close(self) -> None:
        sock, self._sock = self._sock, None
        if sock is not None:
            sock.close()

    def __enter__(self) -> "Listener":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
