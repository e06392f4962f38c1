from __future__ import annotations

from dataclasses import dataclass

from .constants import PING_TEXT, PONG_TEXT, RECV_BUFSIZE, TERMINATOR


@dataclass(frozen=True, slots=True)
class Token:
    """One turn's worth of payload: text followed by a single terminator byte.

    There is no length prefix. A token must fit in one read buffer so the
    receiving side can pick it up with a single recv().
    """

    text: str

    def __post_init__(self) -> None:
        if not self.text:
            raise ValueError("token text must not be empty")
        raw = self.text.encode("utf-8")
        if TERMINATOR in raw:
            raise ValueError("token text must not contain the terminator byte")
        if len(raw) + len(TERMINATOR) > RECV_BUFSIZE:
            raise ValueError(f"token too large: {len(raw)} bytes")

    def to_bytes(self) -> bytes:
        return self.text.encode("utf-8") + TERMINATOR

    @staticmethod
    def from_bytes(raw: bytes) -> "Token":
        text, _, _ = raw.partition(TERMINATOR)
        return Token(text.decode("utf-8", errors="replace"))

    def __str__(self) -> str:
        return self.text


PING = Token(PING_TEXT)
PONG = Token(PONG_TEXT)
