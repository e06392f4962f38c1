from __future__ import annotations

HOST = "127.0.0.1"
PORT = 9889
ADDRESS = (HOST, PORT)

MAX_ITERATIONS = 6

RECV_BUFSIZE = 128
TERMINATOR = b"\0"

PING_TEXT = "PING"  # go-ahead, sent by the initiator
PONG_TEXT = "PONG"  # acknowledgement, sent by the responder

WORK_DELAY_S = 1.0

LISTEN_BACKLOG = 1
ACCEPT_TIMEOUT_S = 10.0

CONNECT_WARMUP_S = 0.1
CONNECT_ATTEMPTS = 5
CONNECT_BACKOFF_S = 0.2
