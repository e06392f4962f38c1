from __future__ import annotations

import functools
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from .constants import (
    ACCEPT_TIMEOUT_S,
    ADDRESS,
    CONNECT_ATTEMPTS,
    CONNECT_BACKOFF_S,
    CONNECT_WARMUP_S,
    MAX_ITERATIONS,
    WORK_DELAY_S,
)
from .initiator import Initiator
from .net import Address, Channel, Listener
from .responder import Responder
from .state import Transcript

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SessionResult:
    rounds: int
    duration_s: float
    initiator: Transcript
    responder: Transcript


def _work(work_s: float) -> Callable[[], None]:
    return functools.partial(time.sleep, work_s)


def run_initiator(
    listener: Listener,
    *,
    rounds: int = MAX_ITERATIONS,
    work_s: float = WORK_DELAY_S,
) -> Transcript:
    """Accept the single peer on an already-listening socket and play the initiator."""
    with listener:
        channel = listener.accept_one()
    with channel:
        logger.info("[initiator] connected to %s", channel.peer)
        return Initiator(channel, rounds=rounds, work=_work(work_s)).run()


def run_responder(
    address: Address = ADDRESS,
    *,
    rounds: int = MAX_ITERATIONS,
    work_s: float = WORK_DELAY_S,
    warmup_s: float = CONNECT_WARMUP_S,
    connect_attempts: int = CONNECT_ATTEMPTS,
    connect_backoff_s: float = CONNECT_BACKOFF_S,
) -> Transcript:
    """Connect to the initiator's address and play the responder."""
    channel = Channel.connect(
        address,
        warmup_s=warmup_s,
        attempts=connect_attempts,
        backoff_s=connect_backoff_s,
    )
    with channel:
        logger.info("[responder] connected to %s", channel.peer)
        return Responder(channel, rounds=rounds, work=_work(work_s)).run()


def run_session(
    *,
    address: Address = ADDRESS,
    rounds: int = MAX_ITERATIONS,
    work_s: float = WORK_DELAY_S,
    warmup_s: float = CONNECT_WARMUP_S,
    connect_attempts: int = CONNECT_ATTEMPTS,
    connect_backoff_s: float = CONNECT_BACKOFF_S,
    accept_timeout_s: Optional[float] = ACCEPT_TIMEOUT_S,
) -> SessionResult:
    """Run both roles in one process, one thread each, and wait for both.

    The listener is bound before either thread starts, so a BindError is
    raised here and no responder ever attempts to connect. Once both
    threads have finished, the first failure (in the order it happened)
    is re-raised.
    """
    if rounds < 1:
        raise ValueError(f"rounds must be >= 1, got {rounds}")

    listener = Listener.bind_and_listen(address, accept_timeout_s=accept_timeout_s)
    bound = listener.address

    transcripts: dict[str, Transcript] = {}
    failures: list[Exception] = []

    def initiator_runner():
        try:
            transcripts["initiator"] = run_initiator(listener, rounds=rounds, work_s=work_s)
        except Exception as exc:
            logger.error("[initiator] failed: %s", exc)
            failures.append(exc)

    def responder_runner():
        try:
            transcripts["responder"] = run_responder(
                bound,
                rounds=rounds,
                work_s=work_s,
                warmup_s=warmup_s,
                connect_attempts=connect_attempts,
                connect_backoff_s=connect_backoff_s,
            )
        except Exception as exc:
            logger.error("[responder] failed: %s", exc)
            failures.append(exc)

    start = time.monotonic()
    threads = [
        threading.Thread(target=initiator_runner, name="initiator", daemon=True),
        threading.Thread(target=responder_runner, name="responder", daemon=True),
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    duration_s = time.monotonic() - start

    if failures:
        raise failures[0]

    logger.info("session complete: %d rounds in %.2fs", rounds, duration_s)
    return SessionResult(
        rounds=rounds,
        duration_s=duration_s,
        initiator=transcripts["initiator"],
        responder=transcripts["responder"],
    )
