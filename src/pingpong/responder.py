from __future__ import annotations

import logging
from typing import Callable

from .constants import MAX_ITERATIONS
from .net import Channel
from .state import RoleMachine, RoleState, Transcript, simulated_work
from .tokens import PING, PONG

logger = logging.getLogger(__name__)


class Responder(RoleMachine):
    """Listens first: wait for PING -> work -> send PONG, N times."""

    role = "responder"
    initial_state = RoleState.WAITING

    def __init__(
        self,
        channel: Channel,
        rounds: int = MAX_ITERATIONS,
        work: Callable[[], None] = simulated_work,
    ):
        super().__init__(rounds)
        self.channel = channel
        self.work = work

    def run(self) -> Transcript:
        logger.info("[%s] initial state: %s", self.role, self.state.name)

        while self.transcript.completed < self.rounds:
            logger.info("[%s] --- round %d ---", self.role, self.round)

            logger.info("[%s] waiting for %s", self.role, PING)
            request = self.channel.receive()
            if request != PING:
                logger.warning("[%s] expected %s, received %r", self.role, PING, request.text)
            logger.info("[%s] received %s", self.role, request)
            self._enter(RoleState.ACTIVE)

            self.work()
            logger.info("[%s] sending %s", self.role, PONG)
            self.channel.send(PONG)
            self._enter(RoleState.WAITING)
            self.transcript.record(sent=PONG.text, received=request.text)

        return self._finish()
