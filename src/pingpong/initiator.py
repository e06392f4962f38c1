from __future__ import annotations

import logging
from typing import Callable

from .constants import MAX_ITERATIONS
from .net import Channel
from .state import RoleMachine, RoleState, Transcript, simulated_work
from .tokens import PING, PONG

logger = logging.getLogger(__name__)


class Initiator(RoleMachine):
    """Speaks first: work -> send PING -> wait for the reply, N times."""

    role = "initiator"
    initial_state = RoleState.ACTIVE

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

            self.work()
            logger.info("[%s] sending %s", self.role, PING)
            self.channel.send(PING)
            self._enter(RoleState.WAITING)

            reply = self.channel.receive()
            if reply != PONG:
                # accepted as opaque data; the peer still advanced its turn
                logger.warning("[%s] expected %s, received %r", self.role, PONG, reply.text)
            logger.info("[%s] received %s", self.role, reply)
            self._enter(RoleState.ACTIVE)
            self.transcript.record(sent=PING.text, received=reply.text)

        return self._finish()
