from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass, field

from .constants import WORK_DELAY_S

logger = logging.getLogger(__name__)


class RoleState(enum.Enum):
    WAITING = "WAITING"
    ACTIVE = "ACTIVE"
    DONE = "DONE"


@dataclass(frozen=True, slots=True)
class RoundRecord:
    round: int
    sent: str
    received: str


@dataclass(slots=True)
class Transcript:
    role: str
    rounds: list[RoundRecord] = field(default_factory=list)
    state: RoleState = RoleState.WAITING
    start_ts: float = field(default_factory=time.monotonic)
    end_ts: float | None = None

    @property
    def completed(self) -> int:
        return len(self.rounds)

    @property
    def duration_s(self) -> float:
        if self.end_ts is None:
            return 0.0
        return max(0.0, self.end_ts - self.start_ts)

    def record(self, sent: str, received: str) -> RoundRecord:
        rec = RoundRecord(round=self.completed + 1, sent=sent, received=received)
        self.rounds.append(rec)
        return rec


def simulated_work() -> None:
    time.sleep(WORK_DELAY_S)


class RoleMachine:
    """Turn-taking state shared by both roles.

    Each role flips between ACTIVE and WAITING on every send and receive and
    ends in DONE once its round counter reaches the configured count.
    """

    role = "role"
    initial_state = RoleState.WAITING

    def __init__(self, rounds: int):
        if rounds < 1:
            raise ValueError(f"rounds must be >= 1, got {rounds}")
        self.rounds = rounds
        self.state = self.initial_state
        self.transcript = Transcript(role=self.role, state=self.state)

    @property
    def round(self) -> int:
        # 1-based number of the round in progress
        return self.transcript.completed + 1

    def _enter(self, state: RoleState) -> None:
        if self.state is RoleState.DONE:
            raise RuntimeError(f"{self.role} is DONE; cannot enter {state.name}")
        logger.info(
            "[%s] round %d/%d: %s -> %s",
            self.role,
            min(self.round, self.rounds),
            self.rounds,
            self.state.name,
            state.name,
        )
        self.state = state
        self.transcript.state = state

    def _finish(self) -> "Transcript":
        self._enter(RoleState.DONE)
        self.transcript.end_ts = time.monotonic()
        logger.info("[%s] finished %d rounds in %.2fs", self.role, self.transcript.completed, self.transcript.duration_s)
        return self.transcript
