from __future__ import annotations

import threading

import pytest

from pingpong.errors import TransportError
from pingpong.initiator import Initiator
from pingpong.responder import Responder
from pingpong.state import RoleState
from pingpong.tokens import PING, PONG, Token


def _no_work() -> None:
    return None


def _run_in_thread(fn):
    holder = {}

    def runner():
        try:
            holder["result"] = fn()
        except Exception as exc:
            holder["error"] = exc

    t = threading.Thread(target=runner, daemon=True)
    t.start()
    return t, holder


def test_initial_states():
    assert Initiator(None, rounds=1).state is RoleState.ACTIVE
    assert Responder(None, rounds=1).state is RoleState.WAITING


def test_rounds_must_be_positive():
    with pytest.raises(ValueError):
        Initiator(None, rounds=0)
    with pytest.raises(ValueError):
        Responder(None, rounds=0)


@pytest.mark.parametrize("rounds", [1, 3, 6])
def test_strict_alternation_and_round_trip(channel_pair, rounds):
    left, right = channel_pair
    initiator = Initiator(left, rounds=rounds, work=_no_work)
    responder = Responder(right, rounds=rounds, work=_no_work)

    t, holder = _run_in_thread(responder.run)
    a = initiator.run()
    t.join(timeout=5.0)
    b = holder["result"]

    assert a.state is RoleState.DONE and b.state is RoleState.DONE
    assert [r.round for r in a.rounds] == list(range(1, rounds + 1))
    assert [r.round for r in b.rounds] == list(range(1, rounds + 1))
    for ra, rb in zip(a.rounds, b.rounds):
        assert rb.received == ra.sent == PING.text
        assert ra.received == rb.sent == PONG.text


def test_done_is_terminal(channel_pair):
    left, right = channel_pair
    t, _ = _run_in_thread(Responder(right, rounds=1, work=_no_work).run)
    initiator = Initiator(left, rounds=1, work=_no_work)
    initiator.run()
    t.join(timeout=5.0)
    with pytest.raises(RuntimeError):
        initiator.run()


def test_unexpected_token_still_advances(channel_pair):
    # Received content is not validated: any non-empty payload counts as a turn.
    left, right = channel_pair
    responder = Responder(right, rounds=2, work=_no_work)
    t, holder = _run_in_thread(responder.run)

    for _ in range(2):
        left.send(Token("HELLO"))
        assert left.receive() == PONG
    t.join(timeout=5.0)

    transcript = holder["result"]
    assert transcript.state is RoleState.DONE
    assert [r.received for r in transcript.rounds] == ["HELLO", "HELLO"]


def test_peer_closing_early_fails_initiator(channel_pair):
    left, right = channel_pair
    calls = []

    def close_own_transport():
        # runs after the first receive, before the first send
        calls.append(1)
        right._sock.close()

    responder = Responder(right, rounds=3, work=close_own_transport)
    t, holder = _run_in_thread(responder.run)

    initiator = Initiator(left, rounds=3, work=_no_work)
    with pytest.raises(TransportError):
        initiator.run()
    t.join(timeout=5.0)

    assert calls == [1]
    assert isinstance(holder["error"], TransportError)
    assert initiator.state is RoleState.WAITING
    assert initiator.transcript.completed == 0
