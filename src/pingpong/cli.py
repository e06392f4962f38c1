from __future__ import annotations

import argparse
import json
import logging
import sys

from .constants import ADDRESS
from .coordinator import run_initiator, run_responder, run_session
from .errors import TurnTakingError
from .net import Listener
from .state import Transcript


def _transcript_payload(t: Transcript) -> dict:
    return {
        "role": t.role,
        "state": t.state.name,
        "rounds": t.completed,
        "seconds": t.duration_s,
        "received": [r.received for r in t.rounds],
    }


def _emit(payload: dict, as_json: bool) -> None:
    print(json.dumps(payload, indent=2) if as_json else payload)


def cmd_run(args: argparse.Namespace) -> int:
    result = run_session()
    payload = {
        "role": "session",
        "rounds": result.rounds,
        "seconds": result.duration_s,
        "initiator": _transcript_payload(result.initiator),
        "responder": _transcript_payload(result.responder),
    }
    _emit(payload, args.json)
    return 0


def cmd_initiate(args: argparse.Namespace) -> int:
    # blocks until the responder shows up, however late
    listener = Listener.bind_and_listen(ADDRESS, accept_timeout_s=None)
    _emit(_transcript_payload(run_initiator(listener)), args.json)
    return 0


def cmd_respond(args: argparse.Namespace) -> int:
    _emit(_transcript_payload(run_responder(ADDRESS)), args.json)
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="pingpong", description="Two-party PING/PONG turn-taking over TCP.")
    p.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    sub = p.add_subparsers(dest="cmd", required=True)

    def add_common(x: argparse.ArgumentParser) -> None:
        x.add_argument("--json", action="store_true")

    run = sub.add_parser("run", help="run both roles in this process")
    add_common(run)
    run.set_defaults(func=cmd_run)

    initiate = sub.add_parser("initiate", help="listen, accept one peer and speak first")
    add_common(initiate)
    initiate.set_defaults(func=cmd_initiate)

    respond = sub.add_parser("respond", help="connect to the initiator and reply to each turn")
    add_common(respond)
    respond.set_defaults(func=cmd_respond)

    return p


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(asctime)s [%(levelname)s] %(message)s")
    try:
        return int(args.func(args))
    except TurnTakingError as exc:
        print(f"Fatal error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
