from __future__ import annotations


class TurnTakingError(Exception):
    """Fatal failure of a role. Never retried."""


class BindError(TurnTakingError):
    pass


class AcceptError(TurnTakingError):
    pass


class ConnectError(TurnTakingError):
    pass


class TransportError(TurnTakingError):
    pass


def describe(operation: str, exc: BaseException) -> str:
    # "send: [Errno 32] Broken pipe"
    return f"{operation}: {exc}"
