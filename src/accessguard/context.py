"""Per-request context helpers.

Handlers and middlewares share request state through the ASGI scope's
``state`` dict, which Starlette also exposes as ``request.state``. Errors
attached here are reported by the access-log middleware once the handler
chain has returned.
"""

from __future__ import annotations

from typing import Any

from starlette.requests import HTTPConnection

ERRORS_KEY = "accessguard_errors"
ABORTED_KEY = "accessguard_aborted"


def request_state(conn: HTTPConnection) -> dict[str, Any]:
    """Return the scope's state dict, creating it if the server did not."""
    state: dict[str, Any] = conn.scope.setdefault("state", {})
    return state


def add_error(conn: HTTPConnection, error: BaseException) -> None:
    """Attach *error* to the request without interrupting the response."""
    request_state(conn).setdefault(ERRORS_KEY, []).append(error)


def get_errors(conn: HTTPConnection) -> list[BaseException]:
    return list(request_state(conn).get(ERRORS_KEY, ()))


def abort(conn: HTTPConnection) -> None:
    """Mark the request as aborted so outer layers stop further processing."""
    request_state(conn)[ABORTED_KEY] = True


def is_aborted(conn: HTTPConnection) -> bool:
    return bool(request_state(conn).get(ABORTED_KEY, False))


def client_ip(conn: HTTPConnection) -> str:
    """Best-effort client address.

    Forwarding headers are trusted: the first ``X-Forwarded-For`` hop wins,
    then ``X-Real-IP``, then the transport peer.
    """
    forwarded = conn.headers.get("x-forwarded-for", "")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = conn.headers.get("x-real-ip", "").strip()
    if real_ip:
        return real_ip
    if conn.client is not None:
        return conn.client.host
    return ""


def user_agent(conn: HTTPConnection) -> str:
    return conn.headers.get("user-agent", "")
