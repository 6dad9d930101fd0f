"""Render the head of an inbound request as raw HTTP/1.x text."""

from __future__ import annotations

from starlette.types import Scope


def _canonical(name: bytes) -> str:
    return "-".join(part.capitalize() for part in name.decode("latin-1").split("-"))


def dump_request(scope: Scope) -> str:
    """Dump the request line and headers of *scope*, body excluded.

    ``Host`` is written first, the remaining headers follow in arrival order.
    """
    method = scope.get("method", "GET")
    raw_path = scope.get("raw_path") or scope.get("path", "/").encode("utf-8")
    target = raw_path.decode("latin-1")
    query = scope.get("query_string", b"")
    if query:
        target = f"{target}?{query.decode('latin-1')}"
    version = scope.get("http_version", "1.1")

    host = ""
    others: list[str] = []
    for name, value in scope.get("headers", []):
        if name.lower() == b"host":
            host = value.decode("latin-1")
            continue
        others.append(f"{_canonical(name)}: {value.decode('latin-1')}\r\n")

    lines = [f"{method} {target} HTTP/{version}\r\n"]
    if host:
        lines.append(f"Host: {host}\r\n")
    lines.extend(others)
    lines.append("\r\n")
    return "".join(lines)
