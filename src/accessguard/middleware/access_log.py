"""Structured access-log middleware.

Emits one record per request once the wrapped app has finished:

* an ``info`` record with the event set to the request path and the fields
  ``status``, ``method``, ``path``, ``query``, ``ip``, ``user-agent``,
  ``latency`` (seconds), ``time`` and any custom fields, or
* one ``error`` record per error attached to the request, or
* nothing, when the path or the skip predicate says so.

When the wrapped app returned without sending ``http.response.start``, the
``status`` field is ``None`` rather than an assumed 200: no status reached the
client.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

import structlog
from starlette.requests import Request
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from accessguard.context import client_ip, get_errors, request_state, user_agent
from accessguard.options import Option, Options, new_options

logger = structlog.get_logger()


class AccessLogMiddleware:
    """ASGI middleware that logs every HTTP request through a structured logger.

    Register it like any Starlette middleware::

        app.add_middleware(AccessLogMiddleware, with_logger(log), with_utc(True))
    """

    def __init__(self, app: ASGIApp, *opts: Option) -> None:
        self.app = app
        self.options: Options = new_options(*opts)
        logger.debug(
            "access_log_middleware_configured",
            skip_paths=sorted(self.options.skip_paths),
            utc=self.options.utc,
            custom_fields=len(self.options.custom_fields),
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope)
        # Inner layers must see the same state dict.
        request_state(request)

        start = time.perf_counter()
        # Inner layers may rewrite these, so read them before delegating.
        path: str = scope["path"]
        query = scope.get("query_string", b"").decode("latin-1")
        status_code: int | None = None

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        await self.app(scope, receive, send_wrapper)

        if self.options.skip(request) or path in self.options.skip_paths:
            return

        latency = time.perf_counter() - start
        end = datetime.now().astimezone()
        if self.options.utc:
            end = end.astimezone(UTC)

        errors = get_errors(request)
        if errors:
            for err in errors:
                self.options.logger.error(str(err) or type(err).__name__)
            return

        fields: dict[str, Any] = {
            "status": status_code,
            "method": request.method,
            "path": path,
            "query": query,
            "ip": client_ip(request),
            "user-agent": user_agent(request),
            "latency": latency,
            "time": end.strftime(self.options.time_format),
        }
        for provider in self.options.custom_fields:
            key, value = provider(request)
            fields[key] = value

        self.options.logger.info(path, **fields)


def new(*opts: Option) -> Callable[[ASGIApp], AccessLogMiddleware]:
    """Build the options once and return a factory that wraps an ASGI app.

    Fails with :class:`~accessguard.exceptions.ConfigurationError` right
    away when no logger is given.
    """
    new_options(*opts)

    def wrap(app: ASGIApp) -> AccessLogMiddleware:
        return AccessLogMiddleware(app, *opts)

    return wrap
