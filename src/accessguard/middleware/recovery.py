"""Recovery middleware: the last barrier between a failing handler and the server.

Any exception escaping the wrapped app is logged and absorbed. A peer that
went away (broken pipe, connection reset) gets a short error record and no
response; every other fault is logged with the request dump, custom fields
and optionally the traceback, then answered with a bodiless 500.
"""

from __future__ import annotations

import enum
import traceback
from collections.abc import Callable
from datetime import datetime
from typing import Any

import structlog
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from accessguard.context import abort, add_error, request_state
from accessguard.dump import dump_request
from accessguard.options import Option, Options, new_options

logger = structlog.get_logger()

RECOVERY_MESSAGE = "[Recovery from panic]"

_BROKEN_CONNECTION_MARKERS = ("broken pipe", "connection reset by peer")


class FaultKind(enum.StrEnum):
    BROKEN_CONNECTION = "broken_connection"
    GENERIC = "generic"


def _exception_chain(exc: BaseException) -> list[BaseException]:
    chain: list[BaseException] = []
    current: BaseException | None = exc
    while current is not None and current not in chain:
        chain.append(current)
        current = current.__cause__ or current.__context__
    return chain


def classify_fault(exc: BaseException) -> FaultKind:
    """Tell a dropped client connection apart from a genuine fault.

    The exception, or anything in its cause/context chain, must be an
    ``OSError`` whose message mentions a broken pipe or a connection reset by
    peer (any case). ``BrokenPipeError`` and ``ConnectionResetError`` match by
    type alone, since the OS may raise them with an empty message.
    """
    for err in _exception_chain(exc):
        if not isinstance(err, OSError):
            continue
        if isinstance(err, BrokenPipeError | ConnectionResetError):
            return FaultKind.BROKEN_CONNECTION
        message = str(err).lower()
        if any(marker in message for marker in _BROKEN_CONNECTION_MARKERS):
            return FaultKind.BROKEN_CONNECTION
    return FaultKind.GENERIC


class RecoveryMiddleware:
    """ASGI middleware that turns unhandled exceptions into logged 500s."""

    def __init__(self, app: ASGIApp, *opts: Option) -> None:
        self.app = app
        self.options: Options = new_options(*opts)
        logger.debug(
            "recovery_middleware_configured",
            stack_enabled=self.options.stack,
            custom_fields=len(self.options.custom_fields),
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope)
        request_state(request)
        response_started = False

        async def send_wrapper(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as exc:
            dump = dump_request(scope)
            if classify_fault(exc) is FaultKind.BROKEN_CONNECTION:
                self._handle_broken_connection(request, exc, dump)
                return
            self._log_fault(request, exc, dump)
            abort(request)
            # Headers already on the wire: the status can no longer change.
            if not response_started:
                await Response(status_code=500)(scope, receive, send)

    def _handle_broken_connection(self, request: Request, exc: Exception, dump: str) -> None:
        # The connection is gone, writing a status would fail.
        self.options.logger.error(request.url.path, error=exc, request=dump)
        add_error(request, exc)
        abort(request)

    def _log_fault(self, request: Request, exc: Exception, dump: str) -> None:
        fields: dict[str, Any] = {
            "time": datetime.now().astimezone(),
            "error": exc,
            "request": dump,
        }
        for provider in self.options.custom_fields:
            key, value = provider(request)
            fields[key] = value
        if self.options.stack:
            fields["stack"] = "".join(traceback.format_exception(exc))

        self.options.logger.error(RECOVERY_MESSAGE, **fields)


def recovery(*opts: Option) -> Callable[[ASGIApp], RecoveryMiddleware]:
    """Build the options once and return a factory that wraps an ASGI app."""
    new_options(*opts)

    def wrap(app: ASGIApp) -> RecoveryMiddleware:
        return RecoveryMiddleware(app, *opts)

    return wrap
