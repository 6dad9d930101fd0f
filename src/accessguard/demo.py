"""Demo application wiring both middlewares into FastAPI.

Run it with ``accessguard serve`` and try ``/ping``, ``/panic``, ``/skip1``
and ``/skip2``.
"""

from __future__ import annotations

import time
from typing import Any

import structlog
from fastapi import FastAPI
from fastapi.responses import PlainTextResponse
from starlette.requests import Request

from accessguard.config import settings
from accessguard.context import client_ip
from accessguard.middleware import AccessLogMiddleware, RecoveryMiddleware
from accessguard.options import (
    RFC3339,
    options_from_settings,
    with_custom_fields,
    with_logger,
    with_skip,
    with_skip_paths,
    with_stack,
    with_time_format,
    with_utc,
)


def _client_field(request: Request) -> tuple[str, Any]:
    return "custom field1", client_ip(request)


def _client_any_field(request: Request) -> tuple[str, Any]:
    return "custom field2", client_ip(request)


def _skip_second(request: Request) -> bool:
    return request.url.path == "/skip2"


def create_app(logger: Any = None) -> FastAPI:
    """Build the demo app. Middlewares added last run outermost."""
    log = logger if logger is not None else structlog.get_logger("accessguard.demo")
    base = options_from_settings(settings)

    app = FastAPI(title=settings.app_name, version=settings.app_version)

    app.add_middleware(
        RecoveryMiddleware,
        *base,
        with_logger(log),
        with_stack(True),
        with_custom_fields(_client_field, _client_any_field),
    )
    app.add_middleware(
        AccessLogMiddleware,
        *base,
        with_logger(log),
        with_utc(True),
        with_time_format(RFC3339),
        with_custom_fields(_client_field, _client_any_field),
        with_skip_paths("/skip1"),
        with_skip(_skip_second),
    )

    @app.get("/ping")
    async def ping() -> PlainTextResponse:
        return PlainTextResponse(f"pong {int(time.time())}")

    @app.get("/panic")
    async def panic() -> PlainTextResponse:
        raise RuntimeError("An unexpected error happen!")

    @app.get("/skip1")
    async def skip1() -> PlainTextResponse:
        return PlainTextResponse("skip1!")

    @app.get("/skip2")
    async def skip2() -> PlainTextResponse:
        return PlainTextResponse("skip2!")

    return app
