"""Functional options shared by the access-log and recovery middlewares.

Usage::

    options = new_options(
        with_logger(structlog.get_logger()),
        with_utc(True),
        with_skip_paths("/healthz", "/metrics"),
    )

Options are applied in the order given. Scalar options overwrite earlier
values; ``with_custom_fields`` appends to the providers already registered.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict
from starlette.requests import Request

from accessguard.exceptions import ConfigurationError

if TYPE_CHECKING:
    from accessguard.config.settings import Settings

# strftime patterns. ``datetime`` stops at microseconds, so the
# micro-precision variant is the finest timestamp available.
RFC3339 = "%Y-%m-%dT%H:%M:%S%z"
RFC3339_MICRO = "%Y-%m-%dT%H:%M:%S.%f%z"

CustomField = Callable[[Request], tuple[str, Any]]
SkipFunc = Callable[[Request], bool]
Option = Callable[[dict[str, Any]], None]


def _never_skip(_request: Request) -> bool:
    return False


class Options(BaseModel):
    """Immutable middleware configuration."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    time_format: str = RFC3339_MICRO
    utc: bool = False
    skip_paths: frozenset[str] = frozenset()
    skip: SkipFunc = _never_skip
    logger: Any
    custom_fields: tuple[CustomField, ...] = ()
    stack: bool = False


# ── Option functions ─────────────────────────────────────────────────


def with_time_format(fmt: str) -> Option:
    """Set the strftime pattern used for the ``time`` access-log field."""

    def apply(draft: dict[str, Any]) -> None:
        draft["time_format"] = fmt

    return apply


def with_utc(utc: bool) -> Option:
    """Convert the completion time to UTC before formatting it."""

    def apply(draft: dict[str, Any]) -> None:
        draft["utc"] = utc

    return apply


def with_stack(stack: bool) -> Option:
    """Attach a formatted traceback to recovery records.

    The traceback pinpoints the failing line but is large; the access-log
    middleware ignores this flag.
    """

    def apply(draft: dict[str, Any]) -> None:
        draft["stack"] = stack

    return apply


def with_skip_paths(*paths: str) -> Option:
    """Replace the set of request paths that are never access-logged."""

    def apply(draft: dict[str, Any]) -> None:
        draft["skip_paths"] = list(paths)

    return apply


def with_logger(logger: Any) -> Option:
    """Set the structured logger. Required."""

    def apply(draft: dict[str, Any]) -> None:
        draft["logger"] = logger

    return apply


def with_custom_fields(*fields: CustomField) -> Option:
    """Append per-request field providers, each returning ``(key, value)``."""

    def apply(draft: dict[str, Any]) -> None:
        draft["custom_fields"].extend(fields)

    return apply


def with_skip(skip: SkipFunc) -> Option:
    """Replace the predicate that suppresses the access log for a request."""

    def apply(draft: dict[str, Any]) -> None:
        draft["skip"] = skip

    return apply


# ── Builder ──────────────────────────────────────────────────────────


def _defaults() -> dict[str, Any]:
    return {
        "time_format": RFC3339_MICRO,
        "utc": False,
        "skip_paths": [],
        "skip": _never_skip,
        "logger": None,
        "custom_fields": [],
        "stack": False,
    }


def new_options(*opts: Option) -> Options:
    """Apply *opts* over the defaults and validate the result.

    Raises
    ------
    ConfigurationError
        If no logger was supplied.
    """
    draft = _defaults()
    for opt in opts:
        opt(draft)

    if draft["logger"] is None:
        raise ConfigurationError("a logger is required, pass with_logger(...)")

    return Options(**draft)


def options_from_settings(settings: Settings) -> list[Option]:
    """Translate environment settings into options.

    Put the result before any code-supplied options so the latter win.
    """
    opts = [
        with_time_format(settings.time_format),
        with_utc(settings.utc),
        with_stack(settings.stack),
    ]
    if settings.skip_paths:
        opts.append(with_skip_paths(*settings.skip_paths))
    return opts
