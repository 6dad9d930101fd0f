"""accessguard - structured access logging and panic recovery for ASGI apps."""

from accessguard.context import abort, add_error, client_ip, get_errors, is_aborted, user_agent
from accessguard.exceptions import AccessGuardError, ConfigurationError
from accessguard.middleware import AccessLogMiddleware, RecoveryMiddleware, new, recovery
from accessguard.options import (
    RFC3339,
    RFC3339_MICRO,
    Options,
    new_options,
    with_custom_fields,
    with_logger,
    with_skip,
    with_skip_paths,
    with_stack,
    with_time_format,
    with_utc,
)

__version__ = "0.1.0"

__all__ = [
    "RFC3339",
    "RFC3339_MICRO",
    "AccessGuardError",
    "AccessLogMiddleware",
    "ConfigurationError",
    "Options",
    "RecoveryMiddleware",
    "abort",
    "add_error",
    "client_ip",
    "get_errors",
    "is_aborted",
    "new",
    "new_options",
    "recovery",
    "user_agent",
    "with_custom_fields",
    "with_logger",
    "with_skip",
    "with_skip_paths",
    "with_stack",
    "with_time_format",
    "with_utc",
]
