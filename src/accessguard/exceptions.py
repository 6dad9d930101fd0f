"""Exception hierarchy for accessguard.

Only construction-time problems surface as exceptions. Faults raised while a
request is being handled are absorbed by the recovery middleware and turned
into log records plus a 500 response.
"""

from __future__ import annotations


class AccessGuardError(Exception):
    """Base exception for all accessguard errors."""


class ConfigurationError(AccessGuardError):
    """Raised when middleware options fail validation.

    This is a programming error in the wiring of the application, so it is
    raised while the middleware stack is being built, before any request is
    served.
    """
