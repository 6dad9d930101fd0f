from accessguard.middleware.access_log import AccessLogMiddleware, new
from accessguard.middleware.recovery import (
    RECOVERY_MESSAGE,
    FaultKind,
    RecoveryMiddleware,
    classify_fault,
    recovery,
)

__all__ = [
    "RECOVERY_MESSAGE",
    "AccessLogMiddleware",
    "FaultKind",
    "RecoveryMiddleware",
    "classify_fault",
    "new",
    "recovery",
]
