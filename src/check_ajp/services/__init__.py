"""Service layer for check-ajp.

Check logic on top of the AJP13 client: building the forward request from
check options, running the exchange and turning the response into a
monitoring-plugin status.
"""

from check_ajp.services.check import (
    CheckOptions,
    CheckResult,
    CheckService,
    PingResult,
    PluginStatus,
)
from check_ajp.services.exceptions import CheckError, ServiceError, ValidationError

__all__ = [
    "CheckOptions",
    "CheckResult",
    "CheckService",
    "PingResult",
    "PluginStatus",
    "CheckError",
    "ServiceError",
    "ValidationError",
]
