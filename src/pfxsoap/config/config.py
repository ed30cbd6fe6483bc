"""
Runtime defaults for pfxsoap.

Nothing is persisted: defaults come from environment variables, falling
back to the constants in ``pfxsoap.constants``.
"""

from __future__ import annotations

__all__ = ["get_default_timeout", "resolve_timeout"]

import logging
import os

from ..constants import DEFAULT_TIMEOUT, ENV_TIMEOUT, MAX_TIMEOUT, MIN_TIMEOUT
from ..errors import InvalidArgument

_logger = logging.getLogger(__name__)


def get_default_timeout() -> float:
    """
    Resolve the default call timeout in seconds.

    Reads ``PFXSOAP_TIMEOUT``; out-of-range or non-numeric values are
    ignored with a warning.
    """
    timeout_str = os.environ.get(ENV_TIMEOUT, "").strip()
    if not timeout_str:
        return DEFAULT_TIMEOUT

    try:
        timeout = float(timeout_str)
    except ValueError:
        _logger.warning("Invalid %s value %r, using default", ENV_TIMEOUT, timeout_str)
        return DEFAULT_TIMEOUT

    if timeout < MIN_TIMEOUT or timeout > MAX_TIMEOUT:
        _logger.warning(
            "%s=%s out of range [%d, %d], using default",
            ENV_TIMEOUT,
            timeout_str,
            MIN_TIMEOUT,
            MAX_TIMEOUT,
        )
        return DEFAULT_TIMEOUT
    return timeout


def resolve_timeout(explicit: float | None, option: float | None = None) -> float:
    """
    Pick the timeout for one call.

    Priority: explicit argument > options value > environment > default.

    Raises:
        InvalidArgument: If the explicit argument is not a positive number.
    """
    if explicit is not None:
        if isinstance(explicit, bool) or not isinstance(explicit, (int, float)) or explicit <= 0:
            raise InvalidArgument(f"timeout must be a positive number, got {explicit!r}")
        return explicit
    if option is not None:
        return option
    return get_default_timeout()
