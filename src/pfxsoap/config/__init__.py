"""
Configuration and credential helpers.

Import from this package rather than from the individual submodules.
"""

from __future__ import annotations

from .config import get_default_timeout, resolve_timeout
from .credentials import (
    clear_certificate_password,
    get_certificate_password,
    load_certificate,
    resolve_certificate_password,
    save_certificate_password,
)

__all__ = [
    "clear_certificate_password",
    "get_certificate_password",
    "get_default_timeout",
    "load_certificate",
    "resolve_certificate_password",
    "resolve_timeout",
    "save_certificate_password",
]
