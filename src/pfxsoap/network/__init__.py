"""Network transport, WSDL model, and zeep plugins."""

from __future__ import annotations

from .transport import build_session, build_transport
from .wsdl import (
    OperationBinding,
    PortDescriptor,
    ServiceDescription,
    normalize_wsdl_url,
    resolve_operation,
)

__all__ = [
    "OperationBinding",
    "PortDescriptor",
    "ServiceDescription",
    "build_session",
    "build_transport",
    "normalize_wsdl_url",
    "resolve_operation",
]
