"""
pfxsoap: SOAP calls over mutually authenticated TLS.

Resolves an operation from a WSDL, binds it to the right endpoint, and
calls it with an in-memory PKCS#12 client certificate.  WSDL parsing and
XML (de)serialization are handled by zeep; TLS by requests + requests-pkcs12.
"""

from __future__ import annotations

from .api import describe_service, invoke, invoke_async
from .config import (
    clear_certificate_password,
    load_certificate,
    resolve_certificate_password,
    save_certificate_password,
)
from .constants import __version__
from .errors import (
    CallError,
    CertificateError,
    ConfigError,
    InvalidArgument,
    OperationNotFoundError,
    PfxSoapError,
    WsdlFetchError,
)
from .network.wsdl import (
    OperationBinding,
    PortDescriptor,
    ServiceDescription,
    normalize_wsdl_url,
    resolve_operation,
)
from .options import InvocationOptions

__all__ = [
    "CallError",
    "CertificateError",
    "ConfigError",
    "InvalidArgument",
    "InvocationOptions",
    "OperationBinding",
    "OperationNotFoundError",
    "PfxSoapError",
    "PortDescriptor",
    "ServiceDescription",
    "WsdlFetchError",
    "__version__",
    "clear_certificate_password",
    "describe_service",
    "invoke",
    "invoke_async",
    "load_certificate",
    "normalize_wsdl_url",
    "resolve_certificate_password",
    "resolve_operation",
    "save_certificate_password",
]
