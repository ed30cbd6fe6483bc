"""
Application-wide constants for pfxsoap.

Timeout values, media types, and environment variable names are
centralized here for easy maintenance and configuration.
"""

from __future__ import annotations

import importlib.metadata

try:
    __version__ = importlib.metadata.version("pfxsoap")
except importlib.metadata.PackageNotFoundError:
    __version__ = "0.1.0"

__all__ = [
    "DEFAULT_PORT_HTTP",
    "DEFAULT_TIMEOUT",
    "ENV_PFX_PASSWORD",
    "ENV_TIMEOUT",
    "KEYRING_SERVICE",
    "MAX_TIMEOUT",
    "MIN_TIMEOUT",
    "SOAP11_ENV_NS",
    "SOAP12_CONTENT_TYPE",
    "SOAP12_ENV_NS",
    "WSDL_QUERY_TOKEN",
    "__version__",
]

# ── Timeout values (seconds) ──────────────────────────────────────────

# Applies to both the WSDL fetch and the operation call
DEFAULT_TIMEOUT = 20

MIN_TIMEOUT = 1
MAX_TIMEOUT = 3600


# ── Protocol constants ────────────────────────────────────────────────

# SOAP 1.2 media type (RFC 3902)
SOAP12_CONTENT_TYPE = "application/soap+xml; charset=utf-8"

# Envelope namespaces
SOAP11_ENV_NS = "http://schemas.xmlsoap.org/soap/envelope/"
SOAP12_ENV_NS = "http://www.w3.org/2003/05/soap-envelope"

# Query token that makes a service endpoint return its WSDL
WSDL_QUERY_TOKEN = "wsdl"

# Some WSDLs embed the default HTTP port literally in soap:address
DEFAULT_PORT_HTTP = 80


# ── Environment variable names ──────────────────────────────────────

ENV_TIMEOUT = "PFXSOAP_TIMEOUT"
ENV_PFX_PASSWORD = "PFXSOAP_PFX_PASSWORD"


# ── Credential storage ──────────────────────────────────────────────

KEYRING_SERVICE = "pfxsoap"
