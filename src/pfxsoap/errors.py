"""pfxsoap error types."""

from __future__ import annotations

from typing import Any

__all__ = [
    "CallError",
    "CertificateError",
    "ConfigError",
    "InvalidArgument",
    "OperationNotFoundError",
    "PfxSoapError",
    "WsdlFetchError",
]


class PfxSoapError(Exception):
    """Base error for pfxsoap operations."""


class InvalidArgument(PfxSoapError):
    """Malformed caller input, detected before any network activity."""


class CertificateError(InvalidArgument):
    """The PKCS#12 container is unreadable or the passphrase is wrong."""


class ConfigError(PfxSoapError):
    """Configuration validation error."""


class WsdlFetchError(PfxSoapError):
    """The service description could not be fetched or parsed.

    Args:
        message: Human-readable error description.
        url: WSDL location that was requested.
        cause: Underlying exception, if any.
    """

    def __init__(
        self, message: str, *, url: str | None = None, cause: BaseException | None = None
    ) -> None:
        super().__init__(message)
        self.url = url
        self.cause = cause


class OperationNotFoundError(PfxSoapError):
    """No port in the service description exposes the requested operation."""

    def __init__(self, operation: str) -> None:
        super().__init__(f"Operation '{operation}' not found in WSDL")
        self.operation = operation

    def __reduce__(self) -> tuple[type[OperationNotFoundError], tuple[str]]:
        return (type(self), (self.operation,))


class CallError(PfxSoapError):
    """The SOAP call failed: transport error, SOAP fault, or (de)serialization error.

    Args:
        message: Human-readable error description.
        cause: Underlying exception.
        fault_code: SOAP fault code when the server returned a fault.
        detail: SOAP fault detail element, if present.
    """

    def __init__(
        self,
        message: str,
        *,
        cause: BaseException | None = None,
        fault_code: str | None = None,
        detail: Any = None,
    ) -> None:
        super().__init__(message)
        self.cause = cause
        self.fault_code = fault_code
        self.detail = detail

    @property
    def is_fault(self) -> bool:
        """True when the server answered with a SOAP fault."""
        return self.fault_code is not None
