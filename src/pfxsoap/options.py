"""
Per-call invocation options.

:class:`InvocationOptions` is validated on construction, so any instance
that exists is safe to hand to the transport layer.  Plain mappings
(including the legacy camelCase keys) are converted with
:meth:`InvocationOptions.from_mapping`.
"""

from __future__ import annotations

__all__ = ["InvocationOptions", "validate_pkcs12"]

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field, fields
from typing import Any

from asn1crypto import pkcs12 as asn1_pkcs12

from .errors import CertificateError, InvalidArgument
from .network.plugins import parse_soap_header

_logger = logging.getLogger(__name__)

# PFX version is fixed at 3 (RFC 7292, section 4); asn1crypto names it "v3"
_PFX_VERSION = "v3"

_CAMEL_CASE_ALIASES = {
    "rawResponse": "raw_response",
    "contentType": "content_type",
    "forceSoap12Headers": "force_soap12_headers",
    "customFormatLocation": "custom_format_location",
    "verifyServerCertificate": "verify_server_certificate",
    "keychainLabel": "keychain_label",
}


def validate_pkcs12(data: bytes) -> None:
    """Check that *data* is structurally a PKCS#12 PFX container.

    Only the outer structure is inspected; the passphrase is checked when
    the transport loads the key.

    Raises:
        CertificateError: If the blob is not a PFX.
    """
    try:
        pfx = asn1_pkcs12.Pfx.load(data, strict=True)
        version = pfx["version"].native
        content_type = pfx["auth_safe"]["content_type"].native
    except (ValueError, TypeError, KeyError) as exc:
        raise CertificateError(f"certificate is not a PKCS#12 container: {exc}") from exc

    if version != _PFX_VERSION:
        raise CertificateError(f"Unsupported PKCS#12 version: {version}")
    _logger.debug("PKCS#12 container: %d bytes, authSafe=%s", len(data), content_type)


@dataclass(frozen=True)
class InvocationOptions:
    """Options for a single SOAP invocation.

    Attributes:
        certificate: PKCS#12/PFX container used as the TLS client certificate.
        password: Passphrase for *certificate*. Use ``""`` for an
            unencrypted container.
        headers: SOAP header elements as XML strings, attached in order.
        raw_response: Return the raw response body instead of the
            deserialized result.
        content_type: Explicit ``Content-Type`` for the request.
        force_soap12_headers: Send the SOAP 1.2 media type even when the
            binding declares SOAP 1.1.
        custom_format_location: Final rewrite applied to the resolved endpoint.
        verify_server_certificate: Set to False to trust the server without
            validating its certificate chain.
        keychain_label: Keychain entry holding the passphrase, used when
            *certificate* is given without *password*.
        timeout: Per-call timeout in seconds.
    """

    certificate: bytes | None = field(default=None, repr=False)
    password: str | None = field(default=None, repr=False)
    headers: Sequence[str] = ()
    raw_response: bool = False
    content_type: str | None = None
    force_soap12_headers: bool = True
    custom_format_location: Callable[[str], str] | None = None
    verify_server_certificate: bool = True
    timeout: float | None = None
    keychain_label: str | None = None

    def __post_init__(self) -> None:
        self._validate_certificate()
        self._validate_headers()

        for name in ("raw_response", "force_soap12_headers", "verify_server_certificate"):
            if not isinstance(getattr(self, name), bool):
                raise InvalidArgument(f"{name} must be a bool")

        if self.content_type is not None and (
            not isinstance(self.content_type, str) or not self.content_type.strip()
        ):
            raise InvalidArgument("content_type must be a non-empty string")

        if self.custom_format_location is not None and not callable(
            self.custom_format_location
        ):
            raise InvalidArgument("custom_format_location must be callable")

        if self.timeout is not None:
            if isinstance(self.timeout, bool) or not isinstance(self.timeout, (int, float)):
                raise InvalidArgument("timeout must be a number")
            if self.timeout <= 0:
                raise InvalidArgument("timeout must be positive")

        if self.keychain_label is not None and (
            not isinstance(self.keychain_label, str) or not self.keychain_label.strip()
        ):
            raise InvalidArgument("keychain_label must be a non-empty string")

    def _validate_certificate(self) -> None:
        cert = self.certificate
        if cert is not None:
            if not isinstance(cert, (bytes, bytearray, memoryview)):
                raise InvalidArgument(
                    f"certificate must be bytes, got {type(cert).__name__}"
                )
            cert = bytes(cert)
            if not cert:
                raise InvalidArgument("certificate must not be empty")
            validate_pkcs12(cert)
            object.__setattr__(self, "certificate", cert)

        if self.password is not None and not isinstance(self.password, str):
            raise InvalidArgument("password must be a string")

        if cert is None and self.password is not None:
            _logger.warning("password was given without a certificate; it will not be used")

    def _validate_headers(self) -> None:
        headers = self.headers
        if headers is None:
            headers = ()
        if isinstance(headers, (str, bytes)) or not isinstance(headers, Sequence):
            raise InvalidArgument("headers must be a sequence of strings")
        for header in headers:
            if not isinstance(header, str):
                raise InvalidArgument(
                    f"each header must be a string, got {type(header).__name__}"
                )
            parse_soap_header(header)
        object.__setattr__(self, "headers", tuple(headers))

    def soap_header_elements(self) -> list[Any]:
        """Parse :attr:`headers` into fresh lxml elements for one outbound call."""
        return [parse_soap_header(h) for h in self.headers]

    @property
    def is_secure(self) -> bool:
        """True when the call authenticates with a client certificate."""
        return self.certificate is not None and self.password is not None

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any]) -> InvocationOptions:
        """Build options from a plain mapping.

        Accepts field names and the camelCase spellings (``rawResponse``,
        ``contentType``, ``forceSoap12Headers``, ``customFormatLocation``,
        ``verifyServerCertificate``, ``keychainLabel``).
        ``None`` values are treated as absent.

        Raises:
            InvalidArgument: On unknown keys or invalid values.
        """
        if not isinstance(options, Mapping):
            raise InvalidArgument("options must be a mapping or InvocationOptions")

        known = {f.name for f in fields(cls) if f.init}
        kwargs: dict[str, Any] = {}
        for key, value in options.items():
            name = _CAMEL_CASE_ALIASES.get(key, key)
            if name not in known:
                raise InvalidArgument(f"Unknown option: {key!r}")
            if name in kwargs:
                raise InvalidArgument(f"Option given twice: {key!r}")
            if value is not None:
                kwargs[name] = value
        return cls(**kwargs)

    @classmethod
    def coerce(cls, options: InvocationOptions | Mapping[str, Any] | None) -> InvocationOptions:
        """Return *options* as an :class:`InvocationOptions` instance."""
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options
        return cls.from_mapping(options)
