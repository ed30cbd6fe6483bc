"""
HTTP transport for SOAP calls.

Each invocation gets its own ``requests.Session`` wrapped in a zeep
``Transport``:

- **Client certificate** via ``requests_pkcs12`` when both a PKCS#12
  container and its passphrase are supplied.  The container is loaded
  in memory; nothing is written to disk.
- **Server verification** stays on unless the caller explicitly opts out.
- **Redirects** from HTTPS to HTTP are refused.

No state is shared between sessions, so concurrent calls never interfere.
"""

from __future__ import annotations

__all__ = ["SafeSession", "build_session", "build_transport"]

import logging
from typing import TYPE_CHECKING
from urllib.parse import urljoin, urlparse

import requests
from requests_pkcs12 import Pkcs12Adapter
from zeep.transports import Transport

from ..errors import CertificateError

if TYPE_CHECKING:
    from ..options import InvocationOptions

_logger = logging.getLogger(__name__)


class SafeSession(requests.Session):
    """Session that refuses redirects from HTTPS to HTTP."""

    def get_redirect_target(self, resp: requests.Response) -> str | None:
        target = super().get_redirect_target(resp)
        if target:
            new_url = urljoin(resp.url, target)
            if urlparse(resp.url).scheme == "https" and urlparse(new_url).scheme == "http":
                raise requests.exceptions.InvalidSchema(
                    f"Refused redirect from HTTPS to HTTP: {new_url}"
                )
        return target


def build_session(options: InvocationOptions) -> SafeSession:
    """
    Create a session configured for one invocation.

    Args:
        options: Validated invocation options.

    Returns:
        A new session. The caller owns it and must close it.

    Raises:
        CertificateError: If the PKCS#12 container cannot be loaded with
            the given passphrase.
    """
    session = SafeSession()

    if options.is_secure:
        try:
            adapter = Pkcs12Adapter(
                pkcs12_data=options.certificate,
                pkcs12_password=options.password,
            )
        except (ValueError, TypeError) as exc:
            session.close()
            raise CertificateError(f"Cannot load client certificate: {exc}") from exc
        session.mount("https://", adapter)
        _logger.debug(
            "Client certificate mounted for https:// (%d bytes)", len(options.certificate or b"")
        )

    if not options.verify_server_certificate:
        session.verify = False
        _logger.warning(
            "Server certificate verification is disabled for this call. "
            "Only use this for hosts trusted out-of-band."
        )

    return session


def build_transport(session: requests.Session, timeout: float) -> Transport:
    """Wrap *session* in a zeep transport with *timeout* for both WSDL load and calls."""
    _logger.debug("Transport timeout: %ss", timeout)
    return Transport(cache=None, timeout=timeout, operation_timeout=timeout, session=session)
