"""
Service description model and operation resolution.

A fetched WSDL is flattened into an ordered tuple of ports (services in
document order, ports in document order within each service).  Resolution
picks the first port whose binding exposes the requested operation and
computes the endpoint the call is actually sent to.
"""

from __future__ import annotations

__all__ = [
    "OperationBinding",
    "PortDescriptor",
    "ServiceDescription",
    "describe",
    "effective_location",
    "normalize_wsdl_url",
    "resolve_operation",
    "upgrade_to_https",
]

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING
from urllib.parse import urlsplit, urlunsplit

from ..constants import DEFAULT_PORT_HTTP, WSDL_QUERY_TOKEN
from ..errors import InvalidArgument, OperationNotFoundError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from zeep.wsdl import Document

_logger = logging.getLogger(__name__)


# ── URL helpers ──────────────────────────────────────────────────────


def _has_wsdl_token(query: str) -> bool:
    for token in query.split("&"):
        key = token.split("=", 1)[0]
        if key.lower() == WSDL_QUERY_TOKEN:
            return True
    return False


def normalize_wsdl_url(url: str) -> str:
    """Point *url* at the service's WSDL document.

    Appends ``?wsdl`` unless the query string already carries a
    case-insensitive ``wsdl`` token.  An existing query gets ``&wsdl``
    instead; a fragment stays at the end.

    >>> normalize_wsdl_url("https://host/svc")
    'https://host/svc?wsdl'
    >>> normalize_wsdl_url("https://host/svc?WSDL")
    'https://host/svc?WSDL'
    """
    base, sep, fragment = url.partition("#")
    if "?" in base:
        query = base.split("?", 1)[1]
        if _has_wsdl_token(query):
            return url
        joiner = "&" if query else ""
    else:
        joiner = "?"
    return f"{base}{joiner}{WSDL_QUERY_TOKEN}{sep}{fragment}"


def upgrade_to_https(url: str) -> str:
    """Rewrite an ``http://`` URL to ``https://``; other URLs are returned unchanged."""
    if url[:7].lower() == "http://":
        return "https://" + url[7:]
    return url


def _strip_default_port(url: str) -> str:
    """Drop an explicit ``:80`` port segment from *url*."""
    parts = urlsplit(url)
    try:
        port = parts.port
    except ValueError:
        return url
    if port != DEFAULT_PORT_HTTP:
        return url
    netloc = parts.netloc.rsplit(":", 1)[0]
    return urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment))


def effective_location(
    location: str,
    *,
    secure: bool = False,
    format_location: Callable[[str], str] | None = None,
) -> str:
    """
    Compute the endpoint a resolved operation is sent to.

    Steps, in order: strip an explicit default port 80, upgrade to HTTPS
    when *secure*, then apply *format_location*.

    Raises:
        InvalidArgument: If *format_location* raises or does not return a string.
    """
    result = _strip_default_port(location)
    if secure:
        result = upgrade_to_https(result)
    if format_location is not None:
        try:
            result = format_location(result)
        except Exception as exc:
            raise InvalidArgument(f"custom_format_location failed for {result}: {exc}") from exc
        if not isinstance(result, str):
            raise InvalidArgument(
                f"custom_format_location must return a string, got {type(result).__name__}"
            )
    if result != location:
        _logger.debug("Endpoint rewritten: %s -> %s", location, result)
    return result


# ── Service description ──────────────────────────────────────────────


@dataclass(frozen=True)
class PortDescriptor:
    """One port of a parsed WSDL.

    Attributes:
        service: Name of the service the port belongs to.
        name: Port name.
        binding: Qualified binding name (``{namespace}Name``).
        location: Endpoint address declared by the port.
        operations: Operation names exposed by the binding, in document order.
    """

    service: str
    name: str
    binding: str
    location: str
    operations: tuple[str, ...] = ()

    def exposes(self, operation: str) -> bool:
        return operation in self.operations


@dataclass(frozen=True)
class ServiceDescription:
    """Ports of a parsed WSDL, in document order."""

    ports: tuple[PortDescriptor, ...] = ()

    def __iter__(self) -> Iterator[PortDescriptor]:
        return iter(self.ports)

    def __len__(self) -> int:
        return len(self.ports)

    @property
    def operations(self) -> tuple[str, ...]:
        """All operation names across ports, first occurrence first."""
        seen: dict[str, None] = {}
        for port in self.ports:
            for op in port.operations:
                seen.setdefault(op, None)
        return tuple(seen)

    def find_port(self, operation: str) -> PortDescriptor:
        """Return the first port exposing *operation*.

        Raises:
            OperationNotFoundError: If no port exposes it.
        """
        for port in self.ports:
            if port.exposes(operation):
                return port
        raise OperationNotFoundError(operation)


def describe(document: Document) -> ServiceDescription:
    """Flatten a zeep WSDL document into a :class:`ServiceDescription`."""
    ports: list[PortDescriptor] = []
    for service_name, service in document.services.items():
        for port_name, port in service.ports.items():
            binding = port.binding
            ports.append(
                PortDescriptor(
                    service=str(service_name),
                    name=str(port_name),
                    binding=str(binding.name),
                    location=(port.binding_options or {}).get("address") or "",
                    operations=tuple(binding._operations),
                )
            )
    _logger.debug("Service description: %d port(s)", len(ports))
    return ServiceDescription(ports=tuple(ports))


# ── Operation resolution ─────────────────────────────────────────────


@dataclass(frozen=True)
class OperationBinding:
    """A resolved operation bound to the endpoint the call is sent to."""

    operation: str
    port: PortDescriptor
    location: str


def resolve_operation(
    description: ServiceDescription,
    operation: str,
    *,
    secure: bool = False,
    format_location: Callable[[str], str] | None = None,
) -> OperationBinding:
    """
    Select the port for *operation* and compute its effective endpoint.

    Args:
        description: Parsed service description.
        operation: Operation name to call.
        secure: Whether the call uses a client certificate; forces HTTPS.
        format_location: Optional final rewrite of the endpoint.

    Returns:
        OperationBinding for the first port exposing *operation*.

    Raises:
        OperationNotFoundError: If no port exposes *operation*.
        InvalidArgument: If *format_location* returns a non-string.
    """
    port = description.find_port(operation)
    location = effective_location(
        port.location, secure=secure, format_location=format_location
    )
    _logger.debug(
        "Resolved %s to port %s/%s at %s", operation, port.service, port.name, location
    )
    return OperationBinding(operation=operation, port=port, location=location)
