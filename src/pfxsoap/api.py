"""High-level API for calling SOAP operations.

Provides :func:`invoke` and its awaitable twin :func:`invoke_async`, plus
:func:`describe_service` for listing what a WSDL exposes.  Every call
fetches the WSDL afresh, builds its own session, and shares nothing with
concurrent calls.

For lower-level control, use :mod:`pfxsoap.network.wsdl` and
:mod:`pfxsoap.network.transport` directly.
"""

from __future__ import annotations

__all__ = ["describe_service", "invoke", "invoke_async"]

import asyncio
import dataclasses
import logging
import time
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import requests
from lxml import etree
from zeep import Client, Settings
from zeep.exceptions import Error as ZeepError
from zeep.exceptions import Fault
from zeep.helpers import serialize_object
from zeep.loader import parse_xml
from zeep.plugins import apply_ingress

from .config import resolve_certificate_password, resolve_timeout
from .errors import CallError, InvalidArgument, WsdlFetchError
from .network.plugins import ContentTypePlugin
from .network.transport import build_session, build_transport
from .network.wsdl import (
    OperationBinding,
    ServiceDescription,
    describe,
    normalize_wsdl_url,
    resolve_operation,
    upgrade_to_https,
)
from .options import InvocationOptions

if TYPE_CHECKING:
    from zeep.transports import Transport

_logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def _validate_url(url: object) -> None:
    if not isinstance(url, str):
        raise InvalidArgument(f"url must be a string, got {type(url).__name__}")
    if not url.strip():
        raise InvalidArgument("url must not be empty")


def _validate_call(url: object, operation: object, message: object) -> None:
    """Raise InvalidArgument for malformed positional arguments."""
    _validate_url(url)
    if not isinstance(operation, str):
        raise InvalidArgument(f"operation must be a string, got {type(operation).__name__}")
    if not operation.strip():
        raise InvalidArgument("operation must not be empty")
    if not isinstance(message, Mapping):
        raise InvalidArgument(f"message must be a mapping, got {type(message).__name__}")
    for key in message:
        if not isinstance(key, str):
            raise InvalidArgument(f"message keys must be strings, got {type(key).__name__}")


def _wsdl_location(url: str, opts: InvocationOptions) -> str:
    wsdl_url = normalize_wsdl_url(url)
    if opts.is_secure:
        wsdl_url = upgrade_to_https(wsdl_url)
    return wsdl_url


def _load_client(wsdl_url: str, transport: Transport, opts: InvocationOptions) -> Client:
    """Fetch and parse the WSDL.

    Raises:
        WsdlFetchError: On any network, HTTP, or XML failure.
    """
    settings = Settings(raw_response=opts.raw_response)
    plugins = [ContentTypePlugin(opts.content_type, force_soap12=opts.force_soap12_headers)]
    _logger.debug("Loading WSDL: %s", wsdl_url)
    try:
        return Client(wsdl=wsdl_url, transport=transport, settings=settings, plugins=plugins)
    except (requests.exceptions.RequestException, ZeepError, etree.XMLSyntaxError, OSError) as e:
        raise WsdlFetchError(
            f"Cannot load WSDL from {wsdl_url}: {e}", url=wsdl_url, cause=e
        ) from e


def _fault_error(operation: str, fault: Fault) -> CallError:
    return CallError(
        f"SOAP fault from {operation}: {fault.message}",
        cause=fault,
        fault_code=fault.code,
        detail=fault.detail,
    )


def _check_raw_response(
    client: Client, service: Any, operation: str, response: requests.Response
) -> None:
    """Raise CallError for an error status; raw mode bypasses zeep's reply handling.

    A SOAP fault in the body is reported as a fault, anything else as an
    HTTP error.
    """
    if response.status_code < 400:
        return

    soap_binding = service._binding
    try:
        op = soap_binding.get(operation)
        doc = parse_xml(response.content, client.transport, settings=client.settings)
        doc, _ = apply_ingress(client, doc, response.headers, op)
        soap_binding.process_error(doc, op)
    except Fault as e:
        if e.code is not None:
            raise _fault_error(operation, e) from e
    except ZeepError:
        _logger.debug("Error response from %s is not a SOAP envelope", operation)

    try:
        response.raise_for_status()
    except requests.exceptions.HTTPError as e:
        raise CallError(f"Call to {operation} failed: {e}", cause=e) from e
    raise CallError(f"Call to {operation} failed: HTTP {response.status_code}")


def _with_stored_password(opts: InvocationOptions) -> InvocationOptions:
    """Fill in a missing passphrase from the environment or the keychain."""
    if opts.certificate is None or opts.password is not None:
        return opts
    password = resolve_certificate_password(opts.keychain_label)
    if password is None:
        _logger.warning(
            "Client certificate given without a passphrase; calling without it"
        )
        return opts
    return dataclasses.replace(opts, password=password)


def _call(
    client: Client,
    binding: OperationBinding,
    message: Mapping[str, Any],
    opts: InvocationOptions,
) -> Any:
    """Bind the operation to its endpoint and perform the call.

    Raises:
        CallError: On transport errors, SOAP faults, or (de)serialization errors.
    """
    service = client.create_service(binding.port.binding, binding.location)
    method = service[binding.operation]

    kwargs = dict(message)
    soap_headers = opts.soap_header_elements()
    if soap_headers:
        kwargs["_soapheaders"] = soap_headers

    _logger.debug(
        "Calling %s at %s (%d field(s), %d header(s))",
        binding.operation,
        binding.location,
        len(message),
        len(soap_headers),
    )
    try:
        result = method(**kwargs)
    except Fault as e:
        raise _fault_error(binding.operation, e) from e
    except (requests.exceptions.RequestException, ZeepError) as e:
        raise CallError(f"Call to {binding.operation} failed: {e}", cause=e) from e
    except (TypeError, ValueError, etree.XMLSyntaxError) as e:
        raise CallError(
            f"Cannot serialize or parse message for {binding.operation}: {e}", cause=e
        ) from e

    if opts.raw_response:
        _check_raw_response(client, service, binding.operation, result)
    return result


def _prepare(
    url: object,
    options: InvocationOptions | Mapping[str, Any] | None,
    timeout: float | None,
) -> tuple[InvocationOptions, str, float]:
    opts = _with_stored_password(InvocationOptions.coerce(options))
    effective_timeout = resolve_timeout(timeout, opts.timeout)
    return opts, _wsdl_location(str(url), opts), effective_timeout


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def invoke(
    url: str,
    operation: str,
    message: Mapping[str, Any],
    options: InvocationOptions | Mapping[str, Any] | None = None,
    *,
    timeout: float | None = None,
) -> Any:
    """
    Call a SOAP operation described by the WSDL at *url*.

    Args:
        url: Service or WSDL URL. ``?wsdl`` is appended when missing.
        operation: Name of the operation to call.
        message: Request fields, passed to the operation as keyword arguments.
        options: :class:`~pfxsoap.options.InvocationOptions` or an
            equivalent mapping.
        timeout: Seconds allowed for each network step. Overrides
            ``options.timeout`` and the ``PFXSOAP_TIMEOUT`` default.

    Returns:
        The deserialized result as plain dicts and lists, or the raw
        response body (bytes) when ``raw_response`` is set.

    Raises:
        InvalidArgument: Malformed input; raised before any network activity.
        CertificateError: The client certificate cannot be loaded.
        WsdlFetchError: The WSDL cannot be fetched or parsed.
        OperationNotFoundError: No port exposes *operation*.
        CallError: Transport error, SOAP fault, or (de)serialization error.
    """
    _validate_call(url, operation, message)
    opts, wsdl_url, effective_timeout = _prepare(url, options, timeout)

    started = time.monotonic()
    with build_session(opts) as session:
        transport = build_transport(session, effective_timeout)
        client = _load_client(wsdl_url, transport, opts)
        binding = resolve_operation(
            describe(client.wsdl),
            operation,
            secure=opts.is_secure,
            format_location=opts.custom_format_location,
        )
        result = _call(client, binding, message, opts)

    _logger.info(
        "SOAP call %s completed in %.2fs", operation, time.monotonic() - started
    )
    if opts.raw_response:
        return result.content
    return serialize_object(result, dict)


async def invoke_async(
    url: str,
    operation: str,
    message: Mapping[str, Any],
    options: InvocationOptions | Mapping[str, Any] | None = None,
    *,
    timeout: float | None = None,
) -> Any:
    """Awaitable :func:`invoke`. The blocking call runs in a worker thread.

    Arguments are validated before the thread is started, so
    ``InvalidArgument`` is raised without scheduling any work.
    """
    _validate_call(url, operation, message)
    opts = InvocationOptions.coerce(options)
    return await asyncio.to_thread(invoke, url, operation, message, opts, timeout=timeout)


def describe_service(
    url: str,
    options: InvocationOptions | Mapping[str, Any] | None = None,
    *,
    timeout: float | None = None,
) -> ServiceDescription:
    """
    Fetch the WSDL at *url* and return its ports and operations.

    No operation is called.

    Raises:
        InvalidArgument: Malformed input.
        CertificateError: The client certificate cannot be loaded.
        WsdlFetchError: The WSDL cannot be fetched or parsed.
    """
    _validate_url(url)
    opts, wsdl_url, effective_timeout = _prepare(url, options, timeout)
    with build_session(opts) as session:
        client = _load_client(wsdl_url, build_transport(session, effective_timeout), opts)
        description = describe(client.wsdl)
    _logger.info("Described %s: %d port(s)", wsdl_url, len(description))
    return description
