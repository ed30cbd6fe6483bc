"""
zeep plugins and SOAP header helpers.

Outbound SOAP headers are supplied as XML strings and parsed into lxml
elements up front, so a malformed header is rejected before any request
is made.
"""

from __future__ import annotations

__all__ = ["ContentTypePlugin", "parse_soap_header", "soap11_to_soap12", "soap12_to_soap11"]

import copy
import logging
import re
from typing import Any

from lxml import etree
from zeep import Plugin

from ..constants import SOAP11_ENV_NS, SOAP12_CONTENT_TYPE, SOAP12_ENV_NS
from ..errors import InvalidArgument

_logger = logging.getLogger(__name__)

# Entity expansion and network access are disabled for caller-supplied XML
_HEADER_PARSER = etree.XMLParser(resolve_entities=False, no_network=True, remove_comments=True)

_ACTION_PARAM = re.compile(r";\s*action=", re.IGNORECASE)


def parse_soap_header(header: str) -> etree._Element:
    """Parse one SOAP header given as an XML string.

    Raises:
        InvalidArgument: If the string is not a single well-formed XML element.
    """
    try:
        element = etree.fromstring(header.encode("utf-8"), parser=_HEADER_PARSER)
    except etree.XMLSyntaxError as exc:
        raise InvalidArgument(f"SOAP header is not well-formed XML: {exc}") from exc
    return element


# ── Envelope version switching ───────────────────────────────────────


def _switch_namespace(envelope: etree._Element, old_ns: str, new_ns: str) -> etree._Element:
    """Rebuild *envelope* with every use of *old_ns* replaced by *new_ns*.

    Each element keeps its own prefix declarations, so QName values in
    attribute text (``xsi:type``) still resolve.
    """
    old, new = f"{{{old_ns}}}", f"{{{new_ns}}}"

    def rename(name: str) -> str:
        return new + name[len(old):] if name.startswith(old) else name

    def rebuild(node: etree._Element, parent: etree._Element | None, inherited: dict) -> Any:
        if not isinstance(node.tag, str):
            parent.append(copy.deepcopy(node))
            return None
        nsmap = {
            prefix: new_ns if uri == old_ns else uri
            for prefix, uri in node.nsmap.items()
            if inherited.get(prefix) != uri
        }
        attrib = {rename(key): value for key, value in node.attrib.items()}
        if parent is None:
            element = etree.Element(rename(node.tag), attrib, nsmap)
        else:
            element = etree.SubElement(parent, rename(node.tag), attrib, nsmap)
        element.text, element.tail = node.text, node.tail
        for child in node:
            rebuild(child, element, node.nsmap)
        return element

    return rebuild(envelope, None, {})


def soap11_to_soap12(envelope: etree._Element) -> etree._Element:
    """Move the Envelope, Header and Body of a SOAP 1.1 message to SOAP 1.2."""
    return _switch_namespace(envelope, SOAP11_ENV_NS, SOAP12_ENV_NS)


def soap12_to_soap11(envelope: etree._Element) -> etree._Element:
    """Rewrite a SOAP 1.2 reply so a SOAP 1.1 binding can read it.

    A SOAP 1.2 fault (``Code/Value``, ``Reason/Text``, ``Detail``) is
    reshaped into ``faultcode``, ``faultstring`` and ``detail``.
    """
    root = _switch_namespace(envelope, SOAP12_ENV_NS, SOAP11_ENV_NS)
    ns = {"env": SOAP11_ENV_NS}
    fault = root.find("env:Body/env:Fault", namespaces=ns)
    if fault is None or fault.find("faultcode") is not None:
        return root

    code = fault.findtext("env:Code/env:Value", namespaces=ns)
    reason = fault.findtext("env:Reason/env:Text", namespaces=ns)
    detail = fault.find("env:Detail", namespaces=ns)
    for child in list(fault):
        fault.remove(child)
    etree.SubElement(fault, "faultcode").text = code
    etree.SubElement(fault, "faultstring").text = reason
    if detail is not None:
        detail.tag = "detail"
        fault.append(detail)
    return root


def _namespace(envelope: Any) -> str | None:
    if not isinstance(envelope, etree._Element):
        return None
    return etree.QName(envelope).namespace


# ── Plugin ───────────────────────────────────────────────────────────


class ContentTypePlugin(Plugin):
    """Apply the content-type policy to every outbound SOAP message.

    Precedence: an explicit *content_type* replaces the header outright
    and leaves the envelope alone.  Otherwise *force_soap12* sends the
    message as SOAP 1.2: a SOAP 1.1 envelope is moved to the SOAP 1.2
    namespace, the media type becomes ``application/soap+xml`` and the
    ``SOAPAction`` value moves into its ``action`` parameter.  SOAP 1.2
    replies to such a message are turned back into SOAP 1.1 so the
    binding can parse them.  Without either, the binding's own message
    is kept.

    One instance serves a single client.
    """

    def __init__(self, content_type: str | None = None, force_soap12: bool = True) -> None:
        self.content_type = content_type
        self.force_soap12 = force_soap12
        self._downgrade_replies = False

    def egress(
        self,
        envelope: Any,
        http_headers: dict[str, str],
        operation: Any,
        binding_options: Any,
    ) -> tuple[Any, dict[str, str]]:
        if self.content_type:
            http_headers["Content-Type"] = self.content_type
        elif self.force_soap12:
            if _namespace(envelope) == SOAP11_ENV_NS:
                envelope = soap11_to_soap12(envelope)
                self._downgrade_replies = True
            current = http_headers.get("Content-Type", "")
            if not current.lower().startswith("application/soap+xml"):
                action = http_headers.pop("SOAPAction", "").strip('"')
                content_type = SOAP12_CONTENT_TYPE
                if action and not _ACTION_PARAM.search(current):
                    content_type = f'{content_type}; action="{action}"'
                http_headers["Content-Type"] = content_type
        _logger.debug("Outbound Content-Type: %s", http_headers.get("Content-Type"))
        return envelope, http_headers

    def ingress(
        self, envelope: Any, http_headers: Any, operation: Any
    ) -> tuple[Any, Any]:
        if self._downgrade_replies and _namespace(envelope) == SOAP12_ENV_NS:
            _logger.debug("Reading SOAP 1.2 reply as SOAP 1.1")
            envelope = soap12_to_soap11(envelope)
        return envelope, http_headers
