"""
Real NAV SOAP client.

Used when NAV credentials are configured. Talks SOAP 1.1 to the Dynamics NAV
page web services over `requests`, one `requests.Session` per NavSession.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from datetime import date, datetime
from typing import Any, Callable, Dict, Optional

import requests

from creditdesk.errors import TRANSPORT, RemoteProtocolError
from creditdesk.integrations.contracts.interfaces import NavSession, NavTransport
from creditdesk.utils.config_loader import NavConfig

logger = logging.getLogger(__name__)

SOAP_ENV_NS = "http://schemas.xmlsoap.org/soap/envelope/"
NAV_NS_PREFIX = "urn:microsoft-dynamics-schemas/"


# ---------------------------------------------------------------------------
# Envelope encoding / decoding
# ---------------------------------------------------------------------------

def _strip_ns(tag: str) -> str:
    """'{ns}tag' -> 'tag'"""
    if "}" in tag:
        return tag.split("}", 1)[1]
    return tag


def service_namespace(service_path: str) -> str:
    """Page/CustomerList -> urn:microsoft-dynamics-schemas/page/customerlist"""
    return NAV_NS_PREFIX + service_path.strip("/").lower()


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def _append_value(parent: ET.Element, namespace: str, name: str, value: Any) -> None:
    if value is None:
        return
    if isinstance(value, (list, tuple)):
        for item in value:
            _append_value(parent, namespace, name, item)
        return
    element = ET.SubElement(parent, f"{{{namespace}}}{name}")
    if isinstance(value, dict):
        for key, child in value.items():
            _append_value(element, namespace, key, child)
    else:
        element.text = _format_value(value)


def build_envelope(namespace: str, operation: str, params: Optional[Dict[str, Any]] = None) -> bytes:
    """
    Build the SOAP request for `operation`.

    Nested dicts become nested elements, lists become repeated elements with
    the same tag, booleans are written as true/false and None values are left out.
    """
    envelope = ET.Element(f"{{{SOAP_ENV_NS}}}Envelope")
    body = ET.SubElement(envelope, f"{{{SOAP_ENV_NS}}}Body")
    op_element = ET.SubElement(body, f"{{{namespace}}}{operation}")
    for key, value in (params or {}).items():
        _append_value(op_element, namespace, key, value)
    return ET.tostring(envelope, encoding="utf-8", xml_declaration=True)


def _decode_element(element: ET.Element) -> Any:
    children = list(element)
    if not children:
        return (element.text or "").strip()
    decoded: Dict[str, Any] = {}
    for child in children:
        key = _strip_ns(child.tag)
        value = _decode_element(child)
        if key in decoded:
            if not isinstance(decoded[key], list):
                decoded[key] = [decoded[key]]
            decoded[key].append(value)
        else:
            decoded[key] = value
    return decoded


def parse_envelope(content: bytes) -> Dict[str, Any]:
    """
    Decode a SOAP response to the children of its result element.

    Raises:
        RemoteProtocolError: malformed XML, SOAP fault or missing body
    """
    try:
        root = ET.fromstring(content)
    except ET.ParseError as e:
        raise RemoteProtocolError(f"Malformed SOAP response: {e}", kind=TRANSPORT) from e

    body = next((child for child in root if _strip_ns(child.tag) == "Body"), None)
    if body is None:
        raise RemoteProtocolError("SOAP response has no Body", kind=TRANSPORT)

    result = next(iter(body), None)
    if result is None:
        return {}
    if _strip_ns(result.tag) == "Fault":
        fault = _decode_element(result)
        message = fault.get("faultstring") if isinstance(fault, dict) else fault
        raise RemoteProtocolError(f"SOAP fault: {message}", kind=TRANSPORT, payload={"fault": fault})

    decoded = _decode_element(result)
    return decoded if isinstance(decoded, dict) else {}


# ---------------------------------------------------------------------------
# Transport
# ---------------------------------------------------------------------------

class SoapNavSession(NavSession):
    def __init__(self, config: NavConfig, service_path: str, http: requests.Session) -> None:
        self.config = config
        self.service_path = service_path
        self.namespace = service_namespace(service_path)
        self.url = config.endpoint(service_path)
        self.http = http
        self.http.auth = (config.username, config.password.get_secret_value())

    def call(self, operation: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        envelope = build_envelope(self.namespace, operation, params)
        headers = {
            "Content-Type": "text/xml; charset=utf-8",
            "SOAPAction": f'"{self.namespace}:{operation}"',
        }

        try:
            response = self.http.post(
                self.url,
                data=envelope,
                headers=headers,
                timeout=self.config.timeout_seconds,
            )
        except requests.exceptions.RequestException as e:
            raise RemoteProtocolError(f"HTTP error calling {self.url} {operation}: {e}", kind=TRANSPORT) from e

        logger.debug("NAV %s %s answered HTTP %s", self.service_path, operation, response.status_code)

        if not 200 <= response.status_code < 300:
            # NAV answers faults with HTTP 500 and a Fault body
            if response.content:
                try:
                    parse_envelope(response.content)
                except RemoteProtocolError as e:
                    if "fault" in e.payload:
                        raise
            raise RemoteProtocolError(
                f"NAV {self.service_path} {operation} returned HTTP {response.status_code}",
                kind=TRANSPORT,
            )
        if not response.content:
            return {}
        return parse_envelope(response.content)

    def close(self) -> None:
        self.http.close()


class SoapNavTransport(NavTransport):
    def __init__(self, config: NavConfig, session_factory: Callable[[], requests.Session] = requests.Session) -> None:
        if not config.base_url:
            raise ValueError("NAV base_url is not configured.")
        self.config = config
        self.session_factory = session_factory

    def open(self, service_path: str) -> SoapNavSession:
        return SoapNavSession(self.config, service_path, self.session_factory())
