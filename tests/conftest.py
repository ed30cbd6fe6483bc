"""Shared test fixtures for pfxsoap test suite."""

from __future__ import annotations

import datetime
from pathlib import Path
from unittest.mock import patch

import pytest
import requests
from asn1crypto import cms as asn1_cms
from asn1crypto import pkcs12 as asn1_pkcs12
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.serialization import pkcs12
from cryptography.x509.oid import NameOID

DATA_DIR = Path(__file__).parent / "data"
CONSULTA_WSDL = DATA_DIR / "consulta.wsdl"
TWO_SERVICES_WSDL = DATA_DIR / "two_services.wsdl"

CONSULTAR_RESPONSE = (
    '<soap:Envelope xmlns:soap="http://schemas.xmlsoap.org/soap/envelope/">'
    "<soap:Body>"
    '<ConsultarResponse xmlns="http://example.com/consulta">'
    "<situacao>ATIVO</situacao><codigo>100</codigo>"
    "</ConsultarResponse>"
    "</soap:Body>"
    "</soap:Envelope>"
)

PING_RESPONSE = (
    '<soap:Envelope xmlns:soap="http://schemas.xmlsoap.org/soap/envelope/">'
    "<soap:Body>"
    '<PingResponse xmlns="http://example.com/consulta"><status>pong</status></PingResponse>'
    "</soap:Body>"
    "</soap:Envelope>"
)

CONSULTAR_FAULT = (
    '<soap:Envelope xmlns:soap="http://schemas.xmlsoap.org/soap/envelope/">'
    "<soap:Body>"
    "<soap:Fault>"
    "<faultcode>soap:Server</faultcode>"
    "<faultstring>Documento invalido</faultstring>"
    "</soap:Fault>"
    "</soap:Body>"
    "</soap:Envelope>"
)


SOAP12_FAULT = (
    '<env:Envelope xmlns:env="http://www.w3.org/2003/05/soap-envelope">'
    "<env:Body>"
    "<env:Fault>"
    "<env:Code><env:Value>env:Receiver</env:Value></env:Code>"
    '<env:Reason><env:Text xml:lang="pt">Documento invalido</env:Text></env:Reason>'
    "</env:Fault>"
    "</env:Body>"
    "</env:Envelope>"
)

def make_pfx(version: int = 3) -> bytes:
    """Build a structurally valid PKCS#12 PFX (no real key material)."""
    pfx = asn1_pkcs12.Pfx(
        {
            "version": version,
            "auth_safe": asn1_cms.ContentInfo({"content_type": "data", "content": b"\x30\x00"}),
        }
    )
    return pfx.dump()


def make_real_pfx(password: bytes = b"secret") -> bytes:
    """Build a password-protected PFX holding a self-signed RSA client certificate."""
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "pfxsoap test client")])
    now = datetime.datetime.now(datetime.timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(minutes=5))
        .not_valid_after(now + datetime.timedelta(days=1))
        .sign(key, hashes.SHA256())
    )
    return pkcs12.serialize_key_and_certificates(
        b"client", key, cert, None, serialization.BestAvailableEncryption(password)
    )


def make_response(body: str, status_code: int = 200) -> requests.Response:
    """Build a real requests.Response carrying a SOAP body."""
    response = requests.Response()
    response.status_code = status_code
    response._content = body.encode("utf-8")
    response.headers["Content-Type"] = "text/xml; charset=utf-8"
    response.encoding = "utf-8"
    response.url = "http://host.example/svc"
    return response


@pytest.fixture
def pfx_bytes():
    return make_pfx()


@pytest.fixture(scope="session")
def real_pfx():
    """Real PFX protected with the passphrase ``secret``."""
    return make_real_pfx()


@pytest.fixture
def local_wsdl():
    """Serve WSDL documents from tests/data instead of the network.

    Yields the list of WSDL URLs the API asked for.  Set ``.path`` on the
    returned list to switch the served document.
    """
    import zeep

    from pfxsoap import api

    class _Requested(list):
        path = CONSULTA_WSDL

    requested = _Requested()
    real_client = zeep.Client

    def _client(wsdl, **kwargs):
        requested.append(wsdl)
        return real_client(str(requested.path), **kwargs)

    with patch.object(api, "Client", side_effect=_client):
        yield requested


@pytest.fixture
def soap_post():
    """Intercept the operation POST; tests set ``return_value``/``side_effect``."""
    from pfxsoap.network.transport import SafeSession

    with patch.object(SafeSession, "post") as mock_post:
        mock_post.return_value = make_response(CONSULTAR_RESPONSE)
        yield mock_post


@pytest.fixture
def pkcs12_adapter():
    """Replace the PKCS#12 adapter so no real key material is needed."""
    with patch("pfxsoap.network.transport.Pkcs12Adapter") as adapter:
        yield adapter
