"""Tests for pfxsoap.errors -- exception hierarchy."""

import pickle

from pfxsoap.errors import (
    CallError,
    CertificateError,
    ConfigError,
    InvalidArgument,
    OperationNotFoundError,
    PfxSoapError,
    WsdlFetchError,
)


def test_base_error_is_exception():
    assert issubclass(PfxSoapError, Exception)


def test_all_errors_inherit_base():
    for cls in (
        CallError,
        CertificateError,
        ConfigError,
        InvalidArgument,
        OperationNotFoundError,
        WsdlFetchError,
    ):
        assert issubclass(cls, PfxSoapError)


def test_certificate_error_is_invalid_argument():
    assert issubclass(CertificateError, InvalidArgument)
    e = CertificateError("bad container")
    assert isinstance(e, InvalidArgument)
    assert str(e) == "bad container"


def test_wsdl_fetch_error_attributes():
    cause = OSError("connection refused")
    e = WsdlFetchError("Cannot load WSDL", url="http://host/svc?wsdl", cause=cause)
    assert str(e) == "Cannot load WSDL"
    assert e.url == "http://host/svc?wsdl"
    assert e.cause is cause


def test_wsdl_fetch_error_defaults():
    e = WsdlFetchError("offline")
    assert e.url is None
    assert e.cause is None


def test_operation_not_found_message():
    e = OperationNotFoundError("Consultar")
    assert str(e) == "Operation 'Consultar' not found in WSDL"
    assert e.operation == "Consultar"


def test_operation_not_found_pickles():
    e = pickle.loads(pickle.dumps(OperationNotFoundError("Consultar")))
    assert isinstance(e, OperationNotFoundError)
    assert e.operation == "Consultar"
    assert str(e) == "Operation 'Consultar' not found in WSDL"


def test_call_error_transport_failure():
    cause = TimeoutError("read timed out")
    e = CallError("Call to Consultar failed", cause=cause)
    assert e.cause is cause
    assert e.fault_code is None
    assert e.detail is None
    assert e.is_fault is False


def test_call_error_fault():
    e = CallError("SOAP fault", fault_code="soap:Server", detail="<detail/>")
    assert e.is_fault is True
    assert e.fault_code == "soap:Server"
    assert e.detail == "<detail/>"
