import logging

import pytest

from creditdesk.errors import RemoteProtocolError
from creditdesk.integrations.contracts.interfaces import URL_CLIENT


def test_create_client_returns_nav_record(client_gateway, nav, credit_request):
    client = client_gateway.create_client(credit_request, "Bucharest")

    assert client["Key"] == "KEY-CL-1"
    assert client["No"] == "CL-000001"
    assert client["Name"] == "Ana Popescu"
    assert nav.operations() == [(URL_CLIENT, "Create")]
    assert nav.sessions_opened == nav.sessions_closed == 1


def test_create_client_transport_failure_is_logged_as_critical(client_gateway, nav, credit_request, caplog):
    nav.fail_on(URL_CLIENT, "Create")

    with caplog.at_level(logging.INFO):
        with pytest.raises(RemoteProtocolError) as exc_info:
            client_gateway.create_client(credit_request, "Bucharest")

    assert exc_info.value.kind == "transport"
    assert isinstance(exc_info.value.__cause__, TimeoutError)
    assert any(r.levelno == logging.CRITICAL for r in caplog.records)
    assert nav.sessions_closed == 1


def test_create_client_without_customer_list_is_unexpected_shape(client_gateway, nav, credit_request, caplog):
    nav.malform(URL_CLIENT, "Create")

    with caplog.at_level(logging.ERROR):
        with pytest.raises(RemoteProtocolError) as exc_info:
            client_gateway.create_client(credit_request, "Bucharest")

    assert exc_info.value.is_unexpected_shape
    assert str(exc_info.value) == "Error adding client in NAV"
    assert any(r.levelno == logging.ERROR and "Unexpected NAV response" in r.getMessage() for r in caplog.records)


def test_get_client_reads_by_record_id(client_gateway, nav, credit_request):
    created = client_gateway.create_client(credit_request, "Bucharest")

    found = client_gateway.get_client(created["No"])

    assert found["Key"] == created["Key"]
    assert nav.calls[-1] == (URL_CLIENT, "ReadByRecId", {"recId": "Credit Contract: CL-000001"})


def test_get_client_returns_none_when_absent(client_gateway):
    assert client_gateway.get_client("CL-999999") is None


def test_list_clients_single_and_many(client_gateway, credit_request):
    assert client_gateway.list_clients() == []

    client_gateway.create_client(credit_request, "Bucharest")
    assert len(client_gateway.list_clients()) == 1

    client_gateway.create_client(credit_request, "Bucharest")
    assert [c["No"] for c in client_gateway.list_clients()] == ["CL-000001", "CL-000002"]


def test_delete_client(client_gateway, nav, credit_request):
    created = client_gateway.create_client(credit_request, "Bucharest")

    assert client_gateway.delete_client(created["Key"]) is True
    assert nav.customers == []


def test_delete_client_false_result_is_a_failure(client_gateway):
    # unknown key: NAV answers Delete_Result = "false"
    with pytest.raises(RemoteProtocolError) as exc_info:
        client_gateway.delete_client("KEY-NOPE")

    assert exc_info.value.is_unexpected_shape


def test_create_client_answer_without_number_is_unexpected_shape(client_gateway, nav, credit_request):
    original_dispatch = nav.dispatch

    def dispatch_without_number(path, operation, params):
        response = original_dispatch(path, operation, params)
        response["CustomerList"].pop("No")
        return response

    nav.dispatch = dispatch_without_number

    with pytest.raises(RemoteProtocolError) as exc_info:
        client_gateway.create_client(credit_request, "Bucharest")

    assert exc_info.value.is_unexpected_shape
    assert "No" in str(exc_info.value)
