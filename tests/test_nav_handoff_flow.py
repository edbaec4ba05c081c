import logging

import pytest

from creditdesk.flows.nav_handoff import HandoffState, NavHandoffFlow
from creditdesk.integrations.contracts.interfaces import URL_CLIENT, URL_CONTRACT, URL_CONTRACT_GOODS


def _run(flow, credit_request, offer_details):
    return flow.run(credit_request, "agent.smith", "Bucharest", offer_details, "V-0042")


def _deletes(nav):
    return [(path, params) for path, op, params in nav.calls if op == "Delete"]


def test_successful_handoff(flow, nav, credit_request, offer_details):
    result = _run(flow, credit_request, offer_details)

    assert result.success
    assert result.state == HandoffState.DONE
    assert result.status_code == 200
    assert result.trail == [
        HandoffState.NOT_STARTED,
        HandoffState.CLIENT_CREATED,
        HandoffState.CONTRACT_CREATED,
        HandoffState.GOODS_ATTACHED,
        HandoffState.VALIDATED,
        HandoffState.DONE,
    ]
    assert nav.operations() == [
        (URL_CLIENT, "Create"),
        (URL_CONTRACT, "Create"),
        (URL_CONTRACT_GOODS, "CreateMultiple"),
        (URL_CONTRACT, "ValidateContract"),
    ]
    # the contract is created for the customer NAV just returned
    assert nav.calls[1][2]["ContractList"]["Customer_No"] == result.nav_client["No"]
    assert len(result.nav_contract["goods"]) == 3


def test_success_payload(flow, credit_request, offer_details):
    payload = _run(flow, credit_request, offer_details).to_payload()

    assert payload["success"] is True
    assert payload["state"] == "done"
    assert payload["reason"] is None
    assert payload["compensated"] is False
    assert payload["data"]["navClient"]["No"] == "CL-000001"
    assert payload["data"]["navContract"]["Contract_No"] == "CR-0001"


def test_handoff_without_products_skips_goods_state(flow, make_credit_request, offer_details):
    result = _run(flow, make_credit_request(products=[]), offer_details)

    assert result.success
    assert HandoffState.GOODS_ATTACHED not in result.trail


# ---------------------------------------------------------------------------
# Missing input
# ---------------------------------------------------------------------------

def test_missing_credit_request(flow, nav, offer_details):
    result = _run(flow, None, offer_details)

    assert result.state == HandoffState.FAILED
    assert result.reason == "missing-input"
    assert result.message == "Credit Request not properly defined!"
    assert result.status_code == 500
    assert nav.calls == []


@pytest.mark.parametrize("offer", [None, {}, {"financial_product": "X"}])
def test_missing_or_incomplete_offer(flow, nav, credit_request, offer):
    result = _run(flow, credit_request, offer)

    assert result.reason == "missing-input"
    assert result.message == "Credit request offer not properly defined!"
    assert result.compensated is False
    assert nav.calls == []


# ---------------------------------------------------------------------------
# Client step
# ---------------------------------------------------------------------------

def test_client_failure_stops_without_compensation(flow, nav, credit_request, offer_details):
    nav.fail_on(URL_CLIENT, "Create")

    result = _run(flow, credit_request, offer_details)

    assert result.reason == "client-creation-failed"
    assert result.message == "Creating client in NAV failed!"
    assert result.compensated is False
    assert nav.operations() == [(URL_CLIENT, "Create")]
    assert result.to_payload().get("data") is None


def test_client_unexpected_shape_is_client_failure(flow, nav, credit_request, offer_details):
    nav.malform(URL_CLIENT, "Create")

    result = _run(flow, credit_request, offer_details)

    assert result.reason == "client-creation-failed"
    assert result.error.is_unexpected_shape


def _drop_from_create_answer(nav, path, field, name):
    original_dispatch = nav.dispatch

    def dispatch(service_path, operation, params):
        response = original_dispatch(service_path, operation, params)
        if (service_path, operation) == (path, "Create"):
            response[field].pop(name)
        return response

    nav.dispatch = dispatch


@pytest.mark.parametrize("dropped", ["Key", "No"])
def test_client_answer_without_identifier_is_client_failure(flow, nav, credit_request, offer_details, dropped):
    _drop_from_create_answer(nav, URL_CLIENT, "CustomerList", dropped)

    result = _run(flow, credit_request, offer_details)

    assert result.reason == "client-creation-failed"
    assert result.error.is_unexpected_shape
    assert result.compensated is False
    assert nav.operations() == [(URL_CLIENT, "Create")]


# ---------------------------------------------------------------------------
# Contract step and compensation
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "script",
    [
        lambda nav: nav.fail_on(URL_CONTRACT, "Create"),
        lambda nav: nav.malform(URL_CONTRACT, "Create"),
        lambda nav: nav.malform(URL_CONTRACT_GOODS, "CreateMultiple"),
        lambda nav: nav.fail_on(URL_CONTRACT_GOODS, "CreateMultiple"),
        lambda nav: nav.fail_on(URL_CONTRACT, "ValidateContract"),
    ],
    ids=["contract-timeout", "contract-shape", "goods-shape", "goods-timeout", "validate-timeout"],
)
def test_contract_failure_deletes_the_new_customer_once(flow, nav, credit_request, offer_details, script):
    script(nav)

    result = _run(flow, credit_request, offer_details)

    assert result.reason == "contract-creation-failed"
    assert result.message == "Creating contract in NAV failed!"
    assert result.status_code == 500
    assert result.compensated is True
    assert result.cleanup_required is False
    assert _deletes(nav) == [(URL_CLIENT, {"Key": result.nav_client["Key"]})]
    assert nav.customers == []
    assert nav.operations()[-1] == (URL_CLIENT, "Delete")


def test_unknown_request_type_is_compensated(flow, nav, make_credit_request, offer_details):
    result = _run(flow, make_credit_request(type=9), offer_details)

    assert result.reason == "contract-creation-failed"
    assert result.compensated is True
    assert nav.operations() == [(URL_CLIENT, "Create"), (URL_CLIENT, "Delete")]


def test_failed_compensation_keeps_reason_and_flags_cleanup(flow, nav, credit_request, offer_details, caplog):
    nav.fail_on(URL_CONTRACT, "Create")
    nav.fail_on(URL_CLIENT, "Delete")

    with caplog.at_level(logging.INFO):
        result = _run(flow, credit_request, offer_details)

    assert result.reason == "contract-creation-failed"
    assert result.compensated is True
    assert result.cleanup_required is True
    assert len(_deletes(nav)) == 1
    events = [r for r in caplog.records if getattr(r, "event", None) == "nav_compensation_failed"]
    assert len(events) == 1
    assert events[0].levelno == logging.CRITICAL
    assert events[0].nav_customer_key == result.nav_client["Key"]


def test_delete_answering_false_is_a_failed_compensation(flow, nav, credit_request, offer_details):
    nav.fail_on(URL_CONTRACT, "Create")
    nav.malform(URL_CLIENT, "Delete")

    result = _run(flow, credit_request, offer_details)

    assert result.compensated is True
    assert result.cleanup_required is True


class ExplodingContractGateway:
    def create_contract(self, *args, **kwargs):
        raise RuntimeError("bug")


def test_unexpected_error_still_compensates_and_propagates(client_gateway, nav, credit_request, offer_details):
    flow = NavHandoffFlow(client_gateway, ExplodingContractGateway())

    with pytest.raises(RuntimeError):
        _run(flow, credit_request, offer_details)

    assert nav.operations() == [(URL_CLIENT, "Create"), (URL_CLIENT, "Delete")]
    assert nav.customers == []


@pytest.mark.parametrize("dropped", ["Key", "Contract_No"])
def test_contract_answer_without_identifier_is_compensated(flow, nav, credit_request, offer_details, dropped):
    _drop_from_create_answer(nav, URL_CONTRACT, "ContractList", dropped)

    result = _run(flow, credit_request, offer_details)

    assert result.reason == "contract-creation-failed"
    assert result.compensated is True
    assert _deletes(nav) == [(URL_CLIENT, {"Key": result.nav_client["Key"]})]
    assert nav.operations() == [(URL_CLIENT, "Create"), (URL_CONTRACT, "Create"), (URL_CLIENT, "Delete")]
