"""Pytest fixtures for the NAV handoff tests."""

import pytest

from creditdesk.domain import (
    Address,
    CreditRequest,
    CreditRequestContract,
    CreditRequestDetail,
    CreditRequestStatus,
    Customer,
    IdentityCard,
    Product,
    RequestType,
)
from creditdesk.flows.nav_handoff import NavHandoffFlow
from creditdesk.integrations.clients.mocks.nav import MockNavTransport
from creditdesk.integrations.policy.nav_client_service import NavClientGateway
from creditdesk.integrations.policy.nav_contract_service import NavContractGateway
from creditdesk.utils.config_loader import NavSettings


OFFER_DETAILS = {
    "financial_product": "CONSUMER-12",
    "interest": 9.5,
    "insurance": 0.3,
    "analysis_fee": 50,
    "aegrm": 25,
    "broker_fee": 0,
    "monthly_fee": 10,
}


def build_credit_request(products=None, **overrides):
    customer = Customer(
        first_name="Ana",
        last_name="Popescu",
        cnp="2900515123456",
        phone="0722000111",
        email="ana.popescu@example.com",
        gender="f",
        identity_card=IdentityCard(
            series="RX",
            number="123456",
            address=Address(street="Main", street_number="12", building="B2", postal_code="010101"),
        ),
    )
    fields = dict(
        type=RequestType.BUY_GOODS,
        status=CreditRequestStatus.APPROVED,
        customer=customer,
        detail=CreditRequestDetail(loan_amount=10000, down_payment=2000, installments=12, payment_day=15),
        contract=CreditRequestContract(number="CR-0001"),
        products=list(products) if products is not None else [
            Product(name="Laptop", price=6000),
            Product(name="Phone", price=3000),
            Product(name="Case", price=1000),
        ],
        id=7,
    )
    fields.update(overrides)
    return CreditRequest(**fields)


@pytest.fixture
def settings():
    return NavSettings()


@pytest.fixture
def offer_details():
    return dict(OFFER_DETAILS)


@pytest.fixture
def make_credit_request():
    return build_credit_request


@pytest.fixture
def credit_request():
    """Fully populated, approved credit request with three products."""
    return build_credit_request()


@pytest.fixture
def nav():
    """In-memory NAV."""
    return MockNavTransport()


@pytest.fixture
def client_gateway(nav, settings):
    return NavClientGateway(nav, settings)


@pytest.fixture
def contract_gateway(nav, settings):
    return NavContractGateway(nav, settings)


@pytest.fixture
def flow(client_gateway, contract_gateway):
    return NavHandoffFlow(client_gateway, contract_gateway)
