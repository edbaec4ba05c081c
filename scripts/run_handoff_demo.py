#!/usr/bin/env python3
"""
Send a credit request to a mock NAV and print each stage to the terminal.
Shows the payloads, the NAV calls made, and the handoff result, then repeats
the handoff with a failing contract service to show the customer rollback.

Usage (from repo root):
  python scripts/run_handoff_demo.py
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from creditdesk.app import create_handoff_service
from creditdesk.database.store import CreditRequestStore
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
from creditdesk.integrations.clients.mocks.nav import MockNavTransport
from creditdesk.integrations.contracts.interfaces import URL_CONTRACT
from creditdesk.integrations.policy.nav_payloads import build_client_payload, build_contract_payload
from creditdesk.utils.config_loader import load_app_config
from creditdesk.utils.translator import TemplateTranslator


def setup_logging():
    """Log to terminal at INFO so every stage is visible."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stdout,
    )


def print_stage(title: str, data: dict | list | str):
    """Print a stage header and data to the terminal."""
    print("\n" + "=" * 60)
    print(f"  {title}")
    print("=" * 60)
    if isinstance(data, (dict, list)):
        print(json.dumps(data, indent=2, default=str))
    else:
        print(data)
    print()


def demo_credit_request(contract_number: str) -> CreditRequest:
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
    return CreditRequest(
        type=RequestType.BUY_GOODS,
        status=CreditRequestStatus.APPROVED,
        customer=customer,
        detail=CreditRequestDetail(loan_amount=10000, down_payment=2000, installments=12, payment_day=15),
        contract=CreditRequestContract(number=contract_number),
        products=[Product(name="Laptop", price=6000), Product(name="Phone", price=4000)],
    )


OFFER = {
    "financial_product": "CONSUMER-12",
    "interest": 9.5,
    "insurance": 0.3,
    "analysis_fee": 50,
    "aegrm": 25,
    "broker_fee": 0,
    "monthly_fee": 10,
}


def main():
    setup_logging()
    config = load_app_config(use_env=False)
    store = CreditRequestStore()
    transport = MockNavTransport()
    service = create_handoff_service(config, transport=transport, store=store)

    credit_request = store.add(demo_credit_request("CR-2024-0001"))
    print_stage(
        "CLIENT PAYLOAD",
        build_client_payload(credit_request, "Bucharest", config.settings, TemplateTranslator(config.translations)),
    )
    print_stage(
        "CONTRACT PAYLOAD (customer number filled in by NAV)",
        build_contract_payload(credit_request, "agent.smith", OFFER, "<NAV customer No>", config.settings),
    )

    # --- Successful handoff ---
    result = service.send_contract_to_nav(credit_request.id, "agent.smith", "Bucharest", OFFER, "V-0042")
    print_stage("HANDOFF RESULT", result.to_payload())
    print_stage("HANDOFF TRAIL", [state.value for state in result.trail])
    print_stage("NAV CALLS", [f"{path} {op}" for path, op in transport.operations()])

    # --- Contract validation fails: customer is rolled back ---
    transport.fail_on(URL_CONTRACT, "ValidateContract")
    failing = store.add(demo_credit_request("CR-2024-0002"))
    result = service.send_contract_to_nav(failing.id, "agent.smith", "Bucharest", OFFER, "V-0042")
    print_stage("HANDOFF RESULT (validation timed out)", result.to_payload())
    print_stage("NAV CUSTOMERS LEFT", transport.customers)


if __name__ == "__main__":
    main()
