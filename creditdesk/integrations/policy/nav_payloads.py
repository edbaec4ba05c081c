"""
NAV payload builders.

Pure mapping from local records to what the NAV pages expect. Nothing here
talks to NAV or changes the records it reads, except for the get-or-create
accessors which may materialize empty sub-records.
"""

from __future__ import annotations

import textwrap
from typing import Any, Dict, List, Mapping, Optional

from pydantic import ValidationError

from creditdesk.domain.credit_request import CreditRequest
from creditdesk.errors import InvalidRequestStateError, InvalidRequestTypeError, MissingInputError
from creditdesk.integrations.contracts.nav import (
    ContractCard,
    ContractGoodsLine,
    CustomerCard,
    OfferDetails,
    goods_payload,
)
from creditdesk.utils.config_loader import NavSettings
from creditdesk.utils.translator import TemplateTranslator, Translator


# ---------------------------------------------------------------------------
# Address
# ---------------------------------------------------------------------------

def compose_translated_address(address_fields: Mapping[str, str], translator: Optional[Translator] = None) -> str:
    """
    Compose the address in a human readable form, from fields and labels in the
    given order: "Street %Street%, Number %Number%" rendered by the translator.
    """
    translator = translator or TemplateTranslator()
    elements = []
    values: Dict[str, str] = {}
    for label, value in address_fields.items():
        elements.append(f"{label} %{label}%")
        values[f"%{label}%"] = str(value)
    return translator.trans(", ".join(elements), values)


def split_address_lines(full_address: str, width: int = 50) -> List[str]:
    """Wrap to `width` columns and keep the first two lines (Address, Address_2)."""
    lines = textwrap.wrap(full_address, width=width, break_long_words=False, break_on_hyphens=False)
    lines = lines[:2]
    while len(lines) < 2:
        lines.append("")
    return lines


def build_client_payload(
    credit_request: CreditRequest,
    locality_name: str,
    settings: Optional[NavSettings] = None,
    translator: Optional[Translator] = None,
) -> Dict[str, Any]:
    settings = settings or NavSettings()
    customer = credit_request.ensure_customer()
    address = customer.ensure_identity_card().ensure_address()

    full_address = compose_translated_address(address.full_address_fields(), translator)
    address_1, address_2 = split_address_lines(full_address, settings.address_line_width)

    card = CustomerCard(
        name=customer.full_name,
        address=address_1,
        address_2=address_2,
        city=locality_name or "",
        phone_no=customer.phone or "",
        vat_registration_no=customer.cnp or "",
        post_code=address.postal_code or "",
        county=settings.country_code,
        e_mail=customer.email or "",
        country_region_code=settings.country_code,
    )
    return card.to_payload()


# ---------------------------------------------------------------------------
# Contract
# ---------------------------------------------------------------------------

def parse_offer_details(offer_details: Any) -> OfferDetails:
    if isinstance(offer_details, OfferDetails):
        return offer_details
    if not offer_details or not isinstance(offer_details, Mapping):
        raise MissingInputError("Credit request offer not properly defined!")
    try:
        return OfferDetails(**dict(offer_details))
    except ValidationError as exc:
        missing = sorted(str(err["loc"][0]) for err in exc.errors() if err.get("loc"))
        raise MissingInputError(f"Credit request offer is missing: {', '.join(missing)}") from exc


def contract_type_key(request_type: Any) -> Optional[str]:
    if isinstance(request_type, bool) or request_type is None:
        return None
    if isinstance(request_type, int):
        return str(int(request_type))
    return str(request_type)


def resolve_contract_type(request_type: Any, settings: Optional[NavSettings] = None) -> str:
    settings = settings or NavSettings()
    contract_type = settings.contract_types.get(contract_type_key(request_type) or "")
    if contract_type is None:
        raise InvalidRequestTypeError(f"Undefined contract type for credit request type {request_type!r}")
    return contract_type


def compute_advance_percent(down_payment: Any, loan_amount: Any) -> float:
    """Down payment as a percentage of the loan amount."""
    try:
        loan = float(loan_amount)
        down = float(down_payment or 0)
    except (TypeError, ValueError) as exc:
        raise InvalidRequestStateError(
            f"Cannot compute advance percent from down payment {down_payment!r} and loan amount {loan_amount!r}"
        ) from exc
    if loan <= 0:
        raise InvalidRequestStateError(f"Loan amount must be > 0 to compute advance percent; got {loan_amount!r}")
    return down * 100 / loan


def build_contract_payload(
    credit_request: CreditRequest,
    created_by: str,
    offer_details: Any,
    remote_customer_number: str,
    settings: Optional[NavSettings] = None,
) -> Dict[str, Any]:
    settings = settings or NavSettings()
    offer = parse_offer_details(offer_details)
    contract_type = resolve_contract_type(credit_request.type, settings)

    contract = credit_request.contract
    if contract is None or not contract.number:
        raise InvalidRequestStateError("Credit request has no local contract to hand over")
    detail = credit_request.ensure_detail()

    card = ContractCard(
        contract_no=str(contract.number),
        contract_date=contract.created_at.strftime("%Y-%m-%d"),
        contract_status=settings.contract_status,
        customer_no=str(remote_customer_number),
        responsible_employee=created_by or "",
        payment_schedule_type=settings.payment_schedule_type,
        no_of_installments=detail.installments,
        payment_day_of_month=detail.payment_day,
        contract_type=contract_type,
        financial_product=offer.financial_product,
        currency_code=settings.currency_code,
        exchange_rate=settings.exchange_rate,
        item_price=0,
        funded_amount=detail.loan_amount,
        advance_percent=compute_advance_percent(detail.down_payment, detail.loan_amount),
        interest=offer.interest,
        insurance_percent=offer.insurance,
        analysis_fee=offer.analysis_fee,
        aegrm=offer.aegrm,
        broker_fee=offer.broker_fee,
        monthly_fee=offer.monthly_fee,
        insurance_vendor_no=settings.insurance_vendor_no,
    )
    return card.to_payload()


# ---------------------------------------------------------------------------
# Contract goods
# ---------------------------------------------------------------------------

def build_contract_goods_lines(credit_request: CreditRequest, vendor_id: str, contract_number: str) -> List[Dict[str, Any]]:
    """One line per product, numbered from 0 in collection order."""
    lines = []
    for position, product in enumerate(credit_request.products):
        line = ContractGoodsLine(
            contract_no=str(contract_number),
            line_no=position,
            object=product.name,
            quantity=1,
            amount=product.price,
            vendor_no=str(vendor_id),
            description=product.name,
        )
        lines.append(line.to_wire())
    return lines


def build_contract_goods_payload(credit_request: CreditRequest, vendor_id: str, contract_number: str) -> Dict[str, Any]:
    return goods_payload(build_contract_goods_lines(credit_request, vendor_id, contract_number))
