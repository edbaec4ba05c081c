"""
NAV contracts.

Defines the request structures sent to the three NAV pages:
- CustomerList: the customer card created for the borrower
- ContractList: the credit contract, created as Draft
- ContractGoods: one line per financed product

and the accepted offer the caller hands over.

These contracts must be used by both:
- integrations/policy/nav_payloads.py (building what we send)
- clients/mocks/nav.py (checking what it receives during tests)

Why:
- NAV field names are unusual (Phone_No, AEGRM, ...) and easy to mistype
- Keeps the wire format in one place, out of the workflow code
"""

from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field

from .interfaces import CLIENT_FIELD, CONTRACT_FIELD, GOODS_ITEM_FIELD, GOODS_LIST_FIELD


class _NavRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class OfferDetails(BaseModel):
    """Offer accepted by the customer; copied verbatim into the contract."""

    model_config = ConfigDict(extra="allow")

    financial_product: Any
    interest: Any
    insurance: Any
    analysis_fee: Any
    aegrm: Any
    broker_fee: Any
    monthly_fee: Any


class CustomerCard(_NavRecord):
    name: str = Field(alias="Name")
    address: str = Field(default="", alias="Address")
    address_2: str = Field(default="", alias="Address_2")
    city: str = Field(default="", alias="City")
    phone_no: str = Field(default="", alias="Phone_No")
    vat_registration_no: str = Field(default="", alias="VAT_Registration_No")
    post_code: str = Field(default="", alias="Post_Code")
    county: str = Field(default="", alias="County")
    e_mail: str = Field(default="", alias="E_Mail")
    country_region_code: str = Field(default="", alias="Country_Region_Code")

    def to_payload(self) -> Dict[str, Any]:
        return {CLIENT_FIELD: self.to_wire()}


class ContractCard(_NavRecord):
    contract_no: str = Field(alias="Contract_No")
    contract_date: str = Field(alias="Contract_Date")
    contract_status: str = Field(alias="Contract_Status")
    customer_no: str = Field(alias="Customer_No")
    responsible_employee: str = Field(alias="Responsible_Employee")
    payment_schedule_type: str = Field(alias="Payment_Schedule_Type")
    no_of_installments: Any = Field(default=None, alias="No_of_Installments")
    payment_day_of_month: Any = Field(default=None, alias="Payment_Day_of_Month")
    contract_type: str = Field(alias="Contract_Type")
    financial_product: Any = Field(alias="Financial_Product")
    currency_code: str = Field(default="", alias="Currency_Code")
    exchange_rate: float = Field(default=1, alias="Exchange_Rate")
    item_price: float = Field(default=0, alias="Item_Price")  # for Contract_Type Goods
    funded_amount: float = Field(alias="Funded_Amount")
    advance_percent: float = Field(alias="Advance_Percent")
    interest: Any = Field(alias="Interest")
    insurance_percent: Any = Field(alias="Insurance_Percent")
    analysis_fee: Any = Field(alias="Analysis_Fee")
    aegrm: Any = Field(alias="AEGRM")
    broker_fee: Any = Field(alias="Broker_Fee")
    monthly_fee: Any = Field(alias="Monthly_Fee")
    insurance_vendor_no: str = Field(alias="Insurance_Vendor_No")

    def to_payload(self) -> Dict[str, Any]:
        return {CONTRACT_FIELD: self.to_wire()}


class ContractGoodsLine(_NavRecord):
    contract_no: str = Field(alias="Contract_No")
    line_no: int = Field(alias="Line_No", ge=0)
    object: str = Field(alias="Object")
    quantity: float = Field(default=1, alias="Quantity")
    amount: float = Field(alias="Amount", ge=0)
    vendor_no: str = Field(alias="Vendor_No")
    description: str = Field(alias="Description")


def goods_payload(lines: List[Dict[str, Any]]) -> Dict[str, Any]:
    """CreateMultiple body: the list element wraps one element per line."""
    return {GOODS_LIST_FIELD: {GOODS_ITEM_FIELD: list(lines)}}


__all__ = [
    "OfferDetails",
    "CustomerCard",
    "ContractCard",
    "ContractGoodsLine",
    "goods_payload",
]
