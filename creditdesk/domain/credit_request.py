"""
Credit request aggregate: the request itself, its products, loan figures and
local contract.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import IntEnum
from numbers import Real
from typing import Any, Iterable, List, Optional

from creditdesk.domain.customer import Customer
from creditdesk.domain.status import CreditRequestStatus, CreditRequestStatusMachine, parse_status
from creditdesk.errors import InvalidRequestStateError

_status_machine = CreditRequestStatusMachine()


class RequestType(IntEnum):
    BUY_GOODS = 1
    CREDIT = 2


@dataclass(eq=False)
class Product:
    name: str
    price: float = 0.0
    category_id: Optional[int] = None
    id: Optional[int] = None
    credit_request: Optional["CreditRequest"] = field(default=None, repr=False)
    created_at: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self) -> None:
        if isinstance(self.price, bool) or not isinstance(self.price, (Real, Decimal)) or self.price < 0:
            raise InvalidRequestStateError(f"Product price must be a number >= 0; got {self.price!r}")


@dataclass
class CreditRequestDetail:
    loan_amount: Optional[float] = None
    down_payment: float = 0.0
    installments: Optional[int] = None
    payment_day: Optional[int] = None


@dataclass
class CreditRequestContract:
    """Contract generated locally; its number is reused as the NAV contract number."""

    number: str
    created_at: datetime = field(default_factory=datetime.utcnow)


@dataclass(eq=False)
class CreditRequest:
    type: Any = RequestType.CREDIT
    status: CreditRequestStatus = CreditRequestStatus.NEW
    order_no: Optional[str] = None
    product_code: Optional[str] = None
    created_by: Optional[str] = None
    assigned_to: Optional[str] = None
    customer: Optional[Customer] = None
    detail: Optional[CreditRequestDetail] = None
    contract: Optional[CreditRequestContract] = None
    products: List[Product] = field(default_factory=list)
    id: Optional[int] = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)
    _products_dirty: bool = field(default=False, init=False, repr=False)

    def __setattr__(self, name: str, value: Any) -> None:
        # status only ever holds a CreditRequestStatus member
        if name == "status":
            value = parse_status(value)
        super().__setattr__(name, value)

    def __post_init__(self) -> None:
        if self.customer is not None:
            self.customer.credit_request = self
        for product in self.products:
            product.credit_request = self

    # -- status -------------------------------------------------------------------

    def auto_advance_status(self) -> None:
        _status_machine.auto_advance(self)

    def transition_to(self, status: Any) -> CreditRequestStatus:
        return _status_machine.transition(self, status)

    def reset(self) -> None:
        """Clear identity so the request can be stored again as a new record."""
        self.id = None

    def to_simulator(self) -> None:
        self.id = None

    # -- owned records --------------------------------------------------------------

    def attach_customer(self, customer: Customer) -> Customer:
        self.customer = customer
        customer.credit_request = self
        return customer

    def ensure_customer(self) -> Customer:
        return self.customer or self.attach_customer(Customer())

    def ensure_detail(self) -> CreditRequestDetail:
        if self.detail is None:
            self.detail = CreditRequestDetail()
        return self.detail

    # -- products -------------------------------------------------------------------

    def add_product(self, product: Product) -> None:
        """Attach a product; the first one added to a clean list replaces the stored set."""
        if any(existing is product for existing in self.products):
            return
        if not self._products_dirty:
            self._detach_products()
        product.credit_request = self
        self.products.append(product)
        self._products_dirty = True

    def set_products(self, products: Iterable[Product]) -> None:
        self._detach_products()
        for product in products:
            product.credit_request = self
            self.products.append(product)
        self._products_dirty = True

    def mark_clean(self) -> None:
        self._products_dirty = False
        if self.customer is not None:
            self.customer.mark_clean()

    def _detach_products(self) -> None:
        for old in self.products:
            old.credit_request = None
        self.products = []
