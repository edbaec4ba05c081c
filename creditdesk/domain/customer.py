"""
Customer aggregate.

Sub-records are owned by the customer. They are created on demand through the
`ensure_*` accessors and adopted through the `attach_*` methods, which are the
only places that set a sub-record's back reference.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional

from creditdesk.errors import InvalidRequestStateError

if TYPE_CHECKING:
    from creditdesk.domain.credit_request import CreditRequest

GENDER_MALE = "m"
GENDER_FEMALE = "f"
GENDERS: Dict[str, str] = {GENDER_MALE: "Male", GENDER_FEMALE: "Female"}


# ---------------------------------------------------------------------------
# Sub-records
# ---------------------------------------------------------------------------

@dataclass
class Address:
    street: Optional[str] = None
    street_number: Optional[str] = None
    building: Optional[str] = None
    staircase: Optional[str] = None
    floor: Optional[str] = None
    apartment_number: Optional[str] = None
    postal_code: Optional[str] = None
    region_id: Optional[int] = None
    locality_id: Optional[int] = None
    id: Optional[int] = None

    def full_address_fields(self) -> Dict[str, str]:
        """Labelled address parts in display order, empty parts left out."""
        fields = {
            "Street": self.street,
            "Number": self.street_number,
            "Building": self.building,
            "Staircase": self.staircase,
            "Floor": self.floor,
            "Apartment": self.apartment_number,
        }
        return {label: value for label, value in fields.items() if value}


@dataclass
class IdentityCard:
    series: Optional[str] = None
    number: Optional[str] = None
    issued_by: Optional[str] = None
    issued_at: Optional[date] = None
    expires_at: Optional[date] = None
    address: Optional[Address] = None
    customer: Optional["Customer"] = field(default=None, repr=False, compare=False)

    def ensure_address(self) -> Address:
        if self.address is None:
            self.address = Address()
        return self.address


@dataclass
class Detail:
    """Customer financial detail."""

    net_income: Optional[float] = None
    other_income: Optional[float] = None
    monthly_expenses: Optional[float] = None
    dependants: Optional[int] = None
    customer: Optional["Customer"] = field(default=None, repr=False, compare=False)


@dataclass
class Employment:
    employer: Optional[str] = None
    position: Optional[str] = None
    employed_since: Optional[date] = None
    customer: Optional["Customer"] = field(default=None, repr=False, compare=False)


@dataclass
class ProfessionalStatus:
    status: Optional[str] = None
    since: Optional[date] = None
    customer: Optional["Customer"] = field(default=None, repr=False, compare=False)


@dataclass
class Agreement:
    data_processing: bool = False
    marketing: bool = False
    credit_bureau: bool = False
    customer: Optional["Customer"] = field(default=None, repr=False, compare=False)


@dataclass
class Political:
    is_exposed: bool = False
    function: Optional[str] = None
    customer: Optional["Customer"] = field(default=None, repr=False, compare=False)


# ---------------------------------------------------------------------------
# Aggregate
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class Customer:
    first_name: str = ""
    last_name: str = ""
    cnp: Optional[str] = None
    phone: Optional[str] = None
    mobile_phone: Optional[str] = None
    email: Optional[str] = None
    gender: Optional[str] = None
    correspondence_address: Optional[Address] = None
    identity_card: Optional[IdentityCard] = None
    detail: Optional[Detail] = None
    employment: Optional[Employment] = None
    agreement: Optional[Agreement] = None
    political: Optional[Political] = None
    professional_statuses: List[ProfessionalStatus] = field(default_factory=list)
    credit_request: Optional["CreditRequest"] = field(default=None, repr=False)
    id: Optional[int] = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)
    _statuses_dirty: bool = field(default=False, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.gender is not None and self.gender not in GENDERS:
            raise InvalidRequestStateError(f"Unknown gender {self.gender!r}")
        for child in (self.identity_card, self.detail, self.employment, self.agreement, self.political):
            if child is not None:
                child.customer = self
        for status in self.professional_statuses:
            status.customer = self

    @property
    def full_name(self) -> str:
        return " ".join([self.first_name, self.last_name])

    # -- adopt ------------------------------------------------------------------

    def attach_identity_card(self, card: IdentityCard) -> IdentityCard:
        self.identity_card = card
        card.customer = self
        return card

    def attach_detail(self, detail: Detail) -> Detail:
        self.detail = detail
        detail.customer = self
        return detail

    def attach_employment(self, employment: Employment) -> Employment:
        self.employment = employment
        employment.customer = self
        return employment

    def attach_agreement(self, agreement: Agreement) -> Agreement:
        self.agreement = agreement
        agreement.customer = self
        return agreement

    def attach_political(self, political: Political) -> Political:
        self.political = political
        political.customer = self
        return political

    # -- get or create ------------------------------------------------------------

    def ensure_identity_card(self) -> IdentityCard:
        return self.identity_card or self.attach_identity_card(IdentityCard())

    def ensure_detail(self) -> Detail:
        return self.detail or self.attach_detail(Detail())

    def ensure_employment(self) -> Employment:
        return self.employment or self.attach_employment(Employment())

    def ensure_agreement(self) -> Agreement:
        return self.agreement or self.attach_agreement(Agreement())

    def ensure_political(self) -> Political:
        return self.political or self.attach_political(Political())

    # -- professional status history ----------------------------------------------

    def add_professional_status(self, status: ProfessionalStatus) -> None:
        """First status added to a clean history replaces the stored ones."""
        if any(existing is status for existing in self.professional_statuses):
            return
        if not self._statuses_dirty:
            for old in self.professional_statuses:
                old.customer = None
            self.professional_statuses = []
        status.customer = self
        self.professional_statuses.append(status)
        self._statuses_dirty = True

    def set_professional_statuses(self, statuses: Iterable[ProfessionalStatus]) -> None:
        for old in self.professional_statuses:
            old.customer = None
        self.professional_statuses = []
        for status in statuses:
            status.customer = self
            self.professional_statuses.append(status)
        self._statuses_dirty = True

    def mark_clean(self) -> None:
        self._statuses_dirty = False
