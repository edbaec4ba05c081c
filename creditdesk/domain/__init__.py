"""
Local records of the back office: credit requests, customers and the status
lifecycle. Persistence is handled elsewhere (see creditdesk.database).
"""

from .credit_request import (
    CreditRequest,
    CreditRequestContract,
    CreditRequestDetail,
    Product,
    RequestType,
)
from .customer import (
    Address,
    Agreement,
    Customer,
    Detail,
    Employment,
    IdentityCard,
    Political,
    ProfessionalStatus,
)
from .status import (
    CANCELABLE_STATUSES,
    STATUS_LABELS,
    TRANSITIONS,
    CreditRequestStatus,
    CreditRequestStatusMachine,
    parse_status,
)

__all__ = [
    "CreditRequest", "CreditRequestContract", "CreditRequestDetail", "Product", "RequestType",
    "Address", "Agreement", "Customer", "Detail", "Employment", "IdentityCard",
    "Political", "ProfessionalStatus",
    "CANCELABLE_STATUSES", "STATUS_LABELS", "TRANSITIONS",
    "CreditRequestStatus", "CreditRequestStatusMachine", "parse_status",
]
