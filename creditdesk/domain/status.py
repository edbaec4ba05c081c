"""
Credit request lifecycle.

Only `new -> in_progress` happens automatically; every other move is driven
from outside and must follow TRANSITIONS.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, FrozenSet

from creditdesk.errors import InvalidTransitionError, StatusValidationError


class CreditRequestStatus(str, Enum):
    NEW = "new"                  # credit request is created
    IN_PROGRESS = "in_progress"  # until the request to the bank was sent
    REJECTED = "rejected"        # every financial institution rejected it
    APPROVED = "approved"        # at least one financial institution approved it
    SIGNED = "signed"            # contract signed, uploaded and sent
    DONE = "done"                # manual, request closed
    CANCELED = "canceled"        # manual
    NMI = "nmi"                  # manual, need more info


STATUS_LABELS: Dict[CreditRequestStatus, str] = {
    CreditRequestStatus.NEW: "New",
    CreditRequestStatus.IN_PROGRESS: "In progress",
    CreditRequestStatus.REJECTED: "Rejected",
    CreditRequestStatus.APPROVED: "Approved",
    CreditRequestStatus.SIGNED: "Signed",
    CreditRequestStatus.DONE: "Done",
    CreditRequestStatus.CANCELED: "Cancelled",
    CreditRequestStatus.NMI: "Need More Info",
}

TRANSITION_NAMES: Dict[CreditRequestStatus, str] = {
    CreditRequestStatus.NEW: "to_new",
    CreditRequestStatus.IN_PROGRESS: "to_in_progress",
    CreditRequestStatus.REJECTED: "to_rejected",
    CreditRequestStatus.APPROVED: "to_approved",
    CreditRequestStatus.SIGNED: "to_signed",
    CreditRequestStatus.DONE: "to_done",
    CreditRequestStatus.CANCELED: "to_cancelled",
    CreditRequestStatus.NMI: "to_nmi",
}

CANCELABLE_STATUSES: FrozenSet[CreditRequestStatus] = frozenset({
    CreditRequestStatus.NEW,
    CreditRequestStatus.IN_PROGRESS,
    CreditRequestStatus.APPROVED,
    CreditRequestStatus.SIGNED,
    CreditRequestStatus.NMI,
})

_S = CreditRequestStatus

TRANSITIONS: Dict[CreditRequestStatus, FrozenSet[CreditRequestStatus]] = {
    _S.NEW: frozenset({_S.IN_PROGRESS, _S.CANCELED}),
    _S.IN_PROGRESS: frozenset({_S.APPROVED, _S.REJECTED, _S.NMI, _S.CANCELED}),
    _S.NMI: frozenset({_S.IN_PROGRESS, _S.APPROVED, _S.REJECTED, _S.CANCELED}),
    _S.APPROVED: frozenset({_S.SIGNED, _S.CANCELED}),
    _S.SIGNED: frozenset({_S.DONE, _S.CANCELED}),
    _S.REJECTED: frozenset(),
    _S.DONE: frozenset(),
    _S.CANCELED: frozenset(),
}


def parse_status(value: Any) -> CreditRequestStatus:
    """Return the enum member for `value`, or raise StatusValidationError."""
    if isinstance(value, CreditRequestStatus):
        return value
    try:
        return CreditRequestStatus(str(value).strip())
    except ValueError as exc:
        raise StatusValidationError(f"Unknown credit request status {value!r}") from exc


def status_choices() -> Dict[str, str]:
    """Label -> value mapping, as shown in select boxes."""
    return {label: status.value for status, label in STATUS_LABELS.items()}


class CreditRequestStatusMachine:
    """Applies the transition table to anything carrying a `status` attribute."""

    def can_transition(self, current: Any, target: Any) -> bool:
        return parse_status(target) in TRANSITIONS[parse_status(current)]

    def allowed_targets(self, current: Any) -> FrozenSet[CreditRequestStatus]:
        return TRANSITIONS[parse_status(current)]

    def auto_advance(self, credit_request) -> bool:
        """Move `new` to `in_progress`. Returns True when the status changed."""
        if parse_status(credit_request.status) is CreditRequestStatus.NEW:
            credit_request.status = CreditRequestStatus.IN_PROGRESS
            return True
        return False

    def transition(self, credit_request, target: Any) -> CreditRequestStatus:
        current = parse_status(credit_request.status)
        wanted = parse_status(target)
        if wanted not in TRANSITIONS[current]:
            raise InvalidTransitionError(
                f"Cannot move credit request from '{current.value}' to '{wanted.value}'"
            )
        credit_request.status = wanted
        return wanted

    def cancel(self, credit_request) -> CreditRequestStatus:
        current = parse_status(credit_request.status)
        if current not in CANCELABLE_STATUSES:
            raise InvalidTransitionError(f"Credit request in '{current.value}' cannot be canceled")
        credit_request.status = CreditRequestStatus.CANCELED
        return CreditRequestStatus.CANCELED
