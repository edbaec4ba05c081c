"""
Caller-facing entry point for sending a credit request to NAV.

Resolves the credit request, refuses a second concurrent handoff for the same
request, checks its status, then runs NavHandoffFlow. Unexpected exceptions
are turned into a 500 result by ErrorHandler instead of escaping to the caller.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Any, FrozenSet, Iterable, Iterator, Optional, Set, Union

from creditdesk.database.store import CreditRequestStore
from creditdesk.domain.credit_request import CreditRequest
from creditdesk.domain.status import CreditRequestStatus, parse_status
from creditdesk.error_handler import ErrorHandler
from creditdesk.flows.nav_handoff import (
    MSG_CREDIT_REQUEST_MISSING,
    REASON_MISSING_INPUT,
    HandoffResult,
    HandoffState,
    NavHandoffFlow,
)

logger = logging.getLogger(__name__)

REASON_IN_PROGRESS = "handoff-in-progress"
REASON_INVALID_STATUS = "invalid-status"
REASON_INTERNAL_ERROR = "internal-error"

DEFAULT_ELIGIBLE_STATUSES = frozenset({CreditRequestStatus.APPROVED})


class NavHandoffService:
    def __init__(
        self,
        flow: NavHandoffFlow,
        store: Optional[CreditRequestStore] = None,
        error_handler: Optional[ErrorHandler] = None,
        eligible_statuses: Optional[Iterable[Any]] = None,
    ):
        self.flow = flow
        self.store = store or CreditRequestStore()
        self.error_handler = error_handler or ErrorHandler()
        self.eligible_statuses: FrozenSet[CreditRequestStatus] = (
            frozenset(parse_status(s) for s in eligible_statuses)
            if eligible_statuses is not None
            else DEFAULT_ELIGIBLE_STATUSES
        )
        self._in_flight: Set[Any] = set()
        self._locks_guard = threading.Lock()

    def send_contract_to_nav(
        self,
        credit_request: Union[CreditRequest, int, None],
        created_by: str,
        locality_name: str,
        offer_details: Any,
        vendor_id: str,
    ) -> HandoffResult:
        resolved = self._resolve(credit_request)
        if resolved is None:
            logger.warning("NAV handoff requested for unknown credit request %r", credit_request)
            return _refused(REASON_MISSING_INPUT, MSG_CREDIT_REQUEST_MISSING, 500)

        with self._handoff_lock(resolved) as acquired:
            if not acquired:
                logger.warning("NAV handoff for credit request %s already running", resolved.id)
                return _refused(
                    REASON_IN_PROGRESS,
                    f"Credit request {resolved.id} is already being sent to NAV.",
                    409,
                )

            status = parse_status(resolved.status)
            if status not in self.eligible_statuses:
                return _refused(
                    REASON_INVALID_STATUS,
                    f"Credit request {resolved.id} is {status.value}; it cannot be sent to NAV.",
                    409,
                )

            try:
                return self.flow.run(resolved, created_by, locality_name, offer_details, vendor_id)
            except Exception as exc:
                payload = self.error_handler.handle_exception(
                    exc, context={"credit_request_id": resolved.id, "operation": "send_contract_to_nav"}
                )
                result = _refused(REASON_INTERNAL_ERROR, payload["message"], payload["status_code"])
                result.error = exc
                return result

    def _resolve(self, credit_request: Union[CreditRequest, int, None]) -> Optional[CreditRequest]:
        if credit_request is None or isinstance(credit_request, CreditRequest):
            return credit_request
        return self.store.get(credit_request)

    @contextmanager
    def _handoff_lock(self, credit_request: CreditRequest) -> Iterator[bool]:
        lock_key = credit_request.id if credit_request.id is not None else id(credit_request)
        with self._locks_guard:
            acquired = lock_key not in self._in_flight
            if acquired:
                self._in_flight.add(lock_key)
        try:
            yield acquired
        finally:
            if acquired:
                with self._locks_guard:
                    self._in_flight.discard(lock_key)


def _refused(reason: str, message: str, status_code: int) -> HandoffResult:
    return HandoffResult(
        state=HandoffState.FAILED,
        reason=reason,
        message=message,
        status_code=status_code,
        trail=[HandoffState.NOT_STARTED, HandoffState.FAILED],
    )
