"""
NAV handoff flow - Send an approved credit request to NAV.

Creates the NAV customer, then the contract (with goods, then validation).
If the contract cannot be created the customer is deleted again, so NAV is
never left with a customer that has no contract.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from creditdesk.domain.credit_request import CreditRequest
from creditdesk.errors import HandoffError, MissingInputError
from creditdesk.integrations.contracts.interfaces import RemoteContractRecord, RemoteCustomerRecord
from creditdesk.integrations.policy.nav_client_service import NavClientGateway
from creditdesk.integrations.policy.nav_contract_service import NavContractGateway
from creditdesk.integrations.policy.nav_payloads import parse_offer_details

logger = logging.getLogger(__name__)

REASON_MISSING_INPUT = "missing-input"
REASON_CLIENT_CREATION_FAILED = "client-creation-failed"
REASON_CONTRACT_CREATION_FAILED = "contract-creation-failed"

MSG_CREDIT_REQUEST_MISSING = "Credit Request not properly defined!"
MSG_OFFER_MISSING = "Credit request offer not properly defined!"
MSG_CLIENT_FAILED = "Creating client in NAV failed!"
MSG_CONTRACT_FAILED = "Creating contract in NAV failed!"
MSG_DONE = "Credit request sent to NAV."

COMPENSATION_FAILED_EVENT = "nav_compensation_failed"


class HandoffState(str, Enum):
    NOT_STARTED = "not-started"
    CLIENT_CREATED = "client-created"
    CONTRACT_CREATED = "contract-created"
    GOODS_ATTACHED = "goods-attached"
    VALIDATED = "validated"
    DONE = "done"
    FAILED = "failed"


@dataclass
class HandoffResult:
    state: HandoffState
    reason: Optional[str] = None
    compensated: bool = False
    message: str = ""
    status_code: int = 200
    nav_client: Optional[RemoteCustomerRecord] = None
    nav_contract: Optional[RemoteContractRecord] = None
    trail: List[HandoffState] = field(default_factory=list)
    cleanup_required: bool = False
    error: Optional[Exception] = field(default=None, repr=False, compare=False)

    @property
    def success(self) -> bool:
        return self.state == HandoffState.DONE

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "success": self.success,
            "state": self.state.value,
            "reason": self.reason,
            "compensated": self.compensated,
            "message": self.message,
            "status_code": self.status_code,
        }
        if self.success:
            payload["data"] = {"navClient": self.nav_client, "navContract": self.nav_contract}
        return payload


class NavHandoffFlow:
    def __init__(self, client_gateway: NavClientGateway, contract_gateway: NavContractGateway):
        self.client_gateway = client_gateway
        self.contract_gateway = contract_gateway

    def run(
        self,
        credit_request: Optional[CreditRequest],
        created_by: str,
        locality_name: str,
        offer_details: Any,
        vendor_id: str,
    ) -> HandoffResult:
        trail = [HandoffState.NOT_STARTED]

        if credit_request is None:
            return self._failed(trail, REASON_MISSING_INPUT, MSG_CREDIT_REQUEST_MISSING)
        try:
            offer = parse_offer_details(offer_details)
        except MissingInputError as e:
            logger.warning("Credit request %s: %s", credit_request.id, e)
            return self._failed(trail, REASON_MISSING_INPUT, MSG_OFFER_MISSING, error=e)

        # 1. customer
        try:
            nav_client = self.client_gateway.create_client(credit_request, locality_name)
        except HandoffError as e:
            logger.error("Creating NAV customer for credit request %s failed: %s", credit_request.id, e)
            return self._failed(trail, REASON_CLIENT_CREATION_FAILED, MSG_CLIENT_FAILED, error=e)
        trail.append(HandoffState.CLIENT_CREATED)

        # 2. contract, goods, validation
        try:
            nav_contract = self.contract_gateway.create_contract(
                credit_request,
                created_by,
                offer,
                vendor_id,
                nav_client.get("No"),
                on_step=lambda step: trail.append(HandoffState(step)),
            )
        except HandoffError as e:
            logger.critical("Creating NAV contract for credit request %s failed: %s", credit_request.id, e)
            cleaned = self._compensate(credit_request, nav_client)
            return self._failed(
                trail,
                REASON_CONTRACT_CREATION_FAILED,
                MSG_CONTRACT_FAILED,
                compensated=True,
                cleanup_required=not cleaned,
                nav_client=nav_client,
                error=e,
            )
        except Exception:
            self._compensate(credit_request, nav_client)
            raise

        trail.append(HandoffState.DONE)
        logger.info(
            "Credit request %s sent to NAV: customer %s, contract %s",
            credit_request.id,
            nav_client.get("No"),
            nav_contract.get("Contract_No"),
        )
        return HandoffResult(
            state=HandoffState.DONE,
            message=MSG_DONE,
            nav_client=nav_client,
            nav_contract=nav_contract,
            trail=trail,
        )

    def _compensate(self, credit_request: CreditRequest, nav_client: RemoteCustomerRecord) -> bool:
        """Delete the NAV customer created for this handoff; False if it is still there."""
        remote_key = nav_client.get("Key")
        try:
            self.client_gateway.delete_client(remote_key)
        except HandoffError as e:
            logger.critical(
                "Could not delete NAV customer %s after failed contract; manual cleanup required: %s",
                nav_client.get("No"),
                e,
                extra={
                    "event": COMPENSATION_FAILED_EVENT,
                    "credit_request_id": credit_request.id,
                    "nav_customer_no": nav_client.get("No"),
                    "nav_customer_key": remote_key,
                },
            )
            return False
        logger.info("Deleted NAV customer %s after failed contract", nav_client.get("No"))
        return True

    @staticmethod
    def _failed(
        trail: List[HandoffState],
        reason: str,
        message: str,
        compensated: bool = False,
        cleanup_required: bool = False,
        nav_client: Optional[RemoteCustomerRecord] = None,
        error: Optional[Exception] = None,
    ) -> HandoffResult:
        trail.append(HandoffState.FAILED)
        return HandoffResult(
            state=HandoffState.FAILED,
            reason=reason,
            compensated=compensated,
            message=message,
            status_code=500,
            nav_client=nav_client,
            trail=trail,
            cleanup_required=cleanup_required,
            error=error,
        )
