"""
NAV contract gateway (Page/ContractList, Page/ContractGoods).

create_contract runs three calls in a fixed order: Create, CreateMultiple for
the goods (only when the request has products), ValidateContract. NAV accepts
goods only while the contract is still Draft, so validation always comes last.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from creditdesk.domain.credit_request import CreditRequest
from creditdesk.errors import UNEXPECTED_SHAPE, RemoteProtocolError
from creditdesk.integrations.contracts.interfaces import (
    CONTRACT_FIELD,
    GOODS_READ_FIELD,
    REC_ID_PREFIX,
    URL_CONTRACT,
    URL_CONTRACT_GOODS,
    RemoteContractRecord,
    RemoteGoodsRecord,
)
from creditdesk.integrations.policy.nav_base_service import NavBaseService
from creditdesk.integrations.policy.nav_payloads import (
    build_contract_goods_payload,
    build_contract_payload,
    resolve_contract_type,
)
from creditdesk.integrations.policy.response_wrappers import (
    delete_succeeded,
    normalize_goods_response,
    optional_record,
    read_multiple_records,
    require_record,
)

logger = logging.getLogger(__name__)

STEP_CONTRACT_CREATED = "contract-created"
STEP_GOODS_ATTACHED = "goods-attached"
STEP_VALIDATED = "validated"

StepListener = Callable[[str], None]


class NavContractGateway(NavBaseService):
    def create_contract(
        self,
        credit_request: CreditRequest,
        created_by: str,
        offer_details: Any,
        vendor_id: str,
        remote_customer_number: str,
        on_step: Optional[StepListener] = None,
    ) -> RemoteContractRecord:
        """
        Create the contract in NAV, attach its goods and validate it.

        Args:
            credit_request: local request being handed over
            created_by: responsible employee, sent as-is
            offer_details: accepted offer (dict or OfferDetails)
            vendor_id: NAV vendor number for every goods line
            remote_customer_number: "No" of the NAV customer created just before
            on_step: optional progress callback

        Returns:
            The NAV contract record, with the created lines under "goods" when there are products

        Raises:
            InvalidRequestTypeError: request type has no NAV contract type (nothing is sent)
            InvalidRequestStateError: local data cannot produce a contract (nothing is sent)
            RemoteProtocolError: any NAV failure
        """
        resolve_contract_type(credit_request.type, self.settings)
        payload = build_contract_payload(
            credit_request, created_by, offer_details, remote_customer_number, self.settings
        )

        response = self.call(URL_CONTRACT, "Create", payload)
        try:
            contract = require_record(response, CONTRACT_FIELD, "Error adding contract in NAV", ("Key", "Contract_No"))
        except RemoteProtocolError as e:
            self.log_unexpected_shape(e)
            raise
        logger.info("Created NAV contract %s for credit request %s", contract.get("Contract_No"), credit_request.id)
        _notify(on_step, STEP_CONTRACT_CREATED)

        if credit_request.products:
            contract["goods"] = self.add_contract_goods(credit_request, vendor_id, contract.get("Contract_No"))
            _notify(on_step, STEP_GOODS_ATTACHED)

        self.validate_contract(contract.get("Key"))
        _notify(on_step, STEP_VALIDATED)

        return contract

    def add_contract_goods(self, credit_request: CreditRequest, vendor_id: str, contract_number: str) -> List[RemoteGoodsRecord]:
        payload = build_contract_goods_payload(credit_request, vendor_id, contract_number)
        response = self.call(URL_CONTRACT_GOODS, "CreateMultiple", payload)
        try:
            goods = normalize_goods_response(response, "Error adding contract products in NAV")
        except RemoteProtocolError as e:
            self.log_unexpected_shape(e)
            raise
        logger.info("Attached %d goods lines to NAV contract %s", len(goods), contract_number)
        return goods

    def validate_contract(self, remote_contract_key: str) -> None:
        self.call(URL_CONTRACT, "ValidateContract", {"contract": remote_contract_key})
        logger.info("Validated NAV contract with key %s", remote_contract_key)

    # -- reads / deletes ----------------------------------------------------------

    def get_contract(self, contract_no: str) -> Optional[RemoteContractRecord]:
        response = self.call(URL_CONTRACT, "ReadByRecId", {"recId": REC_ID_PREFIX + str(contract_no)})
        return optional_record(response, CONTRACT_FIELD)

    def list_contracts(self, filters: Optional[Dict[str, Any]] = None, page_size: int = 0) -> List[RemoteContractRecord]:
        params = {"filter": self.build_filter(filters), "setSize": page_size}
        response = self.call(URL_CONTRACT, "ReadMultiple", params)
        return read_multiple_records(response, CONTRACT_FIELD)

    def delete_contract(self, remote_contract_key: str) -> bool:
        response = self.call(URL_CONTRACT, "Delete", {"Key": remote_contract_key})
        if not delete_succeeded(response):
            error = RemoteProtocolError("Error deleting contract from NAV", kind=UNEXPECTED_SHAPE, payload=response)
            self.log_unexpected_shape(error)
            raise error
        return True

    def list_contract_goods(self, filters: Optional[Dict[str, Any]] = None, page_size: int = 0) -> List[RemoteGoodsRecord]:
        params = {"filter": self.build_filter(filters), "setSize": page_size}
        response = self.call(URL_CONTRACT_GOODS, "ReadMultiple", params)
        return read_multiple_records(response, GOODS_READ_FIELD)

    def delete_contract_goods(self, filters: Optional[Dict[str, Any]] = None, page_size: int = 0) -> List[RemoteGoodsRecord]:
        """Delete the goods lines matching `filters`; returns the deleted lines."""
        nav_filter = self.build_filter(filters)
        with self.open_session(URL_CONTRACT_GOODS) as session:
            response = self.invoke(session, URL_CONTRACT_GOODS, "ReadMultiple", {"filter": nav_filter, "setSize": page_size})
            lines = read_multiple_records(response, GOODS_READ_FIELD)
            for line in lines:
                result = self.invoke(session, URL_CONTRACT_GOODS, "Delete", {"Key": line.get("Key")})
                if not delete_succeeded(result):
                    error = RemoteProtocolError(
                        f"Error deleting contract goods line {line.get('Line_No')} from NAV",
                        kind=UNEXPECTED_SHAPE,
                        payload=result,
                    )
                    self.log_unexpected_shape(error)
                    raise error
        return lines


def _notify(listener: Optional[StepListener], step: str) -> None:
    if listener is not None:
        listener(step)
