"""
NAV customer gateway (Page/CustomerList).

create_client is the first step of the handoff; delete_client is only used to
undo it when the contract cannot be created.
"""

import logging
from typing import List, Optional

from creditdesk.domain.credit_request import CreditRequest
from creditdesk.errors import UNEXPECTED_SHAPE, RemoteProtocolError
from creditdesk.integrations.contracts.interfaces import (
    CLIENT_FIELD,
    REC_ID_PREFIX,
    URL_CLIENT,
    RemoteCustomerRecord,
)
from creditdesk.integrations.policy.nav_base_service import NavBaseService
from creditdesk.integrations.policy.nav_payloads import build_client_payload
from creditdesk.integrations.policy.response_wrappers import (
    delete_succeeded,
    optional_record,
    read_multiple_records,
    require_record,
)

logger = logging.getLogger(__name__)


class NavClientGateway(NavBaseService):
    def create_client(self, credit_request: CreditRequest, locality_name: str) -> RemoteCustomerRecord:
        payload = build_client_payload(credit_request, locality_name, self.settings, self.translator)
        response = self.call(URL_CLIENT, "Create", payload)
        try:
            client = require_record(response, CLIENT_FIELD, "Error adding client in NAV", ("Key", "No"))
        except RemoteProtocolError as e:
            self.log_unexpected_shape(e)
            raise
        logger.info("Created NAV customer %s for credit request %s", client.get("No"), credit_request.id)
        return client

    def get_client(self, client_no: str) -> Optional[RemoteCustomerRecord]:
        response = self.call(URL_CLIENT, "ReadByRecId", {"recId": REC_ID_PREFIX + str(client_no)})
        return optional_record(response, CLIENT_FIELD)

    def list_clients(self) -> List[RemoteCustomerRecord]:
        response = self.call(URL_CLIENT, "ReadMultiple")
        return read_multiple_records(response, CLIENT_FIELD)

    def delete_client(self, remote_key: str) -> bool:
        response = self.call(URL_CLIENT, "Delete", {"Key": remote_key})
        if not delete_succeeded(response):
            error = RemoteProtocolError("Error deleting client in NAV", kind=UNEXPECTED_SHAPE, payload=response)
            self.log_unexpected_shape(error)
            raise error
        logger.info("Deleted NAV customer with key %s", remote_key)
        return True
