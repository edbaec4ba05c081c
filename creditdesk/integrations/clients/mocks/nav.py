"""
NAV page web services: MOCK transport.

In-memory emulation of the three NAV pages the handoff uses (CustomerList,
ContractList, ContractGoods). Answers are shaped like the decoded SOAP
responses of the real transport, so the gateways cannot tell the difference.
Failures are scripted per (service path, operation) with fail_on / malform.
"""

import copy
import logging
from typing import Any, Dict, List, Optional, Set, Tuple

from creditdesk.errors import TRANSPORT, RemoteProtocolError
from creditdesk.integrations.contracts.interfaces import (
    CLIENT_FIELD,
    CONTRACT_FIELD,
    DELETE_RESULT,
    GOODS_ITEM_FIELD,
    GOODS_LIST_FIELD,
    GOODS_READ_FIELD,
    READ_MULTIPLE_RESULT,
    REC_ID_PREFIX,
    URL_CLIENT,
    URL_CONTRACT,
    URL_CONTRACT_GOODS,
    NavSession,
    NavTransport,
)

logger = logging.getLogger(__name__)

# service path -> (record field in Create answers, record field in ReadMultiple answers, key prefix)
_PAGES = {
    URL_CLIENT: (CLIENT_FIELD, CLIENT_FIELD, "CL"),
    URL_CONTRACT: (CONTRACT_FIELD, CONTRACT_FIELD, "CT"),
    URL_CONTRACT_GOODS: (GOODS_ITEM_FIELD, GOODS_READ_FIELD, "CG"),
}

Call = Tuple[str, str, Dict[str, Any]]


# ---------------------------------------------------------------------------
# Mock transport
# ---------------------------------------------------------------------------

class MockNavTransport(NavTransport):
    """
    Mock NAV transport.

    Parameters
    ----------
    collapse_single : bool
        If True, a collection holding one record is answered as a bare record,
        as NAV does. Default True.
    """

    def __init__(self, collapse_single: bool = True):
        self.collapse_single = collapse_single

        # In-memory pages (reset on restart)
        self.records: Dict[str, Dict[str, Dict[str, Any]]] = {path: {} for path in _PAGES}
        self.calls: List[Call] = []
        self.sessions_opened = 0
        self.sessions_closed = 0

        self._failures: Dict[Tuple[str, str], Exception] = {}
        self._malformed: Set[Tuple[str, str]] = set()
        self._counters: Dict[str, int] = {path: 0 for path in _PAGES}

        logger.info("[NAV MOCK] Transport initialised (collapse_single=%s)", collapse_single)

    # ------------------------------------------------------------------
    # Scripting
    # ------------------------------------------------------------------

    def fail_on(self, service_path: str, operation: str, exc: Optional[Exception] = None) -> None:
        """Make every `operation` on `service_path` raise (a timeout by default)."""
        self._failures[(service_path, operation)] = exc or TimeoutError(
            f"[NAV MOCK] {service_path} {operation} timed out"
        )

    def malform(self, service_path: str, operation: str) -> None:
        """Make `operation` on `service_path` answer with an empty result."""
        self._malformed.add((service_path, operation))

    def reset_failures(self) -> None:
        self._failures.clear()
        self._malformed.clear()

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    @property
    def customers(self) -> List[Dict[str, Any]]:
        return list(self.records[URL_CLIENT].values())

    @property
    def contracts(self) -> List[Dict[str, Any]]:
        return list(self.records[URL_CONTRACT].values())

    @property
    def goods(self) -> List[Dict[str, Any]]:
        return list(self.records[URL_CONTRACT_GOODS].values())

    def operations(self) -> List[Tuple[str, str]]:
        return [(path, operation) for path, operation, _ in self.calls]

    # ------------------------------------------------------------------
    # NavTransport
    # ------------------------------------------------------------------

    def open(self, service_path: str) -> "MockNavSession":
        if service_path not in _PAGES:
            raise RemoteProtocolError(f"[NAV MOCK] Unknown service {service_path}", kind=TRANSPORT)
        self.sessions_opened += 1
        return MockNavSession(self, service_path)

    def dispatch(self, service_path: str, operation: str, params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        params = copy.deepcopy(params or {})
        self.calls.append((service_path, operation, params))
        logger.debug("[NAV MOCK] %s %s", service_path, operation)

        failure = self._failures.get((service_path, operation))
        if failure is not None:
            raise failure
        if (service_path, operation) in self._malformed:
            return {}

        handler = getattr(self, f"_op_{operation.lower()}", None)
        if handler is None:
            raise RemoteProtocolError(
                f"SOAP fault: [NAV MOCK] {service_path} has no operation {operation}", kind=TRANSPORT
            )
        return handler(service_path, params)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _next_key(self, service_path: str) -> Tuple[str, int]:
        self._counters[service_path] += 1
        prefix = _PAGES[service_path][2]
        return f"KEY-{prefix}-{self._counters[service_path]}", self._counters[service_path]

    def _collection(self, records: List[Dict[str, Any]]) -> Any:
        if self.collapse_single and len(records) == 1:
            return records[0]
        return records

    def _find_contract(self, **criteria: Any) -> Optional[Dict[str, Any]]:
        for record in self.records[URL_CONTRACT].values():
            if all(str(record.get(field)) == str(value) for field, value in criteria.items()):
                return record
        return None

    # ------------------------------------------------------------------
    # Page operations
    # ------------------------------------------------------------------

    def _op_create(self, service_path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        field = _PAGES[service_path][0]
        record = dict(params.get(field) or {})
        key, number = self._next_key(service_path)
        record["Key"] = key
        if service_path == URL_CLIENT:
            record["No"] = f"CL-{number:06d}"
        elif service_path == URL_CONTRACT and not record.get("Contract_No"):
            record["Contract_No"] = f"CT-{number:06d}"
        self.records[service_path][key] = record
        logger.info("[NAV MOCK] Created %s key=%s", service_path, key)
        return {field: copy.deepcopy(record)}

    def _op_createmultiple(self, service_path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        if service_path != URL_CONTRACT_GOODS:
            raise RemoteProtocolError(f"SOAP fault: [NAV MOCK] CreateMultiple not exposed on {service_path}")
        items = (params.get(GOODS_LIST_FIELD) or {}).get(GOODS_ITEM_FIELD) or []
        if isinstance(items, dict):
            items = [items]

        created = []
        for item in items:
            contract = self._find_contract(Contract_No=item.get("Contract_No"))
            if contract is None:
                raise RemoteProtocolError(f"SOAP fault: [NAV MOCK] Contract {item.get('Contract_No')} does not exist")
            if contract.get("Contract_Status") not in (None, "Draft"):
                raise RemoteProtocolError(
                    f"SOAP fault: [NAV MOCK] Contract {item.get('Contract_No')} is {contract.get('Contract_Status')}, "
                    "goods can only be added to Draft contracts"
                )
            line = dict(item)
            line["Key"], _ = self._next_key(service_path)
            self.records[service_path][line["Key"]] = line
            created.append(copy.deepcopy(line))

        logger.info("[NAV MOCK] Created %d goods lines", len(created))
        return {GOODS_LIST_FIELD: {GOODS_ITEM_FIELD: self._collection(created)}}

    def _op_validatecontract(self, service_path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        contract = self.records[URL_CONTRACT].get(params.get("contract"))
        if service_path != URL_CONTRACT or contract is None:
            raise RemoteProtocolError(f"SOAP fault: [NAV MOCK] Contract key {params.get('contract')} not found")
        contract["Contract_Status"] = "Validated"
        logger.info("[NAV MOCK] Validated contract %s", contract.get("Contract_No"))
        return {}

    def _op_readbyrecid(self, service_path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        rec_id = str(params.get("recId") or "")
        number = rec_id[len(REC_ID_PREFIX):] if rec_id.startswith(REC_ID_PREFIX) else rec_id
        number_field = "No" if service_path == URL_CLIENT else "Contract_No"
        for record in self.records[service_path].values():
            if str(record.get(number_field)) == number:
                return {_PAGES[service_path][0]: copy.deepcopy(record)}
        return {}

    def _op_readmultiple(self, service_path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        records = list(self.records[service_path].values())
        nav_filter = params.get("filter")
        if nav_filter:
            field, criteria = nav_filter.get("Field"), nav_filter.get("Criteria")
            records = [r for r in records if str(r.get(field)) == str(criteria)]
        set_size = int(params.get("setSize") or 0)
        if set_size > 0:
            records = records[:set_size]
        if not records:
            return {READ_MULTIPLE_RESULT: ""}
        read_field = _PAGES[service_path][1]
        return {READ_MULTIPLE_RESULT: {read_field: self._collection(copy.deepcopy(records))}}

    def _op_delete(self, service_path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        removed = self.records[service_path].pop(params.get("Key"), None)
        if removed is not None:
            logger.info("[NAV MOCK] Deleted %s key=%s", service_path, params.get("Key"))
        return {DELETE_RESULT: "true" if removed is not None else "false"}


class MockNavSession(NavSession):
    def __init__(self, transport: MockNavTransport, service_path: str):
        self.transport = transport
        self.service_path = service_path
        self.closed = False

    def call(self, operation: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        if self.closed:
            raise RemoteProtocolError(f"[NAV MOCK] Session for {self.service_path} is closed", kind=TRANSPORT)
        return self.transport.dispatch(self.service_path, operation, params)

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self.transport.sessions_closed += 1
