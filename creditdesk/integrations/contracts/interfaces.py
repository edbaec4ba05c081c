from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


# ---------------------------------------------------------------------------
# NAV page web services
# ---------------------------------------------------------------------------

URL_CLIENT = "Page/CustomerList"
URL_CONTRACT = "Page/ContractList"
URL_CONTRACT_GOODS = "Page/ContractGoods"

# Field whose presence marks a well-formed answer, per page
CLIENT_FIELD = "CustomerList"
CONTRACT_FIELD = "ContractList"
GOODS_LIST_FIELD = "ContractGoods_List"
GOODS_ITEM_FIELD = "ContractGoods"
GOODS_READ_FIELD = "ContractGoodsList"

READ_MULTIPLE_RESULT = "ReadMultiple_Result"
DELETE_RESULT = "Delete_Result"

# NAV identifies page records as "<table caption>: <primary key>"
REC_ID_PREFIX = "Credit Contract: "

# Remote records are whatever NAV sends back, decoded to plain dicts.
# The handoff only relies on "Key" (opaque remote key) and the display
# number ("No" for customers, "Contract_No" for contracts).
RemoteCustomerRecord = Dict[str, Any]
RemoteContractRecord = Dict[str, Any]
RemoteGoodsRecord = Dict[str, Any]


# ---------------------------------------------------------------------------
# Abstract transport interface
# ---------------------------------------------------------------------------

class NavSession(ABC):
    """One open connection to a single NAV page service."""

    @abstractmethod
    def call(self, operation: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Invoke `operation` (Create, ReadMultiple, ...) and return the decoded result element."""

    def close(self) -> None:
        """Release the connection. Default: nothing to release."""

    def __enter__(self) -> "NavSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class NavTransport(ABC):
    """Every NAV transport (SOAP over HTTP, in-memory mock) must implement this interface."""

    @abstractmethod
    def open(self, service_path: str) -> NavSession:
        """Open a fresh session against `service_path` (e.g. "Page/CustomerList")."""


__all__: List[str] = [
    "URL_CLIENT", "URL_CONTRACT", "URL_CONTRACT_GOODS",
    "CLIENT_FIELD", "CONTRACT_FIELD", "GOODS_LIST_FIELD", "GOODS_ITEM_FIELD", "GOODS_READ_FIELD",
    "READ_MULTIPLE_RESULT", "DELETE_RESULT", "REC_ID_PREFIX",
    "RemoteCustomerRecord", "RemoteContractRecord", "RemoteGoodsRecord",
    "NavSession", "NavTransport",
]
