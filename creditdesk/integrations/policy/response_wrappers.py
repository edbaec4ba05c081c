from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from creditdesk.errors import UNEXPECTED_SHAPE, RemoteProtocolError
from creditdesk.integrations.contracts.interfaces import (
    DELETE_RESULT,
    GOODS_ITEM_FIELD,
    GOODS_LIST_FIELD,
    READ_MULTIPLE_RESULT,
)

_TRUE_STRINGS = {"true", "1", "yes"}


def require_record(
    response: Any, field: str, error_message: str, required_fields: Iterable[str] = ()
) -> Dict[str, Any]:
    """Return `response[field]` as a dict, or fail with an unexpected-shape error.

    Every name in `required_fields` must be present on the record with a
    non-empty value.
    """
    if not isinstance(response, dict) or field not in response:
        raise RemoteProtocolError(error_message, kind=UNEXPECTED_SHAPE, payload=_as_payload(response))
    record = response[field]
    if isinstance(record, list) and len(record) == 1:
        record = record[0]
    if not isinstance(record, dict):
        raise RemoteProtocolError(error_message, kind=UNEXPECTED_SHAPE, payload=_as_payload(response))
    missing = [name for name in required_fields if record.get(name) in (None, "")]
    if missing:
        raise RemoteProtocolError(
            f"{error_message}: answer is missing {', '.join(missing)}",
            kind=UNEXPECTED_SHAPE,
            payload=_as_payload(response),
        )
    return dict(record)


def optional_record(response: Any, field: str) -> Optional[Dict[str, Any]]:
    """Single-record read: None when NAV returned nothing usable."""
    if not response or not isinstance(response, dict):
        return None
    record = response.get(field)
    if isinstance(record, list):
        record = record[0] if record else None
    if not isinstance(record, dict) or not record:
        return None
    return dict(record)


def as_record_list(value: Any) -> List[Dict[str, Any]]:
    """NAV returns one element as a bare record and several as a list; always give a list."""
    if value is None or value == "":
        return []
    if isinstance(value, dict):
        return [dict(value)]
    if isinstance(value, list):
        return [dict(item) for item in value if isinstance(item, dict)]
    raise RemoteProtocolError(
        f"Expected record or list of records, got {type(value).__name__}",
        kind=UNEXPECTED_SHAPE,
    )


def read_multiple_records(response: Any, field: str) -> List[Dict[str, Any]]:
    """ReadMultiple result: empty list when the collection is missing."""
    if not isinstance(response, dict):
        return []
    result = response.get(READ_MULTIPLE_RESULT)
    if not isinstance(result, dict):
        return []
    return as_record_list(result.get(field))


def normalize_goods_response(response: Any, error_message: str) -> List[Dict[str, Any]]:
    """CreateMultiple answer of the ContractGoods page, as a list of lines."""
    if not isinstance(response, dict) or GOODS_LIST_FIELD not in response:
        raise RemoteProtocolError(error_message, kind=UNEXPECTED_SHAPE, payload=_as_payload(response))
    container = response[GOODS_LIST_FIELD]
    if isinstance(container, dict) and GOODS_ITEM_FIELD in container:
        container = container[GOODS_ITEM_FIELD]
    return as_record_list(container)


def delete_succeeded(response: Any) -> bool:
    if not isinstance(response, dict):
        return False
    value = response.get(DELETE_RESULT)
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


def _as_payload(response: Any) -> Dict[str, Any]:
    if isinstance(response, dict):
        return response
    return {"raw": response}
