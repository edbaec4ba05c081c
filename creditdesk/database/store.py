"""
Lightweight in-memory credit request store.

Stands in for the persistence layer so the handoff can look requests up by
id. It is NOT intended for production use.
"""

from __future__ import annotations

from datetime import datetime
from itertools import count
from typing import Dict, List, Optional

from creditdesk.domain.credit_request import CreditRequest


class CreditRequestStore:
    """In-memory stand-in for the credit request repository, keyed by numeric id."""

    def __init__(self) -> None:
        self._requests: Dict[int, CreditRequest] = {}
        self._ids = count(1)

    # ------------------------------------------------------------------ #
    # Credit requests
    # ------------------------------------------------------------------ #
    def add(self, credit_request: CreditRequest) -> CreditRequest:
        if credit_request.id is None:
            credit_request.id = next(self._ids)
        return self.save(credit_request)

    def save(self, credit_request: CreditRequest) -> CreditRequest:
        if credit_request.id is None:
            raise ValueError("Credit request has no id; use add() for new requests")
        credit_request.updated_at = datetime.utcnow()
        credit_request.mark_clean()
        self._requests[credit_request.id] = credit_request
        return credit_request

    def get(self, credit_request_id: int) -> Optional[CreditRequest]:
        try:
            return self._requests.get(int(credit_request_id))
        except (TypeError, ValueError):
            return None

    def list(self) -> List[CreditRequest]:
        return [self._requests[key] for key in sorted(self._requests)]

    def delete(self, credit_request_id: int) -> bool:
        return self._requests.pop(int(credit_request_id), None) is not None
