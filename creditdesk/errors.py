"""
Error taxonomy for the NAV handoff.

Local precondition errors are raised before anything is sent to NAV.
Everything that goes wrong on the wire is normalized to RemoteProtocolError
at the gateway boundary, so flows never see requests / XML exceptions.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

TRANSPORT = "transport"
UNEXPECTED_SHAPE = "unexpected-shape"


class HandoffError(Exception):
    """Base class for every error the handoff workflow knows how to report."""


class MissingInputError(HandoffError):
    """A required workflow input (credit request, offer details) is absent."""


class RemoteProtocolError(HandoffError):
    """NAV call failed on the wire, or answered in a shape we did not agree on."""

    def __init__(
        self,
        message: str,
        *,
        kind: str = TRANSPORT,
        payload: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.payload = payload or {}

    @property
    def is_unexpected_shape(self) -> bool:
        return self.kind == UNEXPECTED_SHAPE


class InvalidRequestTypeError(HandoffError):
    """Credit request type has no NAV contract type."""


class InvalidRequestStateError(HandoffError):
    """Credit request data makes the requested operation impossible."""


class StatusValidationError(InvalidRequestStateError):
    """Unknown credit request status value."""


class InvalidTransitionError(InvalidRequestStateError):
    """Status change not present in the transition table."""


class InvalidFilterError(HandoffError, ValueError):
    """NAV read/delete filters accept exactly one field/value criterion."""
