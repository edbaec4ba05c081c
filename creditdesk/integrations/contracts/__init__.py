"""
Contracts (data models).

This folder defines the request/response shapes for the NAV integration.
Examples:
- Customer card / contract card / contract goods line formats
- The accepted offer handed over by the caller
- The transport interface both the SOAP client and the mock implement

Why this exists:
- Ensures consistent data structures across mock and real transports
- Prevents "guessing" NAV field names in multiple places

Both the mock and the real SOAP transport should use these contracts.
"""

from .interfaces import NavSession, NavTransport
from .nav import ContractCard, ContractGoodsLine, CustomerCard, OfferDetails, goods_payload

__all__ = [
    "NavSession",
    "NavTransport",
    "ContractCard",
    "ContractGoodsLine",
    "CustomerCard",
    "OfferDetails",
    "goods_payload",
]
