"""
Integrations layer.
This package contains all code used to communicate with NAV (Microsoft Dynamics NAV
page web services): customers, contracts and contract goods.

Key rule:
- Flows MUST NOT call NAV directly.
- Flows call the policy gateways (under integrations/policy), which talk to a NavTransport.
- We use the MOCK transport during development and the SOAP transport when NAV is available.

Switching implementations:
- The selection of mock vs real transport happens in ONE place (creditdesk/app.py).
"""

from .contracts.interfaces import NavSession, NavTransport
from .contracts.nav import ContractCard, ContractGoodsLine, CustomerCard, OfferDetails
from .policy.nav_client_service import NavClientGateway
from .policy.nav_contract_service import NavContractGateway

__all__ = [
    # interfaces
    "NavSession", "NavTransport",
    # wire models
    "ContractCard", "ContractGoodsLine", "CustomerCard", "OfferDetails",
    # gateways
    "NavClientGateway", "NavContractGateway",
]
