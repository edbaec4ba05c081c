"""
Mock integration clients.

These clients return fake (but realistic) NAV responses without calling any external service.
They are used when:
- NAV credentials are not configured (NAV_USE_MOCK=true)
- We want to test the handoff end-to-end without a NAV instance

Important:
- Mock clients must follow the SAME NavTransport interface as the real SOAP client.

Switching to real:
The selection happens in creditdesk/app.py only.
"""

from .nav import MockNavSession, MockNavTransport

__all__ = ["MockNavSession", "MockNavTransport"]
