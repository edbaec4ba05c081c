"""
Real NAV integration clients.

These clients communicate with the Dynamics NAV page web services over SOAP.

Important:
- Must implement the same NavTransport interface as the mock client
- Must return decoded results shaped the way the policy services expect

Switching:
The selection of mock vs real transport happens in creditdesk/app.py only.
"""

from .nav_soap import SoapNavSession, SoapNavTransport, build_envelope, parse_envelope

__all__ = ["SoapNavSession", "SoapNavTransport", "build_envelope", "parse_envelope"]
