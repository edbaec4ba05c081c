"""
Policy services: the NAV gateways and everything that shapes what they send and receive.
"""
