"""
creditdesk - credit origination back office and its NAV (ERP) handoff.
"""

__version__ = "1.0.0"
