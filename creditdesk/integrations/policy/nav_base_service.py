"""
Base service for NAV page integrations

Shared by the customer and contract gateways:
- Config injection (no process-wide credentials)
- One fresh transport session per logical call group
- Error handling & logging: every transport-level failure becomes RemoteProtocolError
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from creditdesk.errors import TRANSPORT, InvalidFilterError, RemoteProtocolError
from creditdesk.integrations.contracts.interfaces import NavSession, NavTransport
from creditdesk.utils.config_loader import NavSettings
from creditdesk.utils.translator import TemplateTranslator, Translator

logger = logging.getLogger(__name__)


class NavBaseService:
    def __init__(
        self,
        transport: NavTransport,
        settings: Optional[NavSettings] = None,
        translator: Optional[Translator] = None,
    ):
        self.transport = transport
        self.settings = settings or NavSettings()
        self.translator = translator or TemplateTranslator()

    @contextmanager
    def open_session(self, service_path: str) -> Iterator[NavSession]:
        try:
            session = self.transport.open(service_path)
        except RemoteProtocolError as e:
            logger.critical(f"Could not open NAV session for {service_path}: {e}")
            raise
        except Exception as e:
            logger.critical(f"Could not open NAV session for {service_path}: {e}")
            raise RemoteProtocolError(f"Could not connect to NAV service {service_path}: {e}") from e
        try:
            yield session
        finally:
            session.close()

    def invoke(self, session: NavSession, service_path: str, operation: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        Call `operation` on an open session. Transport failures are logged at
        CRITICAL (alert) and re-raised as RemoteProtocolError.
        """
        logger.info(f"Calling NAV {service_path} {operation}")
        logger.debug("NAV request params: %s", params)
        try:
            response = session.call(operation, params)
        except RemoteProtocolError as e:
            logger.critical(f"NAV {service_path} {operation} failed: {e}")
            raise
        except Exception as e:
            logger.critical(f"NAV {service_path} {operation} failed: {e}")
            raise RemoteProtocolError(f"NAV {service_path} {operation} failed: {e}", kind=TRANSPORT) from e
        logger.debug("NAV response: %s", response)
        return response

    def call(self, service_path: str, operation: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Open a session, make a single call, close the session."""
        with self.open_session(service_path) as session:
            return self.invoke(session, service_path, operation, params)

    @staticmethod
    def build_filter(filters: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        """NAV takes one Field/Criteria pair; more than one entry is refused, not truncated."""
        if not filters:
            return None
        if len(filters) > 1:
            raise InvalidFilterError(
                f"NAV filters accept a single field; got {len(filters)}: {', '.join(map(str, filters))}"
            )
        (field, criteria), = filters.items()
        return {"Field": field, "Criteria": criteria}

    @staticmethod
    def log_unexpected_shape(error: RemoteProtocolError) -> None:
        logger.error(f"Unexpected NAV response: {error}")
