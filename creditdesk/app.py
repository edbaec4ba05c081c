"""
Application wiring.

The one place where the mock or the real NAV transport is selected.
"""

import logging
from typing import Optional

from creditdesk.database.store import CreditRequestStore
from creditdesk.flows.nav_handoff import NavHandoffFlow
from creditdesk.integrations.contracts.interfaces import NavTransport
from creditdesk.integrations.policy.nav_client_service import NavClientGateway
from creditdesk.integrations.policy.nav_contract_service import NavContractGateway
from creditdesk.services.handoff_service import NavHandoffService
from creditdesk.utils.config_loader import AppConfig, load_app_config
from creditdesk.utils.translator import TemplateTranslator

logger = logging.getLogger(__name__)


def build_transport(config: AppConfig, use_mock: Optional[bool] = None) -> NavTransport:
    if use_mock is None:
        use_mock = config.nav.use_mock or not config.nav.username

    if use_mock:
        from creditdesk.integrations.clients.mocks.nav import MockNavTransport

        logger.info("Using MOCK NAV transport")
        return MockNavTransport()

    from creditdesk.integrations.clients.real_http.nav_soap import SoapNavTransport

    logger.info("Using NAV SOAP transport at %s", config.nav.base_url)
    return SoapNavTransport(config.nav)


def create_handoff_service(
    config: Optional[AppConfig] = None,
    transport: Optional[NavTransport] = None,
    use_mock: Optional[bool] = None,
    store: Optional[CreditRequestStore] = None,
    configure_logging: bool = False,
) -> NavHandoffService:
    """
    Build a ready NavHandoffService.

    Args:
        config: Loaded configuration. Defaults to load_app_config()
        transport: Explicit transport; skips mock/real selection
        use_mock: Force the mock (True) or the SOAP transport (False).
            Default: mock when NAV_USE_MOCK is set or no NAV user is configured
        store: Credit request store used to resolve ids
        configure_logging: Call logging.basicConfig with config.log_level
    """
    if config is None:
        config = load_app_config()
    if configure_logging:
        logging.basicConfig(level=getattr(logging, config.log_level.upper(), logging.INFO))

    if transport is None:
        transport = build_transport(config, use_mock)

    translator = TemplateTranslator(config.translations)
    flow = NavHandoffFlow(
        NavClientGateway(transport, config.settings, translator),
        NavContractGateway(transport, config.settings, translator),
    )
    return NavHandoffService(flow, store=store)
