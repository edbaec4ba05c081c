"""Error handling helpers for the NAV handoff service."""
from typing import Any, Dict, Optional
import logging

logger = logging.getLogger(__name__)


class ErrorHandler:
    def handle_exception(self, exc: Exception, context: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        logger.error("Unhandled exception in NAV handoff: %s", exc, exc_info=True)
        return {
            "success": False,
            "message": "An internal error occurred while sending the credit request to NAV.",
            "status_code": 500,
            "metadata": {"error": str(exc), "context": context or {}},
        }
