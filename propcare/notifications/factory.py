"""
Notifier Factory - Creates notifier instances based on configuration
"""

import logging
from typing import Optional

from .base import BaseNotifier

logger = logging.getLogger(__name__)


def create_notifier(provider_type: Optional[str], **config) -> Optional[BaseNotifier]:
    """
    Create a notifier instance.

    Args:
        provider_type: "twilio" or "log"; None/empty means no notifier
        **config: Provider-specific configuration

    Returns:
        Notifier instance, or None if the provider type is not supported

    Examples:
        notifier = create_notifier(
            "twilio",
            account_sid="xxx",
            auth_token="xxx",
            from_number="+44xxx",
        )

        notifier = create_notifier("log")
    """
    if not provider_type:
        return None

    provider_type = provider_type.lower()

    if provider_type == "twilio":
        from .twilio import TwilioWhatsAppNotifier
        return TwilioWhatsAppNotifier(
            account_sid=config.get("account_sid", ""),
            auth_token=config.get("auth_token", ""),
            from_number=config.get("from_number", ""),
            messaging_service_sid=config.get("messaging_service_sid", ""),
        )

    elif provider_type == "log":
        from .log import LogNotifier
        return LogNotifier()

    else:
        logger.error(f"Unknown notifier provider type: {provider_type}")
        return None
