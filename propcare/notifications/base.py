"""
Base Notifier - Abstract base class for outbound message channels
"""

import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class BaseNotifier(ABC):
    """
    Abstract base class for notifiers.

    All notifiers must implement:
    - send_message(to, body) - Send a message to a phone number
    - is_enabled() - Check if the notifier is configured and ready
    """

    def __init__(self):
        self.provider_name = self.__class__.__name__

    @abstractmethod
    async def send_message(self, to: str, body: str) -> bool:
        """
        Send a message.

        Args:
            to: Recipient phone number (E.164 format, e.g., +447700900123)
            body: Message content

        Returns:
            True if sent successfully, False otherwise
        """
        pass

    @abstractmethod
    def is_enabled(self) -> bool:
        """True if the notifier can send messages."""
        pass

    def normalize_phone_number(self, phone: str) -> str:
        """Ensure a leading + on E.164 numbers."""
        if not phone.startswith("+"):
            return f"+{phone}"
        return phone
