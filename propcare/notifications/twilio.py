"""
Twilio WhatsApp Notifier - Sends WhatsApp messages via the Twilio REST API
"""

import asyncio
import logging

from twilio.rest import Client as TwilioClient

from .base import BaseNotifier

logger = logging.getLogger(__name__)

WHATSAPP_PREFIX = "whatsapp:"


def whatsapp_address(phone: str) -> str:
    """Twilio channel address for a phone number (idempotent)."""
    if phone.startswith(WHATSAPP_PREFIX):
        return phone
    if not phone.startswith("+"):
        phone = f"+{phone}"
    return f"{WHATSAPP_PREFIX}{phone}"


class TwilioWhatsAppNotifier(BaseNotifier):
    """
    Twilio WhatsApp notifier.

    Requires configuration:
    - account_sid: Twilio account SID
    - auth_token: Twilio auth token
    - from_number: WhatsApp-enabled sender number

    Optional:
    - messaging_service_sid: send through a Messaging Service instead
    """

    def __init__(self, account_sid: str, auth_token: str, from_number: str = "", messaging_service_sid: str = ""):
        super().__init__()
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = from_number
        self.messaging_service_sid = messaging_service_sid
        self._client = None

        if self.is_enabled():
            logger.info(f"Twilio WhatsApp notifier initialized (from: {self.from_number or self.messaging_service_sid})")
        else:
            logger.warning("Twilio WhatsApp notifier disabled - missing configuration")

    def is_enabled(self) -> bool:
        """Check if Twilio is configured."""
        return bool(self.account_sid and self.auth_token and (self.from_number or self.messaging_service_sid))

    def _get_client(self) -> TwilioClient:
        if self._client is None:
            self._client = TwilioClient(self.account_sid, self.auth_token)
        return self._client

    async def send_message(self, to: str, body: str) -> bool:
        """Send a WhatsApp message."""
        if not self.is_enabled():
            logger.warning("Twilio not configured - cannot send WhatsApp message")
            return False

        create_params = {"to": whatsapp_address(to), "body": body}
        if self.messaging_service_sid:
            create_params["messaging_service_sid"] = self.messaging_service_sid
        if self.from_number:
            create_params["from_"] = whatsapp_address(self.from_number)

        logger.info(f"[Twilio] Sending WhatsApp to {create_params['to']}: {body[:200]}")

        try:
            client = self._get_client()
            message = await asyncio.to_thread(client.messages.create, **create_params)
            logger.info(f"[Twilio] WhatsApp sent - SID: {message.sid}")
            return True

        except Exception as e:
            logger.error(f"[Twilio] Failed to send WhatsApp message: {e}", exc_info=True)
            return False
