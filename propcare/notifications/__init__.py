"""
Notifiers - outbound "send message to phone" channels (Twilio WhatsApp, log)
"""

from .base import BaseNotifier
from .factory import create_notifier
from .log import LogNotifier

__all__ = ["BaseNotifier", "create_notifier", "LogNotifier"]
