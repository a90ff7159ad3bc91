"""
Log Notifier - Records outbound messages in the log instead of sending them

Used for local runs and tests; keeps every message in ``sent``.
"""

import logging
from typing import List, Tuple

from .base import BaseNotifier

logger = logging.getLogger(__name__)


class LogNotifier(BaseNotifier):

    def __init__(self):
        super().__init__()
        self.sent: List[Tuple[str, str]] = []

    def is_enabled(self) -> bool:
        return True

    async def send_message(self, to: str, body: str) -> bool:
        to = self.normalize_phone_number(to)
        self.sent.append((to, body))
        logger.info(f"[LogNotifier] Message to {to}: {body[:200]}")
        return True
