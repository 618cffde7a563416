"""Delivery of due expiry alerts."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from leftover_tracker.adapters.telegram_client import TelegramClient
from leftover_tracker.services.expiry import utc_now
from leftover_tracker.services.notifications import NotificationOutbox

_logger = logging.getLogger(__name__)


@dataclass
class ReminderService:
    """Sends due alerts from the outbox to a Telegram chat."""

    outbox: NotificationOutbox
    telegram_client: TelegramClient | None
    chat_id: int | None
    clock: Callable[[], datetime] = utc_now
    batch_size: int = 50

    async def dispatch_due(self) -> int:
        """Deliver due alerts and return how many were sent."""
        if self.telegram_client is None or self.chat_id is None:
            _logger.info("Reminder delivery is not configured, skipping")
            return 0
        now = self.clock()
        sent = 0
        for notification in self.outbox.list_due(now, self.batch_size):
            try:
                await self.telegram_client.send_message(
                    chat_id=self.chat_id,
                    text=f"{notification.title}\n{notification.body}",
                )
            except Exception:
                _logger.exception(
                    "Failed to deliver notification %s", notification.handle
                )
                continue
            self.outbox.mark_delivered(notification.handle, now)
            sent += 1
        return sent
