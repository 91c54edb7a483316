"""Notifier contract, a logging notifier and the best-effort dispatcher."""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Protocol, Sequence

from gradebook.errors import NotifierFailure
from gradebook.models import NotificationIntent

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Local notification service. ``fireAt`` of None means deliver now."""

    async def schedule_notification(self, payload: Dict[str, Any]) -> None:
        ...


class LogNotifier:
    """Notifier that logs each payload and keeps it for inspection."""

    def __init__(self):
        self.delivered: List[Dict[str, Any]] = []

    async def schedule_notification(self, payload: Dict[str, Any]) -> None:
        when = payload.get('fireAt') or "now"
        logger.info("Notification [%s] %s at %s: %s",
                    payload.get('tag'), payload.get('title'), when, payload.get('body'))
        self.delivered.append(payload)


class NotificationDispatcher:
    """
    Sends intents to a notifier.

    Delivery is best-effort: each intent is sent independently and a
    failure is logged without affecting the others.
    """

    def __init__(self, notifier: Notifier):
        self._notifier = notifier

    async def _send(self, intent: NotificationIntent) -> bool:
        try:
            await self._notifier.schedule_notification(intent.to_payload())
        except NotifierFailure as e:
            logger.warning("Notification '%s' was not scheduled: %s", intent.title, e)
            return False
        except Exception as e:
            logger.warning("Notifier error for '%s': %s", intent.title, e, exc_info=True)
            return False
        return True

    async def dispatch(self, intents: Sequence[Optional[NotificationIntent]]) -> int:
        """Send every non-None intent concurrently; returns how many were delivered."""
        pending = [intent for intent in intents if intent is not None]
        if not pending:
            return 0
        results = await asyncio.gather(*(self._send(intent) for intent in pending))
        return sum(1 for ok in results if ok)
