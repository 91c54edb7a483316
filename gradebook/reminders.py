"""One-shot deadline reminders."""

import logging
from datetime import date, datetime, time, timedelta
from typing import Callable, Optional

from gradebook.errors import InvalidDate
from gradebook.models import NotificationIntent
from gradebook.notification_templates import REMINDERS_TAG, reminder_copy
from gradebook.parsers import parse_due_date

logger = logging.getLogger(__name__)


class ReminderScheduler:
    """
    Turns a MM/DD/YYYY deadline into a reminder the day before.

    Args:
        clock: Returns the current local time; defaults to datetime.now
        reminder_hour: Hour of day the reminder fires
        sound: Sound reference for the notification
    """

    def __init__(
        self,
        clock: Optional[Callable[[], datetime]] = None,
        reminder_hour: int = 9,
        sound: str = "default",
    ):
        self._clock = clock or datetime.now
        self._reminder_time = time(hour=reminder_hour)
        self._sound = sound

    def fire_time(self, due: date) -> datetime:
        """The day before the deadline at the reminder hour, local time."""
        try:
            day_before = due - timedelta(days=1)
        except OverflowError:
            raise InvalidDate(f"Due date {due.month:02d}/{due.day:02d}/{due.year:04d} has no day before it")
        return datetime.combine(day_before, self._reminder_time)

    def schedule(self, due_date_text: str) -> NotificationIntent:
        """
        Build the reminder intent for a deadline.

        A fire time that is not strictly in the future falls back to an
        immediate notification so the reminder is never dropped.

        Raises:
            InvalidDate: If the text is not a real MM/DD/YYYY date
        """
        due = parse_due_date(due_date_text)
        fire_at = self.fire_time(due)
        now = self._clock()

        if fire_at <= now:
            logger.info("Reminder time %s already passed; firing now", fire_at.isoformat())
            fire_at = None

        copy = reminder_copy(due)
        return NotificationIntent(
            title=copy['title'],
            body=copy['body'],
            tag=REMINDERS_TAG,
            sound=self._sound,
            fire_at=fire_at,
            data={'due_date': due.strftime("%m/%d/%Y")},
        )
