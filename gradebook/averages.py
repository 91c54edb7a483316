"""Class average tracking and significant-change detection."""

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Sequence

from gradebook.errors import EmptyRoster
from gradebook.models import NotificationIntent
from gradebook.notification_templates import AVERAGE_TAG, average_change_copy

# Percentage points between two successive averages that count as significant.
SIGNIFICANT_CHANGE_POINTS = 5.0


def one_decimal(value: float) -> str:
    """Round half-up to one decimal place, so 5.25 reads as 5.3."""
    return str(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def class_average(grades: Sequence[float]) -> float:
    """Arithmetic mean of the grades; EmptyRoster when there are none."""
    if not grades:
        raise EmptyRoster("Class average is undefined for an empty roster")
    return sum(grades) / len(grades)


class AverageTracker:
    """
    Keeps the last two class averages so a delta can be formed.

    The average is always recomputed from every grade in the roster.
    After ``reset`` the next successful ``recompute`` only seeds the baseline.
    """

    def __init__(self):
        self._previous: Optional[float] = None
        self._current: Optional[float] = None

    @property
    def previous(self) -> Optional[float]:
        return self._previous

    @property
    def current(self) -> Optional[float]:
        return self._current

    @property
    def seeded(self) -> bool:
        return self._current is not None

    def reset(self) -> None:
        self._previous = None
        self._current = None

    def recompute(self, grades: Sequence[float]) -> float:
        average = class_average(grades)
        self._previous = self._current
        self._current = average
        return average


def check(old_average: float, new_average: float, sound: str = "default") -> Optional[NotificationIntent]:
    """
    Decide whether a shift in class average deserves a notification.

    Args:
        old_average: Average before the change
        new_average: Average after the change
        sound: Sound reference for the notification

    Returns:
        An immediate intent when the shift is at least SIGNIFICANT_CHANGE_POINTS,
        otherwise None
    """
    change = abs(new_average - old_average)
    significant = change >= SIGNIFICANT_CHANGE_POINTS or math.isclose(
        change, SIGNIFICANT_CHANGE_POINTS
    )
    if not significant:
        return None

    delta = one_decimal(change)
    copy = average_change_copy(old_average, new_average, delta)
    return NotificationIntent(
        title=copy['title'],
        body=copy['body'],
        tag=AVERAGE_TAG,
        sound=sound,
        data={
            'delta': delta,
            'previous_average': one_decimal(old_average),
            'class_average': one_decimal(new_average),
        },
    )
