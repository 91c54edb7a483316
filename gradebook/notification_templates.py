"""Notification copy for grade bands, the class average and reminders."""

from datetime import date
from typing import Dict, Tuple

from gradebook.models import Band

GRADES_TAG = "grades"
AVERAGE_TAG = "average"
REMINDERS_TAG = "reminders"

# band -> (title, body template); body is formatted with grade=<text>
GRADE_COPY: Dict[Band, Tuple[str, str]] = {
    Band.A_PLUS: (
        "Outstanding",
        "A grade of {grade}% reaches the A+ threshold. Outstanding work!",
    ),
    Band.B_PLUS: (
        "Good, keep it up",
        "A grade of {grade}% reaches the B+ threshold. Good, keep it up!",
    ),
    Band.C_PLUS: (
        "Well tried",
        "A grade of {grade}% reaches the C+ threshold. Well tried!",
    ),
    Band.OTHER: (
        "Grade updated",
        "Grade updated to {grade}%",
    ),
}


def average_change_copy(old_average: float, new_average: float, delta: str) -> Dict[str, str]:
    direction = "risen" if new_average > old_average else "dropped"
    return {
        'title': "Significant Change in Class Average",
        'body': (
            f"The class average has {direction} by {delta} points "
            f"(from {old_average:.1f}% to {new_average:.1f}%)."
        ),
    }


def reminder_copy(due: date) -> Dict[str, str]:
    return {
        'title': "Assignment Reminder",
        'body': f"Don't forget: an assignment is due on {due.strftime('%m/%d/%Y')}.",
    }
