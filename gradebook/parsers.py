"""Parsing of teacher-entered text: numbers and due dates."""

import math
import re
from datetime import date
from typing import Union

from gradebook.errors import InvalidDate, InvalidNumber

DUE_DATE_PATTERN = re.compile(r"^\s*(\d{1,2})/(\d{1,2})/(\d{4})\s*$")


def parse_number(value: Union[str, int, float, None], field: str = "value") -> float:
    """
    Parse free-text numeric input into a finite float.

    Args:
        value: Text as typed (surrounding whitespace allowed) or a number
        field: Name used in the error message

    Returns:
        The parsed value

    Raises:
        InvalidNumber: If the input is empty, not numeric, NaN or infinite
    """
    if value is None or isinstance(value, bool):
        raise InvalidNumber(f"{field} must be a number")

    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise InvalidNumber(f"{field} must be a number")
        try:
            number = float(text)
        except ValueError:
            raise InvalidNumber(f"{field} must be a number, got '{value}'")
    else:
        number = float(value)

    if not math.isfinite(number):
        raise InvalidNumber(f"{field} must be a finite number, got '{value}'")
    return number


def parse_due_date(text: str) -> date:
    """Parse a MM/DD/YYYY due date, rejecting impossible calendar dates."""
    match = DUE_DATE_PATTERN.match(text or "")
    if not match:
        raise InvalidDate(f"Due date must be MM/DD/YYYY, got '{text}'")

    month, day, year = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError as e:
        raise InvalidDate(f"Invalid due date '{text}': {e}")


def format_grade(grade: float) -> str:
    """Render a grade with the shortest digits that round-trip, dropping a trailing '.0'."""
    text = repr(float(grade))
    if text.endswith(".0"):
        text = text[:-2]
    return text
