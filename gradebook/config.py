"""Environment configuration for the gradebook notifier."""

import os
from typing import List

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from gradebook.models import Thresholds
from gradebook.thresholds import resolve_band
from gradebook.parsers import parse_number

DEFAULT_THRESHOLDS = "APlus:90,BPlus:80,CPlus:70"


class Settings(BaseModel):
    """Process-wide settings read from the environment."""
    thresholds: Thresholds = Field(default_factory=Thresholds)
    notification_sound: str = "default"
    reminder_hour: int = 9
    allow_origins: List[str] = Field(default_factory=lambda: ["*"])
    log_level: str = "INFO"
    debug: bool = False


def parse_thresholds(text: str) -> Thresholds:
    """
    Parse 'APlus:90,BPlus:80,CPlus:70' style threshold settings.

    Bands left out keep their defaults.

    Raises:
        InvalidBand: For an unknown band name
        InvalidNumber: For a non-numeric cut-off
        ValueError: For an item without a ':' separator
    """
    values = {}
    for item in text.split(','):
        if not item.strip():
            continue
        if ':' not in item:
            raise ValueError(f"Threshold setting '{item}' must look like Band:value")
        key, value = item.split(':', 1)
        band = resolve_band(key.strip())
        values[band.value] = parse_number(value, field=f"{band.value} threshold")
    return Thresholds(**values)


def load_settings() -> Settings:
    """Load .env (if present) and build Settings from the environment."""
    load_dotenv()

    reminder_hour = int(os.getenv('REMINDER_HOUR', '9'))
    if not 0 <= reminder_hour <= 23:
        raise ValueError(f"REMINDER_HOUR must be between 0 and 23, got {reminder_hour}")

    return Settings(
        thresholds=parse_thresholds(os.getenv('GRADE_THRESHOLDS', DEFAULT_THRESHOLDS)),
        notification_sound=os.getenv('NOTIFICATION_SOUND', 'default'),
        reminder_hour=reminder_hour,
        allow_origins=[o.strip() for o in os.getenv('ALLOW_ORIGINS', '*').split(',')],
        log_level=os.getenv('LOG_LEVEL', 'INFO').upper(),
        debug=os.getenv('DEBUG', 'False').lower() == 'true',
    )
