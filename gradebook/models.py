"""Data models for the gradebook notifier."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Band(str, Enum):
    """Grade bands, highest first."""
    A_PLUS = "APlus"
    B_PLUS = "BPlus"
    C_PLUS = "CPlus"
    OTHER = "Other"


# Bands a teacher can set a cut-off for, in evaluation order.
THRESHOLD_BANDS = (Band.A_PLUS, Band.B_PLUS, Band.C_PLUS)


class Thresholds(BaseModel):
    """The three configurable grade cut-offs, as percentages."""
    model_config = ConfigDict(populate_by_name=True)

    a_plus: float = Field(90.0, alias="APlus")
    b_plus: float = Field(80.0, alias="BPlus")
    c_plus: float = Field(70.0, alias="CPlus")


class Student(BaseModel):
    """A student record as held in the roster."""
    id: str
    name: str
    grade: float

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> str:
        return str(value)

    @field_validator("name")
    @classmethod
    def _require_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be empty")
        return value


class NotificationIntent(BaseModel):
    """A notification waiting to be delivered.

    ``fire_at`` of ``None`` means deliver immediately.
    """
    title: str
    body: str
    tag: str
    sound: str = "default"
    fire_at: Optional[datetime] = None
    data: Dict[str, str] = Field(default_factory=dict)

    @property
    def immediate(self) -> bool:
        return self.fire_at is None

    def to_payload(self) -> Dict[str, Any]:
        """Notifier payload; ``fireAt`` is an ISO timestamp or None."""
        return {
            "title": self.title,
            "body": self.body,
            "tag": self.tag,
            "sound": self.sound,
            "fireAt": self.fire_at.isoformat() if self.fire_at else None,
        }


class GradeEvent(BaseModel):
    """Outcome of adding a student or changing a grade."""
    student: Student
    band: Band
    grade_intent: NotificationIntent
    class_average: Optional[float] = None
    average_intent: Optional[NotificationIntent] = None
    delivered: int = 0


# === API request / response models ===

class ThresholdUpdateRequest(BaseModel):
    """Free-text threshold value as typed by the teacher."""
    value: Union[float, str]


class StudentCreateRequest(BaseModel):
    """Request for adding a student."""
    name: str
    grade: Union[float, str]


class GradeUpdateRequest(BaseModel):
    """Request for changing a student's grade."""
    grade: Union[float, str]


class ReminderRequest(BaseModel):
    """Request for a deadline reminder, due date as MM/DD/YYYY."""
    due_date: str


class RosterResponse(BaseModel):
    """Current roster with class average and band counts."""
    students: List[Student]
    class_average: Optional[float]
    summary: Dict[str, int]
