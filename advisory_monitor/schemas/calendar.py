from __future__ import annotations

from datetime import date, datetime
from typing import Any, List, Optional

from pydantic import Field, field_validator

from advisory_monitor.shared.base import BaseRequestSchema, BaseSchema

APPOINTMENT_MODE_PATTERN = "^(inperson|video|phone)$"
APPOINTMENT_MODE_LABELS = {
    "inperson": "In presenza",
    "video": "Video",
    "phone": "Telefono",
}


class CalendarAppointment(BaseSchema):
    id: str
    lead_id: str
    lead_label: str
    starts_at: datetime
    mode: str
    mode_label: str
    notes: Optional[str] = None


class CalendarDay(BaseSchema):
    day: date
    in_month: bool = True
    is_today: bool = False
    appointments: List[CalendarAppointment]


class CalendarMonth(BaseSchema):
    month_key: str
    scope: str
    timezone: str
    days: List[CalendarDay]


class CalendarWeek(BaseSchema):
    anchor_date: date
    week_start: date
    scope: str
    timezone: str
    days: List[CalendarDay]


class AppointmentRequest(BaseRequestSchema):
    lead_id: str = Field(min_length=1)
    # Naive values are wall-clock times in the calendar timezone.
    starts_at: datetime
    mode: str = Field(default="inperson", pattern=APPOINTMENT_MODE_PATTERN)
    notes: Optional[str] = None

    @field_validator("notes", mode="before")
    @classmethod
    def _blank_notes(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip() or None
        return value


class AppointmentDeletion(BaseSchema):
    id: str
    deleted: bool
