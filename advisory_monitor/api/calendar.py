from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query

from advisory_monitor.analytics.scope import OWNER_SCOPE_PATTERN
from advisory_monitor.api.dependencies import get_calendar_service, get_current_advisor
from advisory_monitor.models.advisors import AdvisorRecord
from advisory_monitor.schemas.calendar import (
    AppointmentDeletion,
    AppointmentRequest,
    CalendarAppointment,
    CalendarMonth,
    CalendarWeek,
)
from advisory_monitor.services.calendar_service import CalendarService
from advisory_monitor.shared.months import MONTH_KEY_PATTERN
from advisory_monitor.shared.response import ResponseEnvelope, build_meta

router = APIRouter(prefix="/calendar", tags=["calendar"])


@router.get("/month")
def calendar_month(
    month_key: str = Query(pattern=MONTH_KEY_PATTERN),
    scope: str = Query(default="me", pattern=OWNER_SCOPE_PATTERN),
    current: AdvisorRecord = Depends(get_current_advisor),
    service: CalendarService = Depends(get_calendar_service),
) -> ResponseEnvelope[CalendarMonth]:
    data = service.get_month(current, month_key, scope)
    return ResponseEnvelope(data=data, meta=build_meta(source="appointments,leads", time_window=data.month_key))


@router.get("/week")
def calendar_week(
    anchor_date: date = Query(...),
    scope: str = Query(default="me", pattern=OWNER_SCOPE_PATTERN),
    current: AdvisorRecord = Depends(get_current_advisor),
    service: CalendarService = Depends(get_calendar_service),
) -> ResponseEnvelope[CalendarWeek]:
    data = service.get_week(current, anchor_date, scope)
    return ResponseEnvelope(
        data=data,
        meta=build_meta(source="appointments,leads", time_window=f"week:{data.week_start.isoformat()}"),
    )


@router.post("/appointments")
def create_appointment(
    payload: AppointmentRequest,
    current: AdvisorRecord = Depends(get_current_advisor),
    service: CalendarService = Depends(get_calendar_service),
) -> ResponseEnvelope[CalendarAppointment]:
    data = service.create_appointment(current, payload)
    return ResponseEnvelope(data=data, meta=build_meta(source="appointments", time_window="point_in_time"))


@router.put("/appointments/{appointment_id}")
def update_appointment(
    appointment_id: str,
    payload: AppointmentRequest,
    current: AdvisorRecord = Depends(get_current_advisor),
    service: CalendarService = Depends(get_calendar_service),
) -> ResponseEnvelope[CalendarAppointment]:
    data = service.update_appointment(current, appointment_id, payload)
    return ResponseEnvelope(data=data, meta=build_meta(source="appointments", time_window="point_in_time"))


@router.delete("/appointments/{appointment_id}")
def delete_appointment(
    appointment_id: str,
    current: AdvisorRecord = Depends(get_current_advisor),
    service: CalendarService = Depends(get_calendar_service),
) -> ResponseEnvelope[AppointmentDeletion]:
    service.delete_appointment(current, appointment_id)
    return ResponseEnvelope(
        data=AppointmentDeletion(id=appointment_id, deleted=True),
        meta=build_meta(source="appointments", time_window="point_in_time"),
    )
