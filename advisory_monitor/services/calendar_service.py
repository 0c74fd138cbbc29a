from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple
from zoneinfo import ZoneInfo

from advisory_monitor.analytics.calendar_grid import build_month_grid, build_week_grid
from advisory_monitor.analytics.scope import OWNER_SCOPE_ME, resolve_owner_ids, writable_owner_ids
from advisory_monitor.core.config import get_settings
from advisory_monitor.core.errors import ForbiddenError, NotFoundError
from advisory_monitor.models.advisors import AdvisorRecord
from advisory_monitor.repositories.activity_repository import ActivityRepository
from advisory_monitor.repositories.advisors_repository import AdvisorsRepository
from advisory_monitor.schemas.calendar import (
    APPOINTMENT_MODE_LABELS,
    AppointmentRequest,
    CalendarAppointment,
    CalendarDay,
    CalendarMonth,
    CalendarWeek,
)
from advisory_monitor.shared.months import MonthKey

logger = logging.getLogger(__name__)


def lead_label(lead: Optional[Dict[str, Any]]) -> str:
    if not lead:
        return "(lead)"
    name = " ".join(
        part.strip() for part in (lead.get("first_name") or "", lead.get("last_name") or "") if part and part.strip()
    )
    return name or (lead.get("company_name") or "").strip() or "(lead)"


def parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def to_utc_iso(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


class CalendarService:
    def __init__(
        self,
        activity_repository: ActivityRepository,
        advisors_repository: AdvisorsRepository,
        timezone_name: Optional[str] = None,
    ) -> None:
        self.activity_repository = activity_repository
        self.advisors_repository = advisors_repository
        self.timezone_name = timezone_name or get_settings().calendar_timezone
        self.zone = ZoneInfo(self.timezone_name)

    def get_month(
        self,
        current: AdvisorRecord,
        month_key: str,
        scope: str = OWNER_SCOPE_ME,
        today: Optional[date] = None,
    ) -> CalendarMonth:
        key = MonthKey.parse(month_key)
        cells = build_month_grid(key.year, key.month)
        buckets = self._appointments_by_day(current, scope, cells[0][0], cells[-1][0])
        today = today or datetime.now(self.zone).date()
        return CalendarMonth(
            month_key=str(key),
            scope=scope,
            timezone=self.timezone_name,
            days=[
                CalendarDay(day=day, in_month=in_month, is_today=day == today, appointments=buckets.get(day, []))
                for day, in_month in cells
            ],
        )

    def get_week(
        self,
        current: AdvisorRecord,
        anchor_date: date,
        scope: str = OWNER_SCOPE_ME,
        today: Optional[date] = None,
    ) -> CalendarWeek:
        days = build_week_grid(anchor_date)
        buckets = self._appointments_by_day(current, scope, days[0], days[-1])
        today = today or datetime.now(self.zone).date()
        return CalendarWeek(
            anchor_date=anchor_date,
            week_start=days[0],
            scope=scope,
            timezone=self.timezone_name,
            days=[
                CalendarDay(day=day, is_today=day == today, appointments=buckets.get(day, []))
                for day in days
            ],
        )

    def _directory(self, current: AdvisorRecord) -> List[AdvisorRecord]:
        return self.advisors_repository.list_advisors() if current.can_manage_team else [current]

    def _appointments_by_day(
        self, current: AdvisorRecord, scope: str, first_day: date, last_day: date
    ) -> Dict[date, List[CalendarAppointment]]:
        directory = self._directory(current)
        owner_ids = resolve_owner_ids(current, scope, directory)
        leads = {str(row["id"]): row for row in self.activity_repository.list_leads(owner_ids) if row.get("id")}
        if not leads:
            return {}

        start, end = self._utc_bounds(first_day, last_day)
        rows = self.activity_repository.list_appointments(list(leads), start, end)
        buckets: Dict[date, List[CalendarAppointment]] = {}
        for row in rows:
            appointment = self._to_appointment(row, leads)
            if appointment is None:
                continue
            local_day = appointment.starts_at.astimezone(self.zone).date()
            buckets.setdefault(local_day, []).append(appointment)
        return buckets

    def create_appointment(self, current: AdvisorRecord, request: AppointmentRequest) -> CalendarAppointment:
        lead = self._writable_lead(current, request.lead_id)
        row = self.activity_repository.insert_appointment(self._appointment_payload(request))
        logger.info("Appointment created for lead %s by %s", request.lead_id, current.user_id)
        return self._saved_appointment(row, lead)

    def update_appointment(
        self, current: AdvisorRecord, appointment_id: str, request: AppointmentRequest
    ) -> CalendarAppointment:
        existing = self._existing_appointment(appointment_id)
        self._writable_lead(current, str(existing.get("lead_id") or ""))
        lead = self._writable_lead(current, request.lead_id)
        row = self.activity_repository.update_appointment(appointment_id, self._appointment_payload(request))
        if row is None:
            raise NotFoundError(f"Appointment {appointment_id} not found")
        logger.info("Appointment %s updated by %s", appointment_id, current.user_id)
        return self._saved_appointment(row, lead)

    def delete_appointment(self, current: AdvisorRecord, appointment_id: str) -> None:
        existing = self._existing_appointment(appointment_id)
        self._writable_lead(current, str(existing.get("lead_id") or ""))
        if not self.activity_repository.delete_appointment(appointment_id):
            raise NotFoundError(f"Appointment {appointment_id} not found")
        logger.info("Appointment %s deleted by %s", appointment_id, current.user_id)

    def _existing_appointment(self, appointment_id: str) -> Dict[str, Any]:
        existing = self.activity_repository.get_appointment(appointment_id)
        if existing is None:
            raise NotFoundError(f"Appointment {appointment_id} not found")
        return existing

    def _writable_lead(self, current: AdvisorRecord, lead_id: str) -> Dict[str, Any]:
        lead = self.activity_repository.get_lead(lead_id) if lead_id else None
        if lead is None:
            raise NotFoundError(f"Lead {lead_id} not found")
        if lead.get("owner_id") not in writable_owner_ids(current, self._directory(current)):
            raise ForbiddenError("Lead belongs to an advisor outside your scope")
        return lead

    def _appointment_payload(self, request: AppointmentRequest) -> Dict[str, Any]:
        starts_at = request.starts_at
        if starts_at.tzinfo is None:
            starts_at = starts_at.replace(tzinfo=self.zone)
        return {
            "lead_id": request.lead_id,
            "ts": to_utc_iso(starts_at),
            "mode": request.mode,
            "notes": request.notes,
        }

    def _saved_appointment(self, row: Dict[str, Any], lead: Dict[str, Any]) -> CalendarAppointment:
        appointment = self._to_appointment(row, {str(lead.get("id")): lead})
        if appointment is None:
            raise NotFoundError("Saved appointment has no timestamp")
        return appointment

    def _utc_bounds(self, first_day: date, last_day: date) -> Tuple[str, str]:
        start = datetime.combine(first_day, time.min, tzinfo=self.zone)
        end = datetime.combine(last_day + timedelta(days=1), time.min, tzinfo=self.zone)
        return to_utc_iso(start), to_utc_iso(end)

    @staticmethod
    def _to_appointment(row: Dict[str, Any], leads: Dict[str, Dict[str, Any]]) -> Optional[CalendarAppointment]:
        raw_ts = row.get("ts")
        if not raw_ts:
            logger.warning("Skipping appointment %s without timestamp", row.get("id"))
            return None
        lead_id = str(row.get("lead_id") or "")
        mode = str(row.get("mode") or "inperson")
        return CalendarAppointment(
            id=str(row.get("id")),
            lead_id=lead_id,
            lead_label=lead_label(leads.get(lead_id)),
            starts_at=parse_timestamp(str(raw_ts)),
            mode=mode,
            mode_label=APPOINTMENT_MODE_LABELS.get(mode, mode),
            notes=row.get("notes"),
        )
