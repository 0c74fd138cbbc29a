from __future__ import annotations

from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header

from advisory_monitor.core.errors import UnauthorizedError
from advisory_monitor.core.supabase import SupabaseAuthClient
from advisory_monitor.models.advisors import AdvisorRecord
from advisory_monitor.repositories.activity_repository import ActivityRepository
from advisory_monitor.repositories.advisors_repository import AdvisorsRepository
from advisory_monitor.repositories.goals_repository import GoalsRepository
from advisory_monitor.repositories.progress_repository import ProgressRepository
from advisory_monitor.services.advisors_service import AdvisorsService
from advisory_monitor.services.calendar_service import CalendarService
from advisory_monitor.services.dashboard_service import DashboardService
from advisory_monitor.services.goals_service import GoalsService
from advisory_monitor.services.leads_service import LeadsService
from advisory_monitor.services.report_service import ReportService
from advisory_monitor.shared.generation import RequestGenerationTracker


@lru_cache
def get_advisors_repository() -> AdvisorsRepository:
    return AdvisorsRepository()


@lru_cache
def get_goals_repository() -> GoalsRepository:
    return GoalsRepository()


@lru_cache
def get_progress_repository() -> ProgressRepository:
    return ProgressRepository()


@lru_cache
def get_activity_repository() -> ActivityRepository:
    return ActivityRepository()


@lru_cache
def get_auth_client() -> SupabaseAuthClient:
    return SupabaseAuthClient()


@lru_cache
def get_report_generation_tracker() -> RequestGenerationTracker:
    return RequestGenerationTracker()


def get_advisors_service() -> AdvisorsService:
    return AdvisorsService(repository=get_advisors_repository(), auth_client=get_auth_client())


def get_report_service() -> ReportService:
    return ReportService(
        goals_repository=get_goals_repository(),
        progress_repository=get_progress_repository(),
        advisors_repository=get_advisors_repository(),
        tracker=get_report_generation_tracker(),
    )


def get_goals_service() -> GoalsService:
    return GoalsService(
        goals_repository=get_goals_repository(),
        progress_repository=get_progress_repository(),
        advisors_repository=get_advisors_repository(),
    )


def get_dashboard_service() -> DashboardService:
    return DashboardService(
        activity_repository=get_activity_repository(),
        advisors_repository=get_advisors_repository(),
    )


def get_calendar_service() -> CalendarService:
    return CalendarService(
        activity_repository=get_activity_repository(),
        advisors_repository=get_advisors_repository(),
    )


def get_leads_service() -> LeadsService:
    return LeadsService(
        activity_repository=get_activity_repository(),
        advisors_repository=get_advisors_repository(),
    )


def get_access_token(authorization: Optional[str] = Header(default=None)) -> str:
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise UnauthorizedError("Missing bearer token")
    return token.strip()


def get_current_advisor(
    access_token: str = Depends(get_access_token),
    service: AdvisorsService = Depends(get_advisors_service),
) -> AdvisorRecord:
    return service.resolve_current_advisor(access_token)
