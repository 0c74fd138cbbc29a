from __future__ import annotations

import os
from typing import Iterator

os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-service-role-key")

import pytest
from fastapi.testclient import TestClient

from advisory_monitor.api.dependencies import (
    get_advisors_service,
    get_calendar_service,
    get_current_advisor,
    get_dashboard_service,
    get_goals_service,
    get_leads_service,
    get_report_service,
)
from advisory_monitor.main import create_app
from advisory_monitor.services.advisors_service import AdvisorsService
from advisory_monitor.services.calendar_service import CalendarService
from advisory_monitor.services.dashboard_service import DashboardService
from advisory_monitor.services.goals_service import GoalsService
from advisory_monitor.services.leads_service import LeadsService
from stubs import (
    LEAD,
    StubActivityRepository,
    StubAdvisorsRepository,
    StubGoalsRepository,
    StubProgressRepository,
    build_report_service,
    goals_row,
    progress_row,
)


@pytest.fixture()
def goals_repository() -> StubGoalsRepository:
    return StubGoalsRepository(
        table_rows=[
            goals_row("u-lead", 2025, 1, consulenze=5, prod_danni=1000),
            goals_row("u-lead", 2025, 2, consulenze=5, prod_danni=1000),
            goals_row("u-lead", 2025, 3, consulenze=5, prod_danni=1000),
        ]
    )


@pytest.fixture()
def progress_repository() -> StubProgressRepository:
    return StubProgressRepository(
        rows=[
            progress_row("u-lead", 2025, 1, consulenze=3, prod_danni=400),
            progress_row("u-lead", 2025, 3, consulenze=4, prod_danni=800),
        ]
    )


@pytest.fixture()
def activity_repository() -> StubActivityRepository:
    return StubActivityRepository(
        leads=[
            {"id": "lead-1", "owner_id": "u-lead", "first_name": "Mario", "last_name": "Rossi"},
            {"id": "lead-2", "owner_id": "u-j1", "first_name": "", "last_name": "", "company_name": "Acme Srl"},
        ],
        appointments=[
            {"id": "app-1", "lead_id": "lead-1", "ts": "2025-02-03T09:30:00Z", "mode": "video", "notes": None},
        ],
        counts={"leads": 4, "activities": 9, "appointments": 3, "proposals": 2, "contracts": 1},
    )


@pytest.fixture()
def client(goals_repository, progress_repository, activity_repository) -> Iterator[TestClient]:
    advisors_repository = StubAdvisorsRepository()
    app = create_app()
    app.dependency_overrides[get_current_advisor] = lambda: LEAD
    app.dependency_overrides[get_advisors_service] = lambda: AdvisorsService(repository=advisors_repository)
    app.dependency_overrides[get_report_service] = lambda: build_report_service(
        goals_repository, progress_repository, advisors_repository
    )
    app.dependency_overrides[get_goals_service] = lambda: GoalsService(
        goals_repository=goals_repository,
        progress_repository=progress_repository,
        advisors_repository=advisors_repository,
    )
    app.dependency_overrides[get_dashboard_service] = lambda: DashboardService(
        activity_repository=activity_repository,
        advisors_repository=advisors_repository,
        default_months=6,
    )
    app.dependency_overrides[get_calendar_service] = lambda: CalendarService(
        activity_repository=activity_repository,
        advisors_repository=advisors_repository,
        timezone_name="Europe/Rome",
    )
    app.dependency_overrides[get_leads_service] = lambda: LeadsService(
        activity_repository=activity_repository,
        advisors_repository=advisors_repository,
    )
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
