from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from advisory_monitor.api.dependencies import get_current_advisor, get_report_service
from advisory_monitor.models.advisors import AdvisorRecord
from advisory_monitor.schemas.reports import ReportFilters, ReportResponse
from advisory_monitor.services.report_service import ReportService
from advisory_monitor.shared.months import MONTH_KEY_PATTERN
from advisory_monitor.shared.response import ResponseEnvelope, build_meta

router = APIRouter(prefix="/reports", tags=["reports"])


def get_report_filters(
    from_key: str | None = Query(default=None, pattern=MONTH_KEY_PATTERN),
    to_key: str | None = Query(default=None, pattern=MONTH_KEY_PATTERN),
    advisor_user_id: str | None = Query(default=None, min_length=1),
    team: bool = Query(default=False),
    view_id: str | None = Query(default=None, max_length=120),
) -> ReportFilters:
    return ReportFilters(
        from_key=from_key,
        to_key=to_key,
        advisor_user_id=advisor_user_id,
        team=team,
        view_id=view_id,
    )


@router.get("/goals-vs-actual")
def goals_vs_actual(
    filters: ReportFilters = Depends(get_report_filters),
    current: AdvisorRecord = Depends(get_current_advisor),
    service: ReportService = Depends(get_report_service),
) -> ResponseEnvelope[ReportResponse]:
    data, generation = service.get_goals_vs_actual(current, filters)
    meta = build_meta(
        source=f"{data.goals_source or 'goals'},v_progress_monthly",
        time_window=f"{data.from_key}..{data.to_key}",
        currency="EUR",
        generation=generation,
    )
    return ResponseEnvelope(data=data, meta=meta)
