from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from advisory_monitor.api.dependencies import get_current_advisor, get_dashboard_service
from advisory_monitor.models.advisors import AdvisorRecord
from advisory_monitor.schemas.dashboard import DashboardFunnel
from advisory_monitor.services.dashboard_service import DashboardService
from advisory_monitor.shared.months import MONTH_KEY_PATTERN
from advisory_monitor.shared.response import ResponseEnvelope, build_meta

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/funnel")
def dashboard_funnel(
    from_key: str | None = Query(default=None, pattern=MONTH_KEY_PATTERN),
    to_key: str | None = Query(default=None, pattern=MONTH_KEY_PATTERN),
    advisor_user_id: str | None = Query(default=None, min_length=1),
    current: AdvisorRecord = Depends(get_current_advisor),
    service: DashboardService = Depends(get_dashboard_service),
) -> ResponseEnvelope[DashboardFunnel]:
    data = service.get_funnel(current, from_key, to_key, advisor_user_id)
    meta = build_meta(
        source="leads,activities,appointments,proposals,contracts",
        time_window=f"{data.from_key}..{data.to_key}",
    )
    return ResponseEnvelope(data=data, meta=meta)
