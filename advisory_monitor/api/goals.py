from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from advisory_monitor.api.dependencies import get_current_advisor, get_goals_service
from advisory_monitor.models.advisors import AdvisorRecord
from advisory_monitor.schemas.goals import GoalSheet, GoalSheetUpdateRequest
from advisory_monitor.services.goals_service import GoalsService
from advisory_monitor.shared.months import MONTH_KEY_PATTERN
from advisory_monitor.shared.response import ResponseEnvelope, build_meta

router = APIRouter(prefix="/goals", tags=["goals"])


@router.get("/sheet")
def goal_sheet(
    advisor_user_id: str = Query(min_length=1),
    month_key: str = Query(pattern=MONTH_KEY_PATTERN),
    current: AdvisorRecord = Depends(get_current_advisor),
    service: GoalsService = Depends(get_goals_service),
) -> ResponseEnvelope[GoalSheet]:
    data = service.get_goal_sheet(current, advisor_user_id, month_key)
    return ResponseEnvelope(
        data=data,
        meta=build_meta(source="goals,goals_monthly,v_progress_monthly", time_window=str(data.year)),
    )


@router.put("/sheet")
def save_goal_sheet(
    payload: GoalSheetUpdateRequest,
    current: AdvisorRecord = Depends(get_current_advisor),
    service: GoalsService = Depends(get_goals_service),
) -> ResponseEnvelope[GoalSheet]:
    data = service.save_goal_sheet(current, payload)
    return ResponseEnvelope(
        data=data,
        meta=build_meta(source="goals,goals_monthly,v_progress_monthly", time_window=str(data.year)),
    )
