from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Query

from advisory_monitor.api.dependencies import get_advisors_service, get_current_advisor
from advisory_monitor.models.advisors import AdvisorRecord
from advisory_monitor.schemas.advisors import AdvisorSummary
from advisory_monitor.services.advisors_service import AdvisorsService
from advisory_monitor.shared.response import ResponseEnvelope, build_meta, paginate_list

router = APIRouter(prefix="/advisors", tags=["advisors"])


@router.get("/me")
def current_advisor_profile(
    current: AdvisorRecord = Depends(get_current_advisor),
) -> ResponseEnvelope[AdvisorSummary]:
    return ResponseEnvelope(
        data=AdvisorSummary.from_record(current),
        meta=build_meta(source="advisors", time_window="now"),
    )


@router.get("")
def selectable_advisors(
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=200, ge=1, le=2000),
    current: AdvisorRecord = Depends(get_current_advisor),
    service: AdvisorsService = Depends(get_advisors_service),
) -> ResponseEnvelope[List[AdvisorSummary]]:
    data = service.list_selectable(current)
    paged_data, pagination = paginate_list(data, page, page_size)
    return ResponseEnvelope(
        data=paged_data,
        pagination=pagination,
        meta=build_meta(source="advisors", time_window="now"),
    )
