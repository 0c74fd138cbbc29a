from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Query

from advisory_monitor.analytics.scope import OWNER_SCOPE_PATTERN
from advisory_monitor.api.dependencies import get_current_advisor, get_leads_service
from advisory_monitor.models.advisors import AdvisorRecord
from advisory_monitor.schemas.leads import LeadRequest, LeadSummary
from advisory_monitor.services.leads_service import LeadsService
from advisory_monitor.shared.response import ResponseEnvelope, build_meta

router = APIRouter(prefix="/leads", tags=["leads"])


@router.get("")
def list_leads(
    scope: str = Query(default="me", pattern=OWNER_SCOPE_PATTERN),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=50, ge=1, le=200),
    current: AdvisorRecord = Depends(get_current_advisor),
    service: LeadsService = Depends(get_leads_service),
) -> ResponseEnvelope[List[LeadSummary]]:
    data, pagination = service.list_leads(current, scope, page=page, page_size=page_size)
    return ResponseEnvelope(
        data=data,
        pagination=pagination,
        meta=build_meta(source="leads", time_window=f"scope:{scope}"),
    )


@router.post("")
def create_lead(
    payload: LeadRequest,
    current: AdvisorRecord = Depends(get_current_advisor),
    service: LeadsService = Depends(get_leads_service),
) -> ResponseEnvelope[LeadSummary]:
    data = service.create_lead(current, payload)
    return ResponseEnvelope(data=data, meta=build_meta(source="leads", time_window="point_in_time"))


@router.put("/{lead_id}")
def update_lead(
    lead_id: str,
    payload: LeadRequest,
    current: AdvisorRecord = Depends(get_current_advisor),
    service: LeadsService = Depends(get_leads_service),
) -> ResponseEnvelope[LeadSummary]:
    data = service.update_lead(current, lead_id, payload)
    return ResponseEnvelope(data=data, meta=build_meta(source="leads", time_window="point_in_time"))
