from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from advisory_monitor.analytics.scope import OWNER_SCOPE_ME, resolve_owner_ids, writable_owner_ids
from advisory_monitor.core.errors import BadRequestError, ForbiddenError, NotFoundError
from advisory_monitor.models.advisors import AdvisorRecord
from advisory_monitor.repositories.activity_repository import ActivityRepository
from advisory_monitor.repositories.advisors_repository import AdvisorsRepository
from advisory_monitor.schemas.leads import DEFAULT_LEAD_SOURCE, LeadRequest, LeadSummary
from advisory_monitor.services.calendar_service import lead_label, parse_timestamp
from advisory_monitor.shared.response import Pagination, build_pagination

logger = logging.getLogger(__name__)


def validate_lead(request: LeadRequest) -> Optional[str]:
    """Return the first reason the lead cannot be saved, or None when it is complete."""
    if request.is_agency_client is None:
        return "Specify whether the lead is already an agency client"
    if not request.email and not request.phone:
        return "Provide at least an email or a phone number"
    has_person = bool(request.first_name and request.last_name)
    if not has_person and not request.company_name:
        return "Provide first and last name or a company name"
    return None


class LeadsService:
    def __init__(self, activity_repository: ActivityRepository, advisors_repository: AdvisorsRepository) -> None:
        self.activity_repository = activity_repository
        self.advisors_repository = advisors_repository

    def list_leads(
        self,
        current: AdvisorRecord,
        scope: str = OWNER_SCOPE_ME,
        page: int = 1,
        page_size: int = 50,
    ) -> Tuple[List[LeadSummary], Pagination]:
        owner_ids = resolve_owner_ids(current, scope, self._directory(current))
        rows, total = self.activity_repository.list_lead_details(
            owner_ids, limit=page_size, offset=(page - 1) * page_size
        )
        return [self._to_summary(row) for row in rows], build_pagination(page, page_size, total)

    def create_lead(self, current: AdvisorRecord, request: LeadRequest) -> LeadSummary:
        self._validate(request)
        if not current.user_id:
            raise BadRequestError("Advisor profile is not linked to a user account")
        row = self.activity_repository.insert_lead({**request.to_row(), "owner_id": current.user_id})
        logger.info("Lead created by %s", current.user_id)
        return self._to_summary(row)

    def update_lead(self, current: AdvisorRecord, lead_id: str, request: LeadRequest) -> LeadSummary:
        self._validate(request)
        existing = self.activity_repository.get_lead(lead_id)
        if existing is None:
            raise NotFoundError(f"Lead {lead_id} not found")
        if existing.get("owner_id") not in writable_owner_ids(current, self._directory(current)):
            raise ForbiddenError("Lead belongs to an advisor outside your scope")
        row = self.activity_repository.update_lead(lead_id, request.to_row())
        if row is None:
            raise NotFoundError(f"Lead {lead_id} not found")
        logger.info("Lead %s updated by %s", lead_id, current.user_id)
        return self._to_summary(row)

    def _directory(self, current: AdvisorRecord) -> List[AdvisorRecord]:
        return self.advisors_repository.list_advisors() if current.can_manage_team else [current]

    @staticmethod
    def _validate(request: LeadRequest) -> None:
        reason = validate_lead(request)
        if reason:
            raise BadRequestError(reason)

    @staticmethod
    def _to_summary(row: Dict[str, Any]) -> LeadSummary:
        created_at = row.get("created_at")
        return LeadSummary(
            id=str(row.get("id") or ""),
            owner_id=str(row.get("owner_id") or ""),
            label=lead_label(row),
            is_agency_client=row.get("is_agency_client"),
            first_name=row.get("first_name"),
            last_name=row.get("last_name"),
            company_name=row.get("company_name"),
            email=row.get("email"),
            phone=row.get("phone"),
            city=row.get("city"),
            address=row.get("address"),
            source=row.get("source") or DEFAULT_LEAD_SOURCE,
            created_at=parse_timestamp(str(created_at)) if created_at else None,
        )
