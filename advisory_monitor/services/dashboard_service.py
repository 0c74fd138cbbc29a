from __future__ import annotations

import calendar
import logging
from typing import Dict, List, Optional

from advisory_monitor.analytics.scope import selectable_advisors
from advisory_monitor.core.config import get_settings
from advisory_monitor.core.errors import ForbiddenError
from advisory_monitor.models.advisors import AdvisorRecord
from advisory_monitor.repositories.activity_repository import ActivityRepository
from advisory_monitor.repositories.advisors_repository import AdvisorsRepository
from advisory_monitor.schemas.dashboard import FUNNEL_STAGE_LABELS, DashboardFunnel, FunnelStage
from advisory_monitor.shared.months import MonthKey, resolve_report_window

logger = logging.getLogger(__name__)


def _range_bounds(from_key: MonthKey, to_key: MonthKey) -> Dict[str, str]:
    last_day = calendar.monthrange(to_key.year, to_key.month)[1]
    start_date = from_key.first_day().isoformat()
    end_date = f"{to_key}-{last_day:02d}"
    return {
        "start": f"{start_date}T00:00:00Z",
        "end": f"{end_date}T23:59:59Z",
        "start_date": start_date,
        "end_date": end_date,
    }


class DashboardService:
    def __init__(
        self,
        activity_repository: ActivityRepository,
        advisors_repository: AdvisorsRepository,
        default_months: Optional[int] = None,
    ) -> None:
        self.activity_repository = activity_repository
        self.advisors_repository = advisors_repository
        self.default_months = default_months or get_settings().report_default_months

    def get_funnel(
        self,
        current: AdvisorRecord,
        from_key: Optional[str],
        to_key: Optional[str],
        advisor_user_id: Optional[str] = None,
    ) -> DashboardFunnel:
        start_key, end_key = resolve_report_window(from_key, to_key, self.default_months)
        owner_ids = self._owner_ids(current, advisor_user_id)
        counts = self._count(owner_ids, _range_bounds(start_key, end_key))
        return DashboardFunnel(
            from_key=str(start_key),
            to_key=str(end_key),
            advisor_user_id=advisor_user_id,
            owner_ids=owner_ids,
            stages=[
                FunnelStage(key=key, label=label, value=counts[key])
                for key, label in FUNNEL_STAGE_LABELS.items()
            ],
            **counts,
        )

    def _owner_ids(self, current: AdvisorRecord, advisor_user_id: Optional[str]) -> List[str]:
        directory = self.advisors_repository.list_advisors() if current.can_manage_team else [current]
        selectable = [advisor.user_id for advisor in selectable_advisors(current, directory) if advisor.user_id]
        if advisor_user_id is None:
            return selectable
        if advisor_user_id not in selectable:
            raise ForbiddenError("Advisor is not in your selectable set")
        return [advisor_user_id]

    def _count(self, owner_ids: List[str], bounds: Dict[str, str]) -> Dict[str, int]:
        counts = {key: 0 for key in FUNNEL_STAGE_LABELS}
        if not owner_ids:
            return counts
        counts["leads"] = self.activity_repository.count_leads_created(owner_ids, bounds["start"], bounds["end"])

        lead_ids = [str(row["id"]) for row in self.activity_repository.list_leads(owner_ids) if row.get("id")]
        if not lead_ids:
            return counts
        counts["contacts"] = self.activity_repository.count_by_leads(
            "activities", lead_ids, bounds["start"], bounds["end"]
        )
        counts["appointments"] = self.activity_repository.count_by_leads(
            "appointments", lead_ids, bounds["start"], bounds["end"]
        )
        # Proposals and contracts carry a plain date column.
        counts["proposals"] = self.activity_repository.count_by_leads(
            "proposals", lead_ids, bounds["start_date"], bounds["end_date"]
        )
        counts["contracts"] = self.activity_repository.count_by_leads(
            "contracts", lead_ids, bounds["start_date"], bounds["end_date"]
        )
        logger.debug("Funnel for %d owners over %d leads: %s", len(owner_ids), len(lead_ids), counts)
        return counts
