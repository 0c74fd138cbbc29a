from __future__ import annotations

from typing import List, Optional

from advisory_monitor.shared.base import BaseSchema

FUNNEL_STAGE_LABELS = {
    "leads": "Leads",
    "contacts": "Contatti",
    "appointments": "Appuntamenti",
    "proposals": "Proposte",
    "contracts": "Contratti",
}


class FunnelStage(BaseSchema):
    key: str
    label: str
    value: int


class DashboardFunnel(BaseSchema):
    from_key: str
    to_key: str
    advisor_user_id: Optional[str] = None
    owner_ids: List[str]
    leads: int = 0
    contacts: int = 0
    appointments: int = 0
    proposals: int = 0
    contracts: int = 0
    stages: List[FunnelStage]
