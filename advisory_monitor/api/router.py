from __future__ import annotations

from fastapi import APIRouter

from advisory_monitor.api.advisors import router as advisors_router
from advisory_monitor.api.calendar import router as calendar_router
from advisory_monitor.api.dashboard import router as dashboard_router
from advisory_monitor.api.goals import router as goals_router
from advisory_monitor.api.health import router as health_router
from advisory_monitor.api.leads import router as leads_router
from advisory_monitor.api.reports import router as reports_router


api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(advisors_router)
api_router.include_router(reports_router)
api_router.include_router(goals_router)
api_router.include_router(dashboard_router)
api_router.include_router(calendar_router)
api_router.include_router(leads_router)
