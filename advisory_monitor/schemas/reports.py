from __future__ import annotations

from decimal import Decimal
from typing import Annotated, Any, List, Optional

from pydantic import ConfigDict, Field, PlainSerializer, ValidationInfo, field_validator

from advisory_monitor.shared.base import BaseSchema

METRIC_FIELDS = (
    "consulenze",
    "contratti",
    "prod_danni",
    "prod_vprot",
    "prod_vpr",
    "prod_vpu",
)
COUNT_METRIC_FIELDS = frozenset({"consulenze", "contratti"})
PRODUCTION_METRIC_FIELDS = ("prod_danni", "prod_vprot", "prod_vpr", "prod_vpu")

METRIC_DISPLAY_LABELS = {
    "consulenze": "Appuntamenti",
    "contratti": "Contratti",
    "prod_danni": "Produzione Danni Non Auto",
    "prod_vprot": "Vita Protection",
    "prod_vpr": "Vita Premi Ricorrenti",
    "prod_vpu": "Vita Premi Unici",
}

# Amounts stay exact in memory and go out as JSON numbers.
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]
ZERO = Decimal("0")


class MetricVector(BaseSchema):
    """The six counters tracked per advisor per month. Absent values are zero, never null."""

    consulenze: int = 0
    contratti: int = 0
    prod_danni: Money = ZERO
    prod_vprot: Money = ZERO
    prod_vpr: Money = ZERO
    prod_vpu: Money = ZERO

    @field_validator(*METRIC_FIELDS, mode="before")
    @classmethod
    def _default_missing(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None or value == "":
            return 0
        if info.field_name in COUNT_METRIC_FIELDS and isinstance(value, (float, str)):
            # Counts come back from numeric columns as 3.0 or "3".
            return int(round(float(value)))
        if isinstance(value, float):
            return Decimal(str(value))
        return value

    def production_total(self) -> Decimal:
        return sum((getattr(self, field) for field in PRODUCTION_METRIC_FIELDS), ZERO)


class ReportFilters(BaseSchema):
    # Keep query parameter names in snake_case for API contract consistency.
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    from_key: Optional[str] = None
    to_key: Optional[str] = None
    advisor_user_id: Optional[str] = None
    team: bool = False
    view_id: Optional[str] = Field(default=None, max_length=120)


class ReportMonthRow(BaseSchema):
    year: int
    month: int
    month_key: str
    label: str
    goal: MetricVector
    actual: MetricVector


class ReportTotals(BaseSchema):
    goal: MetricVector
    actual: MetricVector


class MetricSummary(BaseSchema):
    metric: str
    display_label: str
    value_format: str
    goal_total: Money
    actual_total: Money
    percent_complete: float
    status: str


class ReportResponse(BaseSchema):
    from_key: str
    to_key: str
    scope: str
    advisor_user_id: str
    advisor_ids: List[str]
    goals_source: Optional[str] = None
    rows: List[ReportMonthRow]
    totals: ReportTotals
    summaries: List[MetricSummary]
