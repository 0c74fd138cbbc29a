from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import Field, field_validator

from advisory_monitor.shared.base import BaseRequestSchema, BaseSchema

LEAD_SOURCE_PATTERN = "^(Provided|Self)$"
DEFAULT_LEAD_SOURCE = "Provided"
LEAD_TEXT_FIELDS = ("first_name", "last_name", "company_name", "email", "phone", "city", "address")


class LeadSummary(BaseSchema):
    id: str
    owner_id: str
    label: str
    is_agency_client: Optional[bool] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    company_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    city: Optional[str] = None
    address: Optional[str] = None
    source: str = DEFAULT_LEAD_SOURCE
    created_at: Optional[datetime] = None


class LeadRequest(BaseRequestSchema):
    """A lead as entered in the lead form. Blank text is stored as null."""

    is_agency_client: Optional[bool] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    company_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    city: Optional[str] = None
    address: Optional[str] = None
    source: str = Field(default=DEFAULT_LEAD_SOURCE, pattern=LEAD_SOURCE_PATTERN)

    @field_validator(*LEAD_TEXT_FIELDS, mode="before")
    @classmethod
    def _trim_or_null(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip() or None
        return value

    @field_validator("source", mode="before")
    @classmethod
    def _default_source(cls, value: Any) -> Any:
        return value or DEFAULT_LEAD_SOURCE

    def to_row(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=False)
