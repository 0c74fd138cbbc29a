from __future__ import annotations

import pytest

from advisory_monitor.core.errors import BadRequestError, ForbiddenError, NotFoundError
from advisory_monitor.schemas.leads import LeadRequest
from advisory_monitor.services.leads_service import LeadsService, validate_lead
from stubs import ADMIN, JUNIOR, LEAD, StubActivityRepository, StubAdvisorsRepository


@pytest.fixture()
def stores():
    activity = StubActivityRepository(
        leads=[
            {"id": "lead-1", "owner_id": "u-lead", "first_name": "Mario", "last_name": "Rossi", "source": None},
            {"id": "lead-2", "owner_id": "u-j1", "company_name": "Acme Srl", "is_agency_client": True},
            {"id": "lead-3", "owner_id": "u-other", "first_name": "Paolo", "last_name": "Blu"},
        ]
    )
    service = LeadsService(activity_repository=activity, advisors_repository=StubAdvisorsRepository())
    return service, activity


def test_lead_validation_rules() -> None:
    assert validate_lead(LeadRequest(email="a@b.it", company_name="Acme")) is not None
    assert validate_lead(LeadRequest(is_agency_client=False, company_name="Acme")) is not None
    assert validate_lead(LeadRequest(is_agency_client=False, phone="333", first_name="Mario")) is not None
    assert validate_lead(LeadRequest(is_agency_client=False, phone="333", first_name="Mario", last_name="Rossi")) is None
    assert validate_lead(LeadRequest(is_agency_client=True, email="a@b.it", company_name="Acme")) is None


def test_lead_request_trims_blank_text() -> None:
    request = LeadRequest(is_agency_client=True, firstName="  ", companyName=" Acme ", email="", source="")
    assert request.first_name is None
    assert request.company_name == "Acme"
    assert request.email is None
    assert request.source == "Provided"


def test_team_lead_lists_team_leads(stores) -> None:
    service, _ = stores
    leads, pagination = service.list_leads(LEAD, "team", page=1, page_size=10)
    assert [lead.label for lead in leads] == ["Mario Rossi", "Acme Srl"]
    assert leads[0].source == "Provided"
    assert pagination.total_items == 2


def test_junior_team_scope_is_own_leads(stores) -> None:
    service, _ = stores
    leads, _ = service.list_leads(JUNIOR, "team")
    assert [lead.id for lead in leads] == ["lead-2"]


def test_all_scope_requires_admin(stores) -> None:
    service, _ = stores
    with pytest.raises(ForbiddenError):
        service.list_leads(LEAD, "all")
    leads, pagination = service.list_leads(ADMIN, "all", page=2, page_size=2)
    assert [lead.id for lead in leads] == ["lead-3"]
    assert pagination.total_pages == 2


def test_create_lead_is_owned_by_current_advisor(stores) -> None:
    service, activity = stores
    lead = service.create_lead(
        JUNIOR, LeadRequest(is_agency_client=False, firstName="Anna", lastName="Neri", phone=" 333 ")
    )
    assert lead.owner_id == "u-j1"
    assert lead.label == "Anna Neri"
    assert lead.created_at is not None
    assert activity.leads[-1]["phone"] == "333"


def test_create_incomplete_lead_is_rejected(stores) -> None:
    service, activity = stores
    with pytest.raises(BadRequestError):
        service.create_lead(JUNIOR, LeadRequest(is_agency_client=False, company_name="Acme"))
    assert len(activity.leads) == 3


def test_update_lead_checks_ownership(stores) -> None:
    service, activity = stores
    request = LeadRequest(is_agency_client=True, email="acme@example.com", company_name="Acme Spa")

    updated = service.update_lead(LEAD, "lead-2", request)
    assert updated.label == "Acme Spa"
    assert activity.get_lead("lead-2")["email"] == "acme@example.com"

    with pytest.raises(ForbiddenError):
        service.update_lead(LEAD, "lead-3", request)
    with pytest.raises(ForbiddenError):
        service.update_lead(JUNIOR, "lead-1", request)
    with pytest.raises(NotFoundError):
        service.update_lead(ADMIN, "lead-404", request)
