"""
Unit test fixtures: services and common tenant data.

Services own their sessions, like they do per request. Assertions about
effects across services should read through a fresh service.
"""

import pytest

from itsm_core.schemas import CategoryCreate, TicketCreate, UserCreate
from itsm_core.services import CategoryService, HistoryService, TenantService, TicketService


def _managed(service_class):
    service = service_class()
    yield service
    service.close()


@pytest.fixture
def category_service(db_manager):
    yield from _managed(CategoryService)


@pytest.fixture
def ticket_service(db_manager):
    yield from _managed(TicketService)


@pytest.fixture
def history_service(db_manager):
    yield from _managed(HistoryService)


@pytest.fixture
def tenant_service(db_manager):
    yield from _managed(TenantService)


@pytest.fixture
def bugs(category_service, scope_a):
    return category_service.create_category(scope_a, CategoryCreate(name="Bugs"))


@pytest.fixture
def critical(category_service, scope_a, bugs):
    return category_service.create_category(
        scope_a, CategoryCreate(name="Critical", parent_id=bugs.id)
    )


@pytest.fixture
def ticket(ticket_service, scope_a, critical):
    return ticket_service.create_ticket(
        scope_a, TicketCreate(title="Crash on launch", category_id=critical.id)
    )


@pytest.fixture
def carol(tenant_service, scope_a):
    """Second member of tenant A."""
    return tenant_service.create_user(
        scope_a, UserCreate(email="carol@acme.test", name="Carol", password="secret123")
    )
