"""
Shared test fixtures.

Every test gets its own in-memory SQLite database behind the global
database manager, so services build their own sessions exactly as they do
per request in production. No mocks except where a failure is injected.
"""

import pytest

from itsm_core.config import AppConfig, reset_config, set_config
from itsm_core.context import TenantScope
from itsm_core.db import DatabaseConfig, close_db, initialize_db
from itsm_core.exceptions import clear_correlation_id
from itsm_core.schemas import SignupRequest
from itsm_core.services import TenantService
from itsm_core.utils.logger import reset_logging

DEFAULT_PASSWORD = "secret123"


@pytest.fixture(autouse=True)
def app_config():
    """Install a test configuration and reset global state afterwards."""
    config = AppConfig(environment="test")
    set_config(config)
    yield config
    reset_config()
    reset_logging()
    clear_correlation_id()


@pytest.fixture
def db_config() -> DatabaseConfig:
    """SQLite in-memory database configuration for testing."""
    return DatabaseConfig(db_type="sqlite", database=":memory:", development_mode=True)


@pytest.fixture
def db_manager(db_config):
    """Fresh database with all tables, installed as the global manager."""
    manager = initialize_db(db_config)
    yield manager
    manager.drop_tables()
    close_db()


@pytest.fixture
def db_session(db_manager):
    """A session for direct inspection of stored rows."""
    session = db_manager.new_session()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def make_tenant(db_manager):
    """Factory signing up a tenant with its first user."""

    def _make(organization_name, email, name=None, password=DEFAULT_PASSWORD):
        with TenantService() as service:
            return service.signup(
                SignupRequest(
                    organization_name=organization_name,
                    email=email,
                    name=name,
                    password=password,
                )
            )

    return _make


def scope_for(signup_result) -> TenantScope:
    return TenantScope(
        tenant_id=signup_result.tenant.id,
        user_id=signup_result.user.id,
        email=signup_result.user.email,
    )


@pytest.fixture
def tenant_a(make_tenant):
    return make_tenant("Acme", "alice@acme.test", name="Alice")


@pytest.fixture
def tenant_b(make_tenant):
    return make_tenant("Globex", "bob@globex.test", name="Bob")


@pytest.fixture
def scope_a(tenant_a) -> TenantScope:
    return scope_for(tenant_a)


@pytest.fixture
def scope_b(tenant_b) -> TenantScope:
    return scope_for(tenant_b)
