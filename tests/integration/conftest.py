"""
Fixtures for HTTP-level tests against the FastAPI application.
"""

import pytest
from fastapi.testclient import TestClient

from itsm_core.api import create_app


@pytest.fixture
def app(app_config, db_manager):
    return create_app(config=app_config, db_manager=db_manager)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def signup(client):
    """Sign up a tenant over HTTP and return (body, auth headers)."""

    def _signup(organization_name, email, name=None, password="secret123"):
        response = client.post(
            "/users",
            json={
                "organizationName": organization_name,
                "email": email,
                "name": name,
                "password": password,
            },
        )
        assert response.status_code == 201, response.text
        login = client.post("/auth/login", json={"email": email, "password": password})
        assert login.status_code == 200, login.text
        client.cookies.clear()
        return response.json(), {"Authorization": f"Bearer {login.json()['token']}"}

    return _signup


@pytest.fixture
def alice(signup):
    return signup("Acme", "alice@acme.test", name="Alice")


@pytest.fixture
def bob(signup):
    return signup("Globex", "bob@globex.test", name="Bob")
