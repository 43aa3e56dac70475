"""Shared fixtures: an app on a throwaway SQLite database with two seeded tenants."""

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from fieldsmart.config import Settings
from fieldsmart.main import create_app

TENANT_HEADERS = {
    "T1": {"X-Tenant-Id": "T1"},
    "T2": {"X-Tenant-Id": "T2"},
}


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        llm_gateway_url="http://gateway.test",
        log_level="WARNING",
    )


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as test_client:
        assert test_client.post("/v1/migrate", headers=TENANT_HEADERS["T1"]).status_code == 200
        for headers in TENANT_HEADERS.values():
            assert test_client.post("/v1/seed", headers=headers).status_code == 200
        yield test_client


@pytest.fixture
def t1():
    return dict(TENANT_HEADERS["T1"])


@pytest.fixture
def t2():
    return dict(TENANT_HEADERS["T2"])


@pytest.fixture
def make_customer(client, t1):
    """Create a customer with a primary address under T1 (or the given headers)."""

    def _make(headers=None, **overrides):
        body = {
            "firstName": "Pat",
            "lastName": "Doe",
            "email": "pat.doe@example.com",
            "phone": "555-2000",
            "street": "1 Elm St",
            "city": "Springfield",
            "state": "IL",
            "zip": "62701",
        }
        body.update(overrides)
        response = client.post("/v1/customers", json=body, headers=headers or t1)
        assert response.status_code == 201, response.text
        return response.json()

    return _make


@pytest.fixture
def registered(client):
    """A freshly registered tenant with its owner user; headers name both."""
    response = client.post(
        "/v1/tenants/register",
        json={
            "company": {"name": "Acme Plumbing"},
            "admin": {"email": "owner@acme.example.com", "password": "s3cret-pass", "firstName": "Olive"},
        },
    )
    assert response.status_code == 201, response.text
    body = response.json()
    return {
        "tenant": body["tenant"],
        "user": body["user"],
        "headers": {"X-Tenant-Id": body["tenant"]["id"], "X-User-Id": body["user"]["id"]},
    }


def as_utc(value: str) -> datetime:
    """Parse an API timestamp; SQLite hands back naive UTC values."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)
