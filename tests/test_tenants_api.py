"""API tests for tenant registration, current tenant and admin endpoints."""

T1 = {"X-Tenant-Id": "T1"}


def test_register_creates_trial_tenant_and_owner(client, registered):
    """Registration needs no tenant header and returns the new tenant and owner."""
    assert registered["tenant"]["slug"] == "acme-plumbing"
    assert registered["tenant"]["status"] == "TRIAL"
    assert registered["user"]["role"] == "OWNER"
    assert registered["user"]["email"] == "owner@acme.example.com"
    assert "passwordHash" not in registered["user"]

    current = client.get("/v1/tenants/current", headers=registered["headers"])
    assert current.status_code == 200
    assert current.json()["id"] == registered["tenant"]["id"]


def test_duplicate_company_conflicts(client, registered):
    response = client.post(
        "/v1/tenants/register",
        json={"company": {"name": "ACME plumbing"}, "admin": {"email": "x@example.com", "password": "another-pass"}},
    )
    assert response.status_code == 409
    assert "already registered" in response.json()["error"]


def test_register_missing_fields(client):
    response = client.post("/v1/tenants/register", json={"company": {}, "admin": {}})
    assert response.status_code == 400
    assert response.json() == {"error": "Missing required fields: company.name, admin.email, admin.password"}


def test_register_rejects_non_object_body(client):
    response = client.post("/v1/tenants/register", content=b"[1, 2]", headers={"Content-Type": "application/json"})
    assert response.status_code == 400
    assert response.json() == {"error": "Request body must be a JSON object"}


def test_malformed_json_is_400(client):
    response = client.post(
        "/v1/customers", content=b"{not json", headers={**T1, "Content-Type": "application/json"}
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Request body must be valid JSON"}


def test_current_tenant_from_header(client):
    body = client.get("/v1/tenants/current", headers=T1).json()
    assert body["id"] == "T1"
    assert body["status"] == "ACTIVE"


def test_unknown_tenant_cannot_create(client):
    """Tenant ids that do not exist cannot write."""
    headers = {"X-Tenant-Id": "ghost"}
    response = client.post("/v1/customers", json={"firstName": "Casper"}, headers=headers)
    assert response.status_code == 403
    assert client.get("/v1/tenants/current", headers=headers).status_code == 403


def test_seed_is_skip_if_present(client):
    """Re-seeding a tenant adds nothing new."""
    body = client.post("/v1/seed", headers=T1).json()
    assert body["usersCreated"] == 0
    assert body["customersCreated"] == 0
    assert body["tenant"]["id"] == "T1"


def test_seed_new_tenant(client):
    body = client.post("/v1/seed", headers={"X-Tenant-Id": "T3"}).json()
    assert body["usersCreated"] == 3
    assert body["customersCreated"] == 3
    customers = client.get("/v1/customers", headers={"X-Tenant-Id": "T3"}).json()
    assert sorted(c["customerNumber"] for c in customers["items"]) == ["CUST-000001", "CUST-000002", "CUST-000003"]


def test_migrate_lists_tables(client):
    body = client.post("/v1/migrate", headers=T1).json()
    assert body["status"] == "ok"
    assert {"tenants", "customers", "appointments", "jobs", "invoices", "sequence_counters"} <= set(body["tables"])


def test_health_needs_no_tenant(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_request_id_echoed(client):
    """A supplied request id is echoed; otherwise one is generated."""
    assert client.get("/health", headers={"X-Request-Id": "abc123"}).headers["X-Request-Id"] == "abc123"
    assert client.get("/health").headers["X-Request-Id"]


def test_unknown_route_uses_error_envelope(client):
    response = client.get("/v1/nothing-here", headers=T1)
    assert response.status_code == 404
    assert "error" in response.json()
