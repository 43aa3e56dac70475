"""API tests for service requests."""

import re

import pytest

T1 = {"X-Tenant-Id": "T1"}
T2 = {"X-Tenant-Id": "T2"}


@pytest.fixture
def customer(make_customer):
    return make_customer()


@pytest.fixture
def request_body(customer):
    return {
        "customerId": customer["id"],
        "serviceAddressId": customer["addresses"][0]["id"],
        "title": "No hot water",
        "description": "Water heater pilot keeps going out",
        "problemType": "water_heater",
        "urgency": "high",
    }


def test_create_service_request(client, request_body, customer):
    """Requests are numbered SR-NNNNNN and start NEW from the web."""
    response = client.post("/v1/service-requests", json=request_body, headers=T1)
    assert response.status_code == 201, response.text
    record = response.json()
    assert re.fullmatch(r"SR-\d{6}", record["requestNumber"])
    assert record["requestNumber"] == "SR-000001"
    assert record["status"] == "NEW"
    assert record["urgency"] == "HIGH"
    assert record["createdSource"] == "WEB"
    assert record["customer"]["id"] == customer["id"]
    assert record["serviceAddress"]["street"] == "1 Elm St"
    assert record["assignedAt"] is None
    second = client.post("/v1/service-requests", json=request_body, headers=T1).json()
    assert second["requestNumber"] == "SR-000002"


def test_critical_urgency_is_emergency(client, request_body):
    record = client.post("/v1/service-requests", json={**request_body, "urgency": "critical"}, headers=T1).json()
    assert record["urgency"] == "EMERGENCY"


def test_missing_fields(client):
    response = client.post("/v1/service-requests", json={"title": "x"}, headers=T1)
    assert response.status_code == 400
    assert response.json() == {"error": "Missing required fields: customerId, description, problemType"}


def test_blank_references_are_dropped(client, request_body):
    body = {**request_body, "serviceAddressId": "", "assignedToId": " ", "estimateId": ""}
    response = client.post("/v1/service-requests", json=body, headers=T1)
    assert response.status_code == 201, response.text
    assert response.json()["serviceAddressId"] is None


def test_address_must_belong_to_customer(client, request_body, make_customer):
    other = make_customer(email="other@example.com")
    response = client.post(
        "/v1/service-requests", json={**request_body, "serviceAddressId": other["addresses"][0]["id"]}, headers=T1
    )
    assert response.status_code == 404
    assert response.json() == {"error": "Address not found"}


def test_customer_change_rechecks_kept_address(client, request_body, make_customer):
    created = client.post("/v1/service-requests", json=request_body, headers=T1).json()
    other = make_customer(email="other@example.com")
    response = client.put(f"/v1/service-requests/{created['id']}", json={"customerId": other["id"]}, headers=T1)
    assert response.status_code == 404


def test_unknown_estimate_is_404(client, request_body):
    response = client.post("/v1/service-requests", json={**request_body, "estimateId": "missing"}, headers=T1)
    assert response.status_code == 404
    assert response.json() == {"error": "Estimate not found"}


def test_status_and_assignment_are_stamped(client, registered):
    """A status change stamps statusChangedAt; assigning stamps assignedAt."""
    headers = registered["headers"]
    customer = client.post("/v1/customers", json={"firstName": "Al"}, headers=headers).json()
    body = {"customerId": customer["id"], "title": "Leak", "description": "Under sink", "problemType": "plumbing"}
    created = client.post("/v1/service-requests", json=body, headers=headers).json()
    assert created["createdById"] == registered["user"]["id"]
    assert created["statusChangedAt"] is None

    url = f"/v1/service-requests/{created['id']}"
    updated = client.put(url, json={"status": "assigned", "assignedToId": registered["user"]["id"]}, headers=headers)
    assert updated.status_code == 200, updated.text
    record = updated.json()
    assert record["status"] == "ASSIGNED"
    assert record["statusChangedAt"] is not None
    assert record["assignedAt"] is not None
    assert record["assignedTo"]["firstName"] == "Olive"
    assert record["title"] == "Leak"

    cleared = client.put(url, json={"assignedToId": None}, headers=headers).json()
    assert cleared["assignedToId"] is None


def test_null_on_required_field_is_rejected(client, request_body):
    created = client.post("/v1/service-requests", json=request_body, headers=T1).json()
    response = client.put(f"/v1/service-requests/{created['id']}", json={"title": None}, headers=T1)
    assert response.status_code == 400


def test_list_filters(client, request_body):
    client.post("/v1/service-requests", json=request_body, headers=T1)
    client.post(
        "/v1/service-requests",
        json={**request_body, "title": "Clogged drain", "problemType": "drain", "createdSource": "api"},
        headers=T1,
    )
    everything = client.get("/v1/service-requests", headers=T1).json()
    assert everything["total"] == 2
    assert [r["requestNumber"] for r in everything["items"]] == ["SR-000002", "SR-000001"]
    by_source = client.get("/v1/service-requests", params={"createdSource": "API"}, headers=T1).json()
    assert [r["title"] for r in by_source["items"]] == ["Clogged drain"]
    by_text = client.get("/v1/service-requests", params={"q": "hot water"}, headers=T1).json()
    assert [r["title"] for r in by_text["items"]] == ["No hot water"]
    assert client.get("/v1/service-requests", params={"status": "completed"}, headers=T1).json()["total"] == 0
    assert client.get("/v1/service-requests", headers=T2).json()["total"] == 0


def test_delete(client, request_body):
    created = client.post("/v1/service-requests", json=request_body, headers=T1).json()
    url = f"/v1/service-requests/{created['id']}"
    assert client.delete(url, headers=T2).status_code == 404
    assert client.delete(url, headers=T1).status_code == 204
    assert client.get(url, headers=T1).status_code == 404


def test_voice_agent_requests_cannot_be_deleted(client, request_body):
    created = client.post(
        "/v1/service-requests", json={**request_body, "createdSource": "VOICE_AGENT"}, headers=T1
    ).json()
    response = client.delete(f"/v1/service-requests/{created['id']}", headers=T1)
    assert response.status_code == 403
    assert response.json() == {"error": "Voice Agent service requests cannot be deleted"}
    assert client.get(f"/v1/service-requests/{created['id']}", headers=T1).status_code == 200
