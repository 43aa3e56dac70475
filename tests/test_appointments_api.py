"""API tests for appointments."""

import pytest

from conftest import as_utc

T1 = {"X-Tenant-Id": "T1"}
T2 = {"X-Tenant-Id": "T2"}


@pytest.fixture
def appointment_body(make_customer):
    customer = make_customer()
    return {
        "title": "Furnace tune-up",
        "customerId": customer["id"],
        "addressId": customer["addresses"][0]["id"],
        "scheduledStart": "2026-03-02T14:00:00+00:00",
        "scheduledEnd": "2026-03-02T15:30:00+00:00",
        "description": "Annual service",
        "priority": "high",
    }


def test_create_round_trip(client, appointment_body):
    """Created appointment comes back with the same fields and defaults filled in."""
    created = client.post("/v1/appointments", json=appointment_body, headers=T1)
    assert created.status_code == 201, created.text
    body = client.get(f"/v1/appointments/{created.json()['id']}", headers=T1).json()
    assert body["title"] == "Furnace tune-up"
    assert body["customerId"] == appointment_body["customerId"]
    assert body["addressId"] == appointment_body["addressId"]
    assert as_utc(body["scheduledStart"]) == as_utc(appointment_body["scheduledStart"])
    assert as_utc(body["scheduledEnd"]) == as_utc(appointment_body["scheduledEnd"])
    assert body["duration"] == 60
    assert body["status"] == "SCHEDULED"
    assert body["priority"] == "HIGH"
    assert body["customer"]["id"] == appointment_body["customerId"]
    assert body["createdById"] is None


def test_status_only_update_preserves_other_fields(client, appointment_body):
    """Updating just the status leaves title, times and the rest untouched."""
    created = client.post("/v1/appointments", json=appointment_body, headers=T1).json()
    updated = client.put(f"/v1/appointments/{created['id']}", json={"status": "IN_PROGRESS"}, headers=T1)
    assert updated.status_code == 200, updated.text
    stored = client.get(f"/v1/appointments/{created['id']}", headers=T1).json()
    assert stored["status"] == "IN_PROGRESS"
    for key in ("title", "description", "customerId", "addressId", "duration", "priority", "notes"):
        assert stored[key] == created[key], key
    assert as_utc(stored["scheduledStart"]) == as_utc(created["scheduledStart"])
    assert as_utc(stored["scheduledEnd"]) == as_utc(created["scheduledEnd"])


def test_blank_address_id_stores_no_address(client, appointment_body):
    """An empty addressId is dropped, not stored."""
    created = client.post("/v1/appointments", json={**appointment_body, "addressId": ""}, headers=T1)
    assert created.status_code == 201, created.text
    stored = client.get(f"/v1/appointments/{created.json()['id']}", headers=T1).json()
    assert stored["addressId"] is None


def test_blank_address_id_on_update_keeps_address(client, appointment_body):
    created = client.post("/v1/appointments", json=appointment_body, headers=T1).json()
    updated = client.put(f"/v1/appointments/{created['id']}", json={"addressId": ""}, headers=T1).json()
    assert updated["addressId"] == appointment_body["addressId"]


def test_explicit_null_clears_address(client, appointment_body):
    created = client.post("/v1/appointments", json=appointment_body, headers=T1).json()
    updated = client.put(f"/v1/appointments/{created['id']}", json={"addressId": None}, headers=T1).json()
    assert updated["addressId"] is None


def test_missing_fields(client):
    response = client.post("/v1/appointments", json={"title": "x"}, headers=T1)
    assert response.status_code == 400
    assert response.json() == {"error": "Missing required fields: customerId, scheduledStart, scheduledEnd"}


def test_end_before_start_on_update(client, appointment_body):
    """The stored start is used when only the end changes."""
    created = client.post("/v1/appointments", json=appointment_body, headers=T1).json()
    response = client.put(
        f"/v1/appointments/{created['id']}",
        json={"scheduledEnd": "2026-03-02T13:00:00+00:00"},
        headers=T1,
    )
    assert response.status_code == 400
    assert "scheduledEnd" in response.json()["error"]


def test_customer_change_rechecks_kept_address(client, appointment_body, make_customer):
    """Moving an appointment to another customer without a new address is 404 and changes nothing."""
    created = client.post("/v1/appointments", json=appointment_body, headers=T1).json()
    other = make_customer(email="other@example.com")
    url = f"/v1/appointments/{created['id']}"
    response = client.put(url, json={"customerId": other["id"]}, headers=T1)
    assert response.status_code == 404
    assert response.json() == {"error": "Address not found"}
    assert client.get(url, headers=T1).json()["customerId"] == appointment_body["customerId"]

    moved = client.put(
        url, json={"customerId": other["id"], "addressId": other["addresses"][0]["id"]}, headers=T1
    )
    assert moved.status_code == 200, moved.text
    assert moved.json()["addressId"] == other["addresses"][0]["id"]


def test_unknown_customer_is_404(client, appointment_body):
    response = client.post(
        "/v1/appointments", json={**appointment_body, "customerId": "missing", "addressId": ""}, headers=T1
    )
    assert response.status_code == 404
    assert response.json() == {"error": "Customer not found"}


def test_foreign_customer_reference_is_404(client, appointment_body, make_customer):
    """A customer from another tenant cannot be referenced."""
    foreign = make_customer(headers=T2)
    response = client.post(
        "/v1/appointments", json={**appointment_body, "customerId": foreign["id"], "addressId": ""}, headers=T1
    )
    assert response.status_code == 404


def test_cross_tenant_access_is_404(client, appointment_body):
    """T1 cannot see, change or delete a T2 appointment, which stays intact."""
    created = client.post("/v1/appointments", json=appointment_body, headers=T1).json()
    url = f"/v1/appointments/{created['id']}"
    assert client.get(url, headers=T2).status_code == 404
    assert client.put(url, json={"status": "CANCELLED"}, headers=T2).status_code == 404
    assert client.delete(url, headers=T2).status_code == 404
    assert client.get(url, headers=T1).json()["status"] == "SCHEDULED"


def test_delete_is_hard(client, appointment_body):
    created = client.post("/v1/appointments", json=appointment_body, headers=T1).json()
    assert client.delete(f"/v1/appointments/{created['id']}", headers=T1).status_code == 204
    assert client.get(f"/v1/appointments/{created['id']}", headers=T1).status_code == 404


def test_list_filters_and_order(client, appointment_body):
    """List is ordered by start time and filters by status and date window."""
    later = client.post(
        "/v1/appointments",
        json={**appointment_body, "title": "Later", "scheduledStart": "2026-03-05T09:00:00+00:00",
              "scheduledEnd": "2026-03-05T10:00:00+00:00"},
        headers=T1,
    ).json()
    earlier = client.post("/v1/appointments", json=appointment_body, headers=T1).json()
    client.put(f"/v1/appointments/{later['id']}", json={"status": "CONFIRMED"}, headers=T1)

    listed = client.get("/v1/appointments", headers=T1).json()
    assert [a["id"] for a in listed["items"]] == [earlier["id"], later["id"]]
    assert listed["total"] == 2

    confirmed = client.get("/v1/appointments", params={"status": "confirmed"}, headers=T1).json()
    assert [a["id"] for a in confirmed["items"]] == [later["id"]]

    window = client.get(
        "/v1/appointments",
        params={"from": "2026-03-04T00:00:00+00:00", "to": "2026-03-06T00:00:00+00:00"},
        headers=T1,
    ).json()
    assert [a["id"] for a in window["items"]] == [later["id"]]

    by_customer = client.get(
        "/v1/appointments", params={"customerId": appointment_body["customerId"]}, headers=T1
    ).json()
    assert by_customer["total"] == 2
    assert client.get("/v1/appointments", headers=T2).json()["total"] == 0


def test_author_and_assignee(client, registered):
    """The user header records authorship; assignees must belong to the tenant."""
    headers = registered["headers"]
    customer = client.post("/v1/customers", json={"firstName": "Al"}, headers=headers).json()
    body = {
        "title": "Leak",
        "customerId": customer["id"],
        "assignedToId": registered["user"]["id"],
        "scheduledStart": "2026-04-01T09:00:00+00:00",
        "scheduledEnd": "2026-04-01T10:00:00+00:00",
    }
    created = client.post("/v1/appointments", json=body, headers=headers)
    assert created.status_code == 201, created.text
    assert created.json()["createdById"] == registered["user"]["id"]
    assert created.json()["assignedTo"]["firstName"] == "Olive"

    stranger = client.post(
        "/v1/appointments", json={**body, "assignedToId": "nobody"}, headers=headers
    )
    assert stranger.status_code == 404
    assert stranger.json() == {"error": "User not found"}


def test_unknown_user_header_is_not_recorded(client, appointment_body):
    headers = {**T1, "X-User-Id": "not-a-user"}
    created = client.post("/v1/appointments", json=appointment_body, headers=headers).json()
    assert created["createdById"] is None
