"""API tests for customers and addresses."""

import re

T1 = {"X-Tenant-Id": "T1"}
T2 = {"X-Tenant-Id": "T2"}


def _number(customer) -> int:
    return int(customer["customerNumber"].split("-")[1])


def test_create_customer_scenario(client):
    """Create returns an id and a CUST- number; the next create increments it."""
    body = {"firstName": "John", "lastName": "Smith", "email": "john@x.com", "phone": "555-1001"}
    first = client.post("/v1/customers", json=body, headers=T1)
    assert first.status_code == 201, first.text
    created = first.json()
    assert created["id"]
    assert re.fullmatch(r"CUST-\d{6}", created["customerNumber"])
    assert created["mobilePhone"] == "555-1001"
    assert created["displayName"] == "John Smith"

    second = client.post("/v1/customers", json={**body, "email": "john2@x.com"}, headers=T1).json()
    assert _number(second) == _number(created) + 1


def test_numbers_are_per_tenant(client):
    """Each tenant has its own sequence; seeded tenants start after their demo data."""
    a = client.post("/v1/customers", json={"firstName": "A"}, headers=T1).json()
    b = client.post("/v1/customers", json={"firstName": "B"}, headers=T2).json()
    assert a["customerNumber"] == b["customerNumber"] == "CUST-000004"


def test_sequential_creates_are_unique(client):
    numbers = [
        client.post("/v1/customers", json={"firstName": f"C{i}"}, headers=T1).json()["customerNumber"]
        for i in range(5)
    ]
    assert len(set(numbers)) == 5
    assert numbers == sorted(numbers)


def test_round_trip(client, make_customer):
    """Fields supplied on create come back on get."""
    created = make_customer(type="commercial", companyName="Riverside LLC", notes="Side gate")
    fetched = client.get(f"/v1/customers/{created['id']}", headers=T1)
    assert fetched.status_code == 200
    body = fetched.json()
    for key in ("firstName", "lastName", "email", "mobilePhone", "notes", "companyName", "customerNumber"):
        assert body[key] == created[key]
    assert body["type"] == "COMMERCIAL"
    assert body["displayName"] == "Riverside LLC"


def test_inline_address_becomes_primary(client, make_customer):
    """A street on create makes one primary service address."""
    customer = make_customer()
    assert len(customer["addresses"]) == 1
    address = customer["addresses"][0]
    assert address["street"] == "1 Elm St"
    assert address["zip"] == "62701"
    assert address["type"] == "SERVICE"
    assert address["isPrimary"] is True


def test_no_street_no_address(client):
    created = client.post("/v1/customers", json={"firstName": "NoAddr", "city": "Springfield"}, headers=T1)
    assert created.json()["addresses"] == []


def test_invalid_email_is_400(client):
    response = client.post("/v1/customers", json={"firstName": "X", "email": "nope"}, headers=T1)
    assert response.status_code == 400
    assert "email" in response.json()["error"]


def test_update_is_partial_and_idempotent(client, make_customer):
    """Applying the same patch twice yields the same state, and omitted fields are kept."""
    customer = make_customer()
    patch = {"notes": "Dog in yard", "workPhone": "555-3000"}
    first = client.put(f"/v1/customers/{customer['id']}", json=patch, headers=T1).json()
    second = client.put(f"/v1/customers/{customer['id']}", json=patch, headers=T1).json()
    for body in (first, second):
        assert body["notes"] == "Dog in yard"
        assert body["workPhone"] == "555-3000"
        assert body["firstName"] == customer["firstName"]
        assert body["email"] == customer["email"]
    strip = lambda body: {k: v for k, v in body.items() if k != "updatedAt"}  # noqa: E731
    assert strip(first) == strip(second)


def test_update_explicit_null_clears(client, make_customer):
    customer = make_customer(notes="temp")
    body = client.put(f"/v1/customers/{customer['id']}", json={"notes": None}, headers=T1).json()
    assert body["notes"] is None
    assert body["firstName"] == "Pat"


def test_update_display_name_splits(client, make_customer):
    customer = make_customer()
    body = client.put(f"/v1/customers/{customer['id']}", json={"displayName": "Mary Ann Smith"}, headers=T1).json()
    assert body["firstName"] == "Mary"
    assert body["lastName"] == "Ann Smith"


def test_delete_archives(client, make_customer):
    """Deleted customers are archived: hidden from get and list unless asked for."""
    customer = make_customer()
    assert client.delete(f"/v1/customers/{customer['id']}", headers=T1).status_code == 204
    assert client.get(f"/v1/customers/{customer['id']}", headers=T1).status_code == 404

    visible = client.get("/v1/customers", headers=T1).json()
    assert customer["id"] not in [c["id"] for c in visible["items"]]
    everything = client.get("/v1/customers", params={"includeArchived": "true"}, headers=T1).json()
    archived = [c for c in everything["items"] if c["id"] == customer["id"]]
    assert archived and archived[0]["isArchived"] is True


def test_list_pagination(client):
    """List wraps items with total, limit and offset."""
    body = client.get("/v1/customers", params={"limit": 2, "offset": 1}, headers=T1).json()
    assert body["total"] == 3
    assert body["limit"] == 2
    assert body["offset"] == 1
    assert len(body["items"]) == 2


def test_list_limit_capped(client):
    body = client.get("/v1/customers", params={"limit": 10000}, headers=T1).json()
    assert body["limit"] == 200


def test_bad_limit_is_400(client):
    response = client.get("/v1/customers", params={"limit": 0}, headers=T1)
    assert response.status_code == 400
    assert "limit" in response.json()["error"]


def test_search(client, make_customer):
    """Search matches names, email, phone and number within the tenant."""
    target = make_customer(firstName="Zelda", lastName="Quill", email="zq@example.com", phone="555-9876")
    for q in ("zeld", "QUILL", "zq@example", "9876", target["customerNumber"]):
        body = client.get("/v1/customers/search", params={"q": q}, headers=T1).json()
        assert [c["id"] for c in body["items"]] == [target["id"]], q
    assert client.get("/v1/customers/search", params={"q": "zelda"}, headers=T2).json()["total"] == 0


def test_search_wildcards_match_literally(client, make_customer):
    """% and _ in the query are ordinary characters, not LIKE wildcards."""
    literal = make_customer(email="under_score@example.com")
    make_customer(email="underXscore@example.com")
    body = client.get("/v1/customers/search", params={"q": "under_score"}, headers=T1).json()
    assert [c["id"] for c in body["items"]] == [literal["id"]]
    assert client.get("/v1/customers/search", params={"q": "%"}, headers=T1).json()["total"] == 0
    job = {"customerId": literal["id"], "addressId": literal["addresses"][0]["id"], "title": "Fix boiler"}
    assert client.post("/v1/jobs", json=job, headers=T1).status_code == 201
    assert client.get("/v1/jobs", params={"q": "_"}, headers=T1).json()["total"] == 0


def test_database_error_hides_driver_message(client, monkeypatch, make_customer):
    """Driver failures surface as a generic 500 envelope."""
    from sqlalchemy.exc import OperationalError

    from fieldsmart.services.customers import CustomerService

    customer = make_customer()

    async def failing_get(self, tenant, customer_id):
        raise OperationalError("SELECT 1", {}, Exception("disk I/O error at /var/lib/db"))

    monkeypatch.setattr(CustomerService, "get", failing_get)
    response = client.get(f"/v1/customers/{customer['id']}", headers=T1)
    assert response.status_code == 500
    assert response.json() == {"error": "Database error"}


def test_search_by_type(client):
    body = client.get("/v1/customers/search", params={"type": "business"}, headers=T1).json()
    assert body["total"] == 1
    assert body["items"][0]["type"] == "COMMERCIAL"


def test_get_by_number(client, make_customer):
    customer = make_customer()
    response = client.get(f"/v1/customers/by-number/{customer['customerNumber']}", headers=T1)
    assert response.status_code == 200
    assert response.json()["id"] == customer["id"]
    assert client.get("/v1/customers/by-number/CUST-999999", headers=T1).status_code == 404


def test_cross_tenant_access_is_404(client, make_customer):
    """Records owned by T2 are invisible to T1 for get, update and delete."""
    foreign = make_customer(headers=T2)
    url = f"/v1/customers/{foreign['id']}"
    for response in (
        client.get(url, headers=T1),
        client.put(url, json={"notes": "hijack"}, headers=T1),
        client.delete(url, headers=T1),
    ):
        assert response.status_code == 404
        assert response.json() == {"error": "Customer not found"}
    assert client.get(url, headers=T2).json()["notes"] is None


def test_add_address_primary_handling(client, make_customer):
    """A new primary address unsets the previous primary."""
    customer = make_customer()
    base = f"/v1/customers/{customer['id']}/addresses"
    billing = client.post(
        base,
        json={"type": "billing", "street": "9 Pine Rd", "city": "Springfield", "state": "IL", "zip": "62704"},
        headers=T1,
    )
    assert billing.status_code == 201, billing.text
    assert billing.json()["isPrimary"] is False

    primary = client.post(
        base,
        json={"street": "5 Oak Ct", "city": "Springfield", "state": "IL", "zipCode": "62705", "isPrimary": True},
        headers=T1,
    ).json()
    assert primary["isPrimary"] is True

    addresses = client.get(f"/v1/customers/{customer['id']}", headers=T1).json()["addresses"]
    assert [a["id"] for a in addresses if a["isPrimary"]] == [primary["id"]]


def test_first_address_is_primary(client):
    customer = client.post("/v1/customers", json={"firstName": "Solo"}, headers=T1).json()
    address = client.post(
        f"/v1/customers/{customer['id']}/addresses",
        json={"street": "2 Birch Ln", "city": "Springfield", "state": "IL", "zip": "62706"},
        headers=T1,
    ).json()
    assert address["isPrimary"] is True


def test_add_address_missing_fields(client, make_customer):
    customer = make_customer()
    response = client.post(f"/v1/customers/{customer['id']}/addresses", json={"street": "x"}, headers=T1)
    assert response.status_code == 400
    assert response.json() == {"error": "Missing required fields: city, state, zip"}


def test_update_and_delete_address(client, make_customer):
    """Deleting the primary address promotes the remaining one."""
    customer = make_customer()
    first_id = customer["addresses"][0]["id"]
    base = f"/v1/customers/{customer['id']}/addresses"
    second = client.post(
        base, json={"street": "3 Cedar", "city": "Springfield", "state": "IL", "zip": "62707"}, headers=T1
    ).json()

    updated = client.put(f"{base}/{second['id']}", json={"gateCode": "1234"}, headers=T1).json()
    assert updated["gateCode"] == "1234"
    assert updated["street"] == "3 Cedar"

    assert client.delete(f"{base}/{first_id}", headers=T1).status_code == 204
    addresses = client.get(f"/v1/customers/{customer['id']}", headers=T1).json()["addresses"]
    assert [(a["id"], a["isPrimary"]) for a in addresses] == [(second["id"], True)]


def test_address_of_other_customer_is_404(client, make_customer):
    one = make_customer()
    other = make_customer(email="other@example.com")
    url = f"/v1/customers/{one['id']}/addresses/{other['addresses'][0]['id']}"
    assert client.put(url, json={"gateCode": "1"}, headers=T1).status_code == 404
