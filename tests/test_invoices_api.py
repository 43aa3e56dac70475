"""API tests for invoices and payments."""

import re
from decimal import Decimal

import pytest

from conftest import as_utc

T1 = {"X-Tenant-Id": "T1"}
T2 = {"X-Tenant-Id": "T2"}


@pytest.fixture
def customer(make_customer):
    return make_customer()


@pytest.fixture
def invoice_body(customer):
    return {
        "customerId": customer["id"],
        "terms": "NET_30",
        "taxRate": "10",
        "lineItems": [
            {"name": "Labor", "quantity": "2", "unitPrice": "75.00"},
            {"name": "Permit fee", "unitPrice": "25.00", "isTaxable": False},
        ],
    }


def test_create_invoice_with_totals(client, invoice_body):
    """Totals derive from line items; tax applies to taxable lines."""
    response = client.post("/v1/invoices", json=invoice_body, headers=T1)
    assert response.status_code == 201, response.text
    invoice = response.json()
    assert re.fullmatch(r"INV-\d{6}", invoice["invoiceNumber"])
    assert invoice["status"] == "DRAFT"
    assert Decimal(invoice["subtotal"]) == Decimal("175.00")
    assert Decimal(invoice["taxAmount"]) == Decimal("15.00")
    assert Decimal(invoice["total"]) == Decimal("190.00")
    assert Decimal(invoice["amountPaid"]) == 0
    assert [item["name"] for item in invoice["lineItems"]] == ["Labor", "Permit fee"]
    assert Decimal(invoice["lineItems"][0]["total"]) == Decimal("150.00")


def test_due_date_defaults_from_terms(client, invoice_body):
    invoice = client.post("/v1/invoices", json=invoice_body, headers=T1).json()
    delta = as_utc(invoice["dueDate"]) - as_utc(invoice["issueDate"])
    assert delta.days == 30


def test_explicit_due_date_kept(client, invoice_body):
    invoice = client.post(
        "/v1/invoices", json={**invoice_body, "dueDate": "2026-12-31T00:00:00+00:00"}, headers=T1
    ).json()
    assert as_utc(invoice["dueDate"]) == as_utc("2026-12-31T00:00:00+00:00")


def test_missing_customer(client):
    response = client.post("/v1/invoices", json={"lineItems": []}, headers=T1)
    assert response.status_code == 400
    assert response.json() == {"error": "Missing required fields: customerId"}


def test_negative_price_rejected(client, invoice_body):
    body = {**invoice_body, "lineItems": [{"name": "Refund", "unitPrice": "-5"}]}
    response = client.post("/v1/invoices", json=body, headers=T1)
    assert response.status_code == 400
    assert "unitPrice" in response.json()["error"]


def test_status_updates_stamp_once(client, invoice_body):
    invoice = client.post("/v1/invoices", json=invoice_body, headers=T1).json()
    url = f"/v1/invoices/{invoice['id']}"
    sent = client.put(url, json={"status": "SENT"}, headers=T1).json()
    assert sent["sentAt"] is not None
    viewed = client.put(url, json={"status": "VIEWED"}, headers=T1).json()
    assert viewed["viewedAt"] is not None
    again = client.put(url, json={"status": "SENT"}, headers=T1).json()
    assert again["sentAt"] == sent["sentAt"]


def test_void_records_reason(client, invoice_body):
    invoice = client.post("/v1/invoices", json=invoice_body, headers=T1).json()
    voided = client.put(
        f"/v1/invoices/{invoice['id']}", json={"status": "VOID", "voidReason": "Duplicate"}, headers=T1
    ).json()
    assert voided["status"] == "VOID"
    assert voided["voidedAt"] is not None
    assert voided["voidReason"] == "Duplicate"

    payment = client.post(
        f"/v1/invoices/{invoice['id']}/payments", json={"amount": "10", "method": "CASH"}, headers=T1
    )
    assert payment.status_code == 400


def test_tax_rate_change_recomputes(client, invoice_body):
    invoice = client.post("/v1/invoices", json=invoice_body, headers=T1).json()
    updated = client.put(f"/v1/invoices/{invoice['id']}", json={"taxRate": "0"}, headers=T1).json()
    assert Decimal(updated["taxAmount"]) == 0
    assert Decimal(updated["total"]) == Decimal("175.00")


def test_partial_then_full_payment(client, invoice_body):
    """Partial payments leave the invoice PARTIAL; paying the rest marks it PAID."""
    invoice = client.post("/v1/invoices", json=invoice_body, headers=T1).json()
    url = f"/v1/invoices/{invoice['id']}/payments"

    partial = client.post(url, json={"amount": "90.00", "method": "check", "checkNumber": "1001"}, headers=T1)
    assert partial.status_code == 201, partial.text
    assert partial.json()["status"] == "PARTIAL"
    assert Decimal(partial.json()["amountPaid"]) == Decimal("90.00")

    paid = client.post(url, json={"amount": "100.00", "method": "CREDIT_CARD"}, headers=T1).json()
    assert paid["status"] == "PAID"
    assert paid["paidAt"] is not None
    assert Decimal(paid["amountPaid"]) == Decimal("190.00")
    assert [p["method"] for p in paid["payments"]] == ["CHECK", "CREDIT_CARD"]


def test_payment_validation(client, invoice_body):
    invoice = client.post("/v1/invoices", json=invoice_body, headers=T1).json()
    url = f"/v1/invoices/{invoice['id']}/payments"
    assert client.post(url, json={"amount": "0", "method": "CASH"}, headers=T1).status_code == 400
    assert client.post(url, json={"amount": "5", "method": "BARTER"}, headers=T1).status_code == 400
    missing = client.post(url, json={}, headers=T1)
    assert missing.json() == {"error": "Missing required fields: amount, method"}


def test_paying_invoice_marks_job_paid(client, customer):
    """A fully paid invoice moves its job to PAID and records the change."""
    job = client.post(
        "/v1/jobs",
        json={"customerId": customer["id"], "addressId": customer["addresses"][0]["id"], "title": "Drain"},
        headers=T1,
    ).json()
    invoice = client.post(
        "/v1/invoices",
        json={"customerId": customer["id"], "jobId": job["id"], "lineItems": [{"name": "Snake", "unitPrice": "120"}]},
        headers=T1,
    ).json()
    assert invoice["job"]["jobNumber"] == job["jobNumber"]

    client.post(f"/v1/invoices/{invoice['id']}/payments", json={"amount": "120", "method": "CASH"}, headers=T1)
    refreshed = client.get(f"/v1/jobs/{job['id']}", headers=T1).json()
    assert refreshed["status"] == "PAID"
    history = client.get(f"/v1/jobs/{job['id']}/history", headers=T1).json()
    assert history[-1]["toStatus"] == "PAID"


def test_unknown_job_is_404(client, customer):
    response = client.post("/v1/invoices", json={"customerId": customer["id"], "jobId": "nope"}, headers=T1)
    assert response.status_code == 404
    assert response.json() == {"error": "Job not found"}


def test_list_and_search(client, invoice_body, customer):
    invoice = client.post("/v1/invoices", json={**invoice_body, "poNumber": "PO-77"}, headers=T1).json()
    client.post("/v1/invoices", json=invoice_body, headers=T1)

    listed = client.get("/v1/invoices", headers=T1).json()
    assert listed["total"] == 2
    by_po = client.get("/v1/invoices", params={"q": "po-77"}, headers=T1).json()
    assert [i["id"] for i in by_po["items"]] == [invoice["id"]]
    by_name = client.get("/v1/invoices", params={"q": customer["lastName"]}, headers=T1).json()
    assert by_name["total"] == 2
    drafts = client.get("/v1/invoices", params={"status": "draft", "customerId": customer["id"]}, headers=T1).json()
    assert drafts["total"] == 2
    assert client.get("/v1/invoices", headers=T2).json()["total"] == 0


def test_cross_tenant_access_is_404(client, invoice_body):
    invoice = client.post("/v1/invoices", json=invoice_body, headers=T1).json()
    url = f"/v1/invoices/{invoice['id']}"
    assert client.get(url, headers=T2).status_code == 404
    assert client.put(url, json={"status": "SENT"}, headers=T2).status_code == 404
    assert client.post(f"{url}/payments", json={"amount": "1", "method": "CASH"}, headers=T2).status_code == 404
