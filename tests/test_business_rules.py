"""Unit tests for pure helpers: numbering, totals, due dates, names, slugs."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from fieldsmart.errors import (
    ConflictError,
    InactiveTenantError,
    MissingFieldError,
    MissingTenantError,
    NotFoundError,
    PersistenceError,
    UpstreamServiceError,
    UpstreamTimeoutError,
    ValidationError,
)
from fieldsmart.services.customers import split_display_name
from fieldsmart.services.invoices import compute_totals, due_date_for
from fieldsmart.services.tenants import slugify
from fieldsmart.storage.sequences import format_business_number


def test_business_number_is_zero_padded():
    """Numbers are prefix plus six zero-padded digits."""
    assert format_business_number("CUST", 1) == "CUST-000001"
    assert format_business_number("INV", 123456) == "INV-123456"


def test_totals_tax_only_taxable_lines():
    """Tax applies to taxable lines only, rounded to cents."""
    subtotal, tax, total = compute_totals(
        [(Decimal("100.00"), True), (Decimal("50.00"), False)],
        Decimal("8.25"),
    )
    assert subtotal == Decimal("150.00")
    assert tax == Decimal("8.25")
    assert total == Decimal("158.25")


def test_totals_round_half_up():
    """Half cents round up."""
    _, tax, _ = compute_totals([(Decimal("10.10"), True)], Decimal("5"))
    assert tax == Decimal("0.51")


def test_totals_without_lines():
    assert compute_totals([], Decimal("10")) == (Decimal("0.00"), Decimal("0.00"), Decimal("0.00"))


@pytest.mark.parametrize(
    "terms,days",
    [("DUE_ON_RECEIPT", 0), ("NET_7", 7), ("NET_15", 15), ("NET_30", 30), ("NET_60", 60)],
)
def test_due_date_from_terms(terms, days):
    """Due date is the issue date plus the terms' days."""
    issued = datetime(2026, 1, 1, tzinfo=timezone.utc)
    assert (due_date_for(issued, terms) - issued).days == days


def test_split_display_name():
    """First word is the first name; the rest is the last name."""
    assert split_display_name("Mary Ann Smith") == ("Mary", "Ann Smith")
    assert split_display_name("Cher") == ("Cher", None)


def test_slugify():
    assert slugify("Acme Plumbing, LLC") == "acme-plumbing-llc"
    assert slugify("  Bob's  HVAC ") == "bob-s-hvac"
    assert slugify("!!!") == ""


@pytest.mark.parametrize(
    "error,status",
    [
        (MissingTenantError(), 401),
        (InactiveTenantError(), 403),
        (ValidationError(), 400),
        (MissingFieldError(["a"]), 400),
        (NotFoundError(), 404),
        (ConflictError(), 409),
        (PersistenceError(), 500),
        (UpstreamServiceError(), 502),
        (UpstreamTimeoutError(), 504),
    ],
)
def test_error_status_codes(error, status):
    """Each error kind carries its HTTP status."""
    assert error.status_code == status
    assert error.message
