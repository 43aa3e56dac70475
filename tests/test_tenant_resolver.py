"""Unit tests for tenant and user resolution from headers."""

import pytest

from fieldsmart.auth.middleware import hash_secret, resolve_tenant_id, resolve_user_id
from fieldsmart.errors import MissingTenantError


def test_resolves_tenant_header():
    """Tenant id is read from the configured header."""
    assert resolve_tenant_id({"X-Tenant-Id": "T1"}) == "T1"


def test_header_name_is_case_insensitive():
    """Header lookup ignores case even on plain dicts."""
    assert resolve_tenant_id({"x-tenant-id": "T1"}) == "T1"


def test_value_is_trimmed():
    """Surrounding whitespace is removed."""
    assert resolve_tenant_id({"X-Tenant-Id": "  T1  "}) == "T1"


def test_folded_header_takes_first_value():
    """A proxy-folded "a, b" header resolves to the first entry."""
    assert resolve_tenant_id({"X-Tenant-Id": "T1, T2"}) == "T1"


@pytest.mark.parametrize("headers", [{}, {"X-Tenant-Id": ""}, {"X-Tenant-Id": "   "}, {"Other": "T1"}])
def test_missing_or_blank_tenant_raises(headers):
    """Absent or blank header is a MissingTenantError."""
    with pytest.raises(MissingTenantError) as exc_info:
        resolve_tenant_id(headers)
    assert exc_info.value.status_code == 401
    assert exc_info.value.message == "Tenant ID not found"


def test_custom_header_name():
    """The header name is configurable."""
    assert resolve_tenant_id({"X-Org": "acme"}, header_name="X-Org") == "acme"


def test_user_header_is_optional():
    """Missing or blank user header resolves to None."""
    assert resolve_user_id({}) is None
    assert resolve_user_id({"X-User-Id": " "}) is None
    assert resolve_user_id({"X-User-Id": "u-1"}) == "u-1"


def test_hash_secret_is_salted():
    """Same secret with different salts hashes differently."""
    assert hash_secret("pw", "a") == hash_secret("pw", "a")
    assert hash_secret("pw", "a") != hash_secret("pw", "b")
    assert len(hash_secret("pw", "a")) == 64
