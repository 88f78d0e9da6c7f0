"""Unit tests for cs_customer request/response schemas."""

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from src.cs_customer.application.schemas import (
    CustomerCreateRequest,
    CustomerListResponse,
    CustomerOut,
    CustomerUpdateRequest,
)
from src.cs_customer.domain.models import UNSET, Customer


def _customer(**kwargs) -> Customer:
    defaults = dict(
        id="11111111-1111-1111-1111-111111111111",
        tenant_id="t1",
        email="alice@example.com",
        full_name="Alice",
        phone=None,
        address={"city": "Oxford"},
        loyalty_points=5,
        created_at=datetime(2026, 1, 1, tzinfo=UTC),
        updated_at=datetime(2026, 1, 2, tzinfo=UTC),
    )
    defaults.update(kwargs)
    return Customer(**defaults)


class TestUpdateRequest:
    def test_only_supplied_fields_reach_patch(self):
        req = CustomerUpdateRequest.model_validate({"tenant_id": "t1", "phone": "555"})
        patch = req.to_patch()

        assert patch.changes() == {"phone": "555"}
        assert patch.full_name is UNSET

    def test_explicit_null_is_a_change(self):
        req = CustomerUpdateRequest.model_validate({"tenant_id": "t1", "full_name": None})
        assert req.to_patch().changes() == {"full_name": None}

    def test_no_fields_gives_empty_patch(self):
        req = CustomerUpdateRequest.model_validate({"tenant_id": "t1"})
        assert req.to_patch().is_empty()

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            CustomerUpdateRequest.model_validate({"tenant_id": "t1", "email": "x@y.com"})

    def test_negative_loyalty_rejected(self):
        with pytest.raises(ValidationError):
            CustomerUpdateRequest.model_validate({"tenant_id": "t1", "loyalty_points": -1})

    def test_null_loyalty_rejected(self):
        with pytest.raises(ValidationError):
            CustomerUpdateRequest.model_validate({"tenant_id": "t1", "loyalty_points": None})


class TestCreateRequest:
    def test_valid(self):
        req = CustomerCreateRequest(
            tenant_id="t1", email="alice@example.com", password="Secret123"
        )
        assert req.full_name is None
        assert req.address is None

    def test_bad_email_rejected(self):
        with pytest.raises(ValidationError):
            CustomerCreateRequest(tenant_id="t1", email="nope", password="Secret123")

    def test_missing_password_rejected(self):
        with pytest.raises(ValidationError):
            CustomerCreateRequest.model_validate({"tenant_id": "t1", "email": "a@example.com"})


class TestCustomerOut:
    def test_from_domain_isoformats_timestamps(self):
        out = CustomerOut.from_domain(_customer())
        assert out.created_at == "2026-01-01T00:00:00+00:00"
        assert "password_hash" not in out.model_dump()

    def test_cache_roundtrip_is_identical(self):
        page = CustomerListResponse(
            customers=[CustomerOut.from_domain(_customer())], total=1, limit=50, offset=0
        )
        assert CustomerListResponse.model_validate_json(page.model_dump_json()) == page
