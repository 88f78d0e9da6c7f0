"""Pydantic schemas for cs_customer requests, responses and cache entries.

Response models double as the cached representation: the service stores
``model_dump_json()`` and reads back with ``model_validate_json()``, so a hit
and a miss produce byte-identical payloads.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from src.cs_customer.domain.models import Customer, CustomerPatch, CustomerStats

_PATCH_FIELDS = frozenset({"full_name", "phone", "address", "loyalty_points"})

# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class CustomerCreateRequest(BaseModel):
    tenant_id: str = Field(..., min_length=1, max_length=64)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    full_name: str | None = Field(None, max_length=255)
    phone: str | None = Field(None, max_length=32)
    address: dict[str, Any] | None = None


class CustomerUpdateRequest(BaseModel):
    """Only the whitelisted columns; unknown keys are rejected outright."""

    model_config = ConfigDict(extra="forbid")

    tenant_id: str = Field(..., min_length=1, max_length=64)
    full_name: str | None = Field(None, max_length=255)
    phone: str | None = Field(None, max_length=32)
    address: dict[str, Any] | None = None
    loyalty_points: int | None = Field(None, ge=0)

    @field_validator("loyalty_points")
    @classmethod
    def loyalty_points_not_null(cls, v: int | None) -> int:
        # Runs only for explicitly supplied values; omitted stays UNSET
        if v is None:
            raise ValueError("loyalty_points cannot be null")
        return v

    def to_patch(self) -> CustomerPatch:
        supplied = self.model_fields_set & _PATCH_FIELDS
        return CustomerPatch(**{name: getattr(self, name) for name in supplied})


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class CustomerOut(BaseModel):
    """Public customer record; password_hash is not part of this model."""

    id: str
    tenant_id: str
    email: str
    full_name: str | None
    phone: str | None
    address: dict[str, Any] | None
    loyalty_points: int
    created_at: str
    updated_at: str

    @classmethod
    def from_domain(cls, c: Customer) -> "CustomerOut":
        return cls(
            id=c.id,
            tenant_id=c.tenant_id,
            email=c.email,
            full_name=c.full_name,
            phone=c.phone,
            address=c.address,
            loyalty_points=c.loyalty_points,
            created_at=c.created_at.isoformat(),
            updated_at=c.updated_at.isoformat(),
        )


class CustomerListResponse(BaseModel):
    customers: list[CustomerOut]
    total: int
    limit: int
    offset: int


class CustomerStatsResponse(BaseModel):
    total_customers: int
    total_loyalty_points: int
    avg_loyalty_points: float | None

    @classmethod
    def from_domain(cls, s: CustomerStats) -> "CustomerStatsResponse":
        return cls(
            total_customers=s.total_customers,
            total_loyalty_points=s.total_loyalty_points,
            avg_loyalty_points=s.avg_loyalty_points,
        )
