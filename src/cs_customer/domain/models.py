"""Domain models for cs_customer: pure dataclasses, no I/O."""

from dataclasses import dataclass, fields
from datetime import datetime
from typing import Any, Final


class _Unset:
    """Marker for "field not supplied" (distinct from an explicit None)."""

    _instance: "_Unset | None" = None

    def __new__(cls) -> "_Unset":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Final = _Unset()


@dataclass
class Customer:
    """A stored customer. password_hash is never loaded into this type."""

    id: str
    tenant_id: str
    email: str
    full_name: str | None
    phone: str | None
    address: dict[str, Any] | None
    loyalty_points: int
    created_at: datetime
    updated_at: datetime


@dataclass
class NewCustomer:
    tenant_id: str
    email: str
    password_hash: str
    full_name: str | None
    phone: str | None
    address: dict[str, Any] | None


@dataclass(frozen=True)
class CustomerPatch:
    """Closed set of mutable columns. Anything else cannot be targeted."""

    full_name: str | None | _Unset = UNSET
    phone: str | None | _Unset = UNSET
    address: dict[str, Any] | None | _Unset = UNSET
    loyalty_points: int | _Unset = UNSET

    def changes(self) -> dict[str, Any]:
        """Supplied fields only, in declaration order."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not UNSET
        }

    def is_empty(self) -> bool:
        return not self.changes()


@dataclass
class CustomerStats:
    total_customers: int
    total_loyalty_points: int
    avg_loyalty_points: float | None  # None when the tenant has no customers
