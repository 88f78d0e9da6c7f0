# src/cs_customer/domain/repository.py
"""Repository Protocol: dependency inversion for testability.

Unit tests inject an in-memory store that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.cs_customer.domain.models import (
    Customer,
    CustomerPatch,
    CustomerStats,
    NewCustomer,
)


class CustomerRepositoryProtocol(Protocol):
    async def list_customers(
        self,
        db: AsyncSession,
        tenant_id: str,
        search: str | None,
        limit: int,
        offset: int,
    ) -> tuple[list[Customer], int]: ...

    async def get_customer(
        self,
        db: AsyncSession,
        customer_id: str,
        tenant_id: str,
    ) -> Customer | None: ...

    async def email_exists(
        self,
        db: AsyncSession,
        tenant_id: str,
        email: str,
    ) -> bool: ...

    async def insert_customer(
        self,
        db: AsyncSession,
        new: NewCustomer,
    ) -> Customer: ...

    async def update_customer(
        self,
        db: AsyncSession,
        customer_id: str,
        tenant_id: str,
        patch: CustomerPatch,
    ) -> Customer | None: ...

    async def get_stats(
        self,
        db: AsyncSession,
        tenant_id: str,
    ) -> CustomerStats: ...
