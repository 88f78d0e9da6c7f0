"""CustomerRepository: concrete implementation of CustomerRepositoryProtocol.

All queries use raw text() SQL (no ORM). Dynamic statements (list/count,
partial update) come from query_builder; the fixed ones live here.

Driver connectivity failures surface as StoreUnavailableError; a unique
violation on insert surfaces as CustomerExistsError. Anything else propagates.
"""

import json
import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import (
    IntegrityError,
    InterfaceError,
    OperationalError,
)
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession

from src.cs_common.errors import CustomerExistsError, StoreUnavailableError
from src.cs_customer.domain.models import (
    Customer,
    CustomerPatch,
    CustomerStats,
    NewCustomer,
)
from src.cs_customer.infrastructure.query_builder import (
    PUBLIC_COLUMNS,
    SqlStatement,
    build_list_queries,
    build_update_statement,
    encode_json,
)

logger = logging.getLogger(__name__)

_UNIQUE_VIOLATION = "23505"

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_GET_CUSTOMER_SQL = text(f"""
    SELECT {PUBLIC_COLUMNS}
    FROM customers
    WHERE id = CAST(:customer_id AS UUID) AND tenant_id = :tenant_id
""")

_EMAIL_EXISTS_SQL = text("""
    SELECT 1
    FROM customers
    WHERE tenant_id = :tenant_id AND email = :email
    LIMIT 1
""")

_INSERT_CUSTOMER_SQL = text(f"""
    INSERT INTO customers
        (tenant_id, email, password_hash, full_name, phone, address,
         loyalty_points, created_at, updated_at)
    VALUES
        (:tenant_id, :email, :password_hash, :full_name, :phone,
         CAST(:address AS JSONB), 0, NOW(), NOW())
    RETURNING {PUBLIC_COLUMNS}
""")

_STATS_SQL = text("""
    SELECT COUNT(*) AS total_customers,
           COALESCE(SUM(loyalty_points), 0) AS total_loyalty_points,
           AVG(loyalty_points) AS avg_loyalty_points
    FROM customers
    WHERE tenant_id = :tenant_id
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _decode_address(value: Any) -> dict[str, Any] | None:
    # JSONB comes back decoded when the driver codec is registered, text otherwise
    if isinstance(value, str | bytes):
        return json.loads(value)
    return value


def _row_to_customer(row: Any) -> Customer:
    return Customer(
        id=str(row.id),
        tenant_id=row.tenant_id,
        email=row.email,
        full_name=row.full_name,
        phone=row.phone,
        address=_decode_address(row.address),
        loyalty_points=row.loyalty_points,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _sqlstate(exc: IntegrityError) -> str | None:
    orig = exc.orig
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class CustomerRepository:
    """Stateless; the caller owns the session and its transaction."""

    async def _execute(
        self,
        db: AsyncSession,
        statement: Any,
        params: Mapping[str, Any],
    ) -> Any:
        try:
            return await db.execute(statement, dict(params))
        except (OperationalError, InterfaceError, PoolTimeoutError, OSError) as exc:
            logger.error("Customer store unreachable: %s", exc.__class__.__name__)
            raise StoreUnavailableError() from exc

    async def _run(self, db: AsyncSession, stmt: SqlStatement) -> Any:
        return await self._execute(db, text(stmt.sql), stmt.params)

    async def list_customers(
        self,
        db: AsyncSession,
        tenant_id: str,
        search: str | None,
        limit: int,
        offset: int,
    ) -> tuple[list[Customer], int]:
        page_stmt, count_stmt = build_list_queries(tenant_id, search, limit, offset)
        page_result = await self._run(db, page_stmt)
        customers = [_row_to_customer(row) for row in page_result.fetchall()]
        count_result = await self._run(db, count_stmt)
        total = int(count_result.scalar_one())
        return customers, total

    async def get_customer(
        self, db: AsyncSession, customer_id: str, tenant_id: str
    ) -> Customer | None:
        result = await self._execute(
            db,
            _GET_CUSTOMER_SQL,
            {"customer_id": customer_id, "tenant_id": tenant_id},
        )
        row = result.fetchone()
        return _row_to_customer(row) if row else None

    async def email_exists(
        self, db: AsyncSession, tenant_id: str, email: str
    ) -> bool:
        result = await self._execute(
            db, _EMAIL_EXISTS_SQL, {"tenant_id": tenant_id, "email": email}
        )
        return result.fetchone() is not None

    async def insert_customer(self, db: AsyncSession, new: NewCustomer) -> Customer:
        try:
            result = await self._execute(
                db,
                _INSERT_CUSTOMER_SQL,
                {
                    "tenant_id": new.tenant_id,
                    "email": new.email,
                    "password_hash": new.password_hash,
                    "full_name": new.full_name,
                    "phone": new.phone,
                    "address": encode_json(new.address),
                },
            )
        except IntegrityError as exc:
            # UNIQUE (tenant_id, email) is the authoritative guard; the
            # service pre-check only short-circuits the common case
            if _sqlstate(exc) == _UNIQUE_VIOLATION:
                raise CustomerExistsError() from exc
            raise
        return _row_to_customer(result.fetchone())

    async def update_customer(
        self,
        db: AsyncSession,
        customer_id: str,
        tenant_id: str,
        patch: CustomerPatch,
    ) -> Customer | None:
        stmt = build_update_statement(customer_id, tenant_id, patch)
        result = await self._run(db, stmt)
        row = result.fetchone()
        return _row_to_customer(row) if row else None

    async def get_stats(self, db: AsyncSession, tenant_id: str) -> CustomerStats:
        result = await self._execute(db, _STATS_SQL, {"tenant_id": tenant_id})
        row = result.fetchone()
        avg = row.avg_loyalty_points
        return CustomerStats(
            total_customers=int(row.total_customers),
            total_loyalty_points=int(row.total_loyalty_points),
            avg_loyalty_points=round(float(avg), 2) if avg is not None else None,
        )
