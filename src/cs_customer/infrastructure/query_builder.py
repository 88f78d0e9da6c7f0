"""SQL construction for customer queries.

Every value travels as a bound parameter; statement text is assembled only
from fixed fragments in this module. The list and count statements share one
filter clause so ``total`` always describes the same row set as the page.

asyncpg NULL parameter pattern: JSONB values are bound as text and CAST, so a
None address becomes SQL NULL rather than JSON ``null``.
"""

import json
from dataclasses import dataclass, field
from typing import Any

from config.settings import settings
from src.cs_common.errors import InvalidFieldError, NoFieldsToUpdateError
from src.cs_customer.domain.models import CustomerPatch

PUBLIC_COLUMNS = (
    "id, tenant_id, email, full_name, phone, address, "
    "loyalty_points, created_at, updated_at"
)

# PostgreSQL OFFSET is a BIGINT
MAX_OFFSET = 2**63 - 1

_TENANT_FILTER = "tenant_id = :tenant_id"
_SEARCH_FILTER = (
    "(email ILIKE :search_pattern ESCAPE '\\' "
    "OR full_name ILIKE :search_pattern ESCAPE '\\')"
)

# column -> SET expression. The only columns an UPDATE can ever touch.
_UPDATABLE_COLUMNS: dict[str, str] = {
    "full_name": "full_name = :full_name",
    "phone": "phone = :phone",
    "address": "address = CAST(:address AS JSONB)",
    "loyalty_points": "loyalty_points = :loyalty_points",
}


@dataclass(frozen=True)
class SqlStatement:
    sql: str
    params: dict[str, Any] = field(default_factory=dict)


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so user input matches literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def encode_json(value: Any) -> str | None:
    return None if value is None else json.dumps(value)


def clamp_pagination(
    limit: int | None,
    offset: int | None,
    max_limit: int | None = None,
) -> tuple[int, int]:
    """Defaults for missing values, negatives to 0, limit capped at max_limit.

    An offset past the BIGINT range is rejected rather than clamped.
    """
    cap = settings.CUSTOMER_LIST_MAX_LIMIT if max_limit is None else max_limit
    if limit is None:
        limit = settings.CUSTOMER_LIST_DEFAULT_LIMIT
    if offset is None:
        offset = 0
    offset = int(offset)
    if offset > MAX_OFFSET:
        raise InvalidFieldError("offset", f"must be at most {MAX_OFFSET}")
    return min(max(int(limit), 0), cap), max(offset, 0)


def _filter(tenant_id: str, search: str | None) -> tuple[str, dict[str, Any]]:
    clauses = [_TENANT_FILTER]
    params: dict[str, Any] = {"tenant_id": tenant_id}
    if search:
        clauses.append(_SEARCH_FILTER)
        params["search_pattern"] = f"%{escape_like(search)}%"
    return " AND ".join(clauses), params


def build_list_queries(
    tenant_id: str,
    search: str | None,
    limit: int,
    offset: int,
) -> tuple[SqlStatement, SqlStatement]:
    """Return (page, count) statements over the same predicate.

    ``limit``/``offset`` are expected to be clamped already.
    """
    where, params = _filter(tenant_id, search)
    page = SqlStatement(
        sql=(
            f"SELECT {PUBLIC_COLUMNS} FROM customers WHERE {where} "
            "ORDER BY created_at DESC, id DESC "
            "LIMIT :limit OFFSET :offset"
        ),
        params={**params, "limit": limit, "offset": offset},
    )
    count = SqlStatement(
        sql=f"SELECT COUNT(*) AS total FROM customers WHERE {where}",
        params=dict(params),
    )
    return page, count


def build_update_statement(
    customer_id: str,
    tenant_id: str,
    patch: CustomerPatch,
) -> SqlStatement:
    changes = patch.changes()
    if not changes:
        raise NoFieldsToUpdateError()

    loyalty = changes.get("loyalty_points")
    if "loyalty_points" in changes and (
        not isinstance(loyalty, int) or isinstance(loyalty, bool) or loyalty < 0
    ):
        raise InvalidFieldError("loyalty_points", "must be a non-negative integer")

    assignments: list[str] = []
    params: dict[str, Any] = {"customer_id": customer_id, "tenant_id": tenant_id}
    for column, value in changes.items():
        assignments.append(_UPDATABLE_COLUMNS[column])
        params[column] = encode_json(value) if column == "address" else value
    assignments.append("updated_at = NOW()")

    return SqlStatement(
        sql=(
            f"UPDATE customers SET {', '.join(assignments)} "
            "WHERE id = CAST(:customer_id AS UUID) AND tenant_id = :tenant_id "
            f"RETURNING {PUBLIC_COLUMNS}"
        ),
        params=params,
    )
