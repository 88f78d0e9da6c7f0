"""Deterministic cache keys for customer reads.

  customers:item:{tenant}:{id}
  customers:list:{tenant}:{search}:{limit}:{offset}
  customers:stats:{tenant}

Caller-supplied parts are percent-encoded, so a ``:`` inside a tenant id can
never make one tenant's list prefix cover another tenant's keys. All list
pages of a tenant share ``list_prefix(tenant)`` and are dropped together by a
single prefix delete.
"""

from urllib.parse import quote

_NAMESPACE = "customers"
_NO_SEARCH = "*"


def _part(value: str) -> str:
    return quote(value, safe="")


def normalize_search(search: str | None) -> str | None:
    """Trim; blank means no filter.

    Per-character ``lower()`` like ILIKE. ``casefold()`` would rewrite ``ß`` to
    ``ss``, which ILIKE never matches against a stored ``ß``.
    """
    if search is None:
        return None
    search = search.strip()
    return search.lower() if search else None


def item_key(tenant_id: str, customer_id: str) -> str:
    return f"{_NAMESPACE}:item:{_part(tenant_id)}:{_part(customer_id)}"


def list_prefix(tenant_id: str) -> str:
    return f"{_NAMESPACE}:list:{_part(tenant_id)}:"


def list_key(tenant_id: str, search: str | None, limit: int, offset: int) -> str:
    search_part = _part(search) if search else _NO_SEARCH
    return f"{list_prefix(tenant_id)}{search_part}:{limit}:{offset}"


def stats_key(tenant_id: str) -> str:
    return f"{_NAMESPACE}:stats:{_part(tenant_id)}"
