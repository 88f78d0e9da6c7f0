"""CustomerService: cache-aside reads, invalidate-after-commit writes.

Reads:  key -> cache get -> hit: return | miss: store -> cache set (TTL) -> return
Writes: validate -> store mutation in a transaction -> invalidate -> return

The cache is an accelerator only. CacheUnavailableError is caught here and
never fails a request: reads fall through to the store, write-back and
invalidation are skipped with a warning. Store errors propagate.

Staleness windows (accepted, bounded by TTL):
  - stats are not invalidated by writes;
  - a read that missed before a write commits may write back the old value
    after that write's invalidation ran.
"""

import logging
import uuid
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as SchemaValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.cs_common.cache import CacheProtocol, RedisCache
from src.cs_common.errors import (
    CacheUnavailableError,
    CustomerExistsError,
    CustomerNotFoundError,
    InvalidFieldError,
    MissingFieldError,
    NoFieldsToUpdateError,
)
from src.cs_common.password import hash_password_async
from src.cs_customer.application.schemas import (
    CustomerListResponse,
    CustomerOut,
    CustomerStatsResponse,
)
from src.cs_customer.domain import cache_keys
from src.cs_customer.domain.models import CustomerPatch, NewCustomer
from src.cs_customer.domain.repository import CustomerRepositoryProtocol
from src.cs_customer.infrastructure.persistence import CustomerRepository
from src.cs_customer.infrastructure.query_builder import clamp_pagination

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def _require(**values: Any) -> None:
    missing = [
        name
        for name, value in values.items()
        if value is None or (isinstance(value, str) and not value.strip())
    ]
    if missing:
        raise MissingFieldError(*missing)


def _check_customer_id(customer_id: str) -> None:
    try:
        uuid.UUID(customer_id)
    except ValueError as exc:
        raise InvalidFieldError("id", "must be a UUID") from exc


def normalize_email(email: str) -> str:
    return email.strip().lower()


class CustomerService:
    """Stateless service; instantiate once, reuse across requests."""

    def __init__(
        self,
        repo: CustomerRepositoryProtocol | None = None,
        cache: CacheProtocol | None = None,
    ) -> None:
        self._repo: CustomerRepositoryProtocol = repo or CustomerRepository()
        self._cache: CacheProtocol = cache or RedisCache()

    # ------------------------------------------------------------------
    # Cache helpers (never raise on cache failure)
    # ------------------------------------------------------------------

    async def _cache_read(self, key: str, model: type[M]) -> M | None:
        try:
            raw = await self._cache.get(key)
        except CacheUnavailableError:
            logger.warning("Cache unavailable on read, using store: key=%s", key)
            return None
        if raw is None:
            logger.debug("Cache miss: key=%s", key)
            return None
        try:
            value = model.model_validate_json(raw)
        except SchemaValidationError:
            logger.warning("Discarding unreadable cache entry: key=%s", key)
            return None
        logger.debug("Cache hit: key=%s", key)
        return value

    async def _cache_write(self, key: str, value: BaseModel, ttl_seconds: int) -> None:
        try:
            await self._cache.set_with_ttl(key, value.model_dump_json(), ttl_seconds)
        except CacheUnavailableError:
            logger.warning("Cache unavailable on write-back: key=%s", key)

    async def _invalidate(
        self, keys: tuple[str, ...] = (), prefixes: tuple[str, ...] = ()
    ) -> None:
        for key in keys:
            try:
                await self._cache.delete(key)
            except CacheUnavailableError:
                logger.warning("Cache invalidation skipped: key=%s", key)
        for prefix in prefixes:
            try:
                await self._cache.delete_by_prefix(prefix)
            except CacheUnavailableError:
                logger.warning("Cache invalidation skipped: prefix=%s", prefix)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def list_customers(
        self,
        db: AsyncSession,
        tenant_id: str,
        search: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> CustomerListResponse:
        _require(tenant_id=tenant_id)
        search = cache_keys.normalize_search(search)
        limit, offset = clamp_pagination(limit, offset)

        key = cache_keys.list_key(tenant_id, search, limit, offset)
        cached = await self._cache_read(key, CustomerListResponse)
        if cached is not None:
            return cached

        customers, total = await self._repo.list_customers(
            db, tenant_id, search, limit, offset
        )
        response = CustomerListResponse(
            customers=[CustomerOut.from_domain(c) for c in customers],
            total=total,
            limit=limit,
            offset=offset,
        )
        await self._cache_write(key, response, settings.CACHE_TTL_LIST_SECONDS)
        return response

    async def get_customer(
        self, db: AsyncSession, customer_id: str, tenant_id: str
    ) -> CustomerOut:
        _require(id=customer_id, tenant_id=tenant_id)
        _check_customer_id(customer_id)

        key = cache_keys.item_key(tenant_id, customer_id)
        cached = await self._cache_read(key, CustomerOut)
        if cached is not None:
            return cached

        customer = await self._repo.get_customer(db, customer_id, tenant_id)
        if customer is None:
            raise CustomerNotFoundError(customer_id)
        out = CustomerOut.from_domain(customer)
        await self._cache_write(key, out, settings.CACHE_TTL_CUSTOMER_SECONDS)
        return out

    async def get_stats(
        self, db: AsyncSession, tenant_id: str
    ) -> CustomerStatsResponse:
        _require(tenant_id=tenant_id)

        key = cache_keys.stats_key(tenant_id)
        cached = await self._cache_read(key, CustomerStatsResponse)
        if cached is not None:
            return cached

        stats = await self._repo.get_stats(db, tenant_id)
        response = CustomerStatsResponse.from_domain(stats)
        await self._cache_write(key, response, settings.CACHE_TTL_STATS_SECONDS)
        return response

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create_customer(
        self,
        db: AsyncSession,
        tenant_id: str,
        email: str,
        password: str,
        full_name: str | None = None,
        phone: str | None = None,
        address: dict[str, Any] | None = None,
    ) -> CustomerOut:
        """Insert a customer; (tenant_id, email) must be free.

        The pre-check is a fast path. Two concurrent creates can both pass it;
        the loser then hits the UNIQUE constraint, which the repository maps
        to the same CustomerExistsError.
        """
        _require(tenant_id=tenant_id, email=email, password=password)
        email = normalize_email(email)
        # bcrypt runs before a pooled connection is checked out
        password_hash = await hash_password_async(password)

        async with db.begin():
            if await self._repo.email_exists(db, tenant_id, email):
                raise CustomerExistsError()
            customer = await self._repo.insert_customer(
                db,
                NewCustomer(
                    tenant_id=tenant_id,
                    email=email,
                    password_hash=password_hash,
                    full_name=full_name,
                    phone=phone,
                    address=address,
                ),
            )

        await self._invalidate(prefixes=(cache_keys.list_prefix(tenant_id),))
        logger.info("Customer created: tenant=%s id=%s", tenant_id, customer.id)
        return CustomerOut.from_domain(customer)

    async def update_customer(
        self,
        db: AsyncSession,
        customer_id: str,
        tenant_id: str,
        patch: CustomerPatch,
    ) -> CustomerOut:
        _require(id=customer_id, tenant_id=tenant_id)
        _check_customer_id(customer_id)
        if patch.is_empty():
            raise NoFieldsToUpdateError()

        async with db.begin():
            customer = await self._repo.update_customer(
                db, customer_id, tenant_id, patch
            )
        if customer is None:
            raise CustomerNotFoundError(customer_id)

        await self._invalidate(
            keys=(cache_keys.item_key(tenant_id, customer_id),),
            prefixes=(cache_keys.list_prefix(tenant_id),),
        )
        logger.info(
            "Customer updated: tenant=%s id=%s fields=%s",
            tenant_id,
            customer_id,
            ",".join(patch.changes()),
        )
        return CustomerOut.from_domain(customer)
