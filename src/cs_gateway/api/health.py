"""Operational endpoints: liveness/dependency health and pool metrics.

/health returns 503 when the store is unreachable. A Redis outage only
degrades the service (reads fall through to the store), so it reports
``degraded`` with 200.
"""

import logging
import time
from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from config.settings import settings
from src.cs_common.database import engine
from src.cs_common.redis_client import get_redis

logger = logging.getLogger(__name__)

router = APIRouter(tags=["ops"])

_STARTED_AT = time.monotonic()


def _uptime_seconds() -> float:
    return round(time.monotonic() - _STARTED_AT, 1)


async def _database_ok() -> bool:
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as exc:
        logger.warning("Health check: database unreachable (%s)", exc.__class__.__name__)
        return False
    return True


async def _redis_ok() -> bool:
    try:
        client = await get_redis()
        await client.ping()
    except (RedisError, OSError) as exc:
        logger.warning("Health check: redis unreachable (%s)", exc.__class__.__name__)
        return False
    return True


@router.get("/health")
async def health() -> JSONResponse:
    db_ok = await _database_ok()
    redis_ok = await _redis_ok()

    if not db_ok:
        overall, code = "unhealthy", status.HTTP_503_SERVICE_UNAVAILABLE
    elif not redis_ok:
        overall, code = "degraded", status.HTTP_200_OK
    else:
        overall, code = "healthy", status.HTTP_200_OK

    return JSONResponse(
        status_code=code,
        content={
            "status": overall,
            "service": settings.APP_NAME,
            "timestamp": datetime.now(UTC).isoformat(),
            "uptime_seconds": _uptime_seconds(),
            "connections": {
                "database": "connected" if db_ok else "disconnected",
                "redis": "connected" if redis_ok else "disconnected",
            },
        },
    )


@router.get("/metrics")
async def metrics() -> dict[str, Any]:
    pool = engine.pool
    return {
        "service": settings.APP_NAME,
        "uptime_seconds": _uptime_seconds(),
        "database": {
            "pool_size": pool.size(),  # type: ignore[attr-defined]
            "checked_out": pool.checkedout(),  # type: ignore[attr-defined]
            "overflow": pool.overflow(),  # type: ignore[attr-defined]
        },
    }
