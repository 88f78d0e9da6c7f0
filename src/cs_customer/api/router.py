"""cs_customer REST endpoints.

GET  /customers                     filtered, paginated list (cached 60s)
GET  /customers/stats/{tenant_id}   tenant aggregates (cached 120s)
GET  /customers/{customer_id}       single customer (cached 300s)
POST /customers                     create; invalidates the tenant's lists
PUT  /customers/{customer_id}       partial update; invalidates item + lists
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.cs_common.database import get_db_session
from src.cs_common.response import ApiResponse, success_response
from src.cs_customer.application.schemas import (
    CustomerCreateRequest,
    CustomerUpdateRequest,
)
from src.cs_customer.application.service import CustomerService

router = APIRouter(prefix="/customers", tags=["customers"])

_service = CustomerService()


@router.get("")
async def list_customers(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    tenant_id: str = Query(..., description="Tenant scope (required)"),
    search: str | None = Query(
        None, description="Case-insensitive substring of email or full name"
    ),
    limit: int | None = Query(None, description="Page size; capped server-side"),
    offset: int | None = Query(None),
) -> ApiResponse:
    result = await _service.list_customers(db, tenant_id, search, limit, offset)
    return success_response(result.model_dump(), request)


# Registered before /{customer_id} so "stats" is never read as an id
@router.get("/stats/{tenant_id}")
async def get_stats(
    tenant_id: str,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_stats(db, tenant_id)
    return success_response(result.model_dump(), request)


@router.get("/{customer_id}")
async def get_customer(
    customer_id: UUID,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    tenant_id: str = Query(...),
) -> ApiResponse:
    result = await _service.get_customer(db, str(customer_id), tenant_id)
    return success_response(result.model_dump(), request)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_customer(
    body: CustomerCreateRequest,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.create_customer(
        db,
        tenant_id=body.tenant_id,
        email=body.email,
        password=body.password,
        full_name=body.full_name,
        phone=body.phone,
        address=body.address,
    )
    return success_response(result.model_dump(), request, message="Customer created")


@router.put("/{customer_id}")
async def update_customer(
    customer_id: UUID,
    body: CustomerUpdateRequest,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.update_customer(
        db, str(customer_id), body.tenant_id, body.to_patch()
    )
    return success_response(result.model_dump(), request, message="Customer updated")
