"""
Customer records.

POST /v1/customers        → registration hand-off from the auth layer (credential already hashed)
GET  /v1/customers/{id}   → profile incl. last access time

Duplicate email / mobile / PAN / account number → 409 CONFLICT.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import verify_token
from app.models.database import get_db
from app.schemas.assessment import CustomerRegistration, CustomerResponse
from app.services.customer_store import CustomerStore

router = APIRouter(prefix="/v1/customers", tags=["customers"])


@router.post("", response_model=CustomerResponse, status_code=201)
async def register_customer(
    request: CustomerRegistration,
    token: dict = Depends(verify_token),
    db: AsyncSession = Depends(get_db),
) -> CustomerResponse:
    customer = await CustomerStore(db).register(request, password_hash=request.password_hash)
    return CustomerResponse.model_validate(customer)


@router.get("/{customer_id}", response_model=CustomerResponse)
async def get_customer(
    customer_id: int,
    token: dict = Depends(verify_token),
    db: AsyncSession = Depends(get_db),
) -> CustomerResponse:
    return CustomerResponse.model_validate(await CustomerStore(db).get(customer_id))
