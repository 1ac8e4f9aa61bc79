"""
Customer records.

Registration and credential handling belong to the auth layer; this store
only persists the profile and the already-hashed credential, and reports
duplicate identity fields as a Conflict.
"""
from __future__ import annotations

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFound
from app.models.assessment import Customer
from app.schemas.assessment import CustomerProfile
from app.services.persistence import unit_of_work

logger = structlog.get_logger()


class CustomerStore:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def register(self, profile: CustomerProfile, password_hash: str) -> Customer:
        customer = Customer(**profile.model_dump(exclude={"password_hash"}), password_hash=password_hash)
        async with unit_of_work(
            self.session,
            "register_customer",
            conflict_message="User with this email, mobile, PAN, or account number already exists.",
        ):
            self.session.add(customer)
            await self.session.flush()

        logger.info("customer_registered", customer_id=customer.id)
        return customer

    async def get(self, customer_id: int) -> Customer:
        async with unit_of_work(self.session, "get_customer", commit=False):
            customer = await self.session.get(Customer, customer_id)
        if customer is None:
            raise NotFound(f"Customer {customer_id} not found")
        return customer
