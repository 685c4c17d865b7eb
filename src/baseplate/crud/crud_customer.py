from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.baseplate.crud.base import CRUDBase
from src.baseplate.models.core import Customer, CustomerSuccessOwnedCustomer


class CRUDCustomer(CRUDBase[Customer]):
    """Read access to customers and customer-success assignments."""

    async def is_customer_success_assigned(
        self, db: AsyncSession, *, user_id: UUID, customer_id: UUID
    ) -> bool:
        stmt = select(CustomerSuccessOwnedCustomer.id).where(
            CustomerSuccessOwnedCustomer.user_id == user_id,
            CustomerSuccessOwnedCustomer.customer_id == customer_id,
        )
        result = await db.execute(stmt)
        return result.first() is not None


class CRUDCustomerSuccessAssignment(CRUDBase[CustomerSuccessOwnedCustomer]):
    """Assignments of customer-success users to the customers they look after."""

    async def get_multi_filtered(
        self,
        db: AsyncSession,
        *,
        user_id: Optional[UUID] = None,
        customer_id: Optional[UUID] = None,
    ) -> list[CustomerSuccessOwnedCustomer]:
        stmt = select(CustomerSuccessOwnedCustomer).order_by(CustomerSuccessOwnedCustomer.created_at)
        if user_id is not None:
            stmt = stmt.where(CustomerSuccessOwnedCustomer.user_id == user_id)
        if customer_id is not None:
            stmt = stmt.where(CustomerSuccessOwnedCustomer.customer_id == customer_id)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def get_by_pair(
        self, db: AsyncSession, *, user_id: UUID, customer_id: UUID
    ) -> Optional[CustomerSuccessOwnedCustomer]:
        stmt = select(CustomerSuccessOwnedCustomer).where(
            CustomerSuccessOwnedCustomer.user_id == user_id,
            CustomerSuccessOwnedCustomer.customer_id == customer_id,
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def create(
        self, db: AsyncSession, *, user_id: UUID, customer_id: UUID
    ) -> CustomerSuccessOwnedCustomer:
        assignment = CustomerSuccessOwnedCustomer(user_id=user_id, customer_id=customer_id)
        db.add(assignment)
        await db.commit()
        await db.refresh(assignment)
        return assignment

    async def remove(self, db: AsyncSession, *, db_obj: CustomerSuccessOwnedCustomer) -> None:
        await db.delete(db_obj)
        await db.commit()


customer = CRUDCustomer(Customer)
customer_success_assignment = CRUDCustomerSuccessAssignment(CustomerSuccessOwnedCustomer)
