import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.baseplate.core.auth_context import ActingContext
from src.baseplate.core.exceptions import BadRequest, Conflict, Forbidden, NotFound
from src.baseplate.core.system_roles import is_customer_success
from src.baseplate.crud.crud_customer import customer as crud_customer
from src.baseplate.crud.crud_customer import customer_success_assignment as crud_assignment
from src.baseplate.crud.crud_user import user as crud_user
from src.baseplate.models.core import CustomerSuccessOwnedCustomer
from src.baseplate.services.user_service import scoped_customer_id


class CustomerSuccessService:
    """Maintains which customers a customer-success user looks after.

    Outside of system administrators, assignments can only be read or changed
    for the acting customer.
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def _ensure_customer_in_scope(self, context: ActingContext, customer_id: UUID) -> None:
        scope = scoped_customer_id(context)
        if scope is not None and scope != customer_id:
            raise Forbidden("You can only manage assignments of your own customer", reason="customer_denied")

    async def list_assignments(
        self,
        db: AsyncSession,
        context: ActingContext,
        user_id: Optional[UUID] = None,
        customer_id: Optional[UUID] = None,
    ) -> list[CustomerSuccessOwnedCustomer]:
        scope = scoped_customer_id(context)
        if scope is not None:
            if customer_id is not None and customer_id != scope:
                raise Forbidden("You can only manage assignments of your own customer", reason="customer_denied")
            customer_id = scope
        return await crud_assignment.get_multi_filtered(db, user_id=user_id, customer_id=customer_id)

    async def assign(
        self, db: AsyncSession, context: ActingContext, user_id: UUID, customer_id: UUID
    ) -> CustomerSuccessOwnedCustomer:
        """Assign a customer-success user to a customer.

        Raises:
            Forbidden: If the customer is outside the acting customer
            NotFound: If the customer or the user does not exist
            BadRequest: If the user is not a customer-success user
            Conflict: If the assignment already exists
        """
        self._ensure_customer_in_scope(context, customer_id)
        if await crud_customer.get(db, id=customer_id) is None:
            raise NotFound("Customer not found")
        user = await crud_user.get(db, id=user_id)
        if user is None or user.deleted_at is not None:
            raise NotFound("User not found")
        if not is_customer_success(user):
            raise BadRequest("User is not a customer success user")
        if await crud_assignment.get_by_pair(db, user_id=user_id, customer_id=customer_id):
            raise Conflict("Customer success user is already assigned to this customer")

        assignment = await crud_assignment.create(db, user_id=user_id, customer_id=customer_id)
        self.logger.info(
            f"Assigned customer success user {user_id} to customer {customer_id} by {context.identity_label}"
        )
        return assignment

    async def unassign(self, db: AsyncSession, context: ActingContext, assignment_id: UUID) -> None:
        assignment = await crud_assignment.get(db, id=assignment_id)
        if assignment is None:
            raise NotFound("Assignment not found")
        self._ensure_customer_in_scope(context, assignment.customer_id)
        await crud_assignment.remove(db, db_obj=assignment)
        self.logger.info(
            f"Removed customer success user {assignment.user_id} from customer {assignment.customer_id}"
        )


customer_success_service = CustomerSuccessService()
