from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status

from src.baseplate.core.auth_context import ActingContext
from src.baseplate.core.permissions import require_permissions
from src.baseplate.db.session import SessionDep
from src.baseplate.models.core import CustomerSuccessOwnedCustomer
from src.baseplate.schemas.base import MessageResponse
from src.baseplate.schemas.customer import (
    CustomerSuccessAssignmentCreate,
    CustomerSuccessAssignmentResponse,
)
from src.baseplate.services.customer_success_service import customer_success_service

router = APIRouter()

LIST_CUSTOMERS = "CustomerManagement:listCustomers"
EDIT_CUSTOMER = "CustomerManagement:editCustomer"


@router.get("", response_model=list[CustomerSuccessAssignmentResponse])
async def read_assignments(
    context: Annotated[ActingContext, Depends(require_permissions("cs_assignments:list", LIST_CUSTOMERS))],
    db: SessionDep,
    user_id: Optional[UUID] = None,
    customer_id: Optional[UUID] = None,
) -> list[CustomerSuccessOwnedCustomer]:
    """List customer-success assignments, optionally filtered by user or customer."""
    return await customer_success_service.list_assignments(
        db, context, user_id=user_id, customer_id=customer_id
    )


@router.post("", response_model=CustomerSuccessAssignmentResponse, status_code=status.HTTP_201_CREATED)
async def create_assignment(
    assignment_in: CustomerSuccessAssignmentCreate,
    context: Annotated[ActingContext, Depends(require_permissions("cs_assignments:create", EDIT_CUSTOMER))],
    db: SessionDep,
) -> CustomerSuccessOwnedCustomer:
    return await customer_success_service.assign(
        db, context, assignment_in.user_id, assignment_in.customer_id
    )


@router.delete("/{assignment_id}", response_model=MessageResponse)
async def delete_assignment(
    assignment_id: UUID,
    context: Annotated[ActingContext, Depends(require_permissions("cs_assignments:delete", EDIT_CUSTOMER))],
    db: SessionDep,
) -> MessageResponse:
    await customer_success_service.unassign(db, context, assignment_id)
    return MessageResponse(message="Assignment removed successfully")
