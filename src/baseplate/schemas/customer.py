from uuid import UUID

from pydantic import BaseModel

from .base import BaseResponseSchema


class CustomerSuccessAssignmentCreate(BaseModel):
    """Assign a customer-success user to a customer they look after."""
    user_id: UUID
    customer_id: UUID


class CustomerSuccessAssignmentResponse(BaseResponseSchema):
    user_id: UUID
    customer_id: UUID
