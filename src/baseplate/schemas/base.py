from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Base schema with common fields."""
    model_config = ConfigDict(from_attributes=True)


class TimestampSchema(BaseSchema):
    """Schema with timestamp fields."""
    created_at: datetime
    updated_at: datetime


class IDSchema(BaseSchema):
    """Schema with ID field."""
    id: UUID


class BaseResponseSchema(TimestampSchema, IDSchema):
    """Base response schema with ID and timestamp fields."""
    pass


class MessageResponse(BaseSchema):
    message: str
