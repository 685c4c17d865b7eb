from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class AppMetadata(BaseModel):
    """Server-controlled claims carried in the token's ``app_metadata``.

    Only the context endpoint writes these (through the Supabase admin API),
    so they are trusted once the token signature is verified.
    """
    model_config = ConfigDict(extra="ignore")

    customer_id: Optional[str] = None
    customer_ids: list[str] = []
    impersonated_user_id: Optional[str] = None
    impersonation_allowed: bool = False
    context_validated_at: Optional[int] = None


class TokenClaims(BaseModel):
    """Verified claims of a Supabase access token."""
    subject: str
    email: Optional[str] = None
    name: Optional[str] = None
    picture: Optional[str] = None
    app_metadata: AppMetadata = Field(default_factory=AppMetadata)
    raw: dict[str, Any] = {}


class RefreshContextRequest(BaseModel):
    """Requested customer / impersonation context."""
    customer_id: Optional[str] = None
    impersonated_user_id: Optional[str] = None


class RefreshContextResponse(BaseModel):
    updated: bool
    message: str
