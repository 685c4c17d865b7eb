import logging
from typing import Any, Optional

from jose import ExpiredSignatureError, JWTError, jwt
from pydantic import ValidationError

from src.baseplate.core.config import settings
from src.baseplate.core.exceptions import InvalidToken
from src.baseplate.schemas.auth import AppMetadata, TokenClaims


def _display_name(user_metadata: dict[str, Any]) -> Optional[str]:
    """Build a display name from whichever provider fields are present."""
    if user_metadata.get("full_name"):
        return user_metadata["full_name"]
    # google
    if user_metadata.get("firstName") and user_metadata.get("lastName"):
        return f"{user_metadata['firstName']} {user_metadata['lastName']}"
    # linkedin
    if user_metadata.get("given_name") and user_metadata.get("family_name"):
        return f"{user_metadata['given_name']} {user_metadata['family_name']}"
    return None


class TokenDecoder:
    """Verifies Supabase access tokens locally with the project JWT secret."""

    def __init__(
        self,
        secret: Optional[str] = None,
        algorithms: Optional[list[str]] = None,
        audience: Optional[str] = None,
    ):
        self.secret = secret or settings.SUPABASE_JWT_SECRET
        self.algorithms = algorithms or settings.SUPABASE_JWT_ALGORITHMS
        self.audience = audience or settings.SUPABASE_JWT_AUDIENCE
        self.logger = logging.getLogger(__name__)

    def verify_and_decode(self, token: str) -> TokenClaims:
        """Verify signature, expiry and audience of a token and return its claims.

        Args:
            token: Raw bearer token

        Returns:
            TokenClaims: Subject, email, display name and app_metadata

        Raises:
            InvalidToken: If the token is expired, forged, malformed or has no subject
        """
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=self.algorithms,
                audience=self.audience,
            )
        except ExpiredSignatureError:
            self.logger.warning("Token verification failed: token is expired")
            raise InvalidToken("Token has expired")
        except JWTError as e:
            self.logger.warning(f"Token verification failed: {str(e)}")
            raise InvalidToken("Invalid token")

        if not isinstance(payload, dict) or not payload.get("sub"):
            self.logger.warning("Token verification failed: no subject claim")
            raise InvalidToken("Invalid token payload")

        try:
            app_metadata = AppMetadata.model_validate(payload.get("app_metadata") or {})
        except ValidationError as e:
            self.logger.warning(f"Token verification failed: bad app_metadata: {e.errors()}")
            raise InvalidToken("Invalid token payload")

        user_metadata = payload.get("user_metadata") or {}
        return TokenClaims(
            subject=payload["sub"],
            email=payload.get("email"),
            name=_display_name(user_metadata),
            picture=user_metadata.get("picture"),
            app_metadata=app_metadata,
            raw=payload,
        )
