"""
Per-request auth context.

The gate never rejects a request: a missing, malformed or unverifiable
bearer token simply produces an anonymous context. Operations that need a
user call ``require_user_id`` themselves.
"""

from dataclasses import dataclass
from typing import Optional
import logging

from app.core.exceptions import AuthError, InvalidTokenError
from app.core.security import verify_access_token

logger = logging.getLogger("app")


@dataclass(frozen=True)
class AuthContext:
    user_id: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    @classmethod
    def anonymous(cls) -> "AuthContext":
        return cls()

    @classmethod
    def for_user(cls, user_id: str) -> "AuthContext":
        return cls(user_id=user_id)


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token of a ``Bearer <token>`` header value, else None"""
    if not authorization:
        return None
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1]


def resolve_auth_context(authorization: Optional[str]) -> AuthContext:
    token = extract_bearer_token(authorization)
    if token is None:
        return AuthContext.anonymous()
    try:
        return AuthContext.for_user(verify_access_token(token))
    except InvalidTokenError:
        logger.info("Bearer token rejected, continuing as anonymous")
        return AuthContext.anonymous()


def require_user_id(auth: AuthContext) -> str:
    if not auth.is_authenticated:
        raise AuthError("Not authenticated!")
    return auth.user_id
