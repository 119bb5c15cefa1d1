from typing import Optional

from fastapi import Header

from app.core.storage import get_storage
from app.db.session import get_db
from app.modules.auth.context import AuthContext, resolve_auth_context

__all__ = ["get_auth_context", "get_db", "get_storage"]

def get_auth_context(authorization: Optional[str] = Header(None)) -> AuthContext:
    """
    Dependency resolving the caller's auth context. Never raises.
    """
    return resolve_auth_context(authorization)
