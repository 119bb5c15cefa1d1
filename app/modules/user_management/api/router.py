from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.deps import get_auth_context, get_db
from app.modules.auth.context import AuthContext
from app.modules.user_management.schemas.user import StatusUpdate, User as UserSchema, UserWithPosts
from app.modules.user_management.services.user import get_current_user, update_status

router = APIRouter()

@router.get("/me", response_model=UserWithPosts)
def read_user_me(
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
) -> Any:
    """Get current user"""
    return get_current_user(db, auth)

@router.patch("/me/status", response_model=UserSchema)
def update_user_status(
    *,
    db: Session = Depends(get_db),
    status_in: StatusUpdate,
    auth: AuthContext = Depends(get_auth_context),
) -> Any:
    """Update current user's status"""
    return update_status(db, auth, status_in.status)
