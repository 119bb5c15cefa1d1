from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError
from app.modules.auth.context import AuthContext, require_user_id
from app.modules.user_management.models.user import User

def get_user(db: Session, user_id: str) -> Optional[User]:
    """Get user by ID"""
    return db.query(User).filter(User.id == user_id).first()

def get_user_by_email(db: Session, email: str) -> Optional[User]:
    """Get user by (already normalized) email"""
    return db.query(User).filter(User.email == email).first()

def get_current_user(db: Session, auth: AuthContext) -> User:
    """Return the caller's own record"""
    user = get_user(db, user_id=require_user_id(auth))
    if not user:
        raise NotFoundError("No user found!")
    return user

def update_status(db: Session, auth: AuthContext, status: str) -> User:
    """Overwrite the caller's status text"""
    user = get_current_user(db, auth)
    user.status = status
    user.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(user)
    return user
