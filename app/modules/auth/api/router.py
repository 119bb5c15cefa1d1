"""Registration and login"""
from typing import Any

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.deps import get_db
from app.modules.auth.schemas.auth import AuthData, LoginRequest
from app.modules.auth.services.auth import login, register_user
from app.modules.user_management.schemas.user import User as UserSchema, UserCreate

router = APIRouter()

@router.post("/register", response_model=UserSchema, status_code=status.HTTP_201_CREATED)
def register(
    *,
    db: Session = Depends(get_db),
    user_in: UserCreate,
) -> Any:
    """Create a new account"""
    return register_user(db, user_in)

@router.post("/login", response_model=AuthData)
def login_for_token(
    *,
    db: Session = Depends(get_db),
    credentials: LoginRequest,
) -> Any:
    """Exchange email and password for a bearer token"""
    return login(db, credentials.email, credentials.password)
