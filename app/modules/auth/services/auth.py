import uuid
import logging
from typing import Dict, List

from email_validator import validate_email, EmailNotValidError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import AuthError, ConflictError, ValidationError
from app.core.security import create_access_token, get_password_hash, verify_password
from app.modules.auth.schemas.auth import AuthData
from app.modules.user_management.models.user import User
from app.modules.user_management.schemas.user import UserCreate
from app.modules.user_management.services.user import get_user_by_email

logger = logging.getLogger("app")

MIN_PASSWORD_LENGTH = 5

def normalize_email(email: str) -> str:
    return email.strip().lower()

def _validate_registration(user_in: UserCreate) -> List[Dict[str, str]]:
    errors = []
    try:
        validate_email(user_in.email.strip(), check_deliverability=False)
    except EmailNotValidError:
        errors.append({"field": "email", "message": "E-Mail is invalid."})
    if not user_in.name or not user_in.name.strip():
        errors.append({"field": "name", "message": "Name is required."})
    if len(user_in.password or "") < MIN_PASSWORD_LENGTH:
        errors.append({"field": "password", "message": "Password too short!"})
    return errors

def register_user(db: Session, user_in: UserCreate) -> User:
    """Create a new account. The caller never sees the password hash."""
    errors = _validate_registration(user_in)
    if errors:
        raise ValidationError(errors)

    email = normalize_email(user_in.email)
    if get_user_by_email(db, email=email):
        raise ConflictError("User exists already!")

    user = User(
        id=str(uuid.uuid4()),
        email=email,
        name=user_in.name.strip(),
        hashed_password=get_password_hash(user_in.password),
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration of the same email
        db.rollback()
        raise ConflictError("User exists already!")
    db.refresh(user)
    logger.info(f"Registered user {user.id}")
    return user

def login(db: Session, email: str, password: str) -> AuthData:
    """Exchange credentials for a bearer token.

    Unknown email and wrong password produce the same error.
    """
    user = get_user_by_email(db, email=normalize_email(email or ""))
    if not user or not verify_password(password or "", user.hashed_password):
        logger.warning("Failed login attempt")
        raise AuthError("Invalid email or password.")

    token = create_access_token(user.id, user.email)
    return AuthData(token=token, user_id=user.id)
