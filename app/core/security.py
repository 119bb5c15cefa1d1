# Implements security-related functionality:
# JWT token generation and verification
# Password hashing and verification using bcrypt
# Provides core security functions used by the authentication module

from datetime import datetime, timedelta, timezone
from typing import Optional
import logging

from jose import jwt, JWTError
from passlib.context import CryptContext

from app.core.config import settings
from app.core.exceptions import InvalidTokenError

logger = logging.getLogger("app")

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

def create_access_token(user_id: str, email: str, expires_delta: Optional[timedelta] = None) -> str:
    if expires_delta is not None:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode = {"exp": expire, "sub": str(user_id), "email": email}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

def verify_access_token(token: str) -> str:
    """
    Return the user id carried by a valid token.

    Bad signatures, malformed tokens, expired tokens and tokens without a
    subject all raise the same InvalidTokenError.
    """
    try:
        payload = jwt.decode(
            token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM], options={"require_exp": True}
        )
    except JWTError as e:
        logger.debug(f"JWT verification error: {e}")
        raise InvalidTokenError("Invalid token") from None

    user_id = payload.get("sub")
    if not user_id:
        logger.warning("Token payload missing 'sub' field")
        raise InvalidTokenError("Invalid token")
    return user_id

def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)

def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)
