"""
Security utilities - password hashing and JWT helpers
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Optional

from jose import JWTError
from jose import jwt as jose_jwt
from passlib.context import CryptContext

from .config import ADMIN_JWT_SECRET, JWT_EXPIRATION_MINUTES, JWT_SECRET

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password_bcrypt(password: str) -> str:
    """Hash password using bcrypt"""
    return pwd_context.hash(password)


def verify_password_bcrypt(plain_password: str, hashed_password: str) -> bool:
    """Verify password against bcrypt hash"""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except Exception as e:
        logger.error(f"Password verification error: {e}")
        return False


def create_jwt_token(
    data: dict[str, Any],
    expires_delta: Optional[timedelta] = None,
    secret: str = JWT_SECRET,
) -> str:
    """
    Create a JWT token

    Args:
        data: Data to encode in the token
        expires_delta: Token expiration time (default JWT_EXPIRATION_MINUTES)
        secret: Signing secret, the admin secret for back-office tokens
    """
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=JWT_EXPIRATION_MINUTES)

    to_encode.update({"exp": expire})
    return jose_jwt.encode(to_encode, secret, algorithm=ALGORITHM)


def verify_jwt_token(token: str, secret: str = JWT_SECRET) -> Optional[dict[str, Any]]:
    """
    Verify and decode a JWT token

    Returns:
        Decoded payload if valid, None if invalid or expired
    """
    try:
        return jose_jwt.decode(token, secret, algorithms=[ALGORITHM])
    except JWTError as e:
        logger.warning(f"JWT verification failed: {e}")
        return None


def create_company_token(company_id: int) -> str:
    return create_jwt_token({"companyId": str(company_id)})


def create_admin_token(email: str) -> str:
    return create_jwt_token({"sub": email, "role": "admin"}, secret=ADMIN_JWT_SECRET)
