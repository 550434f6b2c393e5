"""
Security utilities: password hashing and bearer tokens.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from wardwatch.core.settings import settings

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.BCRYPT_ROUNDS)


def hash_password(password: str) -> str:
    # bcrypt only looks at the first 72 bytes
    if len(password.encode("utf-8")) > 72:
        raise ValueError("Password cannot exceed 72 bytes")
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: Optional[str]) -> bool:
    if not hashed:
        return False
    try:
        return pwd_context.verify(plain, hashed)
    except ValueError as e:
        logger.warning(f"Password hash could not be verified: {e}")
        return False


def create_access_token(user_id: str, role: str, expires_hours: Optional[int] = None) -> str:
    """
    Issue a signed token for `user_id`.

    The role is included for clients; authorization always re-reads the user
    from the store so a demoted admin loses access immediately.
    """
    expires = datetime.now(timezone.utc) + timedelta(hours=expires_hours or settings.JWT_EXPIRE_HOURS)
    claims = {"sub": user_id, "role": role, "exp": expires}
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[Dict]:
    """Return the token claims, or None if the token is invalid or expired."""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        logger.debug(f"Rejected bearer token: {e}")
        return None
    if not payload.get("sub"):
        return None
    return payload
