"""
Shared FastAPI dependencies: current actor and role gates.
"""

import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer

from wardwatch.core.errors import AccessDenied, AuthenticationFailed
from wardwatch.core.settings import settings
from wardwatch.models.user import Actor
from wardwatch.services.access_policy import can_manage_wards
from wardwatch.services.user_service import UserService, get_user_service
from wardwatch.utils.security import decode_access_token

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_PREFIX}/auth/login", auto_error=False)


async def get_current_actor(
    token: Optional[str] = Depends(oauth2_scheme),
    users: UserService = Depends(get_user_service),
) -> Actor:
    """
    Resolve the bearer token to the acting user.

    The user is re-read from the store on every request so role and ward
    changes take effect without re-issuing tokens.
    """
    if not token:
        raise AuthenticationFailed("No token, authorization denied")

    claims = decode_access_token(token)
    if claims is None:
        raise AuthenticationFailed("Token is not valid")

    user = await users.get_user(claims["sub"])
    if user is None:
        raise AuthenticationFailed("Token is not valid")

    return Actor(
        id=user["id"],
        role=user["role"],
        ward_number=user["ward_number"],
        name=user.get("name"),
        email=user.get("email"),
    )


async def require_admin(actor: Actor = Depends(get_current_actor)) -> Actor:
    if not can_manage_wards(actor):
        logger.warning(f"Admin-only route refused for user {actor.id}")
        raise AccessDenied("Access denied. Admin only.")
    return actor
