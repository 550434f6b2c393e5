"""
Authentication endpoints - email + password, bearer tokens.
"""

import logging

from fastapi import APIRouter, Depends, status

from wardwatch.core.errors import AuthenticationFailed
from wardwatch.models.user import Actor, AuthResponse, LoginRequest, RegisterRequest, UserResponse
from wardwatch.routes.deps import get_current_actor
from wardwatch.services.user_service import UserService, get_user_service, public_user
from wardwatch.utils.security import create_access_token, verify_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=AuthResponse)
async def register(request: RegisterRequest, users: UserService = Depends(get_user_service)):
    """
    Register a resident of a ward.

    Self-registration never grants the admin role. Returns a token so the
    client is logged in immediately.
    """
    user = await users.create_user(
        name=request.name,
        email=request.email,
        password=request.password,
        ward_number=request.ward_number,
        phone=request.phone,
        address=request.address,
    )
    token = create_access_token(user["id"], user["role"])
    return {"message": "User registered successfully", "token": token, "user": public_user(user)}


@router.post("/login", response_model=AuthResponse)
async def login(request: LoginRequest, users: UserService = Depends(get_user_service)):
    """Exchange email + password for a bearer token."""
    user = await users.get_user_by_email(request.email)
    if user is None or not verify_password(request.password, user.get("password_hash")):
        logger.info(f"Failed login for {request.email}")
        raise AuthenticationFailed("Invalid credentials")

    token = create_access_token(user["id"], user["role"])
    logger.info(f"User authenticated: {user['id']} ({user['role']})")
    return {"message": "Login successful", "token": token, "user": public_user(user)}


@router.get("/me", response_model=UserResponse)
async def me(actor: Actor = Depends(get_current_actor), users: UserService = Depends(get_user_service)):
    """The authenticated user's profile."""
    user = await users.get_user(actor.id)
    if user is None:
        raise AuthenticationFailed("Token is not valid")
    return public_user(user)
