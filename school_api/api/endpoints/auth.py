# school_api/api/endpoints/auth.py

import logging
from fastapi import APIRouter, Depends, status

from school_api.api.deps import get_auth_service
from school_api.core.security import get_current_actor
from school_api.models.actor import Actor
from school_api.models.responses import ApiResponse
from school_api.models.user import AuthenticatedUser, User, UserLogin, UserRegister
from school_api.services.auth_service import AuthService

# Setup logger for this module
logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"]
)

@router.post(
    "/register",
    response_model=ApiResponse[AuthenticatedUser],
    status_code=status.HTTP_201_CREATED,
    summary="Register an admin account",
    description="Creates a superadmin or schooladmin and returns it with an access token. "
                "A schooladmin must name an existing school; a superadmin must not name one."
)
async def register_user(
    user_in: UserRegister,
    auth_service: AuthService = Depends(get_auth_service),
):
    logger.info(f"Registration attempt for {user_in.email} as {user_in.role}")
    user = await auth_service.register(user_in)
    return ApiResponse(message="User registered successfully", data=user)

@router.post(
    "/login",
    response_model=ApiResponse[AuthenticatedUser],
    status_code=status.HTTP_200_OK,
    summary="Log in with email and password",
    description="Verifies the credentials and returns the user with a fresh access token."
)
async def login_user(
    credentials: UserLogin,
    auth_service: AuthService = Depends(get_auth_service),
):
    user = await auth_service.login(credentials)
    return ApiResponse(message="Login successful", data=user)

@router.get(
    "/me",
    response_model=ApiResponse[User],
    status_code=status.HTTP_200_OK,
    summary="Get the current user (Protected)",
    description="Returns the authenticated user with their school's name joined in."
)
async def read_current_user(
    actor: Actor = Depends(get_current_actor),
    auth_service: AuthService = Depends(get_auth_service),
):
    user = await auth_service.get_me(actor)
    return ApiResponse(message="User retrieved successfully", data=user)
