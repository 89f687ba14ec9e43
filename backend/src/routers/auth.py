"""
Authentication router.

Provides REST API endpoints for:
- User signup
- User login (JWT issuance)
- Password reset via the identity provider and mail relay

All endpoints are public.
"""

import structlog
from fastapi import APIRouter, Depends, status

from backend.src.config import Settings
from backend.src.dependencies import get_auth_service, get_settings_from_app
from backend.src.errors import AppError, UnhandledError, failure_message
from backend.src.models.auth import (
    LoginRequest, LoginResponse, ResetPasswordRequest,
    ResetPasswordResponse, SignupRequest
)
from backend.src.models.common import ERROR_RESPONSES, MessageResponse
from backend.src.services.auth_service import AuthService

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["Authentication"], responses=ERROR_RESPONSES)


@router.post(
    "/signup",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="User Signup",
    description="""
    Register a new user account.

    **Request Body:** firstName, lastName, email, password (all required)

    **Error Responses:**
    - 400: Missing fields or email already registered
    - 500: Unexpected failure
    """
)
@failure_message("Error adding user")
async def signup(
    signup_request: SignupRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> MessageResponse:
    """
    Create a user with a bcrypt-hashed password.

    Args:
        signup_request: Signup fields
        auth_service: Authentication service

    Returns:
        Success message (no user data is echoed)
    """
    try:
        await auth_service.signup(signup_request)
        return MessageResponse(message="User registered successfully!")

    except AppError:
        raise
    except Exception as e:
        logger.error("signup_error", error=str(e), email=signup_request.email)
        raise UnhandledError("Error adding user") from e


@router.post(
    "/login",
    response_model=LoginResponse,
    status_code=status.HTTP_200_OK,
    summary="User Login",
    description="""
    Authenticate with email and password.

    Returns a JWT valid for one hour, carrying the user's id and email.

    **Error Responses:**
    - 400: User not found, or invalid credentials
    - 500: Unexpected failure
    """
)
@failure_message("Server error")
async def login(
    login_request: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> LoginResponse:
    """
    Authenticate user and return JWT token.

    Args:
        login_request: Login credentials
        auth_service: Authentication service

    Returns:
        Message and token
    """
    try:
        logger.info("login_attempt", email=login_request.email)
        token = await auth_service.login(login_request.email, login_request.password)
        return LoginResponse(token=token)

    except AppError:
        raise
    except Exception as e:
        logger.error("login_error", error=str(e), email=login_request.email)
        raise UnhandledError("Server error") from e


@router.post(
    "/reset-password",
    response_model=ResetPasswordResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
    summary="Password Reset",
    description="""
    Email a password reset link generated by the identity provider.

    The link is also returned in the response unless
    `reset_password_expose_link` is disabled.

    **Error Responses:**
    - 500: Identity provider rejected the email, or the email could not be sent
    """
)
@failure_message("Failed to send reset email")
async def reset_password(
    reset_request: ResetPasswordRequest,
    auth_service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings_from_app)
) -> ResetPasswordResponse:
    """
    Send a password reset email.

    Args:
        reset_request: Account email
        auth_service: Authentication service
        settings: Application settings

    Returns:
        Confirmation, with the link when exposure is enabled
    """
    try:
        link = await auth_service.reset_password(reset_request.email)

    except AppError:
        raise
    except Exception as e:
        logger.error("reset_password_error", error=str(e))
        raise UnhandledError("Failed to send reset email") from e

    if settings.reset_password_expose_link:
        return ResetPasswordResponse(link=link)
    return ResetPasswordResponse()
