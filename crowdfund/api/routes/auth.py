"""Authentication routes."""
from fastapi import APIRouter, Depends, Request, status

from ...core.auth import AuthService
from ...core.security import CurrentUser, get_current_user
from ...schemas.auth import (
    EmailRequest,
    LoginRequest,
    LoginResponse,
    NewPasswordRequest,
    ProfileResponse,
    RegisterRequest,
    UserIdentity,
)
from ...schemas.common import MessageResponse
from ...services.users import UserRepository
from ..dependencies import get_auth_service, get_user_repository

router = APIRouter(tags=["Authentication"])


@router.post(
    "/register",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register_user(
    body: RegisterRequest,
    users: UserRepository = Depends(get_user_repository),
    auth_service: AuthService = Depends(get_auth_service),
):
    """Register a new user and send the verification email."""
    await auth_service.register(users, body.email, body.password, body.name)
    return MessageResponse(message="User registered. Please verify your email.")


@router.get("/verify/{token}", response_model=MessageResponse)
async def verify_email(
    token: str,
    users: UserRepository = Depends(get_user_repository),
    auth_service: AuthService = Depends(get_auth_service),
):
    """Consume an email verification link."""
    await auth_service.verify_email(users, token)
    return MessageResponse(message="Email verified successfully. You can now log in.")


@router.post("/resend-verification", response_model=MessageResponse)
async def resend_verification(
    body: EmailRequest,
    users: UserRepository = Depends(get_user_repository),
    auth_service: AuthService = Depends(get_auth_service),
):
    """Send a fresh verification link, invalidating the previous one."""
    resent = await auth_service.resend_verification(users, body.email)
    if not resent:
        return MessageResponse(message="Email is already verified.")
    return MessageResponse(message="Verification email sent.")


@router.post("/login", response_model=LoginResponse)
async def login_user(
    body: LoginRequest,
    request: Request,
    users: UserRepository = Depends(get_user_repository),
    auth_service: AuthService = Depends(get_auth_service),
):
    """Login user and return a session token."""
    token = await auth_service.login(
        users,
        body.email,
        body.password,
        ip_address=request.client.host if request.client else None,
    )
    return LoginResponse(
        message="Login successful",
        token=token,
        expires_in=int(auth_service.codec.access_token_ttl.total_seconds()),
    )


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
    body: EmailRequest,
    users: UserRepository = Depends(get_user_repository),
    auth_service: AuthService = Depends(get_auth_service),
):
    """Email a password reset link."""
    await auth_service.forgot_password(users, body.email)
    return MessageResponse(
        message="If the account exists, a password reset link has been sent."
    )


@router.get("/reset-password/{token}", response_model=MessageResponse)
async def check_reset_token(
    token: str,
    users: UserRepository = Depends(get_user_repository),
    auth_service: AuthService = Depends(get_auth_service),
):
    """Tell the client whether a reset link is still usable."""
    await auth_service.validate_reset_token(users, token)
    return MessageResponse(message="Reset link is valid.")


@router.post("/reset-password/{token}", response_model=MessageResponse)
async def reset_password(
    token: str,
    body: NewPasswordRequest,
    users: UserRepository = Depends(get_user_repository),
    auth_service: AuthService = Depends(get_auth_service),
):
    """Set a new password with a reset link."""
    await auth_service.reset_password(users, token, body.password)
    return MessageResponse(message="Password has been reset. You can now log in.")


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(current_user: CurrentUser = Depends(get_current_user)):
    """Echo the identity carried by the session token."""
    return ProfileResponse(
        message="Protected route accessed",
        user=UserIdentity(id=current_user.id, email=current_user.email),
    )
