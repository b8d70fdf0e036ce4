"""
Authentication Routes

POST /auth/signup                 - Register a student or startup account
POST /auth/login                  - Login and get JWT token
POST /auth/logout                 - Client-side logout acknowledgement
POST /auth/resend-verification    - Email a new verification code (rate limited)
POST /auth/verify-email           - Verify with {email, token}
GET  /auth/verify-email/{token}   - Verify with the code alone
GET  /users/me                    - Current user info

The verification routes never reveal whether an account exists.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, BackgroundTasks, Request

from wostup.core.auth import hash_password, verify_password, create_access_token, get_current_user
from wostup.core.config import get_settings
from wostup.core.errors import (
    AppException, BadRequestException, ConflictException, ForbiddenException, UnauthorizedException
)
from wostup.core.rate_limit import build_rate_limiter
from wostup.schemas.schemas import (
    SignupRequest, LoginRequest, ResendVerificationRequest, VerifyEmailRequest,
    ApiResponse, SuccessResponse, MessageResponse, UserRole
)
from wostup.services import verification_service
from wostup.services.account_service import (
    AccountService, email_in_use, find_account_by_email, public_user
)
from wostup.services.email_service import EmailService, send_in_background
from wostup.services.profile_service import StartupProfileService
from wostup.utils.token import generate_verification_token

logger = logging.getLogger(__name__)

settings = get_settings()

router = APIRouter(tags=["Authentication"])

resend_limiter = build_rate_limiter(
    "resend-verification",
    limit=settings.resend_rate_limit,
    window_seconds=settings.resend_rate_window_seconds,
)


def onboarding_step(role: str, account: dict) -> str:
    """Where the web client should send the user after login."""
    if role != UserRole.startup.value:
        return "completed"
    profile = StartupProfileService().get_by_user(str(account["_id"]))
    if not profile:
        return "profile"
    if not profile.get("subscriptionPlan"):
        return "plan"
    return "completed"


def login_payload(role: str, account: dict) -> dict:
    step = onboarding_step(role, account)
    token = create_access_token(data={"sub": str(account["_id"]), "role": role})
    return {
        "user": public_user(role, account, profile_completed=step in ("plan", "completed")),
        "token": token,
        "onboardingStep": step,
    }


@router.post("/auth/signup", response_model=ApiResponse[dict], status_code=201)
async def signup(request: SignupRequest, background_tasks: BackgroundTasks):
    """
    Register a new account. A 6-digit verification code is emailed;
    the account cannot log in until it is verified.
    """
    if email_in_use(request.email):
        raise ConflictException("Email already registered")

    token, token_hash = generate_verification_token()
    service = AccountService(request.role.value)
    account_id = service.create(
        name=request.username,
        email=request.email,
        password_hash=hash_password(request.password),
        token_hash=token_hash,
        token_expires=verification_service.token_expiry(),
    )
    account = service.get_by_id(account_id)

    background_tasks.add_task(
        send_in_background, EmailService.send_verification_email, account["email"], token
    )
    logger.info("Registered %s account %s", request.role.value, account_id)

    return ApiResponse(
        data=public_user(request.role.value, account),
        message="Registered successfully. Check your email for the verification code."
    )


@router.post("/auth/login", response_model=ApiResponse[dict])
async def login(request: LoginRequest):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    found = find_account_by_email(request.email)
    if not found or not verify_password(request.password, found[1]["password"]):
        raise UnauthorizedException("Invalid email or password")

    role, account = found
    if not account.get("isVerified"):
        raise ForbiddenException("Please verify your email before logging in")

    return ApiResponse(data=login_payload(role, account))


@router.post("/auth/logout", response_model=MessageResponse)
async def logout():
    """Tokens are stateless; the client discards its copy."""
    return MessageResponse(message="Logged out")


@router.post(
    "/auth/resend-verification",
    response_model=SuccessResponse,
    dependencies=[Depends(resend_limiter)],
)
async def resend_verification(request: Request, background_tasks: BackgroundTasks):
    """
    Email a fresh verification code.

    Always answers {"success": true}, whether or not the account exists and
    whatever the body holds. The body is read by hand so that malformed JSON
    gets the same reply.
    """
    try:
        email = ResendVerificationRequest.model_validate(await request.json()).email
    except ValueError:
        email = None
    try:
        issued = verification_service.resend(email)
    except Exception:
        logger.exception("Resend verification failed")
        return SuccessResponse()

    if issued:
        to, code = issued
        background_tasks.add_task(send_in_background, EmailService.send_verification_email, to, code)
    return SuccessResponse()


@router.post("/auth/verify-email", response_model=ApiResponse[dict])
async def verify_email(request: Optional[VerifyEmailRequest] = None):
    """Verify an account with the emailed code. Returns a login token on success."""
    if not request or not request.email or not request.token:
        raise BadRequestException("Invalid request")

    try:
        role, account = verification_service.verify_with_email(request.email, request.token)
    except AppException:
        raise
    except Exception:
        logger.exception("Email verification failed")
        raise AppException("Server error")

    return ApiResponse(data=login_payload(role, account))


@router.get("/auth/verify-email/{token}", response_model=SuccessResponse)
async def verify_email_token(token: str):
    """Verify an account with the code alone (link-style verification)."""
    try:
        verification_service.verify_token(token)
    except AppException:
        raise
    except Exception:
        logger.exception("Email verification failed")
        raise AppException("Server error")

    return SuccessResponse()


@router.get("/users/me", response_model=ApiResponse[dict])
async def get_me(user: dict = Depends(get_current_user)):
    """Get current authenticated user's info."""
    account = AccountService(user["role"]).get_by_id(user["user_id"])
    step = onboarding_step(user["role"], account)
    return ApiResponse(
        data=public_user(user["role"], account, profile_completed=step in ("plan", "completed"))
    )
