"""
Authentication Utility - JWT and Password handling.

Provides:
- Password hashing with bcrypt
- JWT token creation/verification
- FastAPI dependencies for protected routes
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from wostup.core.config import get_settings
from wostup.core.errors import UnauthorizedException, ForbiddenException

settings = get_settings()

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Bearer token extractor (missing header is reported by us, not as a bare 403)
bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    """Hash password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify JWT token."""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


def user_from_token(token: str) -> dict:
    """
    Resolve a raw JWT to the account it was issued for.
    Shared by the HTTP dependencies and the notifications WebSocket.
    """
    from wostup.services.account_service import AccountService

    payload = decode_token(token) if token else None
    if not payload or not payload.get("sub") or not payload.get("role"):
        raise UnauthorizedException("Invalid or expired token")

    account = AccountService(payload["role"]).get_by_id(payload["sub"])
    if not account:
        raise UnauthorizedException("Invalid or expired token")

    return {
        "user_id": str(account["_id"]),
        "email": account["email"],
        "name": account["name"],
        "role": payload["role"],
        "is_verified": account.get("isVerified", False),
    }


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> dict:
    """
    FastAPI dependency - Get current authenticated user.

    Usage:
        @router.get("/protected")
        async def route(user: dict = Depends(get_current_user)):
            return user
    """
    if credentials is None:
        raise UnauthorizedException("Not authenticated")
    return user_from_token(credentials.credentials)


async def get_current_student(user: dict = Depends(get_current_user)) -> dict:
    """Dependency - Require student role."""
    if user["role"] != "student":
        raise ForbiddenException("Students only")
    return user


async def get_current_startup(user: dict = Depends(get_current_user)) -> dict:
    """Dependency - Require startup role and attach the startup profile."""
    from wostup.services.profile_service import StartupProfileService

    if user["role"] != "startup":
        raise ForbiddenException("Startups only")

    profile = StartupProfileService().get_by_user(user["user_id"])
    if not profile:
        raise ForbiddenException("Startup profile not found. Create profile first.")

    user["startup_id"] = str(profile["_id"])
    user["plan"] = profile.get("subscriptionPlan")
    user["profile"] = profile
    return user


async def get_current_startup_account(user: dict = Depends(get_current_user)) -> dict:
    """Dependency - Require startup role; the profile may not exist yet."""
    if user["role"] != "startup":
        raise ForbiddenException("Startups only")
    return user
