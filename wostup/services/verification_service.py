"""
Email verification flow.

- issue_code:  new 6-digit code for an account (stores only the hash)
- resend:      new code for an unverified account, silently nothing otherwise
- verify_*:    check a presented code, flip isVerified, clear the token

Wrong, reused and expired codes all fail with the same message so callers
cannot tell them apart.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional, Tuple

from wostup.core.config import get_settings
from wostup.core.errors import BadRequestException
from wostup.services.account_service import (
    AccountService,
    find_account_by_email,
    find_account_by_email_and_token,
    find_account_by_token,
)
from wostup.services.mongo_service import utcnow, as_utc
from wostup.utils.token import generate_verification_token, hash_token

logger = logging.getLogger(__name__)

INVALID_TOKEN = "Invalid or expired token"


def token_expiry(now: Optional[datetime] = None) -> datetime:
    hours = get_settings().verification_token_ttl_hours
    return (now or utcnow()) + timedelta(hours=hours)


def issue_code(role: str, account_id) -> str:
    """Store a fresh code hash on the account and return the plaintext code."""
    token, token_hash = generate_verification_token()
    AccountService(role).set_verification_token(account_id, token_hash, token_expiry())
    return token


def resend(email: Optional[str]) -> Optional[Tuple[str, str]]:
    """
    Returns (email, code) when a code should be mailed, else None.
    Unknown and already-verified accounts are indistinguishable to the caller.
    """
    if not email:
        return None
    found = find_account_by_email(email)
    if not found:
        return None
    role, account = found
    if account.get("isVerified"):
        return None
    return account["email"], issue_code(role, account["_id"])


def _complete(found: Optional[Tuple[str, dict]], token_hash: str) -> Tuple[str, dict]:
    if not found:
        raise BadRequestException(INVALID_TOKEN)
    role, account = found

    expires = as_utc(account.get("verificationTokenExpires"))
    if expires is None or expires < utcnow():
        raise BadRequestException(INVALID_TOKEN)

    if not AccountService(role).mark_verified(account["_id"], token_hash):
        raise BadRequestException(INVALID_TOKEN)

    logger.info("Verified %s account %s", role, account["_id"])
    account = AccountService(role).get_by_id(account["_id"])
    return role, account


def verify_with_email(email: str, token: str) -> Tuple[str, dict]:
    token_hash = hash_token(token)
    return _complete(find_account_by_email_and_token(email, token_hash), token_hash)


def verify_token(token: str) -> Tuple[str, dict]:
    token_hash = hash_token(token)
    return _complete(find_account_by_token(token_hash), token_hash)
