"""
One-time verification codes.

The plaintext code is only ever emailed. Accounts store the SHA-256 hex
digest, and verification compares digests.
"""

import hashlib
import secrets
from typing import Tuple

OTP_DIGITS = 6
OTP_MODULUS = 10 ** OTP_DIGITS


def hash_token(raw: str) -> str:
    """SHA-256 hex digest of a presented code."""
    return hashlib.sha256(str(raw).encode("utf-8")).hexdigest()


def generate_verification_token() -> Tuple[str, str]:
    """
    Generate a 6-digit numeric code and its hash.

    Returns:
        (token, hash) where token matches ^\\d{6}$ and hash == hash_token(token)
    """
    num = int.from_bytes(secrets.token_bytes(4), "big") % OTP_MODULUS
    token = str(num).zfill(OTP_DIGITS)
    return token, hash_token(token)
