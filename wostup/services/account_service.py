"""
Account Service - Student and Startup account documents.

Students and startups live in separate collections with the same shape:

    {
        "name": str,
        "email": str,                  # unique, lowercased
        "password": str,               # bcrypt hash
        "isVerified": bool,
        "verificationToken": str,      # SHA-256 of the emailed code (optional)
        "verificationTokenExpires": datetime,   # (optional)
        "createdAt": datetime,
        "updatedAt": datetime
    }
"""

from datetime import datetime
from typing import Optional, Tuple

from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError

from wostup.db.mongodb import get_collection, COLLECTIONS
from wostup.services.mongo_service import to_object_id, utcnow
from wostup.core.errors import ConflictException

ROLE_COLLECTIONS = {
    "student": COLLECTIONS["students"],
    "startup": COLLECTIONS["startups"],
}

# Lookup order when the role is not known (verification by email or token)
ROLE_ORDER = ("student", "startup")


def normalize_email(email: str) -> str:
    return str(email).strip().lower()


class AccountService:
    """CRUD and verification state for one account collection."""

    def __init__(self, role: str):
        if role not in ROLE_COLLECTIONS:
            raise ValueError(f"Unknown role: {role}")
        self.role = role
        self.collection: Collection = get_collection(ROLE_COLLECTIONS[role])

    def create(self, name: str, email: str, password_hash: str,
               token_hash: str, token_expires: datetime) -> str:
        now = utcnow()
        doc = {
            "name": name,
            "email": normalize_email(email),
            "password": password_hash,
            "isVerified": False,
            "verificationToken": token_hash,
            "verificationTokenExpires": token_expires,
            "createdAt": now,
            "updatedAt": now,
        }
        try:
            result = self.collection.insert_one(doc)
        except DuplicateKeyError:
            raise ConflictException("Email already registered")
        return str(result.inserted_id)

    def get_by_id(self, account_id: str) -> Optional[dict]:
        return self.collection.find_one({"_id": to_object_id(account_id, "Account")})

    def get_by_email(self, email: str) -> Optional[dict]:
        return self.collection.find_one({"email": normalize_email(email)})

    def get_by_email_and_token(self, email: str, token_hash: str) -> Optional[dict]:
        return self.collection.find_one({
            "email": normalize_email(email),
            "verificationToken": token_hash
        })

    def get_by_token(self, token_hash: str) -> Optional[dict]:
        return self.collection.find_one({"verificationToken": token_hash})

    def set_verification_token(self, account_id, token_hash: str, expires: datetime) -> bool:
        result = self.collection.update_one(
            {"_id": to_object_id(account_id, "Account")},
            {"$set": {
                "verificationToken": token_hash,
                "verificationTokenExpires": expires,
                "updatedAt": utcnow()
            }}
        )
        return result.modified_count > 0

    def mark_verified(self, account_id, token_hash: str) -> bool:
        """
        Flip isVerified and drop the token fields.
        Matching on the hash makes a concurrent second use of the same code a no-op.
        """
        result = self.collection.update_one(
            {"_id": to_object_id(account_id, "Account"), "verificationToken": token_hash},
            {
                "$set": {"isVerified": True, "updatedAt": utcnow()},
                "$unset": {"verificationToken": "", "verificationTokenExpires": ""}
            }
        )
        return result.modified_count > 0


def find_account_by_email(email: str) -> Optional[Tuple[str, dict]]:
    """Search students first, then startups. Returns (role, account)."""
    for role in ROLE_ORDER:
        account = AccountService(role).get_by_email(email)
        if account:
            return role, account
    return None


def find_account_by_email_and_token(email: str, token_hash: str) -> Optional[Tuple[str, dict]]:
    for role in ROLE_ORDER:
        account = AccountService(role).get_by_email_and_token(email, token_hash)
        if account:
            return role, account
    return None


def find_account_by_token(token_hash: str) -> Optional[Tuple[str, dict]]:
    for role in ROLE_ORDER:
        account = AccountService(role).get_by_token(token_hash)
        if account:
            return role, account
    return None


def email_in_use(email: str) -> bool:
    return find_account_by_email(email) is not None


def public_user(role: str, account: dict, profile_completed: bool = False) -> dict:
    """Account fields safe to send to the client."""
    return {
        "_id": str(account["_id"]),
        "name": account["name"],
        "email": account["email"],
        "role": role,
        "isVerified": account.get("isVerified", False),
        "profileCompleted": profile_completed,
    }