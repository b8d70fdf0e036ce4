"""
MongoDB Service helpers shared by every collection service.

- ObjectId <-> str conversion for JSON responses and path parameters
- UTC timestamps (documents carry createdAt / updatedAt like Mongoose timestamps)
"""

from datetime import datetime, timezone
from typing import Any, Optional

from bson import ObjectId
from bson.errors import InvalidId

from wostup.core.errors import NotFoundException


# ============================================================
# HELPER: Convert ObjectId to string for JSON serialization
# ============================================================

def _serialize_value(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return as_utc(value)
    if isinstance(value, dict):
        return {k: _serialize_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_serialize_value(v) for v in value]
    return value


def serialize_doc(doc: Optional[dict]) -> Optional[dict]:
    """Convert MongoDB document to JSON-serializable dict."""
    if doc is None:
        return None
    return _serialize_value(dict(doc))


def serialize_docs(docs) -> list:
    """Convert an iterable of MongoDB documents to a JSON-serializable list."""
    return [serialize_doc(doc) for doc in docs]


def to_object_id(value: Any, label: str = "Resource") -> ObjectId:
    """Parse a path/body id. Malformed ids are reported as not found."""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        raise NotFoundException(f"{label} not found")


# ============================================================
# HELPER: Time
# ============================================================

def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes (as returned by some drivers)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
