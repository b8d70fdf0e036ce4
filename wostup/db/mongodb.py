"""
MongoDB Connection Utility

MongoDB stores every document this backend owns:
- Student and Startup accounts (with email verification state)
- Startup profiles and subscription plans
- Jobs, applications and interviews
- Notifications, payment orders and shared rate-limit counters
"""
import logging

from pymongo import MongoClient, ASCENDING, DESCENDING
from pymongo.database import Database
from pymongo.collection import Collection

from wostup.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

# Global client (connection pooling handled internally by pymongo)
_client: MongoClient = None
_db: Database = None


def get_mongo_client() -> MongoClient:
    """Get or create MongoDB client (singleton pattern)"""
    global _client
    if _client is None:
        _client = MongoClient(settings.mongodb_uri, tz_aware=True)
    return _client


def get_mongo_db() -> Database:
    """Get the application database"""
    global _db
    if _db is None:
        client = get_mongo_client()
        _db = client[settings.mongodb_db]
    return _db


def get_collection(name: str) -> Collection:
    """Get a specific collection. Use the COLLECTIONS constants for names."""
    db = get_mongo_db()
    return db[name]


def test_mongo_connection() -> bool:
    """
    Test if MongoDB is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        # ping command checks connection
        get_mongo_db().command('ping')
        return True
    except Exception as e:
        logger.warning("MongoDB connection failed: %s", e)
        return False


# Collection name constants (avoid typos)
COLLECTIONS = {
    "students": "students",
    "startups": "startups",
    "startup_profiles": "startup_profiles",
    "jobs": "jobs",
    "applications": "applications",
    "interviews": "interviews",
    "notifications": "notifications",
    "payment_orders": "payment_orders",
    "rate_limits": "rate_limits",
}


def init_mongo_indexes():
    """
    Create indexes for better query performance.
    Call this once during app startup.
    """
    db = get_mongo_db()

    # Accounts: unique lowercased email, token hash lookups
    for name in (COLLECTIONS["students"], COLLECTIONS["startups"]):
        db[name].create_index("email", unique=True)
        db[name].create_index("verificationToken", sparse=True)

    db[COLLECTIONS["startup_profiles"]].create_index("userId", unique=True)

    db[COLLECTIONS["jobs"]].create_index([("startupId", ASCENDING), ("status", ASCENDING)])
    db[COLLECTIONS["jobs"]].create_index([("createdAt", DESCENDING)])

    # One application per student per job
    db[COLLECTIONS["applications"]].create_index([
        ("studentId", ASCENDING),
        ("jobId", ASCENDING)
    ], unique=True)
    db[COLLECTIONS["applications"]].create_index("startupId")

    # Slot lookups for conflict detection
    db[COLLECTIONS["interviews"]].create_index([
        ("startupId", ASCENDING),
        ("interviewerKey", ASCENDING),
        ("scheduledAt", ASCENDING)
    ])
    db[COLLECTIONS["interviews"]].create_index([("studentId", ASCENDING), ("scheduledAt", ASCENDING)])
    db[COLLECTIONS["interviews"]].create_index("applicationId")
    # Monthly quota
    db[COLLECTIONS["interviews"]].create_index([("startupId", ASCENDING), ("createdAt", ASCENDING)])

    db[COLLECTIONS["notifications"]].create_index([
        ("userId", ASCENDING),
        ("read", ASCENDING),
        ("createdAt", DESCENDING)
    ])

    db[COLLECTIONS["payment_orders"]].create_index("orderId", unique=True)

    logger.info("MongoDB indexes created successfully")
