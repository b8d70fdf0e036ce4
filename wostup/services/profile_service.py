"""
Startup Profile Service - public company profile and subscription plan.

One profile per startup account (unique index on userId). The profile's
`_id` is the `startupId` referenced by jobs, applications and interviews.
"""

from typing import Optional, List

from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError

from wostup.core.errors import ConflictException
from wostup.core.plans import PlanName
from wostup.db.mongodb import get_collection, COLLECTIONS
from wostup.services.mongo_service import to_object_id, utcnow


class StartupProfileService:

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["startup_profiles"])

    def create(self, user_id: str, data: dict) -> dict:
        now = utcnow()
        doc = {
            **data,
            "userId": user_id,
            "verified": False,
            "views": 0,
            "subscriptionPlan": None,
            "planActivatedAt": None,
            "createdAt": now,
            "updatedAt": now,
        }
        try:
            result = self.collection.insert_one(doc)
        except DuplicateKeyError:
            raise ConflictException("Profile already exists")
        doc["_id"] = result.inserted_id
        return doc

    def get_by_id(self, profile_id: str) -> Optional[dict]:
        return self.collection.find_one({"_id": to_object_id(profile_id, "Startup profile")})

    def get_by_user(self, user_id: str) -> Optional[dict]:
        return self.collection.find_one({"userId": user_id})

    def list_all(self, hiring_only: bool = False) -> List[dict]:
        query = {"hiring": True} if hiring_only else {}
        return list(self.collection.find(query).sort("createdAt", -1))

    def update(self, profile_id: str, fields: dict) -> Optional[dict]:
        if fields:
            fields["updatedAt"] = utcnow()
            self.collection.update_one(
                {"_id": to_object_id(profile_id, "Startup profile")},
                {"$set": fields}
            )
        return self.get_by_id(profile_id)

    def increment_views(self, profile_id: str) -> None:
        self.collection.update_one(
            {"_id": to_object_id(profile_id, "Startup profile")},
            {"$inc": {"views": 1}}
        )

    def set_plan(self, profile_id: str, plan: PlanName) -> Optional[dict]:
        now = utcnow()
        self.collection.update_one(
            {"_id": to_object_id(profile_id, "Startup profile")},
            {"$set": {"subscriptionPlan": plan.value, "planActivatedAt": now, "updatedAt": now}}
        )
        return self.get_by_id(profile_id)

    def delete(self, profile_id: str) -> bool:
        result = self.collection.delete_one({"_id": to_object_id(profile_id, "Startup profile")})
        return result.deleted_count > 0
