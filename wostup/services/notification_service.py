"""
Notification Service - stored in-app notifications plus realtime push.

Every notification is persisted first; the WebSocket push is best effort.
"""

from typing import Optional, List

from fastapi.encoders import jsonable_encoder
from pymongo.collection import Collection

from wostup.core.errors import NotFoundException
from wostup.core.realtime import manager
from wostup.db.mongodb import get_collection, COLLECTIONS
from wostup.services.mongo_service import serialize_doc, to_object_id, utcnow

# Socket event names understood by the web client
EVENT_NOTIFICATION = "notification"
EVENT_NEW_NOTIFICATION = "new_notification"
EVENT_APPLICATION_STATUS = "applicationStatusUpdated"


class NotificationService:

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["notifications"])

    def create(self, user_id: str, type_: str, title: str, message: str,
               data: Optional[dict] = None) -> dict:
        doc = {
            "userId": user_id,
            "type": type_,
            "title": title,
            "message": message,
            "data": data or {},
            "read": False,
            "createdAt": utcnow(),
        }
        result = self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return doc

    def list_for_user(self, user_id: str, unread_only: bool = False, limit: int = 50) -> List[dict]:
        query = {"userId": user_id}
        if unread_only:
            query["read"] = False
        return list(self.collection.find(query).sort([("createdAt", -1), ("_id", -1)]).limit(limit))

    def unread_count(self, user_id: str) -> int:
        return self.collection.count_documents({"userId": user_id, "read": False})

    def mark_read(self, notification_id: str, user_id: str) -> None:
        result = self.collection.update_one(
            {"_id": to_object_id(notification_id, "Notification"), "userId": user_id},
            {"$set": {"read": True}}
        )
        if result.matched_count == 0:
            raise NotFoundException("Notification not found")

    def mark_all_read(self, user_id: str) -> int:
        result = self.collection.update_many({"userId": user_id, "read": False}, {"$set": {"read": True}})
        return result.modified_count


async def notify(user_id: str, type_: str, title: str, message: str,
                 data: Optional[dict] = None, event: str = EVENT_NEW_NOTIFICATION) -> dict:
    """Store a notification for `user_id` and push it to their open sockets."""
    doc = NotificationService().create(user_id, type_, title, message, data)
    payload = jsonable_encoder(serialize_doc(doc))
    await manager.send(user_id, event, payload)
    return doc


async def notify_status_change(application: dict, job_role: str) -> dict:
    """Tell the student their application moved to a new status."""
    status = application["status"]
    return await notify(
        application["studentId"],
        "application_status",
        "Application Updated",
        f"Your application status for {job_role} is now {status}.",
        data={
            "applicationId": str(application["_id"]),
            "jobId": application["jobId"] if isinstance(application["jobId"], str) else str(application["jobId"]["_id"]),
            "jobTitle": job_role,
            "status": status,
        },
        event=EVENT_APPLICATION_STATUS,
    )
