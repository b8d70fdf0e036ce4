"""
Application Service - a student's application to a job.

Status flow:

    APPLIED ──> SHORTLISTED ──> INTERVIEW_SCHEDULED ──> SELECTED
       │             │                   │
       └─────────────┴───────────────────┴──────────> REJECTED

INTERVIEW_SCHEDULED may also fall back to SHORTLISTED (interview cancelled).
SELECTED and REJECTED are final.

Every status write is conditional on the status the caller saw, so two
concurrent updates of the same application cannot both succeed.
"""

import logging
from typing import Optional, List, Dict

from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError
from pymongo import ReturnDocument

from wostup.core.errors import NotFoundException, BadRequestException, ConflictException
from wostup.db.mongodb import get_collection, COLLECTIONS
from wostup.schemas.schemas import ApplicationStatus, JobStatus
from wostup.services.mongo_service import to_object_id, utcnow, as_utc

logger = logging.getLogger(__name__)

S = ApplicationStatus

ALLOWED_TRANSITIONS: Dict[ApplicationStatus, frozenset] = {
    S.applied: frozenset({S.shortlisted, S.rejected}),
    S.shortlisted: frozenset({S.interview_scheduled, S.selected, S.rejected}),
    S.interview_scheduled: frozenset({S.selected, S.rejected, S.shortlisted}),
    S.selected: frozenset(),
    S.rejected: frozenset(),
}


def can_transition(current: str, target: str) -> bool:
    return ApplicationStatus(target) in ALLOWED_TRANSITIONS[ApplicationStatus(current)]


class ApplicationService:

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["applications"])

    def create(self, student_id: str, job: dict, data: dict) -> dict:
        """Apply to an open job. Students cannot apply twice to the same job."""
        if job.get("status") != JobStatus.open.value:
            raise BadRequestException("Job is not accepting applications")
        if job.get("deadline") and as_utc(job["deadline"]) < utcnow():
            raise BadRequestException("Application deadline has passed")

        now = utcnow()
        doc = {
            **data,
            "jobId": str(job["_id"]),
            "studentId": student_id,
            "startupId": job["startupId"],
            "status": S.applied.value,
            "statusHistory": [{"status": S.applied.value, "at": now}],
            "createdAt": now,
            "updatedAt": now,
        }
        if self.collection.find_one({"studentId": student_id, "jobId": doc["jobId"]}, {"_id": 1}):
            raise ConflictException("Already applied to this job")
        try:
            result = self.collection.insert_one(doc)
        except DuplicateKeyError:
            raise ConflictException("Already applied to this job")
        doc["_id"] = result.inserted_id
        return doc

    def get(self, application_id: str) -> dict:
        app = self.collection.find_one({"_id": to_object_id(application_id, "Application")})
        if not app:
            raise NotFoundException("Application not found")
        return app

    def get_for_startup(self, application_id: str, startup_id: str) -> dict:
        app = self.collection.find_one({
            "_id": to_object_id(application_id, "Application"),
            "startupId": startup_id
        })
        if not app:
            raise NotFoundException("Application not found or access denied")
        return app

    def list_for_student(self, student_id: str) -> List[dict]:
        return list(self.collection.find({"studentId": student_id}).sort("createdAt", -1))

    def list_for_startup(self, startup_id: str, job_id: Optional[str] = None) -> List[dict]:
        query = {"startupId": startup_id}
        if job_id:
            query["jobId"] = job_id
        return list(self.collection.find(query).sort("createdAt", -1))

    def transition(self, application: dict, target: ApplicationStatus,
                   notes: Optional[str] = None) -> dict:
        """
        Move an application to `target` if the flow allows it.

        Raises ConflictException when the move is not allowed or the
        application changed since it was read.
        """
        current = application["status"]
        if not can_transition(current, target.value):
            raise ConflictException(f"Cannot change status from {current} to {target.value}")

        now = utcnow()
        entry = {"status": target.value, "at": now}
        if notes:
            entry["notes"] = notes
        updated = self.collection.find_one_and_update(
            {"_id": application["_id"], "status": current},
            {
                "$set": {"status": target.value, "updatedAt": now},
                "$push": {"statusHistory": entry}
            },
            return_document=ReturnDocument.AFTER
        )
        if updated is None:
            raise ConflictException("Application was modified concurrently. Reload and try again.")
        logger.info("Application %s: %s -> %s", application["_id"], current, target.value)
        return updated


def attach_jobs_and_students(applications: List[dict]) -> List[dict]:
    """Populate jobId with the job's role and studentId with name/email."""
    if not applications:
        return applications
    jobs = get_collection(COLLECTIONS["jobs"]).find(
        {"_id": {"$in": [to_object_id(a["jobId"], "Job") for a in applications]}},
        {"role": 1, "startupId": 1, "jobType": 1, "location": 1}
    )
    job_map = {str(j["_id"]): j for j in jobs}
    students = get_collection(COLLECTIONS["students"]).find(
        {"_id": {"$in": [to_object_id(a["studentId"], "Student") for a in applications]}},
        {"name": 1, "email": 1}
    )
    student_map = {str(s["_id"]): s for s in students}
    for app in applications:
        app["jobId"] = job_map.get(app["jobId"], app["jobId"])
        app["studentId"] = student_map.get(app["studentId"], app["studentId"])
    return applications
