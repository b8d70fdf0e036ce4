"""
Interview Service - scheduling with slot conflict checks.

Scheduling an interview touches two documents: the new interview and the
application, which moves to INTERVIEW_SCHEDULED. Both happen here, server
side, as a small saga:

    1. insert the interview
    2. conditionally move the application
    3. if step 2 fails, delete the interview again

A slot is taken when another non-cancelled interview of the same
interviewer (within the startup) or of the same candidate overlaps
[scheduledAt, scheduledAt + durationMinutes).
"""

import logging
from datetime import datetime, timedelta
from typing import Optional, List

from pymongo.collection import Collection

from wostup.core import plans
from wostup.core.errors import ConflictException, NotFoundException, BadRequestException
from wostup.db.mongodb import get_collection, COLLECTIONS
from wostup.schemas.schemas import ApplicationStatus, InterviewStatus
from wostup.services.application_service import ApplicationService, can_transition
from wostup.services.mongo_service import to_object_id, utcnow, as_utc

logger = logging.getLogger(__name__)

ACTIVE_STATUSES = [InterviewStatus.scheduled.value, InterviewStatus.completed.value,
                   InterviewStatus.no_show.value]

# Only scheduled interviews can move; the rest are final
ALLOWED_STATUS_CHANGES = {
    InterviewStatus.scheduled.value: {
        InterviewStatus.completed.value,
        InterviewStatus.no_show.value,
        InterviewStatus.cancelled.value,
    },
}


def interviewer_key(name: str) -> str:
    return " ".join(name.split()).lower()


def overlaps(start_a: datetime, minutes_a: int, start_b: datetime, minutes_b: int) -> bool:
    end_a = start_a + timedelta(minutes=minutes_a)
    end_b = start_b + timedelta(minutes=minutes_b)
    return start_a < end_b and start_b < end_a


def month_start(now: datetime) -> datetime:
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


class InterviewService:

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["interviews"])
        self.applications = ApplicationService()

    # ------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------

    def get_owned(self, interview_id: str, startup_id: str) -> dict:
        interview = self.collection.find_one({
            "_id": to_object_id(interview_id, "Interview"),
            "startupId": startup_id
        })
        if not interview:
            raise NotFoundException("Interview not found or access denied")
        return interview

    def list_for_startup(self, startup_id: str, job_id: Optional[str] = None,
                         interviewer: Optional[str] = None,
                         status: Optional[str] = None) -> List[dict]:
        query = {"startupId": startup_id}
        if job_id:
            query["jobId"] = job_id
        if interviewer:
            query["interviewerKey"] = interviewer_key(interviewer)
        if status:
            query["status"] = status
        return list(self.collection.find(query).sort("scheduledAt", 1))

    def list_for_student(self, student_id: str) -> List[dict]:
        return list(self.collection.find({"studentId": student_id}).sort("scheduledAt", 1))

    def count_this_month(self, startup_id: str, now: Optional[datetime] = None) -> int:
        """Interviews created in the current calendar month (cancelled ones included)."""
        start = month_start(now or utcnow())
        return self.collection.count_documents({"startupId": startup_id, "createdAt": {"$gte": start}})

    def find_conflict(self, startup_id: str, interviewer: str, student_id: str,
                      start: datetime, minutes: int, exclude_id=None) -> Optional[dict]:
        query = {
            "status": {"$in": ACTIVE_STATUSES},
            "$or": [
                {"startupId": startup_id, "interviewerKey": interviewer_key(interviewer)},
                {"studentId": student_id},
            ],
        }
        if exclude_id is not None:
            query["_id"] = {"$ne": exclude_id}
        for other in self.collection.find(query):
            if overlaps(start, minutes, as_utc(other["scheduledAt"]), other["durationMinutes"]):
                return other
        return None

    def _check_slot(self, startup_id: str, interviewer: str, student_id: str,
                    start: datetime, minutes: int, exclude_id=None) -> None:
        clash = self.find_conflict(startup_id, interviewer, student_id, start, minutes, exclude_id)
        if clash is None:
            return
        when = as_utc(clash["scheduledAt"]).strftime("%Y-%m-%d %H:%M")
        if clash["studentId"] == student_id:
            raise ConflictException(f"Candidate already has an interview at {when} UTC")
        raise ConflictException(f"{clash['interviewer']} already has an interview at {when} UTC")

    # ------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------

    def schedule(self, application_id: str, startup: dict, data: dict) -> dict:
        """
        Create an interview for an application and move the application to
        INTERVIEW_SCHEDULED. Another round for an application that is already
        INTERVIEW_SCHEDULED leaves its status unchanged.
        """
        startup_id = startup["startup_id"]
        plan = startup.get("plan")
        application = self.applications.get_for_startup(application_id, startup_id)

        current = application["status"]
        needs_transition = current != ApplicationStatus.interview_scheduled.value
        if needs_transition and not can_transition(current, ApplicationStatus.interview_scheduled.value):
            raise ConflictException(f"Cannot schedule an interview for an application in status {current}")

        plans.require_feature(plan, "interviewCalendar")
        plans.require_within_limit(plan, "maxInterviewsPerMonth", self.count_this_month(startup_id))

        start = data["scheduledAt"]
        if start < utcnow():
            raise BadRequestException("Interview time must be in the future")
        self._check_slot(startup_id, data["interviewer"], application["studentId"],
                         start, data["durationMinutes"])

        job = get_collection(COLLECTIONS["jobs"]).find_one(
            {"_id": to_object_id(application["jobId"], "Job")}, {"role": 1})
        student = get_collection(COLLECTIONS["students"]).find_one(
            {"_id": to_object_id(application["studentId"], "Student")}, {"name": 1, "email": 1})

        now = utcnow()
        doc = {
            **data,
            "interviewerKey": interviewer_key(data["interviewer"]),
            "applicationId": str(application["_id"]),
            "jobId": application["jobId"],
            "jobTitle": job["role"] if job else None,
            "startupId": startup_id,
            "studentId": application["studentId"],
            "candidateName": student["name"] if student else None,
            "candidateEmail": student["email"] if student else None,
            "status": InterviewStatus.scheduled.value,
            "createdAt": now,
            "updatedAt": now,
        }
        result = self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id

        if needs_transition:
            try:
                self.applications.transition(
                    application, ApplicationStatus.interview_scheduled,
                    notes=f"Interview {result.inserted_id} scheduled"
                )
            except Exception:
                logger.warning("Rolling back interview %s: application %s update failed",
                               result.inserted_id, application["_id"])
                self.collection.delete_one({"_id": result.inserted_id})
                raise

        logger.info("Interview %s scheduled for application %s", result.inserted_id, application["_id"])
        return doc

    def reschedule(self, interview_id: str, startup_id: str, fields: dict) -> dict:
        interview = self.get_owned(interview_id, startup_id)
        if interview["status"] != InterviewStatus.scheduled.value:
            raise ConflictException(f"Cannot reschedule an interview that is {interview['status']}")

        start = fields.get("scheduledAt") or as_utc(interview["scheduledAt"])
        minutes = fields.get("durationMinutes") or interview["durationMinutes"]
        interviewer = fields.get("interviewer") or interview["interviewer"]

        if "scheduledAt" in fields and start < utcnow():
            raise BadRequestException("Interview time must be in the future")
        self._check_slot(startup_id, interviewer, interview["studentId"], start, minutes,
                         exclude_id=interview["_id"])

        fields["interviewerKey"] = interviewer_key(interviewer)
        fields["updatedAt"] = utcnow()
        self.collection.update_one({"_id": interview["_id"]}, {"$set": fields})
        return self.collection.find_one({"_id": interview["_id"]})

    def update_status(self, interview_id: str, startup_id: str, status: InterviewStatus) -> dict:
        """
        Close out an interview. Cancelling the last scheduled interview of an
        application returns the application to SHORTLISTED.
        """
        interview = self.get_owned(interview_id, startup_id)
        current = interview["status"]
        if status.value == current:
            return interview
        if status.value not in ALLOWED_STATUS_CHANGES.get(current, set()):
            raise ConflictException(f"Cannot change interview status from {current} to {status.value}")

        result = self.collection.update_one(
            {"_id": interview["_id"], "status": current},
            {"$set": {"status": status.value, "updatedAt": utcnow()}}
        )
        if result.modified_count == 0:
            raise ConflictException("Interview was modified concurrently. Reload and try again.")

        if status == InterviewStatus.cancelled:
            still_scheduled = self.collection.count_documents({
                "applicationId": interview["applicationId"],
                "status": InterviewStatus.scheduled.value
            })
            application = self.applications.get(interview["applicationId"])
            if not still_scheduled and application["status"] == ApplicationStatus.interview_scheduled.value:
                self.applications.transition(application, ApplicationStatus.shortlisted,
                                             notes="Interview cancelled")

        return self.collection.find_one({"_id": interview["_id"]})
