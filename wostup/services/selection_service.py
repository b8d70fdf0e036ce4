"""
Selection Service - shortlist / select / reject candidates and tell them.

Each listed application is moved to the target status (or left alone if it
is already there), then the student gets an email and an in-app
notification. Applications that cannot move are reported back as skipped.
"""

import logging
from typing import List

from fastapi import BackgroundTasks

from wostup.core import plans
from wostup.core.errors import AppException
from wostup.db.mongodb import get_collection, COLLECTIONS
from wostup.schemas.schemas import ApplicationStatus
from wostup.services.application_service import ApplicationService
from wostup.services.email_service import EmailService, send_in_background
from wostup.services.mongo_service import to_object_id
from wostup.services.notification_service import EVENT_NOTIFICATION, notify, notify_status_change

logger = logging.getLogger(__name__)


async def notify_candidates(startup: dict, target: ApplicationStatus, subject: str, message: str,
                            application_ids: List[str], background_tasks: BackgroundTasks) -> dict:
    if len(set(application_ids)) > 1:
        plans.require_feature(startup.get("plan"), "bulkEmail")

    service = ApplicationService()
    students = get_collection(COLLECTIONS["students"])
    jobs = get_collection(COLLECTIONS["jobs"])

    updated, skipped, notified = [], [], 0
    for application_id in dict.fromkeys(application_ids):
        try:
            application = service.get_for_startup(application_id, startup["startup_id"])
            if application["status"] != target.value:
                application = service.transition(application, target)
                updated.append(application_id)
        except AppException as e:
            skipped.append({"applicationId": application_id, "reason": e.message})
            continue

        job = jobs.find_one({"_id": to_object_id(application["jobId"], "Job")}, {"role": 1})
        job_role = job["role"] if job else "the role"
        student = students.find_one({"_id": to_object_id(application["studentId"], "Student")},
                                    {"name": 1, "email": 1})
        if student:
            background_tasks.add_task(
                send_in_background, EmailService.send_candidate_update,
                student["email"], student["name"], subject, message
            )
        await notify_status_change(application, job_role)
        await notify(
            application["studentId"],
            "startup_message",
            subject,
            message,
            data={"applicationId": application_id, "jobTitle": job_role, "status": target.value},
            event=EVENT_NOTIFICATION,
        )
        notified += 1

    logger.info("Startup %s notified %d candidate(s) as %s", startup["startup_id"], notified, target.value)
    return {"updated": updated, "skipped": skipped, "notified": notified}
