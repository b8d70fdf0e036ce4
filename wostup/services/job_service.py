"""
Job Service - job postings owned by a startup profile.

Only OPEN jobs count against the plan's `maxActiveJobs`; closing a job frees
a slot and re-opening it takes one again.
"""

import logging
import re
from typing import Optional, List, Dict

from pymongo.collection import Collection

from wostup.core import plans
from wostup.core.errors import NotFoundException, BadRequestException
from wostup.db.mongodb import get_collection, COLLECTIONS
from wostup.schemas.schemas import JobStatus
from wostup.services.mongo_service import to_object_id, utcnow, as_utc

logger = logging.getLogger(__name__)

STARTUP_SUMMARY_FIELDS = {"startupName": 1, "industry": 1, "location": 1}


class JobService:

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["jobs"])

    def count_active(self, startup_id: str) -> int:
        return self.collection.count_documents({"startupId": startup_id, "status": JobStatus.open.value})

    def create(self, startup_id: str, plan: Optional[str], data: dict) -> dict:
        """Create an OPEN job after checking the plan's active job limit."""
        plans.require_within_limit(plan, "maxActiveJobs", self.count_active(startup_id))

        if data.get("deadline") and as_utc(data["deadline"]) < utcnow():
            raise BadRequestException("Deadline must be in the future")

        now = utcnow()
        doc = {
            **data,
            "startupId": startup_id,
            "status": JobStatus.open.value,
            "createdAt": now,
            "updatedAt": now,
        }
        result = self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        logger.info("Startup %s created job %s", startup_id, result.inserted_id)
        return doc

    def get(self, job_id: str) -> dict:
        job = self.collection.find_one({"_id": to_object_id(job_id, "Job")})
        if not job:
            raise NotFoundException("Job not found")
        return job

    def get_owned(self, job_id: str, startup_id: str) -> dict:
        job = self.collection.find_one({"_id": to_object_id(job_id, "Job"), "startupId": startup_id})
        if not job:
            raise NotFoundException("Job not found or access denied")
        return job

    def list_open(self, search: Optional[str] = None, job_type: Optional[str] = None,
                  location: Optional[str] = None, tag: Optional[str] = None) -> List[dict]:
        query: Dict = {"status": JobStatus.open.value}
        if search:
            query["role"] = {"$regex": re.escape(search), "$options": "i"}
        if job_type:
            query["jobType"] = job_type
        if location:
            query["location"] = {"$regex": re.escape(location), "$options": "i"}
        if tag:
            query["Tag"] = tag
        return list(self.collection.find(query).sort("createdAt", -1))

    def list_for_startup(self, startup_id: str) -> List[dict]:
        return list(self.collection.find({"startupId": startup_id}).sort("createdAt", -1))

    def update(self, job_id: str, startup_id: str, plan: Optional[str], fields: dict) -> dict:
        job = self.get_owned(job_id, startup_id)

        reopening = (
            fields.get("status") == JobStatus.open.value
            and job.get("status") != JobStatus.open.value
        )
        if reopening:
            plans.require_within_limit(plan, "maxActiveJobs", self.count_active(startup_id))

        if fields:
            fields["updatedAt"] = utcnow()
            self.collection.update_one({"_id": job["_id"]}, {"$set": fields})
        return self.get(job_id)

    def delete(self, job_id: str, startup_id: str) -> None:
        """Delete a job posting. Cascades to its applications and interviews."""
        job = self.get_owned(job_id, startup_id)
        job_ref = str(job["_id"])
        self.collection.delete_one({"_id": job["_id"]})
        get_collection(COLLECTIONS["applications"]).delete_many({"jobId": job_ref})
        get_collection(COLLECTIONS["interviews"]).delete_many({"jobId": job_ref})

    def roles_by_id(self, job_ids) -> Dict[str, str]:
        ids = [to_object_id(j, "Job") for j in set(job_ids)]
        return {str(j["_id"]): j["role"] for j in self.collection.find({"_id": {"$in": ids}}, {"role": 1})}


def attach_startups(jobs: List[dict]) -> List[dict]:
    """Replace each job's startupId with a short startup summary (like a populate)."""
    profiles = get_collection(COLLECTIONS["startup_profiles"])
    ids = {j["startupId"] for j in jobs}
    summaries = {
        str(p["_id"]): p
        for p in profiles.find({"_id": {"$in": [to_object_id(i, "Startup profile") for i in ids]}},
                               STARTUP_SUMMARY_FIELDS)
    }
    for job in jobs:
        job["startupId"] = summaries.get(job["startupId"], job["startupId"])
    return jobs
