"""
Job Routes

GET    /get-all-jobs       - List open jobs with filters (public)
GET    /get-job/{job_id}   - Job details (public)
GET    /my-jobs            - The startup's own jobs, any status
POST   /create-job         - Create job posting (startup only)
PUT    /update-job/{job_id} - Update job (owning startup only)
DELETE /delete-job/{job_id} - Delete job (owning startup only)
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from wostup.core.auth import get_current_startup
from wostup.schemas.schemas import JobCreate, JobUpdate, ApiResponse, MessageResponse
from wostup.services.job_service import JobService, attach_startups
from wostup.services.mongo_service import serialize_doc, serialize_docs

router = APIRouter(tags=["Jobs"])


@router.get("/get-all-jobs", response_model=ApiResponse[list])
async def list_jobs(
    search: Optional[str] = Query(None, description="Search in role"),
    jobType: Optional[str] = Query(None),
    location: Optional[str] = Query(None),
    tag: Optional[str] = Query(None)
):
    """List all open job postings, newest first."""
    jobs = JobService().list_open(search=search, job_type=jobType, location=location, tag=tag)
    jobs = serialize_docs(attach_startups(jobs))
    return ApiResponse(data=jobs, count=len(jobs))


@router.get("/get-job/{job_id}", response_model=ApiResponse[dict])
async def get_job(job_id: str):
    job = JobService().get(job_id)
    return ApiResponse(data=serialize_doc(attach_startups([job])[0]))


@router.get("/my-jobs", response_model=ApiResponse[list])
async def list_my_jobs(startup: dict = Depends(get_current_startup)):
    jobs = serialize_docs(JobService().list_for_startup(startup["startup_id"]))
    return ApiResponse(data=jobs, count=len(jobs))


@router.post("/create-job", response_model=ApiResponse[dict], status_code=201)
async def create_job(job: JobCreate, startup: dict = Depends(get_current_startup)):
    """Create a new job posting. Limited by the plan's active job count."""
    doc = JobService().create(startup["startup_id"], startup["plan"], job.model_dump())
    return ApiResponse(data=serialize_doc(doc), message="Job created")


@router.put("/update-job/{job_id}", response_model=ApiResponse[dict])
async def update_job(job_id: str, update: JobUpdate, startup: dict = Depends(get_current_startup)):
    """Update a job posting. Re-opening a closed job counts against the plan again."""
    job = JobService().update(job_id, startup["startup_id"], startup["plan"],
                              update.model_dump(exclude_none=True))
    return ApiResponse(data=serialize_doc(job), message="Job updated")


@router.delete("/delete-job/{job_id}", response_model=MessageResponse)
async def delete_job(job_id: str, startup: dict = Depends(get_current_startup)):
    """Delete a job posting. Cascades to applications and interviews."""
    JobService().delete(job_id, startup["startup_id"])
    return MessageResponse(message="Job deleted successfully")
