"""
Application Routes

POST /applications              - Apply to a job (student only)
GET  /applications              - Own applications (student) or received (startup)
GET  /applications/job/{job_id} - Applications for one of the startup's jobs
PUT  /applications/{id}         - Change application status (owning startup only)
"""

from fastapi import APIRouter, Depends

from wostup.core.auth import get_current_user, get_current_student, get_current_startup
from wostup.core.errors import BadRequestException
from wostup.schemas.schemas import ApplicationCreate, ApplicationUpdate, ApplicationStatus, ApiResponse, UserRole
from wostup.services.application_service import ApplicationService, attach_jobs_and_students
from wostup.services.job_service import JobService
from wostup.services.mongo_service import serialize_doc, serialize_docs
from wostup.services.notification_service import notify, notify_status_change
from wostup.services.profile_service import StartupProfileService

router = APIRouter(prefix="/applications", tags=["Applications"])


@router.post("", response_model=ApiResponse[dict], status_code=201)
async def apply_to_job(application: ApplicationCreate, student: dict = Depends(get_current_student)):
    """Apply to a job. Students only. Cannot apply twice to same job."""
    job = JobService().get(application.jobId)
    data = application.model_dump(exclude={"jobId"}, exclude_none=True)
    doc = ApplicationService().create(student["user_id"], job, data)

    owner = StartupProfileService().get_by_id(job["startupId"])
    if owner:
        await notify(
            owner["userId"],
            "new_application",
            "New Application",
            f"{student['name']} applied for {job['role']}.",
            data={"applicationId": str(doc["_id"]), "jobId": str(job["_id"])},
        )
    return ApiResponse(data=serialize_doc(doc), message="Application submitted successfully")


@router.get("", response_model=ApiResponse[list])
async def list_applications(user: dict = Depends(get_current_user)):
    if user["role"] == UserRole.student.value:
        applications = ApplicationService().list_for_student(user["user_id"])
    else:
        startup = await get_current_startup(user)
        applications = ApplicationService().list_for_startup(startup["startup_id"])
    applications = serialize_docs(attach_jobs_and_students(applications))
    return ApiResponse(data=applications, count=len(applications))


@router.get("/job/{job_id}", response_model=ApiResponse[list])
async def list_job_applications(job_id: str, startup: dict = Depends(get_current_startup)):
    JobService().get_owned(job_id, startup["startup_id"])
    applications = ApplicationService().list_for_startup(startup["startup_id"], job_id=job_id)
    applications = serialize_docs(attach_jobs_and_students(applications))
    return ApiResponse(data=applications, count=len(applications))


@router.put("/{application_id}", response_model=ApiResponse[dict])
async def update_application_status(application_id: str, update: ApplicationUpdate,
                                    startup: dict = Depends(get_current_startup)):
    """
    Move an application along the hiring flow. Interviews are scheduled
    through /interviews, not by setting INTERVIEW_SCHEDULED here.
    """
    if update.status == ApplicationStatus.interview_scheduled:
        raise BadRequestException("Schedule an interview to move an application to INTERVIEW_SCHEDULED")

    service = ApplicationService()
    application = service.get_for_startup(application_id, startup["startup_id"])
    application = service.transition(application, update.status, notes=update.notes)

    job = JobService().get(application["jobId"])
    await notify_status_change(application, job["role"])
    return ApiResponse(data=serialize_doc(application), message="Application status updated")
