"""
Interview Routes

POST /interviews/{application_id}/schedule - Schedule an interview (startup only)
GET  /interviews                           - Startup: own interviews (filters); student: own
PUT  /interviews/{id}/reschedule           - Move an interview to another slot
PUT  /interviews/{id}/status               - Complete / no-show / cancel
"""

from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query

from wostup.core.auth import get_current_user, get_current_startup
from wostup.schemas.schemas import (
    InterviewScheduleRequest, InterviewRescheduleRequest, InterviewStatusUpdate,
    InterviewStatus, ApiResponse, UserRole
)
from wostup.services.email_service import EmailService, send_in_background
from wostup.services.interview_service import InterviewService
from wostup.services.mongo_service import serialize_doc, serialize_docs
from wostup.services.notification_service import notify, notify_status_change

router = APIRouter(prefix="/interviews", tags=["Interviews"])

# Date and time arrive separately from the web client and are folded into scheduledAt
CLIENT_ONLY_FIELDS = {"interviewDate", "interviewTime"}


def _when(interview: dict) -> str:
    return serialize_doc(interview)["scheduledAt"].strftime("%Y-%m-%d %H:%M UTC")


@router.post("/{application_id}/schedule", response_model=ApiResponse[dict], status_code=201)
async def schedule_interview(application_id: str, request: InterviewScheduleRequest,
                             background_tasks: BackgroundTasks,
                             startup: dict = Depends(get_current_startup)):
    """
    Schedule an interview and move the application to INTERVIEW_SCHEDULED.

    409 when the interviewer or the candidate already has an overlapping
    interview, 403 when the plan's monthly interview quota is used up.
    """
    service = InterviewService()
    interview = service.schedule(application_id, startup, request.model_dump(exclude=CLIENT_ONLY_FIELDS))

    if interview.get("candidateEmail"):
        background_tasks.add_task(
            send_in_background, EmailService.send_interview_invitation,
            interview["candidateEmail"], interview["candidateName"],
            interview["jobTitle"] or "the role", serialize_doc(interview)
        )

    application = service.applications.get(interview["applicationId"])
    await notify_status_change(application, interview["jobTitle"] or "the role")
    return ApiResponse(data=serialize_doc(interview), message="Interview scheduled")


@router.get("", response_model=ApiResponse[list])
async def list_interviews(
    jobId: Optional[str] = Query(None),
    interviewer: Optional[str] = Query(None),
    status: Optional[InterviewStatus] = Query(None),
    user: dict = Depends(get_current_user)
):
    service = InterviewService()
    if user["role"] == UserRole.student.value:
        interviews = service.list_for_student(user["user_id"])
    else:
        startup = await get_current_startup(user)
        interviews = service.list_for_startup(
            startup["startup_id"], job_id=jobId, interviewer=interviewer,
            status=status.value if status else None
        )
    interviews = serialize_docs(interviews)
    return ApiResponse(data=interviews, count=len(interviews))


@router.put("/{interview_id}/reschedule", response_model=ApiResponse[dict])
async def reschedule_interview(interview_id: str, request: InterviewRescheduleRequest,
                               startup: dict = Depends(get_current_startup)):
    fields = request.model_dump(exclude=CLIENT_ONLY_FIELDS, exclude_none=True)
    interview = InterviewService().reschedule(interview_id, startup["startup_id"], fields)

    await notify(
        interview["studentId"],
        "interview_rescheduled",
        "Interview Rescheduled",
        f"Your interview for {interview.get('jobTitle') or 'the role'} moved to {_when(interview)}.",
        data={"interviewId": str(interview["_id"]), "applicationId": interview["applicationId"]},
    )
    return ApiResponse(data=serialize_doc(interview), message="Interview rescheduled")


@router.put("/{interview_id}/status", response_model=ApiResponse[dict])
async def update_interview_status(interview_id: str, request: InterviewStatusUpdate,
                                  startup: dict = Depends(get_current_startup)):
    interview = InterviewService().update_status(interview_id, startup["startup_id"], request.status)

    if request.status == InterviewStatus.cancelled:
        await notify(
            interview["studentId"],
            "interview_cancelled",
            "Interview Cancelled",
            f"Your interview for {interview.get('jobTitle') or 'the role'} on {_when(interview)} was cancelled.",
            data={"interviewId": str(interview["_id"]), "applicationId": interview["applicationId"]},
        )
    return ApiResponse(data=serialize_doc(interview), message="Interview updated")
