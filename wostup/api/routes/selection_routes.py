"""
Selection Routes - move candidates along and tell them by email.

POST /shortlists/notify  - Shortlist and notify
POST /selections/notify  - Select and notify
POST /rejections/notify  - Reject and notify

Body: {subject, message, applicationIdList}. More than one application
in one call needs the bulk email feature.
"""

from fastapi import APIRouter, BackgroundTasks, Depends

from wostup.core.auth import get_current_startup
from wostup.schemas.schemas import (
    SelectionNotifyRequest, SelectionNotifyResponse, ApplicationStatus, ApiResponse
)
from wostup.services.selection_service import notify_candidates

router = APIRouter(tags=["Selection"])


async def _notify(target: ApplicationStatus, request: SelectionNotifyRequest,
                  background_tasks: BackgroundTasks, startup: dict) -> ApiResponse:
    result = await notify_candidates(
        startup, target, request.subject, request.message,
        request.applicationIdList, background_tasks
    )
    return ApiResponse(data=SelectionNotifyResponse(**result),
                       message=f"{result['notified']} candidate(s) notified")


@router.post("/shortlists/notify", response_model=ApiResponse[SelectionNotifyResponse])
async def notify_shortlisted(request: SelectionNotifyRequest, background_tasks: BackgroundTasks,
                             startup: dict = Depends(get_current_startup)):
    return await _notify(ApplicationStatus.shortlisted, request, background_tasks, startup)


@router.post("/selections/notify", response_model=ApiResponse[SelectionNotifyResponse])
async def notify_selected(request: SelectionNotifyRequest, background_tasks: BackgroundTasks,
                          startup: dict = Depends(get_current_startup)):
    return await _notify(ApplicationStatus.selected, request, background_tasks, startup)


@router.post("/rejections/notify", response_model=ApiResponse[SelectionNotifyResponse])
async def notify_rejected(request: SelectionNotifyRequest, background_tasks: BackgroundTasks,
                          startup: dict = Depends(get_current_startup)):
    return await _notify(ApplicationStatus.rejected, request, background_tasks, startup)
