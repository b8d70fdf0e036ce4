"""
Analytics Routes

GET /analytics/hiring/summary?jobId=        - Hiring funnel for the startup (plan gated sections)
GET /analytics/startup/{startup_id}/summary - Headline numbers for a startup profile
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from wostup.core.auth import get_current_startup
from wostup.core.errors import ForbiddenException
from wostup.schemas.schemas import ApiResponse, HiringAnalytics
from wostup.services import analytics_service
from wostup.services.job_service import JobService

router = APIRouter(prefix="/analytics", tags=["Analytics"])


@router.get("/hiring/summary", response_model=ApiResponse[HiringAnalytics])
async def hiring_summary(jobId: Optional[str] = Query(None),
                         startup: dict = Depends(get_current_startup)):
    """
    Basic counts are available on every plan. Time series and per-job
    breakdowns need advanced analytics, skills need full analytics; sections
    the plan lacks come back empty and are named in `locked`.
    """
    if jobId:
        JobService().get_owned(jobId, startup["startup_id"])
    summary = analytics_service.hiring_summary(startup["startup_id"], startup["plan"], job_id=jobId)
    return ApiResponse(data=HiringAnalytics(**summary))


@router.get("/startup/{startup_id}/summary", response_model=ApiResponse[dict])
async def startup_summary(startup_id: str, startup: dict = Depends(get_current_startup)):
    if startup_id != startup["startup_id"]:
        raise ForbiddenException("You can only view your own analytics")
    return ApiResponse(data=analytics_service.startup_summary(startup["profile"]))
