"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from wostup.api.routes.auth_routes import router as auth_router
from wostup.api.routes.startup_profile_routes import router as startup_profile_router
from wostup.api.routes.payment_routes import router as payment_router
from wostup.api.routes.job_routes import router as job_router
from wostup.api.routes.application_routes import router as application_router
from wostup.api.routes.interview_routes import router as interview_router
from wostup.api.routes.analytics_routes import router as analytics_router
from wostup.api.routes.selection_routes import router as selection_router
from wostup.api.routes.notification_routes import router as notification_router, ws_router

# Main API router (mounted under /api)
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(auth_router)
api_router.include_router(startup_profile_router)
api_router.include_router(payment_router)
api_router.include_router(job_router)
api_router.include_router(application_router)
api_router.include_router(interview_router)
api_router.include_router(analytics_router)
api_router.include_router(selection_router)
api_router.include_router(notification_router)

__all__ = ["api_router", "ws_router"]
