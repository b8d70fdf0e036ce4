"""
Startup Profile Routes

POST   /startupProfile          - Create the logged-in startup's profile
GET    /startupProfiles         - List startup profiles (public)
GET    /startupProfile/me       - Own profile
GET    /startupProfile/me/plan  - Own plan and its features
GET    /startupProfile/{id}     - Profile by id (counts a view)
PUT    /startupProfile/{id}     - Update own profile
DELETE /startupProfile/{id}     - Delete own profile
"""

from fastapi import APIRouter, Depends, Query

from wostup.core import plans
from wostup.core.auth import get_current_startup, get_current_startup_account
from wostup.core.errors import NotFoundException, ForbiddenException
from wostup.schemas.schemas import StartupProfileCreate, StartupProfileUpdate, ApiResponse, MessageResponse
from wostup.services.mongo_service import serialize_doc, serialize_docs
from wostup.services.profile_service import StartupProfileService

router = APIRouter(tags=["Startup Profiles"])


def _owned_profile(profile_id: str, user: dict) -> dict:
    profile = StartupProfileService().get_by_id(profile_id)
    if not profile:
        raise NotFoundException("Startup profile not found")
    if profile["userId"] != user["user_id"]:
        raise ForbiddenException("You can only change your own profile")
    return profile


@router.post("/startupProfile", response_model=ApiResponse[dict], status_code=201)
async def create_profile(profile: StartupProfileCreate, user: dict = Depends(get_current_startup_account)):
    """Create the startup profile. One per startup account."""
    doc = StartupProfileService().create(user["user_id"], profile.model_dump(exclude_none=True))
    return ApiResponse(data=serialize_doc(doc), message="Profile created")


@router.get("/startupProfiles", response_model=ApiResponse[list])
async def list_profiles(hiring: bool = Query(False, description="Only startups that are hiring")):
    profiles = serialize_docs(StartupProfileService().list_all(hiring_only=hiring))
    return ApiResponse(data=profiles, count=len(profiles))


@router.get("/startupProfile/me", response_model=ApiResponse[dict])
async def get_my_profile(startup: dict = Depends(get_current_startup)):
    return ApiResponse(data=serialize_doc(startup["profile"]))


@router.get("/startupProfile/me/plan", response_model=ApiResponse[dict])
async def get_my_plan(startup: dict = Depends(get_current_startup)):
    """Effective plan (FREE when none was chosen) and what it unlocks."""
    plan = plans.resolve_plan(startup["plan"])
    profile = startup["profile"]
    return ApiResponse(data={
        "planType": plan.value,
        "selected": bool(startup["plan"]),
        "planActivatedAt": profile.get("planActivatedAt"),
        "features": plans.get_features(plan.value),
    })


@router.get("/startupProfile/{profile_id}", response_model=ApiResponse[dict])
async def get_profile(profile_id: str):
    service = StartupProfileService()
    profile = service.get_by_id(profile_id)
    if not profile:
        raise NotFoundException("Startup profile not found")
    service.increment_views(profile_id)
    profile["views"] = profile.get("views", 0) + 1
    return ApiResponse(data=serialize_doc(profile))


@router.put("/startupProfile/{profile_id}", response_model=ApiResponse[dict])
async def update_profile(profile_id: str, update: StartupProfileUpdate,
                         user: dict = Depends(get_current_startup_account)):
    _owned_profile(profile_id, user)
    profile = StartupProfileService().update(profile_id, update.model_dump(exclude_none=True))
    return ApiResponse(data=serialize_doc(profile), message="Profile updated")


@router.delete("/startupProfile/{profile_id}", response_model=MessageResponse)
async def delete_profile(profile_id: str, user: dict = Depends(get_current_startup_account)):
    _owned_profile(profile_id, user)
    StartupProfileService().delete(profile_id)
    return MessageResponse(message="Profile deleted")
