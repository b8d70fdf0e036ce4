"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
Field names are camelCase to match the documents and the web client.
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from typing import Optional, List, Any, Dict, Generic, TypeVar
from datetime import datetime, date, time, timezone
from enum import Enum

T = TypeVar("T")


# ============================================================
# ENUMS
# ============================================================

class UserRole(str, Enum):
    student = "student"
    startup = "startup"


class JobStatus(str, Enum):
    open = "OPEN"
    closed = "CLOSED"


class ApplicationStatus(str, Enum):
    applied = "APPLIED"
    shortlisted = "SHORTLISTED"
    interview_scheduled = "INTERVIEW_SCHEDULED"
    selected = "SELECTED"
    rejected = "REJECTED"


class InterviewMode(str, Enum):
    online = "online"
    offline = "offline"


class InterviewStage(str, Enum):
    screening = "screening"
    technical = "technical"
    hr = "hr"
    final = "final"


class InterviewStatus(str, Enum):
    scheduled = "scheduled"
    completed = "completed"
    no_show = "no-show"
    cancelled = "cancelled"


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class ApiResponse(BaseModel, Generic[T]):
    """Envelope returned by every endpoint: {success, data?, message?}."""
    success: bool = True
    data: Optional[T] = None
    message: Optional[str] = None
    count: Optional[int] = None


class SuccessResponse(BaseModel):
    success: bool = True


class MessageResponse(BaseModel):
    message: str
    success: bool = True


# ============================================================
# AUTH SCHEMAS
# ============================================================

class SignupRequest(BaseModel):
    username: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8)
    role: UserRole


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


def _as_text(value: Any) -> Optional[str]:
    return value if value is None or isinstance(value, str) else str(value)


class ResendVerificationRequest(BaseModel):
    # Not EmailStr: malformed input must get the same generic reply
    email: Optional[str] = None

    @field_validator("email", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> Any:
        return _as_text(value)


class VerifyEmailRequest(BaseModel):
    email: Optional[str] = None
    token: Optional[str] = None

    @field_validator("email", "token", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> Any:
        # Codes are digits, so clients often send them as JSON numbers
        return _as_text(value)


# ============================================================
# STARTUP PROFILE SCHEMAS
# ============================================================

class Location(BaseModel):
    city: Optional[str] = None
    country: Optional[str] = None


class SocialLinks(BaseModel):
    linkedin: Optional[str] = None
    twitter: Optional[str] = None
    github: Optional[str] = None


class LeadershipMember(BaseModel):
    user: Optional[str] = None
    role: Optional[str] = None


class StartupProfileCreate(BaseModel):
    startupName: str = Field(..., min_length=2, max_length=200)
    tagline: Optional[str] = None
    aboutus: Optional[str] = None
    industry: Optional[str] = None
    stage: Optional[str] = None
    foundedYear: Optional[int] = Field(None, ge=1800, le=2100)
    teamSize: Optional[int] = Field(None, ge=0)
    numberOfEmployees: Optional[int] = Field(None, ge=0)
    website: Optional[str] = None
    profilepic: Optional[str] = None
    productOrService: Optional[str] = None
    cultureAndValues: Optional[str] = None
    socialLinks: Optional[SocialLinks] = None
    location: Optional[Location] = None
    leadershipTeam: List[LeadershipMember] = []
    hiring: bool = True


class StartupProfileUpdate(BaseModel):
    startupName: Optional[str] = Field(None, min_length=2, max_length=200)
    tagline: Optional[str] = None
    aboutus: Optional[str] = None
    industry: Optional[str] = None
    stage: Optional[str] = None
    foundedYear: Optional[int] = Field(None, ge=1800, le=2100)
    teamSize: Optional[int] = Field(None, ge=0)
    numberOfEmployees: Optional[int] = Field(None, ge=0)
    website: Optional[str] = None
    profilepic: Optional[str] = None
    productOrService: Optional[str] = None
    cultureAndValues: Optional[str] = None
    socialLinks: Optional[SocialLinks] = None
    location: Optional[Location] = None
    leadershipTeam: Optional[List[LeadershipMember]] = None
    hiring: Optional[bool] = None


# ============================================================
# JOB SCHEMAS
# ============================================================

class JobCreate(BaseModel):
    role: str = Field(..., min_length=2, max_length=200)
    aboutRole: str = Field(..., min_length=1)
    keyResponsibilities: Optional[str] = None
    requirements: Optional[str] = None
    perksAndBenifits: Optional[str] = None
    stipend: bool = False
    salary: Optional[str] = None
    openings: int = Field(1, ge=1)
    deadline: Optional[datetime] = None
    jobType: str = "Full-time"
    location: Optional[str] = None
    Tag: List[str] = []


class JobUpdate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    role: Optional[str] = Field(None, min_length=2, max_length=200)
    aboutRole: Optional[str] = None
    keyResponsibilities: Optional[str] = None
    requirements: Optional[str] = None
    perksAndBenifits: Optional[str] = None
    stipend: Optional[bool] = None
    salary: Optional[str] = None
    openings: Optional[int] = Field(None, ge=1)
    deadline: Optional[datetime] = None
    jobType: Optional[str] = None
    location: Optional[str] = None
    Tag: Optional[List[str]] = None
    status: Optional[JobStatus] = None


# ============================================================
# APPLICATION SCHEMAS
# ============================================================

class ApplicationCreate(BaseModel):
    jobId: str
    coverLetter: Optional[str] = None
    resumeUrl: Optional[str] = None
    skills: List[str] = []
    atsScore: Optional[float] = Field(None, ge=0, le=100)


class ApplicationUpdate(BaseModel):
    status: ApplicationStatus
    notes: Optional[str] = None


# ============================================================
# INTERVIEW SCHEMAS
# ============================================================

def _ensure_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _fold_date_time(request, required: bool = True):
    """Accept `scheduledAt` or the web client's interviewDate + interviewTime pair."""
    if request.scheduledAt is None:
        if request.interviewDate is None or request.interviewTime is None:
            if required:
                raise ValueError("scheduledAt or interviewDate and interviewTime are required")
            return request
        request.scheduledAt = _ensure_utc(datetime.combine(request.interviewDate, request.interviewTime))
    return request


class InterviewScheduleRequest(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    scheduledAt: Optional[datetime] = None
    interviewDate: Optional[date] = None
    interviewTime: Optional[time] = None
    durationMinutes: int = Field(60, ge=5, le=480)
    mode: InterviewMode = InterviewMode.online
    location: Optional[str] = None
    meetingLink: Optional[str] = None
    interviewer: str = Field(..., min_length=1, max_length=200)
    stage: InterviewStage = InterviewStage.screening
    notes: Optional[str] = None

    @model_validator(mode="after")
    def combine_date_and_time(self):
        return _fold_date_time(self)

    @field_validator("scheduledAt")
    @classmethod
    def to_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _ensure_utc(value) if value else value

    @model_validator(mode="after")
    def check_venue(self):
        if self.mode == InterviewMode.offline and not self.location:
            raise ValueError("location is required for offline interviews")
        return self


class InterviewRescheduleRequest(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    scheduledAt: Optional[datetime] = None
    interviewDate: Optional[date] = None
    interviewTime: Optional[time] = None
    durationMinutes: Optional[int] = Field(None, ge=5, le=480)
    interviewer: Optional[str] = None
    mode: Optional[InterviewMode] = None
    location: Optional[str] = None
    meetingLink: Optional[str] = None
    notes: Optional[str] = None

    @model_validator(mode="after")
    def combine_date_and_time(self):
        return _fold_date_time(self, required=False)

    @field_validator("scheduledAt")
    @classmethod
    def to_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _ensure_utc(value) if value else value


class InterviewStatusUpdate(BaseModel):
    status: InterviewStatus


# ============================================================
# SELECTION SCHEMAS
# ============================================================

class SelectionNotifyRequest(BaseModel):
    subject: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1)
    applicationIdList: List[str] = Field(..., min_length=1)


class SelectionNotifyResponse(BaseModel):
    updated: List[str] = []
    skipped: List[Dict[str, str]] = []
    notified: int = 0


# ============================================================
# PAYMENT SCHEMAS
# ============================================================

class CreateOrderRequest(BaseModel):
    planType: str

    @field_validator("planType")
    @classmethod
    def upper(cls, value: str) -> str:
        return value.upper()


class VerifyPaymentRequest(BaseModel):
    razorpay_order_id: str
    razorpay_payment_id: str
    razorpay_signature: str


# ============================================================
# ANALYTICS SCHEMAS
# ============================================================

class StatusStat(BaseModel):
    status: str
    count: int


class TimeStat(BaseModel):
    date: str
    count: int


class JobStat(BaseModel):
    jobId: str
    role: str
    count: int


class SkillStat(BaseModel):
    skill: str
    count: int


class HiringAnalytics(BaseModel):
    totalApplications: int
    statusDistribution: List[StatusStat] = []
    applicationsOverTime: List[TimeStat] = []
    applicationsByJob: List[JobStat] = []
    topSkills: List[SkillStat] = []
    conversionRate: float = 0.0
    plan: str
    locked: List[str] = []
