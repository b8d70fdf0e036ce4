"""
Subscription plans and server-side entitlement checks.

Each tier maps to a capability set. Numeric limits use None for unlimited.
A feature is granted unless its value is False or 0; a startup without a
chosen plan is treated as FREE.
"""

from enum import Enum
from typing import Any, Dict, Optional

from wostup.core.errors import PlanLimitException


class PlanName(str, Enum):
    FREE = "FREE"
    GROWTH = "GROWTH"
    PRO = "PRO"
    ENTERPRISE = "ENTERPRISE"


DEFAULT_PLAN = PlanName.FREE

PLAN_FEATURES: Dict[PlanName, Dict[str, Any]] = {
    PlanName.FREE: {
        "maxActiveJobs": 2,
        "maxInterviewsPerMonth": 5,
        "analytics": "basic",
        "bulkEmail": False,
        "jobAnalysis": "basic",
        "socialRecruiter": False,
        "interviewCalendar": True,
        "prioritySupport": False,
    },
    PlanName.GROWTH: {
        "maxActiveJobs": 10,
        "maxInterviewsPerMonth": 50,
        "analytics": "advanced",
        "bulkEmail": True,
        "jobAnalysis": "basic",
        "socialRecruiter": False,
        "interviewCalendar": True,
        "prioritySupport": False,
    },
    PlanName.PRO: {
        "maxActiveJobs": 25,
        "maxInterviewsPerMonth": 200,
        "analytics": "full",
        "bulkEmail": True,
        "jobAnalysis": "advanced",
        "socialRecruiter": True,
        "interviewCalendar": True,
        "prioritySupport": False,
    },
    PlanName.ENTERPRISE: {
        "maxActiveJobs": None,
        "maxInterviewsPerMonth": None,
        "analytics": "custom",
        "bulkEmail": True,
        "jobAnalysis": "advanced",
        "socialRecruiter": True,
        "interviewCalendar": True,
        "prioritySupport": True,
    },
}

# Monthly price in the smallest currency unit. ENTERPRISE is sold offline.
PLAN_PRICES: Dict[PlanName, Optional[int]] = {
    PlanName.FREE: 0,
    PlanName.GROWTH: 4900,
    PlanName.PRO: 14900,
    PlanName.ENTERPRISE: None,
}

FEATURE_NAMES = {
    "maxActiveJobs": "Active job postings",
    "maxInterviewsPerMonth": "Interviews per month",
    "analytics": "Hiring analytics",
    "bulkEmail": "Bulk email",
    "jobAnalysis": "Job analysis",
    "socialRecruiter": "Social recruiter",
    "interviewCalendar": "Interview calendar",
    "prioritySupport": "Priority support",
}

ANALYTICS_LEVELS = ["basic", "advanced", "full", "custom"]


def resolve_plan(plan: Optional[str]) -> PlanName:
    """Map a stored plan value to a PlanName, defaulting to FREE."""
    if not plan:
        return DEFAULT_PLAN
    try:
        return PlanName(str(plan).upper())
    except ValueError:
        return DEFAULT_PLAN


def get_features(plan: Optional[str]) -> Dict[str, Any]:
    return dict(PLAN_FEATURES[resolve_plan(plan)])


def get_feature_value(plan: Optional[str], feature: str) -> Any:
    features = PLAN_FEATURES[resolve_plan(plan)]
    if feature not in features:
        raise KeyError(f"Unknown feature: {feature}")
    return features[feature]


def has_access(plan: Optional[str], feature: str) -> bool:
    value = get_feature_value(plan, feature)
    return value is not False and value != 0


def require_feature(plan: Optional[str], feature: str) -> None:
    """Raise PlanLimitException if the plan does not include `feature`."""
    if not has_access(plan, feature):
        name = FEATURE_NAMES.get(feature, feature)
        raise PlanLimitException(
            f"{name} is not available on the {resolve_plan(plan).value} plan. Upgrade to continue.",
            feature=feature,
            plan=resolve_plan(plan).value,
        )


def require_within_limit(plan: Optional[str], feature: str, current: int) -> None:
    """
    Raise PlanLimitException if using one more unit of a numeric feature
    would exceed the plan's limit.
    """
    limit = get_feature_value(plan, feature)
    if limit is None:
        return
    if current >= limit:
        name = FEATURE_NAMES.get(feature, feature)
        raise PlanLimitException(
            f"{name} limit reached ({limit}) on the {resolve_plan(plan).value} plan. Upgrade to continue.",
            feature=feature,
            plan=resolve_plan(plan).value,
        )


def analytics_allows(plan: Optional[str], minimum: str) -> bool:
    level = get_feature_value(plan, "analytics")
    return ANALYTICS_LEVELS.index(level) >= ANALYTICS_LEVELS.index(minimum)
