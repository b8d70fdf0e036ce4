"""
Analytics Service - hiring funnel numbers for a startup's dashboard.

Sections by plan analytics level:
    basic     totalApplications, statusDistribution, conversionRate
    advanced  + applicationsOverTime, applicationsByJob
    full      + topSkills
Sections the plan does not include are returned empty and listed in `locked`.
"""

from collections import Counter
from typing import Optional, List, Dict

from wostup.core import plans
from wostup.db.mongodb import get_collection, COLLECTIONS
from wostup.schemas.schemas import ApplicationStatus, JobStatus, InterviewStatus
from wostup.services.job_service import JobService
from wostup.services.mongo_service import as_utc

TOP_SKILLS_LIMIT = 10

SECTION_LEVELS = {
    "applicationsOverTime": "advanced",
    "applicationsByJob": "advanced",
    "topSkills": "full",
}


def conversion_rate(selected: int, total: int) -> float:
    if not total:
        return 0.0
    return round(selected * 100.0 / total, 1)


def _status_distribution(applications: List[dict]) -> List[Dict]:
    counts = Counter(a["status"] for a in applications)
    return [{"status": s.value, "count": counts.get(s.value, 0)} for s in ApplicationStatus]


def _over_time(applications: List[dict]) -> List[Dict]:
    counts = Counter(as_utc(a["createdAt"]).strftime("%Y-%m-%d") for a in applications)
    return [{"date": day, "count": counts[day]} for day in sorted(counts)]


def _by_job(applications: List[dict]) -> List[Dict]:
    counts = Counter(a["jobId"] for a in applications)
    roles = JobService().roles_by_id(counts.keys()) if counts else {}
    rows = [{"jobId": job_id, "role": roles.get(job_id, "Deleted job"), "count": n}
            for job_id, n in counts.items()]
    return sorted(rows, key=lambda r: (-r["count"], r["role"]))


def _top_skills(applications: List[dict]) -> List[Dict]:
    counts = Counter()
    for app in applications:
        # A skill counts once per applicant
        counts.update({s.strip().lower() for s in app.get("skills") or [] if s and s.strip()})
    return [{"skill": skill, "count": n} for skill, n in counts.most_common(TOP_SKILLS_LIMIT)]


def hiring_summary(startup_id: str, plan: Optional[str], job_id: Optional[str] = None) -> dict:
    query = {"startupId": startup_id}
    if job_id:
        query["jobId"] = job_id
    applications = list(get_collection(COLLECTIONS["applications"]).find(
        query, {"status": 1, "createdAt": 1, "jobId": 1, "skills": 1}
    ))

    selected = sum(1 for a in applications if a["status"] == ApplicationStatus.selected.value)
    summary = {
        "totalApplications": len(applications),
        "statusDistribution": _status_distribution(applications),
        "conversionRate": conversion_rate(selected, len(applications)),
        "applicationsOverTime": [],
        "applicationsByJob": [],
        "topSkills": [],
        "plan": plans.resolve_plan(plan).value,
        "locked": [],
    }

    builders = {
        "applicationsOverTime": _over_time,
        "applicationsByJob": _by_job,
        "topSkills": _top_skills,
    }
    for section, level in SECTION_LEVELS.items():
        if plans.analytics_allows(plan, level):
            summary[section] = builders[section](applications)
        else:
            summary["locked"].append(section)
    return summary


def startup_summary(profile: dict) -> dict:
    startup_id = str(profile["_id"])
    jobs = get_collection(COLLECTIONS["jobs"])
    applications = get_collection(COLLECTIONS["applications"])
    interviews = get_collection(COLLECTIONS["interviews"])

    status_counts = Counter(a["status"] for a in applications.find({"startupId": startup_id}, {"status": 1}))
    total = sum(status_counts.values())
    return {
        "startupId": startup_id,
        "startupName": profile.get("startupName"),
        "profileViews": profile.get("views", 0),
        "totalJobs": jobs.count_documents({"startupId": startup_id}),
        "activeJobs": jobs.count_documents({"startupId": startup_id, "status": JobStatus.open.value}),
        "totalApplications": total,
        "shortlisted": status_counts.get(ApplicationStatus.shortlisted.value, 0),
        "interviewsScheduled": interviews.count_documents({
            "startupId": startup_id, "status": InterviewStatus.scheduled.value
        }),
        "selected": status_counts.get(ApplicationStatus.selected.value, 0),
        "rejected": status_counts.get(ApplicationStatus.rejected.value, 0),
        "conversionRate": conversion_rate(status_counts.get(ApplicationStatus.selected.value, 0), total),
    }
