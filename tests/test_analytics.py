import pytest

from wostup.services.analytics_service import conversion_rate


@pytest.fixture()
def pipeline(client, make_startup, make_student, post_job, apply):
    """Startup factory with three applications: one selected, one rejected, one open."""
    def _build(plan=None):
        startup = make_startup(plan=plan)
        backend = post_job(startup, role="Backend Engineer")
        design = post_job(startup, role="Designer")
        a1 = apply(make_student(name="A"), backend["_id"], skills=["Python", "SQL"])
        a2 = apply(make_student(name="B"), backend["_id"], skills=["python", "Go", "Python "])
        a3 = apply(make_student(name="C"), design["_id"], skills=["Figma"])

        for status in ("SHORTLISTED", "SELECTED"):
            client.put(f"/api/applications/{a1['_id']}", json={"status": status}, headers=startup["headers"])
        client.put(f"/api/applications/{a2['_id']}", json={"status": "REJECTED"}, headers=startup["headers"])
        return startup, backend, design, [a1, a2, a3]
    return _build


def test_conversion_rate():
    assert conversion_rate(0, 0) == 0.0
    assert conversion_rate(1, 3) == 33.3
    assert conversion_rate(2, 2) == 100.0


def test_free_plan_gets_basic_sections_only(client, pipeline):
    startup, *_ = pipeline()
    r = client.get("/api/analytics/hiring/summary", headers=startup["headers"])
    assert r.status_code == 200
    data = r.json()["data"]

    assert data["plan"] == "FREE"
    assert data["totalApplications"] == 3
    counts = {s["status"]: s["count"] for s in data["statusDistribution"]}
    assert counts == {"APPLIED": 1, "SHORTLISTED": 0, "INTERVIEW_SCHEDULED": 0, "SELECTED": 1, "REJECTED": 1}
    assert data["conversionRate"] == 33.3

    assert data["applicationsOverTime"] == []
    assert data["applicationsByJob"] == []
    assert data["topSkills"] == []
    assert set(data["locked"]) == {"applicationsOverTime", "applicationsByJob", "topSkills"}


def test_growth_plan_unlocks_trends_but_not_skills(client, pipeline):
    startup, backend, *_ = pipeline(plan="GROWTH")
    data = client.get("/api/analytics/hiring/summary", headers=startup["headers"]).json()["data"]

    assert sum(day["count"] for day in data["applicationsOverTime"]) == 3
    assert data["applicationsByJob"][0] == {"jobId": backend["_id"], "role": "Backend Engineer", "count": 2}
    assert data["topSkills"] == []
    assert data["locked"] == ["topSkills"]


def test_pro_plan_counts_skills_once_per_applicant(client, pipeline):
    startup, *_ = pipeline(plan="PRO")
    data = client.get("/api/analytics/hiring/summary", headers=startup["headers"]).json()["data"]

    skills = {s["skill"]: s["count"] for s in data["topSkills"]}
    assert skills["python"] == 2
    assert skills["figma"] == 1
    assert data["topSkills"][0]["skill"] == "python"
    assert data["locked"] == []


def test_summary_for_one_job(client, pipeline):
    startup, _, design, _ = pipeline()
    r = client.get("/api/analytics/hiring/summary", params={"jobId": design["_id"]}, headers=startup["headers"])
    assert r.json()["data"]["totalApplications"] == 1


def test_summary_for_foreign_job_is_404(client, pipeline, make_startup, post_job):
    startup, *_ = pipeline()
    other_job = post_job(make_startup(name="Elsewhere"))
    r = client.get("/api/analytics/hiring/summary", params={"jobId": other_job["_id"]},
                   headers=startup["headers"])
    assert r.status_code == 404


def test_startup_summary(client, pipeline, make_startup):
    startup, *_ = pipeline()
    r = client.get(f"/api/analytics/startup/{startup['startup_id']}/summary", headers=startup["headers"])
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["totalJobs"] == 2
    assert data["activeJobs"] == 2
    assert data["totalApplications"] == 3
    assert data["selected"] == 1
    assert data["rejected"] == 1

    other = make_startup(name="Curious Co")
    r = client.get(f"/api/analytics/startup/{startup['startup_id']}/summary", headers=other["headers"])
    assert r.status_code == 403
