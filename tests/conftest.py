"""Test configuration and fixtures.

Every test gets a fresh in-memory MongoDB (mongomock) plugged in through the
`_db` handle in wostup.db.mongodb, so no running MongoDB is needed. Outgoing
email is captured in an `outbox` instead of being sent.
"""

import os
import uuid
from datetime import datetime, timedelta, timezone

# Set env flags BEFORE importing application modules
os.environ.setdefault("MAIL_SUPPRESS_SEND", "1")
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret")
os.environ.setdefault("RAZORPAY_KEY_ID", "rzp_test_key")
os.environ.setdefault("RAZORPAY_KEY_SECRET", "test-razorpay-secret")
os.environ.setdefault("RATE_LIMIT_BACKEND", "memory")

import mongomock
import pytest
from fastapi.testclient import TestClient

from wostup.api.routes.auth_routes import resend_limiter
from wostup.core.plans import PlanName
from wostup.db import mongodb
from wostup.main import app
from wostup.services.email_service import EmailService
from wostup.services.profile_service import StartupProfileService


class Outbox:
    """Emails the app tried to send during a test."""

    def __init__(self):
        self.verification = []   # (email, code)
        self.updates = []        # (email, name, subject, message)
        self.invitations = []    # (email, name, job_role, interview)

    def code_for(self, email: str) -> str:
        codes = [code for to, code in self.verification if to == email]
        assert codes, f"no verification code sent to {email}"
        return codes[-1]


@pytest.fixture(autouse=True)
def db(monkeypatch):
    """Fresh mongomock database for each test."""
    database = mongomock.MongoClient(tz_aware=True)["wostup_test"]
    monkeypatch.setattr(mongodb, "_db", database)
    mongodb.init_mongo_indexes()
    resend_limiter.reset()
    yield database
    resend_limiter.reset()


@pytest.fixture(autouse=True)
def outbox(monkeypatch):
    box = Outbox()

    async def send_verification_email(email, code):
        box.verification.append((email, code))

    async def send_candidate_update(email, name, subject, message):
        box.updates.append((email, name, subject, message))

    async def send_interview_invitation(email, name, job_role, interview):
        box.invitations.append((email, name, job_role, interview))

    monkeypatch.setattr(EmailService, "send_verification_email", staticmethod(send_verification_email))
    monkeypatch.setattr(EmailService, "send_candidate_update", staticmethod(send_candidate_update))
    monkeypatch.setattr(EmailService, "send_interview_invitation", staticmethod(send_interview_invitation))
    return box


@pytest.fixture()
def client() -> TestClient:
    return TestClient(app)


def unique_email(prefix: str) -> str:
    return f"{prefix}{uuid.uuid4().hex[:8]}@example.com"


@pytest.fixture()
def register(client, outbox):
    """Sign up (and by default verify) an account. Returns id, email, token and auth headers."""
    def _register(role="student", name="Test User", email=None, password="password123", verify=True):
        email = email or unique_email(role)
        r = client.post("/api/auth/signup", json={
            "username": name, "email": email, "password": password, "role": role
        })
        assert r.status_code == 201, r.text
        user = {"id": r.json()["data"]["_id"], "email": email, "password": password, "name": name}
        if not verify:
            return user

        r = client.post("/api/auth/verify-email", json={"email": email, "token": outbox.code_for(email)})
        assert r.status_code == 200, r.text
        user["token"] = r.json()["data"]["token"]
        user["headers"] = {"Authorization": f"Bearer {user['token']}"}
        return user
    return _register


@pytest.fixture()
def make_student(register):
    def _make(name="Asha Student"):
        return register("student", name=name)
    return _make


@pytest.fixture()
def make_startup(register, client):
    """Verified startup account with a profile, optionally on a paid plan."""
    def _make(plan=None, name="Acme Labs"):
        user = register("startup", name=name)
        r = client.post("/api/startupProfile", json={"startupName": name, "industry": "SaaS"},
                        headers=user["headers"])
        assert r.status_code == 201, r.text
        user["startup_id"] = r.json()["data"]["_id"]
        if plan:
            StartupProfileService().set_plan(user["startup_id"], PlanName(plan))
        return user
    return _make


@pytest.fixture()
def post_job(client):
    def _post(startup, role="Backend Engineer", **extra):
        body = {"role": role, "aboutRole": "Build and run our APIs", "jobType": "Internship",
                "location": "Remote", "Tag": ["python"], **extra}
        r = client.post("/api/create-job", json=body, headers=startup["headers"])
        assert r.status_code == 201, r.text
        return r.json()["data"]
    return _post


@pytest.fixture()
def apply(client):
    def _apply(student, job_id, skills=None):
        r = client.post("/api/applications", json={"jobId": job_id, "skills": skills or ["Python"]},
                        headers=student["headers"])
        assert r.status_code == 201, r.text
        return r.json()["data"]
    return _apply


@pytest.fixture()
def shortlist(client):
    def _shortlist(startup, application_id):
        r = client.put(f"/api/applications/{application_id}", json={"status": "SHORTLISTED"},
                       headers=startup["headers"])
        assert r.status_code == 200, r.text
        return r.json()["data"]
    return _shortlist


def future_slot(days: int = 3, hour: int = 10, minute: int = 0) -> datetime:
    base = datetime.now(timezone.utc) + timedelta(days=days)
    return base.replace(hour=hour, minute=minute, second=0, microsecond=0)
