"""Email verification: signup, resend, both verify routes and login gating."""

from datetime import timedelta

from wostup.services import verification_service
from wostup.services.mongo_service import utcnow
from wostup.utils.token import hash_token

GENERIC_ERROR = {"success": False, "error": "Invalid or expired token"}


def wrong_code(code: str) -> str:
    return "000000" if code != "000000" else "111111"


def test_signup_stores_only_the_hash(client, register, outbox, db):
    user = register("student", verify=False)
    code = outbox.code_for(user["email"])

    account = db.students.find_one({"email": user["email"]})
    assert account["isVerified"] is False
    assert account["verificationToken"] == hash_token(code)
    assert code not in account.values()


def test_signup_rejects_taken_email_across_roles(client, register):
    user = register("student", verify=False)
    r = client.post("/api/auth/signup", json={
        "username": "Someone", "email": user["email"], "password": "password123", "role": "startup"
    })
    assert r.status_code == 409
    assert r.json() == {"success": False, "error": "Email already registered"}


def test_resend_unknown_email_is_generic_success(client, outbox):
    r = client.post("/api/auth/resend-verification", json={"email": "nobody@example.com"})
    assert r.status_code == 200
    assert r.json() == {"success": True}
    assert outbox.verification == []


def test_resend_without_body_or_email_is_generic_success(client):
    assert client.post("/api/auth/resend-verification").json() == {"success": True}
    assert client.post("/api/auth/resend-verification", json={}).json() == {"success": True}


def test_resend_with_odd_body_is_generic_success(client, outbox):
    r = client.post("/api/auth/resend-verification", json={"email": 12345})
    assert r.status_code == 200
    assert r.json() == {"success": True}

    r = client.post("/api/auth/resend-verification", content=b"not json",
                    headers={"Content-Type": "application/json"})
    assert r.status_code == 200
    assert r.json() == {"success": True}

    r = client.post("/api/auth/resend-verification", json=["a@example.com"])
    assert r.json() == {"success": True}
    assert outbox.verification == []


def test_resend_with_odd_body_still_counts_against_limit(client):
    for _ in range(3):
        client.post("/api/auth/resend-verification", content=b"{", headers={"Content-Type": "application/json"})
    r = client.post("/api/auth/resend-verification", content=b"{", headers={"Content-Type": "application/json"})
    assert r.status_code == 429


def test_resend_existing_account_replaces_code(client, register, outbox):
    user = register("startup", verify=False)
    first = outbox.code_for(user["email"])

    r = client.post("/api/auth/resend-verification", json={"email": user["email"]})
    assert r.json() == {"success": True}
    assert len(outbox.verification) == 2
    second = outbox.code_for(user["email"])

    if first != second:
        r = client.post("/api/auth/verify-email", json={"email": user["email"], "token": first})
        assert r.status_code == 400
    r = client.post("/api/auth/verify-email", json={"email": user["email"], "token": second})
    assert r.status_code == 200


def test_resend_for_verified_account_sends_nothing(client, register, outbox):
    user = register("student")
    sent = len(outbox.verification)

    r = client.post("/api/auth/resend-verification", json={"email": user["email"]})
    assert r.json() == {"success": True}
    assert len(outbox.verification) == sent


def test_resend_swallows_internal_errors(client, monkeypatch):
    def boom(email):
        raise RuntimeError("database down")

    monkeypatch.setattr(verification_service, "resend", boom)
    r = client.post("/api/auth/resend-verification", json={"email": "a@example.com"})
    assert r.status_code == 200
    assert r.json() == {"success": True}


def test_verify_requires_email_and_token(client):
    for body in ({}, {"email": "a@example.com"}, {"token": "123456"}):
        r = client.post("/api/auth/verify-email", json=body)
        assert r.status_code == 400
        assert r.json() == {"success": False, "error": "Invalid request"}


def test_expired_code_fails_like_unknown_code(client, register, outbox, db):
    user = register("student", verify=False)
    code = outbox.code_for(user["email"])
    db.students.update_one(
        {"email": user["email"]},
        {"$set": {"verificationTokenExpires": utcnow() - timedelta(minutes=1)}}
    )

    expired = client.post("/api/auth/verify-email", json={"email": user["email"], "token": code})
    unknown = client.post("/api/auth/verify-email", json={"email": user["email"], "token": wrong_code(code)})
    missing = client.post("/api/auth/verify-email", json={"email": "ghost@example.com", "token": code})

    for r in (expired, unknown, missing):
        assert r.status_code == 400
        assert r.json() == GENERIC_ERROR
    assert db.students.find_one({"email": user["email"]})["isVerified"] is False


def test_numeric_token_is_accepted(client, register, db):
    user = register("student", verify=False)
    db.students.update_one({"email": user["email"]}, {"$set": {"verificationToken": hash_token("654321")}})

    r = client.post("/api/auth/verify-email", json={"email": user["email"], "token": 654321})
    assert r.status_code == 200
    assert db.students.find_one({"email": user["email"]})["isVerified"] is True


def test_verification_clears_token_and_cannot_be_reused(client, register, outbox, db):
    user = register("startup", verify=False)
    code = outbox.code_for(user["email"])

    r = client.post("/api/auth/verify-email", json={"email": user["email"], "token": code})
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["data"]["token"]
    assert body["data"]["user"]["isVerified"] is True
    assert body["data"]["onboardingStep"] == "profile"

    account = db.startups.find_one({"email": user["email"]})
    assert account["isVerified"] is True
    assert "verificationToken" not in account
    assert "verificationTokenExpires" not in account

    again = client.post("/api/auth/verify-email", json={"email": user["email"], "token": code})
    assert again.status_code == 400
    assert again.json() == GENERIC_ERROR


def test_verify_by_token_path(client, register, outbox, db):
    user = register("student", verify=False)
    code = outbox.code_for(user["email"])

    r = client.get(f"/api/auth/verify-email/{code}")
    assert r.status_code == 200
    assert r.json() == {"success": True}
    assert db.students.find_one({"email": user["email"]})["isVerified"] is True

    r = client.get(f"/api/auth/verify-email/{code}")
    assert r.status_code == 400
    assert r.json() == GENERIC_ERROR


def test_verify_by_token_path_reports_server_error(client, monkeypatch):
    def boom(token):
        raise RuntimeError("database down")

    monkeypatch.setattr(verification_service, "verify_token", boom)
    r = client.get("/api/auth/verify-email/123456")
    assert r.status_code == 500
    assert r.json() == {"success": False, "error": "Server error"}


def test_signup_verify_login_end_to_end(client, outbox, db):
    email = "e2e.student@example.com"
    r = client.post("/api/auth/signup", json={
        "username": "E2E Student", "email": email, "password": "password123", "role": "student"
    })
    assert r.status_code == 201
    code = outbox.code_for(email)

    r = client.post("/api/auth/login", json={"email": email, "password": "password123"})
    assert r.status_code == 403

    r = client.post("/api/auth/verify-email", json={"email": email, "token": wrong_code(code)})
    assert r.status_code == 400

    r = client.post("/api/auth/verify-email", json={"email": email, "token": code})
    assert r.status_code == 200
    assert db.students.find_one({"email": email})["isVerified"] is True

    r = client.post("/api/auth/login", json={"email": email, "password": "password123"})
    assert r.status_code == 200
    token = r.json()["data"]["token"]

    r = client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200
    assert r.json()["data"]["email"] == email
    assert r.json()["data"]["role"] == "student"


def test_login_rejects_bad_password(client, register):
    user = register("student")
    r = client.post("/api/auth/login", json={"email": user["email"], "password": "wrong-password"})
    assert r.status_code == 401
    assert r.json() == {"success": False, "error": "Invalid email or password"}


def test_onboarding_steps_for_startup(client, register, make_startup):
    fresh = register("startup")
    r = client.post("/api/auth/login", json={"email": fresh["email"], "password": fresh["password"]})
    assert r.json()["data"]["onboardingStep"] == "profile"

    with_profile = make_startup()
    r = client.post("/api/auth/login", json={"email": with_profile["email"], "password": "password123"})
    assert r.json()["data"]["onboardingStep"] == "plan"

    with_plan = make_startup(plan="GROWTH")
    r = client.post("/api/auth/login", json={"email": with_plan["email"], "password": "password123"})
    assert r.json()["data"]["onboardingStep"] == "completed"
