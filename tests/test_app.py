from wostup import main


def test_health(client, monkeypatch):
    monkeypatch.setattr(main, "test_mongo_connection", lambda: True)
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"ok": True, "mongodb": "connected"}


def test_health_reports_database_down(client, monkeypatch):
    monkeypatch.setattr(main, "test_mongo_connection", lambda: False)
    assert client.get("/health").json() == {"ok": True, "mongodb": "disconnected"}


def test_validation_errors_use_envelope(client):
    r = client.post("/api/auth/signup", json={"username": "x", "email": "not-an-email", "role": "admin"})
    assert r.status_code == 400
    body = r.json()
    assert body["success"] is False
    assert body["error"] == "Invalid request"
    fields = {d["field"] for d in body["details"]}
    assert {"email", "password", "role"} <= fields


def test_unknown_route_uses_envelope(client):
    r = client.get("/api/nope")
    assert r.status_code == 404
    assert r.json() == {"success": False, "error": "Not Found"}


def test_expired_or_forged_jwt_is_rejected(client):
    r = client.get("/api/users/me", headers={"Authorization": "Bearer forged.token.value"})
    assert r.status_code == 401
    assert r.json() == {"success": False, "error": "Invalid or expired token"}


def test_startup_profile_crud(client, register, make_startup):
    startup = make_startup(name="Nimbus")
    headers = startup["headers"]
    profile_id = startup["startup_id"]

    r = client.post("/api/startupProfile", json={"startupName": "Again"}, headers=headers)
    assert r.status_code == 409

    r = client.put(f"/api/startupProfile/{profile_id}", json={"tagline": "Cloud for all"}, headers=headers)
    assert r.json()["data"]["tagline"] == "Cloud for all"

    r = client.get(f"/api/startupProfile/{profile_id}")
    assert r.json()["data"]["views"] == 1
    assert client.get("/api/startupProfiles").json()["count"] == 1

    intruder = make_startup(name="Intruder")
    r = client.put(f"/api/startupProfile/{profile_id}", json={"tagline": "Owned"}, headers=intruder["headers"])
    assert r.status_code == 403

    r = client.delete(f"/api/startupProfile/{profile_id}", headers=headers)
    assert r.status_code == 200
    assert client.get(f"/api/startupProfile/{profile_id}").status_code == 404
