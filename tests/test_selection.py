from wostup.core.realtime import manager


def notify_body(*application_ids, subject="Good news", message="You moved forward."):
    return {"subject": subject, "message": message, "applicationIdList": list(application_ids)}


def test_single_candidate_on_free_plan(client, db, outbox, make_startup, make_student, post_job, apply):
    startup = make_startup()
    student = make_student(name="Lina")
    application = apply(student, post_job(startup, role="Analyst")["_id"])

    r = client.post("/api/shortlists/notify", json=notify_body(application["_id"]), headers=startup["headers"])
    assert r.status_code == 200
    data = r.json()["data"]
    assert data == {"updated": [application["_id"]], "skipped": [], "notified": 1}

    assert db.applications.find_one({"studentId": student["id"]})["status"] == "SHORTLISTED"
    assert outbox.updates == [(student["email"], "Lina", "Good news", "You moved forward.")]
    note = db.notifications.find_one({"userId": student["id"]})
    assert note["data"]["jobTitle"] == "Analyst"


def test_bulk_needs_bulk_email_feature(client, db, outbox, make_startup, make_student, post_job, apply):
    startup = make_startup()
    job = post_job(startup)
    ids = [apply(make_student(), job["_id"])["_id"] for _ in range(2)]

    r = client.post("/api/rejections/notify", json=notify_body(*ids), headers=startup["headers"])
    assert r.status_code == 403
    assert r.json()["feature"] == "bulkEmail"
    assert outbox.updates == []
    assert db.applications.count_documents({"status": "REJECTED"}) == 0


def test_bulk_reports_skipped_applications(client, db, outbox, make_startup, make_student, post_job, apply):
    startup = make_startup(plan="GROWTH")
    job = post_job(startup)
    shortlisted = apply(make_student(), job["_id"])
    fresh = apply(make_student(), job["_id"])
    client.put(f"/api/applications/{shortlisted['_id']}", json={"status": "SHORTLISTED"},
               headers=startup["headers"])

    r = client.post("/api/selections/notify",
                    json=notify_body(shortlisted["_id"], fresh["_id"], "507f1f77bcf86cd799439011"),
                    headers=startup["headers"])
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["updated"] == [shortlisted["_id"]]
    assert data["notified"] == 1
    assert {s["applicationId"] for s in data["skipped"]} == {fresh["_id"], "507f1f77bcf86cd799439011"}
    assert len(outbox.updates) == 1


def test_already_in_target_status_is_notified_without_update(client, outbox, make_startup, make_student,
                                                              post_job, apply):
    startup = make_startup()
    application = apply(make_student(), post_job(startup)["_id"])
    client.put(f"/api/applications/{application['_id']}", json={"status": "REJECTED"},
               headers=startup["headers"])

    r = client.post("/api/rejections/notify", json=notify_body(application["_id"]), headers=startup["headers"])
    assert r.json()["data"] == {"updated": [], "skipped": [], "notified": 1}
    assert len(outbox.updates) == 1


def test_empty_list_is_invalid(client, make_startup):
    startup = make_startup()
    r = client.post("/api/selections/notify", json=notify_body(), headers=startup["headers"])
    assert r.status_code == 400


def test_candidates_get_the_startup_message_pushed(client, db, monkeypatch, make_startup, make_student,
                                                   post_job, apply):
    pushed = []

    async def record(user_id, event, data):
        pushed.append((user_id, event, data))
        return 1

    monkeypatch.setattr(manager, "send", record)
    startup = make_startup()
    student = make_student()
    application = apply(student, post_job(startup, role="Analyst")["_id"])

    client.post("/api/selections/notify", json=notify_body(application["_id"], subject="Offer", message="Welcome!"),
                headers=startup["headers"])

    events = {event: data for user_id, event, data in pushed if user_id == student["id"]}
    assert events["applicationStatusUpdated"]["data"]["status"] == "SELECTED"
    assert events["notification"]["title"] == "Offer"
    assert events["notification"]["message"] == "Welcome!"
    assert db.notifications.count_documents({"userId": student["id"], "type": "startup_message"}) == 1
