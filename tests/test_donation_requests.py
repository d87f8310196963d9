from bson import ObjectId

NEW_REQUEST = {
    "recipientName": "Karim",
    "recipientDistrict": "Dhaka",
    "recipientUpazila": "Dhanmondi",
    "hospitalName": "Dhaka Medical College",
    "fullAddress": "Bakshibazar, Dhaka",
    "bloodGroup": "O+",
    "donationDate": "2025-06-10",
    "donationTime": "10:30",
    "requestMessage": "Needed before surgery",
}


def test_create_request_is_pending(db, client_for, make_user):
    make_user("rahim@example.com", name="Rahim")
    res = client_for("rahim@example.com").post("/donation-request", NEW_REQUEST)
    assert res.status_code == 200
    inserted_id = res.json()["insertedId"]

    doc = db.donationRequests.find_one({"_id": ObjectId(inserted_id)})
    assert doc["status"] == "pending"
    assert doc["bloodGroup"] == "O+"
    assert doc["requesterEmail"] == "rahim@example.com"
    assert doc["requesterName"] == "Rahim"


def test_client_cannot_choose_status_or_requester(db, client_for, make_user):
    make_user("rahim@example.com")
    payload = dict(NEW_REQUEST, status="done", requesterEmail="someone@example.com", donorEmail="x@example.com")
    res = client_for("rahim@example.com").post("/donation-request", payload)

    doc = db.donationRequests.find_one({"_id": ObjectId(res.json()["insertedId"])})
    assert doc["status"] == "pending"
    assert doc["requesterEmail"] == "rahim@example.com"
    assert "donorEmail" not in doc


def test_blocked_user_cannot_create(db, client_for, make_user):
    make_user("rahim@example.com", status="blocked")
    res = client_for("rahim@example.com").post("/donation-request", NEW_REQUEST)
    assert res.status_code == 403
    assert res.json()["code"] == "USER_BLOCKED"
    assert db.donationRequests.count_documents({}) == 0


def test_create_requires_auth(db, anon):
    assert anon.post("/donation-request", NEW_REQUEST).status_code == 401
    assert db.donationRequests.count_documents({}) == 0


def test_public_list_only_has_pending(db, anon, make_request):
    make_request(status="pending")
    make_request(status="inprogress")
    make_request(status="done")
    make_request(status="pending", requester="karim@example.com")

    res = anon.get("/donation-requests")
    assert res.status_code == 200
    body = res.json()
    assert len(body) == 2
    assert {r["status"] for r in body} == {"pending"}


def test_list_mine_filters_by_status(db, client_for, make_request):
    make_request(status="pending")
    make_request(status="done")
    make_request(requester="karim@example.com")

    client = client_for("rahim@example.com")
    assert len(client.get("/donation-requests/rahim@example.com").json()) == 2
    done = client.get("/donation-requests/rahim@example.com?status=done").json()
    assert [r["status"] for r in done] == ["done"]


def test_list_mine_limit_returns_newest(db, client_for, make_request):
    make_request(createdAt="2025-06-01T08:00:00+00:00", recipientName="Old")
    make_request(createdAt="2025-06-03T08:00:00+00:00", recipientName="Newest")
    make_request(createdAt="2025-06-02T08:00:00+00:00", recipientName="Middle")

    res = client_for("rahim@example.com").get("/donation-requests/rahim@example.com?limit=2")
    assert [r["recipientName"] for r in res.json()] == ["Newest", "Middle"]


def test_list_mine_of_someone_else_is_forbidden(db, client_for, make_request):
    make_request(requester="karim@example.com")
    res = client_for("rahim@example.com").get("/donation-requests/karim@example.com")
    assert res.status_code == 403
    assert isinstance(res.json(), dict)
    assert "requesterEmail" not in str(res.json())


def test_get_by_id(db, client_for, make_request):
    request_id = make_request()
    res = client_for("karim@example.com").get(f"/donation-request/{request_id}")
    assert res.status_code == 200
    assert res.json()["id"] == request_id


def test_get_unknown_id_is_empty(db, client_for):
    res = client_for("rahim@example.com").get(f"/donation-request/{ObjectId()}")
    assert res.status_code == 200
    assert res.content == b""


def test_update_content_leaves_status_and_donor(db, client_for, make_request):
    request_id = make_request(status="inprogress", donorEmail="karim@example.com", donorName="Karim")
    res = client_for("rahim@example.com").put(f"/donation-request/{request_id}", {
        "hospitalName": "Square Hospital",
        "donationTime": "14:00",
        "status": "pending",
        "donorEmail": "other@example.com",
    })
    assert res.json()["modifiedCount"] == 1

    doc = db.donationRequests.find_one({"_id": ObjectId(request_id)})
    assert doc["hospitalName"] == "Square Hospital"
    assert doc["donationTime"] == "14:00"
    assert doc["status"] == "inprogress"
    assert doc["donorEmail"] == "karim@example.com"


def test_status_overwrite_is_unvalidated(db, client_for, make_request):
    request_id = make_request(status="done")
    res = client_for("rahim@example.com").patch(f"/donation-request/{request_id}/status", {"status": "pending"})
    assert res.status_code == 200
    assert db.donationRequests.find_one({"_id": ObjectId(request_id)})["status"] == "pending"


def test_status_update_requires_value(db, client_for, make_request):
    request_id = make_request()
    res = client_for("rahim@example.com").patch(f"/donation-request/{request_id}/status", {})
    assert res.status_code == 400


def test_donate_sets_inprogress_and_donor(db, client_for, make_user, make_request):
    make_user("karim@example.com", name="Karim Hossain")
    request_id = make_request()
    res = client_for("karim@example.com").patch(f"/donation-request/{request_id}/donate", {})
    assert res.json()["modifiedCount"] == 1

    doc = db.donationRequests.find_one({"_id": ObjectId(request_id)})
    assert doc["status"] == "inprogress"
    assert doc["donorEmail"] == "karim@example.com"
    assert doc["donorName"] == "Karim Hossain"


def test_donate_applies_whatever_the_current_status(db, client_for, make_request):
    request_id = make_request(status="done", donorName="First", donorEmail="first@example.com")
    client_for("second@example.com").patch(
        f"/donation-request/{request_id}/donate",
        {"donorName": "Second", "donorEmail": "second@example.com"},
    )
    doc = db.donationRequests.find_one({"_id": ObjectId(request_id)})
    assert doc["status"] == "inprogress"
    assert doc["donorEmail"] == "second@example.com"

    # Re-applying is allowed too
    res = client_for("second@example.com").patch(
        f"/donation-request/{request_id}/donate",
        {"donorName": "Second", "donorEmail": "second@example.com"},
    )
    assert res.status_code == 200
    assert res.json()["matchedCount"] == 1


def test_any_authenticated_user_can_delete(db, client_for, make_request):
    request_id = make_request(requester="rahim@example.com")
    res = client_for("stranger@example.com").delete(f"/donation-request/{request_id}")
    assert res.json() == {"deletedCount": 1}
    assert db.donationRequests.count_documents({}) == 0


def test_delete_requires_auth(db, anon, make_request):
    request_id = make_request()
    assert anon.delete(f"/donation-request/{request_id}").status_code == 401
    assert db.donationRequests.count_documents({}) == 1


def test_malformed_request_id(db, client_for):
    res = client_for("rahim@example.com").get("/donation-request/12345")
    assert res.status_code == 400
    assert res.json()["code"] == "INVALID_ID"


def test_admin_lists_all_requests(db, client_for, make_user, make_request):
    make_user("admin@example.com", role="admin")
    make_request(status="pending")
    make_request(status="done")

    admin = client_for("admin@example.com")
    assert len(admin.get("/all-donation-requests").json()) == 2
    assert len(admin.get("/all-donation-requests?status=done").json()) == 1


def test_volunteer_cannot_use_admin_listing(db, client_for, make_user, make_request):
    make_user("vol@example.com", role="volunteer")
    make_request()
    assert client_for("vol@example.com").get("/all-donation-requests").status_code == 403


def test_staff_listing_admits_volunteer_and_admin(db, client_for, make_user, make_request):
    make_user("vol@example.com", role="volunteer")
    make_user("admin@example.com", role="admin")
    make_user("rahim@example.com")
    make_request(status="inprogress")

    for email in ("vol@example.com", "admin@example.com"):
        res = client_for(email).get("/all-blood-donation-requests?status=inprogress")
        assert res.status_code == 200
        assert len(res.json()) == 1

    assert client_for("rahim@example.com").get("/all-blood-donation-requests").status_code == 403


def test_donor_email_is_stored_lower_case(db, client_for, make_request):
    request_id = make_request()
    client_for("karim@example.com").patch(
        f"/donation-request/{request_id}/donate",
        {"donorName": "Karim", "donorEmail": "Karim@Example.COM"},
    )
    assert db.donationRequests.find_one({"_id": ObjectId(request_id)})["donorEmail"] == "karim@example.com"

    db.donationRequests.update_one({"_id": ObjectId(request_id)}, {"$set": {"status": "done"}})
    stats = client_for("karim@example.com").get("/user-stats/karim@example.com").json()
    assert stats["totalDonations"] == 1


def test_donate_rejects_non_string_email(db, client_for, make_request):
    request_id = make_request()
    res = client_for("karim@example.com").patch(f"/donation-request/{request_id}/donate", {"donorEmail": 7})
    assert res.status_code == 400
    assert res.json()["code"] == "INVALID_PAYLOAD"
    assert db.donationRequests.find_one({"_id": ObjectId(request_id)})["status"] == "pending"


def test_create_rejects_non_object_body(db, client_for, make_user):
    make_user("rahim@example.com")
    res = client_for("rahim@example.com").post("/donation-request", ["O+"])
    assert res.status_code == 400
    assert db.donationRequests.count_documents({}) == 0
