import mongomock
import pytest
from rest_framework.test import APIClient

from api import db as db_module
from api.auth_utils import issue_api_token


@pytest.fixture
def db(monkeypatch):
    database = mongomock.MongoClient().bloodlineDB
    monkeypatch.setattr(db_module, "_db", database)
    return database


@pytest.fixture
def anon():
    return APIClient()


@pytest.fixture
def client_for(db):
    """APIClient carrying an API session token for the given email."""
    def _client(email):
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {issue_api_token(email)}")
        return client
    return _client


@pytest.fixture
def make_user(db):
    def _make(email, role="donor", status="active", **extra):
        doc = {
            "email": email,
            "name": extra.pop("name", email.split("@")[0].title()),
            "role": role,
            "status": status,
        }
        doc.update(extra)
        db.users.insert_one(doc)
        return doc
    return _make


@pytest.fixture
def make_request(db):
    def _make(requester="rahim@example.com", status="pending", **extra):
        doc = {
            "requesterEmail": requester,
            "recipientName": "Karim",
            "recipientDistrict": "Dhaka",
            "recipientUpazila": "Dhanmondi",
            "hospitalName": "Dhaka Medical College",
            "bloodGroup": "O+",
            "donationDate": "2025-06-10",
            "donationTime": "10:30",
            "status": status,
            "createdAt": "2025-06-01T08:00:00+00:00",
        }
        doc.update(extra)
        return str(db.donationRequests.insert_one(doc).inserted_id)
    return _make
