import logging

from django.conf import settings
from pymongo import ASCENDING, MongoClient

logger = logging.getLogger(__name__)

_client = None
_db = None


def ensure_indexes(db):
    """
    Unique keys that turn the check-then-insert on users and payments into a
    guarantee. Off by default; see MONGO_CREATE_INDEXES.
    """
    db.users.create_index([("email", ASCENDING)], unique=True)
    db.payments.create_index([("transactionId", ASCENDING)], unique=True)


def init_db():
    global _client, _db
    if _db is not None:
        return _db

    _client = MongoClient(settings.MONGO_URI)
    _db = _client[settings.MONGO_DB_NAME]
    logger.info("MongoDB client ready, DB: %s", settings.MONGO_DB_NAME)

    if settings.MONGO_CREATE_INDEXES:
        ensure_indexes(_db)
    return _db


def get_db():
    if _db is None:
        return init_db()
    return _db


def close_db():
    global _client, _db
    if _client is not None:
        _client.close()
    _client = None
    _db = None
