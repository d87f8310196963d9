"""
Collection access for users, donation requests, blogs and payments.

Every function is a single store call (or a lookup followed by one write)
against the db handle it is given; nothing is cached between requests.
"""
import datetime
import logging

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import DESCENDING
from pymongo.errors import DuplicateKeyError

from .exceptions import InvalidObjectId

logger = logging.getLogger(__name__)

USER_ROLES = ('donor', 'volunteer', 'admin')
USER_STATUSES = ('active', 'blocked')
ACTIVE_REQUEST_STATUSES = ('pending', 'inprogress')
BLOG_STATUSES = ('draft', 'published')

USER_FIELDS = ['name', 'email', 'avatar', 'district', 'upazila', 'bloodGroup', 'phone']
PROFILE_FIELDS = ['name', 'avatar', 'district', 'upazila', 'bloodGroup', 'phone']
REQUEST_FIELDS = [
    'recipientName', 'recipientDistrict', 'recipientUpazila', 'hospitalName',
    'fullAddress', 'bloodGroup', 'donationDate', 'donationTime', 'requestMessage',
]
BLOG_FIELDS = ['title', 'thumbnail', 'content']


class UserBlocked(Exception):
    pass


def now_iso():
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


def to_object_id(value):
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise InvalidObjectId(f"Invalid identifier: {value}")


def serialize_doc(doc):
    if not doc:
        return None
    doc['id'] = str(doc['_id'])
    del doc['_id']
    return doc


def pick(data, fields):
    return {f: data[f] for f in fields if f in data}


def insert_result(result):
    return {"acknowledged": True, "insertedId": str(result.inserted_id)}


def update_result(result):
    return {"matchedCount": result.matched_count, "modifiedCount": result.modified_count}


def status_query(status_filter, **base):
    query = dict(base)
    if status_filter:
        query['status'] = status_filter
    return query


# ---------- Users ----------

def get_user_by_email(db, email):
    return serialize_doc(db.users.find_one({"email": email.lower()}))


def upsert_user_if_absent(db, data):
    """
    Insert a first-sign-in profile. Returns the new id, or None when a
    profile for the email already exists.

    The lookup and the insert are separate calls; without the optional
    unique index two concurrent sign-ins can both insert.
    """
    email = (data.get('email') or '').strip().lower()
    if db.users.find_one({"email": email}):
        return None

    user = pick(data, USER_FIELDS)
    user.update({
        "email": email,
        "role": "donor",
        "status": "active",
        "timestamp": now_iso(),
    })
    try:
        result = db.users.insert_one(user)
    except DuplicateKeyError:
        return None
    logger.info("Created user profile for %s", email)
    return str(result.inserted_id)


def get_user_role(db, email):
    user = db.users.find_one({"email": email.lower()}, {"role": 1})
    return user.get('role') if user else None


def update_profile(db, email, data):
    fields = pick(data, PROFILE_FIELDS)
    if not fields:
        return {"matchedCount": 0, "modifiedCount": 0}
    return update_result(db.users.update_one({"email": email.lower()}, {"$set": fields}))


def list_users(db, status_filter=None):
    return [serialize_doc(u) for u in db.users.find(status_query(status_filter))]


def set_user_status(db, user_id, new_status):
    if new_status not in USER_STATUSES:
        raise ValueError(f"status must be one of {', '.join(USER_STATUSES)}")
    res = db.users.update_one({"_id": to_object_id(user_id)}, {"$set": {"status": new_status}})
    return update_result(res)


def set_user_role(db, user_id, new_role):
    if new_role not in USER_ROLES:
        raise ValueError(f"role must be one of {', '.join(USER_ROLES)}")
    res = db.users.update_one({"_id": to_object_id(user_id)}, {"$set": {"role": new_role}})
    return update_result(res)


# ---------- Donation requests ----------

def create_donation_request(db, data, caller_email):
    caller = db.users.find_one({"email": caller_email})
    if caller and caller.get('status') == 'blocked':
        raise UserBlocked("Blocked users cannot create donation requests")

    doc = pick(data, REQUEST_FIELDS)
    doc.update({
        "requesterEmail": caller_email,
        "requesterName": data.get('requesterName') or (caller or {}).get('name'),
        "status": "pending",
        "createdAt": now_iso(),
    })
    result = db.donationRequests.insert_one(doc)
    logger.info("Donation request %s created by %s", result.inserted_id, caller_email)
    return insert_result(result)


def list_requests(db, query, limit=None):
    cursor = db.donationRequests.find(query).sort("createdAt", DESCENDING)
    if limit:
        cursor = cursor.limit(limit)
    return [serialize_doc(r) for r in cursor]


def get_donation_request(db, request_id):
    return serialize_doc(db.donationRequests.find_one({"_id": to_object_id(request_id)}))


def update_donation_request(db, request_id, data):
    """Edit the recipient/hospital/schedule fields. Status and donor are untouched."""
    fields = pick(data, REQUEST_FIELDS)
    if not fields:
        return {"matchedCount": 0, "modifiedCount": 0}
    res = db.donationRequests.update_one({"_id": to_object_id(request_id)}, {"$set": fields})
    return update_result(res)


def set_request_status(db, request_id, new_status):
    # Any status may follow any other, e.g. done -> pending
    res = db.donationRequests.update_one(
        {"_id": to_object_id(request_id)},
        {"$set": {"status": new_status}}
    )
    return update_result(res)


def donate_to_request(db, request_id, donor_name, donor_email):
    # Not guarded on the current status: a request already in progress or
    # done is moved back to inprogress with the new donor.
    res = db.donationRequests.update_one(
        {"_id": to_object_id(request_id)},
        {"$set": {
            "status": "inprogress",
            "donorName": donor_name,
            "donorEmail": donor_email,
        }}
    )
    return update_result(res)


def delete_donation_request(db, request_id):
    res = db.donationRequests.delete_one({"_id": to_object_id(request_id)})
    return {"deletedCount": res.deleted_count}


# ---------- Blogs ----------

def create_blog(db, data, author_email):
    doc = pick(data, BLOG_FIELDS)
    doc.update({
        "status": "draft",
        "authorEmail": author_email,
        "createdAt": now_iso(),
    })
    result = db.blogs.insert_one(doc)
    logger.info("Blog %s drafted by %s", result.inserted_id, author_email)
    return insert_result(result)


def list_blogs(db, status_filter=None):
    cursor = db.blogs.find(status_query(status_filter)).sort("createdAt", DESCENDING)
    return [serialize_doc(b) for b in cursor]


def get_blog(db, blog_id):
    return serialize_doc(db.blogs.find_one({"_id": to_object_id(blog_id)}))


def set_blog_status(db, blog_id, new_status):
    if new_status not in BLOG_STATUSES:
        raise ValueError(f"status must be one of {', '.join(BLOG_STATUSES)}")
    res = db.blogs.update_one({"_id": to_object_id(blog_id)}, {"$set": {"status": new_status}})
    return update_result(res)


def delete_blog(db, blog_id):
    res = db.blogs.delete_one({"_id": to_object_id(blog_id)})
    return {"deletedCount": res.deleted_count}


# ---------- Payments ----------

def record_payment_if_new(db, transaction_id, name, email, amount):
    """
    Persist a confirmed payment once per transaction id. Returns the new id,
    or None when the transaction was already recorded.
    """
    if db.payments.find_one({"transactionId": transaction_id}):
        return None

    try:
        result = db.payments.insert_one({
            "transactionId": transaction_id,
            "name": name,
            "email": email,
            "amount": amount,
            "date": now_iso(),
        })
    except DuplicateKeyError:
        return None
    logger.info("Recorded payment %s (%s) from %s", transaction_id, amount, email)
    return str(result.inserted_id)


def list_payments(db):
    return [serialize_doc(p) for p in db.payments.find().sort("date", DESCENDING)]
