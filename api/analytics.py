"""
Dashboard numbers, computed on demand straight from the collections.
"""
import datetime

from .stores import ACTIVE_REQUEST_STATUSES

SILVER_THRESHOLD = 5
GOLD_THRESHOLD = 10

# TODO: derive from the time between a request's createdAt and its donate
# action once the donate step records a timestamp.
AVERAGE_RESPONSE_TIME = "2h"


def count_by_status(collection):
    pipeline = [
        {"$group": {"_id": "$status", "count": {"$sum": 1}}},
    ]
    return {
        (row["_id"] or "unknown"): row["count"]
        for row in collection.aggregate(pipeline)
    }


def total_amount(collection):
    rows = list(collection.aggregate([
        {"$group": {"_id": None, "total": {"$sum": "$amount"}}},
    ]))
    return rows[0]["total"] if rows else 0


def parse_donation_date(value, fallback):
    """
    Parse an ISO date/datetime string. Anything unparsable (or missing)
    is bucketed at `fallback` so the row still counts.
    """
    if isinstance(value, datetime.datetime):
        return value
    if not isinstance(value, str) or not value:
        return fallback
    try:
        return datetime.datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        return fallback


def monthly_request_counts(collection, today):
    counts = {}
    for doc in collection.find({}, {"donationDate": 1}):
        dt = parse_donation_date(doc.get('donationDate'), today)
        key = (dt.year, dt.month)
        counts[key] = counts.get(key, 0) + 1

    return [
        {"year": year, "month": month, "count": counts[(year, month)]}
        for year, month in sorted(counts)
    ]


def donor_level(donations):
    if donations >= GOLD_THRESHOLD:
        return "Gold"
    if donations >= SILVER_THRESHOLD:
        return "Silver"
    return "Bronze"


def dashboard_stats(db, today=None):
    today = today or datetime.datetime.now(datetime.timezone.utc)
    return {
        "totalUsers": db.users.count_documents({}),
        "totalRequests": db.donationRequests.count_documents({}),
        "totalFunding": total_amount(db.payments),
        "totalDonations": db.payments.count_documents({}),
        "requestStatusCounts": count_by_status(db.donationRequests),
        "userStatusCounts": count_by_status(db.users),
        "monthlyRequests": monthly_request_counts(db.donationRequests, today),
    }


def user_stats(db, email, today=None):
    today = today or datetime.datetime.now(datetime.timezone.utc)
    requests = db.donationRequests

    donations = list(requests.find({"donorEmail": email, "status": "done"}, {"donationDate": 1}))
    this_month = 0
    for doc in donations:
        dt = parse_donation_date(doc.get('donationDate'), today)
        if (dt.year, dt.month) == (today.year, today.month):
            this_month += 1

    return {
        "totalDonations": len(donations),
        "totalRequests": requests.count_documents({"requesterEmail": email}),
        "activeRequests": requests.count_documents({
            "requesterEmail": email,
            "status": {"$in": list(ACTIVE_REQUEST_STATUSES)},
        }),
        "thisMonthDonations": this_month,
        "level": donor_level(len(donations)),
        "avgResponseTime": AVERAGE_RESPONSE_TIME,
    }
