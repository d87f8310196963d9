import logging

from django.http import HttpResponse
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from . import stores
from .auth_utils import (
    InvalidCredential, bearer_token, authenticate_request, ensure_self, forbidden,
    issue_api_token, require_role, verify_firebase_token,
)
from .db import get_db
from .exceptions import InvalidPayload

logger = logging.getLogger(__name__)


def bad_request(message, code):
    return Response({"error": message, "code": code}, status=status.HTTP_400_BAD_REQUEST)


def request_body(request):
    if not isinstance(request.data, dict):
        raise InvalidPayload()
    return request.data


def text_field(data, name):
    value = data.get(name)
    if value is not None and not isinstance(value, str):
        raise InvalidPayload(f"{name} must be a string")
    return value


def parse_limit(request):
    raw = request.query_params.get('limit')
    if not raw:
        return None
    try:
        limit = int(raw)
    except ValueError:
        return None
    return limit if limit > 0 else None


def root(request):
    return HttpResponse("BloodLine Server is running", content_type="text/plain")


class TokenView(APIView):
    """Exchange a Firebase ID token for an API session token."""

    def post(self, request):
        token = bearer_token(request) or text_field(request_body(request), 'idToken')
        if not token:
            return Response(
                {"error": "Firebase ID token required", "code": "AUTH_REQUIRED"},
                status=status.HTTP_401_UNAUTHORIZED
            )
        try:
            claims = verify_firebase_token(token)
        except InvalidCredential as e:
            return Response({"error": str(e), "code": e.code}, status=status.HTTP_401_UNAUTHORIZED)

        email = claims.get('email')
        if not email:
            return Response(
                {"error": "Token has no email claim", "code": "INVALID_TOKEN"},
                status=status.HTTP_401_UNAUTHORIZED
            )
        return Response({"token": issue_api_token(email)})


# ---------- Locations ----------

class DistrictListView(APIView):
    def get(self, request):
        districts = get_db().districts.find({}, {"_id": 0})
        return Response(list(districts))


class UpazilaListView(APIView):
    def get(self, request):
        query = {}
        district_id = request.query_params.get('district_id')
        if district_id:
            query['district_id'] = district_id
        return Response(list(get_db().upazilas.find(query, {"_id": 0})))


# ---------- Users ----------

class UserCreateView(APIView):
    def post(self, request):
        data = request_body(request)
        if not text_field(data, 'email'):
            return bad_request("email is required", "EMAIL_REQUIRED")

        inserted_id = stores.upsert_user_if_absent(get_db(), data)
        if inserted_id is None:
            return Response({"message": "user already exists", "insertedId": None})
        return Response({"message": "user created", "insertedId": inserted_id})


class UserRoleView(APIView):
    """GET by the caller's own email; PATCH (admin) by user id."""

    @authenticate_request
    def get(self, request, key):
        denied = ensure_self(request, key)
        if denied:
            return denied
        return Response({"role": stores.get_user_role(get_db(), key)})

    @authenticate_request
    @require_role('admin')
    def patch(self, request, key):
        try:
            new_role = text_field(request_body(request), 'role')
            result = stores.set_user_role(get_db(), key, new_role)
        except ValueError as e:
            return bad_request(str(e), "INVALID_ROLE")
        logger.info("%s set user %s role to %s", request.user_email, key, new_role)
        return Response(result)


class UserProfileView(APIView):
    @authenticate_request
    def get(self, request, email):
        denied = ensure_self(request, email)
        if denied:
            return denied
        return Response(stores.get_user_by_email(get_db(), email))

    @authenticate_request
    def patch(self, request, email):
        denied = ensure_self(request, email)
        if denied:
            return denied
        return Response(stores.update_profile(get_db(), email, request_body(request)))


class AllUsersView(APIView):
    @authenticate_request
    @require_role('admin')
    def get(self, request):
        status_filter = request.query_params.get('status')
        return Response(stores.list_users(get_db(), status_filter))


class UserStatusView(APIView):
    @authenticate_request
    @require_role('admin')
    def patch(self, request, user_id):
        try:
            new_status = text_field(request_body(request), 'status')
            result = stores.set_user_status(get_db(), user_id, new_status)
        except ValueError as e:
            return bad_request(str(e), "INVALID_STATUS")
        logger.info("%s set user %s status to %s", request.user_email, user_id, new_status)
        return Response(result)


# ---------- Donation requests ----------

class DonationRequestCreateView(APIView):
    @authenticate_request
    def post(self, request):
        data = request_body(request)
        text_field(data, 'requesterName')
        try:
            result = stores.create_donation_request(get_db(), data, request.user_email)
        except stores.UserBlocked as e:
            logger.warning("Blocked user %s tried to create a donation request", request.user_email)
            return forbidden(str(e), code="USER_BLOCKED")
        return Response(result)


class MyDonationRequestsView(APIView):
    @authenticate_request
    def get(self, request, email):
        denied = ensure_self(request, email)
        if denied:
            return denied
        query = stores.status_query(request.query_params.get('status'), requesterEmail=request.user_email)
        return Response(stores.list_requests(get_db(), query, limit=parse_limit(request)))


class PendingDonationRequestsView(APIView):
    def get(self, request):
        return Response(stores.list_requests(get_db(), {"status": "pending"}))


class DonationRequestDetailView(APIView):
    # Any authenticated caller may edit or delete any request by id.

    @authenticate_request
    def get(self, request, request_id):
        return Response(stores.get_donation_request(get_db(), request_id))

    @authenticate_request
    def put(self, request, request_id):
        return Response(stores.update_donation_request(get_db(), request_id, request_body(request)))

    @authenticate_request
    def delete(self, request, request_id):
        result = stores.delete_donation_request(get_db(), request_id)
        logger.info("%s deleted donation request %s", request.user_email, request_id)
        return Response(result)


class DonationRequestStatusView(APIView):
    @authenticate_request
    def patch(self, request, request_id):
        new_status = text_field(request_body(request), 'status')
        if not new_status:
            return bad_request("status is required", "INVALID_STATUS")
        return Response(stores.set_request_status(get_db(), request_id, new_status))


class DonateView(APIView):
    @authenticate_request
    def patch(self, request, request_id):
        data = request_body(request)
        donor_email = (text_field(data, 'donorEmail') or request.user_email).lower()
        donor_name = text_field(data, 'donorName')
        if not donor_name:
            donor = stores.get_user_by_email(get_db(), donor_email)
            donor_name = donor.get('name') if donor else None
        return Response(stores.donate_to_request(get_db(), request_id, donor_name, donor_email))


class AllDonationRequestsView(APIView):
    @authenticate_request
    @require_role('admin')
    def get(self, request):
        query = stores.status_query(request.query_params.get('status'))
        return Response(stores.list_requests(get_db(), query))


class StaffDonationRequestsView(APIView):
    @authenticate_request
    @require_role('volunteer', 'admin')
    def get(self, request):
        query = stores.status_query(request.query_params.get('status'))
        return Response(stores.list_requests(get_db(), query))
