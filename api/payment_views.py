import logging
import math

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from . import payments, stores
from .auth_utils import authenticate_request
from .db import get_db
from .views import request_body, text_field

logger = logging.getLogger(__name__)


class CheckoutSessionView(APIView):
    @authenticate_request
    def post(self, request):
        data = request_body(request)
        try:
            amount = float(data.get('amount'))
        except (TypeError, ValueError):
            amount = 0
        # float() also accepts "nan" and "inf"
        if not math.isfinite(amount) or amount <= 0:
            return Response(
                {"error": "amount must be a positive number", "code": "INVALID_AMOUNT"},
                status=status.HTTP_400_BAD_REQUEST
            )

        email = text_field(data, 'email') or request.user_email
        session = payments.create_checkout_session(amount, text_field(data, 'name'), email)
        return Response(session)


class SaveSessionView(APIView):
    @authenticate_request
    def post(self, request):
        session_id = text_field(request_body(request), 'sessionId')
        if not session_id:
            return Response(
                {"error": "sessionId is required", "code": "SESSION_REQUIRED"},
                status=status.HTTP_400_BAD_REQUEST
            )

        session = payments.retrieve_session(session_id)
        if getattr(session, 'payment_status', None) != 'paid':
            return Response(
                {"error": "Payment not completed", "code": "PAYMENT_INCOMPLETE"},
                status=status.HTTP_400_BAD_REQUEST
            )

        summary = payments.session_summary(session)
        inserted_id = stores.record_payment_if_new(get_db(), **summary)
        if inserted_id is None:
            return Response({"message": "Payment already recorded", "insertedId": None})
        return Response({"message": "Payment saved", "insertedId": inserted_id})


class FundingListView(APIView):
    @authenticate_request
    def get(self, request):
        return Response(stores.list_payments(get_db()))
