import datetime

from rest_framework.response import Response
from rest_framework.views import APIView

from .analytics import dashboard_stats, user_stats
from .auth_utils import authenticate_request, ensure_self, require_role
from .db import get_db


class AdminStatsView(APIView):
    @authenticate_request
    @require_role('volunteer', 'admin')
    def get(self, request):
        return Response(dashboard_stats(get_db(), today=datetime.datetime.now(datetime.timezone.utc)))


class UserStatsView(APIView):
    @authenticate_request
    def get(self, request, email):
        denied = ensure_self(request, email)
        if denied:
            return denied
        return Response(user_stats(get_db(), request.user_email))
