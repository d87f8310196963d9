from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from . import stores
from .auth_utils import authenticate_request, require_role
from .db import get_db
from .views import request_body, text_field


class BlogListView(APIView):
    def get(self, request):
        # No published-only default: without a filter drafts are listed too
        return Response(stores.list_blogs(get_db(), request.query_params.get('status')))

    @authenticate_request
    @require_role('admin')
    def post(self, request):
        data = request_body(request)
        if not text_field(data, 'title'):
            return Response({"error": "title is required", "code": "TITLE_REQUIRED"}, status=status.HTTP_400_BAD_REQUEST)
        return Response(stores.create_blog(get_db(), data, request.user_email))


class BlogDetailView(APIView):
    def get(self, request, blog_id):
        return Response(stores.get_blog(get_db(), blog_id))

    @authenticate_request
    @require_role('admin')
    def delete(self, request, blog_id):
        return Response(stores.delete_blog(get_db(), blog_id))


class BlogStatusView(APIView):
    @authenticate_request
    @require_role('admin')
    def patch(self, request, blog_id):
        try:
            result = stores.set_blog_status(get_db(), blog_id, text_field(request_body(request), 'status'))
        except ValueError as e:
            return Response({"error": str(e), "code": "INVALID_STATUS"}, status=status.HTTP_400_BAD_REQUEST)
        return Response(result)
