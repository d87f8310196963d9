from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.views import exception_handler


class NotConfigured(APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Payment processor is not configured'
    default_code = 'NOT_CONFIGURED'


class UpstreamFailure(APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Payment processor request failed'
    default_code = 'UPSTREAM_FAILURE'


class InvalidObjectId(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid identifier'
    default_code = 'INVALID_ID'


class InvalidPayload(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Request body must be a JSON object'
    default_code = 'INVALID_PAYLOAD'


def api_exception_handler(exc, context):
    """Render DRF errors in the same {"error", "code"} shape the views use."""
    response = exception_handler(exc, context)
    if response is None:
        return None

    detail = getattr(exc, 'detail', None)
    if isinstance(detail, (dict, list)):
        message = detail
        code = getattr(exc, 'default_code', 'error')
    else:
        message = str(detail) if detail is not None else str(exc)
        code = getattr(detail, 'code', None) or getattr(exc, 'default_code', 'error')

    response.data = {"error": message, "code": code}
    return response
