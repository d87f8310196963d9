"""
Authentication Utilities for bearer token validation
Ensures that:
1. The bearer token is a valid API session token or Firebase ID token
2. Role-gated views only admit callers whose stored role allows it
3. Self-service views only serve the caller's own email
"""
import datetime
import logging
from functools import wraps

import jwt
from django.conf import settings
from firebase_admin import auth as firebase_auth
from rest_framework import status
from rest_framework.response import Response

from .db import get_db

logger = logging.getLogger(__name__)

TOKEN_ISSUER = 'bloodline'


class InvalidCredential(Exception):
    def __init__(self, message, code='INVALID_TOKEN'):
        super().__init__(message)
        self.code = code


def issue_api_token(email):
    """Sign a short-lived API session token for an already verified email."""
    now = datetime.datetime.now(datetime.timezone.utc)
    payload = {
        "email": email.lower(),
        "iss": TOKEN_ISSUER,
        "iat": now,
        "exp": now + datetime.timedelta(hours=settings.API_TOKEN_LIFETIME_HOURS),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm='HS256')


def verify_firebase_token(token):
    try:
        return firebase_auth.verify_id_token(token)
    except firebase_auth.ExpiredIdTokenError:
        raise InvalidCredential("Token has expired", code='TOKEN_EXPIRED')
    except (firebase_auth.InvalidIdTokenError, ValueError) as e:
        # ValueError also covers "Firebase app not initialized"
        raise InvalidCredential(f"Invalid token: {e}")


def verify_credential(token):
    """
    Return the claims of a bearer token.

    API session tokens are checked first since they are verified locally;
    anything else is handed to Firebase.
    """
    try:
        return jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=['HS256'],
            issuer=TOKEN_ISSUER,
        )
    except jwt.ExpiredSignatureError:
        raise InvalidCredential("Token has expired", code='TOKEN_EXPIRED')
    except jwt.InvalidTokenError:
        pass

    return verify_firebase_token(token)


def bearer_token(request):
    auth_header = request.headers.get('Authorization')
    if not auth_header or not auth_header.startswith('Bearer '):
        return None
    token = auth_header.split(' ', 1)[1].strip()
    return token or None


def authenticate_request(view_func):
    """
    Decorator to validate the bearer token and attach the verified identity.

    Usage:
        @authenticate_request
        def get(self, request):
            email = request.user_email  # Verified, lower-cased
            claims = request.decoded
    """
    @wraps(view_func)
    def wrapper(self, request, *args, **kwargs):
        token = bearer_token(request)
        if not token:
            return Response(
                {"error": "Authorization token required", "code": "AUTH_REQUIRED"},
                status=status.HTTP_401_UNAUTHORIZED
            )

        try:
            claims = verify_credential(token)
        except InvalidCredential as e:
            logger.warning("Rejected bearer token on %s: %s", request.path, e)
            return Response(
                {"error": str(e), "code": e.code},
                status=status.HTTP_401_UNAUTHORIZED
            )

        email = claims.get('email')
        if not email:
            return Response(
                {"error": "Invalid token payload", "code": "INVALID_TOKEN"},
                status=status.HTTP_401_UNAUTHORIZED
            )

        request.decoded = claims
        request.user_email = email.lower()
        return view_func(self, request, *args, **kwargs)

    return wrapper


def forbidden(message="Forbidden access", code="FORBIDDEN"):
    return Response({"error": message, "code": code}, status=status.HTTP_403_FORBIDDEN)


def require_role(*allowed_roles):
    """
    Decorator to restrict access to specific stored roles.
    Must be used AFTER @authenticate_request.

    The caller's user document is read on every request, so a role change
    by an admin takes effect immediately.

    Usage:
        @authenticate_request
        @require_role('volunteer', 'admin')
        def get(self, request):
            ...
    """
    def decorator(view_func):
        @wraps(view_func)
        def wrapper(self, request, *args, **kwargs):
            email = getattr(request, 'user_email', None)
            if not email:
                return Response(
                    {"error": "Authentication required", "code": "AUTH_REQUIRED"},
                    status=status.HTTP_401_UNAUTHORIZED
                )

            user = get_db().users.find_one({"email": email})
            role = user.get('role') if user else None
            if role not in allowed_roles:
                logger.info("Denied %s %s to %s (role=%s)", request.method, request.path, email, role)
                return forbidden()

            request.user_data = user
            return view_func(self, request, *args, **kwargs)
        return wrapper
    return decorator


def ensure_self(request, email):
    """Return a 403 response unless the path email is the caller's own."""
    if (email or '').lower() != request.user_email:
        return forbidden()
    return None
