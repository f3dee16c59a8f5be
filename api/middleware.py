# api/middleware.py
import logging

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.http import JsonResponse
from django.utils.deprecation import MiddlewareMixin
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import AccessToken

logger = logging.getLogger(__name__)


def rejection(message, status):
    return JsonResponse({"success": False, "message": message, "data": {}}, status=status)


class RejectDisabledUserMiddleware(MiddlewareMixin):
    """
    Very lightweight middleware.
    - Runs AFTER AuthenticationMiddleware
    - Session users: checks request.user, caching negative results briefly
    - Bearer tokens: DRF authenticates later, so the access token's user is
      looked up here and rejected when deleted (401) or disabled (403)
    """

    CACHE_KEY_PREFIX = "user:disabled:"
    CACHE_TTL = 5  # seconds

    def process_request(self, request):
        user = getattr(request, "user", None)

        if user and user.is_authenticated:
            return self._check_session_user(request, user)

        auth = request.META.get("HTTP_AUTHORIZATION", "")
        if not auth.startswith("Bearer "):
            return None

        try:
            token = AccessToken(auth.split(" ", 1)[1].strip())
        except TokenError:
            # Invalid or expired token; DRF produces the proper 401
            return None

        user_id = token.get(settings.SIMPLE_JWT.get("USER_ID_CLAIM", "user_id"))
        if not user_id:
            return None

        fresh = get_user_model().objects.filter(pk=user_id).first()
        if fresh is None:
            logger.warning("Rejected access token of deleted user %s", user_id)
            return rejection("User not found.", 401)

        if not fresh.is_active or not fresh.is_enabled:
            logger.warning("Rejected access token of disabled user %s", fresh.email)
            return rejection("Your account has been disabled.", 403)

        return None

    def _check_session_user(self, request, user):
        cache_key = f"{self.CACHE_KEY_PREFIX}{user.pk}"

        # Fast cache hit
        if cache.get(cache_key) is True:
            request.session.flush()
            return rejection("Your account has been disabled.", 403)

        if not user.is_active or not user.is_enabled:
            cache.set(cache_key, True, timeout=self.CACHE_TTL)
            request.session.flush()
            return rejection("Your account has been disabled.", 403)

        return None
