"""Authentication helpers and secure login view.

Provides SecureLoginView which wraps login serializer validation and
returns the project's api_response envelope on success/failure, plus
the token pair helper shared by login and registration.
"""

import logging

from rest_framework import permissions, status
from rest_framework.exceptions import ValidationError
from rest_framework.views import APIView

from ..utils.response_utils import api_response
from ..utils.throttles import LoginRateThrottle

logger = logging.getLogger(__name__)


def issue_tokens(user):
    """Return an access/refresh pair carrying the user's role claim."""
    from api.serializers.serializers_auth import CustomTokenObtainPairSerializer

    refresh = CustomTokenObtainPairSerializer.get_token(user)
    return {
        "access": str(refresh.access_token),
        "refresh": str(refresh),
    }


class SecureLoginView(APIView):
    throttle_classes = [LoginRateThrottle]
    permission_classes = [permissions.AllowAny]

    def post(self, request, *args, **kwargs):
        from api.serializers.serializers_auth import LoginSerializer

        serializer = LoginSerializer(data=request.data)
        try:
            serializer.is_valid(raise_exception=True)
        except ValidationError as e:
            detail = e.detail
            if isinstance(detail, dict):
                detail = next(iter(detail.values()))
            if isinstance(detail, list):
                detail = detail[0]
            logger.warning("Rejected login for %s: %s", request.data.get("email"), detail)
            return api_response(False, str(detail), {}, status.HTTP_401_UNAUTHORIZED)

        user = serializer.validated_data["user"]

        response_data = {
            "user": {
                "id": user.id,
                "email": user.email,
                "role": user.role,
                "is_approved": user.is_approved,
            },
            "tokens": issue_tokens(user),
        }

        logger.info("User %s logged in", user.email)
        return api_response(True, "Login successful", response_data, status.HTTP_200_OK)
