"""Authentication and profile API views.

Provides view classes for:
- registration, login and logout flows,
- password reset and change endpoints,
- the current user's profile retrieve/update endpoint,
- instructor verification document uploads,
- the admin user management viewset (including instructor approval).
"""

import datetime
import logging
import os
import uuid

from django.core.files.storage import default_storage
from django.core.signing import BadSignature, SignatureExpired, TimestampSigner
from django.db import transaction
from django.utils import timezone

from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import OpenApiExample, OpenApiParameter, extend_schema, extend_schema_view
from rest_framework import filters, generics, permissions, status
from rest_framework.decorators import action
from rest_framework.generics import CreateAPIView
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.throttling import AnonRateThrottle
from rest_framework.views import APIView
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

from api.models.models_auth import CustomUser, Profile
from api.permissions import IsAdmin, IsInstructor
from api.serializers.serializers_auth import (
    AdminUserSerializer,
    ChangePasswordSerializer,
    InstructorDocumentUploadSerializer,
    LoginSerializer,
    LogoutSerializer,
    PasswordResetConfirmSerializer,
    PasswordResetSerializer,
    RegisterSerializer,
    UserProfileSerializer,
)
from api.utils.email_utils import send_templated_email
from api.utils.filters_utils import UserFilter
from api.utils.pagination import StandardResultsSetPagination
from api.utils.response_utils import APIResponseSerializer, api_response
from api.utils.throttles import PasswordResetRateThrottle
from api.utils.url_utils import frontend_url
from api.utils.utility_auth import SecureLoginView, issue_tokens
from api.views.views_base import BaseAdminViewSet

logger = logging.getLogger(__name__)

RESET_TOKEN_MAX_AGE = 60 * 60 * 24  # 1 day
INVALID_RESET_LINK = "This password reset link has expired or is invalid. Please request a new one."

# =============================================
# AUTHENTICATION & REGISTRATION VIEWS
# =============================================


@extend_schema(
    tags=["Authentication"],
    summary="Register a new student or instructor",
    description="Creates an active account and returns JWT tokens. Instructors must wait for admin approval "
    "before they can author courses or assignments.",
    responses=APIResponseSerializer,
)
class RegisterView(CreateAPIView):
    """Register a user and log them straight in."""

    permission_classes = [permissions.AllowAny]
    serializer_class = RegisterSerializer
    throttle_classes = [AnonRateThrottle]

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()

        requires_approval = user.is_instructor and not user.is_approved
        msg = "Registration successful."
        if requires_approval:
            msg = "Registration successful. Your instructor account is pending admin approval."

        data = {
            "user": UserProfileSerializer(user, context={"request": request}).data,
            "tokens": issue_tokens(user),
            "requires_approval": requires_approval,
        }
        return api_response(True, msg, data, status.HTTP_201_CREATED)


@extend_schema(
    tags=["Authentication"],
    summary="Login",
    description="Logs in any active user and returns JWT tokens.",
    request=LoginSerializer,
    responses=APIResponseSerializer,
    examples=[
        OpenApiExample(
            "Successful login",
            value={
                "success": True,
                "message": "Login successful",
                "data": {
                    "user": {
                        "id": "2f0c5b9e-2d4b-4b8e-9a51-6c6b0d1f1a11",
                        "email": "youremail@example.com",
                        "role": "student",
                        "is_approved": True,
                    },
                    "tokens": {
                        "access": "eIjM4In0.QXaECbo",
                        "refresh": "eIjM4In0.QXaECbo",
                    },
                },
            },
            response_only=True,
            status_codes=["200"],
        ),
        OpenApiExample(
            "Invalid credentials",
            value={"success": False, "message": "Invalid credentials.", "data": {}},
            response_only=True,
            status_codes=["401"],
        ),
    ],
)
class LoginView(SecureLoginView):
    """Login view shared by every role."""

    serializer_class = LoginSerializer


@extend_schema(
    tags=["Authentication"],
    summary="Logout a user",
    responses=APIResponseSerializer,
    request=LogoutSerializer,
)
class LogoutView(APIView):
    """Logout user by blacklisting refresh token."""

    permission_classes = [permissions.IsAuthenticated]
    serializer_class = LogoutSerializer

    def post(self, request, *args, **kwargs):
        serializer = self.serializer_class(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            token = RefreshToken(serializer.validated_data["refresh"])
            token.blacklist()
        except TokenError:
            return api_response(False, "Token is invalid or expired.", {}, status.HTTP_400_BAD_REQUEST)
        return api_response(True, "Logout successful.", {}, status.HTTP_200_OK)


# =============================================
# USER PROFILE VIEWS
# =============================================


@extend_schema(
    tags=["Authentication"],
    methods=["GET"],
    summary="Get current user's profile",
    description="Retrieve the logged-in user's profile for any role",
    responses=APIResponseSerializer,
)
@extend_schema(
    tags=["Authentication"],
    methods=["PUT", "PATCH"],
    summary="Update current user's profile",
    description="Update name, phone, date of birth, address and nested profile fields.",
    request=UserProfileSerializer,
    responses=APIResponseSerializer,
)
class CurrentUserProfileView(generics.RetrieveUpdateAPIView):
    """Retrieve or update the authenticated user's profile regardless of role."""

    permission_classes = [permissions.IsAuthenticated]
    serializer_class = UserProfileSerializer

    def get_object(self):
        return self.request.user

    def retrieve(self, request, *args, **kwargs):
        serializer = self.get_serializer(self.get_object())
        return api_response(True, "Profile retrieved successfully.", serializer.data)

    def update(self, request, *args, **kwargs):
        kwargs.pop("partial", None)
        user = self.get_object()

        serializer = self.get_serializer(user, data=request.data or {}, partial=True)
        serializer.is_valid(raise_exception=True)
        updated_user = serializer.save()

        full_serializer = self.get_serializer(updated_user)
        return api_response(True, "Profile updated successfully.", full_serializer.data)


def store_instructor_document(user, upload, document_type):
    """Save one uploaded file under the instructor's folder and describe it."""
    timestamp = timezone.now().strftime("%Y%m%d_%H%M%S")
    extension = os.path.splitext(upload.name)[1].lower()
    path = default_storage.save(
        f"instructor_documents/{user.pk}/{timestamp}_{uuid.uuid4().hex[:8]}{extension}", upload
    )
    return {
        "type": document_type,
        "original_name": upload.name,
        "filename": os.path.basename(path),
        "path": path,
        "mimetype": upload.content_type,
        "size": upload.size,
        "uploaded_at": timezone.now().isoformat(),
    }


@extend_schema(
    tags=["Authentication"],
    summary="Upload instructor verification documents",
    description="Instructors upload up to five PDF, image or Word documents. The profile is marked as having "
    "documents and, unless already approved, moves to under_review until an admin decides.",
    request={
        "multipart/form-data": {
            "type": "object",
            "properties": {
                "files": {"type": "array", "items": {"type": "string", "format": "binary"}},
                "document_types": {"type": "array", "items": {"type": "string"}},
            },
        }
    },
    responses=APIResponseSerializer,
)
class InstructorDocumentUploadView(APIView):
    """Store an instructor's verification documents for admin review."""

    permission_classes = [IsInstructor]
    parser_classes = [MultiPartParser, FormParser]

    def post(self, request):
        serializer = InstructorDocumentUploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        files = serializer.validated_data["files"]
        document_types = serializer.validated_data["document_types"]
        user = request.user

        documents = [
            store_instructor_document(
                user, upload, document_types[index] if index < len(document_types) else "other"
            )
            for index, upload in enumerate(files)
        ]

        with transaction.atomic():
            profile = Profile.objects.select_for_update().get(user=user)
            profile.documents = list(profile.documents or []) + documents
            profile.documents_uploaded = True
            # An approved instructor adding documents stays approved
            if profile.verification_status != "approved":
                profile.verification_status = "under_review"
            profile.save(update_fields=["documents", "documents_uploaded", "verification_status", "updated_at"])

        logger.info("Instructor %s uploaded %d verification document(s)", user.email, len(documents))
        data = {
            "documents": len(documents),
            "verification_status": profile.verification_status,
            "documents_uploaded": profile.documents_uploaded,
        }
        return api_response(True, "Documents uploaded successfully.", data)


# =============================================
# PASSWORD VIEWS
# =============================================


@extend_schema(
    tags=["Authentication"],
    summary="Password reset request send email",
    request=PasswordResetSerializer,
    responses=APIResponseSerializer,
)
class PasswordResetView(APIView):
    """Send password reset email to user."""

    serializer_class = PasswordResetSerializer
    permission_classes = [permissions.AllowAny]
    throttle_classes = [PasswordResetRateThrottle]

    def post(self, request):
        serializer = self.serializer_class(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.context["user"]

        token = make_reset_token(user)
        reset_url = frontend_url("reset-password", token=token)

        try:
            send_templated_email(
                subject="Password Reset Request",
                template_name="emails/password_reset",
                context={
                    "first_name": user.first_name,
                    "reset_url": reset_url,
                    "expires_in_hours": RESET_TOKEN_MAX_AGE // 3600,
                },
                recipient_list=[user.email],
            )
        except Exception as e:
            # Still return success so the response does not reveal delivery problems
            logger.error("Failed to send password reset email to %s: %s", user.email, e)
        else:
            logger.info("Password reset email sent to %s", user.email)

        return api_response(True, "Password reset email sent to your registered email.", {})


EPOCH = datetime.datetime(1970, 1, 1, tzinfo=datetime.timezone.utc)


def reset_fingerprint(user):
    """Microseconds since epoch of the user's last password change, "0" if never.

    Signed into every reset token so a token stops verifying as soon as the
    password changes again.
    """
    if not user.last_password_reset:
        return "0"
    return str((user.last_password_reset - EPOCH) // datetime.timedelta(microseconds=1))


def make_reset_token(user):
    return TimestampSigner().sign(f"{user.pk}|{reset_fingerprint(user)}")


@extend_schema(
    tags=["Authentication"],
    summary="Confirm password reset with token",
    description="Reset user password using a valid token sent via email. Token is one-time use only.",
    parameters=[OpenApiParameter("token", str, OpenApiParameter.QUERY, required=True)],
    request=PasswordResetConfirmSerializer,
    responses=APIResponseSerializer,
)
class PasswordResetConfirmView(APIView):
    """Reset user password with valid token - one-time use only."""

    serializer_class = PasswordResetConfirmSerializer
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        token = request.query_params.get("token")
        if not token:
            return api_response(False, INVALID_RESET_LINK, {}, status.HTTP_400_BAD_REQUEST)

        try:
            value = TimestampSigner().unsign(token, max_age=RESET_TOKEN_MAX_AGE)
        except SignatureExpired:
            logger.info("Password reset token expired for request path=%s", request.path)
            return api_response(False, INVALID_RESET_LINK, {}, status.HTTP_400_BAD_REQUEST)
        except BadSignature:
            logger.info("Password reset token bad signature for request path=%s", request.path)
            return api_response(False, INVALID_RESET_LINK, {}, status.HTTP_400_BAD_REQUEST)

        user_pk, _, fingerprint = value.partition("|")
        user = CustomUser.objects.filter(pk=user_pk).first()
        if user is None:
            return api_response(False, INVALID_RESET_LINK, {}, status.HTTP_400_BAD_REQUEST)

        # Any password change since the token was issued makes it stale
        if fingerprint != reset_fingerprint(user):
            logger.info(
                "Stale password reset token: user=%s last_password_reset=%s",
                user.pk,
                user.last_password_reset,
            )
            return api_response(
                False,
                "This password reset link has already been used. Please request a new one.",
                {},
                status.HTTP_400_BAD_REQUEST,
            )

        serializer = self.serializer_class(data=request.data, context={"user": user})
        serializer.is_valid(raise_exception=True)

        user.set_password(serializer.validated_data["new_password"])
        user.last_password_reset = timezone.now()
        user.save()

        logger.info("Password reset completed for user=%s", user.pk)
        return api_response(True, "Password has been reset successfully.", {})


@extend_schema(
    tags=["Authentication"],
    summary="Password change for authenticated users",
    responses=APIResponseSerializer,
    request=ChangePasswordSerializer,
)
class PasswordChangeView(APIView):
    """Allow authenticated user to change their password."""

    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        # Provide request in context so serializers can access the current user
        serializer = ChangePasswordSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)

        user = request.user
        if not user.check_password(serializer.validated_data["old_password"]):
            return api_response(False, "Old password is incorrect.", {}, status.HTTP_400_BAD_REQUEST)

        user.set_password(serializer.validated_data["new_password"])
        user.last_password_reset = timezone.now()
        user.save()

        return api_response(True, "Password updated successfully.", {"role": user.role})


# =============================================
# ADMIN MANAGEMENT VIEWS
# =============================================


@extend_schema_view(
    list=extend_schema(summary="List users (paginated)", tags=["Admin Users"]),
    retrieve=extend_schema(summary="Retrieve a user", tags=["Admin Users"]),
    update=extend_schema(summary="Update a user", tags=["Admin Users"]),
    partial_update=extend_schema(summary="Partially update a user", tags=["Admin Users"]),
    destroy=extend_schema(summary="Delete a user", tags=["Admin Users"]),
    approve=extend_schema(summary="Approve an instructor", tags=["Admin Users"], request=None),
)
class AdminUserViewSet(BaseAdminViewSet):
    """Admin viewset for managing every user account."""

    http_method_names = ["get", "put", "patch", "delete", "post"]
    pagination_class = StandardResultsSetPagination
    queryset = CustomUser.objects.select_related("profile").order_by("-date_joined")
    serializer_class = AdminUserSerializer
    permission_classes = [IsAdmin]
    public_actions = set()

    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = UserFilter
    search_fields = ["email", "first_name", "last_name", "phone"]
    ordering_fields = ["date_joined", "email", "first_name", "last_name"]

    def create(self, request, *args, **kwargs):
        return api_response(
            False, "Users register through the registration endpoint.", {}, status.HTTP_405_METHOD_NOT_ALLOWED
        )

    @action(detail=True, methods=["post"])
    def approve(self, request, pk=None):
        user = self.get_object()
        if not user.is_instructor:
            return api_response(False, "Only instructors require approval.", {}, status.HTTP_400_BAD_REQUEST)

        with transaction.atomic():
            user.is_approved = True
            user.save(update_fields=["is_approved"])
            profile = user.profile
            profile.verification_status = "approved"
            profile.save(update_fields=["verification_status", "updated_at"])

        logger.info("Instructor %s approved by %s", user.email, request.user.email)
        return api_response(True, "Instructor approved successfully.", self.get_serializer(user).data)
