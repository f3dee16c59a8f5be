"""All import here"""

import logging

from django.contrib.auth import authenticate
from django.db import transaction

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema_field
from rest_framework import serializers
from rest_framework.validators import UniqueValidator
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from ..models.models_auth import CustomUser, Profile
from ..utils.password_utils import validate_password_strength

logger = logging.getLogger(__name__)


def clean_name(value, label):
    cleaned = value.strip()
    if len(cleaned) < 2:
        raise serializers.ValidationError(f"{label} must be at least 2 characters long.")
    if not cleaned.replace(" ", "").replace("-", "").isalpha():
        raise serializers.ValidationError(f"{label} can only contain letters and spaces.")
    return cleaned


class InstructorProfileSerializer(serializers.Serializer):
    """Vetting details an instructor supplies at registration."""

    qualification = serializers.CharField(max_length=255)
    experience = serializers.IntegerField(min_value=0)
    specialization = serializers.ListField(child=serializers.CharField(max_length=100), allow_empty=False)
    bio = serializers.CharField(required=False, allow_blank=True, max_length=1000)
    linkedin = serializers.URLField(required=False, allow_blank=True)
    portfolio = serializers.URLField(required=False, allow_blank=True)


DOCUMENT_TYPES = ["id_card", "degree", "certificate", "resume", "other"]
DOCUMENT_CONTENT_TYPES = {
    "application/pdf": "PDF",
    "image/jpeg": "JPEG",
    "image/png": "PNG",
    "application/msword": "DOC",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": "DOCX",
}
MAX_DOCUMENT_SIZE = 10 * 1024 * 1024  # 10MB
MAX_DOCUMENTS = 5


class InstructorDocumentUploadSerializer(serializers.Serializer):
    """Verification documents sent as multipart ``files``.

    ``document_types`` pairs with ``files`` by position; files without a
    type are recorded as ``other``.
    """

    files = serializers.ListField(
        child=serializers.FileField(),
        allow_empty=False,
        max_length=MAX_DOCUMENTS,
        error_messages={"required": "No documents uploaded.", "empty": "No documents uploaded."},
    )
    document_types = serializers.ListField(child=serializers.ChoiceField(choices=DOCUMENT_TYPES), default=list)

    def validate_files(self, value):
        for upload in value:
            if upload.content_type not in DOCUMENT_CONTENT_TYPES:
                raise serializers.ValidationError(
                    f"'{upload.name}' is not a supported document. "
                    f"Supported formats: {', '.join(DOCUMENT_CONTENT_TYPES.values())}."
                )
            if upload.size > MAX_DOCUMENT_SIZE:
                current_size_mb = round(upload.size / (1024 * 1024), 2)
                raise serializers.ValidationError(
                    f"'{upload.name}' is too large: {current_size_mb}MB. Maximum allowed: 10MB."
                )
        return value

    def validate(self, attrs):
        if len(attrs["document_types"]) > len(attrs["files"]):
            raise serializers.ValidationError({"document_types": "More document types than uploaded files."})
        return attrs


class RegisterSerializer(serializers.ModelSerializer):
    """Student and instructor registration.

    Accounts are active immediately. Instructors additionally start with
    ``is_approved=False`` and a pending profile verification, and must be
    approved by an admin before they can author content.
    """

    password = serializers.CharField(write_only=True, required=True, style={"input_type": "password"}, min_length=8)
    password2 = serializers.CharField(
        write_only=True,
        required=True,
        label="Confirm Password",
        style={"input_type": "password"},
        min_length=8,
    )

    email = serializers.EmailField(
        validators=[
            UniqueValidator(
                queryset=CustomUser.objects.all(),
                message="This email is already registered. Please login.",
            )
        ]
    )
    role = serializers.ChoiceField(
        choices=[CustomUser.Role.STUDENT, CustomUser.Role.INSTRUCTOR],
        default=CustomUser.Role.STUDENT,
    )
    phone = serializers.CharField(required=False, allow_blank=True, max_length=20)
    instructor_profile = InstructorProfileSerializer(required=False, write_only=True)

    class Meta:
        """Model configuration for RegisterSerializer."""

        model = CustomUser
        fields = [
            "email",
            "password",
            "password2",
            "first_name",
            "last_name",
            "role",
            "phone",
            "date_of_birth",
            "instructor_profile",
        ]

    def validate_first_name(self, value):
        return clean_name(value, "First name")

    def validate_last_name(self, value):
        return clean_name(value, "Last name")

    def validate_phone(self, value):
        """Validate phone number format."""
        if not value:
            return value
        clean_phone = "".join(filter(str.isdigit, value))
        if len(clean_phone) < 10:
            raise serializers.ValidationError("Phone number must have at least 10 digits.")
        return clean_phone

    def validate_password(self, value):
        """Validate password strength."""
        return validate_password_strength(value)

    def validate(self, attrs):
        if attrs.get("password") != attrs.get("password2"):
            raise serializers.ValidationError({"password2": "Passwords do not match."})
        if attrs.get("role") == CustomUser.Role.INSTRUCTOR and not attrs.get("instructor_profile"):
            raise serializers.ValidationError(
                {"instructor_profile": "Instructor registration requires qualification, experience and specialization."}
            )
        return attrs

    @transaction.atomic
    def create(self, validated_data):
        password = validated_data.pop("password")
        validated_data.pop("password2")
        instructor_profile = validated_data.pop("instructor_profile", None)

        user = CustomUser.objects.create_user(password=password, **validated_data)

        if user.is_instructor:
            profile = user.profile
            for attr, value in (instructor_profile or {}).items():
                setattr(profile, attr, value)
            profile.verification_status = "pending"
            profile.save()

        logger.info("Registered %s account for %s", user.role, user.email)
        return user


class LoginSerializer(serializers.Serializer):
    """Validates credentials for any role and rejects disabled accounts."""

    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)

    def validate(self, attrs):
        """
        Authenticate user and check the account is active.
        """
        user = authenticate(username=attrs.get("email"), password=attrs.get("password"))

        if not user:
            raise serializers.ValidationError({"detail": "Invalid credentials."})
        # Block login if user is inactive or explicitly disabled by admin
        if not user.is_active or not getattr(user, "is_enabled", True):
            raise serializers.ValidationError({"detail": "User account is disabled."})

        attrs["user"] = user
        return attrs


class LogoutSerializer(serializers.Serializer):
    """Serializer for logout requests (expects refresh token)."""

    refresh = serializers.CharField(help_text="The refresh token to blacklist", write_only=True)


class ProfileSerializer(serializers.ModelSerializer):
    """Read/write serializer for the nested user profile."""

    class Meta:
        """Configuration for ProfileSerializer fields."""

        model = Profile
        fields = [
            "image",
            "bio",
            "qualification",
            "experience",
            "specialization",
            "linkedin",
            "portfolio",
            "verification_status",
            "documents_uploaded",
            "documents",
        ]
        read_only_fields = ["verification_status", "documents_uploaded", "documents"]
        extra_kwargs = {"image": {"required": False, "allow_null": True}}

    def validate_specialization(self, value):
        if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
            raise serializers.ValidationError("Specialization must be a list of strings.")
        return value


class UserProfileSerializer(serializers.ModelSerializer):
    """Current user with nested profile; email, role and approval are read-only."""

    profile = ProfileSerializer(required=False)
    full_name = serializers.CharField(source="get_full_name", read_only=True)
    role_display = serializers.SerializerMethodField(read_only=True)

    class Meta:
        """Configuration for UserProfileSerializer fields."""

        model = CustomUser
        fields = [
            "id",
            "email",
            "phone",
            "first_name",
            "last_name",
            "full_name",
            "date_of_birth",
            "address",
            "role",
            "role_display",
            "is_approved",
            "is_enabled",
            "profile",
            "date_joined",
        ]
        read_only_fields = ["id", "email", "role", "is_approved", "is_enabled", "date_joined"]

    @extend_schema_field(OpenApiTypes.STR)
    def get_role_display(self, obj):
        """Return display value for user role."""
        return obj.get_role_display()

    def validate_address(self, value):
        allowed = {"street", "city", "state", "zip_code", "country"}
        if not isinstance(value, dict):
            raise serializers.ValidationError("Address must be an object.")
        unknown = set(value) - allowed
        if unknown:
            raise serializers.ValidationError(f"Unknown address fields: {', '.join(sorted(unknown))}.")
        return value

    def update(self, instance, validated_data):
        """Update the CustomUser instance and optionally its nested profile."""
        profile_data = validated_data.pop("profile", None)

        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        instance.save()

        if profile_data:
            profile = instance.profile
            profile_serializer = ProfileSerializer(instance=profile, data=profile_data, partial=True, context=self.context)
            profile_serializer.is_valid(raise_exception=True)
            profile_serializer.save()

        return instance


class AdminUserSerializer(serializers.ModelSerializer):
    """User management serializer for admins."""

    profile = ProfileSerializer(read_only=True)
    full_name = serializers.CharField(source="get_full_name", read_only=True)

    class Meta:
        model = CustomUser
        fields = [
            "id",
            "email",
            "first_name",
            "last_name",
            "full_name",
            "phone",
            "role",
            "is_approved",
            "is_active",
            "is_enabled",
            "profile",
            "date_joined",
        ]
        read_only_fields = ["id", "email", "date_joined"]


class PasswordResetSerializer(serializers.Serializer):
    """Serializer for initiating password reset by email."""

    email = serializers.EmailField()

    def validate_email(self, value):
        """Ensure the email belongs to an active user account."""
        user = CustomUser.objects.filter(email=value).first()
        if not user:
            raise serializers.ValidationError("User with this email not found.")
        # Block password reset for inactive or admin-disabled accounts
        if not user.is_active or not getattr(user, "is_enabled", True):
            raise serializers.ValidationError("User account is disabled.")

        self.context["user"] = user
        return value


class PasswordResetConfirmSerializer(serializers.Serializer):
    """Serializer for confirming password reset with token."""

    new_password = serializers.CharField(write_only=True)
    new_password2 = serializers.CharField(write_only=True)

    def validate(self, attrs):
        """Check that new passwords match."""
        if attrs["new_password"] != attrs["new_password2"]:
            raise serializers.ValidationError({"new_password2": "Password confirmation does not match."})
        return attrs

    def validate_new_password(self, value):
        return validate_password_strength(value, user=self.context.get("user"))


class ChangePasswordSerializer(serializers.Serializer):
    old_password = serializers.CharField(required=True, write_only=True)
    new_password = serializers.CharField(required=True, write_only=True, min_length=8)
    new_password2 = serializers.CharField(required=True, write_only=True)

    def validate(self, attrs):
        """Validate old and new passwords for change operation."""
        if attrs["new_password"] != attrs["new_password2"]:
            raise serializers.ValidationError({"new_password2": "New passwords do not match."})

        if attrs["old_password"] == attrs["new_password"]:
            raise serializers.ValidationError({"new_password": "New password cannot be the same as old password."})

        return attrs

    def validate_new_password(self, value):
        """Validate password strength using centralized helper."""
        user = self.context.get("user")
        if not user:
            request = self.context.get("request")
            user = getattr(request, "user", None) if request else None
        return validate_password_strength(value, user=user)


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    """Custom Token serializer referenced by SIMPLE_JWT setting.

    Adds a `role` claim to the token payload.
    """

    @classmethod
    def get_token(cls, user):
        """Return a token with an added 'role' claim for the given user."""
        token = super().get_token(user)
        token["role"] = getattr(user, "role", None)
        return token
