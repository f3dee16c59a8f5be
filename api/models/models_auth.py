"""Authentication-related models: CustomUser and Profile.

This module defines the project's user model, the per-user profile (which
also carries the instructor vetting fields) and a custom user manager.
"""

import uuid

from django.conf import settings
from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.db import models
from django.utils.translation import gettext_lazy as _

from django_ckeditor_5.fields import CKEditor5Field

from api.utils.helper_models import TimeStampedModel

# -----------------------------------------------------------
# Custom Manager
# -----------------------------------------------------------


class CustomUserManager(BaseUserManager):
    """
    Custom user model manager where email is the unique identifier.
    """

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError(_("The Email field must be set"))

        email = self.normalize_email(email)
        role = extra_fields.get("role", CustomUser.Role.STUDENT)

        # Instructors wait for an admin before they can author content
        if role == CustomUser.Role.INSTRUCTOR:
            extra_fields.setdefault("is_approved", False)

        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password, **extra_fields):
        """
        Create and save a SuperUser with the given email and password.
        Ensures the superuser has the correct flags and the ADMIN role.
        """
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("is_active", True)
        extra_fields.setdefault("role", CustomUser.Role.ADMIN)

        if extra_fields.get("role") != CustomUser.Role.ADMIN:
            raise ValueError("Superuser must have role of Admin.")
        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True.")

        return self.create_user(email, password, **extra_fields)


# -----------------------------------------------------------
# CustomUser Model
# -----------------------------------------------------------


class CustomUser(AbstractBaseUser, PermissionsMixin):
    """Custom user model with email authentication and role-based access."""

    id = models.UUIDField(
        primary_key=True, default=uuid.uuid4, editable=False, help_text="Unique UUID identifier for this user."
    )

    class Role(models.TextChoices):
        ADMIN = "admin", _("Admin")
        INSTRUCTOR = "instructor", _("Instructor")
        STUDENT = "student", _("Student")

    first_name = models.CharField(_("first name"), max_length=50, help_text="User's first name (max 50 chars).")
    last_name = models.CharField(_("last name"), max_length=50, help_text="User's last name (max 50 chars).")
    email = models.EmailField(
        _("email address"),
        unique=True,
        db_index=True,
        help_text="Unique email address used for login. Must be valid email format.",
    )
    phone = models.CharField(
        _("phone number"), max_length=20, blank=True, help_text="Contact phone number (max 20 chars)."
    )
    date_of_birth = models.DateField(null=True, blank=True, help_text="Date of birth.")
    address = models.JSONField(
        default=dict,
        blank=True,
        help_text="Postal address as {street, city, state, zip_code, country}.",
    )
    last_password_reset = models.DateTimeField(
        null=True, blank=True, help_text="Timestamp of the last password reset. Auto-managed by system."
    )

    role = models.CharField(
        max_length=15,
        choices=Role.choices,
        default=Role.STUDENT,
        help_text="User's role in the system. Determines access permissions.",
    )

    is_approved = models.BooleanField(
        default=True,
        help_text="Instructors must be approved by an admin before they can create courses or assignments.",
    )
    is_staff = models.BooleanField(
        default=False, help_text=_("Check to allow admin site access. Staff can log into admin panel.")
    )
    is_active = models.BooleanField(default=True, help_text=_("Uncheck to disable account. Inactive users cannot log in."))

    is_enabled = models.BooleanField(
        default=True, help_text="Uncheck to disable this profile. Disabled profiles cannot be accessed."
    )

    date_joined = models.DateTimeField(auto_now_add=True, help_text="Date and time when the user account was created.")

    USERNAME_FIELD = "email"

    REQUIRED_FIELDS = ["first_name", "last_name"]

    objects = CustomUserManager()

    class Meta:
        verbose_name = "Academy User"
        verbose_name_plural = "All Users"

    def __str__(self):
        return self.first_name + " " + self.last_name

    @property
    def get_full_name(self):
        return f"{self.first_name} {self.last_name}"

    @property
    def is_admin(self):
        return self.role == self.Role.ADMIN

    @property
    def is_instructor(self):
        return self.role == self.Role.INSTRUCTOR

    @property
    def is_student(self):
        return self.role == self.Role.STUDENT


# -----------------------------------------------------------
# Profile Model
# -----------------------------------------------------------


class Profile(TimeStampedModel):
    """Extended user profile information, including instructor vetting data."""

    VERIFICATION_CHOICES = [
        ("pending", "Pending"),
        ("under_review", "Under review"),
        ("approved", "Approved"),
        ("rejected", "Rejected"),
    ]

    id = models.UUIDField(
        primary_key=True, default=uuid.uuid4, editable=False, help_text="Unique UUID identifier for this profile."
    )

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="profile",
        help_text="Select the user this profile belongs to. Each user can have only one profile.",
    )
    image = models.ImageField(
        upload_to="profile_pics/",
        null=True,
        blank=True,
        help_text="Profile picture. Recommended size: 300x300px.",
    )

    bio = CKEditor5Field(
        _("Biography"),
        blank=True,
        null=True,
        help_text="Write your Biography here.",
    )

    qualification = models.CharField(
        _("Qualification"),
        max_length=255,
        blank=True,
        help_text="Highest qualification (max 255 chars). Example: 'MSc Computer Science'.",
    )
    experience = models.PositiveIntegerField(default=0, help_text="Years of teaching or industry experience.")
    specialization = models.JSONField(default=list, blank=True, help_text="List of subject areas.")
    linkedin = models.URLField(blank=True, help_text="LinkedIn profile URL.")
    portfolio = models.URLField(blank=True, help_text="Portfolio or personal website URL.")
    verification_status = models.CharField(
        max_length=12,
        choices=VERIFICATION_CHOICES,
        blank=True,
        help_text="Instructor document verification state. Empty for students and admins.",
    )
    documents = models.JSONField(
        default=list,
        blank=True,
        help_text="Uploaded verification documents: {type, original_name, filename, path, mimetype, size, uploaded_at}",
    )
    documents_uploaded = models.BooleanField(default=False, help_text="Whether the instructor has uploaded verification documents.")

    class Meta:
        verbose_name = "Academy User Profile"
        verbose_name_plural = "User Profiles"

    def __str__(self):
        return f"{self.user.first_name} {self.user.last_name} Profile"
