"""Base ViewSet for admin-style CRUD operations with standardized responses and
role-based access control."""

from django.core.exceptions import ImproperlyConfigured
from django.core.exceptions import ValidationError as DjangoValidationError

from rest_framework import permissions, status, viewsets

from api.permissions import IsAdmin, IsApprovedInstructorOrAdmin
from api.utils.response_utils import api_response


def django_error_response(exc):
    """Convert a model-level ValidationError into the API envelope."""
    error_dict = exc.message_dict if hasattr(exc, "message_dict") else {"non_field_errors": exc.messages}
    # Extract first error message for the main message field
    first_error = next(iter(error_dict.values()))[0] if error_dict else "Validation failed"
    return api_response(False, first_error, error_dict, status.HTTP_400_BAD_REQUEST)


class BaseAdminViewSet(viewsets.ModelViewSet):
    """
    Base ViewSet for admin-style CRUD.
    - Public actions are open to anyone (override ``public_actions``).
    - Authoring actions default to approved instructors and admins.
    - Destroy defaults to admins; child viewsets may widen it.
    - Standardized CRUD responses.
    """

    queryset = None
    serializer_class = None
    pagination_class = None
    permission_classes = None

    public_actions = {"list", "retrieve"}
    authoring_actions = {"create", "update", "partial_update"}

    def get_default_permissions(self):
        """Return default fallback permission for all actions except public ones."""
        return [IsAdmin()]

    def get_permissions(self):
        """
        Returns the list of permissions for the current action.

        Public actions get AllowAny. Otherwise the child-defined
        permission_classes win, then the authoring tier, then admin-only.
        """
        if self.action in self.public_actions:
            return [permissions.AllowAny()]

        # If viewset explicitly sets permission_classes, use them
        if getattr(self, "permission_classes", None):
            return [perm() for perm in self.permission_classes]

        if self.action in self.authoring_actions:
            return [IsApprovedInstructorOrAdmin()]

        return self.get_default_permissions()

    # ----------------------------
    # Queryset Filtering
    # ----------------------------

    def is_admin_user(self, user):
        """Check if user has the admin role"""
        return user.is_authenticated and user.role == "admin"

    def get_base_queryset(self):
        """Get the base queryset before any filtering"""
        if self.queryset is None:
            raise ImproperlyConfigured(f"{self.__class__.__name__} must define queryset")
        return self.queryset.all()

    def filter_public_queryset(self, queryset):
        """
        Smart default public filtering for safety.
        - If model has is_active: filter by it
        - Otherwise: force explicit implementation
        """
        model = queryset.model
        field_names = {field.name for field in model._meta.get_fields()}

        if "is_active" in field_names:
            return queryset.filter(is_active=True)

        raise NotImplementedError(
            f"{self.__class__.__name__} must implement filter_public_queryset method "
            f"for model {model.__name__} (no is_active field found)"
        )

    def get_queryset(self):
        """
        Apply role-based filtering:
        - Admin users: see everything
        - Others: see filtered content (via filter_public_queryset)
        """
        queryset = self.get_base_queryset()

        if self.action in self.public_actions and not self.is_admin_user(self.request.user):
            queryset = self.filter_public_queryset(queryset)

        return queryset

    # ----------------------------
    # Helpers
    # ----------------------------

    def get_model_name(self):
        if not hasattr(self, "queryset") or self.queryset is None:
            raise ImproperlyConfigured(f"{self.__class__.__name__} must define queryset")
        return self.queryset.model._meta.verbose_name.title()

    # ----------------------------
    # CRUD Response Wrappers
    # ----------------------------
    def list(self, request, *args, **kwargs):
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        if page is not None:
            serializer = self.get_serializer(page, many=True)
            return api_response(
                True,
                f"{self.get_model_name()}s retrieved successfully",
                self.get_paginated_response(serializer.data).data,
            )
        serializer = self.get_serializer(queryset, many=True)
        return api_response(True, f"{self.get_model_name()}s retrieved successfully", serializer.data)

    def retrieve(self, request, *args, **kwargs):
        response = super().retrieve(request, *args, **kwargs)
        return api_response(True, f"{self.get_model_name()} retrieved successfully", response.data)

    def create(self, request, *args, **kwargs):
        try:
            response = super().create(request, *args, **kwargs)
        except DjangoValidationError as e:
            return django_error_response(e)
        return api_response(
            True,
            f"{self.get_model_name()} created successfully",
            response.data,
            status.HTTP_201_CREATED,
        )

    def update(self, request, *args, **kwargs):
        try:
            response = super().update(request, *args, **kwargs)
        except DjangoValidationError as e:
            return django_error_response(e)
        return api_response(True, f"{self.get_model_name()} updated successfully", response.data)

    def partial_update(self, request, *args, **kwargs):
        kwargs["partial"] = True
        return self.update(request, *args, **kwargs)

    def destroy(self, request, *args, **kwargs):
        super().destroy(request, *args, **kwargs)
        return api_response(
            True,
            f"{self.get_model_name()} deleted successfully",
            {},
            status.HTTP_200_OK,
        )
