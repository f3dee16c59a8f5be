# api/utils/filters_utils.py
import django_filters

from api.models.models_assignment import Assignment
from api.models.models_auth import CustomUser
from api.models.models_course import Course


class UserFilter(django_filters.FilterSet):
    """FilterSet for admin user list endpoints.

    Allows filtering users by role, approval, active/enabled flags,
    date_joined range, email/phone substring matches and the instructor
    verification state kept on the profile.
    """

    role = django_filters.CharFilter(field_name='role', lookup_expr='iexact')
    is_approved = django_filters.BooleanFilter(field_name='is_approved')
    is_active = django_filters.BooleanFilter(field_name='is_active')
    is_enabled = django_filters.BooleanFilter(field_name='is_enabled')
    date_joined = django_filters.DateFromToRangeFilter(field_name='date_joined')
    email = django_filters.CharFilter(field_name='email', lookup_expr='icontains')
    phone = django_filters.CharFilter(field_name='phone', lookup_expr='icontains')
    verification_status = django_filters.CharFilter(
        field_name='profile__verification_status', lookup_expr='iexact'
    )

    class Meta:
        model = CustomUser
        fields = [
            'role', 'is_approved', 'is_active', 'is_enabled', 'date_joined',
            'email', 'phone', 'verification_status'
        ]


class CourseFilter(django_filters.FilterSet):
    """Catalog filters: category, level, instructor and a fee range."""

    category = django_filters.CharFilter(field_name='category', lookup_expr='iexact')
    level = django_filters.CharFilter(field_name='level', lookup_expr='iexact')
    instructor = django_filters.UUIDFilter(field_name='instructor__id')
    min_fees = django_filters.NumberFilter(field_name='fees', lookup_expr='gte')
    max_fees = django_filters.NumberFilter(field_name='fees', lookup_expr='lte')

    class Meta:
        model = Course
        fields = ['category', 'level', 'instructor', 'is_active']


class AssignmentFilter(django_filters.FilterSet):
    """Filters for assignment lists: course, type and a due-date window."""

    course = django_filters.UUIDFilter(field_name='course__id')
    type = django_filters.CharFilter(field_name='type', lookup_expr='iexact')
    due_date = django_filters.DateFromToRangeFilter(field_name='due_date')

    class Meta:
        model = Assignment
        fields = ['course', 'type', 'is_published', 'due_date']
