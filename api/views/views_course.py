"""Course catalog, course content and enrollment views."""

import logging

from django.db import transaction
from django.db.models import F, Q
from django.shortcuts import get_object_or_404

from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import filters, permissions, status
from rest_framework.decorators import action

from api.models.models_course import Course, CourseModule
from api.models.models_enrollment import Enrollment
from api.models.models_progress import CourseProgress
from api.permissions import IsApprovedInstructorOrAdmin, IsOwnerInstructorOrAdmin, IsStudent
from api.serializers.serializers_course import (
    CourseCreateUpdateSerializer,
    CourseDetailedSerializer,
    CourseListSerializer,
    CourseModuleSerializer,
    EnrollmentSerializer,
    LectureSerializer,
)
from api.utils.filters_utils import CourseFilter
from api.utils.pagination import StandardResultsSetPagination
from api.utils.response_utils import APIResponseSerializer, api_response
from api.views.views_base import BaseAdminViewSet

logger = logging.getLogger(__name__)


@extend_schema_view(
    list=extend_schema(summary="List courses", tags=["Courses"]),
    retrieve=extend_schema(summary="Retrieve a course with modules and lectures", tags=["Courses"]),
    create=extend_schema(summary="Create a course", tags=["Courses"]),
    update=extend_schema(summary="Update a course", tags=["Courses"]),
    partial_update=extend_schema(summary="Partially update a course", tags=["Courses"]),
    destroy=extend_schema(summary="Delete a course", tags=["Courses"]),
    add_module=extend_schema(
        summary="Append a module to a course", tags=["Courses"], request=CourseModuleSerializer
    ),
    add_lecture=extend_schema(
        summary="Append a lecture to a module", tags=["Courses"], request=LectureSerializer
    ),
    enroll=extend_schema(
        summary="Enroll the current student", tags=["Enrollment"], request=None, responses=APIResponseSerializer
    ),
    unenroll=extend_schema(
        summary="Drop the current student's enrollment",
        tags=["Enrollment"],
        request=None,
        responses=APIResponseSerializer,
    ),
)
class CourseViewSet(BaseAdminViewSet):
    """
    Course CRUD plus module/lecture authoring and student enrollment.

    Anyone may browse active, approved courses. Instructors also see their
    own courses; admins see everything.
    """

    queryset = Course.objects.select_related("instructor").prefetch_related("modules__lectures")
    pagination_class = StandardResultsSetPagination

    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = CourseFilter
    search_fields = ["title", "course_code", "description"]
    ordering_fields = ["created_at", "title", "fees", "credits"]
    ordering = ["-created_at"]

    OWNER_ACTIONS = {"update", "partial_update", "destroy", "add_module", "add_lecture"}

    def get_permissions(self):
        if self.action in self.public_actions:
            return [permissions.AllowAny()]
        if self.action == "create":
            return [IsApprovedInstructorOrAdmin()]
        if self.action in self.OWNER_ACTIONS:
            return [IsApprovedInstructorOrAdmin(), IsOwnerInstructorOrAdmin()]
        if self.action in ("enroll", "unenroll", "my_enrollments"):
            return [IsStudent()]
        return self.get_default_permissions()

    def get_serializer_class(self):
        if self.action == "list":
            return CourseListSerializer
        if self.action in ("create", "update", "partial_update"):
            return CourseCreateUpdateSerializer
        return CourseDetailedSerializer

    def filter_public_queryset(self, queryset):
        visible = Q(is_active=True, is_approved=True)
        user = self.request.user
        if user.is_authenticated and user.role == "instructor":
            visible |= Q(instructor=user)
        return queryset.filter(visible)

    def perform_create(self, serializer):
        user = self.request.user
        if user.role == "instructor":
            course = serializer.save(instructor=user)
        else:
            course = serializer.save()
        logger.info("Course %s created by %s", course.course_code, user.email)

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        self.perform_create(serializer)
        data = CourseDetailedSerializer(serializer.instance, context=self.get_serializer_context()).data
        return api_response(True, "Course created successfully", data, status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop("partial", False)
        course = self.get_object()
        serializer = self.get_serializer(course, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        data = CourseDetailedSerializer(course, context=self.get_serializer_context()).data
        return api_response(True, "Course updated successfully", data)

    def perform_destroy(self, instance):
        logger.info("Course %s deleted by %s", instance.course_code, self.request.user.email)
        instance.delete()

    # ----------------------------
    # Content authoring
    # ----------------------------

    @action(detail=True, methods=["post"], url_path="modules")
    def add_module(self, request, pk=None):
        course = self.get_object()
        data = request.data.copy()
        if "order" not in data:
            data["order"] = course.modules.count() + 1

        serializer = CourseModuleSerializer(data=data, context={"request": request, "course": course})
        serializer.is_valid(raise_exception=True)
        serializer.save(course=course)
        return api_response(True, "Module added successfully", serializer.data, status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"], url_path=r"modules/(?P<module_id>[^/.]+)/lectures")
    def add_lecture(self, request, pk=None, module_id=None):
        course = self.get_object()
        module = CourseModule.objects.filter(course=course, pk=module_id).first()
        if module is None:
            return api_response(False, "Module not found in this course.", {}, status.HTTP_404_NOT_FOUND)

        data = request.data.copy()
        if "order" not in data:
            data["order"] = module.lectures.count() + 1

        serializer = LectureSerializer(data=data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        serializer.save(module=module)
        return api_response(True, "Lecture added successfully", serializer.data, status.HTTP_201_CREATED)

    # ----------------------------
    # Enrollment
    # ----------------------------

    @action(detail=True, methods=["post"])
    def enroll(self, request, pk=None):
        student = request.user

        with transaction.atomic():
            course = get_object_or_404(Course.objects.select_for_update(), pk=pk)
            if not course.is_active:
                return api_response(False, "Course is not active.", {}, status.HTTP_400_BAD_REQUEST)

            enrollment = Enrollment.objects.select_for_update().filter(student=student, course=course).first()
            if enrollment and enrollment.status == "enrolled":
                return api_response(False, "You are already enrolled in this course.", {}, status.HTTP_400_BAD_REQUEST)

            if course.is_full:
                return api_response(False, "Course is full.", {}, status.HTTP_400_BAD_REQUEST)

            if enrollment:
                enrollment.status = "enrolled"
                enrollment.save(update_fields=["status", "updated_at"])
            else:
                enrollment = Enrollment.objects.create(student=student, course=course)

            Course.objects.filter(pk=course.pk).update(current_enrollment=F("current_enrollment") + 1)
            CourseProgress.initialize_for(student, course)

        logger.info("Student %s enrolled in %s", student.email, course.course_code)
        enrollment.refresh_from_db()
        return api_response(
            True,
            "Enrolled successfully.",
            EnrollmentSerializer(enrollment, context={"request": request}).data,
            status.HTTP_201_CREATED,
        )

    @action(detail=True, methods=["post"])
    def unenroll(self, request, pk=None):
        student = request.user

        with transaction.atomic():
            course = get_object_or_404(Course.objects.select_for_update(), pk=pk)
            enrollment = (
                Enrollment.objects.select_for_update()
                .filter(student=student, course=course, status="enrolled")
                .first()
            )
            if enrollment is None:
                return api_response(False, "You are not enrolled in this course.", {}, status.HTTP_400_BAD_REQUEST)

            enrollment.status = "dropped"
            enrollment.save(update_fields=["status", "updated_at"])
            Course.objects.filter(pk=course.pk, current_enrollment__gt=0).update(
                current_enrollment=F("current_enrollment") - 1
            )
            CourseProgress.objects.filter(student=student, course=course).delete()

        logger.info("Student %s dropped %s", student.email, course.course_code)
        return api_response(True, "Unenrolled successfully.", {})

    @extend_schema(summary="List the current student's enrollments", tags=["Enrollment"])
    @action(detail=False, methods=["get"], url_path="my-enrollments")
    def my_enrollments(self, request):
        enrollments = (
            Enrollment.objects.filter(student=request.user)
            .select_related("course", "course__instructor")
            .order_by("-created_at")
        )
        data = EnrollmentSerializer(enrollments, many=True, context={"request": request}).data
        return api_response(True, "Enrollments retrieved successfully", data)
