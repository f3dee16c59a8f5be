"""Assignment authoring views: CRUD, question bank, rubric and quiz settings."""

import logging

from django.shortcuts import get_object_or_404

from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import filters, permissions, status
from rest_framework.decorators import action

from api.models.models_assignment import Assignment, AssignmentQuestion
from api.models.models_course import Course
from api.models.models_enrollment import Enrollment
from api.permissions import IsApprovedInstructorOrAdmin, IsOwnerInstructorOrAdmin
from api.serializers.serializers_assignment import (
    AssignmentQuestionSerializer,
    AssignmentSerializer,
    QuizSettingsSerializer,
    RubricCriterionSerializer,
    merge_quiz_settings,
)
from api.utils.filters_utils import AssignmentFilter
from api.utils.response_utils import api_response
from api.views.views_base import BaseAdminViewSet

logger = logging.getLogger(__name__)


def is_enrolled(student, course_id):
    return Enrollment.objects.filter(student=student, course_id=course_id, status="enrolled").exists()


@extend_schema_view(
    list=extend_schema(summary="List assignments visible to the caller", tags=["Assignments"]),
    retrieve=extend_schema(summary="Retrieve an assignment", tags=["Assignments"]),
    create=extend_schema(summary="Create an assignment", tags=["Assignments"]),
    update=extend_schema(summary="Update an assignment", tags=["Assignments"]),
    partial_update=extend_schema(summary="Partially update an assignment", tags=["Assignments"]),
    destroy=extend_schema(summary="Delete an assignment", tags=["Assignments"]),
    by_course=extend_schema(summary="Published assignments of a course", tags=["Assignments"]),
    add_question=extend_schema(
        summary="Add a question", tags=["Assignment Questions"], request=AssignmentQuestionSerializer
    ),
    question_detail=extend_schema(
        summary="Update or delete a question", tags=["Assignment Questions"], request=AssignmentQuestionSerializer
    ),
    rubric=extend_schema(
        summary="Replace the grading rubric", tags=["Assignments"], request=RubricCriterionSerializer(many=True)
    ),
    quiz_settings=extend_schema(
        summary="Update quiz settings", tags=["Assignments"], request=QuizSettingsSerializer
    ),
)
class AssignmentViewSet(BaseAdminViewSet):
    """
    Assignments scoped by role: students see published work in courses they
    attend, instructors see their own, admins see everything.
    """

    queryset = Assignment.objects.select_related("course", "instructor").prefetch_related("questions")
    serializer_class = AssignmentSerializer

    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = AssignmentFilter
    search_fields = ["title", "description"]
    ordering_fields = ["due_date", "created_at", "total_points"]
    ordering = ["due_date"]

    public_actions = set()
    OWNER_ACTIONS = {
        "update",
        "partial_update",
        "destroy",
        "add_question",
        "question_detail",
        "rubric",
        "quiz_settings",
    }

    def get_permissions(self):
        if self.action == "create":
            return [IsApprovedInstructorOrAdmin()]
        if self.action in self.OWNER_ACTIONS:
            return [IsApprovedInstructorOrAdmin(), IsOwnerInstructorOrAdmin()]
        return [permissions.IsAuthenticated()]

    def get_serializer_context(self):
        context = super().get_serializer_context()
        user = self.request.user
        context["hide_answers"] = user.is_authenticated and user.role == "student"
        return context

    def get_queryset(self):
        queryset = self.get_base_queryset()
        if self.action != "list":
            return queryset

        user = self.request.user
        if user.role == "student":
            enrolled_courses = Enrollment.objects.filter(student=user, status="enrolled").values("course_id")
            return queryset.filter(is_published=True, course_id__in=enrolled_courses)
        if user.role == "instructor":
            return queryset.filter(instructor=user)
        return queryset

    def retrieve(self, request, *args, **kwargs):
        assignment = self.get_object()
        user = request.user
        if user.role == "student":
            if not assignment.is_published:
                return api_response(False, "Assignment not found.", {}, status.HTTP_404_NOT_FOUND)
            if not is_enrolled(user, assignment.course_id):
                return api_response(False, "You are not enrolled in this course.", {}, status.HTTP_403_FORBIDDEN)
        elif user.role == "instructor" and assignment.instructor_id != user.id:
            return api_response(False, "Access denied.", {}, status.HTTP_403_FORBIDDEN)

        return api_response(True, "Assignment retrieved successfully", self.get_serializer(assignment).data)

    def perform_create(self, serializer):
        assignment = serializer.save()
        logger.info(
            "Assignment %s created for %s by %s",
            assignment.pk,
            assignment.course.course_code,
            self.request.user.email,
        )

    def update(self, request, *args, **kwargs):
        # PUT behaves like PATCH so clients can send only the changed fields
        kwargs["partial"] = True
        return super().update(request, *args, **kwargs)

    def perform_destroy(self, instance):
        logger.info("Assignment %s deleted by %s", instance.pk, self.request.user.email)
        instance.delete()

    @action(detail=False, methods=["get"], url_path=r"course/(?P<course_id>[^/.]+)")
    def by_course(self, request, course_id=None):
        course = get_object_or_404(Course, pk=course_id)
        user = request.user
        if user.role == "student" and not is_enrolled(user, course.pk):
            return api_response(False, "You are not enrolled in this course.", {}, status.HTTP_403_FORBIDDEN)

        assignments = self.get_base_queryset().filter(course=course, is_published=True).order_by("due_date")
        data = self.get_serializer(assignments, many=True).data
        return api_response(True, "Assignments retrieved successfully", data)

    # ----------------------------
    # Question bank
    # ----------------------------

    @action(detail=True, methods=["post"], url_path="questions")
    def add_question(self, request, pk=None):
        assignment = self.get_object()
        data = request.data.copy()
        if "order" not in data:
            data["order"] = assignment.questions.count() + 1

        serializer = AssignmentQuestionSerializer(data=data)
        serializer.is_valid(raise_exception=True)
        serializer.save(assignment=assignment)
        return api_response(True, "Question added successfully", serializer.data, status.HTTP_201_CREATED)

    @action(detail=True, methods=["put", "patch", "delete"], url_path=r"questions/(?P<question_id>[^/.]+)")
    def question_detail(self, request, pk=None, question_id=None):
        assignment = self.get_object()
        question = AssignmentQuestion.objects.filter(assignment=assignment, pk=question_id).first()
        if question is None:
            return api_response(False, "Question not found.", {}, status.HTTP_404_NOT_FOUND)

        if request.method == "DELETE":
            question.delete()
            return api_response(True, "Question deleted successfully", {})

        serializer = AssignmentQuestionSerializer(question, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return api_response(True, "Question updated successfully", serializer.data)

    # ----------------------------
    # Rubric and quiz settings
    # ----------------------------

    @action(detail=True, methods=["put"])
    def rubric(self, request, pk=None):
        assignment = self.get_object()
        payload = request.data.get("rubric") if isinstance(request.data, dict) else request.data

        serializer = RubricCriterionSerializer(data=payload, many=True)
        serializer.is_valid(raise_exception=True)
        assignment.rubric = serializer.validated_data
        assignment.save(update_fields=["rubric", "updated_at"])
        return api_response(True, "Rubric updated successfully", assignment.rubric)

    @action(detail=True, methods=["put"], url_path="quiz-settings")
    def quiz_settings(self, request, pk=None):
        assignment = self.get_object()
        serializer = QuizSettingsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        assignment.quiz_settings = merge_quiz_settings(assignment.quiz_settings, serializer.validated_data)
        assignment.save(update_fields=["quiz_settings", "updated_at"])
        return api_response(True, "Quiz settings updated successfully", assignment.quiz_settings)
