"""Lecture progress views: per-student tracking and per-course reports."""

import logging

from django.db import transaction
from django.shortcuts import get_object_or_404
from django.utils import timezone

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from reportlab.platypus import Paragraph, Spacer
from rest_framework import permissions, status
from rest_framework.views import APIView

from api.models.models_course import Course, CourseModule
from api.models.models_enrollment import Enrollment
from api.models.models_progress import CourseProgress
from api.permissions import IsInstructorOrAdmin, IsStudent
from api.serializers.serializers_progress import CourseProgressSerializer, CourseStudentProgressSerializer
from api.utils.export_utils import CSVExporter, PDFExporter
from api.utils.response_utils import api_response

logger = logging.getLogger(__name__)

NOT_ENROLLED = "You are not enrolled in this course."


def is_enrolled(student, course):
    return Enrollment.objects.filter(student=student, course=course, status="enrolled").exists()


def owned_course_or_error(user, course_id):
    """Return ``(course, None)`` for admins and the owning instructor, else ``(None, response)``."""
    course = get_object_or_404(Course, pk=course_id)
    if user.role == "admin" or course.instructor_id == user.id:
        return course, None
    return None, api_response(False, "Access denied.", {}, status.HTTP_403_FORBIDDEN)


def course_progress_report(course):
    return (
        CourseProgress.objects.filter(course=course, student__role="student")
        .select_related("student")
        .order_by("-progress_percentage", "student__email")
    )


class CourseProgressView(APIView):
    """Get (creating if needed) or remove the caller's progress in a course.

    Students must be enrolled; instructors and admins may keep a record of
    their own for any course.
    """

    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(summary="Get my progress in a course", tags=["Progress"], responses=CourseProgressSerializer)
    def get(self, request, course_id):
        course = get_object_or_404(Course, pk=course_id)
        if request.user.role == "student" and not is_enrolled(request.user, course):
            return api_response(False, NOT_ENROLLED, {}, status.HTTP_403_FORBIDDEN)

        progress, _ = CourseProgress.initialize_for(request.user, course)
        return api_response(True, "Progress retrieved successfully", CourseProgressSerializer(progress).data)

    @extend_schema(
        summary="Delete a progress record",
        tags=["Progress"],
        parameters=[
            OpenApiParameter(
                name="student_id",
                type=OpenApiTypes.UUID,
                location=OpenApiParameter.QUERY,
                description="Admins only: whose record to delete (defaults to the caller)",
                required=False,
            )
        ],
    )
    def delete(self, request, course_id):
        user = request.user
        if user.role not in ("student", "admin"):
            return api_response(False, "Access denied.", {}, status.HTTP_403_FORBIDDEN)

        student_id = user.id
        if user.role == "admin" and request.query_params.get("student_id"):
            student_id = request.query_params["student_id"]

        deleted, _ = CourseProgress.objects.filter(course_id=course_id, student_id=student_id).delete()
        if not deleted:
            return api_response(False, "Progress record not found.", {}, status.HTTP_404_NOT_FOUND)

        logger.info("Progress for course %s removed by %s", course_id, user.email)
        return api_response(True, "Progress deleted successfully", {})


class ToggleLectureView(APIView):
    permission_classes = [IsStudent]

    @extend_schema(summary="Toggle a lecture's completion", tags=["Progress"], request=None)
    def post(self, request, course_id, module_id, lecture_id):
        course = get_object_or_404(Course, pk=course_id)
        if not is_enrolled(request.user, course):
            return api_response(False, NOT_ENROLLED, {}, status.HTTP_403_FORBIDDEN)

        module = CourseModule.objects.filter(course=course, pk=module_id).first()
        if module is None:
            return api_response(False, "Module not found in this course.", {}, status.HTTP_404_NOT_FOUND)
        if not module.lectures.filter(pk=lecture_id).exists():
            return api_response(False, "Lecture not found in this module.", {}, status.HTTP_404_NOT_FOUND)

        with transaction.atomic():
            progress, _ = CourseProgress.initialize_for(request.user, course)
            progress = CourseProgress.objects.select_for_update().get(pk=progress.pk)
            completed = progress.toggle_lecture(module.pk, lecture_id)

        data = CourseProgressSerializer(progress).data
        data["lecture_completed"] = completed
        return api_response(True, "Lecture progress updated", data)


class InitializeProgressView(APIView):
    permission_classes = [IsStudent]

    @extend_schema(summary="Initialize my progress in a course", tags=["Progress"], request=None)
    def post(self, request, course_id):
        course = get_object_or_404(Course, pk=course_id)
        if not is_enrolled(request.user, course):
            return api_response(False, NOT_ENROLLED, {}, status.HTTP_403_FORBIDDEN)

        progress, created = CourseProgress.initialize_for(request.user, course)
        data = CourseProgressSerializer(progress).data
        if created:
            return api_response(True, "Progress initialized successfully", data, status.HTTP_201_CREATED)
        return api_response(True, "Progress already initialized", data)


class StudentCoursesProgressView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(summary="All course progress of a student", tags=["Progress"])
    def get(self, request, student_id):
        user = request.user
        if user.role == "student" and str(user.id) != str(student_id):
            return api_response(False, "Access denied.", {}, status.HTTP_403_FORBIDDEN)

        records = CourseProgress.objects.filter(student_id=student_id).select_related("student", "course")
        if user.role == "instructor":
            records = records.filter(course__instructor=user)

        data = CourseProgressSerializer(records.order_by("-updated_at"), many=True).data
        return api_response(True, "Progress retrieved successfully", data)


class CourseStudentsProgressView(APIView):
    permission_classes = [IsInstructorOrAdmin]

    @extend_schema(summary="Progress of every student in a course", tags=["Progress"])
    def get(self, request, course_id):
        course, error = owned_course_or_error(request.user, course_id)
        if error:
            return error

        data = CourseStudentProgressSerializer(course_progress_report(course), many=True).data
        return api_response(True, "Course progress retrieved successfully", data)


class CourseProgressExportView(APIView):
    permission_classes = [IsInstructorOrAdmin]

    HEADERS = ["Student", "Email", "Completed Lectures", "Total Lectures", "Progress %", "Status", "Completed At"]

    @extend_schema(
        summary="Export a course progress report",
        tags=["Progress"],
        parameters=[
            OpenApiParameter(
                name="format",
                type=OpenApiTypes.STR,
                location=OpenApiParameter.QUERY,
                description="csv (default) or pdf",
                required=False,
            )
        ],
    )
    def get(self, request, course_id):
        course, error = owned_course_or_error(request.user, course_id)
        if error:
            return error

        export_format = request.query_params.get("format", "csv").lower()
        if export_format not in ("csv", "pdf"):
            return api_response(False, "Format must be csv or pdf.", {}, status.HTTP_400_BAD_REQUEST)

        rows = [
            [
                record.student.get_full_name or record.student.email,
                record.student.email,
                record.completed_lectures_count,
                record.total_lectures_count,
                record.progress_percentage,
                "Completed" if record.completed else "In Progress",
                record.completed_at.strftime("%Y-%m-%d") if record.completed_at else "-",
            ]
            for record in course_progress_report(course)
        ]
        stamp = timezone.now().strftime("%Y%m%d")
        logger.info(
            "Progress report for %s exported as %s by %s", course.course_code, export_format, request.user.email
        )

        if export_format == "csv":
            return CSVExporter.export_to_csv(f"progress_{course.course_code}_{stamp}.csv", self.HEADERS, rows)

        exporter = PDFExporter(f"Progress Report: {course.course_code}")
        completed_count = sum(1 for row in rows if row[5] == "Completed")
        content = [
            Paragraph(f"<b>Course:</b> {course.title}", exporter.styles["CustomBody"]),
            Paragraph(
                f"<b>Students:</b> {len(rows)} | <b>Completed:</b> {completed_count}",
                exporter.styles["CustomBody"],
            ),
            Spacer(1, 16),
            exporter.create_table(self.HEADERS, [[str(cell) for cell in row] for row in rows]),
        ]
        return exporter.create_pdf(content, filename=f"progress_{course.course_code}_{stamp}.pdf")
