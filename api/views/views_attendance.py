"""Attendance views: mark a class and read sheets per course or per student."""

import logging

from django.db import IntegrityError
from django.shortcuts import get_object_or_404

from drf_spectacular.utils import extend_schema
from rest_framework import permissions, status
from rest_framework.views import APIView

from api.models.models_attendance import Attendance, AttendanceRecord
from api.models.models_course import Course
from api.permissions import IsApprovedInstructor, IsInstructorOrAdmin
from api.serializers.serializers_attendance import (
    AttendanceCreateSerializer,
    AttendanceSerializer,
    StudentAttendanceSerializer,
)
from api.utils.response_utils import api_response

logger = logging.getLogger(__name__)


class AttendanceCreateView(APIView):
    """Only the approved instructor who owns the course can mark its attendance."""

    permission_classes = [IsApprovedInstructor]

    @extend_schema(
        summary="Mark attendance for a class",
        tags=["Attendance"],
        request=AttendanceCreateSerializer,
        responses=AttendanceSerializer,
    )
    def post(self, request):
        serializer = AttendanceCreateSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        try:
            sheet = serializer.save()
        except IntegrityError:
            return api_response(
                False, "Attendance for this date has already been recorded.", {}, status.HTTP_400_BAD_REQUEST
            )

        logger.info(
            "Attendance for %s on %s marked by %s (%d students)",
            sheet.course.course_code,
            sheet.date,
            request.user.email,
            sheet.students.count(),
        )
        return api_response(
            True, "Attendance marked successfully", AttendanceSerializer(sheet).data, status.HTTP_201_CREATED
        )


class CourseAttendanceView(APIView):
    permission_classes = [IsInstructorOrAdmin]

    @extend_schema(
        summary="Attendance sheets of a course",
        tags=["Attendance"],
        responses=AttendanceSerializer(many=True),
    )
    def get(self, request, course_id):
        course = get_object_or_404(Course, pk=course_id)
        if request.user.role != "admin" and course.instructor_id != request.user.id:
            return api_response(False, "Access denied.", {}, status.HTTP_403_FORBIDDEN)

        sheets = (
            Attendance.objects.filter(course=course)
            .select_related("course", "instructor")
            .prefetch_related("students__student")
            .order_by("-date")
        )
        return api_response(True, "Attendance retrieved successfully", AttendanceSerializer(sheets, many=True).data)


class StudentAttendanceView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(
        summary="Attendance history of a student",
        tags=["Attendance"],
        responses=StudentAttendanceSerializer(many=True),
    )
    def get(self, request, student_id):
        user = request.user
        if user.role == "student" and str(user.id) != str(student_id):
            return api_response(False, "Access denied.", {}, status.HTTP_403_FORBIDDEN)

        records = AttendanceRecord.objects.filter(student_id=student_id).select_related(
            "attendance", "attendance__course"
        )
        if user.role == "instructor":
            records = records.filter(attendance__course__instructor=user)

        data = StudentAttendanceSerializer(records.order_by("-attendance__date"), many=True).data
        return api_response(True, "Attendance retrieved successfully", data)
