"""Serializers for course progress records."""

from rest_framework import serializers

from api.models.models_progress import CourseProgress
from api.serializers.serializers_submission import StudentSummarySerializer


class CourseProgressSerializer(serializers.ModelSerializer):
    student = StudentSummarySerializer(read_only=True)
    course_title = serializers.CharField(source="course.title", read_only=True)
    course_code = serializers.CharField(source="course.course_code", read_only=True)

    class Meta:
        model = CourseProgress
        fields = [
            "id",
            "student",
            "course",
            "course_title",
            "course_code",
            "modules_progress",
            "completed_lectures_count",
            "total_lectures_count",
            "progress_percentage",
            "completed",
            "completed_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class CourseStudentProgressSerializer(serializers.ModelSerializer):
    """One row of the per-course progress report (no lecture tree)."""

    student = StudentSummarySerializer(read_only=True)

    class Meta:
        model = CourseProgress
        fields = [
            "id",
            "student",
            "completed_lectures_count",
            "total_lectures_count",
            "progress_percentage",
            "completed",
            "completed_at",
            "updated_at",
        ]
        read_only_fields = fields
