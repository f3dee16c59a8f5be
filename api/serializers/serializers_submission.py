"""Serializers for assignment submissions, grading and submission extras."""

import os

from django.utils import timezone

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema_field
from rest_framework import serializers

from api.models.models_submission import Submission
from api.utils.grading_utils import apply_late_penalty

ACHIEVEMENT_LEVELS = ["Bronze", "Silver", "Gold", "Diamond", "Cosmic"]


class StudentSummarySerializer(serializers.Serializer):
    id = serializers.UUIDField(read_only=True)
    full_name = serializers.CharField(source="get_full_name", read_only=True)
    email = serializers.EmailField(read_only=True)


class AttachmentSerializer(serializers.Serializer):
    """Metadata of a file already stored elsewhere."""

    original_name = serializers.CharField(max_length=255)
    filename = serializers.CharField(max_length=255)
    path = serializers.CharField(max_length=500)
    size = serializers.IntegerField(min_value=0, required=False)
    mimetype = serializers.CharField(max_length=100, required=False, allow_blank=True)

    def validate(self, data):
        assignment = self.context.get("assignment")
        if assignment is None:
            return data

        extension = os.path.splitext(data["original_name"])[1].lower().lstrip(".")
        allowed = [ext.lower().lstrip(".") for ext in assignment.allowed_file_types or []]
        if allowed and extension not in allowed:
            raise serializers.ValidationError(
                {"original_name": f"File type '.{extension}' is not allowed. Allowed: {', '.join(allowed)}."}
            )

        size = data.get("size")
        if size is not None and size > assignment.max_file_size:
            raise serializers.ValidationError({"size": "File exceeds the maximum allowed size."})

        data["uploaded_at"] = timezone.now().isoformat()
        return data


class QuizAnswerSerializer(serializers.Serializer):
    """One answer in a quiz/exam submission; accepts ``questionId`` or ``question_id``."""

    questionId = serializers.CharField(required=False)
    question_id = serializers.CharField(required=False)
    answer = serializers.JSONField(required=False, allow_null=True)

    def validate(self, data):
        question_id = data.get("question_id") or data.get("questionId")
        if not question_id:
            raise serializers.ValidationError("Each answer needs a questionId.")
        return {"question_id": question_id, "answer": data.get("answer")}


class SubmissionCreateSerializer(serializers.Serializer):
    """Payload for a first submission.

    Quiz and exam assignments require ``answers``; other types require
    ``submission_text`` or at least one attachment.
    """

    answers = QuizAnswerSerializer(many=True, required=False)
    submission_text = serializers.CharField(required=False, allow_blank=True, max_length=5000)
    attachments = AttachmentSerializer(many=True, required=False)

    def validate(self, data):
        assignment = self.context["assignment"]

        if assignment.type in assignment.QUESTION_BASED_TYPES:
            if "answers" not in data:
                raise serializers.ValidationError({"answers": "Answers array is required for quiz/exam submissions."})
            return data

        text = (data.get("submission_text") or "").strip()
        if not text and not data.get("attachments"):
            raise serializers.ValidationError(
                "Either submission text or attachments are required for this assignment type."
            )
        if assignment.submission_type == "file" and not data.get("attachments"):
            raise serializers.ValidationError({"attachments": "This assignment requires a file upload."})
        if assignment.submission_type == "text" and not text:
            raise serializers.ValidationError({"submission_text": "This assignment requires a text entry."})
        return data


class SubmissionSerializer(serializers.ModelSerializer):
    """Read serializer with the nested grade block."""

    student = StudentSummarySerializer(read_only=True)
    assignment_title = serializers.CharField(source="assignment.title", read_only=True)
    total_points = serializers.IntegerField(source="assignment.total_points", read_only=True)
    grade = serializers.SerializerMethodField()
    penalized_points = serializers.SerializerMethodField()

    class Meta:
        model = Submission
        fields = [
            "id",
            "assignment",
            "assignment_title",
            "total_points",
            "student",
            "submission_text",
            "quiz_answers",
            "attachments",
            "submitted_at",
            "is_late",
            "status",
            "resubmission_count",
            "grade",
            "penalized_points",
            "rubric",
            "feedback",
            "plagiarism_report",
            "achievements",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    @extend_schema_field(OpenApiTypes.OBJECT)
    def get_grade(self, obj):
        if obj.grade_percentage is None:
            return None
        return {
            "points": float(obj.grade_points) if obj.grade_points is not None else None,
            "percentage": round(float(obj.grade_percentage), 2),
            "letter_grade": obj.letter_grade,
            "graded_at": obj.graded_at,
            "graded_by": str(obj.graded_by_id) if obj.graded_by_id else None,
        }

    @extend_schema_field(OpenApiTypes.FLOAT)
    def get_penalized_points(self, obj):
        """Grade after the late penalty; only set for late, graded work with a penalty."""
        if obj.grade_points is None or not obj.is_late or not obj.assignment.late_penalty:
            return None
        return float(apply_late_penalty(obj.grade_points, obj.assignment.late_penalty))


class RubricScoreSerializer(serializers.Serializer):
    criterion = serializers.CharField(max_length=200)
    max_points = serializers.FloatField(min_value=0)
    earned_points = serializers.FloatField(min_value=0)
    comment = serializers.CharField(required=False, allow_blank=True, max_length=500)

    def validate(self, data):
        if data["earned_points"] > data["max_points"]:
            raise serializers.ValidationError({"earned_points": "Earned points cannot exceed max points."})
        return data


class GradeSubmissionSerializer(serializers.Serializer):
    points = serializers.FloatField(min_value=0)
    feedback = serializers.CharField(required=False, allow_blank=True, max_length=2000)
    rubric = RubricScoreSerializer(many=True, required=False)

    def validate_points(self, value):
        total_points = self.context["assignment"].total_points
        if value > total_points:
            raise serializers.ValidationError(f"Points cannot exceed the assignment total of {total_points}.")
        return value


class ResubmitSerializer(serializers.Serializer):
    submission_text = serializers.CharField(required=False, allow_blank=True, max_length=5000)
    attachments = AttachmentSerializer(many=True, required=False)


class AddAttachmentsSerializer(serializers.Serializer):
    attachments = AttachmentSerializer(many=True, allow_empty=False)


class PlagiarismReportSerializer(serializers.Serializer):
    similarity_score = serializers.FloatField(required=False, min_value=0, max_value=100)
    flagged_sources = serializers.ListField(child=serializers.JSONField(), required=False)
    report_url = serializers.URLField(required=False)


class AchievementSerializer(serializers.Serializer):
    badge_id = serializers.CharField(max_length=100)
    level_achieved = serializers.ChoiceField(choices=ACHIEVEMENT_LEVELS)
