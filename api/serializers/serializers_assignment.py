"""Serializers for assignments, their question bank, rubric and quiz settings."""

from django.db import transaction
from django.utils import timezone

from rest_framework import serializers

from api.models.models_assignment import Assignment, AssignmentQuestion, default_quiz_settings
from api.serializers.serializers_course import CourseInstructorSerializer
from api.serializers.serializers_helpers import HTMLFieldsMixin

ANSWER_FIELDS = ("correct_option", "expected_answer", "explanation")


class AssignmentQuestionSerializer(serializers.ModelSerializer):
    """A question bank entry.

    Pass ``hide_answers=True`` in the context to strip the answer key when
    serializing for students.
    """

    class Meta:
        model = AssignmentQuestion
        fields = [
            "id",
            "question_text",
            "type",
            "options",
            "correct_option",
            "expected_answer",
            "points",
            "explanation",
            "difficulty",
            "tags",
            "order",
        ]
        read_only_fields = ["id"]

    def _current(self, data, name, default=None):
        if name in data:
            return data[name]
        if self.instance is not None:
            return getattr(self.instance, name)
        return default

    def validate_question_text(self, value):
        if not value.strip():
            raise serializers.ValidationError("Question text is required.")
        return value.strip()

    def validate_tags(self, value):
        if not isinstance(value, list) or not all(isinstance(tag, str) for tag in value):
            raise serializers.ValidationError("Tags must be a list of strings.")
        return value

    def validate(self, data):
        question_type = self._current(data, "type")

        if question_type == "multiple-choice":
            options = self._current(data, "options", [])
            correct_option = self._current(data, "correct_option")
            if not isinstance(options, list) or len(options) < 2:
                raise serializers.ValidationError({"options": "MCQ questions must have at least 2 options."})
            if not all(isinstance(option, str) and option.strip() for option in options):
                raise serializers.ValidationError({"options": "Options must be non-empty strings."})
            if correct_option is None or correct_option >= len(options):
                raise serializers.ValidationError({"correct_option": "Invalid correct option index."})
            data["expected_answer"] = ""
        elif question_type == "written":
            if not (self._current(data, "expected_answer") or "").strip():
                raise serializers.ValidationError(
                    {"expected_answer": "Written questions must have an expected answer."}
                )
            data["options"] = []
            data["correct_option"] = None

        return data

    def to_representation(self, instance):
        rep = super().to_representation(instance)
        if self.context.get("hide_answers"):
            for field in ANSWER_FIELDS:
                rep.pop(field, None)
        return rep


class RubricCriterionSerializer(serializers.Serializer):
    criterion = serializers.CharField(max_length=200)
    value = serializers.FloatField(min_value=0)
    description = serializers.CharField(required=False, allow_blank=True, max_length=500)

    def validate_criterion(self, value):
        if not value.strip():
            raise serializers.ValidationError("Criterion name is required.")
        return value.strip()


class QuizSettingsSerializer(serializers.Serializer):
    """Quiz behaviour switches; every key is optional and merged into the stored settings."""

    randomizeQuestions = serializers.BooleanField(required=False)
    timeLimit = serializers.IntegerField(required=False, allow_null=True, min_value=1, help_text="Minutes")
    maxAttempts = serializers.IntegerField(required=False, min_value=1)
    autoGrade = serializers.BooleanField(required=False)


def merge_quiz_settings(current, changes):
    merged = default_quiz_settings()
    merged.update(current or {})
    merged.update(changes or {})
    return merged


class AssignmentSerializer(HTMLFieldsMixin, serializers.ModelSerializer):
    """Assignment payload used for reads and writes.

    ``questions`` may be supplied on create (and replaces the bank on
    update). ``quiz_settings`` is merged into the existing settings.
    """

    html_fields = ["instructions"]

    instructor = CourseInstructorSerializer(read_only=True)
    course_title = serializers.CharField(source="course.title", read_only=True)
    course_code = serializers.CharField(source="course.course_code", read_only=True)
    questions = AssignmentQuestionSerializer(many=True, required=False)
    rubric = RubricCriterionSerializer(many=True, required=False)
    quiz_settings = QuizSettingsSerializer(required=False)
    is_overdue = serializers.BooleanField(read_only=True)
    time_until_due = serializers.CharField(read_only=True)

    class Meta:
        model = Assignment
        fields = [
            "id",
            "title",
            "description",
            "instructions",
            "course",
            "course_title",
            "course_code",
            "instructor",
            "type",
            "total_points",
            "due_date",
            "is_published",
            "publish_date",
            "allow_late_submission",
            "late_penalty",
            "submission_type",
            "allowed_file_types",
            "max_file_size",
            "rubric",
            "quiz_settings",
            "questions",
            "is_overdue",
            "time_until_due",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "instructor", "created_at", "updated_at"]

    def validate_title(self, value):
        if not value.strip():
            raise serializers.ValidationError("Assignment title is required.")
        return value.strip()

    def validate_description(self, value):
        if not value.strip():
            raise serializers.ValidationError("Assignment description is required.")
        return value.strip()

    def validate_due_date(self, value):
        if self.instance is None and value <= timezone.now():
            raise serializers.ValidationError("Due date must be in the future.")
        return value

    def validate_course(self, value):
        if self.instance is not None and value != self.instance.course:
            raise serializers.ValidationError("An assignment cannot be moved to another course.")

        request = self.context.get("request")
        user = getattr(request, "user", None)
        if user and user.role != "admin" and value.instructor_id != user.id:
            raise serializers.ValidationError("Not authorized to create assignments for this course.")
        return value

    def validate_allowed_file_types(self, value):
        if not isinstance(value, list) or not all(isinstance(ext, str) for ext in value):
            raise serializers.ValidationError("Allowed file types must be a list of extensions.")
        return [ext.lower().lstrip(".") for ext in value]

    def _replace_questions(self, assignment, questions):
        assignment.questions.all().delete()
        for index, question in enumerate(questions, start=1):
            question.setdefault("order", index)
            AssignmentQuestion.objects.create(assignment=assignment, **question)

    @transaction.atomic
    def create(self, validated_data):
        questions = validated_data.pop("questions", [])
        validated_data["quiz_settings"] = merge_quiz_settings({}, validated_data.get("quiz_settings"))
        validated_data.setdefault("instructor", validated_data["course"].instructor)

        assignment = Assignment.objects.create(**validated_data)
        self._replace_questions(assignment, questions)
        return assignment

    @transaction.atomic
    def update(self, instance, validated_data):
        questions = validated_data.pop("questions", None)
        if "quiz_settings" in validated_data:
            validated_data["quiz_settings"] = merge_quiz_settings(
                instance.quiz_settings, validated_data["quiz_settings"]
            )

        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        instance.save()

        if questions is not None:
            self._replace_questions(instance, questions)
        return instance
