import math
import uuid

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone
from django_ckeditor_5.fields import CKEditor5Field

from api.utils.helper_models import TimeStampedModel


def default_quiz_settings():
    return {
        "randomizeQuestions": False,
        "timeLimit": None,
        "maxAttempts": 1,
        "autoGrade": True,
    }


class Assignment(TimeStampedModel):
    """Homework, quiz, exam, project or presentation set for a course."""

    TYPE_CHOICES = [
        ("homework", "Homework"),
        ("quiz", "Quiz"),
        ("exam", "Exam"),
        ("project", "Project"),
        ("presentation", "Presentation"),
    ]

    SUBMISSION_TYPE_CHOICES = [
        ("file", "File Upload"),
        ("text", "Text Entry"),
        ("both", "File and Text"),
    ]

    # Types whose submissions carry an answers list instead of text/files
    QUESTION_BASED_TYPES = ("quiz", "exam")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=100)
    description = models.TextField(max_length=2000, help_text="What the assignment is about (max 2000 chars)")
    instructions = CKEditor5Field(
        blank=True,
        null=True,
        help_text="Detailed assignment instructions and requirements",
    )
    course = models.ForeignKey(
        "api.Course",
        related_name="assignments",
        on_delete=models.CASCADE,
    )
    instructor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="created_assignments",
        limit_choices_to={"role__in": ["instructor", "admin"]},
    )
    type = models.CharField(max_length=20, choices=TYPE_CHOICES)

    # Grading
    total_points = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
        help_text="Maximum points for this assignment",
    )

    # Deadlines and publishing
    due_date = models.DateTimeField(help_text="Submission deadline")
    is_published = models.BooleanField(default=False)
    publish_date = models.DateTimeField(default=timezone.now)
    allow_late_submission = models.BooleanField(
        default=True,
        help_text="Allow submissions after due date",
    )
    late_penalty = models.PositiveIntegerField(
        default=0,
        validators=[MaxValueValidator(100)],
        help_text="Percentage penalty for late submission",
    )

    # Submission format
    submission_type = models.CharField(max_length=10, choices=SUBMISSION_TYPE_CHOICES, default="text")
    allowed_file_types = models.JSONField(default=list, blank=True, help_text="File extensions, e.g. ['pdf', 'docx']")
    max_file_size = models.PositiveIntegerField(default=10485760, help_text="Maximum attachment size in bytes")

    rubric = models.JSONField(
        default=list,
        blank=True,
        help_text="List of {criterion, value, description}",
    )
    quiz_settings = models.JSONField(default=default_quiz_settings, blank=True)

    class Meta(TimeStampedModel.Meta):
        verbose_name = "Assignment"
        verbose_name_plural = "Assignments"
        ordering = ["due_date"]
        indexes = [
            models.Index(fields=["course", "is_published"]),
            models.Index(fields=["instructor"]),
        ]

    def __str__(self):
        return f"{self.course.course_code} - {self.title}"

    @property
    def is_overdue(self):
        return timezone.now() > self.due_date

    @property
    def time_until_due(self):
        diff = (self.due_date - timezone.now()).total_seconds()
        days = math.ceil(diff / 86400)
        if days < 0:
            return f"{abs(days)} days overdue"
        if days == 0:
            return "Due today"
        return f"{days} days remaining"

    @property
    def auto_grade_enabled(self):
        return bool((self.quiz_settings or {}).get("autoGrade"))


class AssignmentQuestion(models.Model):
    """A gradable item in an assignment's question bank."""

    TYPE_CHOICES = [
        ("multiple-choice", "Multiple Choice"),
        ("written", "Written"),
    ]

    DIFFICULTY_CHOICES = [
        ("easy", "Easy"),
        ("medium", "Medium"),
        ("hard", "Hard"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    assignment = models.ForeignKey(
        Assignment,
        related_name="questions",
        on_delete=models.CASCADE,
    )
    question_text = models.TextField()
    type = models.CharField(max_length=20, choices=TYPE_CHOICES)

    # Multiple-choice only
    options = models.JSONField(default=list, blank=True)
    correct_option = models.PositiveIntegerField(null=True, blank=True, help_text="Index into options")

    # Written only
    expected_answer = models.TextField(blank=True)

    points = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    explanation = models.TextField(blank=True)
    difficulty = models.CharField(max_length=10, choices=DIFFICULTY_CHOICES, default="easy")
    tags = models.JSONField(default=list, blank=True)
    order = models.PositiveIntegerField(default=0)

    class Meta:
        verbose_name = "Assignment Question"
        verbose_name_plural = "Assignment Questions"
        ordering = ["order", "id"]

    def __str__(self):
        return f"{self.assignment.title} - Q{self.order}"

    @property
    def is_multiple_choice(self):
        return self.type == "multiple-choice"

    def snapshot(self):
        """Copy of the question metadata stored alongside a student's answer."""
        return {
            "question_id": str(self.id),
            "question_text": self.question_text,
            "question_type": self.type,
            "options": self.options if self.is_multiple_choice else None,
            "correct_answer": self.correct_option if self.is_multiple_choice else self.expected_answer,
            "points": self.points or 1,
            "explanation": self.explanation,
            "difficulty": self.difficulty,
            "tags": self.tags or [],
        }
