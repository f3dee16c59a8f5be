import uuid
from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone

from api.utils.grading_utils import get_letter_grade
from api.utils.helper_models import TimeStampedModel


def to_decimal(value):
    """Two-place Decimal for storing computed points and percentages."""
    if value is None:
        return None
    return Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


class Submission(TimeStampedModel):
    """A student's single submission for an assignment (resubmissions update it)."""

    STATUS_CHOICES = [
        ("submitted", "Submitted"),
        ("graded", "Graded"),
        ("returned", "Returned"),
        ("resubmitted", "Resubmitted"),
    ]

    LETTER_GRADE_CHOICES = [
        (grade, grade)
        for grade in ("A+", "A", "A-", "B+", "B", "B-", "C+", "C", "C-", "D+", "D", "F", "I")
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    assignment = models.ForeignKey(
        "api.Assignment",
        related_name="submissions",
        on_delete=models.CASCADE,
    )
    student = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="submissions",
        limit_choices_to={"role": "student"},
    )

    # Submission content
    submission_text = models.TextField(max_length=5000, blank=True)
    quiz_answers = models.JSONField(
        default=list,
        blank=True,
        help_text="Per-question snapshots with the student's answer and grading result",
    )
    attachments = models.JSONField(
        default=list,
        blank=True,
        help_text="List of {original_name, filename, path, size, uploaded_at}",
    )

    submitted_at = models.DateTimeField(default=timezone.now)
    is_late = models.BooleanField(
        default=False,
        help_text="Whether this submission was after the deadline",
    )
    status = models.CharField(max_length=15, choices=STATUS_CHOICES, default="submitted")

    resubmission_count = models.PositiveIntegerField(default=0)
    history = models.JSONField(
        default=list,
        blank=True,
        help_text="Append-only list of {submission_text, attachments, updated_at, updated_by}",
    )

    # Grading
    rubric = models.JSONField(
        default=list,
        blank=True,
        help_text="Per-criterion {criterion, max_points, earned_points, comment}",
    )
    grade_points = models.DecimalField(max_digits=8, decimal_places=2, null=True, blank=True)
    grade_percentage = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)
    letter_grade = models.CharField(
        max_length=2,
        choices=LETTER_GRADE_CHOICES,
        blank=True,
        editable=False,
        help_text="Derived from grade_percentage on save",
    )
    graded_at = models.DateTimeField(null=True, blank=True)
    graded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="graded_submissions",
    )
    feedback = models.TextField(max_length=2000, blank=True)

    plagiarism_report = models.JSONField(
        default=dict,
        blank=True,
        help_text="{similarity_score, flagged_sources, report_url, scanned_at}",
    )
    achievements = models.JSONField(
        default=list,
        blank=True,
        help_text="List of {badge_id, level_achieved, earned_at}",
    )

    class Meta(TimeStampedModel.Meta):
        verbose_name = "Submission"
        verbose_name_plural = "Submissions"
        unique_together = ["assignment", "student"]
        ordering = ["-submitted_at"]
        indexes = [
            models.Index(fields=["assignment", "status"]),
            models.Index(fields=["student"]),
        ]

    def __str__(self):
        return f"{self.student.get_full_name} - {self.assignment.title}"

    def set_grade(self, points, percentage, graded_by=None):
        """Record a grade; the letter grade follows from the stored percentage on save."""
        self.grade_points = to_decimal(points)
        # Same precision as the column; re-saving derives the same letter
        self.grade_percentage = to_decimal(percentage)
        self.graded_at = timezone.now()
        self.graded_by = graded_by

    def record_history(self, updated_by=None):
        """Snapshot the current text and attachments before they change."""
        self.history = list(self.history or []) + [
            {
                "submission_text": self.submission_text,
                "attachments": list(self.attachments or []),
                "updated_at": timezone.now().isoformat(),
                "updated_by": str(updated_by.pk) if updated_by else None,
            }
        ]
        self._history_recorded = True

    def save(self, *args, **kwargs):
        if self.grade_percentage is not None:
            self.letter_grade = get_letter_grade(self.grade_percentage)
        else:
            self.letter_grade = ""

        previous = None
        if not self._state.adding:
            previous = (
                type(self)
                .objects.filter(pk=self.pk)
                .values("submission_text", "attachments", "submitted_at")
                .first()
            )

        if previous is None or previous["submitted_at"] != self.submitted_at:
            self.is_late = self.submitted_at > self.assignment.due_date

        text_changed = previous is not None and previous["submission_text"] != self.submission_text
        if text_changed and not getattr(self, "_history_recorded", False):
            self.history = list(self.history or []) + [
                {
                    "submission_text": previous["submission_text"],
                    "attachments": previous["attachments"],
                    "updated_at": timezone.now().isoformat(),
                    "updated_by": None,
                }
            ]
        self._history_recorded = False

        super().save(*args, **kwargs)
