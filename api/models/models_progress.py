"""Course Progress Tracking Models

One ``CourseProgress`` row per (student, course) holds the lecture
completion tree and the statistics derived from it. The arithmetic lives in
``api.utils.progress_utils``; the model only loads the course outline and
persists the result.
"""

import uuid

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from api.utils.helper_models import TimeStampedModel
from api.utils.progress_utils import (
    compute_progress_stats,
    course_outline,
    seed_modules_progress,
    toggle_lecture_progress,
)


class CourseProgress(TimeStampedModel):
    """Tracks a student's lecture completion through a course."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    student = models.ForeignKey(
        "api.CustomUser",
        related_name="course_progress",
        on_delete=models.CASCADE,
        limit_choices_to={"role": "student"},
        help_text="Student whose progress is tracked",
    )
    course = models.ForeignKey(
        "api.Course",
        related_name="student_progress",
        on_delete=models.CASCADE,
        help_text="Course being tracked",
    )
    modules_progress = models.JSONField(
        default=dict,
        blank=True,
        help_text="Module id -> {completed, completed_at, lectures_progress}",
    )
    completed_lectures_count = models.PositiveIntegerField(default=0)
    total_lectures_count = models.PositiveIntegerField(default=0)
    progress_percentage = models.PositiveSmallIntegerField(
        default=0,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
        help_text="Overall completion percentage (0-100)",
    )
    completed = models.BooleanField(default=False, help_text="Whether every lecture is complete")
    completed_at = models.DateTimeField(null=True, blank=True, help_text="When the course was completed")

    class Meta:
        verbose_name = "Course Progress"
        verbose_name_plural = "Course Progress Records"
        ordering = ["-updated_at"]
        unique_together = ["student", "course"]
        indexes = [
            models.Index(fields=["course", "progress_percentage"]),
            models.Index(fields=["student", "completed"]),
        ]

    def __str__(self):
        return f"{self.student.email} - {self.course.title} ({self.progress_percentage}%)"

    @classmethod
    def initialize_for(cls, student, course):
        """Return ``(progress, created)``; a new record mirrors the whole course."""
        existing = cls.objects.filter(student=student, course=course).first()
        if existing:
            return existing, False

        outline = course_outline(course)
        progress = cls.objects.create(
            student=student,
            course=course,
            modules_progress=seed_modules_progress(outline),
            completed_lectures_count=0,
            total_lectures_count=sum(len(lectures) for lectures in outline.values()),
            progress_percentage=0,
            completed=False,
            completed_at=None,
        )
        return progress, True

    def apply_stats(self, stats):
        # completed_at is stamped only when the record turns complete
        already_completed = self.completed and self.completed_at is not None
        self.completed_lectures_count = stats["completed_lectures_count"]
        self.total_lectures_count = stats["total_lectures_count"]
        self.progress_percentage = stats["progress_percentage"]
        if not (already_completed and stats["completed"]):
            self.completed_at = stats["completed_at"]
        self.completed = stats["completed"]

    def refresh_stats(self, outline=None, save=True):
        """Recompute the cached fields against the current course outline."""
        outline = outline if outline is not None else course_outline(self.course)
        self.apply_stats(compute_progress_stats(outline, self.modules_progress))
        if save:
            self.save()
        return self

    def toggle_lecture(self, module_id, lecture_id, outline=None):
        """Flip a lecture, recompute module and course statistics, and save."""
        outline = outline if outline is not None else course_outline(self.course)
        modules_progress = dict(self.modules_progress or {})
        completed = toggle_lecture_progress(outline, modules_progress, module_id, lecture_id)
        self.modules_progress = modules_progress
        self.refresh_stats(outline=outline)
        return completed
