import uuid
from decimal import ROUND_HALF_UP, Decimal

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from api.utils.helper_models import TimeStampedModel


class Enrollment(TimeStampedModel):
    """A student's seat in a course, with running attendance totals."""

    STATUS_CHOICES = [
        ("enrolled", "Enrolled"),
        ("dropped", "Dropped"),
        ("completed", "Completed"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    student = models.ForeignKey(
        "api.CustomUser",
        on_delete=models.CASCADE,
        related_name="enrollments",
        limit_choices_to={"role": "student"},
        help_text="Student enrolled in the course",
    )
    course = models.ForeignKey(
        "api.Course",
        on_delete=models.CASCADE,
        related_name="enrollments",
        help_text="Course the student is enrolled in",
    )
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default="enrolled", db_index=True)

    # Attendance tracking
    total_classes = models.PositiveIntegerField(default=0, help_text="Attendance sheets recorded for this student")
    attended_classes = models.PositiveIntegerField(default=0, help_text="Sheets where the student was present")
    attendance_percentage = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(0), MaxValueValidator(100)],
    )

    class Meta(TimeStampedModel.Meta):
        verbose_name = "Enrollment"
        verbose_name_plural = "Enrollments"
        unique_together = [("student", "course")]
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["student", "status"]),
            models.Index(fields=["course", "status"]),
        ]

    def __str__(self):
        return f"{self.student.email} - {self.course.title} ({self.status})"

    def record_attendance(self, status):
        """Count one more class; only ``present`` counts as attended."""
        self.total_classes += 1
        if status == "present":
            self.attended_classes += 1
        self.attendance_percentage = (
            Decimal(self.attended_classes) * Decimal(100) / Decimal(self.total_classes)
        ).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
        self.save(update_fields=["total_classes", "attended_classes", "attendance_percentage", "updated_at"])
