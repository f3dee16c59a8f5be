import uuid

from django.conf import settings
from django.db import models

from api.utils.helper_models import TimeStampedModel


class Attendance(TimeStampedModel):
    """One attendance sheet per course per class date."""

    CLASS_TYPE_CHOICES = [
        ("lecture", "Lecture"),
        ("lab", "Lab"),
        ("tutorial", "Tutorial"),
        ("exam", "Exam"),
        ("other", "Other"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    course = models.ForeignKey(
        "api.Course",
        related_name="attendance_sheets",
        on_delete=models.CASCADE,
    )
    date = models.DateField()
    instructor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="attendance_sheets",
        limit_choices_to={"role": "instructor"},
    )
    class_type = models.CharField(max_length=10, choices=CLASS_TYPE_CHOICES, default="lecture")
    topic = models.CharField(max_length=200, blank=True)
    duration = models.PositiveIntegerField(default=60, help_text="Class duration in minutes")

    class Meta(TimeStampedModel.Meta):
        verbose_name = "Attendance Sheet"
        verbose_name_plural = "Attendance Sheets"
        unique_together = ["course", "date"]
        ordering = ["-date"]

    def __str__(self):
        return f"{self.course.course_code} - {self.date}"


class AttendanceRecord(models.Model):
    """A single student's mark on an attendance sheet."""

    STATUS_CHOICES = [
        ("present", "Present"),
        ("absent", "Absent"),
        ("late", "Late"),
        ("excused", "Excused"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    attendance = models.ForeignKey(
        Attendance,
        related_name="students",
        on_delete=models.CASCADE,
    )
    student = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="attendance_records",
        limit_choices_to={"role": "student"},
    )
    status = models.CharField(max_length=10, choices=STATUS_CHOICES)
    remarks = models.CharField(max_length=255, blank=True)

    class Meta:
        verbose_name = "Attendance Record"
        verbose_name_plural = "Attendance Records"
        unique_together = ["attendance", "student"]

    def __str__(self):
        return f"{self.student.get_full_name} - {self.status}"
