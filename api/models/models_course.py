import uuid

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django_ckeditor_5.fields import CKEditor5Field

from api.utils.helper_models import TimeStampedModel


class Course(TimeStampedModel):
    """A course offered by an instructor, made of ordered modules."""

    CATEGORY_CHOICES = [
        ("programming", "Programming"),
        ("design", "Design"),
        ("business", "Business"),
        ("marketing", "Marketing"),
        ("data-science", "Data Science"),
        ("language", "Language"),
        ("other", "Other"),
    ]

    LEVEL_CHOICES = [
        ("beginner", "Beginner"),
        ("intermediate", "Intermediate"),
        ("advanced", "Advanced"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    title = models.CharField(max_length=100, db_index=True, help_text="Course title (max 100 chars)")
    description = models.TextField(max_length=1000, help_text="Course description (max 1000 chars)")
    course_code = models.CharField(
        max_length=20,
        unique=True,
        db_index=True,
        help_text="Unique course code. Stored upper-case, e.g. 'CS101'.",
    )
    instructor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="courses_taught",
        limit_choices_to={"role": "instructor"},
    )
    credits = models.PositiveSmallIntegerField(
        default=3,
        validators=[MinValueValidator(1), MaxValueValidator(10)],
        help_text="Credit hours between 1 and 10",
    )
    max_students = models.PositiveIntegerField(default=50, help_text="Maximum number of enrolled students")
    current_enrollment = models.PositiveIntegerField(default=0, help_text="Number of currently enrolled students")
    fees = models.DecimalField(max_digits=10, decimal_places=2, default=0)

    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES, default="other")
    level = models.CharField(max_length=20, choices=LEVEL_CHOICES, default="beginner")

    prerequisites = models.JSONField(default=list, blank=True, help_text="List of prerequisite course codes")
    materials = models.JSONField(
        default=list,
        blank=True,
        help_text="Reference materials as a list of {title, type, url}",
    )
    thumbnail_image = models.ImageField(
        upload_to="courses/thumbnails/",
        null=True,
        blank=True,
        help_text="Course thumbnail image",
    )

    is_active = models.BooleanField(default=True, help_text="Whether this course is open for enrollment")
    is_approved = models.BooleanField(default=True, help_text="Whether an admin has approved this course")

    class Meta(TimeStampedModel.Meta):
        verbose_name = "Course"
        verbose_name_plural = "Courses"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["instructor", "is_active"]),
            models.Index(fields=["category", "level"]),
        ]

    def save(self, *args, **kwargs):
        if self.course_code:
            self.course_code = self.course_code.strip().upper()
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.course_code} - {self.title}"

    @property
    def is_full(self):
        return self.current_enrollment >= self.max_students


class CourseModule(models.Model):
    """Individual modules/chapters within a course."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    course = models.ForeignKey(
        Course,
        related_name="modules",
        on_delete=models.CASCADE,
    )

    title = models.CharField(max_length=100)
    description = CKEditor5Field(blank=True, null=True, help_text="Rich text description of the module")

    order = models.PositiveIntegerField(default=0)

    class Meta:
        verbose_name = "Course Module/Chapter"
        verbose_name_plural = "Course Modules/Chapters"
        ordering = ["order", "id"]
        indexes = [
            models.Index(fields=["course", "order"]),
        ]

    def __str__(self):
        return f"{self.order}. {self.title}"


class Lecture(models.Model):
    """A single lecture (recorded video or live session) inside a module."""

    TYPE_CHOICES = [
        ("video", "Video"),
        ("live", "Live Session"),
    ]

    VIDEO_SOURCE_CHOICES = [
        ("youtube", "YouTube"),
        ("vimeo", "Vimeo"),
        ("upload", "Uploaded"),
        ("other", "Other"),
    ]

    LIVE_TYPE_CHOICES = [
        ("zoom", "Zoom"),
        ("meet", "Google Meet"),
        ("teams", "Microsoft Teams"),
        ("other", "Other"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    module = models.ForeignKey(
        CourseModule,
        related_name="lectures",
        on_delete=models.CASCADE,
    )
    title = models.CharField(max_length=200)
    duration = models.PositiveIntegerField(default=0, help_text="Duration in minutes")
    type = models.CharField(max_length=10, choices=TYPE_CHOICES, default="video")

    video_source = models.CharField(max_length=10, choices=VIDEO_SOURCE_CHOICES, blank=True)
    video_url = models.URLField(blank=True)

    live_type = models.CharField(max_length=10, choices=LIVE_TYPE_CHOICES, blank=True)
    live_link = models.URLField(blank=True)

    is_free_preview = models.BooleanField(default=False, help_text="Visible to students who are not enrolled")
    order = models.PositiveIntegerField(default=0)

    class Meta:
        verbose_name = "Lecture"
        verbose_name_plural = "Lectures"
        ordering = ["order", "id"]

    def __str__(self):
        return f"{self.module.title} - {self.title}"
