"""
Course Administration Configuration

This module configures Django admin interfaces for course-related models.

Admin Structure:
- Course: Main course management with nested modules and lectures
- Enrollment: Student seats and running attendance totals
"""

import nested_admin
from django.contrib import admin

from api.models.models_course import Course, CourseModule, Lecture
from api.models.models_enrollment import Enrollment


# ========== Nested Inlines: Course -> Module -> Lecture ==========

class LectureInline(nested_admin.NestedStackedInline):
    model = Lecture
    extra = 0
    fields = [
        "order", "title", "type", "duration",
        "video_source", "video_url",
        "live_type", "live_link",
        "is_free_preview",
    ]
    ordering = ["order"]
    verbose_name = "Lecture"
    verbose_name_plural = "Lectures"


class CourseModuleInline(nested_admin.NestedStackedInline):
    model = CourseModule
    extra = 0
    fields = ["order", "title", "description"]
    inlines = [LectureInline]
    ordering = ["order"]
    verbose_name = "Module"
    verbose_name_plural = "Modules (with lectures)"


# ========== Main Model Admins ==========

@admin.register(Course)
class CourseAdmin(nested_admin.NestedModelAdmin):
    list_display = [
        "course_code",
        "title",
        "instructor",
        "category",
        "level",
        "current_enrollment",
        "max_students",
        "is_active",
        "is_approved",
    ]
    list_filter = ["category", "level", "is_active", "is_approved"]
    search_fields = ["course_code", "title", "instructor__email"]
    readonly_fields = ["id", "current_enrollment", "created_at", "updated_at"]
    autocomplete_fields = ["instructor"]
    list_editable = ["is_active", "is_approved"]
    inlines = [CourseModuleInline]

    fieldsets = (
        ("Course Information", {
            "fields": ("id", "course_code", "title", "description", "instructor", "thumbnail_image")
        }),
        ("Catalog", {
            "fields": ("category", "level", "credits", "fees", "prerequisites", "materials")
        }),
        ("Capacity & Status", {
            "fields": ("max_students", "current_enrollment", "is_active", "is_approved")
        }),
        ("Timestamps", {
            "fields": ("created_at", "updated_at"),
            "classes": ("collapse",),
        }),
    )

    def get_queryset(self, request):
        return super().get_queryset(request).select_related("instructor")


@admin.register(Enrollment)
class EnrollmentAdmin(admin.ModelAdmin):
    list_display = [
        "student",
        "course",
        "status",
        "attended_classes",
        "total_classes",
        "attendance_percentage",
        "created_at",
    ]
    list_filter = ["status", "course"]
    search_fields = ["student__email", "course__course_code", "course__title"]
    readonly_fields = ["total_classes", "attended_classes", "attendance_percentage", "created_at", "updated_at"]
    autocomplete_fields = ["student", "course"]

    def get_queryset(self, request):
        return super().get_queryset(request).select_related("student", "course")
