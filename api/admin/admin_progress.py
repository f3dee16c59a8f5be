"""Admin interface for course progress records."""

from django.contrib import admin

from api.models.models_progress import CourseProgress


@admin.register(CourseProgress)
class CourseProgressAdmin(admin.ModelAdmin):
    list_display = [
        "student",
        "course",
        "completed_lectures_count",
        "total_lectures_count",
        "progress_percentage",
        "completed",
        "updated_at",
    ]
    list_filter = ["completed", "course"]
    search_fields = ["student__email", "course__course_code", "course__title"]
    readonly_fields = [
        "id",
        "completed_lectures_count",
        "total_lectures_count",
        "progress_percentage",
        "completed",
        "completed_at",
        "created_at",
        "updated_at",
    ]
    autocomplete_fields = ["student", "course"]
    actions = ["recompute_statistics"]

    def get_queryset(self, request):
        return super().get_queryset(request).select_related("student", "course")

    @admin.action(description="Recompute statistics against the current course outline")
    def recompute_statistics(self, request, queryset):
        for progress in queryset:
            progress.refresh_stats()
        self.message_user(request, f"{queryset.count()} progress record(s) recomputed.")
