"""Admin interfaces for assignments, their question bank and submissions."""

from django.contrib import admin

from api.models.models_assignment import Assignment, AssignmentQuestion
from api.models.models_submission import Submission


class AssignmentQuestionInline(admin.StackedInline):
    model = AssignmentQuestion
    extra = 0
    fields = [
        "order", "type", "question_text", "options", "correct_option",
        "expected_answer", "points", "difficulty", "tags", "explanation",
    ]
    ordering = ["order"]


@admin.register(Assignment)
class AssignmentAdmin(admin.ModelAdmin):
    list_display = ["title", "course", "type", "total_points", "due_date", "is_published", "get_submission_count"]
    list_filter = ["type", "is_published", "submission_type", "course"]
    search_fields = ["title", "description", "course__course_code"]
    readonly_fields = ["id", "created_at", "updated_at"]
    autocomplete_fields = ["course", "instructor"]
    inlines = [AssignmentQuestionInline]

    fieldsets = (
        ("Assignment Information", {
            "fields": ("id", "course", "instructor", "title", "type", "description", "instructions")
        }),
        ("Schedule", {
            "fields": ("publish_date", "due_date", "is_published", "allow_late_submission", "late_penalty")
        }),
        ("Submission Format", {
            "fields": ("submission_type", "allowed_file_types", "max_file_size")
        }),
        ("Grading", {
            "fields": ("total_points", "rubric", "quiz_settings")
        }),
        ("Timestamps", {
            "fields": ("created_at", "updated_at"),
            "classes": ("collapse",),
        }),
    )

    @admin.display(description="Submissions")
    def get_submission_count(self, obj):
        return obj.submissions.count()


@admin.register(Submission)
class SubmissionAdmin(admin.ModelAdmin):
    list_display = [
        "student",
        "assignment",
        "status",
        "submitted_at",
        "is_late",
        "grade_points",
        "letter_grade",
        "resubmission_count",
    ]
    list_filter = ["status", "is_late", "letter_grade", "assignment__course"]
    search_fields = ["student__email", "assignment__title"]
    readonly_fields = [
        "id",
        "letter_grade",
        "is_late",
        "graded_at",
        "graded_by",
        "history",
        "resubmission_count",
        "created_at",
        "updated_at",
    ]
    autocomplete_fields = ["student", "assignment"]

    fieldsets = (
        ("Submission", {
            "fields": ("id", "assignment", "student", "status", "submitted_at", "is_late", "resubmission_count")
        }),
        ("Content", {
            "fields": ("submission_text", "quiz_answers", "attachments", "history")
        }),
        ("Grade", {
            "fields": ("grade_points", "grade_percentage", "letter_grade", "graded_at", "graded_by", "feedback", "rubric")
        }),
        ("Extras", {
            "fields": ("plagiarism_report", "achievements"),
            "classes": ("collapse",),
        }),
    )

    def get_queryset(self, request):
        return super().get_queryset(request).select_related("student", "assignment", "graded_by")
