"""Admin interfaces for attendance sheets."""

from django.contrib import admin

from api.models.models_attendance import Attendance, AttendanceRecord


class AttendanceRecordInline(admin.TabularInline):
    model = AttendanceRecord
    extra = 0
    fields = ["student", "status", "remarks"]
    autocomplete_fields = ["student"]


@admin.register(Attendance)
class AttendanceAdmin(admin.ModelAdmin):
    list_display = ["course", "date", "class_type", "topic", "instructor", "get_present_count"]
    list_filter = ["class_type", "course"]
    search_fields = ["course__course_code", "topic"]
    date_hierarchy = "date"
    autocomplete_fields = ["course", "instructor"]
    inlines = [AttendanceRecordInline]

    @admin.display(description="Present")
    def get_present_count(self, obj):
        return f"{obj.students.filter(status='present').count()}/{obj.students.count()}"
