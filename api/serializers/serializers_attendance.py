"""Serializers for attendance sheets and their per-student marks."""

from django.db import transaction

from rest_framework import serializers

from api.models.models_attendance import Attendance, AttendanceRecord
from api.models.models_auth import CustomUser
from api.models.models_course import Course
from api.models.models_enrollment import Enrollment
from api.serializers.serializers_submission import StudentSummarySerializer


class AttendanceMarkSerializer(serializers.Serializer):
    student = serializers.PrimaryKeyRelatedField(queryset=CustomUser.objects.filter(role="student"))
    status = serializers.ChoiceField(choices=AttendanceRecord.STATUS_CHOICES)
    remarks = serializers.CharField(required=False, allow_blank=True, max_length=255)


class AttendanceCreateSerializer(serializers.Serializer):
    """Marks a whole class at once; the request user becomes the sheet's instructor."""

    course = serializers.PrimaryKeyRelatedField(queryset=Course.objects.all())
    date = serializers.DateField()
    class_type = serializers.ChoiceField(choices=Attendance.CLASS_TYPE_CHOICES, default="lecture")
    topic = serializers.CharField(required=False, allow_blank=True, max_length=200)
    duration = serializers.IntegerField(required=False, min_value=1, default=60)
    students = AttendanceMarkSerializer(many=True, allow_empty=False)

    def validate_course(self, value):
        user = self.context["request"].user
        if value.instructor_id != user.id:
            raise serializers.ValidationError("You can only mark attendance for your own courses.")
        return value

    def validate(self, data):
        course = data["course"]
        if Attendance.objects.filter(course=course, date=data["date"]).exists():
            raise serializers.ValidationError({"date": "Attendance for this date has already been recorded."})

        student_ids = [mark["student"].id for mark in data["students"]]
        if len(student_ids) != len(set(student_ids)):
            raise serializers.ValidationError({"students": "Each student may appear only once."})

        enrolled = set(
            Enrollment.objects.filter(course=course, status="enrolled", student_id__in=student_ids).values_list(
                "student_id", flat=True
            )
        )
        missing = [str(student_id) for student_id in student_ids if student_id not in enrolled]
        if missing:
            raise serializers.ValidationError(
                {"students": f"Students not enrolled in this course: {', '.join(missing)}"}
            )
        return data

    @transaction.atomic
    def create(self, validated_data):
        marks = validated_data.pop("students")
        sheet = Attendance.objects.create(instructor=self.context["request"].user, **validated_data)

        for mark in marks:
            AttendanceRecord.objects.create(
                attendance=sheet,
                student=mark["student"],
                status=mark["status"],
                remarks=mark.get("remarks", ""),
            )
            enrollment = Enrollment.objects.select_for_update().get(
                course=sheet.course, student=mark["student"]
            )
            enrollment.record_attendance(mark["status"])

        return sheet


class AttendanceRecordSerializer(serializers.ModelSerializer):
    student = StudentSummarySerializer(read_only=True)

    class Meta:
        model = AttendanceRecord
        fields = ["id", "student", "status", "remarks"]


class AttendanceSerializer(serializers.ModelSerializer):
    course_code = serializers.CharField(source="course.course_code", read_only=True)
    instructor = StudentSummarySerializer(read_only=True)
    students = AttendanceRecordSerializer(many=True, read_only=True)

    class Meta:
        model = Attendance
        fields = [
            "id",
            "course",
            "course_code",
            "date",
            "instructor",
            "class_type",
            "topic",
            "duration",
            "students",
            "created_at",
        ]
        read_only_fields = fields


class StudentAttendanceSerializer(serializers.ModelSerializer):
    """One sheet seen from a single student's side."""

    attendance_id = serializers.UUIDField(source="attendance.id", read_only=True)
    course = serializers.UUIDField(source="attendance.course_id", read_only=True)
    course_title = serializers.CharField(source="attendance.course.title", read_only=True)
    date = serializers.DateField(source="attendance.date", read_only=True)
    class_type = serializers.CharField(source="attendance.class_type", read_only=True)
    topic = serializers.CharField(source="attendance.topic", read_only=True)

    class Meta:
        model = AttendanceRecord
        fields = ["attendance_id", "course", "course_title", "date", "class_type", "topic", "status", "remarks"]
        read_only_fields = fields
