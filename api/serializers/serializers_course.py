from rest_framework import serializers

from api.models.models_course import Course, CourseModule, Lecture
from api.models.models_enrollment import Enrollment
from api.serializers.serializers_helpers import HTMLFieldsMixin

# ========== Instructor ==========


class CourseInstructorSerializer(serializers.Serializer):
    """Public instructor summary embedded in course payloads."""

    id = serializers.UUIDField(read_only=True)
    full_name = serializers.CharField(source="get_full_name", read_only=True)
    email = serializers.EmailField(read_only=True)


# ========== Lecture & Module Serializers ==========


class LectureSerializer(serializers.ModelSerializer):
    """Serializer for lectures inside a module."""

    class Meta:
        model = Lecture
        fields = [
            "id",
            "title",
            "duration",
            "type",
            "video_source",
            "video_url",
            "live_type",
            "live_link",
            "is_free_preview",
            "order",
        ]
        read_only_fields = ["id"]

    def validate(self, data):
        """Video lectures need a URL; live sessions need a link."""
        lecture_type = data.get("type", getattr(self.instance, "type", "video"))
        if lecture_type == "video" and not data.get("video_url", getattr(self.instance, "video_url", "")):
            raise serializers.ValidationError({"video_url": "Video lectures require a video URL."})
        if lecture_type == "live" and not data.get("live_link", getattr(self.instance, "live_link", "")):
            raise serializers.ValidationError({"live_link": "Live lectures require a meeting link."})
        return data


class CourseModuleSerializer(HTMLFieldsMixin, serializers.ModelSerializer):
    """Serializer for course modules with their ordered lectures."""

    html_fields = ["description"]
    lectures = LectureSerializer(many=True, read_only=True)

    class Meta:
        model = CourseModule
        fields = ["id", "title", "description", "order", "lectures"]
        read_only_fields = ["id", "lectures"]

    def validate(self, data):
        """Validate order uniqueness per course."""
        course = self.context.get("course")
        order = data.get("order")

        if course is not None and order is not None:
            query = CourseModule.objects.filter(course=course, order=order)
            if self.instance:
                query = query.exclude(pk=self.instance.pk)
            if query.exists():
                raise serializers.ValidationError({"order": f"A module with order {order} already exists for this course."})

        return data


# ========== Course Serializers ==========


class CourseListSerializer(serializers.ModelSerializer):
    """Compact course card for catalog listings."""

    instructor = CourseInstructorSerializer(read_only=True)
    is_full = serializers.BooleanField(read_only=True)

    class Meta:
        model = Course
        fields = [
            "id",
            "title",
            "course_code",
            "instructor",
            "credits",
            "fees",
            "category",
            "level",
            "max_students",
            "current_enrollment",
            "is_full",
            "thumbnail_image",
            "is_active",
            "is_approved",
            "created_at",
        ]


class CourseDetailedSerializer(serializers.ModelSerializer):
    """Full course payload with the module/lecture tree."""

    instructor = CourseInstructorSerializer(read_only=True)
    modules = CourseModuleSerializer(many=True, read_only=True)
    is_full = serializers.BooleanField(read_only=True)
    is_enrolled = serializers.SerializerMethodField()

    class Meta:
        model = Course
        fields = [
            "id",
            "title",
            "description",
            "course_code",
            "instructor",
            "credits",
            "max_students",
            "current_enrollment",
            "is_full",
            "fees",
            "category",
            "level",
            "prerequisites",
            "materials",
            "thumbnail_image",
            "is_active",
            "is_approved",
            "modules",
            "is_enrolled",
            "created_at",
            "updated_at",
        ]

    def get_is_enrolled(self, obj) -> bool:
        request = self.context.get("request")
        if not request or not request.user.is_authenticated:
            return False
        return Enrollment.objects.filter(student=request.user, course=obj, status="enrolled").exists()


class CourseCreateUpdateSerializer(serializers.ModelSerializer):
    """Serializer for creating/updating courses.

    The instructor is taken from the request for instructors; admins may
    assign any instructor. ``is_approved`` is only writable by admins.
    """

    class Meta:
        model = Course
        fields = [
            "id",
            "title",
            "description",
            "course_code",
            "instructor",
            "credits",
            "max_students",
            "fees",
            "category",
            "level",
            "prerequisites",
            "materials",
            "thumbnail_image",
            "is_active",
            "is_approved",
        ]
        read_only_fields = ["id"]
        extra_kwargs = {"instructor": {"required": False}}

    def validate_course_code(self, value):
        """Course codes are unique regardless of case."""
        code = value.strip().upper()
        query = Course.objects.filter(course_code__iexact=code)
        if self.instance:
            query = query.exclude(pk=self.instance.pk)
        if query.exists():
            raise serializers.ValidationError("A course with this code already exists.")
        return code

    def validate_instructor(self, value):
        if value is not None and value.role != "instructor":
            raise serializers.ValidationError("Selected user is not an instructor.")
        return value

    def validate_prerequisites(self, value):
        if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
            raise serializers.ValidationError("Prerequisites must be a list of course codes.")
        return value

    def validate_materials(self, value):
        if not isinstance(value, list):
            raise serializers.ValidationError("Materials must be a list.")
        for item in value:
            if not isinstance(item, dict) or not item.get("title"):
                raise serializers.ValidationError("Each material needs a title.")
        return value

    def validate(self, data):
        request = self.context.get("request")
        user = getattr(request, "user", None)
        is_admin = bool(user and user.is_authenticated and user.role == "admin")

        if not is_admin:
            # Instructors own what they create and cannot self-approve
            data.pop("instructor", None)
            data.pop("is_approved", None)
        elif not self.instance and not data.get("instructor"):
            raise serializers.ValidationError({"instructor": "Admins must assign an instructor."})

        max_students = data.get("max_students")
        if self.instance and max_students is not None and max_students < self.instance.current_enrollment:
            raise serializers.ValidationError(
                {"max_students": "Capacity cannot be lower than the current enrollment."}
            )
        return data


class EnrollmentSerializer(serializers.ModelSerializer):
    course = CourseListSerializer(read_only=True)

    class Meta:
        model = Enrollment
        fields = [
            "id",
            "course",
            "status",
            "total_classes",
            "attended_classes",
            "attendance_percentage",
            "created_at",
        ]
        read_only_fields = fields
