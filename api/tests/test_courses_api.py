"""Course catalog, authoring and enrollment endpoint tests."""

from django.test import TestCase
from django.urls import reverse

from rest_framework.test import APIClient

from api.models.models_auth import CustomUser
from api.models.models_course import Course, CourseModule, Lecture
from api.models.models_enrollment import Enrollment
from api.models.models_progress import CourseProgress

PASSWORD = "StrongPass1!"


def make_user(email, role, **extra):
    return CustomUser.objects.create_user(
        email=email,
        password=PASSWORD,
        first_name="Test",
        last_name="User",
        role=role,
        **extra,
    )


class CourseApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = make_user("admin@example.com", CustomUser.Role.ADMIN)
        self.instructor = make_user("teach@example.com", CustomUser.Role.INSTRUCTOR, is_approved=True)
        self.other_instructor = make_user("other@example.com", CustomUser.Role.INSTRUCTOR, is_approved=True)
        self.pending_instructor = make_user("pending@example.com", CustomUser.Role.INSTRUCTOR)
        self.student = make_user("learner@example.com", CustomUser.Role.STUDENT)

        self.course = Course.objects.create(
            title="Intro to Python",
            description="Basics",
            course_code="py101",
            instructor=self.instructor,
            max_students=2,
        )
        self.hidden = Course.objects.create(
            title="Draft course",
            description="Not ready",
            course_code="DRAFT1",
            instructor=self.instructor,
            is_active=False,
        )
        self.list_url = reverse("course-list")

    def detail_url(self, course):
        return reverse("course-detail", args=[course.pk])

    def test_course_code_is_upper_cased(self):
        self.assertEqual(self.course.course_code, "PY101")

    def test_public_list_hides_inactive_courses(self):
        resp = self.client.get(self.list_url)
        self.assertEqual(resp.status_code, 200)
        codes = [c["course_code"] for c in resp.data["data"]["results"]]
        self.assertIn("PY101", codes)
        self.assertNotIn("DRAFT1", codes)

    def test_owner_instructor_sees_own_inactive_course(self):
        self.client.force_authenticate(self.instructor)
        resp = self.client.get(self.detail_url(self.hidden))
        self.assertEqual(resp.status_code, 200)

        self.client.force_authenticate(self.other_instructor)
        resp = self.client.get(self.detail_url(self.hidden))
        self.assertEqual(resp.status_code, 404)

    def test_approved_instructor_creates_course(self):
        self.client.force_authenticate(self.instructor)
        resp = self.client.post(
            self.list_url,
            {"title": "Data Science", "description": "Pandas", "course_code": "ds200", "instructor": str(self.other_instructor.pk)},
            format="json",
        )
        self.assertEqual(resp.status_code, 201)
        course = Course.objects.get(course_code="DS200")
        self.assertEqual(course.instructor, self.instructor)
        self.assertEqual(resp.data["data"]["modules"], [])

    def test_pending_instructor_cannot_create(self):
        self.client.force_authenticate(self.pending_instructor)
        resp = self.client.post(
            self.list_url,
            {"title": "Nope", "description": "Nope", "course_code": "NOPE1"},
            format="json",
        )
        self.assertEqual(resp.status_code, 403)

    def test_student_cannot_create(self):
        self.client.force_authenticate(self.student)
        resp = self.client.post(self.list_url, {"title": "X", "description": "X", "course_code": "X1"}, format="json")
        self.assertEqual(resp.status_code, 403)

    def test_admin_must_assign_instructor(self):
        self.client.force_authenticate(self.admin)
        resp = self.client.post(self.list_url, {"title": "Admin", "description": "A", "course_code": "ADM1"}, format="json")
        self.assertEqual(resp.status_code, 400)

        resp = self.client.post(
            self.list_url,
            {"title": "Admin", "description": "A", "course_code": "ADM1", "instructor": str(self.instructor.pk)},
            format="json",
        )
        self.assertEqual(resp.status_code, 201)

    def test_duplicate_code_is_case_insensitive(self):
        self.client.force_authenticate(self.instructor)
        resp = self.client.post(self.list_url, {"title": "Dup", "description": "Dup", "course_code": "Py101"}, format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data["message"], "A course with this code already exists.")

    def test_only_owner_may_update(self):
        self.client.force_authenticate(self.other_instructor)
        resp = self.client.patch(self.detail_url(self.course), {"title": "Hijacked"}, format="json")
        self.assertEqual(resp.status_code, 403)

        self.client.force_authenticate(self.instructor)
        resp = self.client.patch(self.detail_url(self.course), {"title": "Python Basics"}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.course.refresh_from_db()
        self.assertEqual(self.course.title, "Python Basics")

    def test_capacity_cannot_drop_below_enrollment(self):
        self.course.current_enrollment = 2
        self.course.save()
        self.client.force_authenticate(self.instructor)
        resp = self.client.patch(self.detail_url(self.course), {"max_students": 1}, format="json")
        self.assertEqual(resp.status_code, 400)

    def test_add_module_and_lecture(self):
        self.client.force_authenticate(self.instructor)
        resp = self.client.post(
            reverse("course-add-module", args=[self.course.pk]),
            {"title": "Getting started"},
            format="json",
        )
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.data["data"]["order"], 1)
        module_id = resp.data["data"]["id"]

        resp = self.client.post(
            reverse("course-add-lecture", args=[self.course.pk, module_id]),
            {"title": "Installing Python", "type": "video", "video_url": "https://youtu.be/ABCDEFGHIJK"},
            format="json",
        )
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(Lecture.objects.filter(module_id=module_id).count(), 1)

        resp = self.client.post(
            reverse("course-add-lecture", args=[self.course.pk, module_id]),
            {"title": "No link", "type": "live"},
            format="json",
        )
        self.assertEqual(resp.status_code, 400)

        detail = self.client.get(self.detail_url(self.course))
        self.assertEqual(len(detail.data["data"]["modules"]), 1)
        self.assertEqual(len(detail.data["data"]["modules"][0]["lectures"]), 1)

    def test_duplicate_module_order_rejected(self):
        CourseModule.objects.create(course=self.course, title="First", order=1)
        self.client.force_authenticate(self.instructor)
        resp = self.client.post(
            reverse("course-add-module", args=[self.course.pk]),
            {"title": "Clash", "order": 1},
            format="json",
        )
        self.assertEqual(resp.status_code, 400)

    def test_delete_is_owner_only(self):
        self.client.force_authenticate(self.other_instructor)
        self.assertEqual(self.client.delete(self.detail_url(self.course)).status_code, 403)

        self.client.force_authenticate(self.admin)
        resp = self.client.delete(self.detail_url(self.course))
        self.assertEqual(resp.status_code, 200)
        self.assertFalse(Course.objects.filter(pk=self.course.pk).exists())


class EnrollmentApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.instructor = make_user("teach@example.com", CustomUser.Role.INSTRUCTOR, is_approved=True)
        self.student = make_user("s1@example.com", CustomUser.Role.STUDENT)
        self.course = Course.objects.create(
            title="Intro to Python",
            description="Basics",
            course_code="PY101",
            instructor=self.instructor,
            max_students=1,
        )
        module = CourseModule.objects.create(course=self.course, title="M1", order=1)
        Lecture.objects.create(module=module, title="L1", order=1, video_url="https://youtu.be/ABCDEFGHIJK")
        self.enroll_url = reverse("course-enroll", args=[self.course.pk])
        self.unenroll_url = reverse("course-unenroll", args=[self.course.pk])
        self.client.force_authenticate(self.student)

    def test_enroll_seeds_progress(self):
        resp = self.client.post(self.enroll_url)
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.data["data"]["status"], "enrolled")

        self.course.refresh_from_db()
        self.assertEqual(self.course.current_enrollment, 1)
        progress = CourseProgress.objects.get(student=self.student, course=self.course)
        self.assertEqual(progress.total_lectures_count, 1)
        self.assertEqual(progress.progress_percentage, 0)

    def test_double_enroll_rejected(self):
        self.client.post(self.enroll_url)
        resp = self.client.post(self.enroll_url)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data["message"], "You are already enrolled in this course.")

    def test_full_course_rejected(self):
        self.client.post(self.enroll_url)
        late = make_user("s2@example.com", CustomUser.Role.STUDENT)
        self.client.force_authenticate(late)
        resp = self.client.post(self.enroll_url)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data["message"], "Course is full.")

    def test_instructor_cannot_enroll(self):
        self.client.force_authenticate(self.instructor)
        self.assertEqual(self.client.post(self.enroll_url).status_code, 403)

    def test_unenroll_drops_progress_and_frees_seat(self):
        self.client.post(self.enroll_url)
        resp = self.client.post(self.unenroll_url)
        self.assertEqual(resp.status_code, 200)

        enrollment = Enrollment.objects.get(student=self.student, course=self.course)
        self.assertEqual(enrollment.status, "dropped")
        self.course.refresh_from_db()
        self.assertEqual(self.course.current_enrollment, 0)
        self.assertFalse(CourseProgress.objects.filter(student=self.student, course=self.course).exists())

        again = self.client.post(self.enroll_url)
        self.assertEqual(again.status_code, 201)
        self.assertEqual(Enrollment.objects.filter(student=self.student, course=self.course).count(), 1)

    def test_unenroll_without_enrollment(self):
        resp = self.client.post(self.unenroll_url)
        self.assertEqual(resp.status_code, 400)

    def test_my_enrollments(self):
        self.client.post(self.enroll_url)
        resp = self.client.get(reverse("course-my-enrollments"))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(len(resp.data["data"]), 1)
        self.assertEqual(resp.data["data"][0]["course"]["course_code"], "PY101")
