"""Attendance marking and history endpoint tests."""

from datetime import date
from decimal import Decimal

from django.test import TestCase
from django.urls import reverse

from rest_framework.test import APIClient

from api.models.models_attendance import Attendance, AttendanceRecord
from api.models.models_auth import CustomUser
from api.models.models_course import Course
from api.models.models_enrollment import Enrollment

PASSWORD = "StrongPass1!"


def make_user(email, role, **extra):
    return CustomUser.objects.create_user(
        email=email, password=PASSWORD, first_name="Test", last_name="User", role=role, **extra
    )


class AttendanceApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = make_user("admin@example.com", CustomUser.Role.ADMIN)
        self.instructor = make_user("teach@example.com", CustomUser.Role.INSTRUCTOR, is_approved=True)
        self.other_instructor = make_user("other@example.com", CustomUser.Role.INSTRUCTOR, is_approved=True)
        self.alice = make_user("alice@example.com", CustomUser.Role.STUDENT)
        self.bob = make_user("bob@example.com", CustomUser.Role.STUDENT)
        self.carol = make_user("carol@example.com", CustomUser.Role.STUDENT)

        self.course = Course.objects.create(
            title="Intro to Python", description="Basics", course_code="PY101", instructor=self.instructor
        )
        self.other_course = Course.objects.create(
            title="Databases", description="SQL", course_code="DB101", instructor=self.other_instructor
        )
        Enrollment.objects.create(student=self.alice, course=self.course)
        Enrollment.objects.create(student=self.bob, course=self.course)
        Enrollment.objects.create(student=self.alice, course=self.other_course)

        self.create_url = reverse("attendance-create")

    def _sheet(self, day=date(2025, 3, 1), course=None, marks=None):
        if marks is None:
            marks = [
                {"student": str(self.alice.pk), "status": "present"},
                {"student": str(self.bob.pk), "status": "absent", "remarks": "Sick"},
            ]
        return {
            "course": str((course or self.course).pk),
            "date": day.isoformat(),
            "class_type": "lab",
            "topic": "Loops",
            "students": marks,
        }

    def test_mark_attendance_updates_enrollments(self):
        self.client.force_authenticate(self.instructor)
        resp = self.client.post(self.create_url, self._sheet(), format="json")
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.data["message"], "Attendance marked successfully")
        self.assertEqual(resp.data["data"]["course_code"], "PY101")
        self.assertEqual(resp.data["data"]["duration"], 60)
        self.assertEqual(len(resp.data["data"]["students"]), 2)

        alice = Enrollment.objects.get(student=self.alice, course=self.course)
        bob = Enrollment.objects.get(student=self.bob, course=self.course)
        self.assertEqual((alice.attended_classes, alice.total_classes), (1, 1))
        self.assertEqual(alice.attendance_percentage, Decimal("100.00"))
        self.assertEqual((bob.attended_classes, bob.total_classes), (0, 1))
        self.assertEqual(AttendanceRecord.objects.get(student=self.bob).remarks, "Sick")

        second = self._sheet(
            day=date(2025, 3, 2),
            marks=[
                {"student": str(self.alice.pk), "status": "late"},
                {"student": str(self.bob.pk), "status": "present"},
            ],
        )
        self.assertEqual(self.client.post(self.create_url, second, format="json").status_code, 201)
        alice.refresh_from_db()
        bob.refresh_from_db()
        self.assertEqual(alice.attendance_percentage, Decimal("50.00"))
        self.assertEqual(bob.attendance_percentage, Decimal("50.00"))

    def test_admin_cannot_mark(self):
        self.client.force_authenticate(self.admin)
        resp = self.client.post(self.create_url, self._sheet(), format="json")
        self.assertEqual(resp.status_code, 403)
        self.assertFalse(Attendance.objects.exists())

    def test_only_own_course(self):
        self.client.force_authenticate(self.instructor)
        marks = [{"student": str(self.alice.pk), "status": "present"}]
        resp = self.client.post(self.create_url, self._sheet(course=self.other_course, marks=marks), format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data["message"], "You can only mark attendance for your own courses.")

    def test_duplicate_date_rejected(self):
        self.client.force_authenticate(self.instructor)
        self.client.post(self.create_url, self._sheet(), format="json")
        resp = self.client.post(self.create_url, self._sheet(), format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data["message"], "Attendance for this date has already been recorded.")
        self.assertEqual(Enrollment.objects.get(student=self.alice, course=self.course).total_classes, 1)

    def test_unenrolled_student_rejected(self):
        self.client.force_authenticate(self.instructor)
        marks = [
            {"student": str(self.alice.pk), "status": "present"},
            {"student": str(self.carol.pk), "status": "present"},
        ]
        resp = self.client.post(self.create_url, self._sheet(marks=marks), format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertIn(str(self.carol.pk), resp.data["message"])
        self.assertFalse(Attendance.objects.exists())
        self.assertEqual(Enrollment.objects.get(student=self.alice, course=self.course).total_classes, 0)

    def test_duplicate_student_rejected(self):
        self.client.force_authenticate(self.instructor)
        marks = [
            {"student": str(self.alice.pk), "status": "present"},
            {"student": str(self.alice.pk), "status": "absent"},
        ]
        resp = self.client.post(self.create_url, self._sheet(marks=marks), format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data["message"], "Each student may appear only once.")

    def test_empty_sheet_rejected(self):
        self.client.force_authenticate(self.instructor)
        resp = self.client.post(self.create_url, self._sheet(marks=[]), format="json")
        self.assertEqual(resp.status_code, 400)

    def test_course_attendance_is_owner_or_admin(self):
        self.client.force_authenticate(self.instructor)
        self.client.post(self.create_url, self._sheet(day=date(2025, 3, 1)), format="json")
        self.client.post(self.create_url, self._sheet(day=date(2025, 3, 8)), format="json")

        url = reverse("attendance-course", args=[self.course.pk])
        resp = self.client.get(url)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual([sheet["date"] for sheet in resp.data["data"]], ["2025-03-08", "2025-03-01"])

        self.client.force_authenticate(self.admin)
        self.assertEqual(self.client.get(url).status_code, 200)

        self.client.force_authenticate(self.other_instructor)
        self.assertEqual(self.client.get(url).status_code, 403)

        self.client.force_authenticate(self.alice)
        self.assertEqual(self.client.get(url).status_code, 403)

    def test_student_attendance_history(self):
        self.client.force_authenticate(self.instructor)
        self.client.post(self.create_url, self._sheet(), format="json")
        self.client.force_authenticate(self.other_instructor)
        marks = [{"student": str(self.alice.pk), "status": "excused"}]
        self.client.post(self.create_url, self._sheet(course=self.other_course, marks=marks), format="json")

        url = reverse("attendance-student", args=[self.alice.pk])
        self.client.force_authenticate(self.alice)
        resp = self.client.get(url)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(len(resp.data["data"]), 2)
        self.assertEqual({row["status"] for row in resp.data["data"]}, {"present", "excused"})

        self.client.force_authenticate(self.bob)
        self.assertEqual(self.client.get(url).status_code, 403)

        self.client.force_authenticate(self.instructor)
        rows = self.client.get(url).data["data"]
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]["course_title"], "Intro to Python")
        self.assertEqual(rows[0]["topic"], "Loops")
