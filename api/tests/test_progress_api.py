"""Lecture progress endpoint tests: tracking, toggling and course reports."""

import uuid

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
        email=email, password=PASSWORD, first_name="Test", last_name="User", role=role, **extra
    )


class ProgressTestBase(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = make_user("admin@example.com", CustomUser.Role.ADMIN)
        self.instructor = make_user("teach@example.com", CustomUser.Role.INSTRUCTOR, is_approved=True)
        self.other_instructor = make_user("other@example.com", CustomUser.Role.INSTRUCTOR, is_approved=True)
        self.student = make_user("learner@example.com", CustomUser.Role.STUDENT)
        self.outsider = make_user("outsider@example.com", CustomUser.Role.STUDENT)

        self.course = Course.objects.create(
            title="Intro to Python", description="Basics", course_code="PY101", instructor=self.instructor
        )
        # 2 modules x 3 lectures
        self.modules = []
        self.lectures = {}
        for m in range(2):
            module = CourseModule.objects.create(course=self.course, title=f"Module {m + 1}", order=m + 1)
            self.modules.append(module)
            self.lectures[module.pk] = [
                Lecture.objects.create(
                    module=module,
                    title=f"Lecture {m + 1}.{i + 1}",
                    order=i + 1,
                    video_url="https://youtu.be/ABCDEFGHIJK",
                )
                for i in range(3)
            ]
        Enrollment.objects.create(student=self.student, course=self.course)

    def toggle_url(self, module, lecture, course=None):
        return reverse("progress-lecture-toggle", args=[(course or self.course).pk, module.pk, lecture.pk])


class StudentProgressTests(ProgressTestBase):
    def setUp(self):
        super().setUp()
        self.client.force_authenticate(self.student)
        self.progress_url = reverse("progress-course", args=[self.course.pk])

    def test_get_seeds_full_mirror(self):
        resp = self.client.get(self.progress_url)
        self.assertEqual(resp.status_code, 200)
        data = resp.data["data"]
        self.assertEqual(data["total_lectures_count"], 6)
        self.assertEqual(data["completed_lectures_count"], 0)
        self.assertEqual(data["progress_percentage"], 0)
        self.assertFalse(data["completed"])
        self.assertEqual(len(data["modules_progress"]), 2)
        self.assertEqual(CourseProgress.objects.filter(student=self.student).count(), 1)

        self.client.get(self.progress_url)
        self.assertEqual(CourseProgress.objects.filter(student=self.student).count(), 1)

    def test_not_enrolled_is_forbidden(self):
        self.client.force_authenticate(self.outsider)
        self.assertEqual(self.client.get(self.progress_url).status_code, 403)

    def test_staff_get_their_own_record_without_enrollment(self):
        for user in (self.other_instructor, self.admin):
            self.client.force_authenticate(user)
            resp = self.client.get(self.progress_url)
            self.assertEqual(resp.status_code, 200)
            self.assertEqual(resp.data["data"]["total_lectures_count"], 6)
            self.assertTrue(CourseProgress.objects.filter(student=user, course=self.course).exists())

        self.client.force_authenticate(self.instructor)
        rows = self.client.get(reverse("progress-course-students", args=[self.course.pk])).data["data"]
        self.assertNotIn("other@example.com", [row["student"]["email"] for row in rows])

    def test_toggle_three_of_six_is_half(self):
        m1, m2 = self.modules
        targets = [(m1, self.lectures[m1.pk][0]), (m1, self.lectures[m1.pk][1]), (m2, self.lectures[m2.pk][2])]
        for module, lecture in targets:
            resp = self.client.post(self.toggle_url(module, lecture))
            self.assertEqual(resp.status_code, 200)
            self.assertTrue(resp.data["data"]["lecture_completed"])

        data = resp.data["data"]
        self.assertEqual(data["completed_lectures_count"], 3)
        self.assertEqual(data["progress_percentage"], 50)
        self.assertFalse(data["completed"])

    def test_toggle_twice_restores_state(self):
        m1 = self.modules[0]
        lecture = self.lectures[m1.pk][0]
        self.client.post(self.toggle_url(m1, lecture))
        resp = self.client.post(self.toggle_url(m1, lecture))
        self.assertFalse(resp.data["data"]["lecture_completed"])

        entry = resp.data["data"]["modules_progress"][str(m1.pk)]["lectures_progress"][str(lecture.pk)]
        self.assertEqual(entry, {"completed": False, "completed_at": None})
        self.assertEqual(resp.data["data"]["completed_lectures_count"], 0)

    def test_completing_everything_completes_course(self):
        for module in self.modules:
            for lecture in self.lectures[module.pk]:
                resp = self.client.post(self.toggle_url(module, lecture))

        data = resp.data["data"]
        self.assertTrue(data["completed"])
        self.assertEqual(data["progress_percentage"], 100)
        self.assertIsNotNone(data["completed_at"])
        self.assertTrue(all(entry["completed"] for entry in data["modules_progress"].values()))

        progress = CourseProgress.objects.get(student=self.student, course=self.course)
        first_completed_at = progress.completed_at
        progress.refresh_stats()
        self.assertEqual(progress.completed_at, first_completed_at)

    def test_new_lecture_raises_denominator(self):
        m1 = self.modules[0]
        for lecture in self.lectures[m1.pk]:
            self.client.post(self.toggle_url(m1, lecture))

        Lecture.objects.create(module=m1, title="Bonus", order=4, video_url="https://youtu.be/ABCDEFGHIJK")
        progress = CourseProgress.objects.get(student=self.student, course=self.course)
        progress.refresh_stats()
        self.assertEqual(progress.total_lectures_count, 7)
        self.assertEqual(progress.progress_percentage, 43)

    def test_toggle_unknown_module_or_lecture(self):
        m1, m2 = self.modules
        other_course = Course.objects.create(
            title="Other", description="Other", course_code="OT1", instructor=self.instructor
        )
        foreign_module = CourseModule.objects.create(course=other_course, title="Foreign", order=1)

        resp = self.client.post(
            reverse("progress-lecture-toggle", args=[self.course.pk, foreign_module.pk, self.lectures[m1.pk][0].pk])
        )
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.data["message"], "Module not found in this course.")

        resp = self.client.post(self.toggle_url(m1, self.lectures[m2.pk][0]))
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.data["message"], "Lecture not found in this module.")

        resp = self.client.post(
            reverse("progress-lecture-toggle", args=[uuid.uuid4(), m1.pk, self.lectures[m1.pk][0].pk])
        )
        self.assertEqual(resp.status_code, 404)

    def test_initialize_is_idempotent(self):
        url = reverse("progress-initialize", args=[self.course.pk])
        first = self.client.post(url)
        self.assertEqual(first.status_code, 201)
        second = self.client.post(url)
        self.assertEqual(second.status_code, 200)
        self.assertEqual(second.data["message"], "Progress already initialized")
        self.assertEqual(first.data["data"]["id"], second.data["data"]["id"])

    def test_delete_own_progress(self):
        self.client.get(self.progress_url)
        self.assertEqual(self.client.delete(self.progress_url).status_code, 200)
        self.assertFalse(CourseProgress.objects.filter(student=self.student).exists())
        self.assertEqual(self.client.delete(self.progress_url).status_code, 404)

    def test_admin_resets_student_progress(self):
        self.client.get(self.progress_url)
        self.client.force_authenticate(self.admin)
        resp = self.client.delete(self.progress_url + f"?student_id={self.student.pk}")
        self.assertEqual(resp.status_code, 200)
        self.assertFalse(CourseProgress.objects.filter(student=self.student).exists())

    def test_instructor_cannot_delete(self):
        self.client.force_authenticate(self.instructor)
        self.assertEqual(self.client.delete(self.progress_url).status_code, 403)


class ProgressReportTests(ProgressTestBase):
    def setUp(self):
        super().setUp()
        self.second = make_user("second@example.com", CustomUser.Role.STUDENT)
        Enrollment.objects.create(student=self.second, course=self.course)

        progress, _ = CourseProgress.initialize_for(self.student, self.course)
        m1 = self.modules[0]
        progress.toggle_lecture(m1.pk, self.lectures[m1.pk][0].pk)
        CourseProgress.initialize_for(self.second, self.course)

    def test_student_courses_progress(self):
        url = reverse("progress-student-courses", args=[self.student.pk])
        self.client.force_authenticate(self.student)
        resp = self.client.get(url)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(len(resp.data["data"]), 1)
        self.assertEqual(resp.data["data"][0]["course_code"], "PY101")

        self.client.force_authenticate(self.second)
        self.assertEqual(self.client.get(url).status_code, 403)

        self.client.force_authenticate(self.other_instructor)
        self.assertEqual(self.client.get(url).data["data"], [])

        self.client.force_authenticate(self.instructor)
        self.assertEqual(len(self.client.get(url).data["data"]), 1)

    def test_course_students_report_is_sorted(self):
        url = reverse("progress-course-students", args=[self.course.pk])
        self.client.force_authenticate(self.instructor)
        resp = self.client.get(url)
        self.assertEqual(resp.status_code, 200)
        emails = [row["student"]["email"] for row in resp.data["data"]]
        self.assertEqual(emails, ["learner@example.com", "second@example.com"])
        self.assertNotIn("modules_progress", resp.data["data"][0])

        self.client.force_authenticate(self.other_instructor)
        self.assertEqual(self.client.get(url).status_code, 403)

        self.client.force_authenticate(self.student)
        self.assertEqual(self.client.get(url).status_code, 403)

    def test_export_csv(self):
        self.client.force_authenticate(self.instructor)
        resp = self.client.get(reverse("progress-course-export", args=[self.course.pk]), {"format": "csv"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp["Content-Type"], "text/csv")
        self.assertIn("attachment;", resp["Content-Disposition"])

        lines = resp.content.decode().strip().splitlines()
        self.assertEqual(lines[0], "Student,Email,Completed Lectures,Total Lectures,Progress %,Status,Completed At")
        self.assertEqual(len(lines), 3)
        self.assertIn("learner@example.com,1,6,17,In Progress,-", lines[1])

    def test_export_pdf(self):
        self.client.force_authenticate(self.admin)
        resp = self.client.get(reverse("progress-course-export", args=[self.course.pk]), {"format": "pdf"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp["Content-Type"], "application/pdf")
        self.assertTrue(resp.content.startswith(b"%PDF"))

    def test_export_rejects_unknown_format(self):
        self.client.force_authenticate(self.instructor)
        resp = self.client.get(reverse("progress-course-export", args=[self.course.pk]), {"format": "xlsx"})
        self.assertEqual(resp.status_code, 400)
