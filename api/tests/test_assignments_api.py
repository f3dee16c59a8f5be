"""Assignment authoring, visibility and question bank endpoint tests."""

from datetime import timedelta

from django.test import TestCase
from django.urls import reverse
from django.utils import timezone

from rest_framework.test import APIClient

from api.models.models_assignment import Assignment, AssignmentQuestion
from api.models.models_auth import CustomUser
from api.models.models_course import Course
from api.models.models_enrollment import Enrollment

PASSWORD = "StrongPass1!"


def make_user(email, role, **extra):
    return CustomUser.objects.create_user(
        email=email, password=PASSWORD, first_name="Test", last_name="User", role=role, **extra
    )


class AssignmentApiTests(TestCase):
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
        Enrollment.objects.create(student=self.student, course=self.course)

        self.published = Assignment.objects.create(
            title="Week 1 quiz",
            description="Variables",
            course=self.course,
            instructor=self.instructor,
            type="quiz",
            total_points=100,
            due_date=timezone.now() + timedelta(days=7),
            is_published=True,
        )
        self.draft = Assignment.objects.create(
            title="Draft homework",
            description="Loops",
            course=self.course,
            instructor=self.instructor,
            type="homework",
            total_points=10,
            due_date=timezone.now() + timedelta(days=14),
        )
        self.question = AssignmentQuestion.objects.create(
            assignment=self.published,
            question_text="What does len([1, 2]) return?",
            type="multiple-choice",
            options=["1", "2", "3"],
            correct_option=1,
            explanation="Two items.",
            order=1,
        )
        self.list_url = reverse("assignment-list")

    def detail_url(self, assignment):
        return reverse("assignment-detail", args=[assignment.pk])

    def _new_assignment(self, **overrides):
        data = {
            "title": "Project",
            "description": "Build a CLI",
            "course": str(self.course.pk),
            "type": "project",
            "total_points": 50,
            "due_date": (timezone.now() + timedelta(days=10)).isoformat(),
        }
        data.update(overrides)
        return data

    def test_instructor_creates_assignment_with_questions(self):
        self.client.force_authenticate(self.instructor)
        payload = self._new_assignment(
            type="quiz",
            questions=[
                {"question_text": "2 + 2?", "type": "multiple-choice", "options": ["3", "4"], "correct_option": 1},
                {"question_text": "Explain recursion", "type": "written", "expected_answer": "A function calling itself"},
            ],
        )
        resp = self.client.post(self.list_url, payload, format="json")
        self.assertEqual(resp.status_code, 201)

        assignment = Assignment.objects.get(pk=resp.data["data"]["id"])
        self.assertEqual(assignment.instructor, self.instructor)
        self.assertEqual(assignment.quiz_settings["autoGrade"], True)
        self.assertEqual([q.order for q in assignment.questions.all()], [1, 2])

    def test_cannot_create_for_someone_elses_course(self):
        self.client.force_authenticate(self.other_instructor)
        resp = self.client.post(self.list_url, self._new_assignment(), format="json")
        self.assertEqual(resp.status_code, 400)

    def test_due_date_must_be_in_future(self):
        self.client.force_authenticate(self.instructor)
        past = (timezone.now() - timedelta(days=1)).isoformat()
        resp = self.client.post(self.list_url, self._new_assignment(due_date=past), format="json")
        self.assertEqual(resp.status_code, 400)

    def test_invalid_mcq_rejected(self):
        self.client.force_authenticate(self.instructor)
        payload = self._new_assignment(
            questions=[{"question_text": "Pick", "type": "multiple-choice", "options": ["only"], "correct_option": 0}]
        )
        resp = self.client.post(self.list_url, payload, format="json")
        self.assertEqual(resp.status_code, 400)

    def test_student_cannot_create(self):
        self.client.force_authenticate(self.student)
        resp = self.client.post(self.list_url, self._new_assignment(), format="json")
        self.assertEqual(resp.status_code, 403)

    def test_list_is_scoped_by_role(self):
        self.client.force_authenticate(self.student)
        ids = [a["id"] for a in self.client.get(self.list_url).data["data"]]
        self.assertEqual(ids, [str(self.published.pk)])

        self.client.force_authenticate(self.other_instructor)
        self.assertEqual(self.client.get(self.list_url).data["data"], [])

        self.client.force_authenticate(self.instructor)
        self.assertEqual(len(self.client.get(self.list_url).data["data"]), 2)

    def test_student_retrieve_hides_answer_key(self):
        self.client.force_authenticate(self.student)
        resp = self.client.get(self.detail_url(self.published))
        self.assertEqual(resp.status_code, 200)
        question = resp.data["data"]["questions"][0]
        self.assertNotIn("correct_option", question)
        self.assertNotIn("explanation", question)
        self.assertEqual(question["options"], ["1", "2", "3"])

        self.client.force_authenticate(self.instructor)
        resp = self.client.get(self.detail_url(self.published))
        self.assertEqual(resp.data["data"]["questions"][0]["correct_option"], 1)

    def test_student_retrieve_rules(self):
        self.client.force_authenticate(self.student)
        self.assertEqual(self.client.get(self.detail_url(self.draft)).status_code, 404)

        self.client.force_authenticate(self.outsider)
        self.assertEqual(self.client.get(self.detail_url(self.published)).status_code, 403)

        self.client.force_authenticate(self.other_instructor)
        self.assertEqual(self.client.get(self.detail_url(self.published)).status_code, 403)

    def test_by_course_returns_published_only(self):
        url = reverse("assignment-by-course", args=[self.course.pk])
        self.client.force_authenticate(self.student)
        resp = self.client.get(url)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual([a["id"] for a in resp.data["data"]], [str(self.published.pk)])

        self.client.force_authenticate(self.outsider)
        self.assertEqual(self.client.get(url).status_code, 403)

    def test_put_acts_as_partial_update(self):
        self.client.force_authenticate(self.instructor)
        resp = self.client.put(self.detail_url(self.draft), {"is_published": True}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.draft.refresh_from_db()
        self.assertTrue(self.draft.is_published)
        self.assertEqual(self.draft.title, "Draft homework")

    def test_non_owner_cannot_update_or_delete(self):
        self.client.force_authenticate(self.other_instructor)
        self.assertEqual(self.client.patch(self.detail_url(self.draft), {"title": "x"}, format="json").status_code, 403)
        self.assertEqual(self.client.delete(self.detail_url(self.draft)).status_code, 403)

        self.client.force_authenticate(self.admin)
        self.assertEqual(self.client.delete(self.detail_url(self.draft)).status_code, 200)
        self.assertFalse(Assignment.objects.filter(pk=self.draft.pk).exists())

    def test_add_update_and_delete_question(self):
        self.client.force_authenticate(self.instructor)
        resp = self.client.post(
            reverse("assignment-add-question", args=[self.published.pk]),
            {"question_text": "Is Python typed?", "type": "written", "expected_answer": "Dynamically"},
            format="json",
        )
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.data["data"]["order"], 2)
        question_id = resp.data["data"]["id"]

        detail = reverse("assignment-question-detail", args=[self.published.pk, question_id])
        resp = self.client.patch(detail, {"points": 3}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(AssignmentQuestion.objects.get(pk=question_id).points, 3)

        self.assertEqual(self.client.delete(detail).status_code, 200)
        self.assertFalse(AssignmentQuestion.objects.filter(pk=question_id).exists())
        self.assertEqual(self.client.delete(detail).status_code, 404)

    def test_rubric_and_quiz_settings(self):
        self.client.force_authenticate(self.instructor)
        resp = self.client.put(
            reverse("assignment-rubric", args=[self.published.pk]),
            {"rubric": [{"criterion": "Accuracy", "value": 60}, {"criterion": "Style", "value": 40}]},
            format="json",
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual([r["criterion"] for r in resp.data["data"]], ["Accuracy", "Style"])

        resp = self.client.put(
            reverse("assignment-quiz-settings", args=[self.published.pk]),
            {"timeLimit": 30, "autoGrade": False},
            format="json",
        )
        self.assertEqual(resp.status_code, 200)
        self.published.refresh_from_db()
        self.assertEqual(self.published.quiz_settings["timeLimit"], 30)
        self.assertFalse(self.published.quiz_settings["autoGrade"])
        self.assertEqual(self.published.quiz_settings["maxAttempts"], 1)


class AssignmentModelTests(TestCase):
    def setUp(self):
        instructor = make_user("teach@example.com", CustomUser.Role.INSTRUCTOR, is_approved=True)
        course = Course.objects.create(title="C", description="C", course_code="C1", instructor=instructor)
        self.assignment = Assignment(
            title="A", description="A", course=course, instructor=instructor, type="homework", total_points=10
        )

    def test_time_until_due(self):
        self.assignment.due_date = timezone.now() + timedelta(days=3, hours=1)
        self.assertEqual(self.assignment.time_until_due, "4 days remaining")
        self.assertFalse(self.assignment.is_overdue)

        self.assignment.due_date = timezone.now() - timedelta(days=2, hours=1)
        self.assertEqual(self.assignment.time_until_due, "2 days overdue")
        self.assertTrue(self.assignment.is_overdue)
