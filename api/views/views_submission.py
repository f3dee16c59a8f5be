"""Submission views: submit, grade, resubmit and per-submission extras.

Every read-modify-write runs inside ``transaction.atomic()`` with the
submission row locked via ``select_for_update()``.
"""

import logging

from django.db import IntegrityError, transaction
from django.shortcuts import get_object_or_404
from django.utils import timezone

from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import mixins, permissions, status, viewsets
from rest_framework.decorators import action

from api.models.models_assignment import Assignment
from api.models.models_enrollment import Enrollment
from api.models.models_submission import Submission
from api.permissions import IsAdmin, IsInstructorOrAdmin, IsStudent
from api.serializers.serializers_submission import (
    AchievementSerializer,
    AddAttachmentsSerializer,
    GradeSubmissionSerializer,
    PlagiarismReportSerializer,
    ResubmitSerializer,
    SubmissionCreateSerializer,
    SubmissionSerializer,
)
from api.utils.grading_utils import auto_grade_quiz
from api.utils.response_utils import APIResponseSerializer, api_response

logger = logging.getLogger(__name__)


def can_manage_assignment(user, assignment):
    """Admins, or the instructor who owns the assignment."""
    return user.role == "admin" or (user.role == "instructor" and assignment.instructor_id == user.id)


def build_quiz_answers(questions, answers):
    """Snapshot each answered question alongside the student's answer; unknown ids are dropped."""
    questions_by_id = {str(question.id): question for question in questions}
    quiz_answers = []
    for answer in answers:
        question = questions_by_id.get(str(answer["question_id"]))
        if question is None:
            continue
        snapshot = question.snapshot()
        snapshot["student_answer"] = answer.get("answer")
        quiz_answers.append(snapshot)
    return quiz_answers


def apply_auto_grade(submission, assignment, questions, answers, graded_by):
    """Run the quiz grader and store its result on the (unsaved) submission."""
    result = auto_grade_quiz(questions, assignment.total_points, answers)
    graded_by_id = {entry["question_id"]: entry for entry in result["graded_answers"]}

    for quiz_answer in submission.quiz_answers:
        graded = graded_by_id.get(quiz_answer["question_id"])
        if graded:
            quiz_answer["is_correct"] = graded["is_correct"]
            quiz_answer["earned_points"] = graded["earned_points"]

    submission.set_grade(result["earned_points"], result["percentage"], graded_by=graded_by)
    submission.rubric = [
        {
            "criterion": f"Question {entry['question_id']}",
            "max_points": entry["points"],
            "earned_points": entry["earned_points"],
            "comment": "Correct" if entry["is_correct"] else f"Incorrect. Correct answer: {entry['correct_answer']}",
        }
        for entry in result["graded_answers"]
    ]
    submission.status = "graded"
    return result


@extend_schema_view(
    retrieve=extend_schema(summary="Retrieve a submission", tags=["Submissions"]),
    by_assignment=extend_schema(
        summary="Submit to an assignment (POST) or list its submissions (GET)",
        tags=["Submissions"],
        request=SubmissionCreateSerializer,
        responses=APIResponseSerializer,
    ),
    by_assignment_student=extend_schema(summary="Get one student's submission", tags=["Submissions"]),
    grade=extend_schema(summary="Grade a submission", tags=["Grading"], request=GradeSubmissionSerializer),
    resubmit=extend_schema(summary="Resubmit an assignment", tags=["Submissions"], request=ResubmitSerializer),
    add_attachments=extend_schema(
        summary="Add attachments to a submission", tags=["Submissions"], request=AddAttachmentsSerializer
    ),
    remove_attachment=extend_schema(summary="Remove an attachment", tags=["Submissions"]),
    history=extend_schema(summary="Submission version history", tags=["Submissions"]),
    plagiarism=extend_schema(
        summary="Update plagiarism report", tags=["Grading"], request=PlagiarismReportSerializer
    ),
    achievements=extend_schema(summary="Award an achievement", tags=["Grading"], request=AchievementSerializer),
)
class SubmissionViewSet(mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """Student submissions and their grading lifecycle."""

    queryset = Submission.objects.select_related("assignment", "assignment__course", "student")
    serializer_class = SubmissionSerializer

    STUDENT_ACTIONS = {"resubmit", "add_attachments", "remove_attachment"}
    GRADER_ACTIONS = {"grade", "plagiarism"}

    def get_permissions(self):
        if self.action in self.STUDENT_ACTIONS:
            return [IsStudent()]
        if self.action in self.GRADER_ACTIONS:
            return [IsInstructorOrAdmin()]
        if self.action == "achievements":
            return [IsAdmin()]
        if self.action == "by_assignment" and self.request.method == "POST":
            return [IsStudent()]
        if self.action == "by_assignment":
            return [IsInstructorOrAdmin()]
        return [permissions.IsAuthenticated()]

    def lock(self, submission):
        """Re-read the submission with a row lock; call inside transaction.atomic()."""
        return Submission.objects.select_for_update().get(pk=submission.pk)

    def retrieve(self, request, *args, **kwargs):
        submission = self.get_object()
        user = request.user
        if user.role == "student" and submission.student_id != user.id:
            return api_response(False, "Access denied.", {}, status.HTTP_403_FORBIDDEN)
        if user.role == "instructor" and not can_manage_assignment(user, submission.assignment):
            return api_response(False, "Access denied.", {}, status.HTTP_403_FORBIDDEN)
        return api_response(True, "Submission retrieved successfully", self.get_serializer(submission).data)

    # ----------------------------
    # Per-assignment endpoints
    # ----------------------------

    @action(detail=False, methods=["get", "post"], url_path=r"assignment/(?P<assignment_id>[^/.]+)")
    def by_assignment(self, request, assignment_id=None):
        assignment = get_object_or_404(Assignment.objects.select_related("course"), pk=assignment_id)
        if request.method == "POST":
            return self._create_submission(request, assignment)

        if not can_manage_assignment(request.user, assignment):
            return api_response(False, "Access denied.", {}, status.HTTP_403_FORBIDDEN)

        submissions = self.get_queryset().filter(assignment=assignment).order_by("-submitted_at")
        data = self.get_serializer(submissions, many=True).data
        return api_response(True, "Submissions retrieved successfully", data)

    def _create_submission(self, request, assignment):
        student = request.user

        if not assignment.is_published:
            return api_response(False, "Assignment not found.", {}, status.HTTP_404_NOT_FOUND)
        if not Enrollment.objects.filter(student=student, course=assignment.course, status="enrolled").exists():
            return api_response(False, "You are not enrolled in this course.", {}, status.HTTP_403_FORBIDDEN)
        if Submission.objects.filter(assignment=assignment, student=student).exists():
            return api_response(
                False,
                "Submission already exists. Use resubmit endpoint to update.",
                {},
                status.HTTP_400_BAD_REQUEST,
            )
        if assignment.is_overdue and not assignment.allow_late_submission:
            return api_response(
                False, "Late submissions are not allowed for this assignment.", {}, status.HTTP_400_BAD_REQUEST
            )

        serializer = SubmissionCreateSerializer(
            data=request.data, context={"request": request, "assignment": assignment}
        )
        serializer.is_valid(raise_exception=True)
        payload = serializer.validated_data

        submission = Submission(assignment=assignment, student=student, submitted_at=timezone.now())
        auto_graded = False

        if assignment.type in Assignment.QUESTION_BASED_TYPES:
            questions = list(assignment.questions.all())
            answers = payload["answers"]
            submission.quiz_answers = build_quiz_answers(questions, answers)
            if assignment.auto_grade_enabled:
                result = apply_auto_grade(submission, assignment, questions, answers, graded_by=student)
                auto_graded = True
                logger.info(
                    "Auto-graded submission of %s for %s: %s%%",
                    student.email,
                    assignment.pk,
                    result["percentage"],
                )
        else:
            submission.submission_text = payload.get("submission_text", "")
            submission.attachments = payload.get("attachments", [])

        try:
            with transaction.atomic():
                submission.save()
        except IntegrityError:
            return api_response(
                False,
                "Submission already exists. Use resubmit endpoint to update.",
                {},
                status.HTTP_400_BAD_REQUEST,
            )

        message = (
            "Submission created and auto-graded successfully" if auto_graded else "Submission created successfully"
        )
        data = self.get_serializer(submission).data
        data["auto_graded"] = auto_graded
        return api_response(True, message, data, status.HTTP_201_CREATED)

    @action(
        detail=False,
        methods=["get"],
        url_path=r"assignment/(?P<assignment_id>[^/.]+)/student/(?P<student_id>[^/.]+)",
    )
    def by_assignment_student(self, request, assignment_id=None, student_id=None):
        user = request.user
        if user.role == "student" and str(user.id) != str(student_id):
            return api_response(False, "Access denied.", {}, status.HTTP_403_FORBIDDEN)

        submission = self.get_queryset().filter(assignment_id=assignment_id, student_id=student_id).first()
        if submission is None:
            return api_response(False, "Submission not found.", {}, status.HTTP_404_NOT_FOUND)
        if user.role == "instructor" and not can_manage_assignment(user, submission.assignment):
            return api_response(False, "Access denied.", {}, status.HTTP_403_FORBIDDEN)

        return api_response(True, "Submission retrieved successfully", self.get_serializer(submission).data)

    # ----------------------------
    # Grading
    # ----------------------------

    @action(detail=True, methods=["put"])
    def grade(self, request, pk=None):
        submission = self.get_object()
        assignment = submission.assignment
        if not can_manage_assignment(request.user, assignment):
            return api_response(False, "Access denied.", {}, status.HTTP_403_FORBIDDEN)

        serializer = GradeSubmissionSerializer(data=request.data, context={"assignment": assignment})
        serializer.is_valid(raise_exception=True)
        points = serializer.validated_data["points"]

        with transaction.atomic():
            submission = self.lock(submission)
            submission.set_grade(points, points / assignment.total_points * 100, graded_by=request.user)
            if "feedback" in serializer.validated_data:
                submission.feedback = serializer.validated_data["feedback"]
            if "rubric" in serializer.validated_data:
                submission.rubric = serializer.validated_data["rubric"]
            submission.status = "graded"
            submission.save()

        logger.info(
            "Submission %s graded by %s: %s (%s)",
            submission.pk,
            request.user.email,
            points,
            submission.letter_grade,
        )
        return api_response(True, "Submission graded successfully", self.get_serializer(submission).data)

    @action(detail=True, methods=["put"])
    def plagiarism(self, request, pk=None):
        submission = self.get_object()
        if not can_manage_assignment(request.user, submission.assignment):
            return api_response(False, "Access denied.", {}, status.HTTP_403_FORBIDDEN)

        serializer = PlagiarismReportSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        with transaction.atomic():
            submission = self.lock(submission)
            report = dict(submission.plagiarism_report or {})
            report.update(serializer.validated_data)
            report["scanned_at"] = timezone.now().isoformat()
            submission.plagiarism_report = report
            submission.save()

        return api_response(True, "Plagiarism report updated successfully", submission.plagiarism_report)

    @action(detail=True, methods=["post"])
    def achievements(self, request, pk=None):
        submission = self.get_object()
        serializer = AchievementSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        badge_id = serializer.validated_data["badge_id"]

        with transaction.atomic():
            submission = self.lock(submission)
            if any(item.get("badge_id") == badge_id for item in submission.achievements):
                return api_response(False, "Achievement already awarded.", {}, status.HTTP_400_BAD_REQUEST)

            achievement = {
                "badge_id": badge_id,
                "level_achieved": serializer.validated_data["level_achieved"],
                "earned_at": timezone.now().isoformat(),
            }
            submission.achievements = list(submission.achievements) + [achievement]
            submission.save()

        return api_response(True, "Achievement awarded successfully", achievement, status.HTTP_201_CREATED)

    # ----------------------------
    # Student updates
    # ----------------------------

    def _owned_by_caller(self, submission):
        return submission.student_id == self.request.user.id

    @action(detail=True, methods=["put"])
    def resubmit(self, request, pk=None):
        submission = self.get_object()
        if not self._owned_by_caller(submission):
            return api_response(False, "Access denied.", {}, status.HTTP_403_FORBIDDEN)

        assignment = submission.assignment
        if not assignment.allow_late_submission and submission.is_late:
            return api_response(
                False, "Late submissions are not allowed for this assignment.", {}, status.HTTP_400_BAD_REQUEST
            )

        serializer = ResubmitSerializer(data=request.data, context={"request": request, "assignment": assignment})
        serializer.is_valid(raise_exception=True)

        with transaction.atomic():
            submission = self.lock(submission)
            submission.record_history(updated_by=request.user)
            if "submission_text" in serializer.validated_data:
                submission.submission_text = serializer.validated_data["submission_text"]
            if "attachments" in serializer.validated_data:
                submission.attachments = serializer.validated_data["attachments"]
            submission.resubmission_count += 1
            submission.status = "resubmitted"
            # A new submitted_at makes save() recompute is_late
            submission.submitted_at = timezone.now()
            submission.save()

        logger.info("Submission %s resubmitted (%s)", submission.pk, submission.resubmission_count)
        data = self.get_serializer(submission).data
        return api_response(True, "Submission resubmitted successfully", data)

    @action(detail=True, methods=["post"], url_path="attachments")
    def add_attachments(self, request, pk=None):
        submission = self.get_object()
        if not self._owned_by_caller(submission):
            return api_response(False, "Access denied.", {}, status.HTTP_403_FORBIDDEN)

        serializer = AddAttachmentsSerializer(data=request.data, context={"assignment": submission.assignment})
        serializer.is_valid(raise_exception=True)

        with transaction.atomic():
            submission = self.lock(submission)
            submission.attachments = list(submission.attachments) + list(serializer.validated_data["attachments"])
            submission.save()

        return api_response(True, "Attachments added successfully", submission.attachments)

    @action(detail=True, methods=["delete"], url_path=r"attachments/(?P<filename>[^/]+)")
    def remove_attachment(self, request, pk=None, filename=None):
        submission = self.get_object()
        if not self._owned_by_caller(submission):
            return api_response(False, "Access denied.", {}, status.HTTP_403_FORBIDDEN)

        with transaction.atomic():
            submission = self.lock(submission)
            remaining = [item for item in submission.attachments if item.get("filename") != filename]
            if len(remaining) == len(submission.attachments):
                return api_response(False, "Attachment not found.", {}, status.HTTP_404_NOT_FOUND)
            submission.attachments = remaining
            submission.save()

        return api_response(True, "Attachment removed successfully", submission.attachments)

    @action(detail=True, methods=["get"])
    def history(self, request, pk=None):
        submission = self.get_object()
        user = request.user
        if user.role == "student" and not self._owned_by_caller(submission):
            return api_response(False, "Access denied.", {}, status.HTTP_403_FORBIDDEN)

        return api_response(
            True,
            "Submission history retrieved successfully",
            {"history": submission.history, "resubmission_count": submission.resubmission_count},
        )
