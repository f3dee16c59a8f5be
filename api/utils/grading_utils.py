# api/utils/grading_utils.py
"""Grading helpers: quiz auto-grading, letter grades and late penalties."""

from decimal import Decimal, ROUND_HALF_UP

MULTIPLE_CHOICE = "multiple-choice"

LETTER_GRADE_THRESHOLDS = (
    (97, "A+"),
    (93, "A"),
    (90, "A-"),
    (87, "B+"),
    (83, "B"),
    (80, "B-"),
    (77, "C+"),
    (73, "C"),
    (70, "C-"),
    (67, "D+"),
    (60, "D"),
)


def apply_late_penalty(marks, penalty_percentage):
    if marks is None:
        return marks

    marks = Decimal(str(marks))
    penalty_percentage = Decimal(str(penalty_percentage))
    if penalty_percentage <= 0:
        return marks

    penalty_amount = (
        marks * penalty_percentage / Decimal('100')
    ).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)

    return max(
        (marks - penalty_amount).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP),
        Decimal('0.00')
    )


def get_letter_grade(percentage):
    """Map a percentage to a letter; the first threshold it reaches wins."""
    for lower_bound, letter in LETTER_GRADE_THRESHOLDS:
        if percentage >= lower_bound:
            return letter
    return "F"


def answers_match(answer, correct):
    """Strict equality: no str/int coercion, and booleans only match booleans."""
    if answer is None:
        return False
    if isinstance(answer, bool) or isinstance(correct, bool):
        return isinstance(answer, bool) and isinstance(correct, bool) and answer == correct
    numeric = (int, float)
    if isinstance(answer, numeric) and isinstance(correct, numeric):
        return answer == correct
    return type(answer) is type(correct) and answer == correct


def _question_value(question, name, default=None):
    if isinstance(question, dict):
        return question.get(name, default)
    return getattr(question, name, default)


def auto_grade_quiz(questions, total_points, answers):
    """Score multiple-choice answers and rescale to the assignment's points.

    ``questions`` are ``AssignmentQuestion`` rows or dicts with ``id``,
    ``type``, ``points`` and ``correct_option``. ``answers`` is a list of
    ``{"questionId" | "question_id": ..., "answer": ...}``.

    Written questions and answers to unknown questions are skipped: they add
    nothing to either side of the ratio and produce no graded entry.

    The result keeps both stages: the raw question-point totals and the
    final ``earned_points`` rescaled to ``total_points``.
    """
    questions_by_id = {str(_question_value(q, "id")): q for q in questions}

    question_points = 0
    earned_question_points = 0
    graded_answers = []

    for student_answer in answers or []:
        question_id = str(student_answer.get("questionId", student_answer.get("question_id")))
        question = questions_by_id.get(question_id)
        if question is None or _question_value(question, "type") != MULTIPLE_CHOICE:
            continue

        points = _question_value(question, "points") or 1
        correct_option = _question_value(question, "correct_option")
        answer = student_answer.get("answer")
        is_correct = answers_match(answer, correct_option)

        question_points += points
        if is_correct:
            earned_question_points += points

        graded_answers.append(
            {
                "question_id": question_id,
                "student_answer": answer,
                "correct_answer": correct_option,
                "is_correct": is_correct,
                "points": points,
                "earned_points": points if is_correct else 0,
            }
        )

    if question_points:
        percentage = earned_question_points / question_points * 100
        earned_points = earned_question_points / question_points * total_points
    else:
        percentage = 0
        earned_points = 0

    return {
        "total_points": total_points,
        "question_points": question_points,
        "earned_question_points": earned_question_points,
        "earned_points": earned_points,
        "percentage": percentage,
        "graded_answers": graded_answers,
    }
