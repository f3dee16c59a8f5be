"""Lecture progress computation.

Pure helpers over the JSON progress tree stored on ``CourseProgress``::

    {
        "<module_id>": {
            "completed": bool,
            "completed_at": iso-timestamp | None,
            "lectures_progress": {
                "<lecture_id>": {"completed": bool, "completed_at": iso-timestamp | None},
            },
        },
    }

The course side is passed in as an *outline*: an ordered mapping of module id
to the ordered list of its lecture ids. Nothing here touches the database
except ``course_outline``, which only reads.
"""

from decimal import ROUND_HALF_UP, Decimal

from django.utils import timezone


def course_outline(course):
    """Return ``{module_id: [lecture_id, ...]}`` for a course, in display order."""
    outline = {}
    for module in course.modules.prefetch_related("lectures").order_by("order", "id"):
        outline[str(module.id)] = [str(lecture.id) for lecture in module.lectures.all()]
    return outline


def _timestamp(now):
    return (now or timezone.now()).isoformat()


def round_percentage(completed, total):
    """Whole-number percentage, half rounded up. 0 when ``total`` is 0."""
    if not total:
        return 0
    value = Decimal(completed) * Decimal(100) / Decimal(total)
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def count_completed_lectures(modules_progress):
    """Count completed lecture entries across every module entry present."""
    completed = 0
    for module_progress in (modules_progress or {}).values():
        for lecture_progress in module_progress.get("lectures_progress", {}).values():
            if lecture_progress.get("completed"):
                completed += 1
    return completed


def compute_progress_stats(outline, modules_progress, now=None):
    """Derive the cached statistics of a progress record.

    The denominator always comes from the course outline, so lectures added
    after a student started raise the total on the next recompute. Only
    entries actually present in ``modules_progress`` are counted as complete.
    """
    total = sum(len(lecture_ids) for lecture_ids in outline.values())
    completed = count_completed_lectures(modules_progress)
    course_completed = total > 0 and completed == total

    return {
        "completed_lectures_count": completed,
        "total_lectures_count": total,
        "progress_percentage": round_percentage(completed, total),
        "completed": course_completed,
        "completed_at": (now or timezone.now()) if course_completed else None,
    }


def _empty_module_entry(lecture_ids):
    return {
        "completed": False,
        "completed_at": None,
        "lectures_progress": {
            lecture_id: {"completed": False, "completed_at": None} for lecture_id in lecture_ids
        },
    }


def seed_modules_progress(outline):
    """Full mirror of the course with every module and lecture incomplete."""
    return {module_id: _empty_module_entry(lecture_ids) for module_id, lecture_ids in outline.items()}


def toggle_lecture_progress(outline, modules_progress, module_id, lecture_id, now=None):
    """Flip one lecture's completion in place and return the new state.

    Missing module entries are created with a full lecture mirror taken from
    the outline; a missing lecture entry is appended on its own. The module
    is then marked complete when every lecture entry it currently holds is
    complete, which means a partially mirrored module can read as complete.
    """
    module_id = str(module_id)
    lecture_id = str(lecture_id)

    module_progress = modules_progress.get(module_id)
    if module_progress is None:
        module_progress = _empty_module_entry(outline.get(module_id, []))
        modules_progress[module_id] = module_progress

    lectures_progress = module_progress.setdefault("lectures_progress", {})
    lecture_progress = lectures_progress.get(lecture_id)
    if lecture_progress is None:
        lecture_progress = {"completed": False, "completed_at": None}
        lectures_progress[lecture_id] = lecture_progress

    lecture_progress["completed"] = not lecture_progress.get("completed", False)
    lecture_progress["completed_at"] = _timestamp(now) if lecture_progress["completed"] else None

    all_done = all(entry.get("completed") for entry in lectures_progress.values())
    module_progress["completed"] = all_done
    module_progress["completed_at"] = _timestamp(now) if all_done else None

    return lecture_progress["completed"]
