"""Model package exports.

Provides convenient imports for commonly used models.
"""

from .models_assignment import Assignment, AssignmentQuestion
from .models_attendance import Attendance, AttendanceRecord
from .models_auth import CustomUser, Profile
from .models_course import Course, CourseModule, Lecture
from .models_enrollment import Enrollment
from .models_progress import CourseProgress
from .models_submission import Submission
