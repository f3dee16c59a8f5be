"""URL configuration for the API app.

Registers viewsets with a router and exposes auth, profile, progress and
attendance endpoints used by the frontend and by automated tests.
"""

from django.urls import path
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenRefreshView

from api.views.views_assignment import AssignmentViewSet
from api.views.views_attendance import AttendanceCreateView, CourseAttendanceView, StudentAttendanceView
from api.views.views_auth import (AdminUserViewSet, CurrentUserProfileView,
                                  InstructorDocumentUploadView,
                                  LoginView, LogoutView, PasswordChangeView,
                                  PasswordResetConfirmView, PasswordResetView,
                                  RegisterView)
from api.views.views_course import CourseViewSet
from api.views.views_progress import (CourseProgressExportView,
                                      CourseProgressView,
                                      CourseStudentsProgressView,
                                      InitializeProgressView,
                                      StudentCoursesProgressView,
                                      ToggleLectureView)
from api.views.views_submission import SubmissionViewSet

router = DefaultRouter()

router.register(r"admin/users", AdminUserViewSet, basename="admin-user")
router.register(r"courses", CourseViewSet, basename="course")
router.register(r"assignments", AssignmentViewSet, basename="assignment")
router.register(r"submissions", SubmissionViewSet, basename="submission")


urlpatterns = router.urls + [
    # =============================================
    # AUTHENTICATION & PROFILE ENDPOINTS
    # =============================================
    path("auth/register/", RegisterView.as_view(), name="register"),
    path("auth/login/", LoginView.as_view(), name="login"),
    path("auth/logout/", LogoutView.as_view(), name="logout"),
    path("auth/token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
    # Generic current-user profile endpoint for all authenticated roles
    path("auth/me/", CurrentUserProfileView.as_view(), name="my-profile"),
    path("auth/upload-documents/", InstructorDocumentUploadView.as_view(), name="upload-documents"),
    path("auth/change-password/", PasswordChangeView.as_view(), name="change-password"),
    path("auth/password-reset/", PasswordResetView.as_view(), name="password-reset"),
    path(
        "auth/password-reset/confirm/",
        PasswordResetConfirmView.as_view(),
        name="password-reset-confirm",
    ),
    # =============================================
    # PROGRESS ENDPOINTS
    # =============================================
    path(
        "progress/course/<uuid:course_id>/",
        CourseProgressView.as_view(),
        name="progress-course",
    ),
    path(
        "progress/course/<uuid:course_id>/students/",
        CourseStudentsProgressView.as_view(),
        name="progress-course-students",
    ),
    path(
        "progress/course/<uuid:course_id>/students/export/",
        CourseProgressExportView.as_view(),
        name="progress-course-export",
    ),
    path(
        "progress/lecture/<uuid:course_id>/<uuid:module_id>/<uuid:lecture_id>/toggle/",
        ToggleLectureView.as_view(),
        name="progress-lecture-toggle",
    ),
    path(
        "progress/student/<uuid:student_id>/courses/",
        StudentCoursesProgressView.as_view(),
        name="progress-student-courses",
    ),
    path(
        "progress/initialize/<uuid:course_id>/",
        InitializeProgressView.as_view(),
        name="progress-initialize",
    ),
    # =============================================
    # ATTENDANCE ENDPOINTS
    # =============================================
    path("attendance/", AttendanceCreateView.as_view(), name="attendance-create"),
    path(
        "attendance/course/<uuid:course_id>/",
        CourseAttendanceView.as_view(),
        name="attendance-course",
    ),
    path(
        "attendance/student/<uuid:student_id>/",
        StudentAttendanceView.as_view(),
        name="attendance-student",
    ),
]
