"""Custom DRF permission classes for role-based access control.

Defines simple permission classes like IsAdmin, IsInstructor, IsApprovedInstructor
and IsStudent used throughout API view authorization. IsOwnerInstructorOrAdmin covers
object-level ownership for viewsets; the function-based checks next to row
lookups in the progress and attendance views do the same for plain APIViews.
"""

from rest_framework import permissions


class IsAdmin(permissions.BasePermission):
    """
    Only admin users can access.
    """
    def has_permission(self, request, view):
        """
        Check if the user is authenticated and has a role of admin.
        """
        return request.user.is_authenticated and request.user.role == "admin"


class IsApprovedInstructor(permissions.BasePermission):
    """
    Only instructors that an admin has approved can access.
    """
    message = "Instructor account is pending approval."

    def has_permission(self, request, view):
        """
        Check if the user is an authenticated instructor with is_approved set.
        """
        user = request.user
        return user.is_authenticated and user.role == "instructor" and user.is_approved


class IsInstructor(permissions.BasePermission):
    """
    Any instructor, approved or not, can access.
    """
    def has_permission(self, request, view):
        return request.user.is_authenticated and request.user.role == "instructor"


class IsStudent(permissions.BasePermission):
    """
    Only students can access.
    """
    def has_permission(self, request, view):
        """
        Check if the user is authenticated and has a role of student.
        """
        return request.user.is_authenticated and request.user.role == "student"


class IsInstructorOrAdmin(permissions.BasePermission):
    """
    Instructors and admins can access.
    """
    def has_permission(self, request, view):
        return request.user.is_authenticated and request.user.role in ["instructor", "admin"]


class IsApprovedInstructorOrAdmin(permissions.BasePermission):
    """
    Approved instructors and admins can access.
    Used for authoring courses and assignments.
    """
    message = "Only approved instructors or admins can perform this action."

    def has_permission(self, request, view):
        user = request.user
        if not user.is_authenticated:
            return False
        if user.role == "admin":
            return True
        return user.role == "instructor" and user.is_approved


class IsOwnerInstructorOrAdmin(permissions.BasePermission):
    """
    Object-level check: admins, or the instructor who owns the object.
    Works for any model with an ``instructor`` foreign key.
    """
    message = "You can only manage your own courses and assignments."

    def has_permission(self, request, view):
        return request.user.is_authenticated

    def has_object_permission(self, request, view, obj):
        user = request.user
        if user.role == "admin":
            return True
        return user.role == "instructor" and obj.instructor_id == user.id
