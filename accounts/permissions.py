"""
Custom permissions for role-based access
"""
from rest_framework import permissions

from accounts.models import User


def _has_role(request, *roles):
    return bool(
        request.user and
        request.user.is_authenticated and
        request.user.role in roles
    )


class IsStudent(permissions.BasePermission):
    """Permission check for student role"""
    message = 'Student access required.'

    def has_permission(self, request, view):
        return _has_role(request, User.ROLE_STUDENT)


class IsTeacherOrAdmin(permissions.BasePermission):
    """Exam authors: teachers and admins"""
    message = 'Teacher or admin access required.'

    def has_permission(self, request, view):
        return _has_role(request, User.ROLE_TEACHER, User.ROLE_ADMIN)
