# core/permissions.py

"""
CUSTOM PERMISSIONS

Reusable permission classes for API views.
"""

from rest_framework.permissions import BasePermission

from programs.services.access import is_owner_or_admin
from users.services.session import SessionSnapshot


class IsAdmin(BasePermission):
    """
    Permission check for admin users.
    """

    message = "Only admins can access this resource."

    def has_permission(self, request, view):
        return bool(
            request.user and
            request.user.is_authenticated and
            request.user.role == "ADMIN"
        )


class IsTrainerOrAdmin(BasePermission):
    """
    Trainers author programs, admins manage everything.
    """

    message = "Only trainers and admins can access this resource."

    def has_permission(self, request, view):
        return bool(
            request.user and
            request.user.is_authenticated and
            request.user.role in ("TRAINER", "ADMIN")
        )


class IsOwnerOrAdmin(BasePermission):
    """
    Program trainer or admin.

    Object-level only: views call check_object_permissions with a Program,
    or any object with a `program` attribute such as a Workout. Role is read
    from the database row, never from token claims.
    """

    message = "You do not own this program."

    def has_object_permission(self, request, view, obj):
        program = getattr(obj, "program", obj)
        session = SessionSnapshot.from_user(request.user)
        return is_owner_or_admin(session, program)
