from rest_framework import permissions
from .models import User


def _has_role(request, roles):
    user = request.user
    return bool(user and user.is_authenticated and getattr(user, "role", None) in roles)


class IsManagerOrHigher(permissions.BasePermission):
    def has_permission(self, request, view):
        return _has_role(request, [
            User.Role.OWNER,
            User.Role.ADMIN,
            User.Role.MANAGER,
        ])


class IsCashierOrHigher(permissions.BasePermission):
    """
    Cash-handling actions: payments, payouts and rider settlements.
    """

    def has_permission(self, request, view):
        return _has_role(request, [
            User.Role.OWNER,
            User.Role.ADMIN,
            User.Role.MANAGER,
            User.Role.CASHIER,
        ])


class IsPosStaff(permissions.BasePermission):
    """
    Any authenticated terminal operator (waiters, kitchen, cashiers, managers).
    """

    def has_permission(self, request, view):
        return bool(
            request.user
            and request.user.is_authenticated
            and (request.user.is_pos_staff or request.user.is_manager_or_higher)
        )
