"""
CORE App - Role Permissions

Role gating for the two surfaces:
- Admin dashboard: role 'admin' and active
- Courier app: role 'repartidor' and active
"""

from rest_framework import permissions

from .models import UserRole


def _has_role(request, role) -> bool:
    user = request.user
    return bool(
        user and
        user.is_authenticated and
        user.role == role and
        user.is_active
    )


class IsAdmin(permissions.BasePermission):
    """Allow only active administrators."""

    message = 'Acceso restringido a administradores'

    def has_permission(self, request, view):
        return _has_role(request, UserRole.ADMIN)


class IsCourier(permissions.BasePermission):
    """Allow only active couriers (repartidores)."""

    message = 'Acceso restringido a repartidores'

    def has_permission(self, request, view):
        return _has_role(request, UserRole.COURIER)
