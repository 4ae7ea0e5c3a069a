"""Role-based DRF permissions"""
from rest_framework.permissions import BasePermission, SAFE_METHODS


def is_admin_user(user):
    return bool(user and user.is_authenticated and (user.role == 'admin' or user.is_superuser))


def is_supplier_user(user):
    return bool(user and user.is_authenticated and user.role == 'supplier')


class IsAdminRole(BasePermission):
    message = 'Admin access required.'

    def has_permission(self, request, view):
        return is_admin_user(request.user)


class IsSupplierRole(BasePermission):
    message = 'Supplier access required.'

    def has_permission(self, request, view):
        return is_supplier_user(request.user)


class IsSupplierOrAdmin(BasePermission):
    message = 'Supplier or admin access required.'

    def has_permission(self, request, view):
        return is_supplier_user(request.user) or is_admin_user(request.user)


class IsAdminOrReadOnly(BasePermission):
    """Anyone may read; only admins may write"""

    def has_permission(self, request, view):
        if request.method in SAFE_METHODS:
            return True
        return is_admin_user(request.user)


class IsSupplierOrAdminOrReadOnly(BasePermission):
    """Anyone may read; suppliers and admins may write"""

    def has_permission(self, request, view):
        if request.method in SAFE_METHODS:
            return True
        return is_supplier_user(request.user) or is_admin_user(request.user)
