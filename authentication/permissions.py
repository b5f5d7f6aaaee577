from rest_framework import permissions

from .context import resolve_restaurant


class HasRestaurantContext(permissions.BasePermission):
    """
    Permission for public endpoints (QR ordering): only a resolvable,
    active restaurant is required.
    """
    message = 'Aucun restaurant sélectionné'

    def has_permission(self, request, view):
        return resolve_restaurant(request) is not None


class IsRestaurantMember(permissions.BasePermission):
    """
    Permission to only allow active members of the current restaurant
    """
    message = 'Accès au restaurant refusé'

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        context = resolve_restaurant(request)
        return context is not None and context.membership is not None


class IsRestaurantManager(permissions.BasePermission):
    """
    Permission to only allow restaurateurs and managers
    """
    message = 'Droits insuffisants'

    def has_permission(self, request, view):
        if not IsRestaurantMember().has_permission(request, view):
            return False
        return resolve_restaurant(request).can_manage


class IsManagerOrReadOnly(permissions.BasePermission):
    """
    Members may read, restaurateurs and managers may write
    """
    def has_permission(self, request, view):
        if request.method in permissions.SAFE_METHODS:
            return IsRestaurantMember().has_permission(request, view)
        return IsRestaurantManager().has_permission(request, view)
