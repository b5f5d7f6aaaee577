from rest_framework.exceptions import PermissionDenied

from .context import resolve_restaurant


class RestaurantContextMixin:
    """Mixin to resolve the request's restaurant and scope querysets to it"""
    restaurant_field = 'restaurant'

    def get_restaurant_context(self):
        context = resolve_restaurant(self.request)
        if context is None:
            raise PermissionDenied("Aucun restaurant sélectionné")
        return context

    def get_queryset(self):
        """Filter queryset by the current restaurant"""
        queryset = super().get_queryset()
        # drf-yasg introspects views without a real request
        if getattr(self, 'swagger_fake_view', False):
            return queryset.none()
        return self.get_restaurant_context().scope(queryset, self.restaurant_field)

    def get_serializer_context(self):
        """Add the restaurant context to serializers"""
        context = super().get_serializer_context()
        if not getattr(self, 'swagger_fake_view', False):
            context['restaurant_context'] = self.get_restaurant_context()
        return context
