"""
Request-scoped tenant context.

Services never read the tenant from global state: views build a
``RestaurantContext`` from the request and hand it to every service they
instantiate.
"""
from dataclasses import dataclass
from typing import Optional

from django.db.models import QuerySet

from .models import Restaurant, RestaurantUser


@dataclass(frozen=True)
class RestaurantContext:
    restaurant: Restaurant
    user: Optional[object] = None
    membership: Optional[RestaurantUser] = None

    @property
    def restaurant_id(self):
        return self.restaurant.pk

    def scope(self, queryset: QuerySet, field: str = 'restaurant') -> QuerySet:
        """Filter ``queryset`` down to rows owned by this restaurant"""
        return queryset.filter(**{field: self.restaurant})

    @property
    def can_manage(self):
        return self.membership is not None and self.membership.can_manage


def resolve_restaurant(request):
    """
    Resolve the active restaurant for ``request``.

    The ``X-Restaurant-Code`` header (set on ``request.current_restaurant`` by
    ``RestaurantMiddleware``) wins; otherwise an authenticated user with a
    single active membership gets that restaurant. The result is cached on
    the request.
    """
    if hasattr(request, '_restaurant_context'):
        return request._restaurant_context

    restaurant = getattr(request, 'current_restaurant', None)
    user = getattr(request, 'user', None)
    membership = None

    if user is not None and user.is_authenticated:
        memberships = RestaurantUser.objects.select_related('restaurant').filter(
            user=user,
            is_active=True,
            restaurant__is_active=True,
        )
        if restaurant is not None:
            membership = memberships.filter(restaurant=restaurant).first()
        else:
            found = list(memberships[:2])
            if len(found) == 1:
                membership = found[0]
                restaurant = membership.restaurant

    context = None
    if restaurant is not None:
        context = RestaurantContext(restaurant=restaurant, user=user, membership=membership)
    request._restaurant_context = context
    return context
