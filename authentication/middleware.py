# =============== MIDDLEWARE FOR RESTAURANT CONTEXT ===============
from .models import Restaurant


class RestaurantMiddleware:
    """Middleware to set the current restaurant from the X-Restaurant-Code header"""
    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        code = request.META.get('HTTP_X_RESTAURANT_CODE')

        request.current_restaurant = None
        if code:
            request.current_restaurant = Restaurant.objects.filter(
                code=code.strip(), is_active=True
            ).first()

        response = self.get_response(request)
        return response
