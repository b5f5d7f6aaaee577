from django.conf import settings
from django.db import models


class TimeStampedModel(models.Model):
    """Base model with created_at and updated_at fields"""
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


# =============== RESTAURANT (TENANT) ===============

class Restaurant(TimeStampedModel):
    """A tenant: every menu, stock, table and order row is scoped to one restaurant"""
    name = models.CharField(max_length=255)
    code = models.SlugField(max_length=50, unique=True)
    owner_name = models.CharField(max_length=255, blank=True)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=20, blank=True)
    address = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = 'restaurants'
        ordering = ['name']

    def __str__(self):
        return f"{self.name} ({self.code})"


# =============== MEMBERSHIP ===============

class RestaurantUser(TimeStampedModel):
    """Restaurant-User relationship with roles"""
    RESTAURATEUR = 'restaurateur'
    MANAGER = 'manager'
    EMPLOYE = 'employe'
    ROLES = [
        (RESTAURATEUR, 'Restaurateur'),
        (MANAGER, 'Manager'),
        (EMPLOYE, 'Employé'),
    ]
    MANAGEMENT_ROLES = (RESTAURATEUR, MANAGER)

    restaurant = models.ForeignKey(Restaurant, on_delete=models.CASCADE, related_name='members')
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='restaurant_memberships')
    role = models.CharField(max_length=20, choices=ROLES, default=EMPLOYE)
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = 'restaurant_users'
        unique_together = ['restaurant', 'user']

    def __str__(self):
        return f"{self.user} @ {self.restaurant.code} ({self.role})"

    @property
    def can_manage(self):
        return self.role in self.MANAGEMENT_ROLES
