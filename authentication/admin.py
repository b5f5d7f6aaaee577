from django.contrib import admin

from .models import Restaurant, RestaurantUser


class RestaurantUserInline(admin.TabularInline):
    model = RestaurantUser
    extra = 0


@admin.register(Restaurant)
class RestaurantAdmin(admin.ModelAdmin):
    list_display = ("name", "code", "is_active", "created_at")
    search_fields = ("name", "code")
    inlines = [RestaurantUserInline]
