from django.contrib import admin

from .models import Order, Room, Table


class TableInline(admin.TabularInline):
    model = Table
    extra = 0
    readonly_fields = ("qr_code",)


@admin.register(Room)
class RoomAdmin(admin.ModelAdmin):
    list_display = ("name", "restaurant", "color")
    list_filter = ("restaurant",)
    inlines = [TableInline]


@admin.register(Table)
class TableAdmin(admin.ModelAdmin):
    list_display = ("number", "room", "capacity", "status")
    list_filter = ("room__restaurant", "status")
    readonly_fields = ("qr_code",)


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("id", "restaurant", "table", "total_amount", "status", "created_at")
    list_filter = ("restaurant", "status")
    readonly_fields = ("items", "total_amount", "allergies", "created_at", "updated_at")
