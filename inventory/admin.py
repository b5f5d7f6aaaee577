from django.contrib import admin

from .models import Ingredient, MenuItem, MenuItemIngredient, StockMovement


class RecipeLineInline(admin.TabularInline):
    model = MenuItemIngredient
    extra = 0


@admin.register(MenuItem)
class MenuItemAdmin(admin.ModelAdmin):
    list_display = ("name", "restaurant", "category", "price", "stock_quantity", "is_available")
    list_filter = ("restaurant", "category", "is_available")
    search_fields = ("name",)
    inlines = [RecipeLineInline]


@admin.register(Ingredient)
class IngredientAdmin(admin.ModelAdmin):
    list_display = ("name", "restaurant", "unit", "stock_quantity", "min_quantity", "is_active")
    list_filter = ("restaurant", "is_active")
    search_fields = ("name", "supplier")


@admin.register(StockMovement)
class StockMovementAdmin(admin.ModelAdmin):
    list_display = ("created_at", "restaurant", "ingredient", "menu_item", "movement_type", "quantity", "reason")
    list_filter = ("restaurant", "movement_type")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
