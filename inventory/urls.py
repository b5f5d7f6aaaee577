from django.urls import path
from . import views

app_name = 'inventory'


urlpatterns = [
    # Menu URLs
    path('menu/', views.MenuItemListCreateView.as_view(), name='menu-list-create'),
    path('menu/init/', views.init_menu, name='menu-init'),
    path('menu/<int:pk>/', views.MenuItemRetrieveUpdateDestroyView.as_view(), name='menu-detail'),
    path('menu/<int:pk>/recipe/', views.menu_item_recipe, name='menu-recipe'),
    path('menu/<int:pk>/stock/', views.menu_item_stock, name='menu-stock'),

    # Ingredient URLs
    path('ingredients/', views.IngredientListCreateView.as_view(), name='ingredient-list-create'),
    path('ingredients/low-stock/', views.LowStockIngredientListView.as_view(), name='ingredient-low-stock'),
    path('ingredients/<int:pk>/', views.IngredientRetrieveUpdateDestroyView.as_view(), name='ingredient-detail'),

    # Stock movements
    path('stock-movements/', views.StockMovementListCreateView.as_view(), name='stock-movements'),
    path('ingredient-movements/', views.IngredientMovementListCreateView.as_view(), name='ingredient-movements'),
]
