from django.urls import path
from . import views

app_name = 'orders'

urlpatterns = [
    # Orders
    path('orders/', views.OrderListCreateView.as_view(), name='order-list-create'),
    path('orders/<int:pk>/', views.OrderDetailView.as_view(), name='order-detail'),
    path('orders/<int:pk>/status/', views.order_status, name='order-status'),

    # Rooms
    path('rooms/', views.RoomListCreateView.as_view(), name='room-list-create'),
    path('rooms/<int:pk>/', views.RoomRetrieveUpdateDestroyView.as_view(), name='room-detail'),

    # Tables
    path('tables/', views.TableListCreateView.as_view(), name='table-list-create'),
    path('tables/regenerate-qr/', views.regenerate_qr_codes, name='table-regenerate-qr'),
    path('tables/by-number/<int:number>/', views.table_by_number, name='table-by-number'),
    path('tables/<int:pk>/', views.TableRetrieveUpdateDestroyView.as_view(), name='table-detail'),
    path('tables/<int:pk>/position/', views.table_position, name='table-position'),
    path('tables/<int:pk>/status/', views.table_status, name='table-status'),
    path('tables/<int:pk>/generate-qr/', views.table_generate_qr, name='table-generate-qr'),
]
