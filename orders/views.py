from rest_framework import generics, status, filters
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi

from authentication.context import resolve_restaurant
from authentication.mixins import RestaurantContextMixin
from authentication.permissions import (
    HasRestaurantContext, IsManagerOrReadOnly, IsRestaurantManager, IsRestaurantMember
)
from .models import Order, Room, Table
from .serializers import (
    OrderCreateSerializer, OrderSerializer, OrderStatusSerializer, RoomSerializer,
    TablePositionSerializer, TableSerializer, TableStatusSerializer
)
from .services import OrderLifecycleManager, TableState


# Order Views
class OrderListCreateView(RestaurantContextMixin, generics.ListCreateAPIView):
    """
    get: List the restaurant orders, newest first
    post: Submit a cart from the QR ordering page
    """
    serializer_class = OrderSerializer

    def get_permissions(self):
        if self.request.method == 'POST':
            return [HasRestaurantContext()]
        return [IsRestaurantMember()]

    def get_queryset(self):
        if getattr(self, 'swagger_fake_view', False):
            return Order.objects.none()
        manager = OrderLifecycleManager(self.get_restaurant_context())
        return manager.list_orders(status=self.request.query_params.get('status'))

    @swagger_auto_schema(
        manual_parameters=[
            openapi.Parameter('status', openapi.IN_QUERY, description="Filter by order status", type=openapi.TYPE_STRING),
        ]
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    @swagger_auto_schema(
        operation_description="Create an order, deduct recipe ingredients and occupy the table",
        request_body=OrderCreateSerializer,
        responses={
            201: openapi.Response(
                description="Order created",
                schema=openapi.Schema(
                    type=openapi.TYPE_OBJECT,
                    properties={
                        'id': openapi.Schema(type=openapi.TYPE_INTEGER),
                        'message': openapi.Schema(type=openapi.TYPE_STRING),
                    }
                )
            ),
            400: 'Bad Request',
            404: 'Table not found'
        }
    )
    def post(self, request, *args, **kwargs):
        serializer = OrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        order_id = OrderLifecycleManager(self.get_restaurant_context()).submit_order(
            table_id=data['tableId'],
            items=list(request.data['items']),
            total_amount=data['totalAmount'],
            allergies=data['allergies'],
            other_allergies=data['otherAllergies'],
            customer_name=data['customerName'],
        )
        return Response(
            {'id': order_id, 'message': 'Commande créée avec succès'},
            status=status.HTTP_201_CREATED
        )


class OrderDetailView(RestaurantContextMixin, generics.RetrieveAPIView):
    """Get one order"""
    serializer_class = OrderSerializer
    permission_classes = [IsRestaurantMember]

    def get_queryset(self):
        if getattr(self, 'swagger_fake_view', False):
            return Order.objects.none()
        return OrderLifecycleManager(self.get_restaurant_context()).list_orders()


@swagger_auto_schema(
    method='put',
    operation_description="Move an order to another status",
    request_body=OrderStatusSerializer,
    responses={
        200: openapi.Response(description="Status updated"),
        404: 'Order not found',
        409: 'Invalid transition'
    }
)
@api_view(['PUT'])
@permission_classes([IsRestaurantMember])
def order_status(request, pk):
    """Advance the order state machine"""
    serializer = OrderStatusSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    OrderLifecycleManager(resolve_restaurant(request)).update_status(pk, serializer.validated_data['status'])
    return Response({'success': True})


# Room Views
class RoomListCreateView(RestaurantContextMixin, generics.ListCreateAPIView):
    """
    get: List the restaurant rooms
    post: Create a room (restaurateurs and managers only)
    """
    queryset = Room.objects.all()
    serializer_class = RoomSerializer
    permission_classes = [IsManagerOrReadOnly]
    pagination_class = None

    def perform_create(self, serializer):
        serializer.save(restaurant=self.get_restaurant_context().restaurant)


class RoomRetrieveUpdateDestroyView(RestaurantContextMixin, generics.RetrieveUpdateDestroyAPIView):
    """
    get: Get room details
    put/patch: Update room (restaurateurs and managers only)
    delete: Delete room and its tables (restaurateurs and managers only)
    """
    queryset = Room.objects.all()
    serializer_class = RoomSerializer
    permission_classes = [IsManagerOrReadOnly]


# Table Views
class TableListCreateView(RestaurantContextMixin, generics.ListCreateAPIView):
    """
    get: List the restaurant tables, by room then number
    post: Create a table (restaurateurs and managers only)
    """
    queryset = Table.objects.select_related('room')
    serializer_class = TableSerializer
    permission_classes = [IsManagerOrReadOnly]
    restaurant_field = 'room__restaurant'
    pagination_class = None
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_fields = ['room', 'status']
    ordering = ['room__name', 'number']


class TableRetrieveUpdateDestroyView(RestaurantContextMixin, generics.RetrieveUpdateDestroyAPIView):
    """
    get: Get table details
    put/patch: Update table (restaurateurs and managers only)
    delete: Delete table (restaurateurs and managers only)
    """
    queryset = Table.objects.select_related('room')
    serializer_class = TableSerializer
    permission_classes = [IsManagerOrReadOnly]
    restaurant_field = 'room__restaurant'


@swagger_auto_schema(
    method='put',
    operation_description="Move a table on the room plan",
    request_body=TablePositionSerializer,
    responses={200: TableSerializer}
)
@api_view(['PUT'])
@permission_classes([IsRestaurantMember])
def table_position(request, pk):
    """Update the position of a table"""
    serializer = TablePositionSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    context = resolve_restaurant(request)
    table = TableState(context).set_position(pk, serializer.validated_data['x'], serializer.validated_data['y'])
    return Response(TableSerializer(table, context={'restaurant_context': context}).data)


@swagger_auto_schema(
    method='put',
    operation_description="Set the occupancy status of a table by hand",
    request_body=TableStatusSerializer,
    responses={200: TableSerializer}
)
@api_view(['PUT'])
@permission_classes([IsRestaurantMember])
def table_status(request, pk):
    """Manual table status change"""
    serializer = TableStatusSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    context = resolve_restaurant(request)
    table = TableState(context).set_status(pk, serializer.validated_data['status'])
    return Response(TableSerializer(table, context={'restaurant_context': context}).data)


@swagger_auto_schema(
    method='get',
    operation_description="Resolve a printed table number (QR ordering page)",
    responses={200: TableSerializer, 404: 'Table not found'}
)
@api_view(['GET'])
@permission_classes([HasRestaurantContext])
def table_by_number(request, number):
    context = resolve_restaurant(request)
    table = TableState(context).get_by_number(number)
    return Response(TableSerializer(table, context={'restaurant_context': context}).data)


@swagger_auto_schema(
    method='post',
    operation_description="Regenerate the QR payload of a table",
    responses={200: TableSerializer}
)
@api_view(['POST'])
@permission_classes([IsRestaurantManager])
def table_generate_qr(request, pk):
    context = resolve_restaurant(request)
    table = TableState(context).regenerate_qr(pk)
    return Response(TableSerializer(table, context={'restaurant_context': context}).data)


@swagger_auto_schema(
    method='post',
    operation_description="Regenerate the QR payload of every table of the restaurant",
    responses={200: openapi.Response(description="Number of tables updated")}
)
@api_view(['POST'])
@permission_classes([IsRestaurantManager])
def regenerate_qr_codes(request):
    updated = TableState(resolve_restaurant(request)).regenerate_all_qr()
    return Response({
        'success': True,
        'message': f"{updated} QR codes mis à jour",
        'updated': updated,
    })
