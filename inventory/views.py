from rest_framework import generics, status, filters
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi

from authentication.context import resolve_restaurant
from authentication.mixins import RestaurantContextMixin
from authentication.permissions import (
    HasRestaurantContext, IsManagerOrReadOnly, IsRestaurantManager, IsRestaurantMember
)
from .models import Ingredient, IngredientTarget, MenuItem, MenuItemTarget, StockMovement
from .serializers import (
    IngredientMovementCreateSerializer, IngredientSerializer, ItemMovementCreateSerializer,
    ItemStockSerializer, MenuItemSerializer, RecipeLineSerializer, StockMovementSerializer
)
from .services import InventoryLedger, MenuCatalog


# Menu Views
class MenuItemListCreateView(RestaurantContextMixin, generics.ListCreateAPIView):
    """
    get: List the restaurant menu (public, used by the QR ordering page)
    post: Create a new menu item (restaurateurs and managers only)
    """
    queryset = MenuItem.objects.all()
    serializer_class = MenuItemSerializer
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['category', 'is_available']
    search_fields = ['name', 'description']
    ordering_fields = ['name', 'price', 'category', 'created_at']
    ordering = ['category', 'name']

    def get_permissions(self):
        if self.request.method == 'POST':
            return [IsRestaurantManager()]
        return [HasRestaurantContext()]


class MenuItemRetrieveUpdateDestroyView(RestaurantContextMixin, generics.RetrieveUpdateDestroyAPIView):
    """
    get: Get menu item details
    put/patch: Update menu item (restaurateurs and managers only)
    delete: Disable menu item (restaurateurs and managers only)
    """
    queryset = MenuItem.objects.all()
    serializer_class = MenuItemSerializer

    def get_permissions(self):
        if self.request.method in ['PUT', 'PATCH', 'DELETE']:
            return [IsRestaurantManager()]
        return [HasRestaurantContext()]

    def perform_destroy(self, instance):
        MenuCatalog(self.get_restaurant_context()).delete_item(instance.pk)


@swagger_auto_schema(
    method='put',
    operation_description="Replace the recipe of a menu item",
    request_body=RecipeLineSerializer(many=True),
    responses={200: RecipeLineSerializer(many=True)}
)
@swagger_auto_schema(
    method='get',
    operation_description="Ingredients consumed by one unit of a menu item",
    responses={200: RecipeLineSerializer(many=True)}
)
@api_view(['GET', 'PUT'])
@permission_classes([IsManagerOrReadOnly])
def menu_item_recipe(request, pk):
    """Read or replace the recipe of a menu item"""
    catalog = MenuCatalog(resolve_restaurant(request))
    item = catalog.get_item(pk)

    if request.method == 'PUT':
        serializer = RecipeLineSerializer(data=request.data, many=True)
        serializer.is_valid(raise_exception=True)
        catalog.set_recipe(
            item.pk,
            [(line['ingredient_id'], line['quantity_needed']) for line in serializer.validated_data]
        )

    lines = item.recipe_lines.select_related('ingredient').order_by('id')
    return Response(RecipeLineSerializer(lines, many=True).data)


@swagger_auto_schema(
    method='post',
    operation_description="Set the coarse stock counter of a menu item",
    request_body=ItemStockSerializer,
    responses={200: MenuItemSerializer}
)
@api_view(['POST'])
@permission_classes([IsRestaurantManager])
def menu_item_stock(request, pk):
    """Set the per-item stock counter and record the movement"""
    context = resolve_restaurant(request)
    serializer = ItemStockSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    catalog = MenuCatalog(context)
    catalog.adjust_item_stock(
        pk, serializer.validated_data['stock_quantity'], serializer.validated_data['reason']
    )
    item = catalog.get_item(pk)
    return Response(MenuItemSerializer(item, context={'restaurant_context': context}).data)


@swagger_auto_schema(
    method='post',
    operation_description="Create the sample menu for a restaurant that has none",
    responses={
        200: openapi.Response(description="Sample menu created or skipped"),
    }
)
@api_view(['POST'])
@permission_classes([IsRestaurantManager])
def init_menu(request):
    """Seed the sample menu"""
    catalog = MenuCatalog(resolve_restaurant(request))
    inserted = catalog.seed_sample_menu()
    if not inserted:
        existing = catalog.items().count()
        return Response({
            'success': True,
            'message': f"Ce restaurant a déjà {existing} éléments de menu. Initialisation ignorée.",
            'inserted': 0,
        })
    return Response({
        'success': True,
        'message': f"{inserted} éléments ajoutés au menu",
        'inserted': inserted,
    })


# Ingredient Views
class IngredientListCreateView(RestaurantContextMixin, generics.ListCreateAPIView):
    """
    get: List all ingredients of the restaurant
    post: Create an ingredient (restaurateurs and managers only)
    """
    queryset = Ingredient.objects.all()
    serializer_class = IngredientSerializer
    permission_classes = [IsManagerOrReadOnly]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['is_active', 'supplier', 'unit']
    search_fields = ['name', 'supplier']
    ordering_fields = ['name', 'stock_quantity', 'created_at']
    ordering = ['name']


class IngredientRetrieveUpdateDestroyView(RestaurantContextMixin, generics.RetrieveUpdateDestroyAPIView):
    """
    get: Get ingredient details
    put/patch: Update ingredient, stock changes are recorded as movements
    delete: Deactivate ingredient
    """
    queryset = Ingredient.objects.all()
    serializer_class = IngredientSerializer
    permission_classes = [IsManagerOrReadOnly]

    def perform_destroy(self, instance):
        InventoryLedger(self.get_restaurant_context()).deactivate(instance.pk)


class LowStockIngredientListView(RestaurantContextMixin, generics.ListAPIView):
    """Ingredients at or below their minimum quantity"""
    serializer_class = IngredientSerializer
    permission_classes = [IsRestaurantMember]
    pagination_class = None

    def get_queryset(self):
        if getattr(self, 'swagger_fake_view', False):
            return Ingredient.objects.none()
        return InventoryLedger(self.get_restaurant_context()).list_low().order_by('name')


# Stock movement Views
class MovementListMixin(RestaurantContextMixin):
    queryset = StockMovement.objects.select_related('ingredient', 'menu_item')
    serializer_class = StockMovementSerializer
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_fields = ['movement_type']
    ordering = ['-created_at', '-id']

    def get_permissions(self):
        if self.request.method == 'POST':
            return [IsRestaurantManager()]
        return [IsRestaurantMember()]

    def query_param_id(self, name):
        value = self.request.query_params.get(name)
        if not value:
            return None
        try:
            return int(value)
        except ValueError:
            raise ValidationError({name: "Identifiant invalide"})


class StockMovementListCreateView(MovementListMixin, generics.ListCreateAPIView):
    """
    get: Menu item movements, optionally for one item (?item_id=)
    post: Record a manual menu item movement
    """

    def get_queryset(self):
        queryset = super().get_queryset().filter(menu_item__isnull=False)
        item_id = self.query_param_id('item_id')
        if item_id is not None:
            queryset = queryset.for_target(MenuItemTarget(item_id))
        return queryset

    @swagger_auto_schema(
        request_body=ItemMovementCreateSerializer,
        responses={201: StockMovementSerializer}
    )
    def post(self, request, *args, **kwargs):
        serializer = ItemMovementCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        movement = MenuCatalog(self.get_restaurant_context()).record_manual(
            data['item_id'], data['quantity'], data['movement_type'], data['reason']
        )
        return Response(StockMovementSerializer(movement).data, status=status.HTTP_201_CREATED)


class IngredientMovementListCreateView(MovementListMixin, generics.ListCreateAPIView):
    """
    get: Ingredient movements, optionally for one ingredient (?ingredient_id=)
    post: Record a manual ingredient movement
    """

    def get_queryset(self):
        queryset = super().get_queryset().filter(ingredient__isnull=False)
        ingredient_id = self.query_param_id('ingredient_id')
        if ingredient_id is not None:
            queryset = queryset.for_target(IngredientTarget(ingredient_id))
        return queryset

    @swagger_auto_schema(
        request_body=IngredientMovementCreateSerializer,
        responses={201: StockMovementSerializer}
    )
    def post(self, request, *args, **kwargs):
        serializer = IngredientMovementCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        movement = InventoryLedger(self.get_restaurant_context()).record_manual(
            data['ingredient_id'], data['quantity'], data['movement_type'], data['reason']
        )
        return Response(StockMovementSerializer(movement).data, status=status.HTTP_201_CREATED)
