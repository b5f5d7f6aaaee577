from decimal import Decimal

from django.db import transaction
from rest_framework import serializers

from .models import Ingredient, MenuCategory, MenuItem, MenuItemIngredient, StockMovement
from .services import InventoryLedger, MenuCatalog


class RestaurantContextSerializerMixin:
    """Gives serializers access to the request's RestaurantContext"""

    @property
    def restaurant_context(self):
        return self.context['restaurant_context']


class MenuItemSerializer(RestaurantContextSerializerMixin, serializers.ModelSerializer):
    category = serializers.ChoiceField(choices=MenuCategory.choices)
    category_label = serializers.CharField(source='get_category_display', read_only=True)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0'))

    class Meta:
        model = MenuItem
        fields = [
            'id', 'name', 'description', 'price', 'category', 'category_label',
            'image_url', 'stock_quantity', 'is_available', 'created_at', 'updated_at'
        ]
        read_only_fields = ['stock_quantity', 'created_at', 'updated_at']

    def create(self, validated_data):
        return MenuCatalog(self.restaurant_context).create_item(**validated_data)

    def update(self, instance, validated_data):
        return MenuCatalog(self.restaurant_context).update_item(instance.pk, **validated_data)


class RecipeLineSerializer(serializers.ModelSerializer):
    ingredient_id = serializers.IntegerField()
    ingredient_name = serializers.CharField(source='ingredient.name', read_only=True)
    unit = serializers.CharField(source='ingredient.unit', read_only=True)
    quantity_needed = serializers.DecimalField(max_digits=10, decimal_places=3, min_value=Decimal('0.001'))

    class Meta:
        model = MenuItemIngredient
        fields = ['ingredient_id', 'ingredient_name', 'unit', 'quantity_needed']


class ItemStockSerializer(serializers.Serializer):
    stock_quantity = serializers.IntegerField(min_value=0)
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default='Ajustement manuel')


class IngredientSerializer(RestaurantContextSerializerMixin, serializers.ModelSerializer):
    is_low = serializers.BooleanField(read_only=True)

    class Meta:
        model = Ingredient
        fields = [
            'id', 'name', 'unit', 'stock_quantity', 'min_quantity', 'cost_per_unit',
            'supplier', 'is_active', 'is_low', 'created_at', 'updated_at'
        ]
        read_only_fields = ['is_active', 'created_at', 'updated_at']

    @transaction.atomic
    def create(self, validated_data):
        initial_stock = validated_data.pop('stock_quantity', None)
        ingredient = Ingredient.objects.create(restaurant=self.restaurant_context.restaurant, **validated_data)
        if initial_stock:
            InventoryLedger(self.restaurant_context).adjust(ingredient.pk, initial_stock, 'Stock initial')
            ingredient.refresh_from_db()
        return ingredient

    @transaction.atomic
    def update(self, instance, validated_data):
        new_stock = validated_data.pop('stock_quantity', None)

        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        # Never write back the stock read by get_object()
        instance.save(update_fields=[*validated_data, 'updated_at'])

        # Stock goes through the ledger so the change is recorded as a movement
        if new_stock is not None:
            InventoryLedger(self.restaurant_context).set_absolute(instance.pk, new_stock, 'Mise à jour manuelle')
            instance.refresh_from_db()
        return instance


class StockMovementSerializer(serializers.ModelSerializer):
    target_type = serializers.SerializerMethodField()
    target_name = serializers.SerializerMethodField()
    movement_type_label = serializers.CharField(source='get_movement_type_display', read_only=True)

    class Meta:
        model = StockMovement
        fields = [
            'id', 'target_type', 'ingredient', 'menu_item', 'target_name',
            'movement_type', 'movement_type_label', 'quantity', 'reason', 'created_at'
        ]
        read_only_fields = fields

    def get_target_type(self, obj):
        return 'ingredient' if obj.ingredient_id is not None else 'menu_item'

    def get_target_name(self, obj):
        target = obj.ingredient if obj.ingredient_id is not None else obj.menu_item
        return target.name if target is not None else None


class MovementCreateSerializer(serializers.Serializer):
    quantity = serializers.DecimalField(max_digits=12, decimal_places=3, min_value=Decimal('0.001'))
    movement_type = serializers.ChoiceField(choices=StockMovement.MOVEMENT_TYPES)
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')


class ItemMovementCreateSerializer(MovementCreateSerializer):
    item_id = serializers.IntegerField()


class IngredientMovementCreateSerializer(MovementCreateSerializer):
    ingredient_id = serializers.IntegerField()
