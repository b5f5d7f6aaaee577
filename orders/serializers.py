from rest_framework import serializers

from inventory.serializers import RestaurantContextSerializerMixin
from .models import Order, OrderStatus, Room, Table, TableStatus


class OrderLineSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    name = serializers.CharField(max_length=255)
    price = serializers.FloatField(min_value=0)
    quantity = serializers.IntegerField(min_value=1)


class OrderCreateSerializer(serializers.Serializer):
    """Cart submitted by the QR ordering page (camelCase keys)"""
    tableId = serializers.IntegerField()
    items = OrderLineSerializer(many=True, allow_empty=False)
    totalAmount = serializers.FloatField(min_value=0)
    allergies = serializers.ListField(
        child=serializers.CharField(max_length=100),
        required=False,
        allow_empty=True,
        default=list
    )
    otherAllergies = serializers.CharField(required=False, allow_blank=True, default='')
    customerName = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')


class OrderSerializer(serializers.ModelSerializer):
    table_number = serializers.IntegerField(read_only=True, allow_null=True)
    status_label = serializers.CharField(source='get_status_display', read_only=True)

    class Meta:
        model = Order
        fields = [
            'id', 'table', 'table_number', 'items', 'total_amount', 'status', 'status_label',
            'allergies', 'other_allergies', 'customer_name', 'created_at', 'updated_at'
        ]
        read_only_fields = fields


class OrderStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=OrderStatus.choices)


class RoomSerializer(serializers.ModelSerializer):
    table_count = serializers.SerializerMethodField()

    class Meta:
        model = Room
        fields = ['id', 'name', 'color', 'width', 'height', 'table_count', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def get_table_count(self, obj):
        return obj.tables.count()


class TableSerializer(RestaurantContextSerializerMixin, serializers.ModelSerializer):
    room = serializers.PrimaryKeyRelatedField(queryset=Room.objects.all())
    room_name = serializers.CharField(source='room.name', read_only=True)
    status = serializers.ChoiceField(choices=TableStatus.choices, required=False)

    class Meta:
        model = Table
        fields = [
            'id', 'room', 'room_name', 'number', 'capacity', 'x', 'y',
            'status', 'qr_code', 'created_at', 'updated_at'
        ]
        read_only_fields = ['qr_code', 'created_at', 'updated_at']

    def get_fields(self):
        fields = super().get_fields()
        # Only rooms of the current restaurant can hold its tables
        if 'restaurant_context' in self.context:
            fields['room'].queryset = self.restaurant_context.scope(Room.objects.all())
        return fields


class TablePositionSerializer(serializers.Serializer):
    x = serializers.FloatField()
    y = serializers.FloatField()


class TableStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=TableStatus.choices)
