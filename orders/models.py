from decimal import Decimal

from django.core.serializers.json import DjangoJSONEncoder
from django.core.validators import MinValueValidator
from django.db import models

from authentication.models import Restaurant, TimeStampedModel


class OrderStatus(models.TextChoices):
    EN_ATTENTE = "en_attente", "En attente"
    EN_PREPARATION = "en_preparation", "En préparation"
    PRETE = "prete", "Prête"
    SERVIE = "servie", "Servie"
    TERMINEE = "terminee", "Terminée"


# Forward-only lifecycle, one step at a time
ORDER_TRANSITIONS = {
    OrderStatus.EN_ATTENTE: OrderStatus.EN_PREPARATION,
    OrderStatus.EN_PREPARATION: OrderStatus.PRETE,
    OrderStatus.PRETE: OrderStatus.SERVIE,
    OrderStatus.SERVIE: OrderStatus.TERMINEE,
}


class TableStatus(models.TextChoices):
    LIBRE = "libre", "Libre"
    OCCUPEE = "occupee", "Occupée"
    RESERVEE = "reservee", "Réservée"
    MAINTENANCE = "maintenance", "Maintenance"


class Room(TimeStampedModel):
    restaurant = models.ForeignKey(Restaurant, on_delete=models.CASCADE, related_name='rooms')
    name = models.CharField(max_length=100)
    color = models.CharField(max_length=20, default='#3B82F6')
    width = models.PositiveIntegerField(default=800)
    height = models.PositiveIntegerField(default=600)

    class Meta:
        db_table = 'rooms'
        ordering = ['name']

    def __str__(self):
        return self.name


class Table(TimeStampedModel):
    room = models.ForeignKey(Room, on_delete=models.CASCADE, related_name='tables')
    number = models.PositiveIntegerField()
    capacity = models.PositiveIntegerField(default=4)
    x = models.FloatField(default=50)
    y = models.FloatField(default=50)
    status = models.CharField(max_length=20, choices=TableStatus.choices, default=TableStatus.LIBRE)
    qr_code = models.CharField(max_length=500, blank=True)

    class Meta:
        db_table = 'tables'
        ordering = ['room__name', 'number']
        unique_together = ['room', 'number']

    def __str__(self):
        return f"Table {self.number} ({self.room.name})"


class Order(TimeStampedModel):
    restaurant = models.ForeignKey(Restaurant, on_delete=models.CASCADE, related_name='orders')
    table = models.ForeignKey(Table, on_delete=models.SET_NULL, null=True, blank=True, related_name='orders')

    # Cart lines exactly as submitted: [{id, name, price, quantity}, ...]
    items = models.JSONField(default=list, encoder=DjangoJSONEncoder)
    total_amount = models.DecimalField(
        max_digits=10, decimal_places=2, validators=[MinValueValidator(Decimal('0.00'))]
    )
    status = models.CharField(max_length=20, choices=OrderStatus.choices, default=OrderStatus.EN_ATTENTE)
    allergies = models.JSONField(default=list, blank=True)
    other_allergies = models.TextField(blank=True)
    customer_name = models.CharField(max_length=255, blank=True)

    class Meta:
        db_table = 'orders'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['restaurant', 'status'], name='order_restaurant_status_idx'),
        ]

    def __str__(self):
        return f"#{self.id} - {self.get_status_display()} - {self.table if self.table_id else 'sans table'}"
