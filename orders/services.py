"""
Dining room and order lifecycle services.

``OrderLifecycleManager.submit_order`` is deliberately two-phase: the order
row is committed first, then every recipe deduction runs in its own
savepoint. A failed deduction is logged and skipped, it never rolls the
order back and never stops the remaining deductions.
"""
import logging
from decimal import Decimal, InvalidOperation
from numbers import Number

from django.conf import settings
from django.db import DatabaseError, transaction
from django.db.models import F
from django.utils import timezone
from rest_framework.exceptions import NotFound, ValidationError

from inventory.services import InventoryLedger, MenuCatalog, to_decimal
from .exceptions import InvalidTransition
from .models import ORDER_TRANSITIONS, Order, OrderStatus, Room, Table, TableStatus

logger = logging.getLogger(__name__)

TOTAL_TOLERANCE = Decimal('0.01')


def table_qr_payload(table):
    """URL encoded in the QR code printed on ``table``"""
    base_url = getattr(settings, 'TABLE_QR_BASE_URL', 'http://localhost:8000/menu')
    return f"{base_url}?table={table.pk}&restaurant={table.room.restaurant.code}"


class TableState:
    """Occupancy and layout of the restaurant's tables"""

    def __init__(self, context):
        self.context = context

    def rooms(self):
        return self.context.scope(Room.objects.all())

    def get_room(self, room_id) -> Room:
        try:
            return self.rooms().get(pk=room_id)
        except (Room.DoesNotExist, ValueError, TypeError):
            raise NotFound(f"Salle {room_id} introuvable")

    def tables(self):
        return Table.objects.filter(room__restaurant=self.context.restaurant).select_related('room')

    def get_by_id(self, table_id) -> Table:
        try:
            return self.tables().get(pk=table_id)
        except (Table.DoesNotExist, ValueError, TypeError):
            raise NotFound(f"Table {table_id} introuvable")

    def list_by_restaurant(self):
        return self.tables().order_by('room__name', 'number')

    def get_by_number(self, number) -> Table:
        """Resolve a printed table number, first room by name wins"""
        try:
            table = self.list_by_restaurant().filter(number=number).first()
        except (ValueError, TypeError):
            table = None
        if table is None:
            raise NotFound(f"Table numéro {number} introuvable")
        return table

    def set_status(self, table_id, status) -> Table:
        if status not in TableStatus.values:
            raise ValidationError({'status': f"Statut de table inconnu: {status}"})
        table = self.get_by_id(table_id)
        Table.objects.filter(pk=table.pk).update(status=status, updated_at=timezone.now())
        table.status = status
        logger.info("Table %s (number %s) is now %s", table.pk, table.number, status)
        return table

    def set_position(self, table_id, x, y) -> Table:
        table = self.get_by_id(table_id)
        table.x, table.y = x, y
        table.save(update_fields=['x', 'y', 'updated_at'])
        return table

    def regenerate_qr(self, table_id) -> Table:
        table = self.get_by_id(table_id)
        table.qr_code = table_qr_payload(table)
        table.save(update_fields=['qr_code', 'updated_at'])
        logger.info("QR code regenerated for table %s (number %s)", table.pk, table.number)
        return table

    def regenerate_all_qr(self) -> int:
        updated = 0
        for table in self.tables().iterator():
            Table.objects.filter(pk=table.pk).update(qr_code=table_qr_payload(table))
            updated += 1
        logger.info("%d QR code(s) regenerated for restaurant %s", updated, self.context.restaurant_id)
        return updated


def _validate_items(items):
    if not isinstance(items, (list, tuple)) or not items:
        raise ValidationError({'items': "La commande doit contenir au moins un article"})

    lines = []
    for index, line in enumerate(items):
        if not isinstance(line, dict):
            raise ValidationError({'items': f"Article {index}: format invalide"})
        missing = [key for key in ('id', 'name', 'price', 'quantity') if line.get(key) in (None, '')]
        if missing:
            raise ValidationError({'items': f"Article {index}: champ(s) manquant(s) {', '.join(missing)}"})

        price, quantity = line['price'], line['quantity']
        if isinstance(price, bool) or not isinstance(price, (Number, str)):
            raise ValidationError({'items': f"Article {index}: prix invalide"})
        try:
            price = to_decimal(price)
            item_id = int(line['id'])
        except (InvalidOperation, ValueError, TypeError):
            raise ValidationError({'items': f"Article {index}: identifiant ou prix invalide"})
        if not price.is_finite() or price < 0:
            raise ValidationError({'items': f"Article {index}: le prix doit être positif ou nul"})
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise ValidationError({'items': f"Article {index}: la quantité doit être un entier positif"})

        lines.append({'id': item_id, 'name': str(line['name']), 'price': price, 'quantity': quantity})
    return lines


class OrderLifecycleManager:
    """Order submission, inventory cascade and the status state machine"""

    def __init__(self, context, strict_transitions=None):
        self.context = context
        if strict_transitions is None:
            strict_transitions = getattr(settings, 'ORDERS_STRICT_STATUS_TRANSITIONS', True)
        self.strict_transitions = strict_transitions
        self.tables = TableState(context)

    def orders(self):
        return self.context.scope(Order.objects.all())

    def get_order(self, order_id) -> Order:
        try:
            return self.list_orders().get(pk=order_id)
        except (Order.DoesNotExist, ValueError, TypeError):
            raise NotFound(f"Commande {order_id} introuvable")

    def list_orders(self, status=None):
        """Newest first, each order annotated with ``table_number``"""
        queryset = self.orders().select_related('table').annotate(
            table_number=F('table__number')
        ).order_by('-created_at', '-id')
        if status:
            queryset = queryset.filter(status=status)
        return queryset

    def submit_order(self, table_id, items, total_amount, allergies=None, other_allergies='',
                     customer_name='') -> int:
        lines = _validate_items(items)
        try:
            total_amount = to_decimal(total_amount)
        except (InvalidOperation, ValueError, TypeError):
            raise ValidationError({'total_amount': "Montant total invalide"})
        expected = sum((line['price'] * line['quantity'] for line in lines), Decimal('0'))
        if not total_amount.is_finite() or abs(expected - total_amount) > TOTAL_TOLERANCE:
            raise ValidationError({
                'total_amount': f"Le total {total_amount} ne correspond pas aux articles ({expected})"
            })
        table = self.tables.get_by_id(table_id)

        with transaction.atomic():
            order = Order.objects.create(
                restaurant=self.context.restaurant,
                table=table,
                # Lines keep their submitted values; `lines` only serves validation and deductions
                items=[dict(line) for line in items],
                total_amount=total_amount.quantize(Decimal('0.01')),
                status=OrderStatus.EN_ATTENTE,
                allergies=list(allergies or []),
                other_allergies=other_allergies or '',
                customer_name=customer_name or '',
            )
        logger.info(
            "Order %s created for table %s in restaurant %s: %d line(s), total %s",
            order.pk, table.number, self.context.restaurant_id, len(lines), order.total_amount,
        )

        self._deduct_ingredients(order, lines)

        try:
            self.tables.set_status(table.pk, TableStatus.OCCUPEE)
        except DatabaseError:
            logger.exception("Could not mark table %s occupied for order %s", table.pk, order.pk)

        return order.pk

    def _deduct_ingredients(self, order, lines):
        catalog = MenuCatalog(self.context)
        ledger = InventoryLedger(self.context)

        for line in lines:
            try:
                recipe = list(catalog.get_recipe(line['id']))
            except DatabaseError:
                logger.exception("Recipe lookup failed for menu item %s of order %s", line['id'], order.pk)
                continue

            for ingredient_id, quantity_needed in recipe:
                delta = -(quantity_needed * line['quantity'])
                try:
                    with transaction.atomic():
                        ledger.adjust(ingredient_id, delta, f"Commande - {line['name']}")
                except DatabaseError:
                    logger.exception(
                        "Stock deduction of %s for ingredient %s failed (order %s, item %s)",
                        -delta, ingredient_id, order.pk, line['id'],
                    )

    def update_status(self, order_id, new_status) -> Order:
        if new_status not in OrderStatus.values:
            raise ValidationError({'status': f"Statut inconnu: {new_status}"})
        order = self.get_order(order_id)
        current = order.status
        if current == new_status:
            return order

        if self.strict_transitions and ORDER_TRANSITIONS.get(current) != new_status:
            raise InvalidTransition(f"Transition {current} -> {new_status} interdite")

        with transaction.atomic():
            updated = Order.objects.filter(pk=order.pk, status=current).update(
                status=new_status, updated_at=timezone.now()
            )
            if not updated:
                raise InvalidTransition("Le statut de la commande a changé entre-temps")
            if new_status == OrderStatus.TERMINEE and order.table_id is not None:
                self.tables.set_status(order.table_id, TableStatus.LIBRE)

        logger.info("Order %s moved from %s to %s", order.pk, current, new_status)
        order.status = new_status
        return order
