"""
Inventory services: the ingredient ledger and the menu catalog.

Both classes are bound to a ``RestaurantContext`` and only ever see rows of
that restaurant. Stock columns are changed with ``F()`` expressions so two
requests touching the same row never lose an update.
"""
import logging
from decimal import Decimal
from typing import Callable, Iterable, Iterator, NamedTuple, Optional

from django.db import transaction
from django.db.models import F
from rest_framework.exceptions import NotFound, ValidationError

from .models import (
    Ingredient,
    IngredientTarget,
    MenuCategory,
    MenuItem,
    MenuItemIngredient,
    MenuItemTarget,
    MovementTarget,
    StockMovement,
)

logger = logging.getLogger(__name__)


def to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def movement_delta(quantity, movement_type) -> Decimal:
    """Signed delta of a manual movement (``entree`` adds, ``sortie`` removes)"""
    quantity = to_decimal(quantity)
    if quantity <= 0:
        raise ValidationError({'quantity': "La quantité doit être positive"})
    if movement_type == StockMovement.ENTREE:
        return quantity
    if movement_type == StockMovement.SORTIE:
        return -quantity
    raise ValidationError({'movement_type': f"Type de mouvement inconnu: {movement_type}"})


class InventoryLedger:
    """Authoritative ingredient quantities plus the append-only movement log"""

    def __init__(self, context):
        self.context = context

    def ingredients(self):
        return self.context.scope(Ingredient.objects.all())

    def get_ingredient(self, ingredient_id) -> Ingredient:
        try:
            return self.ingredients().get(pk=ingredient_id)
        except (Ingredient.DoesNotExist, ValueError, TypeError):
            raise NotFound(f"Ingrédient {ingredient_id} introuvable")

    def record_movement(self, target: MovementTarget, delta: Decimal, reason: str) -> StockMovement:
        fields = {}
        if isinstance(target, IngredientTarget):
            fields['ingredient_id'] = target.ingredient_id
        else:
            fields['menu_item_id'] = target.menu_item_id
        return StockMovement.objects.create(
            restaurant=self.context.restaurant,
            movement_type=StockMovement.ENTREE if delta > 0 else StockMovement.SORTIE,
            quantity=abs(delta),
            reason=reason or '',
            **fields,
        )

    def adjust(self, ingredient_id, delta, reason='') -> Optional[StockMovement]:
        """
        Apply ``delta`` to the ingredient stock and append one movement.

        Insufficient stock is not an error: the quantity may go negative.
        A zero delta changes nothing and records nothing.
        """
        delta = to_decimal(delta)
        ingredient = self.get_ingredient(ingredient_id)
        if delta == 0:
            return None

        with transaction.atomic():
            Ingredient.objects.filter(pk=ingredient.pk).update(
                stock_quantity=F('stock_quantity') + delta
            )
            movement = self.record_movement(IngredientTarget(ingredient.pk), delta, reason)

        logger.info(
            "Stock %s %s %s for ingredient %s (%s) in restaurant %s: %s",
            movement.movement_type, movement.quantity, ingredient.unit,
            ingredient.pk, ingredient.name, self.context.restaurant_id, reason,
        )
        return movement

    def set_absolute(self, ingredient_id, new_quantity, reason='') -> Optional[StockMovement]:
        ingredient = self.get_ingredient(ingredient_id)
        delta = to_decimal(new_quantity) - ingredient.stock_quantity
        return self.adjust(ingredient.pk, delta, reason)

    def record_manual(self, ingredient_id, quantity, movement_type, reason='') -> StockMovement:
        return self.adjust(ingredient_id, movement_delta(quantity, movement_type), reason)

    def list_low(self, comparator: Optional[Callable[[Decimal, Decimal], bool]] = None) -> Iterable[Ingredient]:
        """
        Active ingredients at or below their minimum quantity.

        ``comparator(stock_quantity, min_quantity)`` replaces the default
        ``<=`` test when given.
        """
        active = self.ingredients().filter(is_active=True)
        if comparator is None:
            return active.filter(stock_quantity__lte=F('min_quantity'))
        return (
            ingredient for ingredient in active.iterator()
            if comparator(ingredient.stock_quantity, ingredient.min_quantity)
        )

    def movements(self, target: Optional[MovementTarget] = None):
        queryset = self.context.scope(StockMovement.objects.all()).select_related('ingredient', 'menu_item')
        if target is not None:
            queryset = queryset.for_target(target)
        return queryset

    def deactivate(self, ingredient_id) -> Ingredient:
        ingredient = self.get_ingredient(ingredient_id)
        ingredient.is_active = False
        ingredient.save(update_fields=['is_active', 'updated_at'])
        return ingredient


class RecipeLine(NamedTuple):
    ingredient_id: int
    quantity_needed: Decimal


SAMPLE_MENU = [
    # Entrées
    ("Salade de chèvre chaud", "Salade verte, crottins de chavignol, noix, miel", "12.50", MenuCategory.ENTREE),
    ("Carpaccio de saumon", "Saumon fumé, câpres, aneth, citron vert", "14.00", MenuCategory.ENTREE),
    ("Foie gras poêlé", "Foie gras, figues confites, pain d'épices", "18.50", MenuCategory.ENTREE),
    # Plats principaux
    ("Magret de canard", "Magret grillé, sauce aux cerises, gratin dauphinois", "24.00", MenuCategory.PLAT),
    ("Pavé de saumon", "Saumon grillé, légumes de saison, riz basmati", "22.50", MenuCategory.PLAT),
    ("Côte de bœuf", "Côte de bœuf 300g, frites maison, salade verte", "28.00", MenuCategory.PLAT),
    # Desserts
    ("Tarte tatin", "Tarte aux pommes caramélisées, boule de vanille", "8.50", MenuCategory.DESSERT),
    ("Mousse au chocolat", "Mousse maison, copeaux de chocolat, chantilly", "7.50", MenuCategory.DESSERT),
    ("Crème brûlée", "Crème brûlée vanille, biscuit sablé", "8.00", MenuCategory.DESSERT),
    # Boissons froides
    ("Coca-Cola", "33cl", "3.50", MenuCategory.BOISSON_FROIDE),
    ("Eau minérale", "50cl Evian", "2.50", MenuCategory.BOISSON_FROIDE),
    ("Jus d'orange", "Pressé frais 25cl", "4.00", MenuCategory.BOISSON_FROIDE),
    ("Limonade artisanale", "Citron frais, menthe, 33cl", "4.50", MenuCategory.BOISSON_FROIDE),
    ("Thé glacé", "Thé noir pêche, 33cl", "3.80", MenuCategory.BOISSON_FROIDE),
    # Boissons chaudes
    ("Café expresso", "Arabica pur origine", "2.50", MenuCategory.BOISSON_CHAUDE),
    ("Thé Earl Grey", "Thé noir bergamote", "3.00", MenuCategory.BOISSON_CHAUDE),
    ("Chocolat chaud", "Chocolat noir 70%, chantilly", "4.50", MenuCategory.BOISSON_CHAUDE),
    ("Cappuccino", "Expresso, lait moussé, cannelle", "3.80", MenuCategory.BOISSON_CHAUDE),
    ("Infusion verveine", "Verveine citronnée bio", "2.80", MenuCategory.BOISSON_CHAUDE),
    # Boissons alcoolisées
    ("Vin rouge AOC", "Côtes du Rhône, verre 12cl", "5.50", MenuCategory.BOISSON_ALCOOLISE),
    ("Vin blanc sec", "Sauvignon blanc, verre 12cl", "5.00", MenuCategory.BOISSON_ALCOOLISE),
    ("Bière pression", "Blonde 25cl", "4.50", MenuCategory.BOISSON_ALCOOLISE),
    ("Cognac", "VS, 4cl", "8.00", MenuCategory.BOISSON_ALCOOLISE),
    ("Champagne", "Brut, coupe 12cl", "12.00", MenuCategory.BOISSON_ALCOOLISE),
]


class MenuCatalog:
    """Menu item metadata, recipes and the coarse per-item stock"""

    EDITABLE_FIELDS = ('name', 'description', 'price', 'category', 'image_url', 'is_available')

    def __init__(self, context):
        self.context = context

    def items(self):
        return self.context.scope(MenuItem.objects.all())

    def get_item(self, menu_item_id) -> MenuItem:
        try:
            return self.items().get(pk=menu_item_id)
        except (MenuItem.DoesNotExist, ValueError, TypeError):
            raise NotFound(f"Élément de menu {menu_item_id} introuvable")

    def get_recipe(self, menu_item_id) -> Iterator[RecipeLine]:
        """
        Lazily yield the recipe of a menu item.

        Unknown items and items without a recipe both yield nothing: an item
        that consumes no tracked ingredient is a valid state.
        """
        lines = MenuItemIngredient.objects.filter(
            menu_item_id=menu_item_id,
            menu_item__restaurant=self.context.restaurant,
        ).order_by('id').values_list('ingredient_id', 'quantity_needed')
        for ingredient_id, quantity_needed in lines.iterator():
            yield RecipeLine(ingredient_id, quantity_needed)

    @transaction.atomic
    def set_recipe(self, menu_item_id, lines) -> list:
        """Replace the whole recipe with ``[(ingredient_id, quantity_needed), ...]``"""
        item = self.get_item(menu_item_id)
        ledger = InventoryLedger(self.context)

        recipe = {}
        for ingredient_id, quantity_needed in lines:
            quantity_needed = to_decimal(quantity_needed)
            if quantity_needed <= 0:
                raise ValidationError({'quantity_needed': "La quantité nécessaire doit être positive"})
            if ingredient_id in recipe:
                raise ValidationError({'ingredient_id': f"Ingrédient {ingredient_id} en double"})
            recipe[ingredient_id] = (ledger.get_ingredient(ingredient_id), quantity_needed)

        item.recipe_lines.all().delete()
        created = MenuItemIngredient.objects.bulk_create([
            MenuItemIngredient(menu_item=item, ingredient=ingredient, quantity_needed=quantity_needed)
            for ingredient, quantity_needed in recipe.values()
        ])
        logger.info("Recipe of menu item %s set to %d line(s)", item.pk, len(created))
        return created

    def create_item(self, **fields) -> MenuItem:
        for required in ('name', 'price', 'category'):
            if fields.get(required) in (None, ''):
                raise ValidationError({required: "Ce champ est obligatoire."})
        if to_decimal(fields['price']) < 0:
            raise ValidationError({'price': "Le prix doit être positif ou nul"})
        if fields['category'] not in MenuCategory.values:
            raise ValidationError({'category': f"Catégorie inconnue: {fields['category']}"})
        fields.pop('restaurant', None)
        return MenuItem.objects.create(restaurant=self.context.restaurant, **fields)

    def update_item(self, menu_item_id, **fields) -> MenuItem:
        item = self.get_item(menu_item_id)
        if 'price' in fields and to_decimal(fields['price']) < 0:
            raise ValidationError({'price': "Le prix doit être positif ou nul"})
        changed = [attr for attr in fields if attr in self.EDITABLE_FIELDS]
        for attr in changed:
            setattr(item, attr, fields[attr])
        item.save(update_fields=[*changed, 'updated_at'])
        return item

    def delete_item(self, menu_item_id) -> MenuItem:
        """Soft delete: historical orders keep pointing at a real item"""
        item = self.get_item(menu_item_id)
        item.is_available = False
        item.save(update_fields=['is_available', 'updated_at'])
        logger.info("Menu item %s (%s) disabled", item.pk, item.name)
        return item

    def adjust_item_stock(self, menu_item_id, new_quantity, reason='Ajustement manuel') -> Optional[StockMovement]:
        item = self.get_item(menu_item_id)
        new_quantity = int(new_quantity)
        delta = new_quantity - item.stock_quantity
        if delta == 0:
            return None
        with transaction.atomic():
            MenuItem.objects.filter(pk=item.pk).update(stock_quantity=F('stock_quantity') + delta)
            movement = InventoryLedger(self.context).record_movement(MenuItemTarget(item.pk), Decimal(delta), reason)
        logger.info("Item stock of %s (%s) moved by %+d: %s", item.pk, item.name, delta, reason)
        return movement

    def record_manual(self, menu_item_id, quantity, movement_type, reason='') -> StockMovement:
        delta = movement_delta(quantity, movement_type)
        if delta != delta.to_integral_value():
            raise ValidationError({'quantity': "Le stock d'un article se compte en unités entières"})
        item = self.get_item(menu_item_id)
        with transaction.atomic():
            MenuItem.objects.filter(pk=item.pk).update(stock_quantity=F('stock_quantity') + int(delta))
            movement = InventoryLedger(self.context).record_movement(MenuItemTarget(item.pk), delta, reason)
        logger.info("Manual %s of %s for menu item %s: %s", movement_type, abs(delta), item.pk, reason)
        return movement

    def seed_sample_menu(self) -> int:
        """Insert the sample menu, only for a restaurant without any menu item"""
        if self.items().exists():
            return 0
        MenuItem.objects.bulk_create([
            MenuItem(
                restaurant=self.context.restaurant,
                name=name,
                description=description,
                price=Decimal(price),
                category=category,
            )
            for name, description, price, category in SAMPLE_MENU
        ])
        logger.info("Sample menu of %d items created for restaurant %s", len(SAMPLE_MENU), self.context.restaurant_id)
        return len(SAMPLE_MENU)
