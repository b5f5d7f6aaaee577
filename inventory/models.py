from dataclasses import dataclass
from decimal import Decimal
from typing import Union

from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q

from authentication.models import Restaurant, TimeStampedModel


class MenuCategory(models.TextChoices):
    APERITIF = "aperitif", "Apéritifs"
    ENTREE = "entree", "Entrées"
    PLAT = "plat", "Plats principaux"
    DESSERT = "dessert", "Desserts"
    BOISSON_FROIDE = "boisson_froide", "Boissons froides"
    BOISSON_CHAUDE = "boisson_chaude", "Boissons chaudes"
    BOISSON_ALCOOLISE = "boisson_alcoolise", "Boissons alcoolisées"


class MenuItem(TimeStampedModel):
    restaurant = models.ForeignKey(Restaurant, on_delete=models.CASCADE, related_name='menu_items')
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(Decimal('0.00'))])
    category = models.CharField(max_length=30, choices=MenuCategory.choices)
    image_url = models.URLField(blank=True)

    # Coarse per-item counter, independent of ingredient tracking
    stock_quantity = models.IntegerField(default=0)
    is_available = models.BooleanField(default=True)

    ingredients = models.ManyToManyField(
        'Ingredient', through='MenuItemIngredient', related_name='menu_items', blank=True
    )

    class Meta:
        db_table = 'menu_items'
        ordering = ['category', 'name']
        constraints = [
            models.CheckConstraint(condition=Q(price__gte=0), name='menu_item_price_non_negative'),
        ]

    def __str__(self):
        return self.name


class Ingredient(TimeStampedModel):
    restaurant = models.ForeignKey(Restaurant, on_delete=models.CASCADE, related_name='ingredients')
    name = models.CharField(max_length=255)
    unit = models.CharField(max_length=50)

    # May go negative: orders never wait for stock
    stock_quantity = models.DecimalField(max_digits=12, decimal_places=3, default=Decimal('0'))
    min_quantity = models.DecimalField(max_digits=12, decimal_places=3, default=Decimal('0'))
    cost_per_unit = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    supplier = models.CharField(max_length=255, blank=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = 'ingredients'
        ordering = ['name']

    def __str__(self):
        return f"{self.name} ({self.unit})"

    @property
    def is_low(self):
        return self.stock_quantity <= self.min_quantity


class MenuItemIngredient(models.Model):
    """One recipe line: how much of an ingredient one unit of a menu item consumes"""
    menu_item = models.ForeignKey(MenuItem, on_delete=models.CASCADE, related_name='recipe_lines')
    ingredient = models.ForeignKey(Ingredient, on_delete=models.RESTRICT, related_name='recipe_lines')
    quantity_needed = models.DecimalField(max_digits=10, decimal_places=3)

    class Meta:
        db_table = 'menu_ingredients'
        unique_together = ['menu_item', 'ingredient']
        constraints = [
            models.CheckConstraint(condition=Q(quantity_needed__gt=0), name='recipe_quantity_positive'),
        ]

    def __str__(self):
        return f"{self.menu_item.name}: {self.quantity_needed} x {self.ingredient.name}"


# =============== STOCK MOVEMENTS ===============

@dataclass(frozen=True)
class IngredientTarget:
    ingredient_id: int


@dataclass(frozen=True)
class MenuItemTarget:
    menu_item_id: int


MovementTarget = Union[IngredientTarget, MenuItemTarget]


class StockMovementQuerySet(models.QuerySet):

    def for_target(self, target: MovementTarget):
        if isinstance(target, IngredientTarget):
            return self.filter(ingredient_id=target.ingredient_id)
        if isinstance(target, MenuItemTarget):
            return self.filter(menu_item_id=target.menu_item_id)
        raise TypeError(f"Unknown movement target: {target!r}")

    def update(self, **kwargs):
        raise TypeError("Stock movements are append-only")

    def delete(self):
        raise TypeError("Stock movements are append-only")


class StockMovement(models.Model):
    """Append-only audit record of one stock change"""
    ENTREE = 'entree'
    SORTIE = 'sortie'
    MOVEMENT_TYPES = (
        (ENTREE, 'Entrée'),
        (SORTIE, 'Sortie'),
    )

    restaurant = models.ForeignKey(Restaurant, on_delete=models.CASCADE, related_name='stock_movements')
    # Exactly one target is set
    ingredient = models.ForeignKey(
        Ingredient, on_delete=models.RESTRICT, null=True, blank=True, related_name='movements'
    )
    menu_item = models.ForeignKey(
        MenuItem, on_delete=models.RESTRICT, null=True, blank=True, related_name='movements'
    )
    movement_type = models.CharField(max_length=10, choices=MOVEMENT_TYPES)
    quantity = models.DecimalField(max_digits=12, decimal_places=3)
    reason = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = StockMovementQuerySet.as_manager()

    class Meta:
        db_table = 'stock_movements'
        ordering = ['-created_at', '-id']
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(ingredient__isnull=False, menu_item__isnull=True)
                    | Q(ingredient__isnull=True, menu_item__isnull=False)
                ),
                name='stock_movement_single_target',
            ),
            models.CheckConstraint(condition=Q(quantity__gt=0), name='stock_movement_quantity_positive'),
        ]
        indexes = [
            models.Index(fields=['restaurant', 'created_at'], name='stock_mvt_restaurant_date_idx'),
        ]

    def __str__(self):
        return f"{self.get_movement_type_display()} {self.quantity} - {self.reason}"

    @property
    def target(self) -> MovementTarget:
        if self.ingredient_id is not None:
            return IngredientTarget(self.ingredient_id)
        return MenuItemTarget(self.menu_item_id)

    @property
    def signed_quantity(self):
        return self.quantity if self.movement_type == self.ENTREE else -self.quantity

    def save(self, *args, **kwargs):
        if self.pk is not None:
            raise TypeError("Stock movements are append-only")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise TypeError("Stock movements are append-only")
