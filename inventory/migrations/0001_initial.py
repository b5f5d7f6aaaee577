from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("authentication", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="MenuItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                (
                    "price",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.00"))],
                    ),
                ),
                (
                    "category",
                    models.CharField(
                        choices=[
                            ("aperitif", "Apéritifs"),
                            ("entree", "Entrées"),
                            ("plat", "Plats principaux"),
                            ("dessert", "Desserts"),
                            ("boisson_froide", "Boissons froides"),
                            ("boisson_chaude", "Boissons chaudes"),
                            ("boisson_alcoolise", "Boissons alcoolisées"),
                        ],
                        max_length=30,
                    ),
                ),
                ("image_url", models.URLField(blank=True)),
                ("stock_quantity", models.IntegerField(default=0)),
                ("is_available", models.BooleanField(default=True)),
                (
                    "restaurant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="menu_items",
                        to="authentication.restaurant",
                    ),
                ),
            ],
            options={
                "db_table": "menu_items",
                "ordering": ["category", "name"],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("price__gte", 0)), name="menu_item_price_non_negative"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Ingredient",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=255)),
                ("unit", models.CharField(max_length=50)),
                ("stock_quantity", models.DecimalField(decimal_places=3, default=Decimal("0"), max_digits=12)),
                ("min_quantity", models.DecimalField(decimal_places=3, default=Decimal("0"), max_digits=12)),
                ("cost_per_unit", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=10)),
                ("supplier", models.CharField(blank=True, max_length=255)),
                ("is_active", models.BooleanField(default=True)),
                (
                    "restaurant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="ingredients",
                        to="authentication.restaurant",
                    ),
                ),
            ],
            options={
                "db_table": "ingredients",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="MenuItemIngredient",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("quantity_needed", models.DecimalField(decimal_places=3, max_digits=10)),
                (
                    "ingredient",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.RESTRICT,
                        related_name="recipe_lines",
                        to="inventory.ingredient",
                    ),
                ),
                (
                    "menu_item",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="recipe_lines",
                        to="inventory.menuitem",
                    ),
                ),
            ],
            options={
                "db_table": "menu_ingredients",
                "unique_together": {("menu_item", "ingredient")},
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("quantity_needed__gt", 0)), name="recipe_quantity_positive"),
                ],
            },
        ),
        migrations.AddField(
            model_name="menuitem",
            name="ingredients",
            field=models.ManyToManyField(
                blank=True,
                related_name="menu_items",
                through="inventory.MenuItemIngredient",
                to="inventory.ingredient",
            ),
        ),
        migrations.CreateModel(
            name="StockMovement",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "movement_type",
                    models.CharField(choices=[("entree", "Entrée"), ("sortie", "Sortie")], max_length=10),
                ),
                ("quantity", models.DecimalField(decimal_places=3, max_digits=12)),
                ("reason", models.CharField(blank=True, max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "ingredient",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.RESTRICT,
                        related_name="movements",
                        to="inventory.ingredient",
                    ),
                ),
                (
                    "menu_item",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.RESTRICT,
                        related_name="movements",
                        to="inventory.menuitem",
                    ),
                ),
                (
                    "restaurant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="stock_movements",
                        to="authentication.restaurant",
                    ),
                ),
            ],
            options={
                "db_table": "stock_movements",
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["restaurant", "created_at"], name="stock_mvt_restaurant_date_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(("ingredient__isnull", False), ("menu_item__isnull", True)),
                            models.Q(("ingredient__isnull", True), ("menu_item__isnull", False)),
                            _connector="OR",
                        ),
                        name="stock_movement_single_target",
                    ),
                    models.CheckConstraint(condition=models.Q(("quantity__gt", 0)), name="stock_movement_quantity_positive"),
                ],
            },
        ),
    ]
