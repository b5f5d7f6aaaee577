from decimal import Decimal

import pytest

from inventory.models import Ingredient, MenuItem, StockMovement
from inventory.serializers import IngredientSerializer, MenuItemSerializer
from inventory.services import InventoryLedger, MenuCatalog


@pytest.mark.django_db
def test_public_menu_listing(public_client, salad):
    resp = public_client.get("/api/menu/")

    assert resp.status_code == 200
    assert [item["name"] for item in resp.data] == ["Salade"]
    assert resp.data[0]["category_label"] == "Entrées"


@pytest.mark.django_db
def test_menu_listing_filters_availability(public_client, salad, restaurant):
    MenuItem.objects.create(restaurant=restaurant, name="Ancien plat", price=Decimal("9"), category="plat", is_available=False)

    resp = public_client.get("/api/menu/", {"is_available": "true"})

    assert [item["name"] for item in resp.data] == ["Salade"]


@pytest.mark.django_db
def test_manager_creates_menu_item(api_client, restaurant):
    resp = api_client.post(
        "/api/menu/", {"name": "Tarte tatin", "price": "8.50", "category": "dessert"}, format="json"
    )

    assert resp.status_code == 201
    item = MenuItem.objects.get(pk=resp.data["id"])
    assert item.restaurant == restaurant
    assert item.price == Decimal("8.50")


@pytest.mark.django_db
def test_employee_cannot_create_menu_item(employee_client):
    resp = employee_client.post(
        "/api/menu/", {"name": "Tarte tatin", "price": "8.50", "category": "dessert"}, format="json"
    )

    assert resp.status_code == 403
    assert resp.data["error"] == "Droits insuffisants"


@pytest.mark.django_db
def test_menu_item_rejects_negative_price(api_client):
    resp = api_client.post("/api/menu/", {"name": "Promo", "price": "-1", "category": "plat"}, format="json")

    assert resp.status_code == 400
    assert "price" in resp.data["details"]


@pytest.mark.django_db
def test_delete_menu_item_soft_disables(api_client, salad):
    resp = api_client.delete(f"/api/menu/{salad.pk}/")

    assert resp.status_code == 204
    salad.refresh_from_db()
    assert salad.is_available is False


@pytest.mark.django_db
def test_recipe_read_and_replace(api_client, salad, tomato):
    resp = api_client.get(f"/api/menu/{salad.pk}/recipe/")
    assert resp.status_code == 200
    assert resp.data[0]["ingredient_id"] == tomato.pk
    assert resp.data[0]["ingredient_name"] == "Tomate"

    resp = api_client.put(
        f"/api/menu/{salad.pk}/recipe/", [{"ingredient_id": tomato.pk, "quantity_needed": "0.5"}], format="json"
    )
    assert resp.status_code == 200
    assert resp.data[0]["quantity_needed"] == "0.500"


@pytest.mark.django_db
def test_item_stock_endpoint_records_movement(api_client, salad):
    resp = api_client.post(f"/api/menu/{salad.pk}/stock/", {"stock_quantity": 15}, format="json")

    assert resp.status_code == 200
    assert resp.data["stock_quantity"] == 15
    movement = StockMovement.objects.get(menu_item=salad)
    assert movement.movement_type == StockMovement.ENTREE
    assert movement.reason == "Ajustement manuel"


@pytest.mark.django_db
def test_init_menu_seeds_once(api_client):
    first = api_client.post("/api/menu/init/")
    second = api_client.post("/api/menu/init/")

    assert first.status_code == 200
    assert first.data["inserted"] > 0
    assert second.data["inserted"] == 0


@pytest.mark.django_db
def test_create_ingredient_records_initial_stock(api_client, restaurant):
    resp = api_client.post(
        "/api/ingredients/",
        {"name": "Farine", "unit": "kg", "stock_quantity": "25", "min_quantity": "5"},
        format="json",
    )

    assert resp.status_code == 201
    flour = Ingredient.objects.get(pk=resp.data["id"])
    assert flour.stock_quantity == Decimal("25")
    movement = StockMovement.objects.get(ingredient=flour)
    assert movement.reason == "Stock initial"


@pytest.mark.django_db
def test_full_ingredient_update_goes_through_ledger(api_client, tomato):
    resp = api_client.put(
        f"/api/ingredients/{tomato.pk}/",
        {"name": "Tomate", "unit": "kg", "stock_quantity": "7", "min_quantity": "2"},
        format="json",
    )

    assert resp.status_code == 200
    assert resp.data["stock_quantity"] == "7.000"
    movement = StockMovement.objects.get(ingredient=tomato)
    assert movement.movement_type == StockMovement.SORTIE
    assert movement.quantity == Decimal("3")
    assert movement.reason == "Mise à jour manuelle"


@pytest.mark.django_db
def test_unchanged_ingredient_stock_writes_no_movement(api_client, tomato):
    resp = api_client.patch(f"/api/ingredients/{tomato.pk}/", {"stock_quantity": "10", "supplier": "Primeur"}, format="json")

    assert resp.status_code == 200
    assert not StockMovement.objects.exists()


@pytest.mark.django_db
def test_delete_ingredient_deactivates(api_client, tomato, salad):
    resp = api_client.delete(f"/api/ingredients/{tomato.pk}/")

    assert resp.status_code == 204
    tomato.refresh_from_db()
    assert tomato.is_active is False


@pytest.mark.django_db
def test_low_stock_endpoint(api_client, tomato):
    api_client.post(
        "/api/ingredient-movements/",
        {"ingredient_id": tomato.pk, "quantity": "8.5", "movement_type": "sortie", "reason": "Casse"},
        format="json",
    )

    resp = api_client.get("/api/ingredients/low-stock/")

    assert resp.status_code == 200
    assert [row["name"] for row in resp.data] == ["Tomate"]
    assert resp.data[0]["is_low"] is True


@pytest.mark.django_db
def test_ingredient_movement_endpoints(api_client, tomato):
    resp = api_client.post(
        "/api/ingredient-movements/",
        {"ingredient_id": tomato.pk, "quantity": "4", "movement_type": "entree", "reason": "Livraison"},
        format="json",
    )
    assert resp.status_code == 201
    assert resp.data["target_type"] == "ingredient"
    assert resp.data["target_name"] == "Tomate"

    resp = api_client.get("/api/ingredient-movements/", {"ingredient_id": tomato.pk})
    assert resp.status_code == 200
    assert len(resp.data) == 1
    tomato.refresh_from_db()
    assert tomato.stock_quantity == Decimal("14")


@pytest.mark.django_db
def test_item_movement_endpoints(api_client, salad):
    resp = api_client.post(
        "/api/stock-movements/",
        {"item_id": salad.pk, "quantity": "3", "movement_type": "entree"},
        format="json",
    )
    assert resp.status_code == 201
    assert resp.data["target_type"] == "menu_item"

    resp = api_client.get("/api/stock-movements/", {"item_id": salad.pk})
    assert [row["menu_item"] for row in resp.data] == [salad.pk]


@pytest.mark.django_db
def test_movement_rejects_unknown_type(api_client, tomato):
    resp = api_client.post(
        "/api/ingredient-movements/",
        {"ingredient_id": tomato.pk, "quantity": "1", "movement_type": "transfert"},
        format="json",
    )

    assert resp.status_code == 400


@pytest.mark.django_db
def test_ingredient_rename_keeps_concurrent_deduction(context, tomato):
    stale = Ingredient.objects.get(pk=tomato.pk)
    InventoryLedger(context).adjust(tomato.pk, Decimal("-3"), "Commande - Salade")

    serializer = IngredientSerializer(
        stale, data={"name": "Tomate grappe"}, partial=True, context={"restaurant_context": context}
    )
    serializer.is_valid(raise_exception=True)
    serializer.save()

    tomato.refresh_from_db()
    assert tomato.name == "Tomate grappe"
    assert tomato.stock_quantity == Decimal("7")


@pytest.mark.django_db
def test_menu_item_update_keeps_concurrent_item_stock(context, salad):
    catalog = MenuCatalog(context)
    stale = MenuItem.objects.get(pk=salad.pk)
    catalog.adjust_item_stock(salad.pk, 12)

    serializer = MenuItemSerializer(
        stale, data={"price": "9.00"}, partial=True, context={"restaurant_context": context}
    )
    serializer.is_valid(raise_exception=True)
    serializer.save()

    salad.refresh_from_db()
    assert salad.price == Decimal("9.00")
    assert salad.stock_quantity == 12


@pytest.mark.django_db
@pytest.mark.parametrize("url, param", [
    ("/api/stock-movements/", "item_id"),
    ("/api/ingredient-movements/", "ingredient_id"),
])
def test_movement_filter_rejects_non_numeric_id(api_client, url, param):
    resp = api_client.get(url, {param: "abc"})

    assert resp.status_code == 400
    assert resp.data["details"][param] == ["Identifiant invalide"]
