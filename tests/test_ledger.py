from decimal import Decimal

import pytest
from django.db.models import RestrictedError
from rest_framework.exceptions import NotFound, ValidationError

from inventory.models import Ingredient, IngredientTarget, StockMovement
from inventory.services import InventoryLedger


@pytest.mark.django_db
def test_adjust_applies_delta_and_records_one_movement(context, tomato):
    ledger = InventoryLedger(context)

    movement = ledger.adjust(tomato.pk, Decimal("-3.5"), "Casse")

    tomato.refresh_from_db()
    assert tomato.stock_quantity == Decimal("6.5")
    assert movement.movement_type == StockMovement.SORTIE
    assert movement.quantity == Decimal("3.5")
    assert movement.reason == "Casse"
    assert movement.target == IngredientTarget(tomato.pk)
    assert ledger.movements(IngredientTarget(tomato.pk)).count() == 1


@pytest.mark.django_db
def test_adjust_positive_delta_is_an_entree(context, tomato):
    movement = InventoryLedger(context).adjust(tomato.pk, 4, "Livraison")

    tomato.refresh_from_db()
    assert tomato.stock_quantity == Decimal("14")
    assert movement.movement_type == StockMovement.ENTREE
    assert movement.signed_quantity == Decimal("4")


@pytest.mark.django_db
def test_adjust_allows_negative_stock(context, tomato):
    InventoryLedger(context).adjust(tomato.pk, Decimal("-25"), "Commande - Salade")

    tomato.refresh_from_db()
    assert tomato.stock_quantity == Decimal("-15")


@pytest.mark.django_db
def test_zero_delta_writes_nothing(context, tomato):
    assert InventoryLedger(context).adjust(tomato.pk, 0, "Rien") is None

    tomato.refresh_from_db()
    assert tomato.stock_quantity == Decimal("10")
    assert not StockMovement.objects.exists()


@pytest.mark.django_db
def test_stale_reads_do_not_lose_updates(context, tomato, monkeypatch):
    # Both callers read the row before either one writes
    stale = Ingredient.objects.get(pk=tomato.pk)
    first, second = InventoryLedger(context), InventoryLedger(context)
    monkeypatch.setattr(first, "get_ingredient", lambda ingredient_id: stale)
    monkeypatch.setattr(second, "get_ingredient", lambda ingredient_id: stale)

    first.adjust(tomato.pk, Decimal("-1"), "Commande - A")
    second.adjust(tomato.pk, Decimal("-2"), "Commande - B")

    tomato.refresh_from_db()
    assert tomato.stock_quantity == Decimal("7")
    assert StockMovement.objects.count() == 2


@pytest.mark.django_db
def test_set_absolute_records_the_difference(context, tomato):
    movement = InventoryLedger(context).set_absolute(tomato.pk, Decimal("12.5"), "Inventaire")

    tomato.refresh_from_db()
    assert tomato.stock_quantity == Decimal("12.5")
    assert movement.movement_type == StockMovement.ENTREE
    assert movement.quantity == Decimal("2.5")


@pytest.mark.django_db
def test_set_absolute_to_current_value_records_nothing(context, tomato):
    assert InventoryLedger(context).set_absolute(tomato.pk, Decimal("10"), "Inventaire") is None
    assert not StockMovement.objects.exists()


@pytest.mark.django_db
def test_record_manual_sortie_subtracts(context, tomato):
    InventoryLedger(context).record_manual(tomato.pk, Decimal("1.5"), StockMovement.SORTIE, "Perte")

    tomato.refresh_from_db()
    assert tomato.stock_quantity == Decimal("8.5")


@pytest.mark.django_db
@pytest.mark.parametrize("quantity, movement_type", [(0, "entree"), (-2, "sortie"), (1, "transfert")])
def test_record_manual_rejects_bad_input(context, tomato, quantity, movement_type):
    with pytest.raises(ValidationError):
        InventoryLedger(context).record_manual(tomato.pk, quantity, movement_type)


@pytest.mark.django_db
def test_list_low_uses_minimum_quantity(context, restaurant, tomato):
    basil = Ingredient.objects.create(
        restaurant=restaurant, name="Basilic", unit="botte",
        stock_quantity=Decimal("1"), min_quantity=Decimal("1"),
    )
    Ingredient.objects.create(
        restaurant=restaurant, name="Ancien", unit="kg",
        stock_quantity=Decimal("0"), min_quantity=Decimal("5"), is_active=False,
    )

    low = list(InventoryLedger(context).list_low())

    assert low == [basil]


@pytest.mark.django_db
def test_list_low_with_custom_comparator(context, tomato):
    # Warn as soon as stock reaches five times the minimum
    low = list(InventoryLedger(context).list_low(lambda stock, minimum: stock <= minimum * 5))

    assert low == [tomato]


@pytest.mark.django_db
def test_other_restaurant_ingredient_is_not_found(other_context, tomato):
    with pytest.raises(NotFound):
        InventoryLedger(other_context).adjust(tomato.pk, Decimal("-1"), "Vol")

    tomato.refresh_from_db()
    assert tomato.stock_quantity == Decimal("10")


@pytest.mark.django_db
def test_movements_are_append_only(context, tomato):
    movement = InventoryLedger(context).adjust(tomato.pk, Decimal("1"), "Livraison")

    with pytest.raises(TypeError):
        movement.save()
    with pytest.raises(TypeError):
        movement.delete()
    with pytest.raises(TypeError):
        StockMovement.objects.all().update(reason="effacé")
    with pytest.raises(TypeError):
        StockMovement.objects.all().delete()


@pytest.mark.django_db
def test_ingredient_with_history_cannot_be_hard_deleted(context, tomato):
    InventoryLedger(context).adjust(tomato.pk, Decimal("2"), "Livraison")

    with pytest.raises(RestrictedError):
        Ingredient.objects.filter(pk=tomato.pk).delete()

    assert StockMovement.objects.filter(ingredient=tomato).count() == 1
