from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from authentication.context import RestaurantContext
from authentication.models import Restaurant, RestaurantUser
from inventory.models import Ingredient, MenuCategory, MenuItem, MenuItemIngredient
from orders.models import Room, Table


@pytest.fixture
def restaurant(db):
    return Restaurant.objects.create(name="Chez Léon", code="chez-leon")


@pytest.fixture
def other_restaurant(db):
    return Restaurant.objects.create(name="Le Voisin", code="le-voisin")


@pytest.fixture
def user(db):
    return get_user_model().objects.create_user(username="leon", password="secret-pass")


@pytest.fixture
def membership(user, restaurant):
    return RestaurantUser.objects.create(restaurant=restaurant, user=user, role=RestaurantUser.MANAGER)


@pytest.fixture
def context(restaurant, user, membership):
    return RestaurantContext(restaurant=restaurant, user=user, membership=membership)


@pytest.fixture
def other_context(other_restaurant):
    return RestaurantContext(restaurant=other_restaurant)


@pytest.fixture
def api_client(user, membership, restaurant):
    client = APIClient()
    client.force_authenticate(user=user)
    client.credentials(HTTP_X_RESTAURANT_CODE=restaurant.code)
    return client


@pytest.fixture
def employee_client(db, restaurant):
    employee = get_user_model().objects.create_user(username="serveur", password="secret-pass")
    RestaurantUser.objects.create(restaurant=restaurant, user=employee, role=RestaurantUser.EMPLOYE)
    client = APIClient()
    client.force_authenticate(user=employee)
    client.credentials(HTTP_X_RESTAURANT_CODE=restaurant.code)
    return client


@pytest.fixture
def public_client(restaurant):
    """Anonymous client of the QR ordering page"""
    client = APIClient()
    client.credentials(HTTP_X_RESTAURANT_CODE=restaurant.code)
    return client


@pytest.fixture
def room(restaurant):
    return Room.objects.create(restaurant=restaurant, name="Terrasse")


@pytest.fixture
def table(room):
    return Table.objects.create(room=room, number=5)


@pytest.fixture
def tomato(restaurant):
    return Ingredient.objects.create(
        restaurant=restaurant, name="Tomate", unit="kg",
        stock_quantity=Decimal("10"), min_quantity=Decimal("2"),
    )


@pytest.fixture
def salad(restaurant, tomato):
    item = MenuItem.objects.create(
        restaurant=restaurant, name="Salade", price=Decimal("8.00"), category=MenuCategory.ENTREE,
    )
    MenuItemIngredient.objects.create(menu_item=item, ingredient=tomato, quantity_needed=Decimal("0.2"))
    return item
