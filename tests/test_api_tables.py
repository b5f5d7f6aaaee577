import pytest

from orders.models import Room, Table, TableStatus


@pytest.mark.django_db
def test_create_room_for_current_restaurant(api_client, restaurant):
    resp = api_client.post("/api/rooms/", {"name": "Salle principale", "color": "#FF0000"}, format="json")

    assert resp.status_code == 201
    room = Room.objects.get(pk=resp.data["id"])
    assert room.restaurant == restaurant
    assert resp.data["table_count"] == 0


@pytest.mark.django_db
def test_employee_reads_but_cannot_write_rooms(employee_client, room):
    assert employee_client.get("/api/rooms/").status_code == 200
    assert employee_client.post("/api/rooms/", {"name": "Bar"}, format="json").status_code == 403


@pytest.mark.django_db
def test_delete_room_removes_its_tables(api_client, room, table):
    resp = api_client.delete(f"/api/rooms/{room.pk}/")

    assert resp.status_code == 204
    assert not Table.objects.filter(pk=table.pk).exists()


@pytest.mark.django_db
def test_create_table_gets_defaults_and_qr_payload(api_client, room, restaurant):
    resp = api_client.post("/api/tables/", {"room": room.pk, "number": 12, "capacity": 6}, format="json")

    assert resp.status_code == 201
    assert resp.data["status"] == TableStatus.LIBRE
    assert resp.data["x"] == 50 and resp.data["y"] == 50
    table = Table.objects.get(pk=resp.data["id"])
    assert table.qr_code == f"http://localhost:8000/menu?table={table.pk}&restaurant={restaurant.code}"


@pytest.mark.django_db
def test_table_number_is_unique_per_room(api_client, room, table, restaurant):
    duplicate = api_client.post("/api/tables/", {"room": room.pk, "number": table.number}, format="json")
    other_room = Room.objects.create(restaurant=restaurant, name="Salon")
    elsewhere = api_client.post("/api/tables/", {"room": other_room.pk, "number": table.number}, format="json")

    assert duplicate.status_code == 400
    assert elsewhere.status_code == 201


@pytest.mark.django_db
def test_table_cannot_use_room_of_other_restaurant(api_client, other_restaurant):
    foreign_room = Room.objects.create(restaurant=other_restaurant, name="Ailleurs")

    resp = api_client.post("/api/tables/", {"room": foreign_room.pk, "number": 1}, format="json")

    assert resp.status_code == 400
    assert "room" in resp.data["details"]


@pytest.mark.django_db
def test_tables_listed_by_room_then_number(api_client, restaurant, room):
    bar = Room.objects.create(restaurant=restaurant, name="Bar")
    Table.objects.create(room=room, number=2)
    Table.objects.create(room=room, number=1)
    Table.objects.create(room=bar, number=9)

    resp = api_client.get("/api/tables/")

    assert [(row["room_name"], row["number"]) for row in resp.data] == [("Bar", 9), ("Terrasse", 1), ("Terrasse", 2)]


@pytest.mark.django_db
def test_table_position(employee_client, table):
    resp = employee_client.put(f"/api/tables/{table.pk}/position/", {"x": 120.5, "y": 80}, format="json")

    assert resp.status_code == 200
    table.refresh_from_db()
    assert (table.x, table.y) == (120.5, 80)


@pytest.mark.django_db
def test_manual_table_status(employee_client, table):
    resp = employee_client.put(f"/api/tables/{table.pk}/status/", {"status": "reservee"}, format="json")

    assert resp.status_code == 200
    assert resp.data["status"] == TableStatus.RESERVEE

    resp = employee_client.put(f"/api/tables/{table.pk}/status/", {"status": "fermee"}, format="json")
    assert resp.status_code == 400


@pytest.mark.django_db
def test_table_by_number_for_qr_page(public_client, table):
    resp = public_client.get(f"/api/tables/by-number/{table.number}/")

    assert resp.status_code == 200
    assert resp.data["id"] == table.pk

    assert public_client.get("/api/tables/by-number/99/").status_code == 404


@pytest.mark.django_db
def test_regenerate_qr_codes(api_client, table, settings):
    settings.TABLE_QR_BASE_URL = "https://resto.example/menu"

    single = api_client.post(f"/api/tables/{table.pk}/generate-qr/")
    bulk = api_client.post("/api/tables/regenerate-qr/")

    assert single.status_code == 200
    assert single.data["qr_code"].startswith("https://resto.example/menu?table=")
    assert bulk.data["updated"] == 1
