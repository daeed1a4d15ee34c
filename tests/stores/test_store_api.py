import json
import uuid

import pytest

from purchases.services import create_purchase_order
from stores.models import Store

STORES_URL = "/api/v1/stores/"


def _post_json(client, url, payload):
    return client.post(url, data=json.dumps(payload), content_type="application/json")


@pytest.mark.django_db
def test_manager_creates_store(client, manager_user):
    client.force_login(manager_user)

    response = _post_json(client, STORES_URL, {"name": " East Store ", "description": "Kiosk"})

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Store created successfully"
    assert body["store"]["name"] == "East Store"
    assert body["store"]["purchase_order_count"] == 0
    assert Store.objects.filter(name="East Store").exists()


@pytest.mark.django_db
@pytest.mark.parametrize(
    "payload",
    [
        {"name": "East Store"},
        {"name": "", "description": "Kiosk"},
        {"name": "East Store", "description": "   "},
    ],
)
def test_store_requires_name_and_description(client, manager_user, payload):
    client.force_login(manager_user)

    response = _post_json(client, STORES_URL, payload)

    assert response.status_code == 400
    assert response.json() == {"error": "Store name and description are required"}
    assert not Store.objects.exists()


@pytest.mark.django_db
def test_update_keeps_omitted_fields(client, manager_user, store):
    client.force_login(manager_user)

    response = client.patch(
        f"{STORES_URL}{store.pk}/",
        data=json.dumps({"name": "Central Store (HQ)"}),
        content_type="application/json",
    )

    assert response.status_code == 200
    assert response.json()["message"] == "Store updated successfully"
    store.refresh_from_db()
    assert store.name == "Central Store (HQ)"
    assert store.description == "Main MToken counter"


@pytest.mark.django_db
def test_store_with_purchase_orders_cannot_be_deleted(client, manager_user, store):
    create_purchase_order(
        store_id=store.pk,
        quantity=1,
        amount="250",
        purchase_date="2024-01-01",
        serial_numbers=["sn-9"],
    )
    client.force_login(manager_user)

    response = client.delete(f"{STORES_URL}{store.pk}/")

    assert response.status_code == 409
    body = response.json()
    assert body["error"].startswith("Cannot delete store: 1 purchase order(s) reference it.")
    assert body["details"] == {"purchase_orders": 1}
    assert Store.objects.filter(pk=store.pk).exists()

    listing = client.get(STORES_URL).json()
    assert listing["results"][0]["purchase_order_count"] == 1


@pytest.mark.django_db
def test_unreferenced_store_is_deleted(client, manager_user, store):
    client.force_login(manager_user)

    response = client.delete(f"{STORES_URL}{store.pk}/")

    assert response.status_code == 200
    assert response.json() == {"message": "Store deleted successfully", "store_id": str(store.pk)}
    assert not Store.objects.exists()


@pytest.mark.django_db
def test_unknown_or_malformed_store_is_not_found(client, manager_user):
    client.force_login(manager_user)

    for pk in (uuid.uuid4(), "not-a-uuid"):
        response = client.delete(f"{STORES_URL}{pk}/")
        assert response.status_code == 404
        assert response.json() == {"error": "Store not found"}


@pytest.mark.django_db
def test_employee_can_read_but_not_write_stores(client, employee_user, store):
    client.force_login(employee_user)

    assert client.get(STORES_URL).status_code == 200
    assert client.get(f"{STORES_URL}{store.pk}/").json()["name"] == "Central Store"
    assert _post_json(client, STORES_URL, {"name": "X", "description": "Y"}).status_code == 403
    assert client.delete(f"{STORES_URL}{store.pk}/").status_code == 403
    assert Store.objects.count() == 1
