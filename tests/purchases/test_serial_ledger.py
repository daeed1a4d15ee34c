import json
import uuid

import pytest

from purchases.models import MTokenSerialNumber
from purchases.services import create_purchase_order, mark_mtoken_as_used
from stores.models import Store

SERIAL_URL = "/api/v1/purchase-orders/serial/"


@pytest.fixture
def allocated(store):
    order, serials = create_purchase_order(
        store_id=store.pk,
        quantity=3,
        amount="900",
        purchase_date="2024-02-10",
        serial_numbers=["mt-100", "mt-101", "xz-200"],
    )
    return order


def _mark_used(client, serial_number, lead_id):
    return client.post(
        f"{SERIAL_URL}mark-used/",
        data=json.dumps({"serial_number": serial_number, "lead_id": str(lead_id)}),
        content_type="application/json",
    )


@pytest.mark.django_db
def test_mark_used_binds_serial_and_hides_it_from_search(client, employee_user, allocated, make_lead):
    lead = make_lead()
    client.force_login(employee_user)

    response = _mark_used(client, " mt-100 ", lead.pk)

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "MToken marked as used"
    assert body["serial"]["serial_number"] == "MT-100"
    assert body["serial"]["is_used"] is True
    assert body["serial"]["used_in_lead"] == str(lead.pk)

    search = client.get(f"{SERIAL_URL}search/", {"query": "mt-1"}).json()
    assert [s["serial_number"] for s in search["results"]] == ["MT-101"]
    assert search["total"] == 1


@pytest.mark.django_db
def test_marking_again_for_same_lead_is_a_no_op(allocated, make_lead):
    lead = make_lead()

    first = mark_mtoken_as_used(serial_number="MT-100", lead_id=lead.pk)
    again = mark_mtoken_as_used(serial_number="mt-100", lead_id=lead.pk)

    assert again.pk == first.pk
    assert again.used_in_lead_id == lead.pk


@pytest.mark.django_db
def test_used_serial_cannot_move_to_another_lead(client, employee_user, allocated, make_lead):
    first, second = make_lead(), make_lead()
    client.force_login(employee_user)
    assert _mark_used(client, "MT-100", first.pk).status_code == 200

    response = _mark_used(client, "MT-100", second.pk)

    assert response.status_code == 409
    body = response.json()
    assert body["error"] == "Serial number MT-100 is already used by another lead"
    assert body["details"] == {"used_in_lead": str(first.pk)}
    assert MTokenSerialNumber.objects.get(serial_number="MT-100").used_in_lead_id == first.pk


@pytest.mark.django_db
def test_mark_used_rejects_unknown_serial_or_lead(client, employee_user, allocated, make_lead):
    client.force_login(employee_user)

    response = _mark_used(client, "NOPE-1", make_lead().pk)
    assert response.status_code == 404
    assert response.json()["error"] == "Serial number not found"

    response = _mark_used(client, "MT-100", uuid.uuid4())
    assert response.status_code == 404
    assert response.json()["error"] == "Lead not found"

    response = client.post(
        f"{SERIAL_URL}mark-used/", data=json.dumps({}), content_type="application/json",
    )
    assert response.status_code == 400
    assert response.json()["error"] == "Serial number and lead ID are required"
    assert not MTokenSerialNumber.objects.filter(is_used=True).exists()


@pytest.mark.django_db
def test_serial_listing_filters_by_store_and_usage(client, employee_user, allocated, make_lead):
    other = Store.objects.create(name="North Store", description="Second counter")
    create_purchase_order(
        store_id=other.pk,
        quantity=1,
        amount="300",
        purchase_date="2024-02-11",
        serial_numbers=["nn-1"],
    )
    mark_mtoken_as_used(serial_number="MT-100", lead_id=make_lead().pk)
    client.force_login(employee_user)

    everything = client.get(f"{SERIAL_URL}all/").json()
    assert everything["total"] == 4

    north = client.get(f"{SERIAL_URL}all/", {"store_id": str(other.pk)}).json()
    assert [s["serial_number"] for s in north["serials"]] == ["NN-1"]
    assert north["serials"][0]["store_name"] == "North Store"

    used = client.get(f"{SERIAL_URL}all/", {"is_used": "true"}).json()
    assert [s["serial_number"] for s in used["serials"]] == ["MT-100"]

    unused_central = client.get(
        f"{SERIAL_URL}search/", {"store_id": str(allocated.store_id)},
    ).json()
    assert sorted(s["serial_number"] for s in unused_central["results"]) == ["MT-101", "XZ-200"]


@pytest.mark.django_db
def test_malformed_store_filter_is_a_bad_request(client, employee_user, allocated):
    client.force_login(employee_user)

    response = client.get(f"{SERIAL_URL}all/", {"store_id": "not-a-uuid"})

    assert response.status_code == 400
    assert response.json()["error"] == "store_id: Must be a valid UUID."


@pytest.mark.django_db
def test_serial_endpoints_require_authentication(client, allocated):
    assert client.get(f"{SERIAL_URL}search/").status_code in (401, 403)
