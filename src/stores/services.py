"""Service functions for the stores app."""
from __future__ import annotations

import logging

from django.db import transaction
from django.db.models.deletion import ProtectedError

from core.exceptions import Conflict, NotFound, ValidationFailed
from core.models import get_or_none
from stores.models import Store

logger = logging.getLogger("crm")


def _require_name_and_description(name, description):
    if not (name or "").strip() or not (description or "").strip():
        raise ValidationFailed("Store name and description are required")


def create_store(*, name, description):
    _require_name_and_description(name, description)
    store = Store.objects.create(name=name.strip(), description=description.strip())
    logger.info("Store created: %s", store.name)
    return store


def update_store(store, *, name=None, description=None):
    """Partial update; omitted fields keep their current value."""
    new_name = store.name if name is None else name
    new_description = store.description if description is None else description
    _require_name_and_description(new_name, new_description)
    store.name = new_name.strip()
    store.description = new_description.strip()
    store.save(update_fields=["name", "description", "updated_at"])
    return store


@transaction.atomic
def delete_store(store_id):
    """Delete a store that no purchase order references.

    Raises ``NotFound`` for an unknown id and ``Conflict`` (with the number
    of dependent orders in ``details``) while any purchase order still
    points at the store.
    """
    store = get_or_none(Store.objects.select_for_update(), store_id)
    if store is None:
        raise NotFound("Store not found")

    dependent_orders = store.purchase_orders.count()
    if dependent_orders:
        raise Conflict(
            f"Cannot delete store: {dependent_orders} purchase order(s) reference it. "
            "Delete or reassign them first.",
            details={"purchase_orders": dependent_orders},
        )

    try:
        store.delete()
    except ProtectedError as exc:
        # A purchase order slipped in after the count.
        raise Conflict(
            "Cannot delete store: purchase orders reference it.",
            details={"purchase_orders": len(exc.protected_objects)},
        )
    logger.info("Store deleted: %s", store_id)
    return store_id
