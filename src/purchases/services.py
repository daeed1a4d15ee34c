"""MToken allocation ledger: purchase orders and serial-number usage."""

from __future__ import annotations

import logging
from collections import Counter

from django.db import IntegrityError, transaction

from core.exceptions import Conflict, NotFound, ValidationFailed
from core.models import get_or_none
from core.parsing import (
    is_blank,
    parse_date_field,
    parse_decimal_field,
    parse_positive_int,
)
from stores.models import Store

from .models import MTokenSerialNumber, PurchaseOrder, normalize_serial_number

logger = logging.getLogger("crm")


def _get_store(store_id) -> Store:
    store = get_or_none(Store.objects.all(), store_id)
    if store is None:
        raise NotFound("Store not found")
    return store


def _existing_serials(normalized: list[str]) -> list[str]:
    """Which of *normalized* are already stored (single batched query)."""
    return sorted(
        MTokenSerialNumber.objects
        .filter(serial_number__in=normalized)
        .values_list("serial_number", flat=True)
    )


def _already_exist_error(existing: list[str]) -> Conflict:
    return Conflict(
        f"Serial numbers already exist: {', '.join(existing)}",
        details={"existing_serial_numbers": existing},
    )


@transaction.atomic
def create_purchase_order(
    *,
    store_id,
    quantity,
    amount,
    purchase_date,
    serial_numbers,
    product_name: str = "",
) -> tuple[PurchaseOrder, list[MTokenSerialNumber]]:
    """Create one purchase order and one unused serial per supplied number.

    Every precondition is checked before the first write.  The unique
    constraint on ``serial_number`` remains the final guard against a
    concurrent request allocating the same token; its violation is reported
    exactly like the pre-check.
    """
    if any(is_blank(value) for value in (store_id, quantity, amount, purchase_date)):
        raise ValidationFailed("Store, quantity, amount, and purchase date are required")
    if not isinstance(serial_numbers, (list, tuple)) or not serial_numbers:
        raise ValidationFailed("At least one serial number is required")

    quantity = parse_positive_int(quantity, field_label="Quantity")
    amount = parse_decimal_field(amount, field_label="amount")
    if amount < 0:
        raise ValidationFailed("Amount cannot be negative")
    purchase_date = parse_date_field(purchase_date, field_label="purchase date")

    if len(serial_numbers) != quantity:
        raise ValidationFailed(
            f"Number of serial numbers ({len(serial_numbers)}) must match quantity ({quantity})",
        )

    store = _get_store(store_id)

    normalized = [normalize_serial_number(value) for value in serial_numbers]
    if any(not value for value in normalized):
        raise ValidationFailed("Serial numbers cannot be blank")
    duplicates = sorted(value for value, count in Counter(normalized).items() if count > 1)
    if duplicates:
        raise ValidationFailed(
            "Duplicate serial numbers provided",
            details={"duplicate_serial_numbers": duplicates},
        )

    existing = _existing_serials(normalized)
    if existing:
        raise _already_exist_error(existing)

    order = PurchaseOrder.objects.create(
        store=store,
        product_name=(product_name or "").strip() or "MToken",
        quantity=quantity,
        amount=amount,
        purchase_date=purchase_date,
    )
    try:
        with transaction.atomic():
            serials = MTokenSerialNumber.objects.bulk_create(
                [
                    MTokenSerialNumber(
                        serial_number=value,
                        purchase_order=order,
                        store=store,
                        purchase_date=purchase_date,
                        is_used=False,
                    )
                    for value in normalized
                ]
            )
    except IntegrityError:
        logger.warning("Serial allocation raced with another request for order %s", order.pk)
        raise _already_exist_error(_existing_serials(normalized) or normalized)

    logger.info(
        "Purchase order %s created for store %s with %d serial(s)",
        order.pk, store.name, len(serials),
    )
    return order, serials


@transaction.atomic
def update_purchase_order(
    order: PurchaseOrder,
    *,
    store_id=None,
    quantity=None,
    amount=None,
    purchase_date=None,
    product_name=None,
) -> PurchaseOrder:
    """Partial update.

    Moving the order to another store re-homes its serial numbers too.  The
    quantity is tied to the allocated serials and can only be restated, not
    changed.
    """
    serial_qs = MTokenSerialNumber.objects.filter(purchase_order=order)
    serial_changes = {}

    if not is_blank(store_id) and str(store_id) != str(order.store_id):
        order.store = _get_store(store_id)
        serial_changes["store"] = order.store
    if not is_blank(quantity):
        quantity = parse_positive_int(quantity, field_label="Quantity")
        allocated = serial_qs.count()
        if quantity != allocated:
            raise ValidationFailed(
                f"Quantity ({quantity}) must match the number of serial numbers ({allocated})",
            )
        order.quantity = quantity
    if not is_blank(amount):
        order.amount = parse_decimal_field(amount, field_label="amount")
        if order.amount < 0:
            raise ValidationFailed("Amount cannot be negative")
    if not is_blank(purchase_date):
        order.purchase_date = parse_date_field(purchase_date, field_label="purchase date")
        serial_changes["purchase_date"] = order.purchase_date
    if not is_blank(product_name):
        order.product_name = product_name.strip()

    order.save()
    if serial_changes:
        serial_qs.update(**serial_changes)
    return order


@transaction.atomic
def delete_purchase_order(order: PurchaseOrder):
    """Remove the order together with every serial it allocated."""
    order_id = order.pk
    removed, _ = MTokenSerialNumber.objects.filter(purchase_order=order).delete()
    order.delete()
    logger.info("Purchase order %s deleted with %d serial(s)", order_id, removed)
    return order_id


@transaction.atomic
def mark_mtoken_as_used(*, serial_number, lead_id) -> MTokenSerialNumber:
    """Bind an unused serial to the lead that consumed it.

    Marking a serial again for the same lead is a no-op; binding an already
    used serial to a different lead is a conflict.  Nothing ever returns a
    serial to the unused state.
    """
    from leads.models import Lead

    normalized = normalize_serial_number(serial_number)
    if not normalized or is_blank(lead_id):
        raise ValidationFailed("Serial number and lead ID are required")

    serial = (
        MTokenSerialNumber.objects
        .select_for_update()
        .filter(serial_number=normalized)
        .first()
    )
    if serial is None:
        raise NotFound("Serial number not found")

    lead = get_or_none(Lead.objects.all(), lead_id)
    if lead is None:
        raise NotFound("Lead not found")

    if serial.is_used:
        if serial.used_in_lead_id == lead.pk:
            return serial
        raise Conflict(
            f"Serial number {normalized} is already used by another lead",
            details={"used_in_lead": str(serial.used_in_lead_id) if serial.used_in_lead_id else None},
        )

    serial.is_used = True
    serial.used_in_lead = lead
    serial.save(update_fields=["is_used", "used_in_lead", "updated_at"])
    logger.info("MToken %s marked as used by lead %s", normalized, lead.pk)
    return serial


def search_unused_serial_numbers(query=None, store_id=None):
    """Unused serials, optionally narrowed by substring and store, newest first."""
    qs = MTokenSerialNumber.objects.select_related("store").filter(is_used=False)
    if not is_blank(query):
        qs = qs.filter(serial_number__icontains=str(query).strip())
    if not is_blank(store_id):
        qs = qs.filter(store_id=store_id)
    return qs.order_by("-created_at")


def list_serial_numbers(store_id=None, is_used=None):
    """Every serial, optionally filtered by store and usage, newest first."""
    qs = MTokenSerialNumber.objects.select_related("store", "used_in_lead")
    if not is_blank(store_id):
        qs = qs.filter(store_id=store_id)
    if is_used is not None:
        qs = qs.filter(is_used=is_used)
    return qs.order_by("-created_at")
