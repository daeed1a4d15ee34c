"""Lead lifecycle: pricing, referrals, create/update/delete and assignment."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import partial
from decimal import ROUND_HALF_UP, Decimal

from django.db import IntegrityError, transaction

from core.exceptions import Conflict, ValidationFailed
from core.files import delete_stored_file
from core.models import get_or_none
from core.parsing import is_blank
from notifications.services import notify_lead_assignment

from .models import Lead

logger = logging.getLogger("crm")

TWO_PLACES = Decimal("0.01")

REFERRAL_INPUT_KEYS = (
    "referred_by_type",
    "referred_by_client_id",
    "referred_by_client_name",
    "referred_by_other_name",
)


def duplicate_order_error(order_id, *, other=False) -> Conflict:
    subject = "Another lead" if other else "A lead"
    return Conflict(
        f"Duplicate order ID: {order_id}. {subject} with this order ID already exists.",
        details={"order_id": order_id},
    )


def calculate_discounted_price(quoted_price, discount_amount, discount_type) -> Decimal:
    """``max(0, quoted - discount)`` where a percentage discount is taken of the quote."""
    quoted = Decimal(str(quoted_price or 0))
    discount = Decimal(str(discount_amount or 0))
    if discount <= 0:
        return quoted.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)

    if discount_type == Lead.DiscountType.PERCENTAGE:
        reduction = quoted * discount / Decimal("100")
    else:
        reduction = discount
    return max(Decimal("0"), quoted - reduction).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class Referral:
    type: str
    name: str | None = None
    client: Lead | None = None


def resolve_referral(data) -> Referral | None:
    """Turn the referral inputs of a request into the fields stored on a lead.

    Returns ``None`` when the inputs do not describe a complete referral, in
    which case the lead's current referral is left alone.
    """
    referral_type = data.get("referred_by_type")
    if referral_type == Lead.ReferralType.EXISTING and data.get("referred_by_client_id"):
        client = get_or_none(Lead.objects.all(), data["referred_by_client_id"])
        if client is None:
            raise ValidationFailed(
                "Referred client not found",
                details={"referred_by_client_id": str(data["referred_by_client_id"])},
            )
        name = (data.get("referred_by_client_name") or "").strip() or client.client_name
        return Referral(type=Lead.ReferralType.EXISTING, name=name, client=client)
    if referral_type == Lead.ReferralType.OTHER and not is_blank(data.get("referred_by_other_name")):
        return Referral(type=Lead.ReferralType.OTHER, name=data["referred_by_other_name"].strip())
    if referral_type == Lead.ReferralType.FRESH:
        return Referral(type=Lead.ReferralType.FRESH)
    return None


def _apply_referral(lead: Lead, referral: Referral | None):
    if referral is None:
        return
    if referral.client is not None and referral.client.pk == lead.pk:
        raise ValidationFailed("A lead cannot refer itself")
    lead.referred_by_type = referral.type
    lead.referred_by = referral.name
    lead.referred_by_client = referral.client


def _split_referral_input(data: dict) -> tuple[dict, dict]:
    fields = dict(data)
    referral_input = {key: fields.pop(key, None) for key in REFERRAL_INPUT_KEYS}
    return fields, referral_input


def _save_guarding_order_id(lead: Lead, *, other: bool):
    """Save inside a savepoint; a unique violation on ``order_id`` becomes a conflict."""
    try:
        with transaction.atomic():
            lead.save()
    except IntegrityError:
        if Lead.objects.filter(order_id=lead.order_id).exclude(pk=lead.pk).exists():
            raise duplicate_order_error(lead.order_id, other=other)
        raise


@transaction.atomic
def create_lead(data: dict) -> Lead:
    """Create one lead from validated input (uploaded files included)."""
    fields, referral_input = _split_referral_input(data)
    order_id = fields.get("order_id")
    if Lead.objects.filter(order_id=order_id).exists():
        raise duplicate_order_error(order_id)

    lead = Lead(**fields)
    _apply_referral(lead, resolve_referral(referral_input))
    lead.discounted_price = calculate_discounted_price(
        lead.quoted_price, lead.discount_amount, lead.discount_type,
    )
    try:
        _save_guarding_order_id(lead, other=False)
    except Conflict:
        for name in lead.stored_file_names().values():
            delete_stored_file(name)
        raise

    logger.info("Lead %s created (order %s)", lead.pk, lead.order_id)
    notify_lead_assignment(lead)
    return lead


@transaction.atomic
def update_lead(lead: Lead, data: dict) -> Lead:
    """Merge *data* into *lead*.

    Only supplied fields change.  A newly uploaded document replaces the
    stored one, whose file is then removed.  The discounted price is
    recomputed from the merged pricing fields, and the assignee is notified
    only when the assignment actually changes.
    """
    fields, referral_input = _split_referral_input(data)
    new_order_id = fields.get("order_id")
    if (
        new_order_id
        and new_order_id != lead.order_id
        and Lead.objects.filter(order_id=new_order_id).exclude(pk=lead.pk).exists()
    ):
        raise duplicate_order_error(new_order_id, other=True)

    previous_assignee = lead.assign_team_member
    previous_files = lead.stored_file_names()
    superseded = []

    for field, value in fields.items():
        if field in Lead.FILE_FIELDS:
            if not value:
                continue
            if previous_files.get(field):
                superseded.append(previous_files[field])
        setattr(lead, field, value)

    _apply_referral(lead, resolve_referral(referral_input))
    lead.discounted_price = calculate_discounted_price(
        lead.quoted_price, lead.discount_amount, lead.discount_type,
    )
    _save_guarding_order_id(lead, other=True)

    current_files = set(lead.stored_file_names().values())
    for name in superseded:
        if name not in current_files:
            transaction.on_commit(partial(delete_stored_file, name))

    if lead.assign_team_member and lead.assign_team_member != previous_assignee:
        notify_lead_assignment(lead)
    return lead


@transaction.atomic
def delete_lead(lead: Lead):
    """Delete the lead; its documents are removed once the transaction commits.

    Leads it referred keep existing; their ``referred_by_client`` is nulled.
    """
    lead_id = lead.pk
    file_names = list(lead.stored_file_names().values())
    lead.delete()
    for name in file_names:
        transaction.on_commit(partial(delete_stored_file, name))
    logger.info("Lead %s deleted", lead_id)
    return lead_id


def update_assignment_status(lead: Lead, assignment_status) -> Lead:
    if is_blank(assignment_status):
        raise ValidationFailed("Assignment status is required")
    lead.assignment_status = str(assignment_status).strip()
    lead.save(update_fields=["assignment_status", "updated_at"])
    return lead


def assigned_leads_for(user):
    """Leads visible on a user's "assigned to me" board, newest first."""
    qs = Lead.objects.order_by("-created_at")
    if getattr(user, "sees_all_leads", False):
        return qs
    return qs.filter(assign_team_member=user.full_name)
