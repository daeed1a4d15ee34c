"""Bulk lead import: per-row validation and persistence.

Rows arrive as mappings (JSON objects or CSV rows).  Each row either becomes
a lead or is reported back with the reason it was refused; one bad row never
stops the batch.  Display row numbers are ``index + 2`` so they line up with
a spreadsheet that has a header row.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from django.db import IntegrityError, transaction

from accounts.services import UserDirectory
from core.exceptions import ValidationFailed
from core.parsing import normalize_header, parse_date_field, parse_decimal_field
from notifications.services import notify_lead_assignment

from .models import Lead

logger = logging.getLogger("crm")

REQUIRED_FIELDS = (
    "employee_name",
    "source",
    "lead_created_at",
    "stage",
    "client_name",
    "client_company_name",
    "product_name",
    "assign_team_member",
    "email",
    "phone",
    "order_id",
    "order_date",
    "client_address",
    "client_kyc_id",
    "kyc_pin",
    "download_status",
    "processed_by",
    "processed_at",
    "quoted_price",
    "company_name_address",
    "payment_status",
    "billing_sent_status",
)

USER_NAME_FIELDS = (
    ("employee_name", "Employee Name"),
    ("assign_team_member", "Assign Team Member"),
    ("processed_by", "Processed By"),
)

ENUM_FIELDS = (
    ("source", "Source", Lead.Source.values),
    ("stage", "Stage", Lead.Stage.values),
    ("download_status", "Download Status", Lead.DownloadStatus.values),
    ("payment_status", "Payment Status", Lead.PaymentStatus.values),
    ("billing_sent_status", "Billing Sent Status", Lead.BillingSentStatus.values),
)

TEXT_FIELDS = (
    "employee_name",
    "source",
    "other_source",
    "stage",
    "comment",
    "remarks",
    "client_name",
    "client_company_name",
    "product_name",
    "assign_team_member",
    "email",
    "phone",
    "order_id",
    "client_address",
    "client_kyc_id",
    "kyc_pin",
    "download_status",
    "processed_by",
    "company_name",
    "company_name_address",
    "payment_status",
    "payment_status_note",
    "invoice_number",
    "billing_sent_status",
)
REQUIRED_DATE_FIELDS = ("lead_created_at", "order_date", "processed_at")
OPTIONAL_DATE_FIELDS = ("expected_close_date", "last_contacted_at", "invoice_date", "billing_date")

# Documents already uploaded elsewhere may be referenced by stored path.
FILE_ALIASES = {
    "aadhaar_pdf": ("aadhaar_pdf", "aadhaar_pdf_url"),
    "pan_pdf": ("pan_pdf", "pan_pdf_url"),
    "optional_pdf": ("optional_pdf", "optional_pdf_url"),
    "client_image": ("client_image", "client_image_url"),
    "bill_doc": ("bill_doc", "bill_doc_url"),
}

_FIELD_LOOKUP = {
    normalize_header(name): name
    for name in TEXT_FIELDS + REQUIRED_DATE_FIELDS + OPTIONAL_DATE_FIELDS + ("quoted_price",)
}
for _field, _aliases in FILE_ALIASES.items():
    for _alias in _aliases:
        _FIELD_LOOKUP[normalize_header(_alias)] = _field


@dataclass(frozen=True)
class RowOutcome:
    row: int
    client_name: str
    lead_id: str | None = None
    order_id: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class LeadImportResult:
    success: list[dict] = field(default_factory=list)
    failed: list[dict] = field(default_factory=list)

    def add(self, outcome: RowOutcome):
        if outcome.ok:
            self.success.append(
                {"row": outcome.row, "client_name": outcome.client_name, "id": outcome.lead_id}
            )
        else:
            self.failed.append(
                {"row": outcome.row, "client_name": outcome.client_name, "error": outcome.error}
            )

    @property
    def success_count(self) -> int:
        return len(self.success)

    @property
    def failed_count(self) -> int:
        return len(self.failed)

    @property
    def total_processed(self) -> int:
        return self.success_count + self.failed_count

    def as_dict(self) -> dict:
        return {"success": self.success, "failed": self.failed}


def normalize_record(raw: Mapping) -> dict[str, str]:
    """Map arbitrary key spellings onto lead fields and strip every value."""
    record: dict[str, str] = {}
    for key, value in raw.items():
        target = _FIELD_LOOKUP.get(normalize_header(key))
        if target is None:
            continue
        text = "" if value is None else str(value).strip()
        if not record.get(target):
            record[target] = text
    return record


def _duplicate_message(order_id) -> str:
    return f"Duplicate order ID: {order_id}. A lead with this order ID already exists."


def validate_record(record: dict, *, seen_order_ids, directory: UserDirectory) -> str | None:
    """Return the first reason *record* cannot be imported, or ``None``.

    Checks run in a fixed order and stop at the first failure: duplicate
    order id, missing required fields (all of them listed), unknown user
    names, enumerated values, then the "Other" source detail.
    """
    order_id = record.get("order_id", "")
    if order_id and order_id in seen_order_ids:
        return _duplicate_message(order_id)

    missing = [name for name in REQUIRED_FIELDS if not record.get(name)]
    if missing:
        return f"Missing required fields: {', '.join(missing)}"

    for name, label in USER_NAME_FIELDS:
        if record[name] not in directory:
            return (
                f'{label} "{record[name]}" not found. '
                f"Available users: {', '.join(directory.names)}"
            )

    for name, label, allowed in ENUM_FIELDS:
        if record[name] not in allowed:
            return f'Invalid {label} "{record[name]}". Must be one of: {", ".join(allowed)}'

    if record["source"] == Lead.Source.OTHER and not record.get("other_source"):
        return 'Other Source is required when Source is "Other"'
    return None


def build_lead(record: dict) -> Lead:
    """Coerce a validated record into an unsaved ``Lead``.

    Bulk rows keep the stored default discounted price and always start
    with assignment status ``"new"``.
    """
    values = {name: record.get(name, "") for name in TEXT_FIELDS}
    for name in REQUIRED_DATE_FIELDS:
        values[name] = parse_date_field(record.get(name), field_label=name)
    for name in OPTIONAL_DATE_FIELDS:
        values[name] = parse_date_field(record.get(name), field_label=name, allow_blank=True)
    price_digits = Lead._meta.get_field("quoted_price").max_digits
    values["quoted_price"] = parse_decimal_field(
        record.get("quoted_price"), field_label="quoted_price", max_digits=price_digits,
    )
    for name in FILE_ALIASES:
        if record.get(name):
            values[name] = record[name]
    values["assignment_status"] = "new"
    return Lead(**values)


def _process_record(row: int, raw, *, seen_order_ids, directory: UserDirectory):
    """Validate and persist one row. Returns a ``RowOutcome`` and the saved lead."""
    if not isinstance(raw, Mapping):
        return RowOutcome(row=row, client_name="Unknown", error="Invalid row format"), None

    record = normalize_record(raw)
    client_name = record.get("client_name") or "Unknown"

    error = validate_record(record, seen_order_ids=seen_order_ids, directory=directory)
    if error:
        return RowOutcome(row=row, client_name=client_name, error=error), None

    try:
        lead = build_lead(record)
        with transaction.atomic():
            lead.save()
    except ValidationFailed as exc:
        return RowOutcome(row=row, client_name=client_name, error=exc.message), None
    except IntegrityError:
        if Lead.objects.filter(order_id=record["order_id"]).exists():
            return RowOutcome(
                row=row, client_name=client_name, error=_duplicate_message(record["order_id"]),
            ), None
        logger.exception("Bulk import row %d rejected by the database", row)
        return RowOutcome(row=row, client_name=client_name, error="Failed to create lead"), None
    except Exception as exc:
        logger.exception("Bulk import row %d failed", row)
        return RowOutcome(
            row=row, client_name=client_name, error=str(exc) or "Failed to create lead",
        ), None

    return RowOutcome(
        row=row,
        client_name=lead.client_name,
        lead_id=str(lead.pk),
        order_id=lead.order_id,
    ), lead


def import_leads(records: Iterable, *, directory: UserDirectory | None = None) -> LeadImportResult:
    """Import *records* sequentially and report every row's outcome.

    The user directory and existing order ids are loaded once, before the
    first row; a failure there propagates to the caller and nothing is
    written.  Order ids claimed by earlier rows of the batch are tracked in
    a local accumulator so later duplicates are refused.
    """
    if directory is None:
        directory = UserDirectory.load()
    seen_order_ids = set(Lead.objects.values_list("order_id", flat=True))

    result = LeadImportResult()
    for index, raw in enumerate(records):
        outcome, lead = _process_record(
            index + 2, raw, seen_order_ids=seen_order_ids, directory=directory,
        )
        result.add(outcome)
        if lead is None:
            continue
        seen_order_ids.add(outcome.order_id)
        notify_lead_assignment(lead, directory=directory)

    logger.info(
        "Bulk lead import finished: %d succeeded, %d failed",
        result.success_count, result.failed_count,
    )
    return result
