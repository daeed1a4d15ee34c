"""Coercion helpers for loosely typed input (JSON bodies, CSV cells)."""
import unicodedata
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from django.utils.dateparse import parse_date, parse_datetime

from core.exceptions import ValidationFailed

DATE_INPUT_FORMATS = ("%Y-%m-%d", "%d/%m/%Y", "%d-%m-%Y", "%m/%d/%Y")


def is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def parse_decimal_field(
    raw_value,
    *,
    field_label: str,
    allow_blank: bool = False,
    default: Decimal = Decimal("0.00"),
    max_digits: int | None = None,
) -> Decimal:
    if is_blank(raw_value):
        if allow_blank:
            return default
        raise ValidationFailed(f"{field_label} is required")
    if isinstance(raw_value, Decimal):
        value = raw_value
    else:
        normalized = str(raw_value).strip().replace(" ", "").replace(",", ".")
        try:
            value = Decimal(normalized)
        except (InvalidOperation, TypeError):
            raise ValidationFailed(f"Invalid {field_label}: {raw_value}")
    if not value.is_finite():
        raise ValidationFailed(f"Invalid {field_label}: {raw_value}")
    # Two of max_digits are decimal places.
    if max_digits is not None and value.adjusted() >= max_digits - 2:
        raise ValidationFailed(
            f"Invalid {field_label}: {raw_value} has more than "
            f"{max_digits - 2} digits before the decimal point"
        )
    return value.quantize(Decimal("0.01"))


def parse_positive_int(raw_value, *, field_label: str) -> int:
    try:
        value = int(str(raw_value).strip())
    except (TypeError, ValueError):
        raise ValidationFailed(f"{field_label} must be a positive integer")
    if value <= 0:
        raise ValidationFailed(f"{field_label} must be a positive integer")
    return value


def parse_date_field(raw_value, *, field_label: str, allow_blank: bool = False):
    """Accept ISO dates, ISO datetimes and the common day-first formats."""
    if is_blank(raw_value):
        if allow_blank:
            return None
        raise ValidationFailed(f"{field_label} is required")
    if isinstance(raw_value, datetime):
        return raw_value.date()
    if isinstance(raw_value, date):
        return raw_value

    text = str(raw_value).strip()
    try:
        parsed = parse_date(text)
        if parsed is None:
            parsed_dt = parse_datetime(text)
            parsed = parsed_dt.date() if parsed_dt else None
    except ValueError:
        parsed = None
    if parsed is not None:
        return parsed

    for fmt in DATE_INPUT_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise ValidationFailed(f"Invalid {field_label}: {raw_value}")


def normalize_header(value) -> str:
    """Fold a column label or JSON key to a comparison key.

    ``orderId``, ``order_id`` and ``Order ID`` all become ``orderid``.
    """
    cleaned = str(value or "").strip().lower()
    cleaned = unicodedata.normalize("NFKD", cleaned)
    cleaned = "".join(ch for ch in cleaned if not unicodedata.combining(ch))
    for ch in (" ", "-", "_", "/", "\\", ".", "(", ")", ":"):
        cleaned = cleaned.replace(ch, "")
    return cleaned
