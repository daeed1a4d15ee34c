"""Upload naming, validation and clean-up for stored documents."""
import logging
import os
import secrets

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.files.storage import default_storage
from django.utils import timezone
from django.utils.deconstruct import deconstructible

logger = logging.getLogger("crm")

PDF_CONTENT_TYPES = {"application/pdf"}
PDF_EXTENSIONS = {".pdf"}
IMAGE_CONTENT_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/webp", "image/avif"}
IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp", ".avif"}


@deconstructible
class UploadPath:
    """``upload_to`` callable producing ``<prefix>/<label>-<millis>-<rand><ext>``."""

    def __init__(self, prefix, label):
        self.prefix = prefix.strip("/")
        self.label = label

    def __call__(self, instance, filename):
        ext = os.path.splitext(filename)[1].lower()
        stamp = int(timezone.now().timestamp() * 1000)
        suffix = secrets.randbelow(10**9)
        return f"{self.prefix}/{self.label}-{stamp}-{suffix}{ext}"

    def __eq__(self, other):
        return (
            isinstance(other, UploadPath)
            and self.prefix == other.prefix
            and self.label == other.label
        )


def _content_type(value):
    content_type = getattr(value, "content_type", None)
    if content_type is None:
        content_type = getattr(getattr(value, "file", None), "content_type", None)
    return (content_type or "").lower()


def _check_size(value):
    limit = getattr(settings, "UPLOAD_MAX_BYTES", 10 * 1024 * 1024)
    size = getattr(value, "size", 0) or 0
    if size > limit:
        raise ValidationError(
            f"File too large ({size} bytes). Maximum size is {limit // (1024 * 1024)} MB.",
            code="file_too_large",
        )


def _check_type(value, extensions, content_types, message):
    ext = os.path.splitext(getattr(value, "name", "") or "")[1].lower()
    content_type = _content_type(value)
    if ext not in extensions:
        raise ValidationError(message, code="invalid_file_type")
    # Files already in storage carry no content type; the extension is enough there.
    if content_type and content_type not in content_types:
        raise ValidationError(message, code="invalid_file_type")


def validate_pdf_upload(value):
    _check_size(value)
    _check_type(value, PDF_EXTENSIONS, PDF_CONTENT_TYPES, "Only PDF files are allowed.")


def validate_image_upload(value):
    _check_size(value)
    _check_type(
        value,
        IMAGE_EXTENSIONS,
        IMAGE_CONTENT_TYPES,
        "Only JPEG, PNG, WebP and AVIF images are allowed.",
    )


def delete_stored_file(name, storage=None):
    """Remove *name* from storage if it exists.

    Failures are logged and swallowed; a stale file must never fail the
    operation that superseded it.
    """
    if not name:
        return False
    storage = storage or default_storage
    try:
        if storage.exists(name):
            storage.delete(name)
            logger.info("Deleted stored file %s", name)
            return True
    except Exception:
        logger.exception("Failed to delete stored file %s", name)
    return False
