"""Abstract base models shared by every app."""
import uuid

from django.db import models


class TimeStampedModel(models.Model):
    """UUID primary key plus creation/modification timestamps."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_at = models.DateTimeField("created at", auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField("updated at", auto_now=True)

    class Meta:
        abstract = True
        ordering = ["-created_at"]


def get_or_none(queryset, pk):
    """Fetch by primary key, treating malformed ids like missing rows."""
    from django.core.exceptions import ValidationError

    if pk in (None, ""):
        return None
    try:
        return queryset.filter(pk=pk).first()
    except (ValueError, ValidationError):
        return None
