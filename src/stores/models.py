"""Models for the stores app."""
from django.db import models

from core.models import TimeStampedModel


class Store(TimeStampedModel):
    """A location that receives MToken purchase orders."""

    name = models.CharField("name", max_length=255)
    description = models.TextField("description")

    class Meta:
        ordering = ["name"]
        verbose_name = "store"
        verbose_name_plural = "stores"

    def __str__(self):
        return self.name
