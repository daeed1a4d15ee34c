"""Models for the notifications app."""
from django.conf import settings
from django.db import models
from django.utils import timezone

from core.models import TimeStampedModel


class LeadNotification(TimeStampedModel):
    """Tells a user that a lead has been assigned to them."""

    lead = models.ForeignKey(
        "leads.Lead",
        on_delete=models.CASCADE,
        related_name="notifications",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="lead_notifications",
    )
    is_viewed = models.BooleanField("viewed", default=False, db_index=True)
    viewed_at = models.DateTimeField("viewed at", null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "is_viewed"], name="notif_user_viewed_idx"),
        ]

    def __str__(self):
        return f"{self.user} <- {self.lead}"

    def mark_as_viewed(self):
        if self.is_viewed:
            return
        self.is_viewed = True
        self.viewed_at = timezone.now()
        self.save(update_fields=["is_viewed", "viewed_at", "updated_at"])
