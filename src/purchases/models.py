"""Purchase orders and the MToken serial numbers they allocate."""
from decimal import Decimal

from django.db import models

from core.models import TimeStampedModel


def normalize_serial_number(value) -> str:
    """Canonical form used for storage and comparison."""
    return str(value or "").strip().upper()


class PurchaseOrder(TimeStampedModel):
    """A batch of MTokens bought for a store."""

    store = models.ForeignKey(
        "stores.Store",
        on_delete=models.PROTECT,
        related_name="purchase_orders",
    )
    product_name = models.CharField(max_length=100, default="MToken")
    quantity = models.PositiveIntegerField()
    amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    purchase_date = models.DateField(db_index=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.product_name} x{self.quantity} ({self.purchase_date})"


class MTokenSerialNumber(TimeStampedModel):
    """One allocated token.

    ``is_used`` only ever moves from False to True, when the token is bound
    to the lead that consumed it.
    """

    serial_number = models.CharField(max_length=100, unique=True)
    purchase_order = models.ForeignKey(
        PurchaseOrder,
        on_delete=models.CASCADE,
        related_name="serial_numbers",
    )
    store = models.ForeignKey(
        "stores.Store",
        on_delete=models.PROTECT,
        related_name="serial_numbers",
    )
    purchase_date = models.DateField()
    is_used = models.BooleanField(default=False, db_index=True)
    used_in_lead = models.ForeignKey(
        "leads.Lead",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="mtoken_serial_numbers",
    )

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "MToken serial number"
        verbose_name_plural = "MToken serial numbers"

    def __str__(self):
        return self.serial_number

    def save(self, *args, **kwargs):
        self.serial_number = normalize_serial_number(self.serial_number)
        super().save(*args, **kwargs)
