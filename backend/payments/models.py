import uuid
from decimal import Decimal

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from tenant.managers import TenantManager


class PaymentTransaction(models.Model):
    """
    The single, final payment for an order.

    Counter orders get one when the customer pays; delivery orders get a
    CASH one when the rider's settlement clears them.
    """

    class PaymentMethod(models.TextChoices):
        CASH = "CASH", _("Cash")
        CARD = "CARD", _("Card")
        RAAST = "RAAST", _("Raast")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='payment_transactions',
    )
    order = models.OneToOneField(
        'orders.Order',
        on_delete=models.PROTECT,
        related_name='payment_transaction',
    )
    method = models.CharField(max_length=10, choices=PaymentMethod.choices)
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    tendered = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        help_text=_("Cash handed over by the customer (cash only)"),
    )
    change = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal("0.00"),
    )
    reference = models.CharField(
        max_length=100,
        blank=True,
        help_text=_("Card slip or Raast transaction reference"),
    )
    drawer_session = models.ForeignKey(
        'accounting.CashDrawerSession',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='payment_transactions',
        help_text=_("Drawer session open when the payment was taken"),
    )
    rider_settlement = models.ForeignKey(
        'delivery.RiderSettlement',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='payment_transactions',
    )
    processed_by = models.ForeignKey(
        'users.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='payments_processed',
    )
    created_at = models.DateTimeField(default=timezone.now, editable=False)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        ordering = ["-created_at"]
        verbose_name = _("Payment Transaction")
        verbose_name_plural = _("Payment Transactions")
        indexes = [
            models.Index(fields=['tenant', 'method'], name='payment_method_idx'),
            models.Index(fields=['tenant', 'created_at'], name='payment_created_idx'),
        ]

    def __str__(self):
        return f"Transaction {self.id} ({self.method}) for {self.amount}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Payment transactions are immutable")
        super().save(*args, **kwargs)
