import uuid
from decimal import Decimal

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from tenant.managers import TenantManager


class CashDrawerSession(models.Model):
    """
    One shift of the physical cash drawer, from opening count to Z-report.
    A restaurant has at most one OPEN session at a time.
    """

    class SessionStatus(models.TextChoices):
        OPEN = "OPEN", _("Open")
        CLOSED = "CLOSED", _("Closed")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='drawer_sessions',
    )
    status = models.CharField(
        max_length=10, choices=SessionStatus.choices, default=SessionStatus.OPEN
    )
    opened_by = models.ForeignKey(
        'users.User',
        on_delete=models.PROTECT,
        related_name='drawer_sessions_opened',
    )
    closed_by = models.ForeignKey(
        'users.User',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='drawer_sessions_closed',
    )
    opening_balance = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    closing_actual_balance = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    expected_balance = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    variance = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True,
        help_text=_("Counted minus expected cash; negative means the drawer is short"),
    )
    notes = models.TextField(blank=True)
    opened_at = models.DateTimeField(default=timezone.now)
    closed_at = models.DateTimeField(null=True, blank=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        ordering = ['-opened_at']
        constraints = [
            models.UniqueConstraint(
                fields=['tenant'],
                condition=models.Q(status='OPEN'),
                name='unique_open_drawer_session_per_tenant',
            ),
        ]

    def __str__(self):
        return f"Drawer session {self.opened_at:%Y-%m-%d %H:%M} ({self.status})"

    @property
    def is_open(self):
        return self.status == self.SessionStatus.OPEN


class LedgerEntry(models.Model):
    """
    Append-only cash movement.

    DRAWER entries track cash in the till (DEBIT in, CREDIT out); RIDER
    entries track what a rider owes the restaurant (DEBIT raises the
    liability, CREDIT clears it).
    """

    class Account(models.TextChoices):
        DRAWER = "DRAWER", _("Cash Drawer")
        RIDER = "RIDER", _("Rider Liability")

    class TransactionType(models.TextChoices):
        DEBIT = "DEBIT", _("Debit")
        CREDIT = "CREDIT", _("Credit")

    class ReferenceType(models.TextChoices):
        SALE = "SALE", _("Sale")
        PAYOUT = "PAYOUT", _("Payout")
        SETTLEMENT = "SETTLEMENT", _("Rider Settlement")
        FLOAT = "FLOAT", _("Rider Float")
        RIDER_LIABILITY = "RIDER_LIABILITY", _("Rider Liability")
        ADJUSTMENT = "ADJUSTMENT", _("Adjustment")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='ledger_entries',
    )
    account = models.CharField(max_length=10, choices=Account.choices)
    transaction_type = models.CharField(max_length=10, choices=TransactionType.choices)
    reference_type = models.CharField(max_length=20, choices=ReferenceType.choices)
    reference_id = models.CharField(max_length=64, blank=True)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    session = models.ForeignKey(
        CashDrawerSession,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='entries',
    )
    driver = models.ForeignKey(
        'delivery.Driver',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='ledger_entries',
    )
    description = models.CharField(max_length=255, blank=True)
    processed_by = models.ForeignKey(
        'users.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
    )
    created_at = models.DateTimeField(default=timezone.now, editable=False)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        ordering = ['created_at']
        verbose_name_plural = _("Ledger entries")
        indexes = [
            models.Index(fields=['tenant', 'account', 'session'], name='ledger_session_idx'),
            models.Index(fields=['tenant', 'account', 'driver'], name='ledger_driver_idx'),
            models.Index(fields=['reference_type', 'reference_id'], name='ledger_reference_idx'),
        ]

    def __str__(self):
        return f"{self.account} {self.transaction_type} {self.amount} ({self.reference_type})"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Ledger entries are immutable; post an ADJUSTMENT instead")
        if self.amount is None or self.amount <= 0:
            raise ValueError("Ledger entry amount must be greater than zero")
        super().save(*args, **kwargs)


class Payout(models.Model):
    """Cash taken out of the drawer for an expense."""

    class Category(models.TextChoices):
        INVENTORY = "INVENTORY", _("Inventory")
        SALARY = "SALARY", _("Salary")
        UTILITIES = "UTILITIES", _("Utilities")
        RENT = "RENT", _("Rent")
        MARKETING = "MARKETING", _("Marketing")
        MAINTENANCE = "MAINTENANCE", _("Maintenance")
        OTHER = "OTHER", _("Other")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='payouts',
    )
    session = models.ForeignKey(
        CashDrawerSession,
        on_delete=models.PROTECT,
        related_name='payouts',
    )
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    category = models.CharField(max_length=20, choices=Category.choices, default=Category.OTHER)
    notes = models.TextField(blank=True)
    processed_by = models.ForeignKey(
        'users.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='payouts_processed',
    )
    created_at = models.DateTimeField(default=timezone.now, editable=False)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"Payout {self.amount} ({self.category})"


class ZReport(models.Model):
    """Immutable end-of-session snapshot written when the drawer is closed."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='z_reports',
    )
    session = models.OneToOneField(
        CashDrawerSession,
        on_delete=models.PROTECT,
        related_name='z_report',
    )
    opening_balance = models.DecimalField(max_digits=12, decimal_places=2)
    total_cash_sales = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    total_payouts = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    total_settlements = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    total_floats = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    expected_balance = models.DecimalField(max_digits=12, decimal_places=2)
    actual_balance = models.DecimalField(max_digits=12, decimal_places=2)
    variance = models.DecimalField(max_digits=12, decimal_places=2)
    breakdown = models.JSONField(
        default=dict,
        blank=True,
        help_text=_("Sales by payment method and order type, taxes, fees and discounts"),
    )
    closed_by = models.ForeignKey(
        'users.User',
        on_delete=models.PROTECT,
        related_name='z_reports_closed',
    )
    created_at = models.DateTimeField(default=timezone.now, editable=False)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"Z-Report {self.created_at:%Y-%m-%d %H:%M} (variance {self.variance})"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Z-reports cannot be changed once issued")
        super().save(*args, **kwargs)
