import re
import uuid
from decimal import Decimal

from django.db import models, transaction, IntegrityError
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from tenant.managers import TenantManager


class Driver(models.Model):
    """Delivery rider and the cash they are currently carrying for the restaurant."""

    class DriverStatus(models.TextChoices):
        AVAILABLE = "AVAILABLE", _("Available")
        BUSY = "BUSY", _("On Delivery")
        OFF_DUTY = "OFF_DUTY", _("Off Duty")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='drivers',
    )
    user = models.OneToOneField(
        'users.User',
        on_delete=models.CASCADE,
        related_name='driver_profile',
    )
    phone = models.CharField(max_length=20, blank=True)
    status = models.CharField(
        max_length=20, choices=DriverStatus.choices, default=DriverStatus.OFF_DUTY
    )
    cash_in_hand = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text=_("Cash the rider holds: collected order totals plus issued float, minus settlements"),
    )
    total_deliveries = models.PositiveIntegerField(default=0)
    last_settled_at = models.DateTimeField(null=True, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        ordering = ['user__first_name', 'user__email']
        indexes = [
            models.Index(fields=['tenant', 'status'], name='driver_status_idx'),
        ]

    def __str__(self):
        return self.name

    @property
    def name(self):
        full_name = f"{self.user.first_name} {self.user.last_name}".strip()
        return full_name or self.user.email

    @property
    def active_shift(self):
        return RiderShift.all_objects.filter(driver=self, status=RiderShift.ShiftStatus.OPEN).first()


class RiderShift(models.Model):
    """
    A rider's working shift. The opening float handed out at the start and
    every delivery made during the shift are cleared when it closes.
    """

    class ShiftStatus(models.TextChoices):
        OPEN = "OPEN", _("Open")
        CLOSED = "CLOSED", _("Closed")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='rider_shifts',
    )
    driver = models.ForeignKey(Driver, on_delete=models.PROTECT, related_name='shifts')
    status = models.CharField(max_length=10, choices=ShiftStatus.choices, default=ShiftStatus.OPEN)
    opening_float = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    float_settled = models.BooleanField(
        default=False,
        help_text=_("Set once a settlement has taken the opening float back"),
    )
    expected_cash = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    closing_cash_received = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    cash_difference = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    opened_by = models.ForeignKey(
        'users.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='rider_shifts_opened',
    )
    closed_by = models.ForeignKey(
        'users.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='rider_shifts_closed',
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
                fields=['driver'],
                condition=models.Q(status='OPEN'),
                name='unique_open_shift_per_driver',
            ),
        ]

    def __str__(self):
        return f"Shift {self.driver} {self.opened_at:%Y-%m-%d %H:%M} ({self.status})"

    @property
    def is_open(self):
        return self.status == self.ShiftStatus.OPEN


class RiderSettlement(models.Model):
    """Immutable record of cash handed back by a rider against delivered orders."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='rider_settlements',
    )
    settlement_number = models.CharField(max_length=20, blank=True, null=True)
    driver = models.ForeignKey(Driver, on_delete=models.PROTECT, related_name='settlements')
    shift = models.ForeignKey(
        RiderShift,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='settlements',
    )
    amount_expected = models.DecimalField(max_digits=12, decimal_places=2)
    amount_collected = models.DecimalField(max_digits=12, decimal_places=2)
    shortage = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00"),
        help_text=_("Expected minus collected"),
    )
    variance = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00"),
        help_text=_("Collected minus expected"),
    )
    included_float = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    has_discrepancy = models.BooleanField(default=False)
    notes = models.TextField(blank=True)
    processed_by = models.ForeignKey(
        'users.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='rider_settlements_processed',
    )
    created_at = models.DateTimeField(default=timezone.now, editable=False)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=["tenant", "settlement_number"],
                condition=models.Q(settlement_number__isnull=False),
                name="unique_settlement_number_per_tenant",
            ),
        ]

    def __str__(self):
        return f"{self.settlement_number} {self.driver} {self.amount_collected}/{self.amount_expected}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Rider settlements are immutable")

        max_retries = 5
        for _attempt in range(max_retries):
            self.settlement_number = self._generate_settlement_number()
            try:
                with transaction.atomic():
                    super().save(*args, **kwargs)
                return
            except IntegrityError:
                # Another terminal took the number, retry
                continue
        raise IntegrityError("Failed to generate a unique settlement number after multiple retries.")

    def _generate_settlement_number(self):
        prefix = "SET-"
        last = (
            RiderSettlement.all_objects.filter(tenant=self.tenant, settlement_number__startswith=prefix)
            .order_by("-settlement_number")
            .first()
        )
        next_number = 1
        if last and last.settlement_number:
            match = re.match(rf"^{re.escape(prefix)}(\d+)$", last.settlement_number)
            if match:
                next_number = int(match.group(1)) + 1
        return f"{prefix}{next_number:05d}"


class SettledOrder(models.Model):
    """Link between a settlement and an order it cleared; an order can be settled only once."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='settled_orders',
    )
    settlement = models.ForeignKey(RiderSettlement, on_delete=models.PROTECT, related_name='settled_orders')
    order = models.OneToOneField(
        'orders.Order',
        on_delete=models.PROTECT,
        related_name='settlement_link',
    )
    amount = models.DecimalField(max_digits=10, decimal_places=2)

    objects = TenantManager()
    all_objects = models.Manager()

    def __str__(self):
        return f"{self.order} in {self.settlement}"
