import uuid

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _
from tenant.managers import TenantManager


class Table(models.Model):
    class TableStatus(models.TextChoices):
        AVAILABLE = "AVAILABLE", _("Available")
        OCCUPIED = "OCCUPIED", _("Occupied")
        PAYMENT_PENDING = "PAYMENT_PENDING", _("Payment Pending")
        DIRTY = "DIRTY", _("Dirty")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='tables',
    )
    name = models.CharField(max_length=50, help_text=_("Label shown on the floor plan (e.g., T4)"))
    section = models.CharField(max_length=50, blank=True, help_text=_("Floor section (e.g., Patio)"))
    capacity = models.PositiveIntegerField(default=4)
    status = models.CharField(
        max_length=20, choices=TableStatus.choices, default=TableStatus.AVAILABLE
    )
    server = models.ForeignKey(
        'users.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='tables_served',
    )
    active_order = models.OneToOneField(
        'orders.Order',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='active_table',
        help_text=_("Order currently seated at this table"),
    )
    last_status_change = models.DateTimeField(default=timezone.now)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        ordering = ['section', 'name']
        indexes = [
            models.Index(fields=['tenant', 'status'], name='table_status_idx'),
        ]
        constraints = [
            models.UniqueConstraint(fields=['tenant', 'name'], name='unique_table_name_per_tenant'),
        ]

    def __str__(self):
        return f"{self.name} ({self.status})"


class Reservation(models.Model):
    """
    Advisory booking. Surfaces a table as "reserved soon" on the floor
    board; never blocks seating.
    """

    class ReservationStatus(models.TextChoices):
        CONFIRMED = "CONFIRMED", _("Confirmed")
        SEATED = "SEATED", _("Seated")
        CANCELLED = "CANCELLED", _("Cancelled")
        NO_SHOW = "NO_SHOW", _("No Show")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='reservations',
    )
    table = models.ForeignKey(
        Table,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='reservations',
    )
    customer_name = models.CharField(max_length=150)
    customer_phone = models.CharField(max_length=20, blank=True)
    party_size = models.PositiveIntegerField(default=2)
    reservation_time = models.DateTimeField()
    duration_minutes = models.PositiveIntegerField(default=90)
    buffer_minutes = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text=_("Minutes before the booking the table shows as reserved; restaurant default when empty"),
    )
    status = models.CharField(
        max_length=20, choices=ReservationStatus.choices, default=ReservationStatus.CONFIRMED
    )
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        ordering = ['reservation_time']
        indexes = [
            models.Index(fields=['tenant', 'table', 'status', 'reservation_time'], name='reservation_window_idx'),
        ]

    def __str__(self):
        return f"{self.customer_name} x{self.party_size} @ {self.reservation_time:%Y-%m-%d %H:%M}"
