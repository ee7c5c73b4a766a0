import re
import uuid
from decimal import Decimal

from django.db import models, transaction, IntegrityError
from django.db.models import F
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from core_backend.exceptions import ConcurrentModificationError
from products.models import Product
from tenant.managers import TenantManager


class Order(models.Model):
    class OrderStatus(models.TextChoices):
        DRAFT = "DRAFT", _("Draft")
        FIRED = "FIRED", _("Fired")
        PREPARING = "PREPARING", _("Preparing")
        READY = "READY", _("Ready")
        OUT_FOR_DELIVERY = "OUT_FOR_DELIVERY", _("Out for Delivery")
        DELIVERED = "DELIVERED", _("Delivered")
        PAID = "PAID", _("Paid")
        CANCELLED = "CANCELLED", _("Cancelled")
        VOID = "VOID", _("Void")

    class OrderType(models.TextChoices):
        DINE_IN = "DINE_IN", _("Dine In")
        TAKEAWAY = "TAKEAWAY", _("Takeaway")
        DELIVERY = "DELIVERY", _("Delivery")

    class DiscountType(models.TextChoices):
        AMOUNT = "AMOUNT", _("Fixed Amount")
        PERCENT = "PERCENT", _("Percentage")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='orders'
    )
    order_number = models.CharField(max_length=20, blank=True, null=True)
    order_type = models.CharField(
        max_length=10, choices=OrderType.choices, default=OrderType.DINE_IN
    )
    status = models.CharField(
        max_length=20, choices=OrderStatus.choices, default=OrderStatus.DRAFT
    )
    guest_count = models.PositiveIntegerField(default=1)
    next_item_position = models.PositiveIntegerField(
        default=0,
        help_text=_("Index the next added item receives; only ever grows"),
    )

    # --- Relationships ---
    table = models.ForeignKey(
        'floor.Table',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='orders',
        help_text=_("Table the order is seated at (dine-in only)"),
    )
    assigned_driver = models.ForeignKey(
        'delivery.Driver',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='orders',
        help_text=_("Rider carrying the order (delivery only)"),
    )
    rider_shift = models.ForeignKey(
        'delivery.RiderShift',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='orders',
    )
    created_by = models.ForeignKey(
        'users.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='orders_created',
    )
    is_settled_with_rider = models.BooleanField(
        default=False,
        help_text=_("Set once a rider settlement has cleared this order's cash"),
    )

    # --- Customer / delivery details ---
    customer_name = models.CharField(max_length=150, blank=True)
    customer_phone = models.CharField(max_length=20, blank=True)
    delivery_address = models.TextField(blank=True)

    # --- Financial Fields ---
    discount_type = models.CharField(
        max_length=10, choices=DiscountType.choices, default=DiscountType.AMOUNT
    )
    discount_value = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal("0.00"),
        help_text=_("Amount, or percentage when discount_type is PERCENT"),
    )
    delivery_fee_override = models.DecimalField(
        max_digits=10, decimal_places=2, null=True, blank=True,
        help_text=_("Delivery fee for this order; restaurant default when empty"),
    )
    subtotal = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    discount_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    service_charge = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    tax = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    delivery_fee = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    total = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))

    # --- Cancellation ---
    cancellation_reason = models.TextField(blank=True)
    cancelled_by = models.ForeignKey(
        'users.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='orders_cancelled',
    )
    cancelled_at = models.DateTimeField(null=True, blank=True)

    # --- Audit ---
    last_action_by = models.ForeignKey(
        'users.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
    )
    last_action_desc = models.CharField(max_length=255, blank=True)
    version = models.PositiveIntegerField(
        default=0,
        help_text=_("Incremented on every write; used to reject stale updates"),
    )

    created_at = models.DateTimeField(default=timezone.now, editable=False)
    updated_at = models.DateTimeField(default=timezone.now, editable=False)
    fired_at = models.DateTimeField(null=True, blank=True)
    ready_at = models.DateTimeField(null=True, blank=True)
    dispatched_at = models.DateTimeField(null=True, blank=True)
    delivered_at = models.DateTimeField(null=True, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True, db_index=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        ordering = ["-created_at", "order_number"]
        indexes = [
            models.Index(fields=['tenant', 'status'], name='order_status_idx'),
            models.Index(fields=['tenant', 'order_type', 'status'], name='order_type_status_idx'),
            models.Index(fields=['tenant', 'assigned_driver', 'status', 'is_settled_with_rider'], name='order_rider_settle_idx'),
            models.Index(fields=['tenant', 'created_at'], name='order_created_idx'),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["tenant", "order_number"],
                condition=models.Q(order_number__isnull=False),
                name="unique_order_number_per_tenant",
            ),
        ]

    def __str__(self):
        return f"Order {self.order_number or self.pk} ({self.order_type}) - {self.status}"

    # Statuses after which no item or order mutation is accepted
    FINAL_STATUSES = (OrderStatus.PAID, OrderStatus.CANCELLED, OrderStatus.VOID)

    @property
    def is_terminal(self):
        if self.status in self.FINAL_STATUSES:
            return True
        return self.status == self.OrderStatus.DELIVERED and self.is_settled_with_rider

    @property
    def is_delivery(self):
        return self.order_type == self.OrderType.DELIVERY

    def save(self, *args, **kwargs):
        # Generate order_number only if it's not already set
        if not self.order_number:
            max_retries = 5
            for _attempt in range(max_retries):
                self.order_number = self._generate_sequential_order_number()
                try:
                    with transaction.atomic():
                        super().save(*args, **kwargs)
                    break
                except IntegrityError:
                    # Another terminal took the number, retry
                    continue
            else:
                raise IntegrityError(
                    "Failed to generate a unique order number after multiple retries."
                )
        else:
            if not self._state.adding:
                self.updated_at = timezone.now()
            super().save(*args, **kwargs)

    def _generate_sequential_order_number(self):
        """Next ORD-xxxxx number for this restaurant."""
        prefix = "ORD-"
        last_order = (
            Order.all_objects.filter(tenant=self.tenant, order_number__startswith=prefix)
            .order_by("-order_number")
            .first()
        )

        next_number = 1
        if last_order and last_order.order_number:
            match = re.match(rf"^{re.escape(prefix)}(\d+)$", last_order.order_number)
            if match:
                next_number = int(match.group(1)) + 1

        return f"{prefix}{next_number:05d}"

    def commit(self, fields, user=None, action=None):
        """
        Write ``fields`` as a targeted update guarded by the version stamp.

        The row is only written if its version still matches the one this
        instance was read with; otherwise another terminal changed it and
        ConcurrentModificationError is raised without touching the row.
        """
        fields = set(fields)
        self.updated_at = timezone.now()
        fields.add("updated_at")
        if user is not None:
            self.last_action_by = user
            fields.add("last_action_by")
        if action is not None:
            self.last_action_desc = action[:255]
            fields.add("last_action_desc")

        values = {name: getattr(self, name) for name in fields}
        rows = Order.all_objects.filter(pk=self.pk, version=self.version).update(
            version=F("version") + 1, **values
        )
        if rows == 0:
            current = Order.all_objects.filter(pk=self.pk).values_list("version", flat=True).first()
            raise ConcurrentModificationError(
                f"Order {self.order_number}", expected_version=self.version, actual_version=current
            )
        self.version += 1


class OrderItem(models.Model):
    class ItemStatus(models.TextChoices):
        PENDING = "PENDING", _("Pending")
        FIRED = "FIRED", _("Fired")
        PREPARING = "PREPARING", _("Preparing")
        READY = "READY", _("Ready")
        SERVED = "SERVED", _("Served")
        DELIVERED = "DELIVERED", _("Delivered")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='order_items'
    )
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    position = models.PositiveIntegerField(
        help_text=_("Stable index of the item within its order; never reused"),
    )
    product = models.ForeignKey(
        Product, on_delete=models.PROTECT, related_name="order_items",
    )

    # Snapshots taken when the item was added
    product_name = models.CharField(max_length=200)
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    station = models.CharField(max_length=50)
    category_name = models.CharField(max_length=100, blank=True)
    pricing_strategy = models.CharField(
        max_length=20,
        choices=Product.PricingStrategy.choices,
        default=Product.PricingStrategy.UNIT,
    )

    quantity = models.PositiveIntegerField(default=1)
    status = models.CharField(
        max_length=20, choices=ItemStatus.choices, default=ItemStatus.PENDING
    )
    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    fired_at = models.DateTimeField(null=True, blank=True)
    ready_at = models.DateTimeField(null=True, blank=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        ordering = ["position"]
        indexes = [
            models.Index(fields=['tenant', 'station', 'status'], name='order_item_station_idx'),
        ]
        constraints = [
            models.UniqueConstraint(fields=["order", "position"], name="unique_item_position_per_order"),
        ]

    def __str__(self):
        return f"{self.quantity} x {self.product_name} [{self.status}]"

    @property
    def is_pending(self):
        return self.status == self.ItemStatus.PENDING
