from decimal import Decimal
import uuid

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):
    """
    Orders and their lines. The table, rider and shift links are added in
    0002 once the floor and delivery apps exist.
    """

    initial = True

    dependencies = [
        ('products', '0001_initial'),
        ('tenant', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Order',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('order_number', models.CharField(blank=True, max_length=20, null=True)),
                ('order_type', models.CharField(choices=[('DINE_IN', 'Dine In'), ('TAKEAWAY', 'Takeaway'), ('DELIVERY', 'Delivery')], default='DINE_IN', max_length=10)),
                ('status', models.CharField(choices=[('DRAFT', 'Draft'), ('FIRED', 'Fired'), ('PREPARING', 'Preparing'), ('READY', 'Ready'), ('OUT_FOR_DELIVERY', 'Out for Delivery'), ('DELIVERED', 'Delivered'), ('PAID', 'Paid'), ('CANCELLED', 'Cancelled'), ('VOID', 'Void')], default='DRAFT', max_length=20)),
                ('guest_count', models.PositiveIntegerField(default=1)),
                ('next_item_position', models.PositiveIntegerField(default=0, help_text='Index the next added item receives; only ever grows')),
                ('is_settled_with_rider', models.BooleanField(default=False, help_text="Set once a rider settlement has cleared this order's cash")),
                ('customer_name', models.CharField(blank=True, max_length=150)),
                ('customer_phone', models.CharField(blank=True, max_length=20)),
                ('delivery_address', models.TextField(blank=True)),
                ('discount_type', models.CharField(choices=[('AMOUNT', 'Fixed Amount'), ('PERCENT', 'Percentage')], default='AMOUNT', max_length=10)),
                ('discount_value', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Amount, or percentage when discount_type is PERCENT', max_digits=10)),
                ('delivery_fee_override', models.DecimalField(blank=True, decimal_places=2, help_text='Delivery fee for this order; restaurant default when empty', max_digits=10, null=True)),
                ('subtotal', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('discount_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('service_charge', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('tax', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('delivery_fee', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('total', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('cancellation_reason', models.TextField(blank=True)),
                ('cancelled_at', models.DateTimeField(blank=True, null=True)),
                ('last_action_desc', models.CharField(blank=True, max_length=255)),
                ('version', models.PositiveIntegerField(default=0, help_text='Incremented on every write; used to reject stale updates')),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, editable=False)),
                ('updated_at', models.DateTimeField(default=django.utils.timezone.now, editable=False)),
                ('fired_at', models.DateTimeField(blank=True, null=True)),
                ('ready_at', models.DateTimeField(blank=True, null=True)),
                ('dispatched_at', models.DateTimeField(blank=True, null=True)),
                ('delivered_at', models.DateTimeField(blank=True, null=True)),
                ('paid_at', models.DateTimeField(blank=True, db_index=True, null=True)),
                ('cancelled_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='orders_cancelled', to=settings.AUTH_USER_MODEL)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='orders_created', to=settings.AUTH_USER_MODEL)),
                ('last_action_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('tenant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='orders', to='tenant.tenant')),
            ],
            options={
                'ordering': ['-created_at', 'order_number'],
                'indexes': [
                    models.Index(fields=['tenant', 'status'], name='order_status_idx'),
                    models.Index(fields=['tenant', 'order_type', 'status'], name='order_type_status_idx'),
                    models.Index(fields=['tenant', 'created_at'], name='order_created_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('order_number__isnull', False)), fields=('tenant', 'order_number'), name='unique_order_number_per_tenant'),
                ],
            },
        ),
        migrations.CreateModel(
            name='OrderItem',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('position', models.PositiveIntegerField(help_text='Stable index of the item within its order; never reused')),
                ('product_name', models.CharField(max_length=200)),
                ('unit_price', models.DecimalField(decimal_places=2, max_digits=10)),
                ('station', models.CharField(max_length=50)),
                ('category_name', models.CharField(blank=True, max_length=100)),
                ('pricing_strategy', models.CharField(choices=[('UNIT', 'Per Unit'), ('FIXED_PER_HEAD', 'Fixed Per Head')], default='UNIT', max_length=20)),
                ('quantity', models.PositiveIntegerField(default=1)),
                ('status', models.CharField(choices=[('PENDING', 'Pending'), ('FIRED', 'Fired'), ('PREPARING', 'Preparing'), ('READY', 'Ready'), ('SERVED', 'Served'), ('DELIVERED', 'Delivered')], default='PENDING', max_length=20)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('fired_at', models.DateTimeField(blank=True, null=True)),
                ('ready_at', models.DateTimeField(blank=True, null=True)),
                ('order', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='items', to='orders.order')),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='order_items', to='products.product')),
                ('tenant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='order_items', to='tenant.tenant')),
            ],
            options={
                'ordering': ['position'],
                'indexes': [
                    models.Index(fields=['tenant', 'station', 'status'], name='order_item_station_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('order', 'position'), name='unique_item_position_per_order'),
                ],
            },
        ),
    ]
