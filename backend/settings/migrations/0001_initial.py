from decimal import Decimal
import uuid

import django.core.validators
from django.db import migrations, models
import django.db.models.deletion
import settings.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('tenant', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='RestaurantSettings',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('currency', models.CharField(default='PKR', help_text='ISO 4217 currency code used for rounding and reports.', max_length=3)),
                ('tax_rate', models.DecimalField(decimal_places=4, default=Decimal('0.16'), help_text='Sales tax as a fraction (0.16 = 16%).', max_digits=5, validators=[django.core.validators.MinValueValidator(Decimal('0')), django.core.validators.MaxValueValidator(Decimal('1'))])),
                ('service_charge_rate', models.DecimalField(decimal_places=4, default=Decimal('0.05'), help_text='Service charge as a fraction of the discounted subtotal.', max_digits=5, validators=[django.core.validators.MinValueValidator(Decimal('0')), django.core.validators.MaxValueValidator(Decimal('1'))])),
                ('service_charge_order_types', models.JSONField(default=settings.models.default_service_charge_order_types, help_text='Order types that carry a service charge.')),
                ('tax_order_types', models.JSONField(default=settings.models.default_tax_order_types, help_text='Order types that are taxed.')),
                ('delivery_fee_default', models.DecimalField(decimal_places=2, default=Decimal('200.00'), help_text='Delivery fee applied when an order does not specify one.', max_digits=10)),
                ('max_discount_rate', models.DecimalField(decimal_places=4, default=Decimal('0.50'), help_text='Largest discount allowed, as a fraction of the subtotal.', max_digits=5, validators=[django.core.validators.MinValueValidator(Decimal('0')), django.core.validators.MaxValueValidator(Decimal('1'))])),
                ('reservation_buffer_minutes', models.PositiveIntegerField(default=30, help_text='Minutes before a reservation during which the table shows as reserved soon.')),
                ('require_rider_shift', models.BooleanField(default=True, help_text='Block dispatch to riders without an open shift.')),
                ('kds_undo_depth', models.PositiveSmallIntegerField(default=10, help_text='How many kitchen display actions each terminal can undo.', validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(10)])),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('tenant', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='restaurant_settings', to='tenant.tenant')),
            ],
            options={
                'verbose_name': 'restaurant settings',
                'verbose_name_plural': 'restaurant settings',
            },
        ),
    ]
