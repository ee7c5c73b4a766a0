from decimal import Decimal
import uuid

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('orders', '0001_initial'),
        ('tenant', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Driver',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('phone', models.CharField(blank=True, max_length=20)),
                ('status', models.CharField(choices=[('AVAILABLE', 'Available'), ('BUSY', 'On Delivery'), ('OFF_DUTY', 'Off Duty')], default='OFF_DUTY', max_length=20)),
                ('cash_in_hand', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Cash the rider holds: collected order totals plus issued float, minus settlements', max_digits=12)),
                ('total_deliveries', models.PositiveIntegerField(default=0)),
                ('last_settled_at', models.DateTimeField(blank=True, null=True)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('tenant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='drivers', to='tenant.tenant')),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='driver_profile', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['user__first_name', 'user__email'],
                'indexes': [
                    models.Index(fields=['tenant', 'status'], name='driver_status_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='RiderShift',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('status', models.CharField(choices=[('OPEN', 'Open'), ('CLOSED', 'Closed')], default='OPEN', max_length=10)),
                ('opening_float', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('float_settled', models.BooleanField(default=False, help_text='Set once a settlement has taken the opening float back')),
                ('expected_cash', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('closing_cash_received', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('cash_difference', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('notes', models.TextField(blank=True)),
                ('opened_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('closed_at', models.DateTimeField(blank=True, null=True)),
                ('closed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='rider_shifts_closed', to=settings.AUTH_USER_MODEL)),
                ('driver', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='shifts', to='delivery.driver')),
                ('opened_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='rider_shifts_opened', to=settings.AUTH_USER_MODEL)),
                ('tenant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='rider_shifts', to='tenant.tenant')),
            ],
            options={
                'ordering': ['-opened_at'],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('status', 'OPEN')), fields=('driver',), name='unique_open_shift_per_driver'),
                ],
            },
        ),
        migrations.CreateModel(
            name='RiderSettlement',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('settlement_number', models.CharField(blank=True, max_length=20, null=True)),
                ('amount_expected', models.DecimalField(decimal_places=2, max_digits=12)),
                ('amount_collected', models.DecimalField(decimal_places=2, max_digits=12)),
                ('shortage', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Expected minus collected', max_digits=12)),
                ('variance', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Collected minus expected', max_digits=12)),
                ('included_float', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('has_discrepancy', models.BooleanField(default=False)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, editable=False)),
                ('driver', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='settlements', to='delivery.driver')),
                ('processed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='rider_settlements_processed', to=settings.AUTH_USER_MODEL)),
                ('shift', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='settlements', to='delivery.ridershift')),
                ('tenant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='rider_settlements', to='tenant.tenant')),
            ],
            options={
                'ordering': ['-created_at'],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('settlement_number__isnull', False)), fields=('tenant', 'settlement_number'), name='unique_settlement_number_per_tenant'),
                ],
            },
        ),
        migrations.CreateModel(
            name='SettledOrder',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=10)),
                ('order', models.OneToOneField(on_delete=django.db.models.deletion.PROTECT, related_name='settlement_link', to='orders.order')),
                ('settlement', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='settled_orders', to='delivery.ridersettlement')),
                ('tenant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='settled_orders', to='tenant.tenant')),
            ],
        ),
    ]
