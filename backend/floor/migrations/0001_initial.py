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
            name='Table',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(help_text='Label shown on the floor plan (e.g., T4)', max_length=50)),
                ('section', models.CharField(blank=True, help_text='Floor section (e.g., Patio)', max_length=50)),
                ('capacity', models.PositiveIntegerField(default=4)),
                ('status', models.CharField(choices=[('AVAILABLE', 'Available'), ('OCCUPIED', 'Occupied'), ('PAYMENT_PENDING', 'Payment Pending'), ('DIRTY', 'Dirty')], default='AVAILABLE', max_length=20)),
                ('last_status_change', models.DateTimeField(default=django.utils.timezone.now)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('active_order', models.OneToOneField(blank=True, help_text='Order currently seated at this table', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='active_table', to='orders.order')),
                ('server', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='tables_served', to=settings.AUTH_USER_MODEL)),
                ('tenant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='tables', to='tenant.tenant')),
            ],
            options={
                'ordering': ['section', 'name'],
                'indexes': [
                    models.Index(fields=['tenant', 'status'], name='table_status_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('tenant', 'name'), name='unique_table_name_per_tenant'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Reservation',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('customer_name', models.CharField(max_length=150)),
                ('customer_phone', models.CharField(blank=True, max_length=20)),
                ('party_size', models.PositiveIntegerField(default=2)),
                ('reservation_time', models.DateTimeField()),
                ('duration_minutes', models.PositiveIntegerField(default=90)),
                ('buffer_minutes', models.PositiveIntegerField(blank=True, help_text='Minutes before the booking the table shows as reserved; restaurant default when empty', null=True)),
                ('status', models.CharField(choices=[('CONFIRMED', 'Confirmed'), ('SEATED', 'Seated'), ('CANCELLED', 'Cancelled'), ('NO_SHOW', 'No Show')], default='CONFIRMED', max_length=20)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('table', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='reservations', to='floor.table')),
                ('tenant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='reservations', to='tenant.tenant')),
            ],
            options={
                'ordering': ['reservation_time'],
                'indexes': [
                    models.Index(fields=['tenant', 'table', 'status', 'reservation_time'], name='reservation_window_idx'),
                ],
            },
        ),
    ]
