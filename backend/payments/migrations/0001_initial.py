from decimal import Decimal
import uuid

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('accounting', '0001_initial'),
        ('delivery', '0001_initial'),
        ('orders', '0001_initial'),
        ('tenant', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='PaymentTransaction',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('method', models.CharField(choices=[('CASH', 'Cash'), ('CARD', 'Card'), ('RAAST', 'Raast')], max_length=10)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=10)),
                ('tendered', models.DecimalField(blank=True, decimal_places=2, help_text='Cash handed over by the customer (cash only)', max_digits=10, null=True)),
                ('change', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('reference', models.CharField(blank=True, help_text='Card slip or Raast transaction reference', max_length=100)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, editable=False)),
                ('drawer_session', models.ForeignKey(blank=True, help_text='Drawer session open when the payment was taken', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='payment_transactions', to='accounting.cashdrawersession')),
                ('order', models.OneToOneField(on_delete=django.db.models.deletion.PROTECT, related_name='payment_transaction', to='orders.order')),
                ('processed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='payments_processed', to=settings.AUTH_USER_MODEL)),
                ('rider_settlement', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='payment_transactions', to='delivery.ridersettlement')),
                ('tenant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='payment_transactions', to='tenant.tenant')),
            ],
            options={
                'verbose_name': 'Payment Transaction',
                'verbose_name_plural': 'Payment Transactions',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['tenant', 'method'], name='payment_method_idx'),
                    models.Index(fields=['tenant', 'created_at'], name='payment_created_idx'),
                ],
            },
        ),
    ]
