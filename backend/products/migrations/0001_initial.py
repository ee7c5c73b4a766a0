from decimal import Decimal
import uuid

from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('tenant', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Category',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(help_text='Name of the menu category.', max_length=100)),
                ('order', models.IntegerField(default=0, help_text='Display order for this category. Lower numbers appear first.')),
                ('tenant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='categories', to='tenant.tenant')),
            ],
            options={
                'verbose_name_plural': 'categories',
                'ordering': ['order', 'name'],
                'constraints': [
                    models.UniqueConstraint(fields=('tenant', 'name'), name='unique_category_name_per_tenant'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Product',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=200)),
                ('price', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('station', models.CharField(default='kitchen', help_text='Kitchen station that prepares this item (e.g., hot, grill, bar).', max_length=50)),
                ('pricing_strategy', models.CharField(choices=[('UNIT', 'Per Unit'), ('FIXED_PER_HEAD', 'Fixed Per Head')], default='UNIT', help_text='Fixed-per-head items are charged once per guest regardless of quantity.', max_length=20)),
                ('is_available', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('category', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='products', to='products.category')),
                ('tenant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='products', to='tenant.tenant')),
            ],
            options={
                'ordering': ['name'],
                'indexes': [
                    models.Index(fields=['tenant', 'station'], name='product_station_idx'),
                    models.Index(fields=['tenant', 'is_available'], name='product_available_idx'),
                ],
            },
        ),
    ]
