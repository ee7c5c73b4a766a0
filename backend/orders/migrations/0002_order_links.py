from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    dependencies = [
        ('delivery', '0001_initial'),
        ('floor', '0001_initial'),
        ('orders', '0001_initial'),
    ]

    operations = [
        migrations.AddField(
            model_name='order',
            name='table',
            field=models.ForeignKey(blank=True, help_text='Table the order is seated at (dine-in only)', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='orders', to='floor.table'),
        ),
        migrations.AddField(
            model_name='order',
            name='assigned_driver',
            field=models.ForeignKey(blank=True, help_text='Rider carrying the order (delivery only)', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='orders', to='delivery.driver'),
        ),
        migrations.AddField(
            model_name='order',
            name='rider_shift',
            field=models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='orders', to='delivery.ridershift'),
        ),
        migrations.AddIndex(
            model_name='order',
            index=models.Index(fields=['tenant', 'assigned_driver', 'status', 'is_settled_with_rider'], name='order_rider_settle_idx'),
        ),
    ]
