from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('orders', '0001_initial'),
        ('tenant', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='KDSUndoEntry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('terminal_id', models.CharField(db_index=True, max_length=100)),
                ('order_status', models.CharField(max_length=20)),
                ('items', models.JSONField(default=list)),
                ('action', models.CharField(max_length=255)),
                ('station', models.CharField(blank=True, max_length=50)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('order', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='kds_undo_entries', to='orders.order')),
                ('performed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('tenant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='kds_undo_entries', to='tenant.tenant')),
            ],
            options={
                'verbose_name_plural': 'KDS undo entries',
                'ordering': ['-id'],
                'indexes': [
                    models.Index(fields=['tenant', 'terminal_id'], name='kds_undo_terminal_idx'),
                ],
            },
        ),
    ]
