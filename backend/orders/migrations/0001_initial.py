import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('cafeterias', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Order',
            fields=[
                ('id', models.CharField(max_length=64, primary_key=True, serialize=False)),
                ('session_id', models.CharField(db_index=True, max_length=128)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('confirmed', 'Confirmed'), ('preparing', 'Preparing'), ('ready', 'Ready'), ('served', 'Served'), ('paid', 'Paid'), ('cancelled', 'Cancelled')], default='pending', max_length=20)),
                ('total', models.DecimalField(decimal_places=4, max_digits=14)),
                ('cafeteria_code', models.CharField(blank=True, max_length=16)),
                ('table_code', models.CharField(blank=True, max_length=32)),
                ('table_display', models.CharField(blank=True, max_length=50)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('cafeteria', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='orders', to='cafeterias.cafeteria')),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['cafeteria', 'status'], name='order_cafeteria_status_idx')],
            },
        ),
        migrations.CreateModel(
            name='OrderItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('position', models.PositiveIntegerField(default=0)),
                ('menu_item_id', models.CharField(max_length=64)),
                ('name', models.CharField(help_text='Menu item name at order time', max_length=255)),
                ('price', models.DecimalField(decimal_places=4, help_text='Menu item price at order time', max_digits=12)),
                ('quantity', models.PositiveIntegerField(default=1)),
                ('notes', models.TextField(blank=True)),
                ('order', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='items', to='orders.order')),
            ],
            options={
                'ordering': ['position'],
            },
        ),
    ]
