import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('ledger', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Cafeteria',
            fields=[
                ('id', models.CharField(max_length=64, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=255)),
                ('code', models.CharField(help_text="Short code embedded in table QR payloads (e.g., 1001AB)", max_length=16, unique=True)),
                ('description', models.TextField(blank=True)),
                ('address', models.CharField(blank=True, max_length=255)),
                ('phone', models.CharField(blank=True, max_length=50)),
                ('latitude', models.DecimalField(blank=True, decimal_places=6, max_digits=9, null=True)),
                ('longitude', models.DecimalField(blank=True, decimal_places=6, max_digits=9, null=True)),
                ('is_open', models.BooleanField(default=True)),
                ('opening_hours', models.CharField(blank=True, max_length=255)),
                ('points', models.PositiveIntegerField(default=0)),
                ('is_trial_expired', models.BooleanField(default=False)),
                ('trial_days_override', models.PositiveIntegerField(blank=True, help_text='Overrides the global trial length for this cafeteria', null=True)),
                ('trial_started_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('marketer', models.ForeignKey(blank=True, help_text="Direct marketer earning commission on this cafeteria's orders", null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='cafeterias', to='ledger.marketer')),
            ],
            options={
                'db_table': 'cafeterias',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='MenuCategory',
            fields=[
                ('id', models.CharField(max_length=64, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=100)),
                ('description', models.TextField(blank=True)),
            ],
            options={
                'verbose_name_plural': 'Menu Categories',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='KitchenCategory',
            fields=[
                ('id', models.CharField(max_length=64, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=100)),
                ('description', models.TextField(blank=True)),
                ('cafeteria', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='kitchen_categories', to='cafeterias.cafeteria')),
            ],
            options={
                'verbose_name_plural': 'Kitchen Categories',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='MenuItem',
            fields=[
                ('id', models.CharField(max_length=64, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True)),
                ('price', models.DecimalField(decimal_places=4, max_digits=12)),
                ('image_url', models.URLField(blank=True)),
                ('is_available', models.BooleanField(default=True)),
                ('category', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='items', to='cafeterias.menucategory')),
                ('kitchen_category', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='menu_items', to='cafeterias.kitchencategory')),
            ],
            options={
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='WaiterSection',
            fields=[
                ('id', models.CharField(max_length=64, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=100)),
                ('description', models.TextField(blank=True)),
                ('cafeteria', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='waiter_sections', to='cafeterias.cafeteria')),
            ],
            options={
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='WaiterTable',
            fields=[
                ('id', models.CharField(max_length=64, primary_key=True, serialize=False)),
                ('table_number', models.CharField(max_length=20)),
                ('capacity', models.PositiveIntegerField(default=2)),
                ('reference_code', models.CharField(help_text="Code printed in the table's QR payload", max_length=32)),
                ('is_active', models.BooleanField(default=True)),
                ('cafeteria', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='waiter_tables', to='cafeterias.cafeteria')),
                ('section', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='tables', to='cafeterias.waitersection')),
            ],
            options={
                'ordering': ['table_number'],
                'constraints': [models.UniqueConstraint(fields=('cafeteria', 'reference_code'), name='unique_table_reference_per_cafeteria')],
            },
        ),
    ]
