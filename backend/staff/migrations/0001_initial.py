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
            name='Staff',
            fields=[
                ('id', models.CharField(max_length=64, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=255)),
                ('role', models.CharField(choices=[('waiter', 'Waiter'), ('kitchen', 'Kitchen')], max_length=20)),
                ('is_active', models.BooleanField(default=True, help_text='Disabled staff cannot change any order')),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('cafeteria', models.ForeignKey(help_text='The cafeteria this staff member works for', on_delete=django.db.models.deletion.CASCADE, related_name='staff', to='cafeterias.cafeteria')),
                ('kitchen_category', models.ForeignKey(blank=True, help_text='Kitchen staff only act on orders with items from this category', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='staff', to='cafeterias.kitchencategory')),
            ],
            options={
                'verbose_name_plural': 'Staff',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='WaiterSession',
            fields=[
                ('waiter', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, primary_key=True, related_name='waiter_session', serialize=False, to='staff.staff')),
                ('started_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('cafeteria', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='waiter_sessions', to='cafeterias.cafeteria')),
                ('section', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='waiter_sessions', to='cafeterias.waitersection')),
            ],
        ),
    ]
