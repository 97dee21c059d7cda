import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='SecurityEvent',
            fields=[
                ('id', models.CharField(max_length=64, primary_key=True, serialize=False)),
                ('actor_id', models.CharField(db_index=True, max_length=64)),
                ('role', models.CharField(max_length=20)),
                ('attempted_action', models.CharField(max_length=255)),
                ('target_id', models.CharField(blank=True, max_length=64)),
                ('timestamp', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('blocked', models.BooleanField(default=True)),
                ('reason', models.TextField(blank=True)),
            ],
            options={
                'ordering': ['-timestamp'],
            },
        ),
    ]
