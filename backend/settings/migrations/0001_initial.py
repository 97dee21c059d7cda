import django.core.validators
from decimal import Decimal
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='CommissionConfig',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('rate_direct_parent_percent', models.DecimalField(decimal_places=2, default=Decimal('40.00'), help_text="Percentage credited to the cafeteria's direct marketer", max_digits=5, validators=[django.core.validators.MinValueValidator(Decimal('0.00')), django.core.validators.MaxValueValidator(Decimal('100.00'))])),
                ('rate_grandparent_percent', models.DecimalField(decimal_places=2, default=Decimal('15.00'), help_text="Percentage credited to the direct marketer's upline", max_digits=5, validators=[django.core.validators.MinValueValidator(Decimal('0.00')), django.core.validators.MaxValueValidator(Decimal('100.00'))])),
                ('rate_owner_percent', models.DecimalField(decimal_places=2, default=Decimal('45.00'), help_text='Percentage credited to the system owner', max_digits=5, validators=[django.core.validators.MinValueValidator(Decimal('0.00')), django.core.validators.MaxValueValidator(Decimal('100.00'))])),
            ],
            options={
                'verbose_name': 'Commission Configuration',
                'verbose_name_plural': 'Commission Configuration',
            },
        ),
        migrations.CreateModel(
            name='TrialConfig',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('global_trial_days', models.PositiveIntegerField(default=30, help_text='Default trial length; cafeterias may override it')),
            ],
            options={
                'verbose_name': 'Trial Configuration',
                'verbose_name_plural': 'Trial Configuration',
            },
        ),
    ]
