import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Marketer',
            fields=[
                ('id', models.CharField(max_length=64, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=255)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('parent', models.ForeignKey(blank=True, help_text='Upline marketer; receives the grandparent commission share', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='children', to='ledger.marketer')),
            ],
            options={
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='LedgerEntry',
            fields=[
                ('id', models.CharField(max_length=64, primary_key=True, serialize=False)),
                ('type', models.CharField(choices=[('order_debit', 'Order Debit'), ('commission_credit', 'Commission Credit'), ('recharge_credit', 'Recharge Credit'), ('payout_debit', 'Payout Debit'), ('manual_adjustment', 'Manual Adjustment'), ('order_payment', 'Order Payment')], max_length=32)),
                ('amount', models.PositiveIntegerField(help_text='Positive magnitude; direction implied by type')),
                ('order_id', models.CharField(blank=True, db_index=True, max_length=64, null=True)),
                ('cafeteria_id', models.CharField(blank=True, db_index=True, max_length=64, null=True)),
                ('marketer_id', models.CharField(blank=True, db_index=True, max_length=64, null=True)),
                ('timestamp', models.DateTimeField(default=django.utils.timezone.now)),
                ('description', models.TextField(blank=True)),
            ],
            options={
                'verbose_name_plural': 'Ledger Entries',
                'ordering': ['-timestamp'],
                'indexes': [models.Index(fields=['marketer_id', 'type'], name='ledger_marketer_type_idx')],
            },
        ),
        migrations.CreateModel(
            name='PayoutRecord',
            fields=[
                ('id', models.CharField(max_length=64, primary_key=True, serialize=False)),
                ('amount', models.PositiveIntegerField()),
                ('note', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('created_by', models.CharField(blank=True, max_length=64)),
                ('marketer', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='payouts', to='ledger.marketer')),
            ],
            options={
                'ordering': ['-created_at'],
            },
        ),
    ]
