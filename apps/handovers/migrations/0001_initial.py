# Generated manually for the cash handover ledger

import uuid
from decimal import Decimal
from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('stations', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='CashHandover',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('handover_type', models.CharField(choices=[('shift_collection', 'Shift collection'), ('employee_to_manager', 'Employee to manager'), ('manager_to_owner', 'Manager to owner'), ('deposit_to_bank', 'Deposit to bank')], max_length=30)),
                ('handover_date', models.DateField()),
                ('expected_amount', models.DecimalField(decimal_places=2, max_digits=12, validators=[MinValueValidator(Decimal('0.00'))])),
                ('actual_amount', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True, validators=[MinValueValidator(Decimal('0.00'))])),
                ('difference', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('confirmed', 'Confirmed'), ('disputed', 'Disputed'), ('resolved', 'Resolved')], default='pending', max_length=20)),
                ('confirmed_at', models.DateTimeField(blank=True, null=True)),
                ('resolved_at', models.DateTimeField(blank=True, null=True)),
                ('resolution_notes', models.TextField(blank=True)),
                ('bank_name', models.CharField(blank=True, max_length=100)),
                ('deposit_reference', models.CharField(blank=True, max_length=50)),
                ('deposit_receipt_url', models.URLField(blank=True)),
                ('notes', models.TextField(blank=True)),
                ('dispute_notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('station', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='handovers', to='stations.station')),
                ('from_user', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='handovers_given', to=settings.AUTH_USER_MODEL)),
                ('to_user', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='handovers_received', to=settings.AUTH_USER_MODEL)),
                ('previous_handover', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='next_handovers', to='handovers.cashhandover')),
                ('confirmed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='handovers_confirmed', to=settings.AUTH_USER_MODEL)),
                ('resolved_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='handovers_resolved', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'cash_handovers',
                'ordering': ['-handover_date', '-created_at'],
            },
        ),
        migrations.AddIndex(
            model_name='cashhandover',
            index=models.Index(fields=['station', 'handover_date'], name='handover_station_date_idx'),
        ),
        migrations.AddIndex(
            model_name='cashhandover',
            index=models.Index(fields=['station', 'handover_type', 'status'], name='handover_station_stage_idx'),
        ),
        migrations.AddIndex(
            model_name='cashhandover',
            index=models.Index(fields=['to_user', 'status'], name='handover_to_user_status_idx'),
        ),
        migrations.AddIndex(
            model_name='cashhandover',
            index=models.Index(fields=['from_user'], name='handover_from_user_idx'),
        ),
    ]
