# Generated manually for the members app

import uuid
from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('accounts', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Member',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('membership_type', models.CharField(blank=True, max_length=50)),
                ('status', models.CharField(choices=[('ACTIVE', 'Active'), ('INACTIVE', 'Inactive')], default='ACTIVE', max_length=20)),
                ('credit_balance', models.IntegerField(default=0)),
                ('has_all_access', models.BooleanField(default=False)),
                ('all_access_expires_at', models.DateTimeField(blank=True, null=True)),
                ('is_elite_member', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('organization', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='members', to='accounts.organization')),
                ('user', models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='member_profile', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'members',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['organization', 'status'], name='members_org_status_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('credit_balance__gte', 0)), name='member_credit_balance_non_negative'),
                ],
            },
        ),
        migrations.CreateModel(
            name='CreditTransaction',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('amount', models.IntegerField()),
                ('balance_before', models.IntegerField()),
                ('balance_after', models.IntegerField()),
                ('type', models.CharField(choices=[('MANUAL_ADD', 'Manual add'), ('MANUAL_DEDUCT', 'Manual deduct'), ('REDEMPTION_CREDIT', 'Redemption credit'), ('BOOKING_DEBIT', 'Booking debit'), ('BOOKING_REFUND', 'Booking refund')], max_length=30)),
                ('description', models.CharField(blank=True, max_length=500)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('member', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='credit_transactions', to='members.member')),
                ('organization', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='credit_transactions', to='accounts.organization')),
                ('performed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='performed_credit_transactions', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'credit_transactions',
                'ordering': ['created_at', 'id'],
                'indexes': [
                    models.Index(fields=['member', 'created_at'], name='credit_tx_member_created_idx'),
                    models.Index(fields=['organization', 'created_at'], name='credit_tx_org_created_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('balance_after', models.F('balance_before') + models.F('amount'))), name='credit_tx_balance_arithmetic'),
                    models.CheckConstraint(condition=models.Q(('amount', 0), _negated=True), name='credit_tx_amount_non_zero'),
                ],
            },
        ),
    ]
