# Generated manually for the redemptions app

import uuid
from decimal import Decimal
from django.conf import settings
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('accounts', '0001_initial'),
        ('catalog', '0001_initial'),
        ('members', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='PackageRedemption',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('redemption_type', models.CharField(choices=[('PACKAGE_DIRECT', 'Package (direct)'), ('COUPON_PACKAGE', 'Coupon package'), ('COUPON_DISCOUNT', 'Coupon discount'), ('COUPON_BONUS', 'Coupon credit bonus')], max_length=20)),
                ('status', models.CharField(choices=[('PENDING', 'Pending'), ('ACTIVE', 'Active'), ('CANCELLED', 'Cancelled'), ('EXPIRED', 'Expired'), ('USED', 'Used')], default='PENDING', max_length=20)),
                ('package_name', models.CharField(max_length=200)),
                ('package_type', models.CharField(max_length=20)),
                ('original_price', models.DecimalField(decimal_places=2, max_digits=10)),
                ('discount_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('final_price', models.DecimalField(decimal_places=2, max_digits=10)),
                ('credits_added', models.PositiveIntegerField(blank=True, null=True)),
                ('all_access_expires_at', models.DateTimeField(blank=True, null=True)),
                ('all_access_days', models.PositiveIntegerField(blank=True, null=True)),
                ('friend_pass_available', models.BooleanField(default=False)),
                ('friend_pass_expires_at', models.DateTimeField(blank=True, null=True)),
                ('notes', models.TextField(blank=True)),
                ('redeemed_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('approved_at', models.DateTimeField(blank=True, null=True)),
                ('cancelled_at', models.DateTimeField(blank=True, null=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('organization', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='package_redemptions', to='accounts.organization')),
                ('member', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='package_redemptions', to='members.member')),
                ('package', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='redemptions', to='catalog.package')),
                ('coupon', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='redemptions', to='catalog.coupon')),
                ('redeemed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='redemptions_requested', to=settings.AUTH_USER_MODEL)),
                ('approved_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='redemptions_approved', to=settings.AUTH_USER_MODEL)),
                ('cancelled_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='redemptions_cancelled', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'package_redemptions',
                'ordering': ['-redeemed_at'],
                'indexes': [
                    models.Index(fields=['organization', 'status'], name='redemptions_org_status_idx'),
                    models.Index(fields=['member', 'status'], name='redemptions_member_status_idx'),
                    models.Index(fields=['coupon', 'status'], name='redemptions_coupon_status_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='AllAccessDailyUsage',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('usage_date', models.DateField()),
                ('booking_id', models.UUIDField()),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('package_redemption', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='daily_usages', to='redemptions.packageredemption')),
            ],
            options={
                'db_table': 'all_access_daily_usage',
                'ordering': ['-usage_date'],
                'constraints': [
                    models.UniqueConstraint(fields=('package_redemption', 'usage_date'), name='unique_daily_usage_per_redemption'),
                ],
            },
        ),
    ]
