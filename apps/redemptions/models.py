# ==========================================
# apps/redemptions/models.py
# ==========================================

from django.db import models
from decimal import Decimal
import uuid


class RedemptionStatus(models.TextChoices):
    PENDING = 'PENDING', 'Pending'
    ACTIVE = 'ACTIVE', 'Active'
    CANCELLED = 'CANCELLED', 'Cancelled'
    EXPIRED = 'EXPIRED', 'Expired'
    USED = 'USED', 'Used'


class RedemptionType(models.TextChoices):
    PACKAGE_DIRECT = 'PACKAGE_DIRECT', 'Package (direct)'
    COUPON_PACKAGE = 'COUPON_PACKAGE', 'Coupon package'
    COUPON_DISCOUNT = 'COUPON_DISCOUNT', 'Coupon discount'
    COUPON_BONUS = 'COUPON_BONUS', 'Coupon credit bonus'


class PackageRedemption(models.Model):
    """
    A member's request to redeem a package, possibly through a coupon.

    Prices, credits and entitlement windows are computed once at creation
    and stored here together with a snapshot of the package, so later
    catalog edits never change what an approval grants.

    Status transitions:
        PENDING -> ACTIVE | CANCELLED
        ACTIVE  -> EXPIRED | USED
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    organization = models.ForeignKey(
        'accounts.Organization',
        on_delete=models.CASCADE,
        related_name='package_redemptions'
    )
    member = models.ForeignKey(
        'members.Member',
        on_delete=models.PROTECT,
        related_name='package_redemptions'
    )
    package = models.ForeignKey(
        'catalog.Package',
        on_delete=models.PROTECT,
        related_name='redemptions'
    )
    coupon = models.ForeignKey(
        'catalog.Coupon',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='redemptions'
    )

    redemption_type = models.CharField(max_length=20, choices=RedemptionType.choices)
    status = models.CharField(
        max_length=20,
        choices=RedemptionStatus.choices,
        default=RedemptionStatus.PENDING
    )

    # Package snapshot
    package_name = models.CharField(max_length=200)
    package_type = models.CharField(max_length=20)

    # Pricing
    original_price = models.DecimalField(max_digits=10, decimal_places=2)
    discount_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    final_price = models.DecimalField(max_digits=10, decimal_places=2)

    # Grants (applied on approval)
    credits_added = models.PositiveIntegerField(null=True, blank=True)
    all_access_expires_at = models.DateTimeField(null=True, blank=True)
    all_access_days = models.PositiveIntegerField(null=True, blank=True)
    friend_pass_available = models.BooleanField(default=False)
    friend_pass_expires_at = models.DateTimeField(null=True, blank=True)

    notes = models.TextField(blank=True)

    # Audit
    redeemed_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='redemptions_requested'
    )
    redeemed_at = models.DateTimeField(auto_now_add=True, db_index=True)
    approved_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='redemptions_approved'
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    cancelled_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='redemptions_cancelled'
    )
    cancelled_at = models.DateTimeField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'package_redemptions'
        indexes = [
            models.Index(fields=['organization', 'status'], name='redemptions_org_status_idx'),
            models.Index(fields=['member', 'status'], name='redemptions_member_status_idx'),
            models.Index(fields=['coupon', 'status'], name='redemptions_coupon_status_idx'),
        ]
        ordering = ['-redeemed_at']

    def __str__(self):
        return f"{self.package_name} for {self.member_id} ({self.status})"

    @property
    def is_all_access(self):
        return self.all_access_expires_at is not None


class AllAccessDailyUsage(models.Model):
    """
    One consumed day of an All-Access window.

    The unique constraint on (package_redemption, usage_date) is what limits
    a member to one class per calendar day; a no-show still burns the day.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    package_redemption = models.ForeignKey(
        PackageRedemption,
        on_delete=models.CASCADE,
        related_name='daily_usages'
    )
    # Organization-local calendar day
    usage_date = models.DateField()
    # Booking in the scheduling system
    booking_id = models.UUIDField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'all_access_daily_usage'
        constraints = [
            models.UniqueConstraint(
                fields=['package_redemption', 'usage_date'],
                name='unique_daily_usage_per_redemption',
            ),
        ]
        ordering = ['-usage_date']

    def __str__(self):
        return f"{self.package_redemption_id} used on {self.usage_date}"
