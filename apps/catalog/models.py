# ==========================================
# apps/catalog/models.py
# ==========================================

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
from decimal import Decimal
import uuid


class PackageType(models.TextChoices):
    SINGLE_RIDE = 'SINGLE_RIDE', 'Single ride'
    CREDIT_PACK = 'CREDIT_PACK', 'Credit pack'
    ELITE_30 = 'ELITE_30', 'Elite 30'
    ALL_ACCESS = 'ALL_ACCESS', 'All Access'


class CouponType(models.TextChoices):
    DISCOUNT = 'DISCOUNT', 'Discount'
    PACKAGE = 'PACKAGE', 'Package'
    CREDIT_BONUS = 'CREDIT_BONUS', 'Credit bonus'


class DiscountType(models.TextChoices):
    PERCENTAGE = 'PERCENTAGE', 'Percentage'
    FIXED_AMOUNT = 'FIXED_AMOUNT', 'Fixed amount'


FRIEND_PASS_BENEFIT = 'friend_pass'


class Package(models.Model):
    """Purchasable offer: a credit bundle, an elite tier or an All-Access window."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    organization = models.ForeignKey(
        'accounts.Organization',
        on_delete=models.CASCADE,
        related_name='packages'
    )

    code = models.CharField(max_length=50)
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    type = models.CharField(max_length=20, choices=PackageType.choices)

    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    # Null for ALL_ACCESS
    credits = models.PositiveIntegerField(null=True, blank=True)
    # Length of the All-Access / friend-pass window; null uses the setting default
    validity_days = models.PositiveIntegerField(null=True, blank=True)
    benefits = models.JSONField(default=list, blank=True)

    is_active = models.BooleanField(default=True)
    display_order = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'packages'
        constraints = [
            models.UniqueConstraint(fields=['organization', 'code'], name='package_code_unique_per_org'),
        ]
        ordering = ['display_order', 'price']

    def __str__(self):
        return f"{self.code} - {self.name}"

    def save(self, *args, **kwargs):
        if self.code:
            self.code = self.code.upper().strip()
        super().save(*args, **kwargs)

    def clean(self):
        super().clean()
        if self.type == PackageType.ALL_ACCESS:
            if self.credits:
                raise ValidationError({'credits': 'All-Access packages grant a time window, not credits.'})
        elif not self.credits:
            raise ValidationError({'credits': 'Credit packages must grant at least one credit.'})
        if not isinstance(self.benefits, list) or not all(isinstance(tag, str) for tag in self.benefits):
            raise ValidationError({'benefits': 'Benefits must be a list of tags.'})

    @property
    def is_all_access(self):
        return self.type == PackageType.ALL_ACCESS

    def has_benefit(self, tag):
        return tag in (self.benefits or [])


class Coupon(models.Model):
    """
    Coupon code with one of three rule shapes, selected by ``coupon_type``:

    - DISCOUNT: ``discount_type`` + ``discount_value`` off the package price
    - PACKAGE: grants ``package`` with optional ``custom_price``/``custom_credits``
    - CREDIT_BONUS: ``bonus_credits`` on top of the package credits

    ``apps.catalog.rules.coupon_rule`` turns a coupon into its typed rule.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    organization = models.ForeignKey(
        'accounts.Organization',
        on_delete=models.CASCADE,
        related_name='coupons'
    )

    code = models.CharField(max_length=50, help_text='Coupon code (case-insensitive)')
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    coupon_type = models.CharField(max_length=20, choices=CouponType.choices)

    # DISCOUNT
    discount_type = models.CharField(max_length=20, choices=DiscountType.choices, blank=True)
    discount_value = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0.00'))]
    )

    # PACKAGE
    package = models.ForeignKey(
        Package,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='coupons'
    )
    custom_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    custom_credits = models.PositiveIntegerField(null=True, blank=True)

    # CREDIT_BONUS
    bonus_credits = models.PositiveIntegerField(null=True, blank=True)

    # Validity window and limits
    valid_from = models.DateTimeField(null=True, blank=True)
    valid_until = models.DateTimeField(null=True, blank=True)
    max_redemptions = models.PositiveIntegerField(null=True, blank=True, help_text='Empty = unlimited')
    max_redemptions_per_member = models.PositiveIntegerField(
        default=1,
        validators=[MinValueValidator(1), MaxValueValidator(1000)]
    )
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'coupons'
        constraints = [
            models.UniqueConstraint(fields=['organization', 'code'], name='coupon_code_unique_per_org'),
        ]
        indexes = [
            models.Index(fields=['organization', 'is_active'], name='coupons_org_active_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.code} - {self.name}"

    def save(self, *args, **kwargs):
        """Normalize code to uppercase before saving."""
        if self.code:
            self.code = self.code.upper().strip()
        super().save(*args, **kwargs)

    def clean(self):
        """Validate that the fields match the coupon type."""
        super().clean()
        if self.coupon_type == CouponType.DISCOUNT:
            if not self.discount_type or self.discount_value is None:
                raise ValidationError('Discount coupons require discount_type and discount_value.')
            if self.discount_type == DiscountType.PERCENTAGE and self.discount_value > 100:
                raise ValidationError({'discount_value': 'Percentage must be between 0 and 100.'})
        elif self.coupon_type == CouponType.PACKAGE:
            if not self.package_id:
                raise ValidationError({'package': 'Package coupons require a package.'})
            if self.package.organization_id != self.organization_id:
                raise ValidationError({'package': 'Package belongs to another organization.'})
        elif self.coupon_type == CouponType.CREDIT_BONUS:
            if not self.bonus_credits:
                raise ValidationError({'bonus_credits': 'Credit bonus coupons require bonus_credits.'})

        if self.valid_from and self.valid_until and self.valid_until < self.valid_from:
            raise ValidationError('valid_until must be after valid_from.')
