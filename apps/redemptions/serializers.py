from rest_framework import serializers
from .models import PackageRedemption, AllAccessDailyUsage
from apps.accounts.serializers import UserMinimalSerializer
from apps.catalog.serializers import PackageMinimalSerializer, CouponMinimalSerializer
from apps.members.serializers import MemberSerializer


# =============================================================================
# Input Serializers
# =============================================================================

class RedemptionCreateSerializer(serializers.Serializer):
    """
    Validate input for redeeming a package.

    Fields:
        member_id (UUID): Member receiving the package (defaults to the caller's profile)
        package_id (UUID): Package to redeem (optional with a PACKAGE coupon)
        coupon_id (UUID): Coupon by ID
        coupon_code (str): Coupon by code, case-insensitive
        notes (str): Free-form note
    """

    member_id = serializers.UUIDField(required=False, allow_null=True)
    package_id = serializers.UUIDField(required=False, allow_null=True)
    coupon_id = serializers.UUIDField(required=False, allow_null=True)
    coupon_code = serializers.CharField(max_length=50, required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True, default='')

    def validate(self, attrs):
        if not attrs.get('package_id') and not attrs.get('coupon_id') and not attrs.get('coupon_code'):
            raise serializers.ValidationError('Provide a package_id or a coupon.')
        return attrs


class DailyUsageInputSerializer(serializers.Serializer):
    """
    Validate input for recording an All-Access day.

    Fields:
        booking_id (UUID): Booking consuming the day
        usage_date (date): Organization-local calendar day
    """

    booking_id = serializers.UUIDField()
    usage_date = serializers.DateField()


class ReleaseUsageInputSerializer(serializers.Serializer):
    """Booking whose All-Access day should be released."""

    booking_id = serializers.UUIDField()


# =============================================================================
# Output Serializers
# =============================================================================

class PackageRedemptionSerializer(serializers.ModelSerializer):
    """Redemption with its pricing and grant snapshot."""

    package = PackageMinimalSerializer(read_only=True)
    coupon = CouponMinimalSerializer(read_only=True)
    redeemed_by = UserMinimalSerializer(read_only=True)
    approved_by = UserMinimalSerializer(read_only=True)
    cancelled_by = UserMinimalSerializer(read_only=True)

    class Meta:
        model = PackageRedemption
        fields = [
            'id',
            'member',
            'package',
            'coupon',
            'redemption_type',
            'status',
            'package_name',
            'package_type',
            'original_price',
            'discount_amount',
            'final_price',
            'credits_added',
            'all_access_days',
            'all_access_expires_at',
            'friend_pass_available',
            'friend_pass_expires_at',
            'notes',
            'redeemed_by',
            'redeemed_at',
            'approved_by',
            'approved_at',
            'cancelled_by',
            'cancelled_at',
            'updated_at',
        ]
        read_only_fields = fields


class ApprovedRedemptionSerializer(PackageRedemptionSerializer):
    """Approval response: the redemption plus the member's new state."""

    member = MemberSerializer(read_only=True)


class DailyUsageSerializer(serializers.ModelSerializer):
    """One consumed All-Access day."""

    class Meta:
        model = AllAccessDailyUsage
        fields = ['id', 'package_redemption', 'usage_date', 'booking_id', 'created_at']
        read_only_fields = fields
