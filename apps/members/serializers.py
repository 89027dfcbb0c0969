from rest_framework import serializers
from .models import Member, CreditTransaction
from apps.accounts.serializers import UserMinimalSerializer


# =============================================================================
# Input Serializers
# =============================================================================

class MemberCreateSerializer(serializers.Serializer):
    """
    Validate input for enrolling a member.

    Fields:
        user_id (UUID): Optional login account in the same organization
        membership_type (str): Free-form membership label
        opening_credits (int): Credits granted at enrollment
    """

    user_id = serializers.UUIDField(required=False, allow_null=True)
    membership_type = serializers.CharField(max_length=50, required=False, allow_blank=True)
    opening_credits = serializers.IntegerField(min_value=0, required=False, default=0)


class AdjustBalanceInputSerializer(serializers.Serializer):
    """
    Validate input for an admin balance edit.

    Fields:
        delta (int): Signed change, positive adds and negative deducts
        absolute (int): New balance to set
        description (str): Optional reason recorded on the transaction

    Exactly one of ``delta`` and ``absolute`` is required.
    """

    delta = serializers.IntegerField(required=False)
    absolute = serializers.IntegerField(required=False, min_value=0)
    description = serializers.CharField(max_length=500, required=False, allow_blank=True, default='')

    def validate(self, attrs):
        has_delta = attrs.get('delta') is not None
        has_absolute = attrs.get('absolute') is not None

        if has_delta == has_absolute:
            raise serializers.ValidationError('Provide exactly one of delta or absolute.')
        if has_delta and attrs['delta'] == 0:
            raise serializers.ValidationError({'delta': 'Delta must be non-zero.'})

        return attrs


# =============================================================================
# Output Serializers
# =============================================================================

class MemberSerializer(serializers.ModelSerializer):
    """Member with balance and entitlement flags."""

    user = UserMinimalSerializer(read_only=True)

    class Meta:
        model = Member
        fields = [
            'id',
            'organization',
            'user',
            'membership_type',
            'status',
            'credit_balance',
            'has_all_access',
            'all_access_expires_at',
            'is_elite_member',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class CreditTransactionSerializer(serializers.ModelSerializer):
    """Immutable ledger row."""

    performed_by = UserMinimalSerializer(read_only=True)

    class Meta:
        model = CreditTransaction
        fields = [
            'id',
            'member',
            'amount',
            'balance_before',
            'balance_after',
            'type',
            'description',
            'performed_by',
            'created_at',
        ]
        read_only_fields = fields
