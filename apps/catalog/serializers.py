from copy import copy

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import serializers

from .models import Package, Coupon


class ModelCleanMixin:
    """
    Run the model's ``clean()`` on the merged instance state, so rule-shape
    validation lives in one place for the admin and the API.
    """

    def validate(self, attrs):
        attrs = super().validate(attrs)
        instance = copy(self.instance) if self.instance else self.Meta.model()
        for field, value in attrs.items():
            setattr(instance, field, value)
        instance.organization_id = self.context['request'].user.organization_id

        try:
            instance.clean()
        except DjangoValidationError as e:
            if hasattr(e, 'error_dict'):
                raise serializers.ValidationError(e.message_dict)
            raise serializers.ValidationError(e.messages)
        return attrs

    def validate_code(self, value):
        """Codes are unique per organization, compared case-insensitively."""
        code = value.upper().strip()
        existing = self.Meta.model.objects.filter(
            organization_id=self.context['request'].user.organization_id,
            code__iexact=code,
        )
        if self.instance:
            existing = existing.exclude(id=self.instance.id)
        if existing.exists():
            raise serializers.ValidationError('This code is already in use.')
        return code


class PackageSerializer(ModelCleanMixin, serializers.ModelSerializer):
    """Package CRUD serializer (writes are admin-only)."""

    class Meta:
        model = Package
        fields = [
            'id',
            'code',
            'name',
            'description',
            'type',
            'price',
            'credits',
            'validity_days',
            'benefits',
            'is_active',
            'display_order',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']


class PackageMinimalSerializer(serializers.ModelSerializer):
    """Minimal package info for nested serialization."""

    class Meta:
        model = Package
        fields = ['id', 'code', 'name', 'type']
        read_only_fields = fields


class CouponSerializer(ModelCleanMixin, serializers.ModelSerializer):
    """Coupon CRUD serializer (admin-only)."""

    package = serializers.PrimaryKeyRelatedField(
        queryset=Package.objects.all(),
        required=False,
        allow_null=True,
    )

    class Meta:
        model = Coupon
        fields = [
            'id',
            'code',
            'name',
            'description',
            'coupon_type',
            'discount_type',
            'discount_value',
            'package',
            'custom_price',
            'custom_credits',
            'bonus_credits',
            'valid_from',
            'valid_until',
            'max_redemptions',
            'max_redemptions_per_member',
            'is_active',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']

    def get_fields(self):
        fields = super().get_fields()
        request = self.context.get('request')
        if request is not None and request.user.is_authenticated:
            fields['package'].queryset = Package.objects.filter(
                organization_id=request.user.organization_id
            )
        return fields


class CouponMinimalSerializer(serializers.ModelSerializer):
    """Minimal coupon info for nested serialization."""

    class Meta:
        model = Coupon
        fields = ['id', 'code', 'name', 'coupon_type']
        read_only_fields = fields


class CouponPublicSerializer(serializers.ModelSerializer):
    """What a member may see about a coupon before redeeming it."""

    package = PackageMinimalSerializer(read_only=True)

    class Meta:
        model = Coupon
        fields = [
            'id',
            'code',
            'name',
            'description',
            'coupon_type',
            'discount_type',
            'discount_value',
            'package',
            'custom_price',
            'custom_credits',
            'bonus_credits',
            'valid_from',
            'valid_until',
        ]
        read_only_fields = fields


class CouponLookupSerializer(serializers.Serializer):
    """Coupon lookup response: the coupon plus its current validity."""

    coupon = CouponPublicSerializer()
    is_valid = serializers.BooleanField()
    reason = serializers.CharField(allow_null=True)
    code = serializers.CharField(allow_null=True)
    remaining_redemptions = serializers.IntegerField(allow_null=True)
