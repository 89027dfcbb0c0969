from rest_framework import serializers
from .models import Organization, User


class OrganizationSerializer(serializers.ModelSerializer):
    """Minimal organization info for nested serialization."""

    class Meta:
        model = Organization
        fields = ['id', 'name', 'slug', 'timezone']
        read_only_fields = fields


class UserSerializer(serializers.ModelSerializer):
    """Basic user serializer for profile display."""

    organization = OrganizationSerializer(read_only=True)

    class Meta:
        model = User
        fields = [
            'id',
            'email',
            'name',
            'role',
            'organization',
            'created_at',
            'last_login',
        ]
        read_only_fields = fields


class UserMinimalSerializer(serializers.ModelSerializer):
    """Minimal user info for nested serialization (actors on ledger rows)."""

    display_name = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ['id', 'email', 'display_name']
        read_only_fields = fields

    def get_display_name(self, obj):
        return obj.get_display_name()


class UserLoginSerializer(serializers.Serializer):
    """Serializer for user login."""

    email = serializers.EmailField(required=True)
    password = serializers.CharField(
        required=True,
        write_only=True,
        style={'input_type': 'password'}
    )
