# ==========================================
# apps/accounts/admin.py
# ==========================================

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.html import format_html
from .models import Organization, User


@admin.register(Organization)
class OrganizationAdmin(admin.ModelAdmin):
    """Admin interface for studio tenants."""

    list_display = ['name', 'slug', 'timezone', 'created_at']
    search_fields = ['name', 'slug']
    prepopulated_fields = {'slug': ('name',)}
    readonly_fields = ['created_at']


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """
    Custom admin interface for User model.

    Users are listed with their organization and role; the role decides
    who may approve redemptions and adjust member balances.
    """

    list_display = [
        'email',
        'name',
        'organization',
        'role_badge',
        'is_active',
        'created_at',
        'last_login',
    ]

    list_filter = [
        'role',
        'organization',
        'is_active',
        'is_staff',
        'created_at',
    ]

    search_fields = [
        'email',
        'name',
    ]

    ordering = ['-created_at']
    date_hierarchy = 'created_at'

    # Remove username field references from BaseUserAdmin
    fieldsets = (
        ('Basic Information', {
            'fields': ('email', 'name', 'password')
        }),
        ('Tenant', {
            'fields': ('organization', 'role'),
        }),
        ('Permissions', {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'last_login'),
            'classes': ('collapse',),
        }),
    )

    add_fieldsets = (
        ('Create User', {
            'classes': ('wide',),
            'fields': ('email', 'name', 'organization', 'role', 'password1', 'password2'),
        }),
    )

    readonly_fields = [
        'created_at',
        'last_login',
    ]

    filter_horizontal = ['groups', 'user_permissions']

    def role_badge(self, obj):
        """Display role as colored badge."""
        if obj.is_org_admin:
            return format_html(
                '<span style="background: #A47449; color: white; padding: 3px 8px; '
                'border-radius: 10px; font-size: 11px;">{}</span>',
                obj.get_role_display()
            )
        return format_html(
            '<span style="background: #ccc; color: #666; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            obj.get_role_display()
        )
    role_badge.short_description = 'Role'
    role_badge.admin_order_field = 'role'
