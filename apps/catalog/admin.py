# ==========================================
# apps/catalog/admin.py
# ==========================================

from django.contrib import admin
from django.utils.html import format_html
from .models import Package, Coupon, CouponType


@admin.register(Package)
class PackageAdmin(admin.ModelAdmin):
    """Admin interface for packages."""

    list_display = [
        'code',
        'name',
        'organization',
        'type',
        'price',
        'credits',
        'validity_days',
        'is_active',
        'display_order',
    ]
    list_filter = ['organization', 'type', 'is_active']
    search_fields = ['code', 'name', 'description']
    readonly_fields = ['created_at', 'updated_at']
    ordering = ['organization', 'display_order', 'price']

    fieldsets = (
        ('Basic Information', {
            'fields': ('organization', 'code', 'name', 'description', 'type')
        }),
        ('Offer', {
            'fields': ('price', 'credits', 'validity_days', 'benefits')
        }),
        ('Display', {
            'fields': ('is_active', 'display_order')
        }),
        ('Metadata', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )


@admin.register(Coupon)
class CouponAdmin(admin.ModelAdmin):
    """Admin interface for coupons."""

    list_display = [
        'code',
        'name',
        'organization',
        'type_badge',
        'valid_from',
        'valid_until',
        'max_redemptions',
        'max_redemptions_per_member',
        'is_active',
    ]
    list_filter = ['organization', 'coupon_type', 'is_active']
    search_fields = ['code', 'name', 'description']
    readonly_fields = ['created_at', 'updated_at']
    autocomplete_fields = ['package']
    date_hierarchy = 'created_at'

    fieldsets = (
        ('Basic Information', {
            'fields': ('organization', 'code', 'name', 'description', 'coupon_type')
        }),
        ('Discount', {
            'fields': ('discount_type', 'discount_value')
        }),
        ('Package', {
            'fields': ('package', 'custom_price', 'custom_credits')
        }),
        ('Credit bonus', {
            'fields': ('bonus_credits',)
        }),
        ('Validity & Limits', {
            'fields': (
                'valid_from',
                'valid_until',
                'max_redemptions',
                'max_redemptions_per_member',
                'is_active'
            )
        }),
        ('Metadata', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def type_badge(self, obj):
        """Display coupon type as colored badge."""
        colors = {
            CouponType.DISCOUNT: ('#D4A574', 'white'),
            CouponType.PACKAGE: ('#6B8E5E', 'white'),
            CouponType.CREDIT_BONUS: ('#5C7AB8', 'white'),
        }
        bg, fg = colors.get(obj.coupon_type, ('#ccc', '#666'))
        return format_html(
            '<span style="background: {}; color: {}; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            bg, fg, obj.get_coupon_type_display()
        )
    type_badge.short_description = 'Type'
