# ==========================================
# apps/redemptions/admin.py
# ==========================================

from django.contrib import admin
from django.utils.html import format_html
from .models import PackageRedemption, AllAccessDailyUsage, RedemptionStatus


class AllAccessDailyUsageInline(admin.TabularInline):
    """Consumed All-Access days within a redemption."""
    model = AllAccessDailyUsage
    extra = 0
    fields = ['usage_date', 'booking_id', 'created_at']
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(PackageRedemption)
class PackageRedemptionAdmin(admin.ModelAdmin):
    """
    Admin interface for package redemptions.

    Read-only: approvals and cancellations go through the API so credits
    and entitlements are granted in the same transaction.
    """

    list_display = [
        'id',
        'member',
        'package_name',
        'redemption_type',
        'status_badge',
        'final_price',
        'credits_added',
        'all_access_expires_at',
        'redeemed_at',
    ]
    list_filter = ['organization', 'status', 'redemption_type', 'package_type', 'redeemed_at']
    search_fields = ['member__user__email', 'package_name', 'coupon__code', 'notes']
    date_hierarchy = 'redeemed_at'
    inlines = [AllAccessDailyUsageInline]

    fieldsets = (
        ('Redemption', {
            'fields': ('organization', 'member', 'package', 'coupon', 'redemption_type', 'status', 'notes')
        }),
        ('Pricing', {
            'fields': ('package_name', 'package_type', 'original_price', 'discount_amount', 'final_price')
        }),
        ('Grants', {
            'fields': (
                'credits_added',
                'all_access_days',
                'all_access_expires_at',
                'friend_pass_available',
                'friend_pass_expires_at'
            )
        }),
        ('Audit', {
            'fields': (
                'redeemed_by',
                'redeemed_at',
                'approved_by',
                'approved_at',
                'cancelled_by',
                'cancelled_at',
                'updated_at'
            ),
            'classes': ('collapse',)
        }),
    )

    def get_readonly_fields(self, request, obj=None):
        return [field.name for field in self.model._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    def status_badge(self, obj):
        """Display redemption status as colored badge."""
        colors = {
            RedemptionStatus.PENDING: ('#D4A574', 'white'),
            RedemptionStatus.ACTIVE: ('#6B8E5E', 'white'),
            RedemptionStatus.CANCELLED: ('#B85C5C', 'white'),
            RedemptionStatus.EXPIRED: ('#999', 'white'),
            RedemptionStatus.USED: ('#5C7AB8', 'white'),
        }
        bg, fg = colors.get(obj.status, ('#ccc', '#666'))
        return format_html(
            '<span style="background: {}; color: {}; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            bg, fg, obj.get_status_display()
        )
    status_badge.short_description = 'Status'
