# ==========================================
# apps/members/admin.py
# ==========================================

from django.contrib import admin
from django.utils.html import format_html
from .models import Member, CreditTransaction, MemberStatus


class CreditTransactionInline(admin.TabularInline):
    """Read-only ledger rows within a member."""
    model = CreditTransaction
    extra = 0
    fields = ['created_at', 'type', 'amount', 'balance_before', 'balance_after', 'description', 'performed_by']
    readonly_fields = fields
    ordering = ['-created_at']
    can_delete = False

    def has_add_permission(self, request, obj=None):
        """Ledger rows are written by the ledger service only."""
        return False


@admin.register(Member)
class MemberAdmin(admin.ModelAdmin):
    """
    Admin interface for members.

    The balance is read-only here: edits go through the adjust_balance
    endpoint so every change leaves a credit transaction behind.
    """

    list_display = [
        'id',
        'user',
        'organization',
        'status_badge',
        'credit_balance',
        'has_all_access',
        'all_access_expires_at',
        'is_elite_member',
    ]
    list_filter = ['organization', 'status', 'has_all_access', 'is_elite_member']
    search_fields = ['user__email', 'user__name']
    readonly_fields = [
        'credit_balance',
        'has_all_access',
        'all_access_expires_at',
        'is_elite_member',
        'created_at',
        'updated_at',
    ]
    inlines = [CreditTransactionInline]

    def status_badge(self, obj):
        """Display member status as colored badge."""
        colors = {
            MemberStatus.ACTIVE: ('#6B8E5E', 'white'),
            MemberStatus.INACTIVE: ('#B85C5C', 'white'),
        }
        bg, fg = colors.get(obj.status, ('#ccc', '#666'))
        return format_html(
            '<span style="background: {}; color: {}; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            bg, fg, obj.get_status_display()
        )
    status_badge.short_description = 'Status'


@admin.register(CreditTransaction)
class CreditTransactionAdmin(admin.ModelAdmin):
    """Append-only audit trail; nothing here is editable."""

    list_display = ['created_at', 'member', 'type', 'amount', 'balance_before', 'balance_after', 'performed_by']
    list_filter = ['organization', 'type', 'created_at']
    search_fields = ['member__user__email', 'description']
    date_hierarchy = 'created_at'

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
