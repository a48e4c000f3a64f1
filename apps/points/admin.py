# ==========================================
# apps/points/admin.py
# ==========================================

from django.contrib import admin
from django.utils.html import format_html
from .models import PointsBalance, TransferRecord, Purchase, TransferStatus


class ReadOnlyAdminMixin:
    """Ledger rows change only through the services layer."""

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(PointsBalance)
class PointsBalanceAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ['account_id', 'restaurant', 'points', 'updated_at']
    list_filter = ['restaurant']
    search_fields = ['account_id', 'restaurant__name']
    list_select_related = ['restaurant']
    ordering = ['account_id', 'restaurant__name']


@admin.register(TransferRecord)
class TransferRecordAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    """Append-only transfer log with failed attempts highlighted."""

    list_display = [
        'id',
        'from_user_id',
        'to_kind',
        'to_id',
        'restaurant',
        'amount',
        'status_badge',
        'created_at',
    ]
    list_filter = ['status', 'to_kind', 'restaurant', 'created_at']
    search_fields = ['id', 'from_user_id', 'to_id', 'request_token']
    list_select_related = ['restaurant']
    date_hierarchy = 'created_at'

    def status_badge(self, obj):
        """Display transfer status as colored badge."""
        colors = {
            TransferStatus.COMMITTED: ('#6B8E5E', 'white'),
            TransferStatus.FAILED: ('#B85C5C', 'white'),
        }
        bg, fg = colors.get(obj.status, ('#ccc', '#666'))
        return format_html(
            '<span style="background: {}; color: {}; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            bg, fg, obj.get_status_display()
        )
    status_badge.short_description = 'Status'


@admin.register(Purchase)
class PurchaseAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ['receipt_code', 'user_id', 'restaurant', 'total_amount', 'points', 'purchased_at']
    list_filter = ['restaurant', 'purchased_at']
    search_fields = ['receipt_code', 'user_id']
    list_select_related = ['restaurant']
    date_hierarchy = 'purchased_at'
