# ==========================================
# apps/restaurants/admin.py
# ==========================================

from django.contrib import admin
from .models import Restaurant


@admin.register(Restaurant)
class RestaurantAdmin(admin.ModelAdmin):
    """
    Admin interface for the restaurant catalog.

    This is the only write path into the catalog.
    """

    list_display = ['name', 'latitude', 'longitude', 'is_active', 'created_at']
    list_filter = ['is_active', 'created_at']
    search_fields = ['name', 'description']
    readonly_fields = ['id', 'created_at', 'updated_at']

    fieldsets = (
        ('Basic Information', {
            'fields': ('id', 'name', 'description', 'image_url', 'is_active')
        }),
        ('Location', {
            'fields': ('latitude', 'longitude'),
            'description': 'Leave both empty if the location is unknown.',
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',),
        }),
    )

    actions = ['deactivate_restaurants']

    @admin.action(description='Deactivate selected restaurants')
    def deactivate_restaurants(self, request, queryset):
        """Hide restaurants from the catalog; balances are kept."""
        count = queryset.update(is_active=False)
        self.message_user(request, f'Deactivated {count} restaurant(s).')
