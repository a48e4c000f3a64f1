"""Restaurant catalog read path."""

from typing import Optional

from django.core.exceptions import ValidationError
from django.db.models import Q, QuerySet

from ..models import Restaurant


def get_restaurant(restaurant_id, *, only_active: bool = True) -> Optional[Restaurant]:
    """
    Look up a restaurant by id.

    Args:
        restaurant_id: UUID or its string form
        only_active: Ignore deactivated restaurants

    Returns:
        Restaurant instance, or None if the id is unknown or malformed
    """
    queryset = Restaurant.objects.all()
    if only_active:
        queryset = queryset.filter(is_active=True)

    try:
        return queryset.get(id=restaurant_id)
    except (Restaurant.DoesNotExist, ValidationError, ValueError):
        return None


def list_restaurants(*, only_active: bool = True) -> QuerySet[Restaurant]:
    """Return the catalog ordered by name."""
    queryset = Restaurant.objects.all()
    if only_active:
        queryset = queryset.filter(is_active=True)
    return queryset.order_by('name', 'id')


def search_restaurants(*, search: Optional[str] = None) -> QuerySet[Restaurant]:
    """
    Filter active restaurants by a free-text term.

    Args:
        search: Matched against name and description

    Returns:
        Filtered QuerySet of Restaurant
    """
    queryset = list_restaurants()
    if search:
        queryset = queryset.filter(
            Q(name__icontains=search) |
            Q(description__icontains=search)
        )
    return queryset

