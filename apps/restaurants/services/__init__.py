"""
Restaurant catalog services.

The catalog is read-only for the rest of the system: the ledger and ranking
apps look restaurants up here and never mutate them.
"""

from .catalog import (
    get_restaurant,
    list_restaurants,
    search_restaurants,
)

__all__ = [
    'get_restaurant',
    'list_restaurants',
    'search_restaurants',
]
