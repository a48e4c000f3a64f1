"""
Ranking Module
==============

Orders the restaurant catalog for one user by name, by distance from the
user's location, or by the user's points at each restaurant.

Classes:
    RankingService: Static methods producing ranked restaurant entries.

Example:
    Ranking by points::

        from apps.ranking.ranking import RankingService

        entries = RankingService.rank(
            user_id=user.account_id,
            criterion='points',
            user_location=(44.4268, 26.1025),
        )
        for entry in entries:
            print(entry['restaurant'].name, entry['balance'], entry['distance'])

Note:
    This module is read-only. Balances are read committed at call time.
"""

from apps.points.services import get_balances
from apps.restaurants.services import list_restaurants

from .exceptions import InvalidCriterionError, LocationUnavailableError
from .geo import haversine_distance


class Criterion:
    ALPHABETICAL = 'alphabetical'
    DISTANCE = 'distance'
    POINTS = 'points'

    CHOICES = [
        (ALPHABETICAL, 'Alphabetical'),
        (DISTANCE, 'Distance'),
        (POINTS, 'Points'),
    ]
    VALUES = [value for value, _ in CHOICES]


class RankingService:
    """
    Restaurant ranking for the listing screen.

    Each entry is a plain dict::

        {'restaurant': Restaurant, 'balance': Decimal, 'distance': float | None}

    ``distance`` is in metres and is filled for every criterion whenever a
    location is given; restaurants without a coordinate get None.
    """

    @staticmethod
    def _name_key(restaurant):
        return (restaurant.name.casefold(), str(restaurant.id))

    @staticmethod
    def rank(user_id, criterion, user_location=None):
        """
        Rank the active catalog for one user.

        Args:
            user_id: Account whose balances are shown
            criterion: 'alphabetical', 'distance' or 'points'
            user_location: Optional (latitude, longitude) in degrees

        Returns:
            list[dict]: Ranked entries

        Raises:
            InvalidCriterionError: Unknown criterion
            LocationUnavailableError: Distance ranking without a location
        """
        if criterion not in Criterion.VALUES:
            raise InvalidCriterionError(
                f"Invalid criterion: {criterion!r}. Valid options: {', '.join(Criterion.VALUES)}"
            )
        if criterion == Criterion.DISTANCE and user_location is None:
            raise LocationUnavailableError("Distance ranking needs the user's location")

        restaurants = list(list_restaurants())
        balances = get_balances(user_id, [r.id for r in restaurants])

        entries = []
        for restaurant in restaurants:
            distance = None
            if user_location is not None and restaurant.has_coordinate:
                distance = haversine_distance(user_location, restaurant.coordinate)
            entries.append({
                'restaurant': restaurant,
                'balance': balances[str(restaurant.id)],
                'distance': distance,
            })

        name_key = RankingService._name_key
        if criterion == Criterion.ALPHABETICAL:
            entries.sort(key=lambda e: name_key(e['restaurant']))
        elif criterion == Criterion.DISTANCE:
            # Restaurants without a coordinate go last, by name
            entries.sort(key=lambda e: (
                e['distance'] is None,
                e['distance'] or 0.0,
                name_key(e['restaurant']),
            ))
        else:
            entries.sort(key=lambda e: (-e['balance'], name_key(e['restaurant'])))

        return entries
