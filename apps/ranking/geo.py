"""Great-circle distance helpers."""

from math import asin, cos, radians, sin, sqrt

EARTH_RADIUS_METRES = 6371008.8


def haversine_distance(origin, destination) -> float:
    """
    Distance in metres between two (latitude, longitude) pairs in degrees.

    Example:
        >>> round(haversine_distance((0.0, 0.0), (0.0, 1.0)))
        111195
    """
    lat1, lon1 = map(radians, origin)
    lat2, lon2 = map(radians, destination)

    a = sin((lat2 - lat1) / 2) ** 2 + cos(lat1) * cos(lat2) * sin((lon2 - lon1) / 2) ** 2
    return 2 * EARTH_RADIUS_METRES * asin(min(1.0, sqrt(a)))
