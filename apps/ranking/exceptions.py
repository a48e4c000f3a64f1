"""
Domain exceptions for ranking app.

Exception Hierarchy:
    RankingServiceError (base)
    ├── InvalidCriterionError
    └── LocationUnavailableError

Usage:
    from apps.ranking.exceptions import LocationUnavailableError

    if user_location is None:
        raise LocationUnavailableError("Distance ranking needs a location")
"""


class RankingServiceError(Exception):
    """Base exception for all ranking service errors."""

    code = 'ranking_error'
    retryable = False


class InvalidCriterionError(RankingServiceError):
    """
    Raised when an unknown ranking criterion is requested.

    Valid criteria are: alphabetical, distance, points.
    """

    code = 'invalid_criterion'


class LocationUnavailableError(RankingServiceError):
    """Raised when distance ranking is requested without the caller's location."""

    code = 'location_unavailable'
