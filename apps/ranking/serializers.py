"""
Serializers for ranking app.

Input Serializers:
    RankQuerySerializer - Validates ?userId&criterion&lat&lon

Response Serializers:
    RankedRestaurantSerializer - One ranked restaurant
"""

from rest_framework import serializers

from .ranking import Criterion


class RankQuerySerializer(serializers.Serializer):
    """
    Validate ranking query parameters.

    Query Parameters:
        userId (str): Account whose balances are used; defaults to the caller
        criterion (str): alphabetical, distance or points
        lat (float): Caller latitude in degrees
        lon (float): Caller longitude in degrees

    Note:
        ``lat`` and ``lon`` must be given together.
    """

    userId = serializers.CharField(max_length=64, required=False)
    criterion = serializers.ChoiceField(choices=Criterion.CHOICES, default=Criterion.ALPHABETICAL)
    lat = serializers.FloatField(required=False, min_value=-90, max_value=90)
    lon = serializers.FloatField(required=False, min_value=-180, max_value=180)

    def validate(self, attrs):
        if ('lat' in attrs) != ('lon' in attrs):
            raise serializers.ValidationError('lat and lon must be provided together')
        return attrs


class RankedRestaurantSerializer(serializers.Serializer):
    restaurantId = serializers.UUIDField(source='restaurant.id')
    name = serializers.CharField(source='restaurant.name')
    latitude = serializers.DecimalField(source='restaurant.latitude', max_digits=9, decimal_places=6, allow_null=True)
    longitude = serializers.DecimalField(source='restaurant.longitude', max_digits=9, decimal_places=6, allow_null=True)
    imageUrl = serializers.URLField(source='restaurant.image_url', allow_blank=True)
    balance = serializers.DecimalField(max_digits=12, decimal_places=2)
    distance = serializers.FloatField(allow_null=True, help_text='Metres from the caller, if known')
