from rest_framework import serializers
from .models import Restaurant


class RestaurantListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for restaurant listings."""

    imageUrl = serializers.URLField(source='image_url', read_only=True)

    class Meta:
        model = Restaurant
        fields = [
            'id',
            'name',
            'latitude',
            'longitude',
            'imageUrl',
        ]
        read_only_fields = fields


class RestaurantSerializer(serializers.ModelSerializer):
    """Full restaurant detail."""

    imageUrl = serializers.URLField(source='image_url', read_only=True)
    hasCoordinate = serializers.BooleanField(source='has_coordinate', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Restaurant
        fields = [
            'id',
            'name',
            'description',
            'latitude',
            'longitude',
            'hasCoordinate',
            'imageUrl',
            'createdAt',
            'updatedAt',
        ]
        read_only_fields = fields
