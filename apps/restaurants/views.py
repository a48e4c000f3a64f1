from rest_framework import viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from .serializers import RestaurantSerializer, RestaurantListSerializer
from .services import list_restaurants, search_restaurants


class RestaurantPagination(PageNumberPagination):
    """Custom pagination for restaurants."""
    page_size = 50
    page_size_query_param = 'page_size'
    max_page_size = 200


@extend_schema(tags=['restaurants'])
class RestaurantViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Read-only restaurant catalog.

    list: Get active restaurants (optional ?search=)
    retrieve: Get a specific restaurant
    """

    serializer_class = RestaurantSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = RestaurantPagination

    def get_queryset(self):
        if self.action == 'list':
            return search_restaurants(search=self.request.query_params.get('search'))
        return list_restaurants()

    def get_serializer_class(self):
        if self.action == 'list':
            return RestaurantListSerializer
        return RestaurantSerializer

    @extend_schema(
        parameters=[
            OpenApiParameter('search', OpenApiTypes.STR, description='Search in name and description'),
        ],
    )
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)
