from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from apps.points.permissions import CanReadLedgerAccount
from apps.points.serializers import ErrorSerializer
from apps.points.services import LedgerError
from apps.points.views import error_response
from .ranking import RankingService
from .serializers import RankQuerySerializer, RankedRestaurantSerializer
from .exceptions import RankingServiceError


@extend_schema(
    parameters=[
        OpenApiParameter('userId', OpenApiTypes.STR, description='Account id (defaults to the caller)'),
        OpenApiParameter('criterion', OpenApiTypes.STR, enum=['alphabetical', 'distance', 'points']),
        OpenApiParameter('lat', OpenApiTypes.FLOAT, description='Caller latitude'),
        OpenApiParameter('lon', OpenApiTypes.FLOAT, description='Caller longitude'),
    ],
    responses={
        200: RankedRestaurantSerializer(many=True),
        400: ErrorSerializer,
        403: ErrorSerializer,
        503: ErrorSerializer,
    },
    description="Rank restaurants by name, distance or the caller's points.",
    tags=['ranking'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, CanReadLedgerAccount])
def rank(request):
    """Ranked restaurant list - thin HTTP handler."""
    query_serializer = RankQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)
    params = query_serializer.validated_data

    user_location = None
    if 'lat' in params:
        user_location = (params['lat'], params['lon'])

    try:
        entries = RankingService.rank(
            user_id=params.get('userId') or request.user.account_id,
            criterion=params['criterion'],
            user_location=user_location,
        )
    except (RankingServiceError, LedgerError) as e:
        return error_response(e)

    return Response(RankedRestaurantSerializer(entries, many=True).data)
