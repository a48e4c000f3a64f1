from rest_framework import mixins, status, viewsets
from rest_framework.decorators import api_view, permission_classes
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from .models import TransferRecord, Purchase
from .permissions import CanReadLedgerAccount, CanTransferFromAccount
from .serializers import (
    # Input serializers
    BalanceQuerySerializer,
    TransferCreateSerializer,
    TransferHistoryQuerySerializer,
    PurchaseCreateSerializer,
    # Response serializers
    BalanceResponseSerializer,
    AccountBalanceSerializer,
    TransferRecordSerializer,
    TransferResultSerializer,
    PurchaseSerializer,
    ErrorSerializer,
)
from .services import (
    LedgerError,
    InsufficientBalanceError,
    get_balance,
    list_balances,
    transfer,
    get_transfer_history,
    record_purchase,
    get_user_purchases,
)


ERROR_STATUS = {
    'invalid_amount': status.HTTP_400_BAD_REQUEST,
    'self_transfer': status.HTTP_400_BAD_REQUEST,
    'unknown_restaurant': status.HTTP_404_NOT_FOUND,
    'insufficient_balance': status.HTTP_400_BAD_REQUEST,
    'duplicate_request': status.HTTP_409_CONFLICT,
    'location_unavailable': status.HTTP_400_BAD_REQUEST,
    'storage_unavailable': status.HTTP_503_SERVICE_UNAVAILABLE,
    'timeout': status.HTTP_503_SERVICE_UNAVAILABLE,
}


def error_response(exc):
    """Translate a domain exception carrying ``code``/``retryable`` into a Response."""
    body = {
        'error': exc.code,
        'detail': str(exc),
        'retryable': exc.retryable,
    }
    if isinstance(exc, InsufficientBalanceError):
        body['balance'] = str(exc.balance)

    response = Response(body, status=ERROR_STATUS.get(exc.code, status.HTTP_400_BAD_REQUEST))
    if exc.retryable:
        response['Retry-After'] = '1'
    return response


class LedgerPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


@extend_schema(
    parameters=[
        OpenApiParameter('userId', OpenApiTypes.STR, description='Account id (defaults to the caller)'),
        OpenApiParameter('restaurantId', OpenApiTypes.UUID, required=True, description='Points scope'),
    ],
    responses={
        200: BalanceResponseSerializer,
        403: ErrorSerializer,
        503: ErrorSerializer,
    },
    description="Get the points an account holds at one restaurant.",
    tags=['points'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, CanReadLedgerAccount])
def balance(request):
    """Balance of one (account, restaurant) key - thin HTTP handler."""
    query_serializer = BalanceQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)
    params = query_serializer.validated_data

    account_id = params.get('userId') or request.user.account_id

    try:
        points = get_balance(account_id, params['restaurantId'])
    except LedgerError as e:
        return error_response(e)

    serializer = BalanceResponseSerializer({
        'userId': account_id,
        'restaurantId': params['restaurantId'],
        'balance': points,
    })
    return Response(serializer.data)


@extend_schema(
    parameters=[
        OpenApiParameter('userId', OpenApiTypes.STR, description='Account id (defaults to the caller)'),
    ],
    responses={
        200: AccountBalanceSerializer(many=True),
        503: ErrorSerializer,
    },
    description="List every per-restaurant balance of an account.",
    tags=['points'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, CanReadLedgerAccount])
def balances(request):
    """Balance overview of one account."""
    account_id = request.query_params.get('userId') or request.user.account_id

    try:
        rows = list_balances(account_id)
    except LedgerError as e:
        return error_response(e)

    return Response(AccountBalanceSerializer(rows, many=True).data)


class TransferViewSet(mixins.ListModelMixin,
                      mixins.RetrieveModelMixin,
                      viewsets.GenericViewSet):
    """
    Point transfers of the authenticated user.

    list: Transfers the caller sent or received, newest first
    retrieve: One transfer from the caller's history
    create: Transfer points to a user or redeem them at a restaurant
    """

    serializer_class = TransferRecordSerializer
    permission_classes = [IsAuthenticated, CanTransferFromAccount]
    pagination_class = LedgerPagination

    def get_queryset(self):
        if getattr(self, 'swagger_fake_view', False):
            return TransferRecord.objects.none()
        # A looked-up record is returned whatever its status
        if self.action == 'retrieve':
            return get_transfer_history(self.request.user.account_id, include_failed=True)
        query_serializer = TransferHistoryQuerySerializer(data=self.request.query_params)
        query_serializer.is_valid(raise_exception=True)
        return get_transfer_history(
            self.request.user.account_id,
            include_failed=query_serializer.validated_data['includeFailed'],
        )

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context['account_id'] = self.request.user.account_id
        return context

    @extend_schema(
        request=TransferCreateSerializer,
        responses={
            200: TransferResultSerializer,
            201: TransferResultSerializer,
            400: ErrorSerializer,
            403: ErrorSerializer,
            404: ErrorSerializer,
            409: ErrorSerializer,
            503: ErrorSerializer,
        },
        description=(
            "Transfer points in one restaurant's scope. Replaying a request "
            "token returns the original transfer with status 200."
        ),
        tags=['points'],
    )
    def create(self, request, *args, **kwargs):
        serializer = TransferCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            record, created = transfer(
                from_user_id=request.user.account_id,
                to_id=data.get('toId'),
                to_kind=data['toKind'],
                restaurant_id=data['restaurantId'],
                amount=data['amount'],
                request_token=data.get('requestToken'),
            )
        except LedgerError as e:
            return error_response(e)

        context = self.get_serializer_context()
        context['replayed'] = not created
        output = TransferResultSerializer(record, context=context)
        return Response(
            output.data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK
        )


class PurchaseViewSet(mixins.ListModelMixin,
                      mixins.RetrieveModelMixin,
                      viewsets.GenericViewSet):
    """
    Purchases that earned the authenticated user points.

    list: The caller's purchases, newest first
    retrieve: One purchase
    create: Record a scanned receipt and credit its points
    """

    serializer_class = PurchaseSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = LedgerPagination

    def get_queryset(self):
        if getattr(self, 'swagger_fake_view', False):
            return Purchase.objects.none()
        return get_user_purchases(self.request.user.account_id)

    @extend_schema(
        request=PurchaseCreateSerializer,
        responses={
            200: PurchaseSerializer,
            201: PurchaseSerializer,
            400: ErrorSerializer,
            404: ErrorSerializer,
            409: ErrorSerializer,
        },
        description="Record a scanned receipt. Rescanning the same receipt returns it with status 200.",
        tags=['points'],
    )
    def create(self, request, *args, **kwargs):
        serializer = PurchaseCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            purchase, created = record_purchase(
                user_id=request.user.account_id,
                restaurant_id=data['restaurantId'],
                receipt_code=data['receiptCode'],
                total_amount=data['totalAmount'],
                items=data.get('items', ()),
                purchased_at=data.get('purchasedAt'),
            )
        except LedgerError as e:
            return error_response(e)

        return Response(
            PurchaseSerializer(purchase).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK
        )
