"""
Serializers for the points ledger API.

Field names are camelCase to match the mobile client.

Input Serializers:
    BalanceQuerySerializer - ?userId&restaurantId of the balance endpoint
    TransferCreateSerializer - POST body of a transfer
    TransferHistoryQuerySerializer - filters of the history listing
    PurchaseCreateSerializer - POST body of a scanned receipt

Response Serializers:
    BalanceResponseSerializer, AccountBalanceSerializer,
    TransferRecordSerializer, TransferResultSerializer,
    PurchaseSerializer, ErrorSerializer
"""

from rest_framework import serializers

from .models import PointsBalance, TransferRecord, Purchase, RecipientKind


# =============================================================================
# Input Serializers
# =============================================================================

class BalanceQuerySerializer(serializers.Serializer):
    """
    Query Parameters:
        userId (str): Account to read; defaults to the caller
        restaurantId (UUID): Points scope
    """

    userId = serializers.CharField(max_length=64, required=False)
    restaurantId = serializers.UUIDField()


class TransferCreateSerializer(serializers.Serializer):
    """
    Validate a transfer request.

    Amount is only parsed here; its business rules (positive, two decimal
    places) are checked by the ledger so the error carries its code.
    """

    fromUserId = serializers.CharField(max_length=64, required=False)
    toId = serializers.CharField(max_length=64, required=False, allow_blank=True)
    toKind = serializers.ChoiceField(choices=RecipientKind.choices, default=RecipientKind.USER)
    restaurantId = serializers.UUIDField()
    amount = serializers.DecimalField(max_digits=None, decimal_places=None)
    requestToken = serializers.CharField(
        max_length=128,
        required=False,
        allow_blank=True,
        allow_null=True
    )

    def validate(self, attrs):
        if attrs.get('toKind') == RecipientKind.USER and not attrs.get('toId'):
            raise serializers.ValidationError({'toId': 'Recipient is required for user transfers'})
        return attrs


class TransferHistoryQuerySerializer(serializers.Serializer):
    includeFailed = serializers.BooleanField(required=False, default=False)


class PurchaseItemSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200)
    amount = serializers.DecimalField(max_digits=None, decimal_places=None)


class PurchaseCreateSerializer(serializers.Serializer):
    """Body of a scanned receipt."""

    restaurantId = serializers.UUIDField()
    receiptCode = serializers.CharField(max_length=128)
    totalAmount = serializers.DecimalField(max_digits=None, decimal_places=None)
    items = PurchaseItemSerializer(many=True, required=False)
    purchasedAt = serializers.DateTimeField(required=False)


# =============================================================================
# Response Serializers
# =============================================================================

class BalanceResponseSerializer(serializers.Serializer):
    userId = serializers.CharField()
    restaurantId = serializers.UUIDField()
    balance = serializers.DecimalField(max_digits=12, decimal_places=2)


class AccountBalanceSerializer(serializers.ModelSerializer):
    """One row of the caller's balance overview."""

    restaurantId = serializers.UUIDField(source='restaurant_id', read_only=True)
    restaurantName = serializers.CharField(source='restaurant.name', read_only=True)
    balance = serializers.DecimalField(source='points', max_digits=12, decimal_places=2, read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = PointsBalance
        fields = ['restaurantId', 'restaurantName', 'balance', 'updatedAt']
        read_only_fields = fields


class TransferRecordSerializer(serializers.ModelSerializer):
    """
    Transfer record as seen by one user.

    ``direction`` is ``sent`` or ``received`` relative to
    ``context['account_id']``.
    """

    transferId = serializers.UUIDField(source='id', read_only=True)
    fromUserId = serializers.CharField(source='from_user_id', read_only=True)
    toId = serializers.CharField(source='to_id', read_only=True)
    toKind = serializers.CharField(source='to_kind', read_only=True)
    restaurantId = serializers.UUIDField(source='restaurant_id', read_only=True)
    restaurantName = serializers.CharField(source='restaurant.name', read_only=True)
    failureReason = serializers.CharField(source='failure_reason', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    direction = serializers.SerializerMethodField()

    class Meta:
        model = TransferRecord
        fields = [
            'transferId',
            'fromUserId',
            'toId',
            'toKind',
            'restaurantId',
            'restaurantName',
            'amount',
            'status',
            'failureReason',
            'direction',
            'createdAt',
        ]
        read_only_fields = fields

    def get_direction(self, obj) -> str:
        account_id = self.context.get('account_id')
        if account_id and obj.from_user_id != account_id:
            return 'received'
        return 'sent'


class TransferResultSerializer(TransferRecordSerializer):
    """Transfer record plus whether the request token replayed it."""

    replayed = serializers.SerializerMethodField()

    class Meta(TransferRecordSerializer.Meta):
        fields = TransferRecordSerializer.Meta.fields + ['replayed']
        read_only_fields = fields

    def get_replayed(self, obj) -> bool:
        return bool(self.context.get('replayed', False))


class PurchaseSerializer(serializers.ModelSerializer):
    purchaseId = serializers.UUIDField(source='id', read_only=True)
    userId = serializers.CharField(source='user_id', read_only=True)
    restaurantId = serializers.UUIDField(source='restaurant_id', read_only=True)
    restaurantName = serializers.CharField(source='restaurant.name', read_only=True)
    receiptCode = serializers.CharField(source='receipt_code', read_only=True)
    totalAmount = serializers.DecimalField(source='total_amount', max_digits=12, decimal_places=2, read_only=True)
    purchasedAt = serializers.DateTimeField(source='purchased_at', read_only=True)

    class Meta:
        model = Purchase
        fields = [
            'purchaseId',
            'userId',
            'restaurantId',
            'restaurantName',
            'receiptCode',
            'items',
            'totalAmount',
            'points',
            'purchasedAt',
        ]
        read_only_fields = fields


class ErrorSerializer(serializers.Serializer):
    """Ledger error body."""

    error = serializers.CharField()
    detail = serializers.CharField()
    retryable = serializers.BooleanField()
    balance = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
