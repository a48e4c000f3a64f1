# ==========================================
# apps/points/models.py
# ==========================================

from django.db import models
from django.db.models import Q
from django.core.validators import MinValueValidator
from decimal import Decimal
import uuid


POINTS_MAX_DIGITS = 12
POINTS_DECIMAL_PLACES = 2


class RecipientKind(models.TextChoices):
    USER = 'user', 'User'
    RESTAURANT = 'restaurant', 'Restaurant'


class TransferStatus(models.TextChoices):
    COMMITTED = 'committed', 'Committed'
    FAILED = 'failed', 'Failed'


class PointsBalance(models.Model):
    """
    Points one account holds for one restaurant.

    ``account_id`` is opaque: a user id, or a restaurant id when points were
    redeemed to a restaurant. Rows are created on first credit and never
    deleted.
    """

    account_id = models.CharField(max_length=64)
    restaurant = models.ForeignKey(
        'restaurants.Restaurant',
        on_delete=models.PROTECT,
        related_name='balances'
    )
    points = models.DecimalField(
        max_digits=POINTS_MAX_DIGITS,
        decimal_places=POINTS_DECIMAL_PLACES,
        default=Decimal('0.00')
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'points_balances'
        constraints = [
            models.UniqueConstraint(
                fields=['account_id', 'restaurant'],
                name='points_balance_unique_account_restaurant',
            ),
            models.CheckConstraint(
                condition=Q(points__gte=0),
                name='points_balance_non_negative',
            ),
        ]
        ordering = ['account_id', 'restaurant_id']

    def __str__(self):
        return f"{self.account_id} @ {self.restaurant_id}: {self.points}"


class TransferRecord(models.Model):
    """
    Immutable record of one point movement, scoped to one restaurant.

    Committed records carry the caller's request token so a replayed
    request resolves to the original record. Failed records are audit
    entries only and never carry a token.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    from_user_id = models.CharField(max_length=64)
    to_id = models.CharField(max_length=64)
    to_kind = models.CharField(max_length=20, choices=RecipientKind.choices)

    # Points "currency" scope
    restaurant = models.ForeignKey(
        'restaurants.Restaurant',
        on_delete=models.PROTECT,
        related_name='transfers'
    )
    amount = models.DecimalField(
        max_digits=POINTS_MAX_DIGITS,
        decimal_places=POINTS_DECIMAL_PLACES,
        validators=[MinValueValidator(Decimal('0.01'))]
    )

    status = models.CharField(max_length=20, choices=TransferStatus.choices)
    failure_reason = models.CharField(max_length=50, blank=True)
    request_token = models.CharField(max_length=128, unique=True, null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'points_transfers'
        indexes = [
            models.Index(fields=['from_user_id', 'created_at'], name='points_tr_from_created_idx'),
            models.Index(fields=['to_id', 'created_at'], name='points_tr_to_created_idx'),
            models.Index(fields=['restaurant', 'created_at'], name='points_tr_rest_created_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(amount__gt=0),
                name='points_transfer_positive_amount',
            ),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.from_user_id} -> {self.to_id} ({self.amount}, {self.status})"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Transfer records are append-only")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("Transfer records are append-only")

    @property
    def is_committed(self):
        return self.status == TransferStatus.COMMITTED

    def matches(self, *, from_user_id, to_id, to_kind, restaurant_id, amount):
        """True if this record was produced by a request with these parameters."""
        return (
            self.from_user_id == str(from_user_id)
            and self.to_id == str(to_id)
            and self.to_kind == to_kind
            and str(self.restaurant_id) == str(restaurant_id)
            and self.amount == amount
        )


class Purchase(models.Model):
    """Restaurant purchase that earned points, identified by its receipt code."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user_id = models.CharField(max_length=64)
    restaurant = models.ForeignKey(
        'restaurants.Restaurant',
        on_delete=models.PROTECT,
        related_name='purchases'
    )

    # Code printed in the receipt QR; one reward per receipt
    receipt_code = models.CharField(max_length=128, unique=True)

    # [{"name": "...", "amount": "12.50"}, ...]
    items = models.JSONField(default=list, blank=True)
    total_amount = models.DecimalField(
        max_digits=POINTS_MAX_DIGITS,
        decimal_places=POINTS_DECIMAL_PLACES,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    points = models.DecimalField(
        max_digits=POINTS_MAX_DIGITS,
        decimal_places=POINTS_DECIMAL_PLACES,
        validators=[MinValueValidator(Decimal('0.01'))]
    )

    purchased_at = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'points_purchases'
        indexes = [
            models.Index(fields=['user_id', 'purchased_at'], name='points_pu_user_date_idx'),
        ]
        ordering = ['-purchased_at', '-created_at']

    def __str__(self):
        return f"{self.receipt_code} - {self.total_amount} ({self.points} pts)"
