"""
Points accrual from scanned purchase receipts.

Each receipt code rewards points once. Creating the purchase row and
crediting the balance happen in one transaction.
"""

import logging
from decimal import Decimal, ROUND_DOWN
from typing import Iterable, Tuple

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import QuerySet
from django.utils import timezone

from apps.restaurants.services import get_restaurant

from ..models import Purchase
from .balance_store import QUANTUM, lock_accounts, normalize_amount, storage_guard, write_guard
from .exceptions import (
    DuplicateRequestError,
    InvalidAmountError,
    StorageUnavailableError,
    UnknownRestaurantError,
)

logger = logging.getLogger(__name__)


def compute_points(total_amount) -> Decimal:
    """
    Points earned for a purchase total.

    ``total_amount * LOYALTY['POINTS_PER_CURRENCY_UNIT']`` rounded down to
    two decimal places.
    """
    total_amount = normalize_amount(total_amount)
    rate = Decimal(str(getattr(settings, 'LOYALTY', {}).get('POINTS_PER_CURRENCY_UNIT', '0.05')))
    return (total_amount * rate).quantize(QUANTUM, rounding=ROUND_DOWN)


def _normalize_items(items):
    normalized = []
    for item in items or ():
        name = str(item.get('name', '')).strip()
        if not name:
            raise ValueError("Purchase item requires a name")
        amount = normalize_amount(item.get('amount'))
        normalized.append({'name': name, 'amount': str(amount)})
    return normalized


def _existing_purchase(receipt_code, *, user_id, restaurant_id):
    existing = Purchase.objects.filter(receipt_code=receipt_code).first()
    if existing is None:
        return None
    if existing.user_id != user_id or str(existing.restaurant_id) != restaurant_id:
        raise DuplicateRequestError(f"Receipt {receipt_code} was already scanned")
    logger.info("Receipt %s rescanned by %s, no points added", receipt_code, user_id)
    return existing


def record_purchase(
    *,
    user_id,
    restaurant_id,
    receipt_code: str,
    total_amount,
    items: Iterable[dict] = (),
    points=None,
    purchased_at=None
) -> Tuple[Purchase, bool]:
    """
    Record a scanned purchase and credit its points.

    Args:
        user_id: Buyer's account id
        restaurant_id: Restaurant the receipt belongs to
        receipt_code: Code decoded from the receipt QR
        total_amount: Purchase total
        items: Iterable of ``{'name': str, 'amount': number}``
        points: Points to credit; computed from the total when omitted.
            Internal callers only; never taken from client input
        purchased_at: Purchase time; defaults to now

    Returns:
        tuple: (Purchase, created). ``created`` is False when the same user
        rescanned a receipt for the same restaurant.

    Raises:
        InvalidAmountError: Total or points are not positive
        UnknownRestaurantError: Restaurant is not in the active catalog
        DuplicateRequestError: Receipt was already used by someone else or
            for another restaurant
        LedgerTimeoutError: The commit failed and the outcome is unknown;
            rescanning the receipt is safe
    """
    user_id = str(user_id)
    receipt_code = (receipt_code or '').strip()
    if not receipt_code:
        raise ValueError("receipt_code is required")

    total_amount = normalize_amount(total_amount)
    if points is None:
        points = compute_points(total_amount)
        if points <= 0:
            raise InvalidAmountError(f"Total {total_amount} earns no points")
    else:
        points = normalize_amount(points)
    items = _normalize_items(items)

    with storage_guard():
        restaurant = get_restaurant(restaurant_id)
        if restaurant is None:
            raise UnknownRestaurantError(f"Restaurant {restaurant_id} not found")
        restaurant_id = str(restaurant.id)

        existing = _existing_purchase(receipt_code, user_id=user_id, restaurant_id=restaurant_id)
        if existing is not None:
            return existing, False

        try:
            with write_guard() as state, transaction.atomic():
                purchase = Purchase.objects.create(
                    user_id=user_id,
                    restaurant=restaurant,
                    receipt_code=receipt_code,
                    items=items,
                    total_amount=total_amount,
                    points=points,
                    purchased_at=purchased_at or timezone.now(),
                )
                key = (user_id, restaurant_id)
                row = lock_accounts([key])[key]
                row.points += points
                row.save(update_fields=['points', 'updated_at'])
                state['body_done'] = True
        except IntegrityError as exc:
            # Concurrent scan of the same receipt
            existing = _existing_purchase(receipt_code, user_id=user_id, restaurant_id=restaurant_id)
            if existing is None:
                logger.warning("Purchase %s hit an integrity error: %s", receipt_code, exc)
                raise StorageUnavailableError("Purchase could not be stored") from exc
            return existing, False

    logger.info(
        "Purchase %s recorded for %s at %s: %s points",
        receipt_code, user_id, restaurant_id, points
    )
    return purchase, True


def get_user_purchases(user_id) -> QuerySet[Purchase]:
    """A user's purchases, newest first."""
    return (
        Purchase.objects
        .filter(user_id=str(user_id))
        .select_related('restaurant')
        .order_by('-purchased_at', '-created_at')
    )
