"""
Per-(account, restaurant) point balances.

Every mutation runs inside ``transaction.atomic()`` on a row fetched with
``select_for_update()``, so operations on the same key are serialized by
the database. Reads see committed state only.
"""

import logging
from contextlib import contextmanager
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, List, Optional, Tuple

from django.core.exceptions import ValidationError
from django.db import DatabaseError, IntegrityError, transaction

from apps.restaurants.services import get_restaurant

from ..models import PointsBalance, POINTS_MAX_DIGITS, POINTS_DECIMAL_PLACES
from .exceptions import (
    InvalidAmountError,
    InsufficientBalanceError,
    LedgerTimeoutError,
    StorageUnavailableError,
    UnknownRestaurantError,
)

logger = logging.getLogger(__name__)

ZERO = Decimal('0.00')
QUANTUM = Decimal('0.01')
MAX_AMOUNT = Decimal(10) ** (POINTS_MAX_DIGITS - POINTS_DECIMAL_PLACES)


def normalize_amount(amount) -> Decimal:
    """
    Coerce ``amount`` to a two-place Decimal.

    Accepts Decimal, int, float or numeric string.

    Raises:
        InvalidAmountError: If the amount is not a finite number greater than
            zero with at most two decimal places, or does not fit the column
    """
    if isinstance(amount, bool) or amount is None:
        raise InvalidAmountError(f"Invalid amount: {amount!r}")

    try:
        value = Decimal(str(amount).strip())
    except (InvalidOperation, ValueError):
        raise InvalidAmountError(f"Invalid amount: {amount!r}")

    if not value.is_finite():
        raise InvalidAmountError(f"Invalid amount: {amount!r}")
    if value <= 0:
        raise InvalidAmountError("Amount must be greater than zero")
    if value >= MAX_AMOUNT:
        raise InvalidAmountError("Amount is too large")
    if value != value.quantize(QUANTUM):
        raise InvalidAmountError("Amount must have at most two decimal places")

    return value.quantize(QUANTUM)


@contextmanager
def storage_guard():
    """Translate infrastructure database errors into StorageUnavailableError."""
    try:
        yield
    except IntegrityError:
        raise
    except DatabaseError as exc:
        logger.warning("Balance storage unavailable: %s", exc)
        raise StorageUnavailableError("Balance storage is unavailable") from exc


@contextmanager
def write_guard():
    """
    ``storage_guard`` for a block that wraps ``transaction.atomic()``.

    Yields a state dict; the block sets ``state['body_done'] = True`` as its
    last statement. A database error after that point came from the commit,
    the write may or may not have landed, and LedgerTimeoutError is raised
    instead of StorageUnavailableError.
    """
    state = {'body_done': False}
    try:
        yield state
    except IntegrityError:
        raise
    except DatabaseError as exc:
        if state['body_done']:
            logger.error("Balance commit failed, outcome unknown: %s", exc)
            raise LedgerTimeoutError("Balance commit did not complete") from exc
        logger.warning("Balance storage unavailable: %s", exc)
        raise StorageUnavailableError("Balance storage is unavailable") from exc


def _account_key(account_id) -> str:
    return str(account_id)


def _require_restaurant(restaurant_id):
    restaurant = get_restaurant(restaurant_id)
    if restaurant is None:
        raise UnknownRestaurantError(f"Restaurant {restaurant_id} not found")
    return restaurant


def get_balance(account_id, restaurant_id) -> Decimal:
    """
    Return the balance ``account_id`` holds at ``restaurant_id``.

    Missing rows and malformed restaurant ids read as zero.
    """
    with storage_guard():
        try:
            row = (
                PointsBalance.objects
                .filter(account_id=_account_key(account_id), restaurant_id=restaurant_id)
                .values_list('points', flat=True)
                .first()
            )
        except (ValidationError, ValueError):
            return ZERO
    return row if row is not None else ZERO


def get_balances(account_id, restaurant_ids: Iterable) -> Dict[str, Decimal]:
    """
    Bulk read of one account's balances.

    Returns:
        Dict keyed by ``str(restaurant_id)`` for every requested id;
        restaurants without a row map to zero
    """
    keys = [str(rid) for rid in restaurant_ids]
    balances = dict.fromkeys(keys, ZERO)
    if not keys:
        return balances

    with storage_guard():
        rows = PointsBalance.objects.filter(
            account_id=_account_key(account_id),
            restaurant_id__in=keys,
        ).values_list('restaurant_id', 'points')
        for restaurant_id, points in rows:
            balances[str(restaurant_id)] = points

    return balances


def list_balances(account_id) -> List[PointsBalance]:
    """All balance rows of one holder, ordered by restaurant name."""
    with storage_guard():
        return list(
            PointsBalance.objects
            .filter(account_id=_account_key(account_id))
            .select_related('restaurant')
            .order_by('restaurant__name', 'restaurant_id')
        )


def lock_accounts(keys: Iterable[Tuple[str, object]], *, create: bool = True) -> Dict[Tuple[str, str], Optional[PointsBalance]]:
    """
    Row-lock balance rows inside the caller's transaction.

    Keys are locked in sorted order, so two transactions locking an
    overlapping set never wait on each other in a cycle.

    Args:
        keys: (account_id, restaurant_id) pairs
        create: Create missing rows with a zero balance

    Returns:
        Dict mapping ``(str(account_id), str(restaurant_id))`` to the locked
        row, or None for a missing row when ``create`` is False
    """
    if not transaction.get_connection().in_atomic_block:
        raise transaction.TransactionManagementError(
            "lock_accounts() must be called inside transaction.atomic()"
        )

    ordered = sorted({(str(account), str(restaurant)) for account, restaurant in keys})
    locked = {}
    for account_id, restaurant_id in ordered:
        queryset = PointsBalance.objects.select_for_update()
        if create:
            row, _ = queryset.get_or_create(
                account_id=account_id,
                restaurant_id=restaurant_id,
            )
        else:
            row = queryset.filter(account_id=account_id, restaurant_id=restaurant_id).first()
        locked[(account_id, restaurant_id)] = row
    return locked


def credit(account_id, restaurant_id, amount) -> Decimal:
    """
    Add ``amount`` to a balance, creating the row if absent.

    Args:
        account_id: Holder id (user or restaurant)
        restaurant_id: Points scope
        amount: Positive amount, at most two decimal places

    Returns:
        The new balance

    Raises:
        InvalidAmountError: If amount is not positive
        UnknownRestaurantError: If the restaurant is not in the active catalog
        LedgerTimeoutError: If the commit failed and the outcome is unknown
    """
    amount = normalize_amount(amount)
    account_id = _account_key(account_id)

    with write_guard() as state, transaction.atomic():
        restaurant = _require_restaurant(restaurant_id)
        key = (account_id, str(restaurant.id))
        row = lock_accounts([key])[key]
        row.points += amount
        row.save(update_fields=['points', 'updated_at'])
        state['body_done'] = True

    logger.info("Credited %s points to %s at %s", amount, account_id, restaurant.id)
    return row.points


def debit(account_id, restaurant_id, amount) -> Decimal:
    """
    Subtract ``amount`` from a balance.

    Returns:
        The new balance

    Raises:
        InvalidAmountError: If amount is not positive
        UnknownRestaurantError: If the restaurant is not in the active catalog
        InsufficientBalanceError: If the balance is lower than amount; the
            exception carries the balance seen under lock
    """
    amount = normalize_amount(amount)
    account_id = _account_key(account_id)

    with write_guard() as state, transaction.atomic():
        restaurant = _require_restaurant(restaurant_id)
        key = (account_id, str(restaurant.id))
        row = lock_accounts([key], create=False)[key]
        current = row.points if row is not None else ZERO
        if current < amount:
            raise InsufficientBalanceError(
                f"Balance {current} is lower than {amount}",
                balance=current,
            )
        row.points -= amount
        row.save(update_fields=['points', 'updated_at'])
        state['body_done'] = True

    logger.info("Debited %s points from %s at %s", amount, account_id, restaurant.id)
    return row.points
