"""
Point transfers between accounts.

A transfer is one database transaction: both balance rows are locked, the
source is debited, the destination credited and a Committed record
appended. Nothing is visible until the transaction commits.
"""

import logging
import time
from typing import Optional, Tuple

from django.conf import settings
from django.db import IntegrityError, OperationalError, transaction

from apps.restaurants.services import get_restaurant

from ..models import TransferRecord, TransferStatus, RecipientKind
from .balance_store import lock_accounts, normalize_amount, storage_guard
from .exceptions import (
    DuplicateRequestError,
    InsufficientBalanceError,
    LedgerTimeoutError,
    SelfTransferError,
    StorageUnavailableError,
    UnknownRestaurantError,
)

logger = logging.getLogger(__name__)


def _ledger_setting(name, default):
    return getattr(settings, 'LOYALTY', {}).get(name, default)


def _validate(*, from_user_id, to_id, to_kind, restaurant_id, amount):
    amount = normalize_amount(amount)

    if to_kind not in RecipientKind.values:
        raise ValueError(f"Unknown recipient kind: {to_kind!r}")

    restaurant = get_restaurant(restaurant_id)
    if restaurant is None:
        raise UnknownRestaurantError(f"Restaurant {restaurant_id} not found")

    from_user_id = str(from_user_id)
    if not from_user_id:
        raise ValueError("from_user_id is required")

    if to_kind == RecipientKind.RESTAURANT:
        to_id = str(to_id) if to_id else str(restaurant.id)
        if to_id != str(restaurant.id) and get_restaurant(to_id) is None:
            raise UnknownRestaurantError(f"Restaurant {to_id} not found")
    else:
        to_id = str(to_id or '')
        if not to_id:
            raise ValueError("to_id is required for user transfers")
        if to_id == from_user_id:
            raise SelfTransferError("Cannot transfer points to yourself")

    return from_user_id, to_id, str(restaurant.id), amount


def _replay(existing, *, request_token, **params):
    if not existing.matches(**params):
        logger.warning(
            "Request token %s reused with different parameters (transfer %s)",
            request_token, existing.id
        )
        raise DuplicateRequestError(
            f"Request token {request_token} was already used for another transfer"
        )
    logger.info("Replayed transfer %s for request token %s", existing.id, request_token)
    return existing, False


def _find_committed(request_token) -> Optional[TransferRecord]:
    if not request_token:
        return None
    return TransferRecord.objects.filter(
        request_token=request_token,
        status=TransferStatus.COMMITTED,
    ).first()


def _apply(*, from_user_id, to_id, to_kind, restaurant_id, amount, request_token):
    """Body of the transfer transaction. Caller holds the atomic block."""
    params = dict(
        from_user_id=from_user_id,
        to_id=to_id,
        to_kind=to_kind,
        restaurant_id=restaurant_id,
        amount=amount,
    )

    existing = _find_committed(request_token)
    if existing is not None:
        return _replay(existing, request_token=request_token, **params)

    source_key = (from_user_id, restaurant_id)
    target_key = (to_id, restaurant_id)
    rows = lock_accounts([source_key, target_key])
    source = rows[source_key]
    target = rows[target_key]

    if source.points < amount:
        raise InsufficientBalanceError(
            f"Balance {source.points} is lower than {amount}",
            balance=source.points,
        )

    source.points -= amount
    target.points += amount
    source.save(update_fields=['points', 'updated_at'])
    target.save(update_fields=['points', 'updated_at'])

    record = TransferRecord.objects.create(
        from_user_id=from_user_id,
        to_id=to_id,
        to_kind=to_kind,
        restaurant_id=restaurant_id,
        amount=amount,
        status=TransferStatus.COMMITTED,
        request_token=request_token or None,
    )
    return record, True


def _audit_failed(*, from_user_id, to_id, to_kind, restaurant_id, amount, reason):
    if not _ledger_setting('AUDIT_FAILED_TRANSFERS', True):
        return None
    with storage_guard():
        return TransferRecord.objects.create(
            from_user_id=from_user_id,
            to_id=to_id,
            to_kind=to_kind,
            restaurant_id=restaurant_id,
            amount=amount,
            status=TransferStatus.FAILED,
            failure_reason=reason,
        )


def transfer(
    *,
    from_user_id,
    to_id,
    restaurant_id,
    amount,
    to_kind: str = RecipientKind.USER,
    request_token: Optional[str] = None
) -> Tuple[TransferRecord, bool]:
    """
    Move points from a user to another user or to a restaurant.

    Both balances are scoped to ``restaurant_id``. Database errors raised
    before the transaction commits are retried with exponential backoff up
    to ``LOYALTY['TRANSFER_MAX_ATTEMPTS']`` times. When called inside an
    outer atomic block no retry happens, since the outer transaction is
    already broken.

    Args:
        from_user_id: Account the points leave
        to_id: Recipient user id, or restaurant id for ``to_kind='restaurant'``
            (defaults to ``restaurant_id`` there)
        restaurant_id: Points scope
        amount: Positive amount, at most two decimal places
        to_kind: ``'user'`` or ``'restaurant'``
        request_token: Client generated idempotency key

    Returns:
        tuple: (TransferRecord, created). ``created`` is False when the
        request token replayed an earlier committed transfer.

    Raises:
        InvalidAmountError: Amount is zero, negative or too precise
        SelfTransferError: Sender and recipient are the same user
        UnknownRestaurantError: Restaurant is not in the active catalog
        InsufficientBalanceError: Sender holds less than amount
        DuplicateRequestError: Token was committed with other parameters
        LedgerTimeoutError: The database kept failing, or the commit itself
            failed and the outcome is unknown
    """
    with storage_guard():
        from_user_id, to_id, restaurant_id, amount = _validate(
            from_user_id=from_user_id,
            to_id=to_id,
            to_kind=to_kind,
            restaurant_id=restaurant_id,
            amount=amount,
        )
    to_kind = RecipientKind(to_kind).value
    request_token = request_token or None
    params = dict(
        from_user_id=from_user_id,
        to_id=to_id,
        to_kind=to_kind,
        restaurant_id=restaurant_id,
        amount=amount,
    )

    nested = transaction.get_connection().in_atomic_block
    max_attempts = 1 if nested else max(1, int(_ledger_setting('TRANSFER_MAX_ATTEMPTS', 3)))
    backoff = float(_ledger_setting('TRANSFER_RETRY_BACKOFF_SECONDS', 0.05))

    attempt = 0
    while True:
        attempt += 1
        body_done = False
        try:
            with transaction.atomic():
                record, created = _apply(request_token=request_token, **params)
                body_done = True
        except IntegrityError as exc:
            # Lost a race on the request token; the winner is committed
            existing = _find_committed(request_token)
            if existing is None:
                logger.error(
                    "Transfer from %s at %s hit an integrity error: %s",
                    from_user_id, restaurant_id, exc
                )
                if body_done:
                    raise LedgerTimeoutError("Transfer commit did not complete") from exc
                raise StorageUnavailableError("Transfer could not be stored") from exc
            return _replay(existing, request_token=request_token, **params)
        except InsufficientBalanceError as exc:
            logger.info(
                "Transfer of %s from %s at %s rejected: balance %s",
                amount, from_user_id, restaurant_id, exc.balance
            )
            _audit_failed(reason=exc.code, **params)
            raise
        except (OperationalError, StorageUnavailableError) as exc:
            if body_done:
                logger.error(
                    "Commit of transfer from %s at %s failed, outcome unknown: %s",
                    from_user_id, restaurant_id, exc
                )
                raise LedgerTimeoutError("Transfer commit did not complete") from exc
            if attempt >= max_attempts:
                logger.error(
                    "Transfer from %s at %s gave up after %d attempt(s): %s",
                    from_user_id, restaurant_id, attempt, exc
                )
                raise LedgerTimeoutError("Transfer could not be completed in time") from exc
            delay = backoff * (2 ** (attempt - 1))
            logger.warning(
                "Transfer attempt %d from %s at %s rolled back (%s), retrying in %.2fs",
                attempt, from_user_id, restaurant_id, exc, delay
            )
            if delay:
                time.sleep(delay)
            continue

        if created:
            logger.info(
                "Transfer %s committed: %s -> %s:%s, %s points at %s",
                record.id, from_user_id, to_kind, to_id, amount, restaurant_id
            )
        return record, created
