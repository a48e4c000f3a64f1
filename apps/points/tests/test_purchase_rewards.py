import pytest
import uuid
from datetime import datetime, timezone as dt_timezone
from decimal import Decimal
from unittest import mock
from django.db import IntegrityError, OperationalError, connections
from apps.points.models import Purchase
from apps.points.services import (
    compute_points,
    get_balance,
    get_user_purchases,
    record_purchase,
    DuplicateRequestError,
    InvalidAmountError,
    LedgerTimeoutError,
    StorageUnavailableError,
    UnknownRestaurantError,
)
from apps.points.services import purchase_rewards


class TestComputePoints:
    """Tests for compute_points()"""

    def test_default_rate(self, settings):
        settings.LOYALTY = {**settings.LOYALTY, 'POINTS_PER_CURRENCY_UNIT': '0.05'}
        assert compute_points('100.00') == Decimal('5.00')

    def test_rounds_down(self, settings):
        settings.LOYALTY = {**settings.LOYALTY, 'POINTS_PER_CURRENCY_UNIT': '0.05'}
        # 33.33 * 0.05 = 1.6665
        assert compute_points('33.33') == Decimal('1.66')

    def test_custom_rate(self, settings):
        settings.LOYALTY = {**settings.LOYALTY, 'POINTS_PER_CURRENCY_UNIT': '1'}
        assert compute_points('12.40') == Decimal('12.40')


@pytest.mark.django_db
class TestRecordPurchase:
    """Tests for record_purchase()"""

    def test_credits_points(self, alice, restaurant, settings):
        settings.LOYALTY = {**settings.LOYALTY, 'POINTS_PER_CURRENCY_UNIT': '0.05'}

        purchase, created = record_purchase(
            user_id=alice.account_id,
            restaurant_id=restaurant.id,
            receipt_code='RCPT-0001',
            total_amount='240.00',
            items=[
                {'name': 'Ciorba de burta', 'amount': '35.00'},
                {'name': 'Sarmale', 'amount': 205},
            ],
        )

        assert created is True
        assert purchase.points == Decimal('12.00')
        assert purchase.items == [
            {'name': 'Ciorba de burta', 'amount': '35.00'},
            {'name': 'Sarmale', 'amount': '205.00'},
        ]
        assert get_balance(alice.account_id, restaurant.id) == Decimal('12.00')

    def test_explicit_points(self, alice, restaurant):
        purchase, _ = record_purchase(
            user_id=alice.account_id,
            restaurant_id=restaurant.id,
            receipt_code='RCPT-0002',
            total_amount='50.00',
            points='7.5',
        )

        assert purchase.points == Decimal('7.50')
        assert get_balance(alice.account_id, restaurant.id) == Decimal('7.50')

    def test_purchased_at_kept(self, alice, restaurant):
        when = datetime(2025, 3, 14, 12, 30, tzinfo=dt_timezone.utc)

        purchase, _ = record_purchase(
            user_id=alice.account_id,
            restaurant_id=restaurant.id,
            receipt_code='RCPT-0003',
            total_amount='100',
            purchased_at=when,
        )

        assert purchase.purchased_at == when

    def test_same_receipt_credits_once(self, alice, restaurant):
        first, first_created = record_purchase(
            user_id=alice.account_id,
            restaurant_id=restaurant.id,
            receipt_code='RCPT-0004',
            total_amount='100',
        )
        second, second_created = record_purchase(
            user_id=alice.account_id,
            restaurant_id=restaurant.id,
            receipt_code='RCPT-0004',
            total_amount='100',
        )

        assert first_created is True
        assert second_created is False
        assert second.id == first.id
        assert Purchase.objects.count() == 1
        assert get_balance(alice.account_id, restaurant.id) == Decimal('5.00')

    def test_receipt_of_another_user(self, alice, bob, restaurant):
        record_purchase(
            user_id=alice.account_id,
            restaurant_id=restaurant.id,
            receipt_code='RCPT-0005',
            total_amount='100',
        )

        with pytest.raises(DuplicateRequestError):
            record_purchase(
                user_id=bob.account_id,
                restaurant_id=restaurant.id,
                receipt_code='RCPT-0005',
                total_amount='100',
            )
        assert get_balance(bob.account_id, restaurant.id) == Decimal('0')

    def test_zero_total(self, alice, restaurant):
        with pytest.raises(InvalidAmountError):
            record_purchase(
                user_id=alice.account_id,
                restaurant_id=restaurant.id,
                receipt_code='RCPT-0006',
                total_amount='0',
            )

    def test_total_too_small_to_earn_points(self, alice, restaurant):
        with pytest.raises(InvalidAmountError):
            record_purchase(
                user_id=alice.account_id,
                restaurant_id=restaurant.id,
                receipt_code='RCPT-0007',
                total_amount='0.10',
            )
        assert not Purchase.objects.exists()

    def test_unknown_restaurant(self, alice):
        with pytest.raises(UnknownRestaurantError):
            record_purchase(
                user_id=alice.account_id,
                restaurant_id=uuid.uuid4(),
                receipt_code='RCPT-0008',
                total_amount='10',
            )

    def test_user_purchases_newest_first(self, alice, bob, restaurant):
        older, _ = record_purchase(
            user_id=alice.account_id, restaurant_id=restaurant.id, receipt_code='A',
            total_amount='100', purchased_at=datetime(2025, 1, 1, tzinfo=dt_timezone.utc),
        )
        newer, _ = record_purchase(
            user_id=alice.account_id, restaurant_id=restaurant.id, receipt_code='B',
            total_amount='100', purchased_at=datetime(2025, 2, 1, tzinfo=dt_timezone.utc),
        )
        record_purchase(
            user_id=bob.account_id, restaurant_id=restaurant.id, receipt_code='C',
            total_amount='100',
        )

        assert [p.id for p in get_user_purchases(alice.account_id)] == [newer.id, older.id]


@pytest.mark.django_db(transaction=True)
class TestPurchaseStorageErrors:
    """Database errors while recording a purchase"""

    def test_commit_failure_is_timeout_and_rescan_credits_once(self, alice, restaurant):
        conn = connections['default']
        with mock.patch.object(conn, 'commit', side_effect=OperationalError('disk I/O error')):
            with pytest.raises(LedgerTimeoutError):
                record_purchase(
                    user_id=alice.account_id,
                    restaurant_id=restaurant.id,
                    receipt_code='RCPT-0100',
                    total_amount='100',
                )

        assert not Purchase.objects.exists()
        purchase, created = record_purchase(
            user_id=alice.account_id,
            restaurant_id=restaurant.id,
            receipt_code='RCPT-0100',
            total_amount='100',
        )
        assert created is True
        assert get_balance(alice.account_id, restaurant.id) == Decimal('5.00')

    def test_integrity_error_without_existing_receipt(self, alice, restaurant):
        with mock.patch.object(
            purchase_rewards, 'lock_accounts', side_effect=IntegrityError('CHECK constraint failed')
        ):
            with pytest.raises(StorageUnavailableError):
                record_purchase(
                    user_id=alice.account_id,
                    restaurant_id=restaurant.id,
                    receipt_code='RCPT-0101',
                    total_amount='100',
                )

        assert not Purchase.objects.exists()
        assert get_balance(alice.account_id, restaurant.id) == Decimal('0')
