import pytest
import uuid
from decimal import Decimal
from io import StringIO
from django.core.management import call_command
from django.core.management.base import CommandError
from apps.points.services import get_balance


@pytest.mark.django_db
class TestGrantPointsCommand:
    """Tests for `manage.py grant_points`"""

    def test_credits_balance(self, alice, restaurant):
        out = StringIO()
        call_command('grant_points', alice.account_id, str(restaurant.id), '25', stdout=out)

        assert get_balance(alice.account_id, restaurant.id) == Decimal('25.00')
        assert 'New balance: 25.00' in out.getvalue()

    def test_dry_run_changes_nothing(self, funded_alice, restaurant):
        out = StringIO()
        call_command(
            'grant_points', funded_alice.account_id, str(restaurant.id), '10', '--dry-run',
            stdout=out,
        )

        assert get_balance(funded_alice.account_id, restaurant.id) == Decimal('100.00')
        assert '100.00 -> 110.00' in out.getvalue()
        assert 'No changes made' in out.getvalue()

    def test_invalid_amount(self, alice, restaurant):
        with pytest.raises(CommandError):
            call_command('grant_points', alice.account_id, str(restaurant.id), '0')

    def test_unknown_restaurant(self, alice):
        with pytest.raises(CommandError):
            call_command('grant_points', alice.account_id, str(uuid.uuid4()), '10')
