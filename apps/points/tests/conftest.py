import pytest
from decimal import Decimal
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.restaurants.models import Restaurant
from apps.points.services import credit


def _authenticated_client(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def alice(db):
    """Create and return the sending user."""
    return User.objects.create_user(
        email='alice@example.com',
        password='TestPass123!',
        full_name='Alice Sender',
    )


@pytest.fixture
def bob(db):
    """Create and return the receiving user."""
    return User.objects.create_user(
        email='bob@example.com',
        password='TestPass123!',
        full_name='Bob Receiver',
    )


@pytest.fixture
def staff_user(db):
    return User.objects.create_user(
        email='staff@example.com',
        password='TestPass123!',
        full_name='Support Staff',
        is_staff=True,
    )


@pytest.fixture
def alice_client(alice):
    """Return API client authenticated as alice."""
    return _authenticated_client(alice)


@pytest.fixture
def bob_client(bob):
    """Return API client authenticated as bob."""
    return _authenticated_client(bob)


@pytest.fixture
def staff_client(staff_user):
    return _authenticated_client(staff_user)


@pytest.fixture
def restaurant(db):
    """Create and return an active restaurant with a coordinate."""
    return Restaurant.objects.create(
        name='Casa Veche',
        description='Romanian cuisine',
        latitude=Decimal('44.435500'),
        longitude=Decimal('26.102500'),
    )


@pytest.fixture
def other_restaurant(db):
    return Restaurant.objects.create(name='Bistro Nord')


@pytest.fixture
def inactive_restaurant(db):
    return Restaurant.objects.create(name='Closed Diner', is_active=False)


@pytest.fixture
def funded_alice(alice, restaurant):
    """Alice holding 100 points at the restaurant."""
    credit(alice.account_id, restaurant.id, Decimal('100.00'))
    return alice
