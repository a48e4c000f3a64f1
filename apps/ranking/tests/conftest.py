import pytest
from decimal import Decimal
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.restaurants.models import Restaurant


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def diner(db):
    return User.objects.create_user(
        email='diner@example.com',
        password='TestPass123!',
        full_name='Hungry Diner',
    )


@pytest.fixture
def other_diner(db):
    return User.objects.create_user(
        email='other@example.com',
        password='TestPass123!',
    )


@pytest.fixture
def diner_client(api_client, diner):
    """Return API client authenticated as diner."""
    refresh = RefreshToken.for_user(diner)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def make_restaurant(db):
    """Factory for active restaurants."""
    def _make(name, latitude=None, longitude=None, **extra):
        return Restaurant.objects.create(
            name=name,
            latitude=Decimal(str(latitude)) if latitude is not None else None,
            longitude=Decimal(str(longitude)) if longitude is not None else None,
            **extra
        )
    return _make

