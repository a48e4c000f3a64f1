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
def authenticated_client(api_client, diner):
    """Return API client authenticated as diner."""
    refresh = RefreshToken.for_user(diner)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def catalog(db):
    """Three active restaurants and one closed one."""
    return {
        'zeta': Restaurant.objects.create(
            name='Zeta Grill',
            description='Charcoal grill',
            latitude=Decimal('44.430000'),
            longitude=Decimal('26.100000'),
        ),
        'alpha': Restaurant.objects.create(name='alpha Bistro', description='Small plates'),
        'beta': Restaurant.objects.create(
            name='Beta Pizza',
            description='Wood-fired pizza',
            image_url='https://cdn.example.com/beta.jpg',
        ),
        'closed': Restaurant.objects.create(name='Closed Diner', is_active=False),
    }
