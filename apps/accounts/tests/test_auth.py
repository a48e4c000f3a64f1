import pytest
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient
from apps.accounts.models import User


@pytest.fixture
def member(db):
    return User.objects.create_user(
        email='member@example.com',
        password='TestPass123!',
        full_name='Loyal Member',
    )


@pytest.mark.django_db
class TestUserModel:

    def test_account_id_is_string_pk(self, member):
        assert member.account_id == str(member.id)

    def test_display_name_falls_back_to_email(self, db):
        user = User.objects.create_user(email='anon@example.com', password='x')
        assert user.get_display_name() == 'anon'

    def test_email_required(self, db):
        with pytest.raises(ValueError):
            User.objects.create_user(email='', password='x')


@pytest.mark.django_db
class TestTokenAuth:
    """Tests for POST /api/auth/token/"""

    def test_obtain_token(self, member):
        response = APIClient().post(reverse('token_obtain_pair'), {
            'email': 'member@example.com',
            'password': 'TestPass123!',
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert 'access' in response.data
        assert 'refresh' in response.data

    def test_wrong_password(self, member):
        response = APIClient().post(reverse('token_obtain_pair'), {
            'email': 'member@example.com',
            'password': 'wrong',
        }, format='json')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_token_authenticates_ledger_calls(self, member):
        client = APIClient()
        token = client.post(reverse('token_obtain_pair'), {
            'email': 'member@example.com',
            'password': 'TestPass123!',
        }, format='json').data['access']
        client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')

        response = client.get(reverse('points:balances'))

        assert response.status_code == status.HTTP_200_OK


@pytest.mark.django_db
def test_health_check():
    response = APIClient().get(reverse('health-check'))

    assert response.status_code == status.HTTP_200_OK
    assert response.json()['status'] == 'healthy'
