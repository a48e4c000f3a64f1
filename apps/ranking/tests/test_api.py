import pytest
from decimal import Decimal
from django.urls import reverse
from rest_framework import status
from apps.points.services import credit


@pytest.mark.django_db
class TestRankEndpoint:
    """Tests for GET /api/ranking/"""

    def test_alphabetical_default(self, diner_client, make_restaurant):
        for name in ['Zeta', 'Alpha', 'Beta']:
            make_restaurant(name)

        response = diner_client.get(reverse('ranking:rank'))

        assert response.status_code == status.HTTP_200_OK
        assert [r['name'] for r in response.data] == ['Alpha', 'Beta', 'Zeta']

    def test_points(self, diner_client, diner, make_restaurant):
        a = make_restaurant('A')
        b = make_restaurant('B')
        c = make_restaurant('C')
        credit(diner.account_id, a.id, 5)
        credit(diner.account_id, b.id, 20)
        credit(diner.account_id, c.id, 5)

        response = diner_client.get(reverse('ranking:rank'), {'criterion': 'points'})

        assert response.status_code == status.HTTP_200_OK
        assert [r['name'] for r in response.data] == ['B', 'A', 'C']
        assert response.data[0]['restaurantId'] == str(b.id)
        assert Decimal(response.data[0]['balance']) == Decimal('20.00')

    def test_distance(self, diner_client, make_restaurant):
        make_restaurant('Far', 46.7712, 23.6236)
        make_restaurant('Near', 44.4270, 26.1030)
        make_restaurant('Nowhere')

        response = diner_client.get(reverse('ranking:rank'), {
            'criterion': 'distance',
            'lat': '44.4268',
            'lon': '26.1025',
        })

        assert response.status_code == status.HTTP_200_OK
        assert [r['name'] for r in response.data] == ['Near', 'Far', 'Nowhere']
        assert response.data[0]['distance'] < 100
        assert response.data[2]['distance'] is None

    def test_distance_without_location(self, diner_client, make_restaurant):
        make_restaurant('Near', 44.4270, 26.1030)

        response = diner_client.get(reverse('ranking:rank'), {'criterion': 'distance'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'location_unavailable'
        assert response.data['retryable'] is False

    def test_lat_without_lon(self, diner_client):
        response = diner_client.get(reverse('ranking:rank'), {'criterion': 'distance', 'lat': '44.4'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_latitude_out_of_range(self, diner_client):
        response = diner_client.get(reverse('ranking:rank'), {'lat': '91', 'lon': '26.1'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'lat' in response.data

    def test_unknown_criterion(self, diner_client):
        response = diner_client.get(reverse('ranking:rank'), {'criterion': 'popularity'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'criterion' in response.data

    def test_other_users_balances_forbidden(self, diner_client, other_diner):
        response = diner_client.get(reverse('ranking:rank'), {'userId': other_diner.account_id})

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_unauthenticated(self, api_client):
        response = api_client.get(reverse('ranking:rank'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
