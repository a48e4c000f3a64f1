import pytest
from decimal import Decimal
from apps.points.services import credit
from apps.ranking.exceptions import InvalidCriterionError, LocationUnavailableError
from apps.ranking.geo import haversine_distance
from apps.ranking.ranking import RankingService

# Bucharest city centre
USER_LOCATION = (44.4268, 26.1025)


def _names(entries):
    return [entry['restaurant'].name for entry in entries]


class TestHaversine:
    """Tests for haversine_distance()"""

    def test_same_point(self):
        assert haversine_distance((44.4, 26.1), (44.4, 26.1)) == 0

    def test_one_degree_of_longitude_at_equator(self):
        assert haversine_distance((0.0, 0.0), (0.0, 1.0)) == pytest.approx(111195, rel=1e-4)

    def test_bucharest_to_cluj(self):
        # ~324 km as the crow flies
        distance = haversine_distance((44.4268, 26.1025), (46.7712, 23.6236))
        assert distance == pytest.approx(324_000, rel=0.01)

    def test_symmetric(self):
        a, b = (44.43, 26.10), (45.75, 21.23)
        assert haversine_distance(a, b) == pytest.approx(haversine_distance(b, a))


@pytest.mark.django_db
class TestAlphabetical:
    """Tests for criterion='alphabetical'"""

    def test_sorted_by_name(self, diner, make_restaurant):
        for name in ['Zeta', 'Alpha', 'Beta']:
            make_restaurant(name)

        entries = RankingService.rank(diner.account_id, 'alphabetical')

        assert _names(entries) == ['Alpha', 'Beta', 'Zeta']

    def test_case_insensitive(self, diner, make_restaurant):
        for name in ['beta', 'Alpha', 'Charlie']:
            make_restaurant(name)

        entries = RankingService.rank(diner.account_id, 'alphabetical')

        assert _names(entries) == ['Alpha', 'beta', 'Charlie']

    def test_ties_broken_by_id(self, diner, make_restaurant):
        first = make_restaurant('Twin')
        second = make_restaurant('twin')

        entries = RankingService.rank(diner.account_id, 'alphabetical')

        expected = sorted([first, second], key=lambda r: str(r.id))
        assert [e['restaurant'].id for e in entries] == [r.id for r in expected]

    def test_inactive_excluded(self, diner, make_restaurant):
        make_restaurant('Open')
        make_restaurant('Closed', is_active=False)

        assert _names(RankingService.rank(diner.account_id, 'alphabetical')) == ['Open']

    def test_no_distance_without_location(self, diner, make_restaurant):
        make_restaurant('Alpha', 44.43, 26.10)

        entries = RankingService.rank(diner.account_id, 'alphabetical')

        assert entries[0]['distance'] is None

    def test_distance_included_with_location(self, diner, make_restaurant):
        make_restaurant('Alpha', 44.43, 26.10)
        make_restaurant('Beta')

        entries = RankingService.rank(diner.account_id, 'alphabetical', USER_LOCATION)

        assert entries[0]['distance'] == pytest.approx(
            haversine_distance(USER_LOCATION, (44.43, 26.10))
        )
        assert entries[1]['distance'] is None


@pytest.mark.django_db
class TestDistance:
    """Tests for criterion='distance'"""

    def test_requires_location(self, diner, make_restaurant):
        make_restaurant('Alpha', 44.43, 26.10)

        with pytest.raises(LocationUnavailableError) as exc_info:
            RankingService.rank(diner.account_id, 'distance')

        assert exc_info.value.code == 'location_unavailable'

    def test_nearest_first_missing_coordinates_last(self, diner, make_restaurant):
        make_restaurant('Far', 46.7712, 23.6236)
        make_restaurant('Zeta Unknown')
        make_restaurant('Near', 44.4270, 26.1030)
        make_restaurant('Alpha Unknown')
        make_restaurant('Middle', 44.4500, 26.0800)

        entries = RankingService.rank(diner.account_id, 'distance', USER_LOCATION)

        assert _names(entries) == ['Near', 'Middle', 'Far', 'Alpha Unknown', 'Zeta Unknown']
        distances = [e['distance'] for e in entries[:3]]
        assert distances == sorted(distances)


@pytest.mark.django_db
class TestPoints:
    """Tests for criterion='points'"""

    def test_highest_balance_first_ties_by_name(self, diner, make_restaurant):
        a = make_restaurant('A')
        b = make_restaurant('B')
        c = make_restaurant('C')
        credit(diner.account_id, a.id, 5)
        credit(diner.account_id, b.id, 20)
        credit(diner.account_id, c.id, 5)

        entries = RankingService.rank(diner.account_id, 'points')

        assert _names(entries) == ['B', 'A', 'C']
        assert [e['balance'] for e in entries] == [Decimal('20.00'), Decimal('5.00'), Decimal('5.00')]

    def test_restaurants_without_balance_read_zero(self, diner, make_restaurant):
        make_restaurant('Empty')
        funded = make_restaurant('Funded')
        credit(diner.account_id, funded.id, 1)

        entries = RankingService.rank(diner.account_id, 'points')

        assert _names(entries) == ['Funded', 'Empty']
        assert entries[1]['balance'] == Decimal('0')

    def test_uses_only_callers_balances(self, diner, other_diner, make_restaurant):
        a = make_restaurant('A')
        b = make_restaurant('B')
        credit(other_diner.account_id, b.id, 50)
        credit(diner.account_id, a.id, 1)

        assert _names(RankingService.rank(diner.account_id, 'points')) == ['A', 'B']


@pytest.mark.django_db
def test_unknown_criterion(diner):
    with pytest.raises(InvalidCriterionError):
        RankingService.rank(diner.account_id, 'popularity')
