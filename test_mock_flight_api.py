"""Synthesized data: shape and invariants only, never exact values."""

import random
from datetime import date, timedelta

import pytest

from mock_flight_api import (
    AIRLINES,
    AIRPORTS,
    synthesize_airport_suggestions,
    synthesize_destinations,
    synthesize_flights,
    synthesize_price_trend,
)
from models import SearchCriteria


def _minutes(hhmm):
    h, m = hhmm.split(":")
    return int(h) * 60 + int(m)


@pytest.fixture
def criteria():
    return SearchCriteria("JFK", "LAX", date.today() + timedelta(days=14))


@pytest.mark.parametrize("seed", range(25))
def test_flight_invariants(criteria, seed):
    flights = synthesize_flights(criteria, rng=random.Random(seed))

    assert 12 <= len(flights) <= 18
    prices = [f.price for f in flights]
    assert prices == sorted(prices)
    for f in flights:
        assert f.duration >= 0
        assert f.price > 0
        assert f.stops in (0, 1, 2)
        assert f.airline_code in AIRLINES
        assert f.airline == AIRLINES[f.airline_code]
        assert f.flight_number.startswith(f.airline_code)
        assert (_minutes(f.departure_time) + f.duration) % 1440 == _minutes(f.arrival_time)
        if f.stops:
            assert len(f.stop_details) == f.stops
            assert all(s.airport not in ("JFK", "LAX") for s in f.stop_details)
        else:
            assert f.stop_details is None


def test_stops_add_duration_penalty():
    rng = random.Random(3)
    crit = SearchCriteria("ZZZ", "YYY", date.today())
    flights = synthesize_flights(crit, rng=rng)
    for f in flights:
        # Unknown airports: base 90-390 minutes plus 120 per stop
        assert 90 + 120 * f.stops <= f.duration <= 390 + 120 * f.stops


def test_prices_scatter_around_real_average(criteria):
    flights = synthesize_flights(criteria, base_price=400, rng=random.Random(7))
    for f in flights:
        assert 0.75 * 400 - 1 <= f.price <= 1.25 * 400 + 1


def test_stop_mix_roughly_matches_distribution(criteria):
    rng = random.Random(11)
    stops = [f.stops for _ in range(200) for f in synthesize_flights(criteria, rng=rng)]
    share = {n: stops.count(n) / len(stops) for n in (0, 1, 2)}
    assert 0.5 < share[0] < 0.7
    assert 0.15 < share[1] < 0.35
    assert 0.08 < share[2] < 0.22


def test_same_airport_search_still_produces_flights():
    flights = synthesize_flights(SearchCriteria("JFK", "JFK", date.today()))
    assert len(flights) >= 12


def test_destinations_respect_budget_and_skip_origin():
    offers = synthesize_destinations("LAX", max_price=300, one_way=False)
    assert offers
    assert all(o.destination != "LAX" for o in offers)
    assert all(o.total_price <= 350 for o in offers)
    assert all(o.return_date is not None for o in offers)


def test_one_way_destinations_have_no_return():
    today = date(2025, 6, 15)
    offers = synthesize_destinations("JFK", max_price=1000, one_way=True, today=today)
    assert offers
    assert all(o.return_date is None for o in offers)
    assert all(o.departure_date == "2025-06-22" for o in offers)


def test_tight_budget_yields_nothing():
    assert synthesize_destinations("JFK", max_price=50) == []


def test_price_trend_is_seven_consecutive_days():
    today = date(2025, 6, 15)
    trend = synthesize_price_trend("JFK", "LAX", today=today)
    assert [p.date for p in trend] == [(today + timedelta(days=i)).isoformat() for i in range(7)]
    assert all(240 <= p.price <= 360 for p in trend)


def test_price_trend_honours_base_price():
    trend = synthesize_price_trend("JFK", "LAX", base_price=1000)
    assert all(800 <= p.price <= 1200 for p in trend)


def test_suggestions_match_code_city_or_name():
    results = synthesize_airport_suggestions("JF")
    codes = [s.code for s in results]
    assert "JFK" in codes
    for s in results:
        assert "jf" in s.code.lower() or "jf" in s.city.lower() or "jf" in s.name.lower()


def test_suggestions_are_case_insensitive():
    assert [s.code for s in synthesize_airport_suggestions("london")] == ["LHR"]


def test_suggestions_capped_and_unique():
    # "a" appears in most of the roster
    results = synthesize_airport_suggestions("a")
    assert len(results) <= 8
    assert len({s.code for s in results}) == len(results)


def test_exact_code_ranks_first():
    assert synthesize_airport_suggestions("sea")[0].code == "SEA"


def test_empty_query_has_no_suggestions():
    assert synthesize_airport_suggestions("") == []


def test_roster_codes_are_unique_iata():
    assert all(len(code) == 3 and code.isupper() for code in AIRPORTS)
