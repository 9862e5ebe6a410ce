"""Synthesized flight data: a stand-in for Amadeus when live data is unavailable.

Pure functions, no I/O. Shapes are fixed, values are random, so callers
(and tests) can rely on counts, ordering and ranges but not on exact
numbers. Every generator takes an optional ``rng`` exposing the ``random``
module API; pass ``random.Random(seed)`` for repeatable output.

Stop counts follow cumulative thresholds on one uniform draw:
``r < 0.60`` non-stop, ``r < 0.85`` one stop, otherwise two stops.
"""

import math
import random
from datetime import date, timedelta
from uuid import uuid4

import config
from models import AirportSuggestion, DestinationOffer, FlightOffer, PricePoint, StopDetail

# ── Airport roster ────────────────────────────────────────────────────

AIRPORTS = {
    # ── US ───────────────────────────────────────────────────────────
    "JFK": {"name": "John F Kennedy International", "city": "New York", "lat": 40.6413, "lng": -73.7781},
    "LGA": {"name": "LaGuardia", "city": "New York", "lat": 40.7772, "lng": -73.8726},
    "EWR": {"name": "Newark Liberty International", "city": "Newark", "lat": 40.6895, "lng": -74.1745},
    "LAX": {"name": "Los Angeles International", "city": "Los Angeles", "lat": 33.9425, "lng": -118.4081},
    "ORD": {"name": "O'Hare International", "city": "Chicago", "lat": 41.9742, "lng": -87.9073},
    "DFW": {"name": "Dallas/Fort Worth International", "city": "Dallas", "lat": 32.8998, "lng": -97.0403},
    "MIA": {"name": "Miami International", "city": "Miami", "lat": 25.7959, "lng": -80.2870},
    "SEA": {"name": "Seattle-Tacoma International", "city": "Seattle", "lat": 47.4502, "lng": -122.3088},
    "ATL": {"name": "Hartsfield-Jackson Atlanta International", "city": "Atlanta", "lat": 33.6407, "lng": -84.4277},
    "DEN": {"name": "Denver International", "city": "Denver", "lat": 39.8561, "lng": -104.6737},
    "SFO": {"name": "San Francisco International", "city": "San Francisco", "lat": 37.6213, "lng": -122.3790},
    "LAS": {"name": "Harry Reid International", "city": "Las Vegas", "lat": 36.0840, "lng": -115.1537},
    "MCO": {"name": "Orlando International", "city": "Orlando", "lat": 28.4312, "lng": -81.3081},
    "BOS": {"name": "Boston Logan International", "city": "Boston", "lat": 42.3656, "lng": -71.0096},
    "PHX": {"name": "Phoenix Sky Harbor International", "city": "Phoenix", "lat": 33.4373, "lng": -112.0078},
    "IAH": {"name": "George Bush Intercontinental", "city": "Houston", "lat": 29.9902, "lng": -95.3368},
    "MSP": {"name": "Minneapolis-Saint Paul International", "city": "Minneapolis", "lat": 44.8848, "lng": -93.2223},
    "DTW": {"name": "Detroit Metropolitan", "city": "Detroit", "lat": 42.2124, "lng": -83.3534},
    "PHL": {"name": "Philadelphia International", "city": "Philadelphia", "lat": 39.8744, "lng": -75.2424},
    "CLT": {"name": "Charlotte Douglas International", "city": "Charlotte", "lat": 35.2140, "lng": -80.9431},
    "IAD": {"name": "Washington Dulles International", "city": "Washington", "lat": 38.9531, "lng": -77.4565},
    "SAN": {"name": "San Diego International", "city": "San Diego", "lat": 32.7338, "lng": -117.1933},
    "HNL": {"name": "Daniel K. Inouye International", "city": "Honolulu", "lat": 21.3187, "lng": -157.9224},
    # ── Europe ───────────────────────────────────────────────────────
    "LHR": {"name": "Heathrow", "city": "London", "lat": 51.4700, "lng": -0.4543},
    "CDG": {"name": "Charles de Gaulle", "city": "Paris", "lat": 49.0097, "lng": 2.5479},
    "FRA": {"name": "Frankfurt", "city": "Frankfurt", "lat": 50.0379, "lng": 8.5622},
    "AMS": {"name": "Schiphol", "city": "Amsterdam", "lat": 52.3105, "lng": 4.7683},
    "MAD": {"name": "Adolfo Suarez Madrid-Barajas", "city": "Madrid", "lat": 40.4983, "lng": -3.5676},
    "FCO": {"name": "Leonardo da Vinci-Fiumicino", "city": "Rome", "lat": 41.8003, "lng": 12.2389},
    "IST": {"name": "Istanbul", "city": "Istanbul", "lat": 41.2753, "lng": 28.7519},
    # ── Asia / Middle East ───────────────────────────────────────────
    "DXB": {"name": "Dubai International", "city": "Dubai", "lat": 25.2532, "lng": 55.3657},
    "NRT": {"name": "Narita International", "city": "Tokyo", "lat": 35.7647, "lng": 140.3864},
    "HND": {"name": "Haneda", "city": "Tokyo", "lat": 35.5494, "lng": 139.7798},
    "SIN": {"name": "Singapore Changi", "city": "Singapore", "lat": 1.3644, "lng": 103.9915},
    "HKG": {"name": "Hong Kong International", "city": "Hong Kong", "lat": 22.3080, "lng": 113.9185},
    # ── Americas ─────────────────────────────────────────────────────
    "YYZ": {"name": "Toronto Pearson International", "city": "Toronto", "lat": 43.6777, "lng": -79.6248},
    "YVR": {"name": "Vancouver International", "city": "Vancouver", "lat": 49.1967, "lng": -123.1815},
    "MEX": {"name": "Mexico City International", "city": "Mexico City", "lat": 19.4363, "lng": -99.0721},
    "CUN": {"name": "Cancun International", "city": "Cancun", "lat": 21.0365, "lng": -86.8771},
}

# ── Airline roster ────────────────────────────────────────────────────

AIRLINES = {
    "AA": "American Airlines",
    "DL": "Delta Air Lines",
    "UA": "United Airlines",
    "WN": "Southwest Airlines",
    "B6": "JetBlue",
    "AS": "Alaska Airlines",
    "BA": "British Airways",
    "LH": "Lufthansa",
    "AF": "Air France",
    "EK": "Emirates",
}

AIRCRAFT = [
    "Boeing 737",
    "Airbus A320",
    "Boeing 787",
    "Airbus A350",
    "Boeing 777",
    "Airbus A330",
    "Embraer E190",
    "Bombardier CRJ900",
]

# Connection points for synthesized stops
HUBS = ["ATL", "ORD", "DFW", "DEN", "LAX", "JFK", "MIA", "SEA"]

# Destination-discovery roster with typical round-trip fares
DESTINATIONS = [
    {"code": "LAX", "city": "Los Angeles", "base_price": 280},
    {"code": "ORD", "city": "Chicago", "base_price": 220},
    {"code": "MIA", "city": "Miami", "base_price": 190},
    {"code": "SEA", "city": "Seattle", "base_price": 320},
    {"code": "DEN", "city": "Denver", "base_price": 250},
    {"code": "ATL", "city": "Atlanta", "base_price": 210},
    {"code": "DFW", "city": "Dallas", "base_price": 230},
    {"code": "SFO", "city": "San Francisco", "base_price": 350},
    {"code": "LHR", "city": "London", "base_price": 550},
    {"code": "CDG", "city": "Paris", "base_price": 520},
]

FLIGHT_COUNT_RANGE = (12, 18)
STOP_THRESHOLDS = (0.60, 0.85)
STOP_PENALTY_MINUTES = 120
BASE_DURATION_RANGE = (90, 390)
PRICE_VARIATION = (0.75, 1.25)
TREND_DAYS = 7
TREND_VARIATION = (0.8, 1.2)
DEFAULT_TREND_PRICE = 300
MINUTES_PER_DAY = 24 * 60


# ── Utility functions ────────────────────────────────────────────────

def _haversine_miles(lat1, lng1, lat2, lng2):
    """Great-circle distance in miles."""
    R = 3959
    dlat = math.radians(lat2 - lat1)
    dlng = math.radians(lng2 - lng1)
    a = (math.sin(dlat / 2) ** 2 +
         math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) *
         math.sin(dlng / 2) ** 2)
    return R * 2 * math.asin(math.sqrt(a))


def _flight_duration_minutes(distance_miles):
    """Estimate flight time: ~500 mph cruise + 30 min taxi/climb/descent."""
    return int(distance_miles / 500 * 60) + 30


def _base_duration(origin, destination, rng):
    """Non-stop block time for a route, in minutes."""
    o = AIRPORTS.get(origin.upper())
    d = AIRPORTS.get(destination.upper())
    if o and d and o is not d:
        estimate = _flight_duration_minutes(
            _haversine_miles(o["lat"], o["lng"], d["lat"], d["lng"])
        )
        return max(45, estimate + rng.randint(-15, 30))
    lo, hi = BASE_DURATION_RANGE
    return round(rng.uniform(lo, hi))


def _pick_stops(rng):
    r = rng.random()
    if r < STOP_THRESHOLDS[0]:
        return 0
    if r < STOP_THRESHOLDS[1]:
        return 1
    return 2


def _stop_details(stops, origin, destination, rng):
    """Layover airports (never the endpoints) with 1-3 hour connections."""
    candidates = [h for h in HUBS if h not in (origin.upper(), destination.upper())]
    return [
        StopDetail(airport=rng.choice(candidates), duration=60 + rng.randint(0, 119))
        for _ in range(stops)
    ]


def _format_clock(total_minutes):
    """Minutes since midnight (any value) → HH:MM on a 24h clock."""
    h, m = divmod(total_minutes % MINUTES_PER_DAY, 60)
    return f"{h:02d}:{m:02d}"


# ── Synthesis functions ──────────────────────────────────────────────

def synthesize_flights(criteria, base_price=None, rng=random):
    """Generate 12-18 plausible offers for a route, cheapest first.

    When ``base_price`` comes from real fares the offers scatter ±25%
    around it; otherwise a base fare is drawn once per search.
    """
    origin = criteria.origin_code.upper()
    destination = criteria.destination_code.upper()
    base = base_price if base_price and base_price > 0 else rng.uniform(200, 1000)

    count = rng.randint(*FLIGHT_COUNT_RANGE)
    batch = uuid4().hex[:8]
    flights = []
    for i in range(count):
        airline_code = rng.choice(list(AIRLINES))
        stops = _pick_stops(rng)

        # Departures between 06:00 and 21:30, on the hour or half hour
        depart_minutes = (6 + rng.randint(0, 15)) * 60 + rng.choice((0, 30))
        duration = _base_duration(origin, destination, rng) + stops * STOP_PENALTY_MINUTES

        price = max(1, round(base * rng.uniform(*PRICE_VARIATION)))

        flights.append(FlightOffer(
            id=f"SYN-{batch}-{i}",
            airline=AIRLINES[airline_code],
            airline_code=airline_code,
            flight_number=f"{airline_code}{rng.randint(100, 999)}",
            origin=origin,
            destination=destination,
            departure_time=_format_clock(depart_minutes),
            arrival_time=_format_clock(depart_minutes + duration),
            duration=duration,
            price=price,
            stops=stops,
            stop_details=_stop_details(stops, origin, destination, rng) if stops else None,
            aircraft=rng.choice(AIRCRAFT),
        ))

    flights.sort(key=lambda f: f.price)
    return flights


def synthesize_destinations(origin, max_price=1000, one_way=False, today=None, rng=random):
    """Destinations from origin whose typical fare fits the budget."""
    today = today or date.today()
    departure = today + timedelta(days=7)
    ret = None if one_way else departure + timedelta(days=7)

    offers = []
    for dest in DESTINATIONS:
        if dest["code"] == origin.upper() or dest["base_price"] > max_price:
            continue
        offers.append(DestinationOffer(
            origin=origin.upper(),
            destination=dest["code"],
            departure_date=departure.isoformat(),
            return_date=ret.isoformat() if ret else None,
            total_price=round(dest["base_price"] + rng.uniform(0, 50), 2),
        ))
    return offers


def synthesize_price_trend(origin, destination, base_price=DEFAULT_TREND_PRICE,
                           today=None, rng=random):
    """Seven consecutive daily fares starting today, in date order."""
    today = today or date.today()
    lo, hi = TREND_VARIATION
    return [
        PricePoint(
            date=(today + timedelta(days=i)).isoformat(),
            price=round(base_price * rng.uniform(lo, hi)),
            airline=AIRLINES[rng.choice(list(AIRLINES))],
        )
        for i in range(TREND_DAYS)
    ]


def synthesize_airport_suggestions(query, limit=None):
    """Case-insensitive match on IATA code, city and airport name.

    Exact code matches come first, then code prefixes, then the rest in
    roster order.
    """
    limit = limit or config.SUGGEST_MAX_RESULTS
    q = (query or "").strip().lower()
    if not q:
        return []

    matches = []
    for code, info in AIRPORTS.items():
        if q in code.lower() or q in info["city"].lower() or q in info["name"].lower():
            if code.lower() == q:
                rank = 0
            elif code.lower().startswith(q):
                rank = 1
            else:
                rank = 2
            matches.append((rank, AirportSuggestion(code=code, name=info["name"], city=info["city"])))

    matches.sort(key=lambda m: m[0])
    return [s for _, s in matches[:limit]]
