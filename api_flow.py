#!/usr/bin/env python3
"""End-to-end walk through the flight data layer: ATL → DFW, one adult.

Runs live when Amadeus credentials are configured, otherwise on synthesized
data. Every live call counts against the free-tier quota, so a second run
is mostly served from the cache.
"""

import asyncio
import logging
from datetime import date, timedelta

import config
from flight_api import FlightAPI
from flight_filters import apply_filters
from models import FilterOptions, SearchCriteria
from suggestions import AirportSuggester

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)

ORIGIN = "ATL"
DESTINATION = "DFW"
MAX_PRICE = 800


def divider(title):
    print(f"\n{'='*60}")
    print(f"  {title}")
    print(f"{'='*60}")


async def run(api):
    # ── Step 1: Status ──────────────────────────────────────
    divider("STEP 1: API Status")
    status = await api.check_status()
    print(f"  {status.message}")

    # ── Step 2: Airport Suggestions ─────────────────────────
    divider("STEP 2: Airport Suggestions")
    suggester = AirportSuggester(api)
    for field, query in (("origin", ORIGIN), ("destination", DESTINATION)):
        results = await suggester.suggest(query, field=field)
        print(f"\n{field} '{query}':")
        for s in results or []:
            print(f"  {s.code}  {s.name} ({s.city})")

    # ── Step 3: Destination Inspiration ─────────────────────
    divider("STEP 3: Destinations")
    offers = await api.get_destinations(ORIGIN, max_price=MAX_PRICE)
    print(f"\nFrom {ORIGIN} under ${MAX_PRICE}: {len(offers)} destinations")
    for o in offers[:5]:
        back = f" - {o.return_date}" if o.return_date else " (one-way)"
        print(f"  {o.destination}  {o.departure_date}{back}  ${o.total_price:.2f}")

    # ── Step 4: Price Trend ─────────────────────────────────
    divider("STEP 4: Price Trend")
    trend = await api.get_price_trend(ORIGIN, DESTINATION)
    for p in trend:
        print(f"  {p.date}  ${p.price:.0f}  {p.airline}")

    # ── Step 5: Flight Search ───────────────────────────────
    divider("STEP 5: Flight Search")
    criteria = SearchCriteria(ORIGIN, DESTINATION, date.today() + timedelta(days=14))
    flights = await api.search_flights(criteria)
    nonstop = apply_filters(flights, FilterOptions(max_price=MAX_PRICE, stops=(0,)))
    print(f"\n{len(flights)} flights, {len(nonstop)} nonstop under ${MAX_PRICE}")
    for f in flights[:5]:
        stops = "nonstop" if f.stops == 0 else f"{f.stops} stop(s)"
        print(f"  {f.flight_number:<7} {f.departure_time}-{f.arrival_time}  "
              f"{f.duration // 60}h{f.duration % 60:02d}m  {stops:<10} ${f.price}")

    # ── Step 6: Housekeeping ────────────────────────────────
    divider("STEP 6: Cache & Quota")
    stats = api.cache_stats()
    print(f"\n  Cached entries: {stats['total']}")
    for key in stats["keys"]:
        print(f"    {key}")
    quota = api.rate_limit_info()
    print(f"  Calls today: {quota['calls_today']}/{quota['max_per_day']} "
          f"({quota['calls_left_today']} left)")


def main():
    config.validate()
    asyncio.run(run(FlightAPI.from_config()))


if __name__ == "__main__":
    main()
