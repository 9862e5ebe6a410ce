"""Single entry point for flight data consumed by the UI.

For every operation the decision order is the same:

1. degenerate input (same origin and destination, too-short query)
   → synthesized data, no quota spent, cache untouched
2. offline mode or no credentials → synthesized data
3. cache hit → cached data
4. quota denied → synthesized data
5. token exchange failed → synthesized data
6. live call failed, timed out or returned nothing usable → synthesized data
7. normalize, cache, return

Callers never see an error for any of these. Where the data came from is
reported in the log only.
"""

import asyncio
import logging
import random
from dataclasses import dataclass
from statistics import mean
from typing import Any, Optional

import config
from amadeus_client import AmadeusClient, TokenManager
from cache_manager import CacheManager
from errors import AuthenticationError, FlightDataError, MalformedResponseError, QuotaExceededError
from models import AirportSuggestion, ApiStatus, DestinationOffer, PricePoint
from mock_flight_api import (
    synthesize_airport_suggestions,
    synthesize_destinations,
    synthesize_flights,
    synthesize_price_trend,
)
from quota import QuotaTracker
from state_store import SqliteStore

logger = logging.getLogger(__name__)


@dataclass
class LiveOutcome:
    """Result of one attempt at live data: a value, or why there is none."""
    value: Any = None
    diagnostic: Optional[str] = None

    @property
    def ok(self):
        return self.diagnostic is None


# ── Payload normalizers ──────────────────────────────────────────────

def _data_list(payload):
    data = payload.get("data")
    if not isinstance(data, list):
        raise MalformedResponseError("Response has no 'data' list")
    return data


def normalize_destinations(payload, origin):
    """flight-destinations response → DestinationOffer list."""
    offers = []
    try:
        for item in _data_list(payload):
            total = (item.get("price") or {}).get("total")
            if not total or not item.get("destination"):
                continue
            offers.append(DestinationOffer(
                origin=item.get("origin") or origin,
                destination=item["destination"],
                departure_date=item.get("departureDate", ""),
                return_date=item.get("returnDate"),
                total_price=float(total),
            ))
    except (AttributeError, TypeError, ValueError) as e:
        raise MalformedResponseError(f"Unexpected destination record: {e}") from e
    return offers


def normalize_price_trend(payload):
    """flight-dates response → PricePoint list in date order."""
    points = []
    try:
        for item in _data_list(payload):
            total = (item.get("price") or {}).get("total")
            if not total or not item.get("departureDate"):
                continue
            # This endpoint carries no airline per date
            points.append(PricePoint(date=item["departureDate"], price=float(total), airline="Various"))
    except (AttributeError, TypeError, ValueError) as e:
        raise MalformedResponseError(f"Unexpected price record: {e}") from e
    points.sort(key=lambda p: p.date)
    return points


def normalize_airports(payload, limit=None):
    """locations response → unique AirportSuggestion list, capped."""
    limit = limit or config.SUGGEST_MAX_RESULTS
    suggestions = []
    seen = set()
    try:
        for loc in _data_list(payload):
            code = loc.get("iataCode")
            if not code or not loc.get("name") or code in seen:
                continue
            seen.add(code)
            suggestions.append(AirportSuggestion(
                code=code,
                name=loc["name"],
                city=(loc.get("address") or {}).get("cityName") or "Unknown",
            ))
    except (AttributeError, TypeError) as e:
        raise MalformedResponseError(f"Unexpected location record: {e}") from e
    return suggestions[:limit]


class FlightAPI:
    """Cache → quota → token → live call, with synthesis on every miss."""

    def __init__(self, cache, quota, tokens, client, offline=None,
                 has_credentials=None, mock_delays=None):
        self.cache = cache
        self.quota = quota
        self.tokens = tokens
        self.client = client
        self.offline = config.USE_MOCK_DATA if offline is None else offline
        if has_credentials is None:
            has_credentials = config.has_credentials(tokens.client_id, tokens.client_secret)
        self.has_credentials = has_credentials
        self.mock_delays = config.MOCK_DELAYS if mock_delays is None else mock_delays

    @classmethod
    def from_config(cls, store=None):
        """Wire every collaborator from environment configuration."""
        store = store or SqliteStore(config.STATE_DB_PATH)
        tokens = TokenManager(
            config.AMADEUS_CLIENT_ID,
            config.AMADEUS_CLIENT_SECRET,
            config.AMADEUS_BASE_URL,
        )
        return cls(
            cache=CacheManager(store),
            quota=QuotaTracker(store),
            tokens=tokens,
            client=AmadeusClient(tokens, config.AMADEUS_BASE_URL),
        )

    @property
    def fallback_only(self):
        """True when no live call should even be attempted."""
        return self.offline or not self.has_credentials

    def _fallback_reason(self):
        return "offline mode" if self.offline else "no API credentials configured"

    async def _maybe_delay(self):
        """Sleep briefly on synthesized paths when MOCK_DELAYS is enabled."""
        if self.mock_delays:
            await asyncio.sleep(random.uniform(0.3, 1.0))

    # ── Live call plumbing ───────────────────────────────────────────

    def _admit(self):
        decision = self.quota.try_acquire()
        if not decision.allowed:
            raise QuotaExceededError(decision.reason, decision.wait_seconds)

    async def _live(self, label, call, normalize):
        """Run one admitted live call. Never raises; failures become diagnostics."""
        try:
            self._admit()
            await asyncio.to_thread(self.tokens.get_token)
            logger.info(f"Calling Amadeus {label}")
            payload = await asyncio.to_thread(call)
            value = normalize(payload)
        except FlightDataError as e:
            return LiveOutcome(diagnostic=f"{type(e).__name__}: {e}")
        if not value:
            return LiveOutcome(diagnostic="empty payload")
        return LiveOutcome(value=value)

    def _cached(self, key, from_dict):
        raw = self.cache.get(key)
        if raw is None:
            return None
        try:
            return [from_dict(item) for item in raw]
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Discarding unreadable cache entry '{key}': {e}")
            self.cache.clear(key)
            return None

    # ── Flight search ────────────────────────────────────────────────

    async def search_flights(self, criteria):
        """Flight offers for a route, cheapest first.

        The free tier has no offer search, so offers are always synthesized.
        When real fares for the route are available (live or cached) the
        synthesized prices scatter around their average.
        """
        route = f"{criteria.origin_code} → {criteria.destination_code}"
        if criteria.is_degenerate:
            logger.warning(f"Invalid search {route}: origin and destination are the same, synthesizing flights")
            await self._maybe_delay()
            return synthesize_flights(criteria)

        if self.fallback_only:
            logger.info(f"Synthesizing flights for {route} ({self._fallback_reason()})")
            await self._maybe_delay()
            return synthesize_flights(criteria)

        trend, real = await self._price_trend(criteria.origin_code, criteria.destination_code)
        avg_price = mean(p.price for p in trend) if real and trend else None
        if avg_price:
            logger.info(f"Synthesizing flights for {route} around real average ${avg_price:.0f}")
        else:
            logger.info(f"Synthesizing flights for {route} without real price data")
        await self._maybe_delay()
        return synthesize_flights(criteria, base_price=avg_price)

    # ── Destination discovery ────────────────────────────────────────

    async def get_destinations(self, origin, max_price=1000, one_way=False):
        """Destinations reachable from origin within max_price."""
        if self.fallback_only:
            logger.info(f"Synthesizing destinations from {origin} ({self._fallback_reason()})")
            await self._maybe_delay()
            return synthesize_destinations(origin, max_price, one_way)

        key = f"inspiration_{origin}_{max_price}_{str(one_way).lower()}"
        cached = self._cached(key, DestinationOffer.from_dict)
        if cached is not None:
            return cached

        outcome = await self._live(
            "flight-destinations",
            lambda: self.client.flight_destinations(origin, max_price, one_way),
            lambda payload: normalize_destinations(payload, origin),
        )
        if not outcome.ok:
            logger.warning(f"Destinations from {origin} unavailable ({outcome.diagnostic}), synthesizing")
            return synthesize_destinations(origin, max_price, one_way)

        logger.info(f"Received {len(outcome.value)} live destinations from {origin}")
        self.cache.set(key, [d.to_dict() for d in outcome.value], config.DESTINATIONS_TTL_HOURS)
        return outcome.value

    # ── Price trends ─────────────────────────────────────────────────

    async def get_price_trend(self, origin, destination, one_way=False):
        """Daily fares for a route in date order."""
        points, _ = await self._price_trend(origin, destination, one_way)
        return points

    async def _price_trend(self, origin, destination, one_way=False):
        """Return (points, came_from_real_data)."""
        if origin.upper() == destination.upper():
            logger.warning(f"Skipping price trend for {origin} → {destination}: same airport, synthesizing")
            return synthesize_price_trend(origin, destination), False

        if self.fallback_only:
            logger.info(f"Synthesizing price trend for {origin} → {destination} ({self._fallback_reason()})")
            await self._maybe_delay()
            return synthesize_price_trend(origin, destination), False

        key = f"cheapest_dates_{origin}_{destination}_{str(one_way).lower()}"
        cached = self._cached(key, PricePoint.from_dict)
        if cached is not None:
            return cached, True

        outcome = await self._live(
            "flight-dates",
            lambda: self.client.flight_cheapest_dates(origin, destination, one_way),
            normalize_price_trend,
        )
        if not outcome.ok:
            logger.warning(
                f"Price trend for {origin} → {destination} unavailable ({outcome.diagnostic}), synthesizing"
            )
            return synthesize_price_trend(origin, destination), False

        logger.info(f"Extracted {len(outcome.value)} live price points for {origin} → {destination}")
        self.cache.set(key, [p.to_dict() for p in outcome.value], config.PRICE_TREND_TTL_HOURS)
        return outcome.value, True

    # ── Airport suggestions ──────────────────────────────────────────

    async def get_airport_suggestions(self, query):
        """Up to 8 unique airports matching query."""
        query = (query or "").strip()
        if len(query) < config.SUGGEST_MIN_CHARS:
            return []

        if self.fallback_only:
            logger.info(f"Fallback airport suggestions for '{query}' ({self._fallback_reason()})")
            return synthesize_airport_suggestions(query)

        key = f"airports_{query.lower()}"
        cached = self._cached(key, AirportSuggestion.from_dict)
        if cached is not None:
            return cached

        outcome = await self._live(
            "airport search",
            lambda: self.client.airport_city_search(query),
            normalize_airports,
        )
        if not outcome.ok:
            logger.warning(f"Airport search for '{query}' unavailable ({outcome.diagnostic}), using fallback")
            return synthesize_airport_suggestions(query)

        logger.info(f"Processed {len(outcome.value)} unique airport suggestions for '{query}'")
        self.cache.set(key, [s.to_dict() for s in outcome.value], config.AIRPORTS_TTL_HOURS)
        return outcome.value

    # ── Status & housekeeping ────────────────────────────────────────

    async def check_status(self):
        """Report whether live data is reachable."""
        if self.offline:
            return ApiStatus(available=False, using_fallback=True,
                             message="Using fallback data (offline mode)")
        if not self.has_credentials:
            logger.info("No Amadeus API credentials found. Add them to .env for live data")
            return ApiStatus(available=False, using_fallback=True,
                             message="No API credentials configured")

        try:
            await asyncio.to_thread(self.tokens.get_token)
        except AuthenticationError as e:
            logger.warning(f"Amadeus API check failed: {e}")
            return ApiStatus(available=False, using_fallback=True,
                             message="Amadeus API check failed, using fallback data")

        probe = await self.get_airport_suggestions("JFK")
        logger.info(f"Amadeus API available, airport search probe returned {len(probe)} suggestions")
        return ApiStatus(
            available=True,
            using_fallback=False,
            message=(f"Amadeus API connected. Caching enabled to conserve quota "
                     f"({self.quota.max_per_day} calls/day)."),
        )

    def clear_cache(self):
        """Forget cached responses, quota counters and the bearer token."""
        self.cache.clear_all()
        self.quota.reset_daily_count()
        self.tokens.invalidate()
        logger.info("Cleared all API caches and tokens")

    def cache_stats(self):
        return self.cache.stats()

    def rate_limit_info(self):
        return self.quota.stats()
