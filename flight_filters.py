"""Client-side narrowing of a flight result list."""

import logging

from models import FilterOptions

logger = logging.getLogger(__name__)


def matches(flight, options):
    if flight.price > options.max_price:
        return False
    if flight.stops not in options.stops:
        return False
    if options.airlines and flight.airline not in options.airlines:
        return False
    start, end = options.departure_time_range
    return start <= flight.departure_hour <= end


def apply_filters(flights, options=None):
    """Keep the flights that pass every filter, preserving order."""
    options = options or FilterOptions()
    filtered = [f for f in flights if matches(f, options)]
    logger.debug(f"Filtered {len(flights)} flights down to {len(filtered)}")
    return filtered
