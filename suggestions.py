"""Search-as-you-type airport suggestions.

Each input field (origin, destination) keeps a request sequence number.
A call waits out the debounce, performs the lookup, and only publishes its
result if no newer call for the same field started in the meantime. A
superseded call returns None and leaves the visible state alone.
"""

import asyncio
import logging
from collections import defaultdict

import config

logger = logging.getLogger(__name__)


class AirportSuggester:
    """Debounced, superseding front for ``FlightAPI.get_airport_suggestions``."""

    def __init__(self, api, debounce_s=None):
        self.api = api
        self.debounce_s = config.SUGGEST_DEBOUNCE_S if debounce_s is None else debounce_s
        self._seq = defaultdict(int)
        self._latest = {}

    def latest(self, field="origin"):
        """Last applied suggestions for field, or [] if none yet."""
        return self._latest.get(field, [])

    def _is_current(self, field, seq):
        return self._seq[field] == seq

    async def suggest(self, query, field="origin"):
        """Suggestions for query, or None if a newer query superseded this one."""
        self._seq[field] += 1
        seq = self._seq[field]

        if self.debounce_s:
            await asyncio.sleep(self.debounce_s)
        if not self._is_current(field, seq):
            logger.debug(f"Dropping superseded {field} query '{query}' before lookup")
            return None

        results = await self.api.get_airport_suggestions(query)
        if not self._is_current(field, seq):
            logger.debug(f"Discarding stale {field} suggestions for '{query}'")
            return None

        self._latest[field] = results
        return results
