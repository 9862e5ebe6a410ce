"""Amadeus Self-Service API client with OAuth2 token lifecycle.

Every call is a single attempt with a fixed timeout. The free tier is too
small to spend on retries, so a failure here goes straight to the caller,
which substitutes synthesized data.
"""

import logging
import threading
import time

import requests

import config
from errors import AuthenticationError, MalformedResponseError, TransportError
from models import TokenState

logger = logging.getLogger(__name__)


class TokenManager:
    """Owns the bearer token; nothing else reads or writes it.

    The token lives only in memory. ``invalidate()`` forgets it so the next
    ``get_token()`` performs a fresh client-credentials exchange.
    """

    def __init__(self, client_id, client_secret, base_url,
                 expiry_margin_s=None, timeout=None, clock=time.time):
        self.client_id = client_id
        self.client_secret = client_secret
        self.base_url = base_url.rstrip("/")
        self.expiry_margin_s = (config.TOKEN_EXPIRY_MARGIN_S
                                if expiry_margin_s is None else expiry_margin_s)
        self.timeout = timeout or config.REQUEST_TIMEOUT_S
        self._clock = clock
        self._lock = threading.Lock()
        self.token = None

    def _now_ms(self):
        return int(self._clock() * 1000)

    def get_token(self):
        """Return a usable bearer token, exchanging credentials if needed."""
        with self._lock:
            if self.token is not None and self.token.is_valid(self._now_ms()):
                logger.debug("Using cached Amadeus token")
                return self.token.access_token
            self.token = None
            self.token = self._exchange()
            return self.token.access_token

    def _exchange(self):
        logger.info("Fetching new Amadeus token")
        try:
            resp = requests.post(
                f"{self.base_url}/v1/security/oauth2/token",
                data={
                    "grant_type": "client_credentials",
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                },
                headers={"Content-Type": "application/x-www-form-urlencoded"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Amadeus token request failed: {e}")
            raise AuthenticationError(f"Token request failed: {e}") from e

        if resp.status_code >= 400:
            if resp.status_code == 401:
                logger.error("Amadeus rejected the credentials. Check AMADEUS_CLIENT_ID/SECRET")
            else:
                logger.error(f"Amadeus token refresh failed: HTTP {resp.status_code}")
            raise AuthenticationError(f"Token exchange returned HTTP {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as e:
            raise AuthenticationError("Token response was not JSON") from e

        access_token = data.get("access_token") if isinstance(data, dict) else None
        if not access_token:
            logger.warning("Amadeus token response missing access_token")
            raise AuthenticationError("No access token in response")

        # Tokens last 30 minutes when the response does not say otherwise
        try:
            lifetime_s = int(data.get("expires_in") or 1800)
        except (TypeError, ValueError) as e:
            logger.warning(f"Amadeus token response had an invalid expires_in: {data.get('expires_in')!r}")
            raise AuthenticationError("Token response had an invalid expires_in") from e
        usable_s = max(0, lifetime_s - self.expiry_margin_s)
        logger.info("Amadeus token refreshed")
        return TokenState(
            access_token=access_token,
            expires_at_ms=self._now_ms() + usable_s * 1000,
        )

    def invalidate(self):
        """Drop the cached token."""
        with self._lock:
            self.token = None


class AmadeusClient:
    """Thin wrappers around the free-tier Amadeus endpoints."""

    def __init__(self, tokens, base_url, timeout=None):
        self.tokens = tokens
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout or config.REQUEST_TIMEOUT_S

    def _get(self, path, params=None, timeout=None):
        """Authenticated GET. Returns the decoded JSON object."""
        token = self.tokens.get_token()
        url = f"{self.base_url}{path}"
        try:
            resp = requests.get(
                url,
                headers={"Authorization": f"Bearer {token}"},
                params=params or {},
                timeout=timeout or self.timeout,
            )
        except requests.Timeout as e:
            raise TransportError(f"Timed out calling {path}") from e
        except requests.RequestException as e:
            raise TransportError(f"Request to {path} failed: {e}") from e

        if resp.status_code >= 400:
            self._log_errors(path, resp)
            if resp.status_code == 429:
                logger.warning("Rate limited by Amadeus. Wait before making more requests.")
            raise TransportError(
                f"Amadeus {resp.status_code} on GET {path}", status_code=resp.status_code
            )

        try:
            data = resp.json()
        except ValueError as e:
            raise MalformedResponseError(f"Non-JSON body from {path}") from e
        if not isinstance(data, dict):
            raise MalformedResponseError(f"Unexpected body type from {path}: {type(data).__name__}")
        return data

    @staticmethod
    def _log_errors(path, resp):
        """Log Amadeus error details before raising."""
        try:
            errors = resp.json().get("errors", [])
        except (ValueError, AttributeError):
            logger.error(f"Amadeus {resp.status_code} on {path}: {resp.text[:500]}")
            return
        for e in errors:
            logger.error(
                f"Amadeus {resp.status_code}: "
                f"[{e.get('code')}] {e.get('title', '')} - "
                f"{e.get('detail', '')} "
                f"(source: {e.get('source', {})})"
            )

    # --- Inspiration & price APIs ---

    def flight_destinations(self, origin, max_price=1000, one_way=False):
        """Cheapest destinations reachable from origin within budget.

        GET /v1/shopping/flight-destinations
        """
        return self._get("/v1/shopping/flight-destinations", {
            "origin": origin,
            "maxPrice": str(max_price),
            "oneWay": str(one_way).lower(),
            "duration": "1,15",
            "nonStop": "false",
            "viewBy": "DESTINATION",
        })

    def flight_cheapest_dates(self, origin, destination, one_way=False):
        """Date/price matrix for a route.

        GET /v1/shopping/flight-dates
        """
        return self._get("/v1/shopping/flight-dates", {
            "origin": origin,
            "destination": destination,
            "oneWay": str(one_way).lower(),
            "duration": "1,15",
            "nonStop": "false",
            "viewBy": "DATE",
        })

    # --- Airport & Location APIs ---

    def airport_city_search(self, keyword, sub_type="AIRPORT,CITY", limit=8):
        """Keyword search for airports and cities.

        GET /v1/reference-data/locations
        """
        return self._get("/v1/reference-data/locations", {
            "subType": sub_type,
            "keyword": keyword,
            "page[limit]": str(limit),
            "page[offset]": "0",
            "view": "LIGHT",
        }, timeout=config.SUGGEST_TIMEOUT_S)
