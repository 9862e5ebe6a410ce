"""Configuration loader for the flight data access layer."""

import logging
import os
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

# Amadeus Self-Service
AMADEUS_CLIENT_ID = os.getenv("AMADEUS_CLIENT_ID", "")
AMADEUS_CLIENT_SECRET = os.getenv("AMADEUS_CLIENT_SECRET", "")
AMADEUS_BASE_URL = os.getenv("AMADEUS_BASE_URL", "https://test.api.amadeus.com")

# Offline mode: never touch the network, always synthesize
USE_MOCK_DATA = os.getenv("USE_MOCK_DATA", "false").lower() in ("true", "1", "yes")

# Mock API
MOCK_DELAYS = os.getenv("MOCK_DELAYS", "false").lower() in ("true", "1", "yes")

# Persistent state (cache entries + quota counters)
STATE_DB_PATH = os.getenv("STATE_DB_PATH", "flight_state.db")

# Network
REQUEST_TIMEOUT_S = float(os.getenv("REQUEST_TIMEOUT_S", "10"))
SUGGEST_TIMEOUT_S = float(os.getenv("SUGGEST_TIMEOUT_S", "5"))

# Free-tier ceilings
MAX_CALLS_PER_MINUTE = 10
MAX_CALLS_PER_DAY = 39
RATE_WINDOW_MS = 60_000

# Tokens last 30 minutes; refresh 5 minutes early
TOKEN_EXPIRY_MARGIN_S = 300

# Cache lifetimes, tuned to how often the data moves
DESTINATIONS_TTL_HOURS = 24
PRICE_TREND_TTL_HOURS = 168
AIRPORTS_TTL_HOURS = 168

# Airport search-as-you-type
SUGGEST_DEBOUNCE_S = 0.3
SUGGEST_MIN_CHARS = 2
SUGGEST_MAX_RESULTS = 8

_PLACEHOLDERS = {"YOUR_API_KEY_HERE", "YOUR_API_SECRET_HERE"}


def has_credentials(client_id=None, client_secret=None):
    """True when both Amadeus credentials are set to real values."""
    client_id = AMADEUS_CLIENT_ID if client_id is None else client_id
    client_secret = AMADEUS_CLIENT_SECRET if client_secret is None else client_secret
    return all(v and v not in _PLACEHOLDERS for v in (client_id, client_secret))


def validate():
    """Validate required configuration is present."""
    missing = []
    if not AMADEUS_CLIENT_ID or AMADEUS_CLIENT_ID in _PLACEHOLDERS:
        missing.append("AMADEUS_CLIENT_ID")
    if not AMADEUS_CLIENT_SECRET or AMADEUS_CLIENT_SECRET in _PLACEHOLDERS:
        missing.append("AMADEUS_CLIENT_SECRET")
    if missing and not USE_MOCK_DATA:
        logger.warning(f"Missing config: {', '.join(missing)}")
        logger.warning("Falling back to synthesized data. Copy .env.example to .env and fill in values.")
    return missing
