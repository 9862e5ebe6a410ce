"""Value objects passed between the access layer and the UI.

Everything here is copied between layers; nothing is shared mutably.
Each record knows how to turn itself into a JSON-friendly dict and back,
which is what the cache stores.
"""

from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any, List, Optional, Tuple


@dataclass
class CacheEntry:
    """A cached payload with the wall-clock time it was stored."""
    payload: Any
    stored_at_ms: int
    ttl_ms: int

    def is_fresh(self, now_ms: int) -> bool:
        return now_ms - self.stored_at_ms <= self.ttl_ms

    def to_dict(self) -> dict:
        return {
            "payload": self.payload,
            "stored_at_ms": self.stored_at_ms,
            "ttl_ms": self.ttl_ms,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CacheEntry":
        return cls(
            payload=data["payload"],
            stored_at_ms=int(data["stored_at_ms"]),
            ttl_ms=int(data["ttl_ms"]),
        )


@dataclass
class QuotaState:
    calls_today: int = 0
    calls_this_window: int = 0
    window_start_ms: int = 0
    day_stamp: str = ""

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "QuotaState":
        return cls(
            calls_today=int(data.get("calls_today") or 0),
            calls_this_window=int(data.get("calls_this_window") or 0),
            window_start_ms=int(data.get("window_start_ms") or 0),
            day_stamp=str(data.get("day_stamp") or ""),
        )


@dataclass
class QuotaDecision:
    """Answer from the quota tracker for one prospective call."""
    allowed: bool
    calls_left: int
    reason: Optional[str] = None
    wait_seconds: Optional[int] = None


@dataclass
class TokenState:
    access_token: str
    expires_at_ms: int

    def is_valid(self, now_ms: int) -> bool:
        return now_ms < self.expires_at_ms


@dataclass
class Passengers:
    adults: int = 1
    children: int = 0
    infants: int = 0


@dataclass
class SearchCriteria:
    origin_code: str
    destination_code: str
    departure_date: date
    return_date: Optional[date] = None
    passengers: Passengers = field(default_factory=Passengers)

    @property
    def is_degenerate(self) -> bool:
        """Same airport on both ends; the price endpoints reject these."""
        return self.origin_code.upper() == self.destination_code.upper()


@dataclass
class StopDetail:
    airport: str
    duration: int  # layover minutes


@dataclass
class FlightOffer:
    id: str
    airline: str
    airline_code: str
    flight_number: str
    origin: str
    destination: str
    departure_time: str  # HH:MM
    arrival_time: str    # HH:MM
    duration: int        # minutes
    price: int
    stops: int
    stop_details: Optional[List[StopDetail]] = None
    aircraft: Optional[str] = None

    @property
    def departure_hour(self) -> int:
        return int(self.departure_time.split(":")[0])


@dataclass
class PricePoint:
    date: str  # YYYY-MM-DD
    price: float
    airline: str

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "PricePoint":
        return cls(date=data["date"], price=float(data["price"]), airline=data["airline"])


@dataclass
class DestinationOffer:
    origin: str
    destination: str
    departure_date: str
    return_date: Optional[str]
    total_price: float

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "DestinationOffer":
        return cls(
            origin=data["origin"],
            destination=data["destination"],
            departure_date=data["departure_date"],
            return_date=data.get("return_date"),
            total_price=float(data["total_price"]),
        )


@dataclass
class AirportSuggestion:
    code: str
    name: str
    city: str

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "AirportSuggestion":
        return cls(code=data["code"], name=data["name"], city=data["city"])


@dataclass
class ApiStatus:
    available: bool
    using_fallback: bool
    message: str


@dataclass
class FilterOptions:
    max_price: float = 1000
    stops: Tuple[int, ...] = (0, 1, 2)
    airlines: Tuple[str, ...] = ()
    departure_time_range: Tuple[int, int] = (0, 24)
