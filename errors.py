"""Error taxonomy for the flight data access layer.

None of these reach the UI. The mediator in ``flight_api`` catches every
``FlightDataError`` and answers with synthesized data instead.
"""


class FlightDataError(Exception):
    """Base class for failures on the live-data path."""


class AuthenticationError(FlightDataError):
    """Client-credentials exchange failed or returned no token."""


class QuotaExceededError(FlightDataError):
    """Local free-tier ceiling reached; the call was never admitted."""

    def __init__(self, reason, wait_seconds=None):
        self.reason = reason
        self.wait_seconds = wait_seconds
        super().__init__(reason)


class TransportError(FlightDataError):
    """Network failure, timeout or non-2xx status from Amadeus."""

    def __init__(self, message, status_code=None):
        self.status_code = status_code
        super().__init__(message)


class MalformedResponseError(FlightDataError):
    """Amadeus answered, but not with the shape we expected."""


class SerializationError(FlightDataError):
    """A stored value could not be encoded or decoded."""
