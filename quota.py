"""Free-tier call quota for the Amadeus API.

Two ceilings apply: calls per rolling one-minute window and calls per
calendar day. Counters are persisted after every admitted call so a restart
does not hand out a fresh allowance. The day boundary is the local calendar
date of the tracker's clock.
"""

import logging
import math
import threading
import time
from datetime import datetime

import config
from models import QuotaDecision, QuotaState

logger = logging.getLogger(__name__)

STORAGE_KEY = "amadeus_api_calls"


class QuotaTracker:
    """Per-window and per-day admission control for live API calls."""

    def __init__(self, store, max_per_window=None, max_per_day=None,
                 window_ms=None, clock=time.time):
        self.store = store
        self.max_per_window = (config.MAX_CALLS_PER_MINUTE
                               if max_per_window is None else max_per_window)
        self.max_per_day = config.MAX_CALLS_PER_DAY if max_per_day is None else max_per_day
        self.window_ms = config.RATE_WINDOW_MS if window_ms is None else window_ms
        self._clock = clock
        self._lock = threading.RLock()
        self.state = self._load()

    def _now_ms(self):
        return int(self._clock() * 1000)

    def _today(self):
        return datetime.fromtimestamp(self._clock()).date().isoformat()

    def _load(self):
        """Read persisted counters, or start fresh."""
        state = QuotaState(window_start_ms=self._now_ms(), day_stamp=self._today())
        try:
            saved = self.store.get_json(STORAGE_KEY)
        except Exception as e:
            logger.warning(f"Failed to load API call data: {e}")
            return state
        if not saved:
            return state

        try:
            state = QuotaState.from_dict(saved)
        except (AttributeError, TypeError, ValueError) as e:
            logger.warning(f"Discarding unreadable API call data: {e}")
            return state
        if not state.window_start_ms:
            state.window_start_ms = self._now_ms()
        if state.day_stamp != self._today():
            logger.info("New day - resetting API call counter")
            state.calls_today = 0
            state.day_stamp = self._today()
        return state

    def _persist(self):
        try:
            self.store.set_json(STORAGE_KEY, self.state.to_dict())
        except Exception as e:
            logger.warning(f"Failed to save API call data: {e}")

    def _roll_day(self):
        # A tracker that outlives midnight starts the new day at zero
        today = self._today()
        if self.state.day_stamp != today:
            logger.info("New day - resetting API call counter")
            self.state.calls_today = 0
            self.state.day_stamp = today

    def can_make_call(self):
        """Decide whether one more live call fits under both ceilings."""
        with self._lock:
            now = self._now_ms()
            self._roll_day()

            elapsed = now - self.state.window_start_ms
            if elapsed > self.window_ms:
                self.state.calls_this_window = 0
                self.state.window_start_ms = now
                elapsed = 0

            if self.state.calls_this_window >= self.max_per_window:
                wait = max(0, math.ceil((self.window_ms - elapsed) / 1000))
                return QuotaDecision(
                    allowed=False,
                    calls_left=0,
                    reason=f"Rate limit: {self.max_per_window} calls/minute. Wait {wait}s",
                    wait_seconds=wait,
                )

            if self.state.calls_today >= self.max_per_day:
                return QuotaDecision(
                    allowed=False,
                    calls_left=0,
                    reason=f"Daily quota exceeded: {self.max_per_day} calls/day",
                )

            return QuotaDecision(
                allowed=True,
                calls_left=self.max_per_day - self.state.calls_today,
            )

    def record_call(self):
        """Count one admitted call and persist the counters."""
        with self._lock:
            self.state.calls_today += 1
            self.state.calls_this_window += 1
            self.state.day_stamp = self._today()
            self._persist()
            logger.info(
                f"API calls today: {self.state.calls_today}/{self.max_per_day} "
                f"({self.max_per_day - self.state.calls_today} left)"
            )

    def try_acquire(self):
        """Check and record as one step.

        Two interleaved callers can never both take the last slot, because
        nothing between the check and the increment yields.
        """
        with self._lock:
            decision = self.can_make_call()
            if decision.allowed:
                self.record_call()
            return decision

    def reset_daily_count(self):
        """Zero every counter and forget the persisted state."""
        with self._lock:
            self.state = QuotaState(window_start_ms=self._now_ms(), day_stamp=self._today())
            try:
                self.store.remove(STORAGE_KEY)
            except Exception as e:
                logger.warning(f"Failed to clear API call data: {e}")
            logger.info("Reset API call counter")

    def stats(self):
        with self._lock:
            return {
                "calls_today": self.state.calls_today,
                "calls_this_window": self.state.calls_this_window,
                "max_per_day": self.max_per_day,
                "max_per_window": self.max_per_window,
                "calls_left_today": max(0, self.max_per_day - self.state.calls_today),
            }
