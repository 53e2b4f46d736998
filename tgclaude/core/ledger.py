"""In-memory usage ledger: daily, hourly and per-minute windows per user."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from enum import Enum
from threading import Lock
from typing import Union

from tgclaude.core.clock import Clock, PeriodKeys, SystemClock
from tgclaude.utils.config import UsageLimits

UserId = Union[int, str]


class DenialReason(str, Enum):
    """Why an admission check failed, in evaluation order."""

    UNAUTHORIZED = "unauthorized"
    RATE_LIMIT = "rate_limit"
    HOURLY_LIMIT = "hourly_limit"
    DAILY_MESSAGE_LIMIT = "daily_message_limit"
    DAILY_TOKEN_LIMIT = "daily_token_limit"


@dataclass(frozen=True)
class Admission:
    allowed: bool
    reason: DenialReason | None = None


ADMITTED = Admission(allowed=True)


@dataclass
class DailyWindow:
    period: str
    messages: int = 0
    tokens: int = 0


@dataclass
class CounterWindow:
    period: str
    messages: int = 0


@dataclass
class UsageRecord:
    """Counters for one user. A window only counts while its period is current."""

    daily: DailyWindow
    hourly: CounterWindow
    minute: CounterWindow

    @classmethod
    def fresh(cls, keys: PeriodKeys) -> UsageRecord:
        return cls(
            daily=DailyWindow(period=keys.day),
            hourly=CounterWindow(period=keys.hour),
            minute=CounterWindow(period=keys.minute),
        )

    def roll_over(self, keys: PeriodKeys) -> None:
        """Zero every window whose period is no longer current."""
        if self.daily.period != keys.day:
            self.daily = DailyWindow(period=keys.day)
        if self.hourly.period != keys.hour:
            self.hourly = CounterWindow(period=keys.hour)
        if self.minute.period != keys.minute:
            self.minute = CounterWindow(period=keys.minute)


class UsageLedger:
    """
    Fixed-window usage counters per user plus the optional single-user gate.
    Thread-safe, in-memory; state lives for the process lifetime.

    Example:
        >>> ledger = UsageLedger(UsageLimits(rate_limit_per_minute=1))
        >>> ledger.check_admission(7).allowed
        True
    """

    def __init__(self, limits: UsageLimits | None = None, clock: Clock | None = None) -> None:
        self.limits = limits or UsageLimits()
        self.clock = clock or SystemClock()
        self._records: dict[UserId, UsageRecord] = {}
        self._lock = Lock()

    def _current(self, user_id: UserId) -> UsageRecord:
        """Return the user's record with stale windows reset. Caller holds the lock."""
        keys = PeriodKeys.from_datetime(self.clock.now())
        record = self._records.get(user_id)
        if record is None:
            record = self._records[user_id] = UsageRecord.fresh(keys)
        else:
            record.roll_over(keys)
        return record

    def is_authorized(self, user_id: UserId) -> bool:
        authorized = self.limits.authorized_user_id
        return authorized is None or str(user_id) == str(authorized)

    def check_admission(self, user_id: UserId) -> Admission:
        """Evaluate authorization, then minute, hour, daily messages and daily tokens."""
        if not self.is_authorized(user_id):
            return Admission(allowed=False, reason=DenialReason.UNAUTHORIZED)
        limits = self.limits
        with self._lock:
            record = self._current(user_id)
            if record.minute.messages >= limits.rate_limit_per_minute:
                return Admission(allowed=False, reason=DenialReason.RATE_LIMIT)
            if record.hourly.messages >= limits.hourly_message_limit:
                return Admission(allowed=False, reason=DenialReason.HOURLY_LIMIT)
            if record.daily.messages >= limits.daily_message_limit:
                return Admission(allowed=False, reason=DenialReason.DAILY_MESSAGE_LIMIT)
            if record.daily.tokens >= limits.daily_token_limit:
                return Admission(allowed=False, reason=DenialReason.DAILY_TOKEN_LIMIT)
        return ADMITTED

    def record(self, user_id: UserId, tokens_consumed: int) -> None:
        """Count one completed request and its tokens. Only call after a successful completion."""
        if tokens_consumed < 0:
            raise ValueError(f"tokens_consumed must be non-negative, got {tokens_consumed}")
        with self._lock:
            record = self._current(user_id)
            record.daily.messages += 1
            record.daily.tokens += tokens_consumed
            record.hourly.messages += 1
            record.minute.messages += 1

    def snapshot(self, user_id: UserId) -> UsageRecord:
        """Detached copy of the user's current counters."""
        with self._lock:
            return copy.deepcopy(self._current(user_id))

    def usage_warning(self, user_id: UserId) -> bool:
        """True once daily messages or tokens reach ``warning_ratio`` of their limits."""
        usage = self.snapshot(user_id)
        ratio = self.limits.warning_ratio
        return (
            usage.daily.messages >= self.limits.daily_message_limit * ratio
            or usage.daily.tokens >= self.limits.daily_token_limit * ratio
        )

    @property
    def user_count(self) -> int:
        with self._lock:
            return len(self._records)

