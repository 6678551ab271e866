"""
Usage tracking for HelpHive.

Bounds the number of calls made to the metered upstream service.
"""

from dataclasses import dataclass
from typing import Optional

from helphive.config import DEFAULT_MAX_CALLS_PER_DAY, DEFAULT_MAX_CALLS_PER_HOUR
from helphive.ledger import UsageLedger


@dataclass
class QuotaConfig:
    """Call ceilings per window."""
    max_calls_per_hour: int = DEFAULT_MAX_CALLS_PER_HOUR
    max_calls_per_day: int = DEFAULT_MAX_CALLS_PER_DAY


class UsageTracker:
    """
    Rolling hourly/daily call counters.

    Only successful upstream round trips are counted; cache hits and local
    fallbacks never touch the counters.
    """

    def __init__(
        self,
        ledger: UsageLedger,
        config: Optional[QuotaConfig] = None,
    ):
        """
        Initialize usage tracker.

        Args:
            ledger: Shared persisted state.
            config: Quota configuration. Uses defaults if not provided.
        """
        self.ledger = ledger
        self.config = config or QuotaConfig()

    def check_quota(self) -> bool:
        """
        Check whether the next upstream call would exceed a ceiling.

        Returns:
            True if either the hourly or the daily ceiling has been reached.
        """
        with self.ledger.transaction() as state:
            return (
                state.hourly_count >= self.config.max_calls_per_hour
                or state.daily_count >= self.config.max_calls_per_day
            )

    def record_call(self) -> None:
        """Count one successful upstream round trip in both windows."""
        with self.ledger.transaction() as state:
            state.hourly_count += 1
            state.daily_count += 1

    def get_stats(self) -> dict:
        """
        Get current usage statistics.

        Returns:
            Dictionary with usage stats
        """
        state = self.ledger.snapshot()
        return {
            "calls_this_hour": state.hourly_count,
            "calls_today": state.daily_count,
            "hourly_limit": self.config.max_calls_per_hour,
            "daily_limit": self.config.max_calls_per_day,
            "hour_remaining": max(0, self.config.max_calls_per_hour - state.hourly_count),
            "day_remaining": max(0, self.config.max_calls_per_day - state.daily_count),
            "hour_resets_at": state.hour_reset,
            "day_resets_at": state.daily_reset,
            "cached_entries": len(state.cache),
        }

    def reset(self) -> None:
        """Zero both counters, keeping the cache."""
        with self.ledger.transaction() as state:
            state.hourly_count = 0
            state.daily_count = 0
