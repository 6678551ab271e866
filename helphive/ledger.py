"""
Usage ledger for HelpHive.

Owns the single persisted blob holding quota counters and the response
cache. Every read-modify-write goes through ``transaction()``, which holds
one lock for the whole load/mutate/save cycle.
"""

import json
import logging
import time
from contextlib import contextmanager
from threading import Lock
from typing import Callable, Iterator, Optional

from helphive.models import UsageState
from helphive.storage import InMemoryUsageStore, UsageStore, USAGE_KEY


HOUR_SECONDS = 60 * 60
DAY_SECONDS = 24 * 60 * 60

logger = logging.getLogger(__name__)


class UsageLedger:
    """
    Explicit state object shared by the usage tracker and the response cache.

    Windows are reset lazily: whenever the state is loaded, a counter whose
    reset instant has passed is zeroed and given a new instant one window
    from now.
    """

    def __init__(
        self,
        store: Optional[UsageStore] = None,
        key: str = USAGE_KEY,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize ledger.

        Args:
            store: Persistence backend. Uses in-memory storage if not provided.
            key: Name of the persisted blob.
            clock: Returns the current time in epoch seconds.
        """
        self.store = store if store is not None else InMemoryUsageStore()
        self.key = key
        self.clock = clock
        self._lock = Lock()

    def init(self) -> UsageState:
        """Write a fresh state, discarding counters and cache."""
        with self._lock:
            state = self._fresh(self.clock())
            self._save(state)
            return state

    def reset(self) -> None:
        """Remove the persisted state; it is recreated on next access."""
        with self._lock:
            self.store.delete(self.key)

    def snapshot(self) -> UsageState:
        """Return the current state (after lazy resets)."""
        with self.transaction() as state:
            return state

    @contextmanager
    def transaction(self) -> Iterator[UsageState]:
        """Load, yield for mutation, and persist the state under the lock."""
        with self._lock:
            state = self._load()
            yield state
            self._save(state)

    def _fresh(self, now: float) -> UsageState:
        return UsageState(
            hourly_count=0,
            daily_count=0,
            hour_reset=now + HOUR_SECONDS,
            daily_reset=now + DAY_SECONDS,
        )

    def _load(self) -> UsageState:
        now = self.clock()
        raw = self.store.get(self.key)
        if raw is None:
            return self._fresh(now)

        try:
            state = UsageState.from_dict(json.loads(raw))
        except (ValueError, TypeError, KeyError, AttributeError) as e:
            logger.warning("Discarding corrupt usage state %r: %s", self.key, e)
            return self._fresh(now)

        if not state.daily_reset or now > state.daily_reset:
            state.daily_count = 0
            state.daily_reset = now + DAY_SECONDS
        if not state.hour_reset or now > state.hour_reset:
            state.hourly_count = 0
            state.hour_reset = now + HOUR_SECONDS
        return state

    def _save(self, state: UsageState) -> None:
        self.store.set(self.key, json.dumps(state.to_dict(), default=str))
