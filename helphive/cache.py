"""
Response cache for HelpHive.

Maps a request fingerprint to a previously normalized result so identical
requests never cost a second upstream call.
"""

import json
from typing import Any, Iterable, Optional

from helphive.config import DEFAULT_CACHE_MAX_ENTRIES
from helphive.ledger import UsageLedger
from helphive.models import CacheEntry, TaskSummary


PRIORITIZE_PREFIX = "prioritize"


def request_cache_key(text: str, kind: str) -> str:
    """Fingerprint for a normalization request. The text is used verbatim."""
    return f"{kind}::{text}"


def prioritization_cache_key(summaries: Iterable[TaskSummary]) -> str:
    """Fingerprint for a ranking request over the given task summaries."""
    payload = json.dumps(
        [s.to_dict() for s in summaries],
        sort_keys=True,
        separators=(",", ":"),
        default=str,
    )
    return f"{PRIORITIZE_PREFIX}::{payload}"


class ResponseCache:
    """
    Bounded FIFO store kept inside the usage ledger.

    Eviction follows insertion order only; reads do not promote entries and
    entries never expire on their own.
    """

    def __init__(self, ledger: UsageLedger, max_entries: int = DEFAULT_CACHE_MAX_ENTRIES):
        if max_entries < 1:
            raise ValueError(f"max_entries must be positive, got {max_entries}")
        self.ledger = ledger
        self.max_entries = max_entries

    def get(self, key: str) -> Optional[Any]:
        state = self.ledger.snapshot()
        entry = state.cache.get(key)
        if entry is None:
            return None
        return entry.value

    def put(self, key: str, value: Any) -> None:
        with self.ledger.transaction() as state:
            if key not in state.cache:
                # Simple eviction: remove first entries
                while len(state.cache) >= self.max_entries:
                    oldest = next(iter(state.cache))
                    del state.cache[oldest]
            state.cache[key] = CacheEntry(inserted_at=self.ledger.clock(), value=value)

    def keys(self) -> list[str]:
        return list(self.ledger.snapshot().cache)

    def clear(self) -> None:
        with self.ledger.transaction() as state:
            state.cache.clear()

    def __contains__(self, key: str) -> bool:
        return key in self.ledger.snapshot().cache

    def __len__(self) -> int:
        return len(self.ledger.snapshot().cache)
