"""
HelpHive client.

Wires one usage ledger, tracker, cache, provider and metrics collector
into a RequestPipeline and a Prioritizer so both draw on the same quota
and cache.
"""

from typing import Any, Mapping, Optional, Sequence

from helphive.cache import ResponseCache
from helphive.config import Settings
from helphive.ledger import UsageLedger
from helphive.metrics import MetricsCollector
from helphive.models import InputKind, NormalizedRequest
from helphive.pipeline import RequestPipeline
from helphive.prioritizer import Prioritizer
from helphive.providers import UpstreamProvider, provider_from_settings
from helphive.storage import InMemoryUsageStore, SQLiteUsageStore, UsageStore
from helphive.usage import QuotaConfig, UsageTracker
from helphive.validation import validate_limits


class HelpHive:
    """
    Entry point for the request-normalization core.

    Example:
        ```python
        hive = HelpHive(Settings.from_env())
        request = hive.process("Need a ride to the clinic tomorrow")
        feed = hive.rank(open_tasks)
        print(hive.usage())
        ```
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        provider: Optional[UpstreamProvider] = None,
        store: Optional[UsageStore] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.settings = settings or Settings()
        validate_limits(self.settings.max_calls_per_hour, self.settings.max_calls_per_day)

        if store is None:
            store = (
                SQLiteUsageStore(self.settings.db_path)
                if self.settings.db_path
                else InMemoryUsageStore()
            )
        self.store = store
        self.ledger = UsageLedger(store)
        self.tracker = UsageTracker(
            self.ledger,
            QuotaConfig(
                max_calls_per_hour=self.settings.max_calls_per_hour,
                max_calls_per_day=self.settings.max_calls_per_day,
            ),
        )
        self.cache = ResponseCache(self.ledger, self.settings.cache_max_entries)
        self.provider = provider or provider_from_settings(self.settings)
        self.metrics = metrics or MetricsCollector(enable_logging=False)

        components = dict(
            settings=self.settings,
            provider=self.provider,
            ledger=self.ledger,
            tracker=self.tracker,
            cache=self.cache,
            metrics=self.metrics,
        )
        self.pipeline = RequestPipeline(**components)
        self.prioritizer = Prioritizer(**components)

    def process(self, text: str, kind: str = InputKind.TEXT.value) -> NormalizedRequest:
        """Normalize a help request. See RequestPipeline.process."""
        return self.pipeline.process(text, kind)

    def rank(self, tasks: Sequence[Mapping[str, Any]]) -> list:
        """Rank open tasks. See Prioritizer.rank."""
        return self.prioritizer.rank(tasks)

    def usage(self) -> dict:
        """Quota usage and cache size."""
        return {
            **self.tracker.get_stats(),
            "local_only": not self.settings.has_credential,
        }

    def reset_usage(self) -> None:
        """Drop counters and cache; state is recreated on next access."""
        self.ledger.reset()

    def close(self) -> None:
        if isinstance(self.store, SQLiteUsageStore):
            self.store.close()
