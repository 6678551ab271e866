"""
Task prioritization for HelpHive.

Ranks open tasks for a volunteer with the same upstream service, cache
and quota pool as the request pipeline. Keeping the input order is the
fallback for every failure.
"""

import logging
from typing import Any, Mapping, Optional, Sequence

from helphive.cache import ResponseCache, prioritization_cache_key
from helphive.config import DEFAULT_MAX_TOKENS, Settings
from helphive.ledger import UsageLedger
from helphive.metrics import MetricsCollector
from helphive.models import TaskSummary, task_id
from helphive.parser import parse_priority_response
from helphive.prompts import PRIORITIZE_SYSTEM_PROMPT, build_prioritize_prompt
from helphive.providers import UpstreamProvider, UpstreamRequest, provider_from_settings
from helphive.usage import QuotaConfig, UsageTracker
from helphive.validation import validate_tasks


OPERATION = "prioritize"

logger = logging.getLogger(__name__)

Task = Mapping[str, Any]


def resolve_order(tasks: Sequence[Task], ordered_ids: Sequence[Any]) -> tuple[list[Task], list[Any]]:
    """
    Map ranked ids back to task objects.

    Ids that match no task, and repeated ids, are dropped. Tasks the ranking
    omits are not appended.

    Returns:
        (ordered tasks, ids that resolved)
    """
    by_id: dict[Any, Task] = {}
    by_str: dict[str, Task] = {}
    for task in tasks:
        tid = task_id(task)
        by_id.setdefault(tid, task)
        by_str.setdefault(str(tid), task)

    ordered: list[Task] = []
    resolved_ids: list[Any] = []
    seen: set[str] = set()
    for raw_id in ordered_ids:
        try:
            task = by_id.get(raw_id)
        except TypeError:
            task = None
        if task is None:
            task = by_str.get(str(raw_id))
        if task is None:
            continue
        canonical = str(task_id(task))
        if canonical in seen:
            continue
        seen.add(canonical)
        ordered.append(task)
        resolved_ids.append(task_id(task))
    return ordered, resolved_ids


class Prioritizer:
    """
    Orders a batch of open tasks.

    Example:
        ```python
        prioritizer = Prioritizer(settings, ledger=pipeline.ledger)
        feed = prioritizer.rank(open_tasks)
        ```
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        provider: Optional[UpstreamProvider] = None,
        ledger: Optional[UsageLedger] = None,
        tracker: Optional[UsageTracker] = None,
        cache: Optional[ResponseCache] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.settings = settings or Settings()
        self.provider = provider or provider_from_settings(self.settings)
        self.ledger = ledger or UsageLedger()
        self.tracker = tracker or UsageTracker(
            self.ledger,
            QuotaConfig(
                max_calls_per_hour=self.settings.max_calls_per_hour,
                max_calls_per_day=self.settings.max_calls_per_day,
            ),
        )
        self.cache = cache or ResponseCache(self.ledger, self.settings.cache_max_entries)
        self.metrics = metrics or MetricsCollector(enable_logging=False)

    def rank(self, tasks: Sequence[Task]) -> list[Task]:
        """
        Rank tasks by priority.

        Args:
            tasks: Task mappings carrying ``requestId`` or ``id``, plus
                ``title``, ``urgencyLevel``, ``category``, ``distance`` and
                ``createdAt`` where known.

        Returns:
            The tasks in upstream priority order, or the input order when
            ranking is unavailable.

        Raises:
            ValidationError: If tasks is not a list of task mappings.
        """
        validate_tasks(tasks)
        tasks = list(tasks)

        if not tasks:
            return tasks
        if not self.settings.has_credential:
            self.metrics.record_fallback(OPERATION, "no_credential", count=len(tasks))
            return tasks

        summaries = [TaskSummary.from_task(t) for t in tasks]
        key = prioritization_cache_key(summaries)

        cached = self.cache.get(key)
        if isinstance(cached, list):
            self.metrics.record_cache_hit(OPERATION, count=len(tasks))
            ordered, _ = resolve_order(tasks, cached)
            return ordered

        if self.tracker.check_quota():
            logger.warning("Upstream quota exceeded - returning original task order")
            self.metrics.record_fallback(OPERATION, "quota_exceeded", count=len(tasks))
            return tasks

        request = UpstreamRequest(
            model=self.settings.models["prioritize"],
            max_tokens=DEFAULT_MAX_TOKENS["prioritize"],
            system_prompt=PRIORITIZE_SYSTEM_PROMPT,
            user_prompt=build_prioritize_prompt(summaries),
        )
        logger.debug("Calling upstream ranker: model=%s count=%d", request.model, len(tasks))
        result = self.provider.complete(request)

        if not result.ok:
            self.metrics.record_error(OPERATION, result.error or "", result.http_status)
            return tasks

        self.tracker.record_call()

        parsed = parse_priority_response(result.text)
        if not parsed.ok:
            logger.warning("Could not parse ranking reply - returning original task order")
            self.metrics.record_fallback(OPERATION, "unparseable", count=len(tasks))
            return tasks

        ordered, resolved_ids = resolve_order(tasks, parsed.record)
        if len(ordered) < len(tasks):
            logger.info(
                "Ranking omitted %d of %d tasks", len(tasks) - len(ordered), len(tasks)
            )
        self.cache.put(key, resolved_ids)
        self.metrics.record_upstream(OPERATION, result.latency_ms, parsed.status.value)
        return ordered
