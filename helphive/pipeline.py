"""
Request pipeline for HelpHive.

Turns free-form requester text into a NormalizedRequest:
credential check -> cache lookup -> quota check -> upstream call ->
parse -> normalize -> cache write -> usage increment.

Every failure after input validation degrades to a locally normalized
draft, so ``process`` always returns a usable request.
"""

import logging
from typing import Optional

from helphive.cache import ResponseCache, request_cache_key
from helphive.config import DEFAULT_MAX_TOKENS, Settings
from helphive.ledger import UsageLedger
from helphive.metrics import MetricsCollector
from helphive.models import InputKind, NormalizedRequest, RequestDraft
from helphive.normalizer import normalize
from helphive.parser import ParseStatus, parse_request_response
from helphive.prompts import REQUEST_SYSTEM_PROMPT, build_request_prompt
from helphive.providers import UpstreamProvider, UpstreamRequest, provider_from_settings
from helphive.usage import QuotaConfig, UsageTracker
from helphive.validation import validate_input, validate_kind


OPERATION = "normalize"

logger = logging.getLogger(__name__)


class RequestPipeline:
    """
    Normalizes one help request at a time.

    Example:
        ```python
        pipeline = RequestPipeline(Settings.from_env())
        request = pipeline.process("Need two volunteers to carry a sofa")
        print(request.title, request.people_needed)
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
        """
        Initialize pipeline.

        Args:
            settings: Configuration. Uses defaults (local-only) if not provided.
            provider: Upstream provider. Built from settings if not provided.
            ledger: Shared usage/cache state. A private in-memory ledger if not provided.
            tracker: Usage tracker over ``ledger``.
            cache: Response cache over ``ledger``.
            metrics: Metrics collector.
        """
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

    def process(self, text: str, kind: str = InputKind.TEXT.value) -> NormalizedRequest:
        """
        Normalize a help request.

        Args:
            text: The requester's text (typed, transcribed or described).
            kind: One of "text", "voice", "photo".

        Returns:
            A NormalizedRequest.

        Raises:
            ValidationError: If the text is empty or the kind is unknown.
        """
        validate_input(text)
        kind = validate_kind(kind).value

        if not self.settings.has_credential:
            logger.warning("Upstream API key not configured - using local normalization")
            return self._local(text, "no_credential")

        key = request_cache_key(text, kind)
        cached = self._cached(key)
        if cached is not None:
            self.metrics.record_cache_hit(OPERATION)
            return cached

        if self.tracker.check_quota():
            logger.warning("Upstream quota exceeded - using local normalization")
            return self._local(text, "quota_exceeded")

        request = UpstreamRequest(
            model=self.settings.models["request"],
            max_tokens=DEFAULT_MAX_TOKENS["request"],
            system_prompt=REQUEST_SYSTEM_PROMPT,
            user_prompt=build_request_prompt(text, kind),
        )
        logger.debug(
            "Calling upstream: model=%s kind=%s input_sample=%r",
            request.model,
            kind,
            text[:120],
        )
        result = self.provider.complete(request)

        if not result.ok:
            self.metrics.record_error(OPERATION, result.error or "", result.http_status)
            return self._local(text, "upstream_error")

        # Count only successful round trips
        self.tracker.record_call()

        parsed = parse_request_response(result.text, text)
        if parsed.status != ParseStatus.WELL_FORMED:
            logger.info(
                "Upstream reply %s; missing fields: %s",
                parsed.status.value,
                ", ".join(parsed.missing_fields) or "none",
            )

        normalized = normalize(parsed.record, text)
        self.cache.put(key, normalized.to_dict())
        self.metrics.record_upstream(OPERATION, result.latency_ms, parsed.status.value)
        return normalized

    def _cached(self, key: str) -> Optional[NormalizedRequest]:
        value = self.cache.get(key)
        if value is None:
            return None
        try:
            return NormalizedRequest.from_dict(value)
        except (KeyError, ValueError, TypeError) as e:
            logger.warning("Ignoring malformed cache entry: %s", e)
            return None

    def _local(self, text: str, reason: str) -> NormalizedRequest:
        self.metrics.record_fallback(OPERATION, reason)
        return normalize(RequestDraft.local(text), text)
