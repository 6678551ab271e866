"""
HelpHive - turn free-form help requests into structured, classified ones.

Simple usage:
    from helphive import HelpHive, Settings

    hive = HelpHive(Settings.from_env())
    request = hive.process("Need two volunteers to carry a sofa tomorrow")
    print(request.title)          # short label, at most 60 characters
    print(request.urgency_level)  # UrgencyLevel.URGENT
    print(request.people_needed)  # 2

Without an API key every call is served by the offline normalizer:
    hive = HelpHive()
    hive.process("please help me move lots of furniture")

Ranking open tasks for a volunteer:
    feed = hive.rank(open_tasks)  # same order back if ranking is unavailable

Heuristics on their own:
    from helphive import make_concise_title, paraphrase_description
"""

from helphive.client import HelpHive
from helphive.config import Settings, get_models, set_models
from helphive.models import (
    MULTIPLE,
    Category,
    UrgencyLevel,
    InputKind,
    NormalizedRequest,
    RequestDraft,
    TaskSummary,
)
from helphive.pipeline import RequestPipeline
from helphive.prioritizer import Prioritizer
from helphive.usage import UsageTracker, QuotaConfig
from helphive.cache import ResponseCache, request_cache_key, prioritization_cache_key
from helphive.ledger import UsageLedger
from helphive.parser import (
    ParseStatus,
    ParseResult,
    parse_request_response,
    parse_priority_response,
)
from helphive.normalizer import (
    normalize,
    make_concise_title,
    paraphrase_description,
    infer_urgency,
    infer_people_needed,
)
from helphive.providers import (
    UpstreamRequest,
    UpstreamResult,
    UpstreamProvider,
    AnthropicProvider,
    OpenAIProvider,
    MockProvider,
)
from helphive.storage import InMemoryUsageStore, SQLiteUsageStore
from helphive.metrics import MetricsCollector
from helphive.validation import ValidationError


__version__ = "1.0.0"
__all__ = [
    # Entry points
    "HelpHive",
    "RequestPipeline",
    "Prioritizer",
    "Settings",
    "get_models",
    "set_models",
    # Models
    "MULTIPLE",
    "Category",
    "UrgencyLevel",
    "InputKind",
    "NormalizedRequest",
    "RequestDraft",
    "TaskSummary",
    # Quota and cache
    "UsageTracker",
    "QuotaConfig",
    "ResponseCache",
    "request_cache_key",
    "prioritization_cache_key",
    "UsageLedger",
    "InMemoryUsageStore",
    "SQLiteUsageStore",
    # Parsing and normalization
    "ParseStatus",
    "ParseResult",
    "parse_request_response",
    "parse_priority_response",
    "normalize",
    "make_concise_title",
    "paraphrase_description",
    "infer_urgency",
    "infer_people_needed",
    # Providers
    "UpstreamRequest",
    "UpstreamResult",
    "UpstreamProvider",
    "AnthropicProvider",
    "OpenAIProvider",
    "MockProvider",
    # Observability and errors
    "MetricsCollector",
    "ValidationError",
]
