"""Global configuration for HelpHive."""

from __future__ import annotations

import copy
import json
import os
from dataclasses import dataclass, field
from typing import Dict, Any, Optional


DEFAULT_MODELS: Dict[str, str] = {
    "request": "claude-sonnet-4-20250514",
    "prioritize": "claude-3-sonnet-20240229",
}

DEFAULT_MAX_TOKENS: Dict[str, int] = {
    "request": 1024,
    "prioritize": 512,
}

DEFAULT_MAX_CALLS_PER_HOUR = 10
DEFAULT_MAX_CALLS_PER_DAY = 100
DEFAULT_CACHE_MAX_ENTRIES = 50
DEFAULT_TIMEOUT_SECONDS = 30.0

PROVIDERS = ("anthropic", "openai", "mock")

_models: Dict[str, str] = copy.deepcopy(DEFAULT_MODELS)


def _parse_json_env(var_name: str) -> Dict[str, Any] | None:
    value = os.getenv(var_name)
    if not value:
        return None
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError:
        return None
    if not isinstance(parsed, dict):
        return None
    return parsed


def _parse_int_env(var_name: str, default: int) -> int:
    value = os.getenv(var_name, "").strip()
    try:
        parsed = int(value)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _parse_float_env(var_name: str, default: float) -> float:
    value = os.getenv(var_name, "").strip()
    try:
        parsed = float(value)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def get_models() -> Dict[str, str]:
    """Return model configuration, with optional env override."""
    parsed = _parse_json_env("HELPHIVE_MODELS_JSON")
    if parsed:
        merged = dict(_models)
        merged.update({k: str(v) for k, v in parsed.items()})
        return merged
    return _models


def set_models(*, request: str | None = None, prioritize: str | None = None) -> None:
    """Set model defaults at runtime."""
    global _models
    updated = copy.deepcopy(_models)
    if request:
        updated["request"] = request
    if prioritize:
        updated["prioritize"] = prioritize
    _models = updated


@dataclass
class Settings:
    """
    Externally supplied configuration.

    A missing ``api_key`` is a valid configuration: every operation then
    runs in local-only mode.
    """
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    provider: str = "anthropic"
    max_calls_per_hour: int = DEFAULT_MAX_CALLS_PER_HOUR
    max_calls_per_day: int = DEFAULT_MAX_CALLS_PER_DAY
    cache_max_entries: int = DEFAULT_CACHE_MAX_ENTRIES
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    db_path: Optional[str] = None
    models: Dict[str, str] = field(default_factory=lambda: dict(get_models()))

    @property
    def has_credential(self) -> bool:
        return bool(self.api_key)

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from ``HELPHIVE_*`` environment variables."""
        api_key = (
            os.getenv("HELPHIVE_API_KEY", "").strip()
            or os.getenv("ANTHROPIC_API_KEY", "").strip()
            or None
        )
        provider = os.getenv("HELPHIVE_PROVIDER", "anthropic").strip().lower()
        if provider not in PROVIDERS:
            raise ValueError(f"HELPHIVE_PROVIDER must be one of {PROVIDERS}, got '{provider}'")

        return cls(
            api_key=api_key,
            base_url=os.getenv("HELPHIVE_API_URL", "").strip() or None,
            provider=provider,
            max_calls_per_hour=_parse_int_env(
                "HELPHIVE_MAX_CALLS_PER_HOUR", DEFAULT_MAX_CALLS_PER_HOUR
            ),
            max_calls_per_day=_parse_int_env(
                "HELPHIVE_MAX_CALLS_PER_DAY", DEFAULT_MAX_CALLS_PER_DAY
            ),
            cache_max_entries=_parse_int_env(
                "HELPHIVE_CACHE_MAX_ENTRIES", DEFAULT_CACHE_MAX_ENTRIES
            ),
            timeout_seconds=_parse_float_env(
                "HELPHIVE_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS
            ),
            db_path=os.getenv("HELPHIVE_DB_PATH", "").strip() or None,
            models=dict(get_models()),
        )
