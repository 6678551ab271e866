"""
Parsing of upstream replies.

The upstream is asked for a single JSON object (or array, for ranking) but
replies are free text. Recovery is attempted in tiers and the result is
tagged with how much was recovered. Nothing here raises.
"""

import json
import math
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from helphive.models import MULTIPLE, RequestDraft


REQUEST_FIELDS = (
    "title",
    "description",
    "category",
    "urgencyLevel",
    "peopleNeeded",
    "taskTypes",
)


class ParseStatus(str, Enum):
    """How much of the upstream reply was recovered."""
    WELL_FORMED = "well_formed"
    PARTIALLY_RECOVERED = "partially_recovered"
    UNRECOVERABLE = "unrecoverable"


@dataclass
class ParseResult:
    """Tagged parser output."""
    status: ParseStatus
    record: Any = None
    missing_fields: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status != ParseStatus.UNRECOVERABLE


_OBJECT_RE = re.compile(r"\{[\s\S]*\}")
_ARRAY_RE = re.compile(r"\[[\s\S]*\]")

_FIELD_PATTERNS = {
    "title": re.compile(r'title["\s:]+([^",\n]+)', re.IGNORECASE),
    "category": re.compile(r'category["\s:]+([^",\n]+)', re.IGNORECASE),
    "urgencyLevel": re.compile(r'urgencyLevel["\s:]+([^",\n]+)', re.IGNORECASE),
    "peopleNeeded": re.compile(r'peopleNeeded["\s:]+([^",\n\]]+)', re.IGNORECASE),
    "taskTypes": re.compile(r'taskTypes["\s:]+\[([^\]]+)\]', re.IGNORECASE),
}

_QUOTED_RE = re.compile(r'"([^"]+)"')
_LEADING_INT_RE = re.compile(r"^[+-]?\d+")


def parse_people_value(value: Any) -> Any:
    """Coerce a people-needed value to an int or the ``multiple`` sentinel."""
    if isinstance(value, bool):
        return 1
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else 1
    text = str(value).strip().strip('"').strip().lower()
    if text == MULTIPLE:
        return MULTIPLE
    match = _LEADING_INT_RE.match(text)
    return int(match.group()) if match else 1


def _extract_task_types(inner: str) -> list[str]:
    try:
        parsed = json.loads(f"[{inner}]")
    except (ValueError, RecursionError):
        return _QUOTED_RE.findall(inner)
    return [str(item) for item in parsed]


def _draft_from_object(data: dict, original_input: str) -> RequestDraft:
    draft = RequestDraft()
    if data.get("title") is not None:
        draft.title = str(data["title"])
    if data.get("description") is not None:
        draft.description = str(data["description"])
    if data.get("category"):
        draft.category = str(data["category"])
    if data.get("urgencyLevel"):
        draft.urgency_level = str(data["urgencyLevel"])
    if data.get("peopleNeeded") is not None:
        draft.people_needed = parse_people_value(data["peopleNeeded"])
    task_types = data.get("taskTypes")
    if isinstance(task_types, list):
        draft.task_types = [str(t) for t in task_types]
    if not (draft.description or "").strip():
        draft.description = original_input
    return draft


def _parse_json_object(text: str) -> Optional[dict]:
    match = _OBJECT_RE.search(text)
    if not match:
        return None
    try:
        parsed = json.loads(match.group())
    except (ValueError, RecursionError):
        return None
    return parsed if isinstance(parsed, dict) else None


def _regex_fields(text: str) -> dict[str, Any]:
    found: dict[str, Any] = {}
    for name, pattern in _FIELD_PATTERNS.items():
        match = pattern.search(text)
        if not match:
            continue
        value = match.group(1).strip()
        if name == "peopleNeeded":
            found[name] = parse_people_value(value)
        elif name == "taskTypes":
            found[name] = _extract_task_types(value)
        elif name == "category":
            found[name] = value.lower()
        else:
            found[name] = value
    return found


def parse_request_response(text: Optional[str], original_input: str = "") -> ParseResult:
    """
    Recover a request draft from an upstream reply.

    Tiers, first success wins:
    1. Strict JSON parse of the first ``{`` through the last ``}``.
    2. Independent per-field regex search.
    3. Defaults for every field not recovered.

    The original input always stands in for an empty description.

    Args:
        text: Raw upstream reply.
        original_input: The requester's text.

    Returns:
        ParseResult whose ``record`` is a RequestDraft.
    """
    text = text or ""

    data = _parse_json_object(text)
    if data is not None:
        missing = [name for name in REQUEST_FIELDS if name not in data]
        status = ParseStatus.PARTIALLY_RECOVERED if missing else ParseStatus.WELL_FORMED
        return ParseResult(status, _draft_from_object(data, original_input), missing)

    found = _regex_fields(text)
    draft = _draft_from_object(found, original_input)
    missing = [name for name in REQUEST_FIELDS if name not in found]
    if not found:
        return ParseResult(ParseStatus.UNRECOVERABLE, draft, missing)
    return ParseResult(ParseStatus.PARTIALLY_RECOVERED, draft, missing)


def parse_priority_response(text: Optional[str]) -> ParseResult:
    """
    Recover an ordered id list from an upstream ranking reply.

    Returns:
        WELL_FORMED with the id list, or UNRECOVERABLE, meaning the caller
        keeps the original order.
    """
    match = _ARRAY_RE.search(text or "")
    if not match:
        return ParseResult(ParseStatus.UNRECOVERABLE)
    try:
        parsed = json.loads(match.group())
    except (ValueError, RecursionError):
        return ParseResult(ParseStatus.UNRECOVERABLE)
    if not isinstance(parsed, list):
        return ParseResult(ParseStatus.UNRECOVERABLE)
    if any(isinstance(item, (dict, list)) for item in parsed):
        return ParseResult(ParseStatus.UNRECOVERABLE)
    return ParseResult(ParseStatus.WELL_FORMED, parsed)
