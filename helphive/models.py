"""Shared data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional, Union


MULTIPLE = "multiple"

PeopleNeeded = Union[int, str]


class Category(str, Enum):
    """Help request categories."""
    MEDICAL = "medical"
    TRANSPORTATION = "transportation"
    SHOPPING = "shopping"
    HOUSEHOLD = "household"
    COMPANIONSHIP = "companionship"
    TECHNOLOGY = "technology"
    OTHER = "other"
    GENERAL = "general"


class UrgencyLevel(str, Enum):
    """Urgency labels shown to volunteers."""
    URGENT = "Urgent"
    MEDIUM = "Medium"
    NON_URGENT = "Non-Urgent"


class InputKind(str, Enum):
    """How the requester produced the text."""
    TEXT = "text"
    VOICE = "voice"  # speech transcript
    PHOTO = "photo"  # photo description


@dataclass
class RequestDraft:
    """
    Best-effort record recovered from an upstream reply.

    Fields are loosely typed: they hold whatever the upstream produced
    until the normalizer coerces them.
    """
    title: Optional[str] = None
    description: Optional[str] = None
    category: str = "general"
    urgency_level: str = "medium"
    people_needed: PeopleNeeded = 1
    task_types: list[str] = field(default_factory=list)

    @classmethod
    def local(cls, original_input: str) -> "RequestDraft":
        """Minimal draft used whenever the upstream is skipped."""
        return cls(description=original_input)


@dataclass(frozen=True)
class NormalizedRequest:
    """A structured, classified help request."""
    title: str
    description: str
    category: Category
    urgency_level: UrgencyLevel
    people_needed: PeopleNeeded
    task_types: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "category": self.category.value,
            "urgencyLevel": self.urgency_level.value,
            "peopleNeeded": self.people_needed,
            "taskTypes": list(self.task_types),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "NormalizedRequest":
        return cls(
            title=data["title"],
            description=data["description"],
            category=Category(data["category"]),
            urgency_level=UrgencyLevel(data["urgencyLevel"]),
            people_needed=data["peopleNeeded"],
            task_types=tuple(data.get("taskTypes", ())),
        )


@dataclass
class CacheEntry:
    """A cached upstream-derived result."""
    inserted_at: float
    value: Any  # NormalizedRequest dict or ordered id list


@dataclass
class UsageState:
    """Quota counters and response cache, persisted as one blob."""
    hourly_count: int
    daily_count: int
    hour_reset: float
    daily_reset: float
    cache: dict[str, CacheEntry] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "hourlyCount": self.hourly_count,
            "dailyCount": self.daily_count,
            "hourReset": self.hour_reset,
            "dailyReset": self.daily_reset,
            "cache": {
                key: {"ts": entry.inserted_at, "value": entry.value}
                for key, entry in self.cache.items()
            },
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "UsageState":
        cache = {
            key: CacheEntry(inserted_at=float(raw["ts"]), value=raw["value"])
            for key, raw in (data.get("cache") or {}).items()
        }
        return cls(
            hourly_count=int(data.get("hourlyCount") or 0),
            daily_count=int(data.get("dailyCount") or 0),
            hour_reset=float(data.get("hourReset") or 0),
            daily_reset=float(data.get("dailyReset") or 0),
            cache=cache,
        )


@dataclass(frozen=True)
class TaskSummary:
    """Projection of an open task sent to the upstream ranker."""
    id: Any
    title: Optional[str]
    urgency: Optional[str]
    category: Optional[str]
    distance: Any
    created_at: Any

    @classmethod
    def from_task(cls, task: Mapping[str, Any]) -> "TaskSummary":
        return cls(
            id=task_id(task),
            title=task.get("title"),
            urgency=task.get("urgencyLevel"),
            category=task.get("category"),
            distance=task.get("distance") or "unknown",
            created_at=task.get("createdAt"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "urgency": self.urgency,
            "category": self.category,
            "distance": self.distance,
            "createdAt": self.created_at,
        }


def task_id(task: Mapping[str, Any]) -> Any:
    """A task is identified by its request id, falling back to its document id."""
    return task.get("requestId") or task.get("id")
