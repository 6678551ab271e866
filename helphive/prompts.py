"""Instructions sent to the upstream text-understanding service."""

import json
from typing import Iterable

from helphive.models import TaskSummary


REQUEST_SYSTEM_PROMPT = """You parse and categorize help requests written by elderly or differently-abled people.

Read the request and return a single JSON object with the keys title, description, category, urgencyLevel, peopleNeeded and taskTypes.

title
- A short noun phrase of 2-5 words naming the core need, not a sentence.
- Leave out feelings, times and places unless they are essential.
- "Can someone help me carry my groceries up the stairs?" -> "Carry groceries upstairs"
- "I need someone to drive me to the clinic tomorrow" -> "Clinic ride"
- "My internet is not working, I don't understand the router" -> "Wi-Fi troubleshooting"

description
- A clear, polite paragraph: what help is needed, key details (when, where, constraints) and anything a volunteer should know.
- Keep the requester's meaning.

category
- One of "medical", "transportation", "shopping", "household", "companionship", "technology", "other".

urgencyLevel
- One of "low", "medium", "high", "emergency".

peopleNeeded
- 1, 2, 3, or the string "multiple" for four or more.
- Heavy lifting or moving furniture usually needs 2 or "multiple"; visits and phone calls usually need 1.

taskTypes
- An array of short task labels, e.g. ["grocery shopping", "carrying bags"] or ["medical transport", "clinic appointment"].

Return ONLY the JSON object, with no markdown and no extra text:
{
  "title": "...",
  "description": "...",
  "category": "...",
  "urgencyLevel": "...",
  "peopleNeeded": 1,
  "taskTypes": ["..."]
}"""


PRIORITIZE_SYSTEM_PROMPT = """You prioritize help requests from elderly and differently-abled people for a volunteer.

Order the tasks by urgency, proximity and need:
- Emergencies first
- Then urgent medical needs
- Then time-sensitive requests
- Prefer tasks closer to the volunteer

Return ONLY a JSON array of task ids in priority order."""


def build_request_prompt(text: str, kind: str) -> str:
    """User message for the request-understanding call."""
    return (
        f"Input type: {kind}\n\n"
        f"User request: {text}\n\n"
        "Parse this request and return the JSON object."
    )


def build_prioritize_prompt(summaries: Iterable[TaskSummary]) -> str:
    """User message for the ranking call."""
    payload = json.dumps([s.to_dict() for s in summaries], indent=2, default=str)
    return f"Prioritize these tasks:\n\n{payload}"
