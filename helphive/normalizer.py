"""
Normalization engine for HelpHive.

Deterministic, offline rules applied to every draft, whether it came from
the upstream service or was built locally. Text heuristics override the
upstream's urgency and people-needed guesses so the result does not depend
on which path produced the draft.
"""

import re
from typing import Any, Optional

from helphive.models import (
    MULTIPLE,
    Category,
    NormalizedRequest,
    PeopleNeeded,
    RequestDraft,
    UrgencyLevel,
)
from helphive.parser import parse_people_value


MAX_TITLE_LENGTH = 60
FALLBACK_TITLE = "Help Request"

# Title rules
_FILLER_PREFIX_RE = re.compile(
    r"^(?:please|can someone|could someone|i need help|help me)\b[\s,]*",
    re.IGNORECASE,
)
_MOVING_RE = re.compile(
    r"\b(?:help (?:me|us)\s+)?(?:to\s+)?(?:move|carry|lift|transport)\b",
    re.IGNORECASE,
)
_NEED_PHRASE_RE = re.compile(
    r"\b(?:need someone to|need help to|need help with)\b",
    re.IGNORECASE,
)
_SENTENCE_END_RE = re.compile(r"[.!?\n]")

# Description rules
ABBREVIATIONS: dict[str, str] = {
    "asap": "as soon as possible",
    "appt": "appointment",
    "approx": "approximately",
    "pls": "please",
    "plz": "please",
    "thx": "thanks",
}
_ABBREVIATION_RE = re.compile(
    r"\b(" + "|".join(ABBREVIATIONS) + r")\b",
    re.IGNORECASE,
)
_SENTENCE_START_RE = re.compile(r"(^|[.!?]\s+)([a-z])")

# Urgency rules, checked in order
_EMERGENCY_RE = re.compile(
    r"\b(?:emergency|911|life[- ]threat\w*|immediately|right away|right now|asap"
    r"|as soon as possible|urgent|urgently|hurry|needs immediate|need help now)\b"
)
_NEAR_TERM_RE = re.compile(
    r"\b(?:today|tonight|this morning|this afternoon|this evening|within 24"
    r"|within 48 hours|tomorrow|by end of day|soon|next few hours)\b"
)
_DEFERRED_RE = re.compile(
    r"\b(?:next week|in a week|in a few days|within a week|sometime|when you can|whenever)\b"
)

# People-needed rules, checked in order
_NUMBER_WORDS = {
    "one": 1, "two": 2, "three": 3, "four": 4, "five": 5,
    "six": 6, "seven": 7, "eight": 8, "nine": 9, "ten": 10,
}
_EXPLICIT_COUNT_RE = re.compile(
    r"\b(\d+|" + "|".join(_NUMBER_WORDS) + r")\s+"
    r"(?:people|persons?|volunteers?|helpers?|men|women)\b"
)
_GROUP_RE = re.compile(r"\b(?:several|a few|a lot|lots of|lots|many|multiple|a couple)\b")
_HEAVY_TASK_RE = re.compile(
    r"\b(?:heavy|lift|lifting|move|moving|furniture|furnit\w*|sofa|mattress|couch"
    r"|appliance|fridge|refrigerator|piano|bed|boxes|bulk)\b"
)
_INTENSITY_RE = re.compile(r"\b(?:lots|a lot|many|several)\b")
_HELP_CARRY_RE = re.compile(
    r"\b(?:help me carry|help me move|assist me carry|assist me move|need someone to carry)\b"
)


def _capitalize(text: str) -> str:
    return text[:1].upper() + text[1:]


def make_concise_title(text: Optional[str]) -> str:
    """
    Reduce text to a short label suitable for a request title.

    Example:
        >>> make_concise_title("please help me move lots of furniture")
        'Moving lots of furniture'
    """
    t = (text or "").strip()
    if not t:
        return FALLBACK_TITLE

    previous = None
    while previous != t:
        previous = t
        t = _FILLER_PREFIX_RE.sub("", t, count=1)

    t = _MOVING_RE.sub("moving", t, count=1)
    t = _NEED_PHRASE_RE.sub("", t, count=1)
    t = re.sub(r"\s{2,}", " ", t)

    first = _SENTENCE_END_RE.split(t, maxsplit=1)[0].strip()
    title = first[:MAX_TITLE_LENGTH].strip()
    if not title:
        return FALLBACK_TITLE
    return _capitalize(title)


def _expand_abbreviation(match: re.Match) -> str:
    return ABBREVIATIONS[match.group(1).lower()]


def paraphrase_description(text: Optional[str]) -> str:
    """
    Tidy a description without changing what it says.

    Collapses whitespace, expands common abbreviations, capitalizes each
    sentence and guarantees terminal punctuation.
    """
    t = (text or "").strip()
    if not t:
        return ""

    t = re.sub(r"\s+", " ", t)
    t = _ABBREVIATION_RE.sub(_expand_abbreviation, t)
    t = _SENTENCE_START_RE.sub(lambda m: m.group(1) + m.group(2).upper(), t)
    if not re.search(r"[.!?]$", t):
        t += "."
    return t.strip()


def infer_urgency(text: Optional[str], parsed_urgency: Any = "") -> UrgencyLevel:
    """
    Infer urgency from free text, falling back to the parsed label.

    Explicit emergency language wins, then near-term time phrases, then
    deferred time phrases. Only when none appear is the parsed value used.
    """
    t = (text or "").lower()
    if _EMERGENCY_RE.search(t):
        return UrgencyLevel.URGENT
    if _NEAR_TERM_RE.search(t):
        return UrgencyLevel.URGENT
    if _DEFERRED_RE.search(t):
        return UrgencyLevel.NON_URGENT

    raw = str(parsed_urgency or "").lower()
    if "emergency" in raw or "high" in raw or "urgent" in raw:
        if "non" not in raw:
            return UrgencyLevel.URGENT
    if "low" in raw or "non" in raw:
        return UrgencyLevel.NON_URGENT
    if "medium" in raw:
        return UrgencyLevel.MEDIUM
    return UrgencyLevel.MEDIUM


def infer_people_needed(text: Optional[str], parsed_people: Any = 1) -> PeopleNeeded:
    """Infer how many volunteers a request needs."""
    if parsed_people == MULTIPLE:
        return MULTIPLE
    if isinstance(parsed_people, int) and not isinstance(parsed_people, bool):
        if parsed_people > 1:
            return parsed_people

    t = (text or "").lower()

    explicit = _EXPLICIT_COUNT_RE.search(t)
    if explicit:
        num = explicit.group(1)
        if num.isdigit():
            return int(num)
        return _NUMBER_WORDS[num]

    if _GROUP_RE.search(t):
        return MULTIPLE

    if _HEAVY_TASK_RE.search(t):
        if _INTENSITY_RE.search(t):
            return MULTIPLE
        return 2

    if _HELP_CARRY_RE.search(t):
        return 2

    return 1


def _coerce_category(value: Any) -> Category:
    label = str(value or "").strip().lower()
    if not label:
        return Category.GENERAL
    try:
        return Category(label)
    except ValueError:
        return Category.OTHER


def _initial_title(draft: RequestDraft, original_input: str) -> str:
    title = (draft.title or "").strip()
    if not title:
        snippet = re.sub(r"\s+", " ", (original_input or "").strip())[:MAX_TITLE_LENGTH]
        title = _capitalize(snippet) if snippet else FALLBACK_TITLE
    if len(title) > MAX_TITLE_LENGTH:
        title = title[:MAX_TITLE_LENGTH - 3] + "..."
    return _capitalize(title)


def normalize(draft: RequestDraft, original_input: str = "") -> NormalizedRequest:
    """
    Turn a draft into a NormalizedRequest.

    Args:
        draft: Parsed or locally built draft.
        original_input: The requester's text.

    Returns:
        A new, immutable NormalizedRequest.
    """
    title = make_concise_title(_initial_title(draft, original_input))

    description = (draft.description or "").strip() or original_input or ""
    task_types = [str(t) for t in (draft.task_types or [])]
    evidence = description + " " + " ".join(task_types)

    people = parse_people_value(draft.people_needed)
    if isinstance(people, int) and people < 1:
        people = 1

    return NormalizedRequest(
        title=title,
        description=paraphrase_description(description),
        category=_coerce_category(draft.category),
        urgency_level=infer_urgency(evidence, draft.urgency_level),
        people_needed=infer_people_needed(evidence, people),
        task_types=tuple(task_types),
    )
