"""
Input validation for HelpHive.

Caller-input errors are the only failures the pipelines propagate.
"""

from typing import Any, Mapping, Sequence

from helphive.models import InputKind, task_id


class ValidationError(ValueError):
    """Raised when input validation fails."""
    pass


MAX_INPUT_LENGTH = 20_000  # characters


def validate_input(text: Any) -> None:
    """
    Validate requester text.

    Raises:
        ValidationError: If the text is not a non-empty string
    """
    if not isinstance(text, str):
        raise ValidationError(f"Input must be a string, got {type(text).__name__}")

    if not text.strip():
        raise ValidationError("Input cannot be empty or whitespace-only")

    if len(text) > MAX_INPUT_LENGTH:
        raise ValidationError(
            f"Input too long: {len(text):,} characters (max: {MAX_INPUT_LENGTH:,})"
        )


def validate_kind(kind: Any) -> InputKind:
    """
    Validate the input kind.

    Returns:
        The matching InputKind

    Raises:
        ValidationError: If kind is not a known input kind
    """
    try:
        return InputKind(kind)
    except ValueError:
        valid = ", ".join(k.value for k in InputKind)
        raise ValidationError(f"Unknown input kind '{kind}' (expected one of: {valid})")


def validate_tasks(tasks: Any) -> None:
    """
    Validate a task list for ranking.

    Raises:
        ValidationError: If tasks is not a list of mappings
    """
    if not isinstance(tasks, Sequence) or isinstance(tasks, (str, bytes)):
        raise ValidationError(f"Tasks must be a list, got {type(tasks).__name__}")

    for index, task in enumerate(tasks):
        if not isinstance(task, Mapping):
            raise ValidationError(
                f"Task at index {index} must be a mapping, got {type(task).__name__}"
            )
        if task_id(task) is None:
            raise ValidationError(f"Task at index {index} has no 'requestId' or 'id'")


def validate_limits(max_calls_per_hour: int, max_calls_per_day: int) -> None:
    """
    Validate quota ceilings.

    Raises:
        ValidationError: If a ceiling is not a positive integer
    """
    for name, value in (
        ("max_calls_per_hour", max_calls_per_hour),
        ("max_calls_per_day", max_calls_per_day),
    ):
        if not isinstance(value, int) or isinstance(value, bool):
            raise ValidationError(f"{name} must be an integer, got {type(value).__name__}")
        if value <= 0:
            raise ValidationError(f"{name} must be positive, got {value}")
