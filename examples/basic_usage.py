"""
Basic usage examples for HelpHive.

Demonstrates offline normalization, scripted upstream replies, task
ranking and quota handling.
"""

import json

from helphive import HelpHive, MockProvider, Settings, ValidationError


def _show(request) -> None:
    print(f"Title:         {request.title}")
    print(f"Description:   {request.description}")
    print(f"Category:      {request.category.value}")
    print(f"Urgency:       {request.urgency_level.value}")
    print(f"People needed: {request.people_needed}")
    print(f"Task types:    {', '.join(request.task_types) or '-'}")


def example_offline():
    """Normalization with no API key."""
    print("=" * 60)
    print("Example 1: Offline Normalization")
    print("=" * 60)

    # No key configured, so every call is served locally
    hive = HelpHive()

    request = hive.process("please help me move lots of furniture from my living room asap")
    _show(request)
    print()


def example_upstream():
    """Normalization with scripted upstream replies."""
    print("=" * 60)
    print("Example 2: Upstream Normalization")
    print("=" * 60)

    reply = json.dumps({
        "title": "Clinic ride",
        "description": "drive me to the clinic tomorrow at 10am, appt is on the 2nd floor",
        "category": "transportation",
        "urgencyLevel": "medium",
        "peopleNeeded": 1,
        "taskTypes": ["medical transport", "clinic appointment"],
    })
    provider = MockProvider([reply])
    hive = HelpHive(Settings(api_key="demo-key"), provider=provider)

    request = hive.process("I need a ride to the clinic tomorrow morning", kind="voice")
    _show(request)

    # Same input again is answered from the cache
    hive.process("I need a ride to the clinic tomorrow morning", kind="voice")
    print(f"\nUpstream calls: {provider.call_count}")
    print()


def example_ranking():
    """Ranking open tasks for a volunteer."""
    print("=" * 60)
    print("Example 3: Task Ranking")
    print("=" * 60)

    tasks = [
        {"id": "t1", "title": "Grocery run", "urgencyLevel": "Medium", "distance": 2.1},
        {"id": "t2", "title": "Fell and cannot get up", "urgencyLevel": "Urgent", "distance": 0.8},
        {"id": "t3", "title": "Afternoon chat", "urgencyLevel": "Non-Urgent"},
    ]
    provider = MockProvider(['Here you go: ["t2", "t1", "t3"]'])
    hive = HelpHive(Settings(api_key="demo-key"), provider=provider)

    for task in hive.rank(tasks):
        print(f"  {task['id']}: {task['title']}")
    print()


def example_quota():
    """Falling back once the hourly ceiling is reached."""
    print("=" * 60)
    print("Example 4: Quota Fallback")
    print("=" * 60)

    provider = MockProvider(['{"title": "First"}'])
    hive = HelpHive(
        Settings(api_key="demo-key", max_calls_per_hour=1, max_calls_per_day=10),
        provider=provider,
    )

    print(f"First:  {hive.process('input1').title}")
    print(f"Second: {hive.process('input2').title}")  # served locally
    print(f"Usage:  {hive.usage()}")
    print()


def example_error_handling():
    """Handling validation errors."""
    print("=" * 60)
    print("Example 5: Error Handling")
    print("=" * 60)

    hive = HelpHive()

    try:
        hive.process("   ")
    except ValidationError as e:
        print(f"Validation error caught: {e}")

    try:
        hive.process("walk my dog", kind="video")
    except ValidationError as e:
        print(f"Validation error caught: {e}")

    print()


def example_with_real_api():
    """Using the Anthropic API."""
    print("=" * 60)
    print("Example 6: Real API Usage")
    print("=" * 60)

    # Requires HELPHIVE_API_KEY or ANTHROPIC_API_KEY
    hive = HelpHive(Settings.from_env())
    _show(hive.process("Can someone pick up my prescription from the pharmacy today?"))
    print()


if __name__ == "__main__":
    example_offline()
    example_upstream()
    example_ranking()
    example_quota()
    example_error_handling()

    # Uncomment to call the real service (requires an API key)
    # example_with_real_api()

    print("All examples completed!")
