"""Tests for upstream reply parsing."""

import json

import pytest

from helphive.models import MULTIPLE
from helphive.parser import (
    ParseStatus,
    parse_people_value,
    parse_priority_response,
    parse_request_response,
)


FULL_REPLY = {
    "title": "Carry groceries upstairs",
    "description": "Help carrying grocery bags to the third floor.",
    "category": "shopping",
    "urgencyLevel": "medium",
    "peopleNeeded": 1,
    "taskTypes": ["grocery shopping", "carrying bags"],
}


class TestRequestParsing:
    """Test tiered recovery of request drafts."""

    def test_well_formed_json(self):
        """A complete JSON object wrapped in prose is parsed directly."""
        text = "Sure! Here is the result:\n" + json.dumps(FULL_REPLY) + "\nLet me know."
        result = parse_request_response(text, "original")

        assert result.status == ParseStatus.WELL_FORMED
        assert result.ok
        assert result.missing_fields == []
        draft = result.record
        assert draft.title == "Carry groceries upstairs"
        assert draft.description == "Help carrying grocery bags to the third floor."
        assert draft.category == "shopping"
        assert draft.urgency_level == "medium"
        assert draft.people_needed == 1
        assert draft.task_types == ["grocery shopping", "carrying bags"]

    def test_json_with_missing_keys(self):
        """Missing keys are defaulted and reported."""
        text = json.dumps({"title": "Ride", "category": "transportation", "peopleNeeded": "multiple"})
        result = parse_request_response(text, "need a ride")

        assert result.status == ParseStatus.PARTIALLY_RECOVERED
        assert set(result.missing_fields) == {"description", "urgencyLevel", "taskTypes"}
        assert result.record.people_needed == MULTIPLE
        assert result.record.description == "need a ride"
        assert result.record.urgency_level == "medium"
        assert result.record.task_types == []

    def test_empty_description_uses_input(self):
        """An empty parsed description is replaced by the original input."""
        reply = dict(FULL_REPLY, description="")
        result = parse_request_response(json.dumps(reply), "original words")
        assert result.record.description == "original words"

    def test_regex_fallback(self):
        """Fields are recovered one by one from non-JSON text."""
        text = (
            "title: Grocery run\n"
            "category: Shopping\n"
            "urgencyLevel: high\n"
            "peopleNeeded: multiple\n"
            'taskTypes: ["shopping", "carrying"]\n'
        )
        result = parse_request_response(text, "get my groceries")

        assert result.status == ParseStatus.PARTIALLY_RECOVERED
        assert result.missing_fields == ["description"]
        draft = result.record
        assert draft.title == "Grocery run"
        assert draft.category == "shopping"
        assert draft.urgency_level == "high"
        assert draft.people_needed == MULTIPLE
        assert draft.task_types == ["shopping", "carrying"]
        assert draft.description == "get my groceries"

    def test_regex_fallback_on_truncated_json(self):
        """A reply cut off before its closing brace still yields fields."""
        text = '{"title": "Ride", "category": "transportation", "peopleNeeded": 2, "taskTypes": ["driving", "errands",]'
        result = parse_request_response(text, "drive me")

        assert result.status == ParseStatus.PARTIALLY_RECOVERED
        assert result.record.title == "Ride"
        assert result.record.category == "transportation"
        assert result.record.people_needed == 2
        assert result.record.task_types == ["driving", "errands"]

    def test_unparseable_people_defaults_to_one(self):
        result = parse_request_response("peopleNeeded: two", "x")
        assert result.record.people_needed == 1

    def test_unrecoverable(self):
        """Text with no recognizable fields falls back to defaults."""
        result = parse_request_response("Sorry, I can't do that.", "walk my dog")

        assert result.status == ParseStatus.UNRECOVERABLE
        assert not result.ok
        draft = result.record
        assert draft.title is None
        assert draft.category == "general"
        assert draft.urgency_level == "medium"
        assert draft.people_needed == 1
        assert draft.task_types == []
        assert draft.description == "walk my dog"

    def test_none_reply(self):
        result = parse_request_response(None, "walk my dog")
        assert result.status == ParseStatus.UNRECOVERABLE
        assert result.record.description == "walk my dog"


class TestPeopleValue:
    """Test people-needed coercion."""

    def test_values(self):
        assert parse_people_value(3) == 3
        assert parse_people_value(2.0) == 2
        assert parse_people_value("4") == 4
        assert parse_people_value('"multiple"') == MULTIPLE
        assert parse_people_value("Multiple") == MULTIPLE
        assert parse_people_value("several") == 1
        assert parse_people_value(True) == 1


class TestPriorityParsing:
    """Test ranking reply parsing."""

    def test_array_in_prose(self):
        result = parse_priority_response('Priority order: ["b", "a", "c"]')
        assert result.status == ParseStatus.WELL_FORMED
        assert result.record == ["b", "a", "c"]

    def test_numeric_ids(self):
        assert parse_priority_response("[3, 1, 2]").record == [3, 1, 2]

    def test_no_array(self):
        result = parse_priority_response("I would start with the medical request.")
        assert result.status == ParseStatus.UNRECOVERABLE
        assert result.record is None

    def test_invalid_array(self):
        assert not parse_priority_response("[not, json]").ok

    def test_array_of_objects(self):
        assert not parse_priority_response('[{"id": "a"}]').ok

    def test_empty_reply(self):
        assert not parse_priority_response(None).ok
        assert not parse_priority_response("").ok


class TestHostileReplies:
    """Test replies that strain the JSON decoder."""

    @pytest.mark.parametrize("literal", ["Infinity", "-Infinity", "NaN", "1e999"])
    def test_non_finite_people_defaults_to_one(self, literal):
        """Non-finite numbers are accepted by the decoder but not as counts."""
        text = '{"title": "Sofa", "peopleNeeded": %s}' % literal
        result = parse_request_response(text, "move my sofa")
        assert result.status == ParseStatus.PARTIALLY_RECOVERED
        assert result.record.people_needed == 1

    def test_non_finite_people_value(self):
        assert parse_people_value(float("inf")) == 1
        assert parse_people_value(float("nan")) == 1

    def test_deeply_nested_request_reply(self):
        """Nesting past the decoder's recursion limit falls through to defaults."""
        text = '{"a": ' + "[" * 100_000 + "]" * 100_000 + "}"
        result = parse_request_response(text, "walk my dog")
        assert result.status == ParseStatus.UNRECOVERABLE
        assert result.record.description == "walk my dog"

    def test_deeply_nested_task_types(self):
        text = "taskTypes: [" + "[" * 100_000 + "]" * 100_000 + "]"
        result = parse_request_response(text, "x")
        assert result.record.task_types == []

    def test_deeply_nested_priority_reply(self):
        result = parse_priority_response("[" * 100_000 + "]" * 100_000)
        assert result.status == ParseStatus.UNRECOVERABLE
        assert result.record is None
