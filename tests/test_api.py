"""Tests for the HTTP API."""

import json

import pytest
from fastapi.testclient import TestClient

from api.main import app, get_hive
from helphive import HelpHive, MockProvider, Settings


REQUEST_REPLY = json.dumps({
    "title": "Clinic ride",
    "description": "Drive me to the clinic tomorrow morning",
    "category": "transportation",
    "urgencyLevel": "medium",
    "peopleNeeded": 1,
    "taskTypes": ["medical transport"],
})


@pytest.fixture
def provider():
    def reply(request):
        if request.user_prompt.startswith("Prioritize"):
            return '["b", "a"]'
        return REQUEST_REPLY
    return MockProvider(reply)


@pytest.fixture
def client(provider, monkeypatch):
    monkeypatch.delenv("HELPHIVE_SERVICE_KEY", raising=False)
    hive = HelpHive(Settings(api_key="test-key"), provider=provider)
    app.dependency_overrides[get_hive] = lambda: hive
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestApi:
    """Test the HTTP endpoints."""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["local_only"] is False

    def test_normalize(self, client):
        response = client.post(
            "/requests/normalize",
            json={"input": "I need a ride to the clinic tomorrow", "kind": "voice"},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["title"] == "Clinic ride"
        assert body["category"] == "transportation"
        assert body["urgencyLevel"] == "Urgent"
        assert body["peopleNeeded"] == 1
        assert body["taskTypes"] == ["medical transport"]

    def test_normalize_empty_input(self, client):
        response = client.post("/requests/normalize", json={"input": ""})
        assert response.status_code == 422

    def test_normalize_blank_input(self, client):
        response = client.post("/requests/normalize", json={"input": "   "})
        assert response.status_code == 400

    def test_normalize_unknown_kind(self, client):
        response = client.post("/requests/normalize", json={"input": "hi", "kind": "video"})
        assert response.status_code == 422

    def test_prioritize(self, client):
        response = client.post(
            "/tasks/prioritize",
            json={"tasks": [{"id": "a", "title": "Chat"}, {"id": "b", "title": "Fall"}]},
        )
        assert response.status_code == 200
        assert [t["id"] for t in response.json()["tasks"]] == ["b", "a"]

    def test_prioritize_task_without_id(self, client):
        response = client.post("/tasks/prioritize", json={"tasks": [{"title": "Chat"}]})
        assert response.status_code == 400

    def test_usage_and_reset(self, client):
        client.post("/requests/normalize", json={"input": "ride please"})
        assert client.get("/usage").json()["calls_this_hour"] == 1

        response = client.post("/usage/reset")
        assert response.status_code == 200
        assert response.json()["calls_this_hour"] == 0

    def test_service_key_required(self, client, monkeypatch):
        monkeypatch.setenv("HELPHIVE_SERVICE_KEY", "secret")

        assert client.get("/usage").status_code == 401
        assert client.get("/usage", headers={"X-API-Key": "wrong"}).status_code == 401
        assert client.get("/usage", headers={"X-API-Key": "secret"}).status_code == 200
        # Health stays open
        assert client.get("/health").status_code == 200
