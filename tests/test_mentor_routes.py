import json

import httpx
import pytest
from fastapi.testclient import TestClient

from gohive.deps import get_completion_client, get_redis
from gohive.routes import create_mentor_app
from gohive.services.completion_service import CompletionClient
from tests.utils import bearer, chat_completion, issue_token


class FakeProvider:
    def __init__(self, *responses: httpx.Response):
        self.responses = list(responses)
        self.payloads: list[dict] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.payloads.append(json.loads(request.content))
        return self.responses.pop(0)


@pytest.fixture()
def provider():
    return FakeProvider()


@pytest.fixture()
def client(fake_redis, provider):
    app = create_mentor_app()

    async def _completions():
        transport = httpx.MockTransport(provider)
        async with httpx.AsyncClient(transport=transport, base_url="https://llm.local/v1") as http:
            yield CompletionClient(http, api_key="sk-test", model="gpt-4.1", temperature=0.7)

    app.dependency_overrides[get_redis] = lambda: fake_redis
    app.dependency_overrides[get_completion_client] = _completions
    with TestClient(app) as test_client:
        yield test_client


def test_health(client):
    assert client.get("/health").json() == {"status": "ok", "service": "mentor"}


def test_mentor_requires_token(client):
    resp = client.post("/api/generate-goal", json={"message": "hi"})

    assert resp.status_code == 401
    assert resp.json() == {"error": "No token provided"}


def test_goal_conversation_until_summary(client, provider, fake_redis):
    token = issue_token(fake_redis, "user-1")
    provider.responses = [
        httpx.Response(200, json=chat_completion("What's one challenge you face?")),
        httpx.Response(
            200,
            json=chat_completion(
                "**Goal Description:** Learn guitar\n\n**Point A:** Beginner\n\n"
                "**Point B:** Play a song\n\n**Steps:** Buy guitar; Practice\n\n"
                "**Tips:** Enjoy it"
            ),
        ),
    ]

    first = client.post("/api/generate-goal", json={"message": "guitar"}, headers=bearer(token))
    second = client.post("/api/generate-goal", json={"message": "time"}, headers=bearer(token))

    assert first.status_code == 200
    assert first.json() == {"message": "What's one challenge you face?"}
    assert second.status_code == 200
    body = second.json()
    assert body["goalData"] == {
        "description": "Learn guitar",
        "pointA": "Beginner",
        "pointB": "Play a song",
        "steps": ["Buy guitar", "Practice"],
        "tips": ["Enjoy it"],
    }
    assert "missingFields" not in body
    assert provider.payloads[1]["model"] == "gpt-4.1"
    assert provider.payloads[1]["max_tokens"] == 500
    assert len(provider.payloads[1]["messages"]) == 5
    assert len(client.app.state.conversation_store) == 0


def test_event_summary_response_shape(client, provider, fake_redis):
    token = issue_token(fake_redis, "user-1")
    provider.responses = [
        httpx.Response(
            200,
            json=chat_completion("Description: Picnic\nDate and Time: 2025-06-01T12:00:00Z"),
        )
    ]

    resp = client.post("/api/generate-event", json={"message": "picnic"}, headers=bearer(token))

    assert resp.status_code == 200
    assert resp.json()["status"] == "Event generated"
    assert resp.json()["event"] == {"description": "Picnic", "date_time": "2025-06-01T12:00:00Z"}
    assert provider.payloads[0]["max_tokens"] == 300


def test_missing_message_is_rejected(client, provider, fake_redis):
    token = issue_token(fake_redis, "user-1")

    resp = client.post("/api/generate-goal", json={}, headers=bearer(token))

    assert resp.status_code == 400
    assert resp.json() == {"error": "user_id and message are required"}
    assert provider.payloads == []


@pytest.mark.parametrize(
    "status, expected_status, expected_error",
    [
        (400, 400, "Invalid OpenAI model or request"),
        (429, 429, "OpenAI API rate limit exceeded"),
        (500, 500, "Internal server error"),
    ],
)
def test_provider_errors_are_mapped(
    client, provider, fake_redis, status, expected_status, expected_error
):
    token = issue_token(fake_redis, "user-1")
    provider.responses = [httpx.Response(status, json={"error": {"message": "boom"}})]

    resp = client.post("/api/generate-event", json={"message": "x"}, headers=bearer(token))

    assert resp.status_code == expected_status
    assert resp.json() == {"error": expected_error}
