"""
HTTP API tests using FastAPI's TestClient.

The app runs its real lifespan against a temporary SQLite file, with the
in-memory caches and an in-memory question catalog.
"""

import logging

import pytest
from fastapi.testclient import TestClient

from brainbolt.common.logger import ROOT_LOGGER_NAME, JsonFormatter, configure_logger
from brainbolt.config import load_settings
from brainbolt.main import create_app
from conftest import make_catalog


@pytest.fixture
def client(tmp_path):
    settings = load_settings(
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'api.db'}",
        CACHE_USE_REDIS=False,
    )
    app = create_app(settings, catalog=make_catalog())
    with TestClient(app) as test_client:
        yield test_client


def next_question(client, user_id="user-1", session_id=None):
    params = {"userId": user_id}
    if session_id:
        params["sessionId"] = session_id
    response = client.get("/v1/quiz/next", params=params)
    assert response.status_code == 200, response.text
    return response.json()


def submit(client, question, user_id="user-1", answer="right"):
    return client.post("/v1/quiz/answer", json={
        "userId": user_id,
        "sessionId": question["sessionId"],
        "questionId": question["questionId"],
        "answer": answer,
    })


class TestQuizEndpoints:
    """Test the quiz routes."""

    def test_next_question_shape(self, client):
        body = next_question(client)

        assert set(body) == {
            "questionId", "difficulty", "prompt", "choices", "sessionId", "currentScore", "currentStreak"
        }
        assert body["difficulty"] == 3
        assert body["currentScore"] == 0
        assert "right" in body["choices"]

    def test_answer_flow(self, client):
        question = next_question(client)

        response = submit(client, question)

        assert response.status_code == 200
        assert response.json() == {
            "correct": True,
            "newDifficulty": 3,
            "newStreak": 1,
            "scoreDelta": 30,
            "totalScore": 30,
        }
        following = next_question(client, session_id=question["sessionId"])
        assert following["currentScore"] == 30
        assert following["currentStreak"] == 1

    def test_resubmission_returns_same_body(self, client):
        question = next_question(client)

        first = submit(client, question)
        second = submit(client, question, answer="wrong-2")

        assert second.status_code == 200
        assert second.json() == first.json()

    def test_mismatch_is_conflict(self, client):
        question = next_question(client)
        question["questionId"] = "someone-else"

        response = submit(client, question)

        assert response.status_code == 409
        assert response.json()["error"] == "question_mismatch"

    def test_unknown_session_is_gone(self, client):
        response = submit(client, {"sessionId": "missing", "questionId": "q-3-0"})

        assert response.status_code == 410
        assert response.json()["error"] == "session_expired"

    def test_blank_ids_are_rejected(self, client):
        response = client.post("/v1/quiz/answer", json={
            "userId": " ", "sessionId": "s", "questionId": "q", "answer": "x"
        })

        assert response.status_code == 422
        assert response.json()["error"] == "validation_error"

    def test_missing_user_id(self, client):
        response = client.get("/v1/quiz/next")

        assert response.status_code == 422

    def test_blank_user_id(self, client):
        response = client.get("/v1/quiz/next", params={"userId": "   "})

        assert response.status_code == 422
        assert response.json()["error"] == "validation_error"


class TestLeaderboardEndpoints:
    """Test the leaderboard routes."""

    def test_rankings(self, client):
        for user_id in ("user-1", "user-2"):
            question = next_question(client, user_id=user_id)
            submit(client, question, user_id=user_id, answer="right" if user_id == "user-1" else "nope")

        scores = client.get("/v1/leaderboard/score", params={"limit": 5}).json()
        streaks = client.get("/v1/leaderboard/streak").json()

        assert scores[0] == {"rank": 1, "userId": "user-1", "value": 30}
        assert scores[1]["userId"] == "user-2"
        assert streaks[0]["userId"] == "user-1"

    def test_limit_bounds(self, client):
        assert client.get("/v1/leaderboard/score", params={"limit": 0}).status_code == 422
        assert client.get("/v1/leaderboard/score", params={"limit": 101}).status_code == 422

    def test_empty_leaderboard(self, client):
        response = client.get("/v1/leaderboard/streak")

        assert response.status_code == 200
        assert response.json() == []


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "database": True, "cache": "memory"}

    def test_unknown_route(self, client):
        response = client.get("/v1/nowhere")

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    def test_error_bodies_are_documented(self, client):
        schema = client.get("/openapi.json").json()

        answer_responses = schema["paths"]["/v1/quiz/answer"]["post"]["responses"]
        assert {"404", "409", "410", "422"} <= set(answer_responses)
        assert answer_responses["409"]["content"]["application/json"]["schema"]["$ref"].endswith("/ErrorResponse")
        assert "503" in schema["paths"]["/v1/quiz/next"]["get"]["responses"]


class TestLoggingSettings:
    def test_logger_follows_settings(self, tmp_path, monkeypatch):
        for name in ("LOG_LEVEL", "LOG_JSON", "LOG_FILE"):
            monkeypatch.delenv(name, raising=False)
        log_file = tmp_path / "logs" / "brainbolt.log"
        settings = load_settings(
            DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'api.db'}",
            LOG_LEVEL="DEBUG",
            LOG_JSON=True,
            LOG_FILE=str(log_file),
        )
        try:
            create_app(settings, catalog=make_catalog())

            root = logging.getLogger(ROOT_LOGGER_NAME)
            assert root.level == logging.DEBUG
            assert all(isinstance(handler.formatter, JsonFormatter) for handler in root.handlers)
            assert any(isinstance(handler, logging.FileHandler) for handler in root.handlers)
            assert log_file.parent.is_dir()
        finally:
            for handler in logging.getLogger(ROOT_LOGGER_NAME).handlers:
                handler.close()
            configure_logger()
