"""Tests for the game routes and live sessions."""

from datetime import datetime, timedelta, timezone

import httpx
import pytest
from fastapi.testclient import TestClient

from sparkskool.games.sessions import GameSessionStore, reset_session_store
from sparkskool.web.api import create_app
from sparkskool.web.dependencies import (
    get_game_sessions,
    get_http_client,
    get_llm_client,
    get_slide_generator,
)


@pytest.fixture
def client(mock_llm):
    reset_session_store()
    app = create_app()
    app.dependency_overrides[get_llm_client] = lambda: mock_llm
    app.dependency_overrides[get_http_client] = lambda: httpx.Client(
        transport=httpx.MockTransport(lambda request: httpx.Response(503))
    )
    yield TestClient(app)
    reset_session_store()


class TestGenerators:
    def test_word_search_seeded(self, client):
        body = {"words": ["magma", "lava"], "size": 10, "seed": 4}

        first = client.post("/api/games/word-search", json=body).json()
        second = client.post("/api/games/word-search", json=body).json()

        assert first["grid"] == second["grid"]
        assert len(first["grid"]) == 10

    def test_word_search_size_bounds(self, client):
        response = client.post("/api/games/word-search", json={"words": ["a"], "size": 40})
        assert response.status_code == 422

    def test_crossword_includes_answers(self, client):
        response = client.post(
            "/api/games/crossword",
            json={"clues": [{"question": "Molten rock", "answer": "lava"}], "seed": 1},
        )

        assert response.json()["clues"][0]["answer"] == "LAVA"

    def test_memory_reveals_cards(self, client):
        response = client.post(
            "/api/games/memory",
            json={"pairs": [{"question": "2 + 2", "answer": "4"}], "seed": 1},
        )

        contents = sorted(card["content"] for card in response.json()["cards"])
        assert contents == ["2 + 2", "4"]

    def test_word_scramble(self, client):
        response = client.post(
            "/api/games/word-scramble",
            json={"words": [{"word": "volcano", "hint": "mountain"}], "seed": 2},
        )

        word = response.json()["words"][0]
        assert word["original"] == "VOLCANO"
        assert word["hint"] == "mountain"

    def test_matching(self, client):
        response = client.post(
            "/api/games/matching",
            json={"pairs": [{"term": "Magma", "definition": "Molten rock"}], "difficulty": "hard"},
        )

        assert response.json()["difficulty"] == "hard"
        assert {i["type"] for i in response.json()["items"]} == {"term", "definition"}

    def test_questions_from_llm_when_apis_fail(self, client, mock_llm):
        mock_llm.simple_json_array.return_value = [
            {"question": "Q?", "options": ["a", "b"], "correctAnswer": "a"}
        ]

        response = client.post(
            "/api/games/questions",
            json={"subject": "Science", "topic": "Plants", "count": 1},
        )

        assert response.json()["count"] == 1
        assert response.json()["questions"][0]["source"] == "llm"


class TestSessions:
    def test_create_join_and_info(self, client):
        created = client.put(
            "/api/games/join",
            json={"game_id": "g1", "game_type": "quiz", "teacher_id": "t1"},
        )
        assert created.status_code == 201
        code = created.json()["access_code"]

        joined = client.post("/api/games/join", json={"access_code": code, "student_name": "Ana"})
        assert joined.json() == {"game_id": "g1", "game_type": "quiz"}

        info = client.get("/api/games/join", params={"access_code": code}).json()
        assert [s["name"] for s in info["students"]] == ["Ana"]
        assert "teacher_id" not in info

    def test_unknown_code(self, client):
        joined = client.post("/api/games/join", json={"access_code": "ZZZZZZ", "student_name": "Ana"})
        info = client.get("/api/games/join", params={"access_code": "ZZZZZZ"})

        assert joined.status_code == 404
        assert info.status_code == 404

    def test_missing_fields(self, client):
        response = client.put("/api/games/join", json={"game_id": "g1"})
        assert response.status_code == 422

    def test_expired_code_is_gone(self):
        clock = _Clock()
        app = create_app()
        sessions = GameSessionStore(clock=clock)
        app.dependency_overrides[get_game_sessions] = lambda: sessions
        client = TestClient(app)

        code = client.put(
            "/api/games/join",
            json={"game_id": "g1", "game_type": "quiz", "teacher_id": "t1"},
        ).json()["access_code"]
        clock.now += timedelta(hours=25)

        info = client.get("/api/games/join", params={"access_code": code})
        assert info.status_code == 410
        assert client.get("/api/games/join", params={"access_code": code}).status_code == 404


class _Clock:
    def __init__(self):
        self.now = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now


class TestHttpClientLifetime:
    def test_dependency_closes_client(self):
        dependency = get_http_client()
        http = next(dependency)
        assert not http.is_closed

        with pytest.raises(StopIteration):
            next(dependency)

        assert http.is_closed

    def test_question_request_closes_its_client(self, mock_llm, recorded_http_clients):
        mock_llm.simple_json_array.return_value = [
            {"question": "Q?", "options": ["a", "b"], "correctAnswer": "a"}
        ]
        app = create_app()
        app.dependency_overrides[get_llm_client] = lambda: mock_llm
        client = TestClient(app)

        response = client.post(
            "/api/games/questions",
            json={"subject": "Science", "topic": "Plants", "count": 1},
        )

        assert response.status_code == 200
        assert recorded_http_clients
        assert all(http.is_closed for http in recorded_http_clients)

    def test_slide_generator_dependency_closes_cache(self):
        dependency = get_slide_generator()
        generator = next(dependency)

        with pytest.raises(StopIteration):
            next(dependency)

        assert generator.cache.is_closed
