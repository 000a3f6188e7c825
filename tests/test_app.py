"""
API tests against an in-memory catalog and store.
"""
import time
from concurrent.futures import ThreadPoolExecutor

import pytest
from fastapi.testclient import TestClient

from mystery_movie import app as app_module
from mystery_movie.catalog import StaticCatalog
from mystery_movie.config import Settings
from mystery_movie.session import MAX_ATTEMPTS
from mystery_movie.storage import MemoryStore


@pytest.fixture
def client(movies):
    app_module.configure(StaticCatalog(movies), MemoryStore())
    yield TestClient(app_module.app)
    app_module.configure(None, None)


def _mystery_id(token, mode="daily", seed=""):
    return app_module._open_session(token, mode, seed or None).mystery_movie.id


def test_today_issues_token(client):
    data = client.get("/api/today").json()
    assert data["ok"] is True
    assert data["token"]
    assert data["mode"] == "daily"
    assert data["gameState"] == "playing"
    assert data["maxAttempts"] == MAX_ATTEMPTS
    assert "mystery" not in data


def test_guess_flow_and_resume(client, movies):
    token = client.get("/api/today").json()["token"]
    mystery = _mystery_id(token)
    wrong = next(m.id for m in movies if m.id != mystery)

    data = client.post("/api/guess", json={"token": token, "movie_id": wrong}).json()
    assert data["ok"] is True
    assert data["correct"] is False
    assert data["attempts"] == 1
    assert data["entry"]["movie"]["id"] == wrong

    resumed = client.get("/api/today", params={"token": token}).json()
    assert resumed["attempts"] == 1

    data = client.post("/api/guess", json={"token": token, "movie_id": mystery}).json()
    assert data["correct"] is True
    assert data["gameState"] == "won"
    assert data["mystery"]["id"] == mystery

    data = client.post("/api/guess", json={"token": token, "movie_id": wrong}).json()
    assert data["ok"] is False
    assert data["attempts"] == 2


def test_unknown_movie_is_degraded(client):
    token = client.get("/api/today").json()["token"]
    data = client.post(
        "/api/guess",
        json={"token": token, "movie_id": 424242, "title": "Not Here", "release_date": "1999-03-31"},
    ).json()
    assert data["ok"] is True
    movie = data["entry"]["movie"]
    assert movie["title"] == "Not Here"
    assert movie["cast"] == [] and movie["genres"] == [] and movie["runtime"] is None
    assert data["entry"]["feedback"]["year"]["value"] == 1999


def test_random_game(client):
    token = client.get("/api/today").json()["token"]
    data = client.post("/api/random", json={"token": token}).json()
    assert data["ok"] is True
    assert data["mode"] == "random"
    seed = data["seed"]
    assert data["sessionKey"] == f"random-{seed}"

    state = client.get("/api/session", params={"token": token, "mode": "random", "seed": seed}).json()
    assert state["ok"] is True
    assert state["sessionKey"] == data["sessionKey"]


def test_session_errors(client):
    assert client.get("/api/session").json()["ok"] is False
    assert client.get("/api/session", params={"token": "t", "mode": "weekly"}).json()["ok"] is False
    assert client.get("/api/session", params={"token": "t", "mode": "random"}).json()["ok"] is False
    assert client.post("/api/guess", json={"movie_id": 1}).json()["ok"] is False


def test_empty_catalog_is_reported(client):
    app_module.configure(StaticCatalog([]), MemoryStore())
    data = client.get("/api/today").json()
    assert data["ok"] is False
    assert "empty catalog" in data["error"]


def test_search(client):
    data = client.get("/api/search", params={"query": "movie 1"}).json()
    assert data["ok"] is True
    assert {r["id"] for r in data["results"]} == {1, 10}


def test_backends_are_built_once_under_concurrent_first_requests(tmp_path, monkeypatch):
    settings = Settings(
        tmdb_api_key="",
        tmdb_language="fr-FR",
        data_dir=tmp_path,
        movie_bank_path=tmp_path / "movie_bank.json",
        session_store="memory",
        session_db_path=tmp_path / "sessions.duckdb",
        session_json_path=tmp_path / "sessions.json",
    )
    calls = []

    def slow_settings():
        calls.append(1)
        time.sleep(0.05)
        return settings

    monkeypatch.setattr(app_module, "load_settings", slow_settings)
    app_module.configure(None, None)
    try:
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda _: app_module._backends(), range(8)))
    finally:
        app_module.configure(None, None)

    assert len(calls) == 1
    assert len({id(store) for _, store in results}) == 1
