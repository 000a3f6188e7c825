"""
HTTP API for the mystery movie game.
Run: uvicorn mystery_movie.app:app --reload --host 0.0.0.0
Players are identified by an opaque token (issued by /api/today when missing); each
token gets its own namespace in the snapshot store.
"""
from __future__ import annotations

import secrets
import threading

from fastapi import FastAPI
from pydantic import BaseModel

from .catalog import MovieCatalogProvider, TmdbCatalog, fetch_or_degraded
from .config import load_settings
from .errors import EmptyCatalog
from .models import DAILY, GAME_MODES, RANDOM, WON
from .session import GameSession
from .storage import DuckDBStore, JsonFileStore, MemoryStore, PrefixedStore, SnapshotStore

app = FastAPI(title="Mystery Movie")

_CATALOG: MovieCatalogProvider | None = None
_STORE: SnapshotStore | None = None
# first requests arrive on several worker threads; only one of them builds the backends
_BACKENDS_LOCK = threading.Lock()


def configure(catalog: MovieCatalogProvider, store: SnapshotStore) -> None:
    """Swap the catalog and store (tests, alternative deployments)."""
    global _CATALOG, _STORE
    with _BACKENDS_LOCK:
        _CATALOG = catalog
        _STORE = store


def _backends() -> tuple[MovieCatalogProvider, SnapshotStore]:
    global _CATALOG, _STORE
    with _BACKENDS_LOCK:
        if _CATALOG is not None and _STORE is not None:
            return _CATALOG, _STORE
        settings = load_settings()
        if _CATALOG is None:
            _CATALOG = TmdbCatalog(settings.tmdb_api_key, settings.movie_bank_path, language=settings.tmdb_language)
        if _STORE is None:
            if settings.session_store == "memory":
                _STORE = MemoryStore()
            elif settings.session_store == "json":
                _STORE = JsonFileStore(settings.session_json_path)
            else:
                _STORE = DuckDBStore(path=settings.session_db_path)
        return _CATALOG, _STORE


def _open_session(token: str, mode: str = DAILY, seed: str | None = None) -> GameSession:
    catalog, store = _backends()
    return GameSession(catalog, PrefixedStore(store, token), mode=mode, seed=seed or None)


def _error(message: str) -> dict:
    return {"ok": False, "error": message}


def _session_or_error(token: str, mode: str, seed: str | None) -> GameSession | dict:
    if mode not in GAME_MODES:
        return _error(f"Unknown mode: {mode}")
    if mode == RANDOM and not seed:
        return _error("Random games need a seed.")
    try:
        return _open_session(token, mode, seed)
    except FileNotFoundError as e:
        return _error(str(e))  # e.g. movie bank not built
    except EmptyCatalog as e:
        return _error(str(e))


@app.get("/api/today")
def api_today(token: str = ""):
    """Resume or start today's game. Issues a player token when none is given."""
    token = token.strip() or secrets.token_urlsafe(16)
    session = _session_or_error(token, DAILY, None)
    if isinstance(session, dict):
        return session
    return {"ok": True, "token": token, **session.to_public_dict()}


class RandomRequest(BaseModel):
    token: str = ""


@app.post("/api/random")
def api_random(body: RandomRequest):
    """Start a new random game (replay after the daily one). The seed identifies it."""
    token = body.token.strip() or secrets.token_urlsafe(16)
    try:
        catalog, store = _backends()
        session = GameSession(catalog, PrefixedStore(store, token), mode=RANDOM)
    except (FileNotFoundError, EmptyCatalog) as e:
        return _error(str(e))
    return {"ok": True, "token": token, **session.to_public_dict()}


@app.get("/api/session")
def api_session(token: str = "", mode: str = DAILY, seed: str = ""):
    """Current state of a game, without changing it."""
    if not token.strip():
        return _error("Missing token.")
    session = _session_or_error(token.strip(), mode, seed.strip() or None)
    if isinstance(session, dict):
        return session
    return {"ok": True, "token": token.strip(), **session.to_public_dict()}


class GuessRequest(BaseModel):
    token: str = ""
    movie_id: int
    title: str = ""
    release_date: str | None = None
    mode: str = DAILY
    seed: str = ""


@app.post("/api/guess")
def api_guess(body: GuessRequest):
    """Fetch the guessed movie's details (degraded record on failure) and submit it."""
    token = body.token.strip()
    if not token:
        return _error("Missing token.")
    session = _session_or_error(token, body.mode, body.seed.strip() or None)
    if isinstance(session, dict):
        return session
    catalog, _ = _backends()
    guess = fetch_or_degraded(catalog, body.movie_id, body.title, body.release_date)
    entry = session.submit_guess(guess)
    if entry is None:
        return {"ok": False, "error": "This game is over.", "token": token, **session.to_public_dict()}
    return {
        "ok": True,
        "token": token,
        "entry": entry.to_dict(),
        "correct": session.state == WON,
        **session.to_public_dict(),
    }


@app.get("/api/search")
def api_search(query: str = ""):
    """Title autocomplete."""
    catalog, _ = _backends()
    search = getattr(catalog, "search", None)
    if search is None:
        return {"ok": True, "results": []}
    return {"ok": True, "results": search(query)}
