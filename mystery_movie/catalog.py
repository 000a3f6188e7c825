"""
Movie catalog providers: the candidate bank plus full movie details.
TmdbCatalog talks to The Movie Database; StaticCatalog serves records already in memory.
"""
from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol

import requests

from .errors import LookupFailed
from .models import CastMember, MovieRecord

logger = logging.getLogger(__name__)

TMDB_BASE_URL = "https://api.themoviedb.org/3"
REQUEST_TIMEOUT = 10  # seconds
SEARCH_LIMIT = 8


class MovieCatalogProvider(Protocol):
    def list_candidate_ids(self) -> list[int]: ...

    def fetch_details(self, movie_id: int) -> MovieRecord: ...


def load_movie_bank(path: Path) -> list[int]:
    """Ordered candidate ids from data/movie_bank.json (a JSON list of ints)."""
    if not path.exists():
        raise FileNotFoundError(f"Movie bank not found at {path}. Run: python -m mystery_movie.bank")
    with open(path, "r") as f:
        data = json.load(f)
    return [int(i) for i in data]


def degraded_record(movie_id: int, title: str = "", release_date: str | None = None) -> MovieRecord:
    """Stand-in when details cannot be fetched: no cast, no genres, unknown runtime."""
    return MovieRecord(id=movie_id, title=title, release_date=release_date or None, runtime=None)


def fetch_or_degraded(
    catalog: MovieCatalogProvider,
    movie_id: int,
    title: str = "",
    release_date: str | None = None,
) -> MovieRecord:
    try:
        return catalog.fetch_details(movie_id)
    except LookupFailed as e:
        logger.warning("%s; using degraded record", e)
        return degraded_record(movie_id, title, release_date)


def parse_tmdb_movie(data: dict) -> MovieRecord:
    """Convert a TMDB /movie/{id}?append_to_response=credits payload to a MovieRecord."""
    credits = data.get("credits") or {}
    cast = tuple(
        CastMember(
            id=int(c["id"]),
            name=c.get("name") or "",
            order=int(c.get("order") or 0),
            profile_path=c.get("profile_path"),
        )
        for c in credits.get("cast") or []
        if c.get("id")
    )
    director = next((c for c in credits.get("crew") or [] if c.get("job") == "Director"), None)
    director_id = director.get("id") if director else None
    return MovieRecord(
        id=int(data["id"]),
        title=data.get("title") or data.get("original_title") or "",
        release_date=data.get("release_date") or None,
        runtime=data.get("runtime") or None,
        original_language=data.get("original_language") or "",
        genres=tuple(g["name"] for g in data.get("genres") or [] if g.get("name")),
        cast=cast,
        director=(director.get("name") or None) if director else None,
        director_id=int(director_id) if director_id else None,
        director_profile_path=director.get("profile_path") if director else None,
        production_companies=tuple(c["name"] for c in data.get("production_companies") or [] if c.get("name")),
        production_countries=tuple(c["name"] for c in data.get("production_countries") or [] if c.get("name")),
        poster_path=data.get("poster_path"),
    )


class StaticCatalog:
    """Catalog over records already in memory. Ids keep the order they were given in."""

    def __init__(self, movies: Iterable[MovieRecord]) -> None:
        self.movies: dict[int, MovieRecord] = {}
        for movie in movies:
            self.movies[movie.id] = movie

    def list_candidate_ids(self) -> list[int]:
        return list(self.movies)

    def fetch_details(self, movie_id: int) -> MovieRecord:
        movie = self.movies.get(movie_id)
        if movie is None:
            raise LookupFailed(movie_id, "not in catalog")
        return movie

    def search(self, query: str) -> list[dict]:
        q = (query or "").strip().lower()
        if not q:
            return []
        return [_search_row(m.to_dict()) for m in self.movies.values() if q in m.title.lower()][:SEARCH_LIMIT]


def _search_row(item: dict) -> dict:
    return {
        "id": item.get("id"),
        "title": item.get("title") or "",
        "original_title": item.get("original_title"),
        "release_date": item.get("release_date"),
        "poster_path": item.get("poster_path"),
    }


class TmdbCatalog:
    """TMDB-backed catalog. The candidate bank comes from a local JSON file, details from the API."""

    def __init__(
        self,
        api_key: str,
        bank_path: Path,
        *,
        language: str = "fr-FR",
        session: requests.Session | None = None,
    ) -> None:
        self.api_key = api_key
        self.bank_path = bank_path
        self.language = language
        self.session = session or requests.Session()
        self._bank: list[int] | None = None

    def list_candidate_ids(self) -> list[int]:
        if self._bank is None:
            self._bank = load_movie_bank(self.bank_path)
        return list(self._bank)

    def _get(self, path: str, **params) -> dict:
        params = {"api_key": self.api_key, **params}
        resp = self.session.get(f"{TMDB_BASE_URL}{path}", params=params, timeout=REQUEST_TIMEOUT)
        resp.raise_for_status()
        return resp.json()

    def fetch_details(self, movie_id: int) -> MovieRecord:
        if not self.api_key:
            raise LookupFailed(movie_id, "TMDB_API_KEY is not set")
        try:
            data = self._get(f"/movie/{movie_id}", append_to_response="credits", language=self.language)
            return parse_tmdb_movie(data)
        except requests.RequestException as e:
            raise LookupFailed(movie_id, str(e)) from e
        except (ValueError, KeyError, TypeError) as e:
            raise LookupFailed(movie_id, f"bad payload: {e}") from e

    def search(self, query: str) -> list[dict]:
        """Title search in the configured language and in English, merged, first language wins."""
        q = (query or "").strip()
        if not q or not self.api_key:
            return []
        merged: dict[int, dict] = {}
        for language in dict.fromkeys([self.language, "en-US"]):
            try:
                data = self._get("/search/movie", query=q, language=language, include_adult="false")
            except (requests.RequestException, ValueError) as e:
                logger.warning("Search %r (%s) failed: %s", q, language, e)
                continue
            for item in data.get("results") or []:
                if item.get("id") and item["id"] not in merged:
                    merged[item["id"]] = _search_row(item)
        return list(merged.values())[:SEARCH_LIMIT]
