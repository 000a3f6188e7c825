"""
Build the candidate movie bank from TMDB's discover endpoint and save it shuffled.
Run once (or to refresh the pool): python -m mystery_movie.bank
Needs TMDB_API_KEY. Changing the bank changes which movie each day maps to.
"""
from __future__ import annotations

import json
import random
import time
from pathlib import Path

import requests

from .catalog import REQUEST_TIMEOUT, TMDB_BASE_URL
from .config import load_settings

MIN_VOTE_COUNT = 1500
MIN_VOTE_AVERAGE = 6.0
TOTAL_PAGES = 70
# Delay between requests to stay under TMDB rate limits (seconds)
REQUEST_DELAY = 0.1


def fetch_page(session: requests.Session, api_key: str, page: int) -> list[int]:
    """One page of well-rated, well-known movies. Returns their ids."""
    params = {
        "api_key": api_key,
        "sort_by": "vote_average.desc",
        "vote_count.gte": str(MIN_VOTE_COUNT),
        "vote_average.gte": str(MIN_VOTE_AVERAGE),
        "include_adult": "false",
        "page": str(page),
    }
    resp = session.get(f"{TMDB_BASE_URL}/discover/movie", params=params, timeout=REQUEST_TIMEOUT)
    resp.raise_for_status()
    return [int(m["id"]) for m in resp.json().get("results") or [] if m.get("id")]


def build_bank(
    api_key: str,
    *,
    pages: int = TOTAL_PAGES,
    session: requests.Session | None = None,
    rng: random.Random | None = None,
) -> list[int]:
    """Collect unique ids across `pages` discover pages, then shuffle them."""
    session = session or requests.Session()
    ids: dict[int, None] = {}
    for page in range(1, pages + 1):
        for movie_id in fetch_page(session, api_key, page):
            ids.setdefault(movie_id, None)
        print(f"  Fetched page {page}/{pages}")
        if page < pages:
            time.sleep(REQUEST_DELAY)
    bank = list(ids)
    (rng or random.Random()).shuffle(bank)
    return bank


def save_bank(bank: list[int], path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(bank, f, indent=2)


def main() -> None:
    settings = load_settings()
    if not settings.tmdb_api_key:
        raise SystemExit("Missing TMDB_API_KEY in environment.")
    print("Discovering movies...")
    bank = build_bank(settings.tmdb_api_key)
    save_bank(bank, settings.movie_bank_path)
    print(f"Saved {len(bank)} movies to {settings.movie_bank_path}")


if __name__ == "__main__":
    main()
