"""
Runtime settings from environment variables (a .env at the repo root is loaded first).
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ROOT_DIR = Path(__file__).resolve().parent.parent
DEFAULT_DATA_DIR = ROOT_DIR / "data"

STORE_BACKENDS = ("duckdb", "json", "memory")


@dataclass(frozen=True)
class Settings:
    tmdb_api_key: str
    tmdb_language: str
    data_dir: Path
    movie_bank_path: Path
    session_store: str  # "duckdb" | "json" | "memory"
    session_db_path: Path
    session_json_path: Path


def load_settings(env_file: Path | None = None) -> Settings:
    load_dotenv(env_file or ROOT_DIR / ".env")
    data_dir = Path(os.environ.get("MYSTERY_DATA_DIR") or DEFAULT_DATA_DIR)
    store = (os.environ.get("SESSION_STORE") or "duckdb").strip().lower()
    if store not in STORE_BACKENDS:
        raise ValueError(f"SESSION_STORE must be one of {', '.join(STORE_BACKENDS)}, got {store!r}")
    return Settings(
        # NEXT_PUBLIC_ name is what the web front-end's .env uses
        tmdb_api_key=os.environ.get("TMDB_API_KEY") or os.environ.get("NEXT_PUBLIC_TMDB_API_KEY") or "",
        tmdb_language=os.environ.get("TMDB_LANGUAGE") or "fr-FR",
        data_dir=data_dir,
        movie_bank_path=Path(os.environ.get("MOVIE_BANK_PATH") or data_dir / "movie_bank.json"),
        session_store=store,
        session_db_path=Path(os.environ.get("SESSION_DB_PATH") or data_dir / "sessions.duckdb"),
        session_json_path=Path(os.environ.get("SESSION_JSON_PATH") or data_dir / "sessions.json"),
    )
