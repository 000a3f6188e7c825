import pytest

from mystery_movie.config import DEFAULT_DATA_DIR, load_settings

ENV_VARS = (
    "TMDB_API_KEY",
    "NEXT_PUBLIC_TMDB_API_KEY",
    "TMDB_LANGUAGE",
    "MYSTERY_DATA_DIR",
    "MOVIE_BANK_PATH",
    "SESSION_STORE",
    "SESSION_DB_PATH",
    "SESSION_JSON_PATH",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    # setenv first so that values loaded from .env files are undone after the test
    for name in ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


def test_defaults(tmp_path):
    settings = load_settings(tmp_path / ".env")
    assert settings.tmdb_api_key == ""
    assert settings.tmdb_language == "fr-FR"
    assert settings.data_dir == DEFAULT_DATA_DIR
    assert settings.movie_bank_path == DEFAULT_DATA_DIR / "movie_bank.json"
    assert settings.session_store == "duckdb"


def test_env_file_and_overrides(tmp_path, monkeypatch):
    env = tmp_path / ".env"
    env.write_text("NEXT_PUBLIC_TMDB_API_KEY=from-file\nSESSION_STORE=json\n")
    monkeypatch.setenv("MYSTERY_DATA_DIR", str(tmp_path / "data"))

    settings = load_settings(env)

    assert settings.tmdb_api_key == "from-file"
    assert settings.session_store == "json"
    assert settings.session_json_path == tmp_path / "data" / "sessions.json"


def test_bad_store_backend(tmp_path, monkeypatch):
    monkeypatch.setenv("SESSION_STORE", "redis")
    with pytest.raises(ValueError):
        load_settings(tmp_path / ".env")
