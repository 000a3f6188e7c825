"""
Key/value stores for session snapshots (serialized JSON text).
Keys look like "daily-2024-05-01" or "random-<seed>".
DuckDB is the default backend for the web service; the JSON file store mirrors data/today.json style files.
"""
from __future__ import annotations

import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Protocol

import duckdb

DATA_DIR = Path(__file__).resolve().parent.parent / "data"
DB_PATH = DATA_DIR / "sessions.duckdb"
JSON_PATH = DATA_DIR / "sessions.json"


class SnapshotStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryStore:
    """Dict-backed store (tests, single process)."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)


class JsonFileStore:
    """
    All snapshots in one JSON object on disk: {key: snapshot_text}.
    Writes are serialized with a lock and land through a temp file + os.replace; readers
    only ever see a complete file.
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or JSON_PATH
        self._lock = threading.Lock()

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError):
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".tmp_sessions", suffix=".json")
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp, self.path)
        except BaseException:
            try:
                os.remove(tmp)
            except OSError:
                pass
            raise

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            data = self._load()
            data[key] = value
            self._save(data)

    def remove(self, key: str) -> None:
        with self._lock:
            data = self._load()
            if key in data:
                del data[key]
                self._save(data)


def get_connection(path: Path | None = None) -> duckdb.DuckDBPyConnection:
    path = path or DB_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    return duckdb.connect(str(path))


def init_db(conn: duckdb.DuckDBPyConnection) -> None:
    conn.execute("""
        CREATE TABLE IF NOT EXISTS snapshots (
            session_key VARCHAR PRIMARY KEY,
            snapshot VARCHAR NOT NULL,
            updated_at TIMESTAMP DEFAULT current_timestamp
        )
    """)


class DuckDBStore:
    """Snapshots in a DuckDB table (one row per session key). Each call uses its own cursor, so
    the store can be shared by the web server's worker threads."""

    def __init__(self, conn: duckdb.DuckDBPyConnection | None = None, path: Path | None = None) -> None:
        self.conn = conn or get_connection(path)
        init_db(self.conn)

    def get(self, key: str) -> str | None:
        with self.conn.cursor() as cur:
            row = cur.execute("SELECT snapshot FROM snapshots WHERE session_key = ?", (key,)).fetchone()
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        with self.conn.cursor() as cur:
            cur.execute(
                """
                INSERT INTO snapshots (session_key, snapshot, updated_at) VALUES (?, ?, current_timestamp)
                ON CONFLICT (session_key) DO UPDATE SET snapshot = excluded.snapshot, updated_at = excluded.updated_at
                """,
                (key, value),
            )

    def remove(self, key: str) -> None:
        with self.conn.cursor() as cur:
            cur.execute("DELETE FROM snapshots WHERE session_key = ?", (key,))

    def close(self) -> None:
        self.conn.close()


class PrefixedStore:
    """Namespace another store's keys, e.g. per player token: "<token>:daily-2024-05-01"."""

    def __init__(self, inner: SnapshotStore, prefix: str) -> None:
        self.inner = inner
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}:{key}"

    def get(self, key: str) -> str | None:
        return self.inner.get(self._key(key))

    def set(self, key: str, value: str) -> None:
        self.inner.set(self._key(key), value)

    def remove(self, key: str) -> None:
        self.inner.remove(self._key(key))
