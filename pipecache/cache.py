"""Persisted entry records for pipecache backed by SQLite."""

from __future__ import annotations

import json
import sqlite3
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from threading import Lock
from typing import Any, Mapping, Protocol

CACHE_DIRNAME = ".pipecache"
CACHE_DIR: Path | None = None
_CACHE_DIR_OVERRIDE: ContextVar[Path | None] = ContextVar(
    "pipecache_cache_dir_override",
    default=None,
)
CACHE_VERSION = 1
DB_FILENAME = "cache.db"


class EntryStore(Protocol):
    def get(self, key: str) -> dict[str, Any] | None: ...

    def set(self, key: str, record: Mapping[str, Any]) -> None: ...

    def delete(self, key: str) -> bool: ...


def _resolve_cache_dir(root: Path | str) -> Path:
    override = _CACHE_DIR_OVERRIDE.get()
    if override is not None:
        return override
    if CACHE_DIR is not None:
        return CACHE_DIR
    return Path(root) / CACHE_DIRNAME


@contextmanager
def cache_dir_context(path: Path | str | None):
    """Temporarily override the cache directory for the current context."""

    if path is None:
        yield
        return
    dir_path = Path(path).expanduser().resolve()
    if dir_path.exists() and not dir_path.is_dir():
        raise NotADirectoryError(f"Path is not a directory: {dir_path}")
    token = _CACHE_DIR_OVERRIDE.set(dir_path)
    try:
        yield
    finally:
        _CACHE_DIR_OVERRIDE.reset(token)


def set_cache_dir(path: Path | str | None) -> None:
    global CACHE_DIR
    if path is None:
        CACHE_DIR = None
        return
    dir_path = Path(path).expanduser().resolve()
    if dir_path.exists() and not dir_path.is_dir():
        raise NotADirectoryError(f"Path is not a directory: {dir_path}")
    CACHE_DIR = dir_path


def cache_db_path(root: Path | str) -> Path:
    """Return the SQLite database used for *root*.

    Without an override the cache lives inside the project root, so it moves
    with the checkout.
    """

    cache_dir = _resolve_cache_dir(root)
    cache_dir.mkdir(parents=True, exist_ok=True)
    return cache_dir / DB_FILENAME


def _connect(db_path: Path) -> sqlite3.Connection:
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    try:
        conn.execute("PRAGMA journal_mode = WAL;")
    except sqlite3.OperationalError as exc:
        if "readonly" not in str(exc).lower():
            raise
    conn.execute("PRAGMA synchronous = NORMAL;")
    conn.execute("PRAGMA busy_timeout = 5000;")
    return conn


def _ensure_schema(conn: sqlite3.Connection) -> None:
    conn.executescript(
        """
        CREATE TABLE IF NOT EXISTS entry_record (
            cache_key TEXT PRIMARY KEY,
            entry_class TEXT NOT NULL DEFAULT '',
            record TEXT NOT NULL,
            version INTEGER NOT NULL,
            updated_at TEXT NOT NULL
        );
        """
    )


def _load_record(payload: str | None) -> dict[str, Any] | None:
    if not payload:
        return None
    try:
        record = json.loads(payload)
    except json.JSONDecodeError:
        return None
    if not isinstance(record, dict):
        return None
    return record


class SQLiteStore:
    """Entry records keyed by logical path in a single SQLite file."""

    def __init__(self, db_path: Path | str) -> None:
        self.db_path = Path(db_path)

    def _open(self) -> sqlite3.Connection:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = _connect(self.db_path)
        _ensure_schema(conn)
        return conn

    def get(self, key: str) -> dict[str, Any] | None:
        if not self.db_path.exists():
            return None
        conn = self._open()
        try:
            row = conn.execute(
                "SELECT record, version FROM entry_record WHERE cache_key = ?",
                (key,),
            ).fetchone()
        finally:
            conn.close()
        if row is None or row["version"] != CACHE_VERSION:
            return None
        return _load_record(row["record"])

    def set(self, key: str, record: Mapping[str, Any]) -> None:
        payload = json.dumps(dict(record), ensure_ascii=False)
        generated_at = datetime.now(timezone.utc).isoformat()
        conn = self._open()
        try:
            with conn:
                conn.execute(
                    """
                    INSERT INTO entry_record (cache_key, entry_class, record, version, updated_at)
                    VALUES (?, ?, ?, ?, ?)
                    ON CONFLICT(cache_key) DO UPDATE SET
                        entry_class = excluded.entry_class,
                        record = excluded.record,
                        version = excluded.version,
                        updated_at = excluded.updated_at
                    """,
                    (key, str(record.get("class") or ""), payload, CACHE_VERSION, generated_at),
                )
        finally:
            conn.close()

    def delete(self, key: str) -> bool:
        if not self.db_path.exists():
            return False
        conn = self._open()
        try:
            with conn:
                cursor = conn.execute("DELETE FROM entry_record WHERE cache_key = ?", (key,))
            return cursor.rowcount > 0
        finally:
            conn.close()

    def entries(self) -> list[dict[str, object]]:
        """Return metadata for every stored record, most recent first."""

        if not self.db_path.exists():
            return []
        conn = self._open()
        try:
            rows = conn.execute(
                """
                SELECT cache_key, entry_class, version, updated_at, LENGTH(record) AS size
                FROM entry_record
                ORDER BY updated_at DESC, cache_key
                """
            ).fetchall()
        finally:
            conn.close()
        return [
            {
                "key": row["cache_key"],
                "class": row["entry_class"],
                "version": row["version"],
                "updated_at": row["updated_at"],
                "size": int(row["size"] or 0),
            }
            for row in rows
        ]

    def clear(self) -> int:
        if not self.db_path.exists():
            return 0
        conn = self._open()
        try:
            with conn:
                cursor = conn.execute("DELETE FROM entry_record")
            return cursor.rowcount
        finally:
            conn.close()


class MemoryStore:
    """In-process store that keeps records as JSON text, like the SQLite one."""

    def __init__(self) -> None:
        self._records: dict[str, str] = {}
        self._lock = Lock()

    def get(self, key: str) -> dict[str, Any] | None:
        with self._lock:
            payload = self._records.get(key)
        return _load_record(payload)

    def set(self, key: str, record: Mapping[str, Any]) -> None:
        payload = json.dumps(dict(record), ensure_ascii=False)
        with self._lock:
            self._records[key] = payload

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._records.pop(key, None) is not None

    def keys(self) -> list[str]:
        with self._lock:
            return sorted(self._records)


def list_cache_entries(root: Path | str) -> list[dict[str, object]]:
    """Return metadata for every record cached for *root*."""

    return SQLiteStore(cache_db_path(root)).entries()


def clear_cache(root: Path | str) -> int:
    """Remove every record cached for *root*, returning how many were removed."""

    return SQLiteStore(cache_db_path(root)).clear()
