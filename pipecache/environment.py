"""Filesystem-backed resolver that caches compiled artifacts."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from threading import RLock
from typing import Sequence

from .builder import build_artifact
from .cache import EntryStore, SQLiteStore, cache_db_path
from .codec import encode_entry, try_decode
from .engine import DirectiveEngine
from .entries import CompiledArtifact, Entry, RawFile
from .errors import NotFound
from .freshness import is_fresh
from .resolver import CompilationEngine, FileStat
from .utils import file_digest, relative_posix, resolve_directory, timestamp_to_datetime

logger = logging.getLogger(__name__)


def _absolute(path: Path | str) -> Path:
    return Path(os.path.abspath(path))


class Environment:
    """Resolve logical paths under *root* and hand out cached artifacts.

    Lookups are serialized with one re-entrant lock, so a logical path is never
    rebuilt twice at the same time. A lookup that re-enters a path already being
    built (a dependency cycle) returns None.
    """

    def __init__(
        self,
        root: Path | str,
        load_paths: Sequence[str] = (".",),
        *,
        store: EntryStore | None = None,
        engine: CompilationEngine | None = None,
        digest_algorithm: str = "sha256",
    ) -> None:
        self.root = str(resolve_directory(root))
        self.load_paths = tuple(_absolute(Path(self.root) / item) for item in load_paths or (".",))
        self.digest_algorithm = digest_algorithm
        self.store = store if store is not None else SQLiteStore(cache_db_path(self.root))
        self.engine = engine if engine is not None else DirectiveEngine(self)
        self._entries: dict[str, Entry] = {}
        self._building: set[str] = set()
        self._lock = RLock()

    def stat(self, path: Path | str) -> FileStat | None:
        try:
            result = os.stat(path)
        except OSError:
            return None
        return FileStat(mtime=timestamp_to_datetime(result.st_mtime), size=result.st_size)

    def digest(self, path: Path | str) -> str:
        return file_digest(path, self.digest_algorithm)

    def resolve(self, logical_path: str) -> Path:
        """Return the first match for *logical_path* across the load paths."""
        for base in self.load_paths:
            candidate = _absolute(base / logical_path)
            if candidate.exists():
                return candidate
        raise NotFound(f"Couldn't find file '{logical_path}'")

    def resolve_relative(self, name: str, base_dir: Path) -> Path:
        candidate = _absolute(Path(base_dir) / name)
        if not candidate.exists():
            raise NotFound(f"Couldn't find file '{name}' relative to {base_dir}")
        return candidate

    def logical_path_for(self, path: Path | str) -> str | None:
        source = _absolute(path)
        for base in self.load_paths:
            relative = relative_posix(source, base)
            if relative and relative != ".":
                return relative
        return None

    def find_asset(self, logical_path: str) -> CompiledArtifact:
        path = self.resolve(logical_path)
        entry = self.find_entry(path, bundle=True)
        if not isinstance(entry, CompiledArtifact):
            raise NotFound(f"'{logical_path}' is not a compilable file")
        return entry

    def find_entry(self, path: Path | str, bundle: bool = False) -> Entry | None:
        # ``bundle`` only selects how callers render the result; the entry is
        # the same, see CompiledArtifact.bundle().
        source = _absolute(path)
        key = str(source)
        with self._lock:
            if key in self._building:
                logger.warning("Circular dependency on %s ignored", key)
                return None
            cached = self._entries.get(key)
            if cached is not None and is_fresh(cached, self):
                return cached
            if not source.is_file():
                return None
            logical_path = self.logical_path_for(source)
            if logical_path is None:
                return None

            self._building.add(key)
            try:
                entry = self._load(logical_path, source)
                if entry is None:
                    entry = build_artifact(self, self.engine, logical_path, source)
                    self.store.set(logical_path, encode_entry(entry, self.root))
            finally:
                self._building.discard(key)
            self._entries[key] = entry
            return entry

    def find_raw_dependency(self, path: Path | str) -> RawFile | None:
        source = _absolute(path)
        if self.stat(source) is None:
            return None
        logical_path = relative_posix(source, Path(self.root)) or str(source)
        try:
            return RawFile.capture(self, source, logical_path)
        except NotFound:
            return None

    def load_cached(self, logical_path: str) -> CompiledArtifact | None:
        """Return the stored artifact for *logical_path* without rebuilding it."""
        with self._lock:
            return self._load(logical_path, None, require_fresh=False)

    def expire(self, logical_path: str) -> bool:
        with self._lock:
            self._entries = {
                key: entry
                for key, entry in self._entries.items()
                if entry.logical_path != logical_path
            }
            return self.store.delete(logical_path)

    def _load(
        self,
        logical_path: str,
        source: Path | None,
        *,
        require_fresh: bool = True,
    ) -> CompiledArtifact | None:
        record = self.store.get(logical_path)
        if record is None:
            logger.debug("Cache miss for %s", logical_path)
            return None
        result = try_decode(record, self)
        entry = result.entry
        if not isinstance(entry, CompiledArtifact):
            return None
        if source is not None and entry.path != source:
            logger.debug("Cached %s points at %s, ignoring", logical_path, entry.path)
            return None
        if require_fresh and not is_fresh(entry, self):
            logger.debug("Cached %s is stale", logical_path)
            return None
        return entry
