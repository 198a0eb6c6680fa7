"""Compile a source file and compute its dependency closures."""

from __future__ import annotations

import logging
import mimetypes
import os
import time
from pathlib import Path
from typing import TYPE_CHECKING, Iterable

from .entries import SELF, CompiledArtifact, entry_identity
from .records import FileRecord

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .entries import Entry
    from .resolver import CompilationEngine, Resolver

logger = logging.getLogger(__name__)


def build_artifact(
    resolver: "Resolver",
    engine: "CompilationEngine",
    logical_path: str,
    path: Path | str,
) -> CompiledArtifact:
    """Compile *path* once and return a fully linked artifact.

    Raises NotFound when *path* does not exist. Reported paths that the
    resolver cannot find are skipped.
    """
    source = Path(path)
    # Captured before compiling so an edit made mid-compile reads as stale.
    record = FileRecord.capture(resolver, source, logical_path)
    started = time.perf_counter()
    evaluation = engine.evaluate(source)

    own_path = str(source)
    required = _required_closure(
        resolver,
        own_path,
        list(evaluation.required_paths) + [own_path],
    )
    dependencies = _freshness_closure(
        resolver,
        own_path,
        evaluation.dependency_paths,
        list(evaluation.dependency_assets) + [own_path],
    )

    artifact = CompiledArtifact(
        path=record.path,
        logical_path=record.logical_path,
        mtime=record.mtime,
        digest=record.digest,
        compiled_output=evaluation.text,
        required_artifacts=tuple(required),
        freshness_deps=tuple(dependencies),
        content_type=mimetypes.guess_type(logical_path)[0],
        length=len(evaluation.text.encode("utf-8")),
    )

    elapsed_ms = int((time.perf_counter() - started) * 1000)
    logger.info("Compiled %s  (%dms)  (pid %d)", logical_path, elapsed_ms, os.getpid())
    return artifact


class _Closure:
    """Ordered, deduplicated entry list for one build call."""

    def __init__(self, own_path: str) -> None:
        self.own_path = own_path
        self.items: list[object] = []
        self._seen: set[tuple[str, str]] = set()
        self._has_self = False

    def is_own(self, path: Path | str) -> bool:
        return str(Path(path)) == self.own_path

    def add_self(self) -> None:
        if not self._has_self:
            self._has_self = True
            self.items.append(SELF)

    def add(self, entry: "Entry") -> None:
        # An older copy of this artifact reached through another entry
        # stands for the artifact itself.
        if self.is_own(entry.path):
            self.add_self()
            return
        key = entry_identity(entry)
        if key not in self._seen:
            self._seen.add(key)
            self.items.append(entry)


def _required_closure(
    resolver: "Resolver",
    own_path: str,
    paths: Iterable[str],
) -> list[object]:
    closure = _Closure(own_path)
    for path in paths:
        if closure.is_own(path):
            closure.add_self()
            continue
        artifact = resolver.find_entry(path, bundle=False)
        if artifact is None:
            continue
        for required in artifact.required_artifacts:
            closure.add(required)
    return closure.items


def _freshness_closure(
    resolver: "Resolver",
    own_path: str,
    dependency_paths: Iterable[str],
    dependency_assets: Iterable[str],
) -> list[object]:
    closure = _Closure(own_path)
    for path in dependency_paths:
        if closure.is_own(path):
            closure.add_self()
            continue
        dep = resolver.find_raw_dependency(path)
        if dep is not None:
            closure.add(dep)
    for path in dependency_assets:
        if closure.is_own(path):
            closure.add_self()
            continue
        artifact = resolver.find_entry(path, bundle=False)
        if artifact is None:
            continue
        for dep in artifact.freshness_deps:
            if dep is not None:
                closure.add(dep)
    return closure.items
