"""Decide whether a cached entry still matches the filesystem."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .entries import CompiledArtifact, RawFile
from .records import FileRecord

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .entries import Entry
    from .resolver import Resolver


def is_fresh(entry: "Entry | None", resolver: "Resolver") -> bool:
    """Return True when *entry* can be reused without recompiling.

    Compiled artifacts are fresh only if every freshness dependency is. The
    closure is already flattened at build time, so each dependency is checked
    on its own terms and the artifact's own path falls back to the plain
    record check.
    """
    if entry is None:
        return False
    if isinstance(entry, CompiledArtifact):
        return all(dependency_fresh(entry, dep, resolver) for dep in entry.freshness_deps)
    if isinstance(entry, RawFile):
        return FileRecord.is_fresh(entry, resolver)
    raise TypeError(f"Unsupported entry type: {type(entry).__name__}")


def is_stale(entry: "Entry | None", resolver: "Resolver") -> bool:
    return not is_fresh(entry, resolver)


def dependency_fresh(
    artifact: CompiledArtifact,
    dep: "Entry | None",
    resolver: "Resolver",
) -> bool:
    """Check one member of *artifact*'s freshness closure."""
    if dep is None:
        return False
    if dep.path == artifact.path:
        return FileRecord.is_fresh(artifact, resolver)
    return is_fresh(dep, resolver)
