"""Shared helpers for inspecting cached entries."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from ..cache import EntryStore
from ..config import Config, resolve_root
from ..entries import CompiledArtifact
from ..environment import Environment
from ..freshness import dependency_fresh, is_fresh


@dataclass(frozen=True, slots=True)
class DependencyStatus:
    logical_path: str
    path: Path | None
    kind: str
    fresh: bool


@dataclass(slots=True)
class FreshnessReport:
    logical_path: str
    cached: bool
    fresh: bool
    dependencies: list[DependencyStatus] = field(default_factory=list)


def build_environment(config: Config, *, store: EntryStore | None = None) -> Environment:
    """Create an Environment rooted where *config* says."""

    return Environment(
        resolve_root(config),
        config.load_paths,
        store=store,
        digest_algorithm=config.digest_algorithm,
    )


def check_asset(env: Environment, logical_path: str) -> FreshnessReport:
    """Report whether the stored artifact for *logical_path* can be reused.

    The artifact itself is never rebuilt here, though decoding may refresh
    the artifacts it requires.
    """

    artifact = env.load_cached(logical_path)
    if artifact is None:
        return FreshnessReport(logical_path=logical_path, cached=False, fresh=False)
    return FreshnessReport(
        logical_path=logical_path,
        cached=True,
        fresh=is_fresh(artifact, env),
        dependencies=[
            _dependency_status(artifact, dep, env) for dep in artifact.freshness_deps
        ],
    )


def _dependency_status(artifact: CompiledArtifact, dep, env: Environment) -> DependencyStatus:
    if dep is None:
        return DependencyStatus(logical_path="(unresolved)", path=None, kind="", fresh=False)
    return DependencyStatus(
        logical_path=dep.logical_path,
        path=dep.path,
        kind=dep.kind.value,
        fresh=dependency_fresh(artifact, dep, env),
    )
