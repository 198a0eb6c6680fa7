"""Dependency graph entries: raw files and compiled artifacts."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Iterable, Union

from .records import FileRecord
from .utils import splice_digest


class EntryKind(str, Enum):
    RAW_FILE = "RawFile"
    COMPILED_ARTIFACT = "CompiledArtifact"


class _SelfReference:
    """Placeholder for an artifact inside its own closures before it exists."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "SELF"


SELF = _SelfReference()


@dataclass(frozen=True, slots=True, eq=False, repr=False)
class RawFile(FileRecord):
    """A plain file or directory tracked only for freshness."""

    kind: ClassVar[EntryKind] = EntryKind.RAW_FILE

    @property
    def required_artifacts(self) -> tuple["Entry", ...]:
        return ()

    @property
    def freshness_deps(self) -> tuple["Entry", ...]:
        return (self,)


@dataclass(frozen=True, slots=True, eq=False, repr=False)
class CompiledArtifact(FileRecord):
    """Compiled output of a source file plus its two dependency closures.

    ``required_artifacts`` lists every artifact that must be concatenated
    before this one, itself included, in bundling order. ``freshness_deps``
    lists every entry whose change invalidates this artifact; ``None`` marks a
    dependency that could not be resolved and is always stale. Either closure
    may be passed containing ``SELF``, which is bound to the new instance.
    """

    kind: ClassVar[EntryKind] = EntryKind.COMPILED_ARTIFACT

    compiled_output: str = ""
    required_artifacts: tuple["Entry", ...] = ()
    freshness_deps: tuple["Entry | None", ...] = ()
    content_type: str | None = None
    length: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "required_artifacts", self._bind(self.required_artifacts))
        object.__setattr__(self, "freshness_deps", self._bind(self.freshness_deps))

    def _bind(self, items: Iterable[object]) -> tuple:
        return tuple(self if item is SELF else item for item in items)

    def is_fresh(self, resolver) -> bool:
        from .freshness import is_fresh  # local import, freshness imports this module

        return is_fresh(self, resolver)

    @property
    def digest_path(self) -> str:
        """Logical path with the digest spliced in: ``foo/bar-<digest>.js``."""
        return splice_digest(self.logical_path, self.digest)

    def bundle(self) -> str:
        """Concatenate the compiled output of every required artifact."""
        return "".join(
            artifact.compiled_output
            for artifact in self.required_artifacts
            if isinstance(artifact, CompiledArtifact)
        )

    def __str__(self) -> str:
        return self.compiled_output


Entry = Union[RawFile, CompiledArtifact]


def entry_identity(entry: FileRecord) -> tuple[str, str]:
    """Value identity used when deduplicating closures."""
    return (entry.logical_path, str(entry.path))
