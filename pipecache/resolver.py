"""Collaborator interfaces the dependency core is written against."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, Sequence

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .entries import Entry, RawFile


@dataclass(frozen=True, slots=True)
class FileStat:
    mtime: datetime
    size: int


@dataclass(frozen=True, slots=True)
class Evaluation:
    """What the compilation engine reports for one source file.

    ``required_paths`` must be bundled before the file, in order.
    ``dependency_paths`` gate freshness and may name plain files or
    directories; ``dependency_assets`` are dependencies that are themselves
    compiled artifacts.
    """

    text: str
    required_paths: Sequence[str] = ()
    dependency_paths: Sequence[str] = ()
    dependency_assets: Sequence[str] = ()


class Resolver(Protocol):
    root: str

    def stat(self, path: Path | str) -> FileStat | None: ...

    def digest(self, path: Path | str) -> str: ...

    def find_entry(self, path: Path | str, bundle: bool = False) -> "Entry | None": ...

    def find_raw_dependency(self, path: Path | str) -> "RawFile | None": ...


class CompilationEngine(Protocol):
    def evaluate(self, path: Path) -> Evaluation: ...
